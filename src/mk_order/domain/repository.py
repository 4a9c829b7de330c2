# src/mk_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_order.domain.models import Order, OrderItem


class OrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: Order) -> None: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def update_header(self, db: AsyncSession, order: Order) -> None: ...

    async def update_item(self, db: AsyncSession, order_id: str, item: OrderItem) -> None: ...

    async def delete_item(self, db: AsyncSession, order_id: str, listing_id: str) -> None: ...

    async def delete(self, db: AsyncSession, order_id: str) -> bool: ...

    async def list_orders(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]: ...
