"""OrderMutationService — post-creation edits to an order's line items.

Every edit locks the order row, reconciles the listing counters through the
InventoryLedger in the same transaction, recomputes the order totals and
persists. Items are addressed by the listing id they reference.

Quantity changes are refused once an order is delivered or cancelled; the
fulfilment checklist stays editable in every status.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import (
    InvalidQuantityError,
    ListingNotFoundError,
    OrderNotEditableError,
    OrderNotFoundError,
)
from src.mk_inventory.domain.ledger import InventoryLedger
from src.mk_listing.application.schemas import ListingStock
from src.mk_listing.domain.repository import ListingRepositoryProtocol
from src.mk_listing.infrastructure.persistence import ListingRepository
from src.mk_order.application.schemas import (
    DeleteItemResponse,
    OrderResponse,
    StatusChecksResponse,
    UpdateQuantityResponse,
)
from src.mk_order.domain.models import Order
from src.mk_order.domain.repository import OrderRepositoryProtocol
from src.mk_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderMutationService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        ledger: InventoryLedger | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._ledger = ledger or InventoryLedger(self._listings)

    async def _lock_order(self, db: AsyncSession, order_id: str) -> Order:
        order = await self._orders.get_for_update(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def delete_item(
        self, db: AsyncSession, order_id: str, item_id: str
    ) -> DeleteItemResponse:
        try:
            order = await self._lock_order(db, order_id)
            item = order.remove_item(item_id)

            # Delivered / cancelled orders no longer hold the stock
            if order.is_active:
                try:
                    await self._ledger.release(db, item.listing_id, item.quantity)
                except ListingNotFoundError:
                    logger.warning(
                        "Order %s: listing %s gone, deleting item without release",
                        order_id,
                        item.listing_id,
                    )

            order_deleted = not order.items
            if order_deleted:
                await self._orders.delete(db, order_id)
            else:
                order.recompute_totals()
                await self._orders.delete_item(db, order_id, item.listing_id)
                await self._orders.update_header(db, order)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if order_deleted:
            logger.info("Order %s deleted: last item %s removed", order_id, item_id)
            return DeleteItemResponse(order_deleted=True)
        return DeleteItemResponse(order_deleted=False, order=OrderResponse.from_domain(order))

    async def update_item_quantity(
        self, db: AsyncSession, order_id: str, item_id: str, new_quantity: int | None
    ) -> UpdateQuantityResponse:
        if new_quantity is None or new_quantity < 1:
            raise InvalidQuantityError(new_quantity)
        try:
            order = await self._lock_order(db, order_id)
            # Delivered / cancelled items hold no reservation to adjust
            if not order.is_active:
                raise OrderNotEditableError(order_id, order.status.value)
            item = order.find_item(item_id)
            movement = await self._ledger.adjust(
                db, item.listing_id, new_quantity - item.quantity
            )
            item.change_quantity(new_quantity, movement.listing.price_cents)
            order.recompute_totals()
            await self._orders.update_item(db, order_id, item)
            await self._orders.update_header(db, order)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return UpdateQuantityResponse(
            order=OrderResponse.from_domain(order),
            listing_stock=ListingStock.from_domain(movement.listing),
        )

    async def update_item_status_checks(
        self, db: AsyncSession, order_id: str, item_id: str, checks: dict[str, bool]
    ) -> StatusChecksResponse:
        try:
            order = await self._lock_order(db, order_id)
            item = order.find_item(item_id)
            item.status_checks = item.status_checks.merged(checks)
            await self._orders.update_item(db, order_id, item)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return StatusChecksResponse(
            order_id=order_id,
            item_id=item_id,
            status_checks=item.status_checks.to_wire(),
        )
