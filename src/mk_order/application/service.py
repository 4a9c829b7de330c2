"""OrderApplicationService — order creation, reads and whole-order deletion.

Transaction ownership: every mutating method commits on success and rolls
back on any exception, so the order rows and the listing counters it
touched land (or vanish) together.

Creation flow:
  1. merge repeated listing ids into one line
  2. load each listing; absent listings drop their line (logged)
  3. pre-check stock for every surviving line, fail fast on the first shortfall
  4. reserve in ascending listing-id order (consistent row lock order)
  5. snapshot items in request order, compute totals, persist as 'placed'
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mk_common.datetime_utils import utc_now
from src.mk_common.errors import (
    EmptyOrderError,
    InsufficientStockError,
    InvalidFieldError,
    ListingNotFoundError,
    OrderNotFoundError,
)
from src.mk_common.id_generator import OrderIdGenerator
from src.mk_common.redis_client import get_redis
from src.mk_inventory.domain.ledger import InventoryLedger
from src.mk_listing.domain.models import Listing
from src.mk_listing.domain.repository import ListingRepositoryProtocol
from src.mk_listing.infrastructure.persistence import ListingRepository
from src.mk_order.application.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    DeleteOrderResponse,
    OrderListResponse,
    OrderResponse,
    cursor_decode,
    cursor_encode,
)
from src.mk_order.domain.models import Order
from src.mk_order.domain.repository import OrderRepositoryProtocol
from src.mk_order.domain.snapshot import merge_lines, snapshot_item
from src.mk_order.domain.state_machine import parse_status
from src.mk_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderApplicationService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        ledger: InventoryLedger | None = None,
        id_generator: OrderIdGenerator | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._ledger = ledger or InventoryLedger(self._listings)
        self._id_generator = id_generator

    async def _next_order_id(self) -> str:
        if self._id_generator is None:
            self._id_generator = OrderIdGenerator(await get_redis())
        return await self._id_generator.next_id()

    async def create_order(
        self, db: AsyncSession, req: CreateOrderRequest
    ) -> CreateOrderResponse:
        lines = merge_lines(
            [(line.listing_id, line.quantity, line.selected_size) for line in req.order_items]
        )
        try:
            listings: dict[str, Listing] = {}
            valid: list[tuple[str, int, str | None]] = []
            for listing_id, quantity, size in lines:
                listing = await self._listings.get_by_id(db, listing_id)
                if listing is None:
                    logger.warning("Dropping order line: listing %s not found", listing_id)
                    continue
                if listing.is_clothing and not size:
                    raise InvalidFieldError(["selectedSize"])
                if quantity > listing.current_quantity:
                    raise InsufficientStockError(
                        listing.name, quantity, listing.current_quantity
                    )
                listings[listing_id] = listing
                valid.append((listing_id, quantity, size))

            if not valid:
                raise EmptyOrderError()

            for listing_id, quantity, _ in sorted(valid, key=lambda line: line[0]):
                listings[listing_id] = await self._ledger.reserve(db, listing_id, quantity)

            now = utc_now()
            order = Order(
                id=await self._next_order_id(),
                customer_info=req.customer_info.to_domain(),
                items=[snapshot_item(listings[lid], qty, size) for lid, qty, size in valid],
                shipment_fee_cents=settings.SHIPMENT_FEE_CENTS,
                notes=req.notes,
                created_at=now,
                updated_at=now,
            )
            order.recompute_totals()
            await self._orders.save(db, order)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s placed: %d line(s), total=%d",
            order.id,
            len(order.items),
            order.total_price_cents,
        )
        return CreateOrderResponse(
            order_id=order.id,
            status=order.status.value,
            total_price_cents=order.total_price_cents,
        )

    async def get_order(self, db: AsyncSession, order_id: str) -> OrderResponse:
        order = await self._orders.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return OrderResponse.from_domain(order)

    async def list_orders(
        self,
        db: AsyncSession,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> OrderListResponse:
        sql_status = parse_status(status).value if status else None
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        orders = await self._orders.list_orders(db, sql_status, cursor_ts, cursor_id, limit + 1)
        has_more = len(orders) > limit
        page = orders[:limit]

        items = [OrderResponse.from_domain(o) for o in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return OrderListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def delete_order(self, db: AsyncSession, order_id: str) -> DeleteOrderResponse:
        """Remove an order; an active order first hands its reserved stock back."""
        try:
            order = await self._orders.get_for_update(db, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if order.is_active:
                for item in order.items:
                    try:
                        await self._ledger.release(db, item.listing_id, item.quantity)
                    except ListingNotFoundError:
                        logger.warning(
                            "Order %s delete: listing %s gone, nothing to release",
                            order_id,
                            item.listing_id,
                        )
            await self._orders.delete(db, order_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Order %s deleted (was %s)", order_id, order.status.value)
        return DeleteOrderResponse(order_id=order_id)
