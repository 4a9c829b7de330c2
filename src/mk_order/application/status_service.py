"""OrderStatusService — drives an order through the status machine.

Each item's listing side effect runs in its own SAVEPOINT. When one fails
with an AppError (listing deleted out-of-band, guard miss) only that
savepoint is rolled back; the item is reported in `skipped_items` and the
transition of the order itself still goes through. Database errors abort the
whole transition.

Listings are locked in listing-id order, the same order CreateOrder uses.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.enums import OrderStatus
from src.mk_common.errors import AppError, ListingNotFoundError, OrderNotFoundError
from src.mk_inventory.domain.ledger import InventoryLedger
from src.mk_listing.domain.repository import ListingRepositoryProtocol
from src.mk_listing.infrastructure.persistence import ListingRepository
from src.mk_order.application.schemas import OrderResponse, SetStatusResponse, SkippedItem
from src.mk_order.domain.models import OrderItem
from src.mk_order.domain.repository import OrderRepositoryProtocol
from src.mk_order.domain.state_machine import check_transition, listing_effect, parse_status
from src.mk_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderStatusService:
    def __init__(
        self,
        order_repo: OrderRepositoryProtocol | None = None,
        listing_repo: ListingRepositoryProtocol | None = None,
        ledger: InventoryLedger | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = order_repo or OrderRepository()
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._ledger = ledger or InventoryLedger(self._listings)

    async def set_status(
        self, db: AsyncSession, order_id: str, new_status: str
    ) -> SetStatusResponse:
        target = parse_status(new_status)
        skipped: list[SkippedItem] = []
        try:
            order = await self._orders.get_for_update(db, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            check_transition(order.id, order.status, target)

            for item in sorted(order.items, key=lambda i: i.listing_id):
                try:
                    async with db.begin_nested():
                        await self._apply_listing_effect(db, target, item)
                except AppError as exc:
                    reason = exc.message
                    logger.warning(
                        "Order %s -> %s: skipped listing %s (%s)",
                        order.id,
                        target.value,
                        item.listing_id,
                        reason,
                    )
                    skipped.append(SkippedItem(listing_id=item.listing_id, reason=reason))

            previous = order.status
            order.status = target
            await self._orders.update_header(db, order)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s: %s -> %s (%d skipped)",
            order.id,
            previous.value,
            target.value,
            len(skipped),
        )
        return SetStatusResponse(order=OrderResponse.from_domain(order), skipped_items=skipped)

    async def _apply_listing_effect(
        self, db: AsyncSession, target: OrderStatus, item: OrderItem
    ) -> None:
        listing = await self._listings.get_for_update(db, item.listing_id)
        if listing is None:
            raise ListingNotFoundError(item.listing_id)

        effect = listing_effect(target, listing, item.quantity)
        if effect.is_noop:
            return
        if effect.release_quantity:
            await self._ledger.release(db, listing.id, effect.release_quantity)
        if effect.new_status is not None:
            updated = await self._listings.set_status(db, listing.id, effect.new_status)
            if updated is None:
                raise ListingNotFoundError(listing.id)
