"""InventoryLedger — moves listing quantity between "available" and "sold".

    reserve(q):  current -= q, sold += q      (fails if current < q)
    release(q):  current += m, sold -= m      where m = min(q, sold)
    adjust(d):   reserve(d) if d > 0, release(-d) if d < 0

current + sold == initial holds after every operation:
  - reserve is one conditional UPDATE (decrement iff current >= q), so two
    concurrent reservations on the same listing serialize on the row and the
    loser sees the post-update counters.
  - release locks the row (SELECT ... FOR UPDATE) before computing m, so an
    over-release (double cancel, deleting an item of a cancelled order) is
    clamped as a whole movement instead of pushing sold below zero.

All operations run inside the caller's transaction; nothing is committed here.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import (
    InsufficientStockError,
    InternalError,
    InvalidQuantityError,
    ListingNotFoundError,
)
from src.mk_inventory.domain.models import StockMovement
from src.mk_listing.domain.models import Listing
from src.mk_listing.domain.repository import ListingRepositoryProtocol
from src.mk_listing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


class InventoryLedger:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    async def reserve(self, db: AsyncSession, listing_id: str, quantity: int) -> Listing:
        if quantity < 1:
            raise InvalidQuantityError(quantity)
        listing = await self._repo.reserve(db, listing_id, quantity)
        if listing is not None:
            return listing

        # Guard missed: either the row is gone or there is not enough stock.
        current = await self._repo.get_by_id(db, listing_id)
        if current is None:
            raise ListingNotFoundError(listing_id)
        raise InsufficientStockError(current.name, quantity, current.current_quantity)

    async def release(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> StockMovement:
        if quantity < 1:
            raise InvalidQuantityError(quantity)
        listing = await self._repo.get_for_update(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)

        moved = min(quantity, listing.sold_quantity)
        if moved < quantity:
            logger.warning(
                "Over-release clamped: listing=%s requested=%d sold=%d",
                listing_id,
                quantity,
                listing.sold_quantity,
            )
        if moved == 0:
            return StockMovement(listing=listing, requested=-quantity, moved=0)

        updated = await self._repo.release(db, listing_id, moved)
        if updated is None:
            # Row is locked by this transaction; the guard cannot miss.
            raise InternalError(f"Release guard failed on locked listing {listing_id}")
        return StockMovement(listing=updated, requested=-quantity, moved=-moved)

    async def adjust(self, db: AsyncSession, listing_id: str, delta: int) -> StockMovement:
        if delta > 0:
            listing = await self.reserve(db, listing_id, delta)
            return StockMovement(listing=listing, requested=delta, moved=delta)
        if delta < 0:
            return await self.release(db, listing_id, -delta)

        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return StockMovement(listing=listing, requested=0, moved=0)
