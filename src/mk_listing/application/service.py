"""ListingApplicationService — read-only view of the listing store.

Listing creation, editing and moderation belong to the catalogue service;
this backend only reads listings and mutates their counters through orders.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.errors import ListingNotFoundError
from src.mk_listing.application.schemas import ListingResponse
from src.mk_listing.domain.repository import ListingRepositoryProtocol
from src.mk_listing.infrastructure.persistence import ListingRepository


class ListingApplicationService:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    async def get_listing(self, db: AsyncSession, listing_id: str) -> ListingResponse:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingResponse.from_domain(listing)
