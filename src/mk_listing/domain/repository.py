# src/mk_listing/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Counter mutations return None when their guard matched no row; callers
decide whether that means "absent" or "not enough stock".
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.enums import ListingStatus
from src.mk_listing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def get_for_update(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def reserve(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> Listing | None: ...

    async def release(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> Listing | None: ...

    async def set_status(
        self, db: AsyncSession, listing_id: str, status: ListingStatus
    ) -> Listing | None: ...
