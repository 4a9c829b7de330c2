# src/mk_listing/infrastructure/persistence.py
"""ListingRepository — raw SQL persistence implementation.

Quantity counters are only ever changed by guarded single-statement UPDATEs:
a result of 0 rows means the guard (existence, enough stock, enough sold
units) was not met and nothing was written.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.enums import ListingStatus
from src.mk_listing.domain.models import Listing

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

# Owner columns come from a LEFT JOIN so a listing whose owner account is
# gone still loads (seller snapshot falls back to placeholders).
_SELECT_COLUMNS = """
    l.id, l.name, l.description, l.price_cents, l.type,
    l.initial_quantity, l.current_quantity, l.sold_quantity, l.status,
    l.owner_id, l.phone_number, l.address, l.city, l.district, l.contact_preference,
    l.dimensions, l.width, l.height, l.depth,
    u.username AS owner_username, u.email AS owner_email,
    l.created_at, l.updated_at
"""

_GET_LISTING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings l
    LEFT JOIN users u ON u.id = l.owner_id
    WHERE l.id = :id
""")

_GET_LISTING_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM listings l
    LEFT JOIN users u ON u.id = l.owner_id
    WHERE l.id = :id
    FOR UPDATE OF l
""")

# Decrement iff current >= requested.
_RESERVE_SQL = text(f"""
    WITH l AS (
        UPDATE listings
        SET current_quantity = current_quantity - :quantity,
            sold_quantity    = sold_quantity    + :quantity,
            updated_at = NOW()
        WHERE id = :id AND current_quantity >= :quantity
        RETURNING *
    )
    SELECT {_SELECT_COLUMNS}
    FROM l
    LEFT JOIN users u ON u.id = l.owner_id
""")

# Increment iff sold >= released.
_RELEASE_SQL = text(f"""
    WITH l AS (
        UPDATE listings
        SET current_quantity = current_quantity + :quantity,
            sold_quantity    = sold_quantity    - :quantity,
            updated_at = NOW()
        WHERE id = :id AND sold_quantity >= :quantity
        RETURNING *
    )
    SELECT {_SELECT_COLUMNS}
    FROM l
    LEFT JOIN users u ON u.id = l.owner_id
""")

_SET_STATUS_SQL = text(f"""
    WITH l AS (
        UPDATE listings
        SET status = :status, updated_at = NOW()
        WHERE id = :id
        RETURNING *
    )
    SELECT {_SELECT_COLUMNS}
    FROM l
    LEFT JOIN users u ON u.id = l.owner_id
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_listing(row: Any) -> Listing:
    """Convert a DB result row to a Listing domain object."""
    return Listing(
        id=row.id,
        name=row.name,
        description=row.description,
        price_cents=row.price_cents,
        type=row.type,
        initial_quantity=row.initial_quantity,
        current_quantity=row.current_quantity,
        sold_quantity=row.sold_quantity,
        status=row.status,
        owner_id=str(row.owner_id) if row.owner_id is not None else None,
        phone_number=row.phone_number,
        address=row.address,
        city=row.city,
        district=row.district,
        contact_preference=row.contact_preference,
        dimensions=row.dimensions,
        width=row.width,
        height=row.height,
        depth=row.depth,
        owner_username=row.owner_username,
        owner_email=row.owner_email,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol using raw SQL."""

    async def _fetch_one(
        self, db: AsyncSession, stmt: Any, params: dict[str, Any]
    ) -> Listing | None:
        result = await db.execute(stmt, params)
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None:
        return await self._fetch_one(db, _GET_LISTING_SQL, {"id": listing_id})

    async def get_for_update(self, db: AsyncSession, listing_id: str) -> Listing | None:
        """Row-locked read; the lock is held until the caller's transaction ends."""
        return await self._fetch_one(db, _GET_LISTING_FOR_UPDATE_SQL, {"id": listing_id})

    async def reserve(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> Listing | None:
        return await self._fetch_one(
            db, _RESERVE_SQL, {"id": listing_id, "quantity": quantity}
        )

    async def release(
        self, db: AsyncSession, listing_id: str, quantity: int
    ) -> Listing | None:
        return await self._fetch_one(
            db, _RELEASE_SQL, {"id": listing_id, "quantity": quantity}
        )

    async def set_status(
        self, db: AsyncSession, listing_id: str, status: ListingStatus
    ) -> Listing | None:
        return await self._fetch_one(
            db, _SET_STATUS_SQL, {"id": listing_id, "status": status.value}
        )
