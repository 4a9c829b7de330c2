"""Integration-test fixtures.

Requires PostgreSQL and Redis with migrations applied (alembic upgrade head).

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.mk_common.database import async_session_factory
from src.mk_gateway.auth.jwt_handler import create_access_token

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings (id, name, description, price_cents, type,
        initial_quantity, current_quantity, sold_quantity, status,
        city, district, address, phone_number, contact_preference,
        dimensions, width, height)
    VALUES (:id, :name, 'Integration test listing', :price_cents, :type,
        :quantity, :quantity, 0, 'For Sale',
        'Cairo', 'Zamalek', '12 Nile St', '01000000000', 'phone',
        '2D', 50, 70)
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client with a staff Bearer token."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        token = create_access_token("integration-staff", role="staff")
        ac.headers.update({"Authorization": f"Bearer {token}"})
        yield ac


@pytest.fixture
def new_listing() -> Callable[..., Awaitable[str]]:
    """Insert a fresh For Sale listing and return its id."""

    async def _create(quantity: int = 5, price_cents: int = 100_000) -> str:
        listing_id = f"IT-{uuid.uuid4().hex[:12]}"
        async with async_session_factory() as session:
            await session.execute(
                _INSERT_LISTING_SQL,
                {
                    "id": listing_id,
                    "name": f"Listing {listing_id}",
                    "price_cents": price_cents,
                    "type": "Paintings & Drawings",
                    "quantity": quantity,
                },
            )
            await session.commit()
        return listing_id

    return _create
