"""In-memory stand-ins for the listing/order stores and the DB session.

The fake repositories apply the same guards as the SQL ones (decrement iff
current >= requested, release iff sold >= released) and hand out copies, so a
service only changes stored state through the repository calls it makes.
FakeSession snapshots the store on commit and restores it on rollback or when
a begin_nested() block raises.
"""

import copy
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.mk_common.enums import ListingStatus
from src.mk_common.id_generator import OrderIdGenerator
from src.mk_inventory.domain.ledger import InventoryLedger
from src.mk_listing.domain.models import Listing
from src.mk_order.application.mutation_service import OrderMutationService
from src.mk_order.application.service import OrderApplicationService
from src.mk_order.application.status_service import OrderStatusService
from src.mk_order.domain.models import Order, OrderItem


@dataclass
class FakeStore:
    listings: dict[str, Listing] = field(default_factory=dict)
    orders: dict[str, Order] = field(default_factory=dict)

    def snapshot(self) -> tuple[dict[str, Listing], dict[str, Order]]:
        return copy.deepcopy(self.listings), copy.deepcopy(self.orders)

    def restore(self, state: tuple[dict[str, Listing], dict[str, Order]]) -> None:
        listings, orders = copy.deepcopy(state)
        self.listings.clear()
        self.listings.update(listings)
        self.orders.clear()
        self.orders.update(orders)


class FakeSession:
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.commits = 0
        self.rollbacks = 0
        self._committed = store.snapshot()

    async def commit(self) -> None:
        self.commits += 1
        self._committed = self.store.snapshot()

    async def rollback(self) -> None:
        self.rollbacks += 1
        self.store.restore(self._committed)

    @asynccontextmanager
    async def begin_nested(self) -> AsyncIterator[None]:
        savepoint = self.store.snapshot()
        try:
            yield
        except Exception:
            self.store.restore(savepoint)
            raise


class FakeListingRepository:
    def __init__(self) -> None:
        self.missing_on_set_status: set[str] = set()

    async def get_by_id(self, db: FakeSession, listing_id: str) -> Listing | None:
        listing = db.store.listings.get(listing_id)
        return copy.deepcopy(listing) if listing else None

    async def get_for_update(self, db: FakeSession, listing_id: str) -> Listing | None:
        return await self.get_by_id(db, listing_id)

    async def reserve(self, db: FakeSession, listing_id: str, quantity: int) -> Listing | None:
        listing = db.store.listings.get(listing_id)
        if listing is None or listing.current_quantity < quantity:
            return None
        listing.current_quantity -= quantity
        listing.sold_quantity += quantity
        return copy.deepcopy(listing)

    async def release(self, db: FakeSession, listing_id: str, quantity: int) -> Listing | None:
        listing = db.store.listings.get(listing_id)
        if listing is None or listing.sold_quantity < quantity:
            return None
        listing.current_quantity += quantity
        listing.sold_quantity -= quantity
        return copy.deepcopy(listing)

    async def set_status(
        self, db: FakeSession, listing_id: str, status: ListingStatus
    ) -> Listing | None:
        listing = db.store.listings.get(listing_id)
        if listing is None or listing_id in self.missing_on_set_status:
            return None
        listing.status = status.value
        return copy.deepcopy(listing)


class FakeOrderRepository:
    async def save(self, db: FakeSession, order: Order) -> None:
        db.store.orders[order.id] = copy.deepcopy(order)

    async def get_by_id(self, db: FakeSession, order_id: str) -> Order | None:
        order = db.store.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def get_for_update(self, db: FakeSession, order_id: str) -> Order | None:
        return await self.get_by_id(db, order_id)

    async def update_header(self, db: FakeSession, order: Order) -> None:
        stored = db.store.orders[order.id]
        stored.status = order.status
        stored.total_price_cents = order.total_price_cents
        stored.cadre_profit_cents = order.cadre_profit_cents

    async def update_item(self, db: FakeSession, order_id: str, item: OrderItem) -> None:
        stored = db.store.orders[order_id].find_item(item.listing_id)
        stored.quantity = item.quantity
        stored.profit_cents = item.profit_cents
        stored.status_checks = copy.deepcopy(item.status_checks)

    async def delete_item(self, db: FakeSession, order_id: str, listing_id: str) -> None:
        db.store.orders[order_id].remove_item(listing_id)

    async def delete(self, db: FakeSession, order_id: str) -> bool:
        return db.store.orders.pop(order_id, None) is not None

    async def list_orders(
        self,
        db: FakeSession,
        status: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        orders = sorted(
            db.store.orders.values(), key=lambda o: (o.created_at, o.id), reverse=True
        )
        if status is not None:
            orders = [o for o in orders if o.status.value == status]
        if cursor_ts is not None and cursor_id is not None:
            ts = datetime.fromisoformat(cursor_ts)
            orders = [o for o in orders if (o.created_at, o.id) < (ts, cursor_id)]
        return copy.deepcopy(orders[:limit])


class FakeSequence:
    def __init__(self, start: int = 0) -> None:
        self.values: dict[str, int] = {}
        self._start = start

    async def incr(self, name: str) -> int:
        self.values[name] = self.values.get(name, self._start) + 1
        return self.values[name]


_BASE_TIME = datetime(2026, 9, 1, 12, 0, tzinfo=UTC)


def build_listing(**kwargs: Any) -> Listing:
    initial = kwargs.pop("initial_quantity", 5)
    defaults: dict[str, Any] = dict(
        id="L-1",
        name="Sunset Over Giza",
        description="Acrylic on canvas",
        price_cents=100_000,
        type="Paintings & Drawings",
        initial_quantity=initial,
        current_quantity=initial,
        sold_quantity=0,
        status=ListingStatus.FOR_SALE.value,
        owner_id="8d7e0c1a-0000-4000-8000-000000000001",
        phone_number="01000000000",
        address="12 Nile St",
        city="Cairo",
        district="Zamalek",
        contact_preference="phone",
        dimensions="2D",
        width=60,
        height=40,
        owner_username="artist_one",
        owner_email="artist@example.com",
        created_at=_BASE_TIME,
        updated_at=_BASE_TIME,
    )
    defaults.update(kwargs)
    return Listing(**defaults)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def db(store: FakeStore) -> FakeSession:
    return FakeSession(store)


@pytest.fixture
def make_listing(store: FakeStore, db: FakeSession) -> Callable[..., Listing]:
    """Create a listing directly in the store (as already committed state)."""

    def _make(**kwargs: Any) -> Listing:
        listing = build_listing(**kwargs)
        store.listings[listing.id] = listing
        db._committed = store.snapshot()
        return listing

    return _make


@pytest.fixture
def listing_repo() -> FakeListingRepository:
    return FakeListingRepository()


@pytest.fixture
def order_repo() -> FakeOrderRepository:
    return FakeOrderRepository()


@pytest.fixture
def ledger(listing_repo: FakeListingRepository) -> InventoryLedger:
    return InventoryLedger(listing_repo)


@pytest.fixture
def sequence() -> FakeSequence:
    return FakeSequence()


@pytest.fixture
def order_service(
    order_repo: FakeOrderRepository,
    listing_repo: FakeListingRepository,
    ledger: InventoryLedger,
    sequence: FakeSequence,
    monkeypatch: pytest.MonkeyPatch,
) -> OrderApplicationService:
    # Distinct, increasing created_at per order so list ordering is deterministic
    ticks = iter(range(10_000))
    monkeypatch.setattr(
        "src.mk_order.application.service.utc_now",
        lambda: _BASE_TIME + timedelta(minutes=next(ticks)),
    )
    return OrderApplicationService(
        order_repo=order_repo,
        listing_repo=listing_repo,
        ledger=ledger,
        id_generator=OrderIdGenerator(sequence),
    )


@pytest.fixture
def status_service(
    order_repo: FakeOrderRepository,
    listing_repo: FakeListingRepository,
    ledger: InventoryLedger,
) -> OrderStatusService:
    return OrderStatusService(order_repo=order_repo, listing_repo=listing_repo, ledger=ledger)


@pytest.fixture
def mutation_service(
    order_repo: FakeOrderRepository,
    listing_repo: FakeListingRepository,
    ledger: InventoryLedger,
) -> OrderMutationService:
    return OrderMutationService(order_repo=order_repo, listing_repo=listing_repo, ledger=ledger)
