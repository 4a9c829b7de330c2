"""Tests for the Order aggregate: totals, item lookup, checklist merge."""

import pytest

from src.mk_common.enums import OrderStatus
from src.mk_common.errors import InvalidFieldError, OrderItemNotFoundError
from src.mk_order.domain.models import CustomerInfo, Order, StatusChecks
from src.mk_order.domain.snapshot import snapshot_item


def _customer() -> CustomerInfo:
    return CustomerInfo(
        name="Mona",
        phone_number="01100000000",
        address="5 Tahrir Sq",
        city="Cairo",
        district="Downtown",
    )


@pytest.fixture
def order(make_listing) -> Order:
    first = make_listing(id="L-1", price_cents=100_000)
    second = make_listing(id="L-2", price_cents=50_000)
    o = Order(
        id="CM00001",
        customer_info=_customer(),
        items=[snapshot_item(first, 2), snapshot_item(second, 1)],
        shipment_fee_cents=8_500,
    )
    o.recompute_totals()
    return o


class TestTotals:
    def test_total_and_platform_cut(self, order: Order) -> None:
        assert order.subtotal_cents == 250_000
        assert order.total_price_cents == 258_500
        assert order.cadre_profit_cents == 25_000

    def test_recompute_after_removal(self, order: Order) -> None:
        order.remove_item("L-1")
        order.recompute_totals()
        assert order.total_price_cents == 58_500
        assert order.cadre_profit_cents == 5_000

    def test_change_quantity_recomputes_profit(self, order: Order) -> None:
        item = order.find_item("L-2")
        item.change_quantity(3, 50_000)
        assert item.quantity == 3
        assert item.profit_cents == 135_000
        assert item.line_total_cents == 150_000


class TestItems:
    def test_find_missing_item_raises(self, order: Order) -> None:
        with pytest.raises(OrderItemNotFoundError):
            order.find_item("L-404")

    def test_remove_keeps_line_order(self, order: Order, make_listing) -> None:
        order.items.append(snapshot_item(make_listing(id="L-3"), 1))
        order.remove_item("L-2")
        assert [i.listing_id for i in order.items] == ["L-1", "L-3"]


class TestActive:
    @pytest.mark.parametrize(
        "status, active",
        [
            (OrderStatus.PLACED, True),
            (OrderStatus.OUT_FOR_DELIVERY, True),
            (OrderStatus.DELIVERED, False),
            (OrderStatus.CANCELLED, False),
        ],
    )
    def test_is_active(self, order: Order, status: OrderStatus, active: bool) -> None:
        order.status = status
        assert order.is_active is active


class TestStatusChecks:
    def test_defaults_all_false(self) -> None:
        assert StatusChecks().to_wire() == {
            "itemReceived": False,
            "itemVerified": False,
            "itemPacked": False,
            "readyForShipment": False,
        }

    def test_merge_applies_only_given_flags(self) -> None:
        checks = StatusChecks(item_received=True)
        merged = checks.merged({"itemPacked": True})
        assert merged.item_received is True
        assert merged.item_packed is True
        assert merged.item_verified is False

    def test_merge_returns_copy(self) -> None:
        checks = StatusChecks()
        checks.merged({"itemVerified": True})
        assert checks.item_verified is False

    def test_no_ordering_between_flags(self) -> None:
        merged = StatusChecks().merged({"readyForShipment": True})
        assert merged.ready_for_shipment is True

    def test_unknown_flag_rejected(self) -> None:
        with pytest.raises(InvalidFieldError) as exc_info:
            StatusChecks().merged({"itemPacked": True, "itemShipped": True})
        assert exc_info.value.fields == ["itemShipped"]
