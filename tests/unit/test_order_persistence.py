# tests/unit/test_order_persistence.py
"""Unit tests for OrderRepository using MagicMock AsyncSession."""
import json
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mk_common.enums import OrderStatus
from src.mk_order.domain.models import (
    CustomerInfo,
    Order,
    OrderItem,
    SellerInfo,
    StatusChecks,
)
from src.mk_order.infrastructure import persistence
from src.mk_order.infrastructure.db_models import OrderItemORM, OrderORM
from src.mk_order.infrastructure.persistence import OrderRepository

_SELLER = {
    "username": "artist_one",
    "email": "artist@example.com",
    "phone_number": "01000000000",
    "city": "Cairo",
    "district": "Zamalek",
    "address": "12 Nile St",
    "contact_preference": "phone",
}
_CUSTOMER = {
    "name": "Mona",
    "phone_number": "01100000000",
    "address": "5 Tahrir Sq",
    "city": "Cairo",
    "district": "Downtown",
    "payment_method": "instapay",
}


def _make_order_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "CM00001")
    row.status = kwargs.get("status", "placed")
    row.customer_info = kwargs.get("customer_info", _CUSTOMER)
    row.notes = kwargs.get("notes")
    row.shipment_fee_cents = 8_500
    row.total_price_cents = 258_500
    row.cadre_profit_cents = 25_000
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _make_item_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.order_id = kwargs.get("order_id", "CM00001")
    row.listing_id = kwargs.get("listing_id", "L-1")
    row.line_no = kwargs.get("line_no", 1)
    row.name = "Sunset Over Giza"
    row.description = "Acrylic on canvas"
    row.price_cents = 100_000
    row.type = "Paintings & Drawings"
    row.seller_info = kwargs.get("seller_info", _SELLER)
    row.quantity = kwargs.get("quantity", 2)
    row.profit_cents = 180_000
    row.selected_size = None
    row.dimensions = "2D"
    row.width = 60
    row.height = 40
    row.depth = None
    row.item_received = kwargs.get("item_received", False)
    row.item_verified = False
    row.item_packed = False
    row.ready_for_shipment = False
    return row


def _make_order() -> Order:
    item = OrderItem(
        listing_id="L-1",
        name="Sunset Over Giza",
        description="Acrylic on canvas",
        price_cents=100_000,
        type="Paintings & Drawings",
        seller_info=SellerInfo(**_SELLER),
        quantity=2,
        profit_cents=180_000,
        status_checks=StatusChecks(item_packed=True),
    )
    order = Order(
        id="CM00001",
        customer_info=CustomerInfo(**_CUSTOMER),
        items=[item],
        shipment_fee_cents=8_500,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )
    order.recompute_totals()
    return order


def _fetchone(row: Any) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    return result


def _fetchall(rows: list[Any]) -> MagicMock:
    result = MagicMock()
    result.fetchall.return_value = rows
    return result


class TestSave:
    @pytest.mark.asyncio
    async def test_inserts_header_then_items(self) -> None:
        db = AsyncMock()
        await OrderRepository().save(db, _make_order())

        assert db.execute.await_count == 2
        header_params = db.execute.await_args_list[0].args[1]
        assert header_params["status"] == "placed"
        assert json.loads(header_params["customer_info"])["payment_method"] == "instapay"

        item_params = db.execute.await_args_list[1].args[1]
        assert isinstance(item_params, list)
        assert item_params[0]["line_no"] == 1
        assert item_params[0]["item_packed"] is True
        assert json.loads(item_params[0]["seller_info"])["username"] == "artist_one"


class TestLoad:
    @pytest.mark.asyncio
    async def test_get_by_id_assembles_items(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [
            _fetchone(_make_order_row()),
            _fetchall([_make_item_row(), _make_item_row(listing_id="L-2", line_no=2)]),
        ]

        order = await OrderRepository().get_by_id(db, "CM00001")

        assert order is not None
        assert order.status is OrderStatus.PLACED
        assert order.customer_info.payment_method == "instapay"
        assert [i.listing_id for i in order.items] == ["L-1", "L-2"]
        assert order.items[0].seller_info.city == "Cairo"

    @pytest.mark.asyncio
    async def test_json_columns_returned_as_text(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [
            _fetchone(_make_order_row(customer_info=json.dumps(_CUSTOMER))),
            _fetchall([_make_item_row(seller_info=json.dumps(_SELLER))]),
        ]

        order = await OrderRepository().get_by_id(db, "CM00001")

        assert order.customer_info.name == "Mona"
        assert order.items[0].seller_info.username == "artist_one"

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _fetchone(None)

        assert await OrderRepository().get_by_id(db, "CM99999") is None
        db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_for_update_locks_order_row(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_fetchone(_make_order_row()), _fetchall([])]

        await OrderRepository().get_for_update(db, "CM00001")

        assert "FOR UPDATE" in str(db.execute.await_args_list[0].args[0])


class TestWrites:
    @pytest.mark.asyncio
    async def test_update_item_writes_checks(self) -> None:
        db = AsyncMock()
        order = _make_order()
        await OrderRepository().update_item(db, order.id, order.items[0])

        params = db.execute.await_args.args[1]
        assert params["listing_id"] == "L-1"
        assert params["quantity"] == 2
        assert params["item_packed"] is True

    @pytest.mark.asyncio
    async def test_update_header_writes_totals(self) -> None:
        db = AsyncMock()
        order = _make_order()
        order.status = OrderStatus.CANCELLED
        await OrderRepository().update_header(db, order)

        params = db.execute.await_args.args[1]
        assert params == {
            "id": "CM00001",
            "status": "cancelled",
            "total_price_cents": 208_500,
            "cadre_profit_cents": 20_000,
        }

    @pytest.mark.asyncio
    async def test_delete_reports_whether_row_existed(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _fetchone(None)
        assert await OrderRepository().delete(db, "CM99999") is False

        db.execute.return_value = _fetchone(MagicMock(id="CM00001"))
        assert await OrderRepository().delete(db, "CM00001") is True


class TestListOrders:
    @pytest.mark.asyncio
    async def test_empty_page_skips_item_query(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _fetchall([])

        orders = await OrderRepository().list_orders(db, None, None, None, 21)

        assert orders == []
        db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_groups_items_by_order(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [
            _fetchall([_make_order_row(id="CM00002"), _make_order_row(id="CM00001")]),
            _fetchall(
                [
                    _make_item_row(order_id="CM00001"),
                    _make_item_row(order_id="CM00002", listing_id="L-7"),
                ]
            ),
        ]

        orders = await OrderRepository().list_orders(
            db, "placed", "2026-09-01T12:00:00+00:00", "CM00003", 21
        )

        assert [o.id for o in orders] == ["CM00002", "CM00001"]
        assert orders[0].items[0].listing_id == "L-7"
        params = db.execute.await_args_list[0].args[1]
        assert isinstance(params["cursor_ts"], datetime)
        items_params = db.execute.await_args_list[1].args[1]
        assert items_params == {"order_ids_csv": "CM00002,CM00001"}


def _column_names(select_list: str) -> set[str]:
    return {c.strip() for c in select_list.replace("\n", " ").split(",") if c.strip()}


def test_orm_mirrors_selected_columns() -> None:
    assert _column_names(persistence._ORDER_COLUMNS) == set(OrderORM.__table__.columns.keys())
    assert _column_names(persistence._ITEM_COLUMNS) == set(
        OrderItemORM.__table__.columns.keys()
    )
