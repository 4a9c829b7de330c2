# src/mk_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation.

An order is one `orders` row plus its `order_items` rows (line_no keeps
insertion order). JSON columns are written with CAST(:param AS JSONB).

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.enums import OrderStatus
from src.mk_order.domain.models import (
    CustomerInfo,
    Order,
    OrderItem,
    SellerInfo,
    StatusChecks,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, status, customer_info, notes,
        shipment_fee_cents, total_price_cents, cadre_profit_cents,
        created_at, updated_at)
    VALUES (:id, :status, CAST(:customer_info AS JSONB), :notes,
        :shipment_fee_cents, :total_price_cents, :cadre_profit_cents,
        :created_at, :updated_at)
""")

_INSERT_ITEM_SQL = text("""
    INSERT INTO order_items (order_id, listing_id, line_no,
        name, description, price_cents, type, seller_info,
        quantity, profit_cents,
        selected_size, dimensions, width, height, depth,
        item_received, item_verified, item_packed, ready_for_shipment)
    VALUES (:order_id, :listing_id, :line_no,
        :name, :description, :price_cents, :type, CAST(:seller_info AS JSONB),
        :quantity, :profit_cents,
        :selected_size, :dimensions, :width, :height, :depth,
        :item_received, :item_verified, :item_packed, :ready_for_shipment)
""")

_UPDATE_HEADER_SQL = text("""
    UPDATE orders
    SET status = :status,
        total_price_cents = :total_price_cents,
        cadre_profit_cents = :cadre_profit_cents,
        updated_at = NOW()
    WHERE id = :id
""")

_UPDATE_ITEM_SQL = text("""
    UPDATE order_items
    SET quantity = :quantity,
        profit_cents = :profit_cents,
        item_received = :item_received,
        item_verified = :item_verified,
        item_packed = :item_packed,
        ready_for_shipment = :ready_for_shipment
    WHERE order_id = :order_id AND listing_id = :listing_id
""")

_DELETE_ITEM_SQL = text("""
    DELETE FROM order_items WHERE order_id = :order_id AND listing_id = :listing_id
""")

# order_items rows go with it (ON DELETE CASCADE)
_DELETE_ORDER_SQL = text("""
    DELETE FROM orders WHERE id = :id RETURNING id
""")

_ORDER_COLUMNS = """
    id, status, customer_info, notes,
    shipment_fee_cents, total_price_cents, cadre_profit_cents,
    created_at, updated_at
"""

_GET_ORDER_SQL = text(f"""
    SELECT {_ORDER_COLUMNS} FROM orders WHERE id = :id
""")

_GET_ORDER_FOR_UPDATE_SQL = text(f"""
    SELECT {_ORDER_COLUMNS} FROM orders WHERE id = :id FOR UPDATE
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM orders
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_ITEM_COLUMNS = """
    order_id, listing_id, line_no,
    name, description, price_cents, type, seller_info,
    quantity, profit_cents,
    selected_size, dimensions, width, height, depth,
    item_received, item_verified, item_packed, ready_for_shipment
"""

_GET_ITEMS_SQL = text(f"""
    SELECT {_ITEM_COLUMNS}
    FROM order_items
    WHERE order_id = ANY(string_to_array(CAST(:order_ids_csv AS TEXT), ','))
    ORDER BY order_id, line_no
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _load_json(value: Any) -> dict[str, Any]:
    """asyncpg may hand back JSONB as text depending on codec setup."""
    if isinstance(value, str):
        loaded: dict[str, Any] = json.loads(value)
        return loaded
    return dict(value)


def _row_to_item(row: Any) -> OrderItem:
    return OrderItem(
        listing_id=row.listing_id,
        name=row.name,
        description=row.description,
        price_cents=row.price_cents,
        type=row.type,
        seller_info=SellerInfo(**_load_json(row.seller_info)),
        quantity=row.quantity,
        profit_cents=row.profit_cents,
        status_checks=StatusChecks(
            item_received=row.item_received,
            item_verified=row.item_verified,
            item_packed=row.item_packed,
            ready_for_shipment=row.ready_for_shipment,
        ),
        selected_size=row.selected_size,
        dimensions=row.dimensions,
        width=row.width,
        height=row.height,
        depth=row.depth,
    )


def _row_to_order(row: Any, items: list[OrderItem]) -> Order:
    return Order(
        id=row.id,
        status=OrderStatus(row.status),
        customer_info=CustomerInfo(**_load_json(row.customer_info)),
        items=items,
        shipment_fee_cents=row.shipment_fee_cents,
        total_price_cents=row.total_price_cents,
        cadre_profit_cents=row.cadre_profit_cents,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _item_params(order_id: str, line_no: int, item: OrderItem) -> dict[str, Any]:
    return {
        "order_id": order_id,
        "listing_id": item.listing_id,
        "line_no": line_no,
        "name": item.name,
        "description": item.description,
        "price_cents": item.price_cents,
        "type": item.type,
        "seller_info": json.dumps(vars(item.seller_info)),
        "quantity": item.quantity,
        "profit_cents": item.profit_cents,
        "selected_size": item.selected_size,
        "dimensions": item.dimensions,
        "width": item.width,
        "height": item.height,
        "depth": item.depth,
        **_check_params(item.status_checks),
    }


def _check_params(checks: StatusChecks) -> dict[str, bool]:
    return {
        "item_received": checks.item_received,
        "item_verified": checks.item_verified,
        "item_packed": checks.item_packed,
        "ready_for_shipment": checks.ready_for_shipment,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, order: Order) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "status": order.status.value,
                "customer_info": json.dumps(vars(order.customer_info)),
                "notes": order.notes,
                "shipment_fee_cents": order.shipment_fee_cents,
                "total_price_cents": order.total_price_cents,
                "cadre_profit_cents": order.cadre_profit_cents,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )
        await db.execute(
            _INSERT_ITEM_SQL,
            [_item_params(order.id, n, item) for n, item in enumerate(order.items, start=1)],
        )

    async def _load(self, db: AsyncSession, stmt: Any, order_id: str) -> Order | None:
        result = await db.execute(stmt, {"id": order_id})
        row = result.fetchone()
        if row is None:
            return None
        items = await self._load_items(db, [order_id])
        return _row_to_order(row, items.get(order_id, []))

    async def _load_items(
        self, db: AsyncSession, order_ids: list[str]
    ) -> dict[str, list[OrderItem]]:
        result = await db.execute(_GET_ITEMS_SQL, {"order_ids_csv": ",".join(order_ids)})
        grouped: dict[str, list[OrderItem]] = {}
        for row in result.fetchall():
            grouped.setdefault(row.order_id, []).append(_row_to_item(row))
        return grouped

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        return await self._load(db, _GET_ORDER_SQL, order_id)

    async def get_for_update(self, db: AsyncSession, order_id: str) -> Order | None:
        """Row-locked read; the lock is held until the caller's transaction ends."""
        return await self._load(db, _GET_ORDER_FOR_UPDATE_SQL, order_id)

    async def update_header(self, db: AsyncSession, order: Order) -> None:
        await db.execute(
            _UPDATE_HEADER_SQL,
            {
                "id": order.id,
                "status": order.status.value,
                "total_price_cents": order.total_price_cents,
                "cadre_profit_cents": order.cadre_profit_cents,
            },
        )

    async def update_item(self, db: AsyncSession, order_id: str, item: OrderItem) -> None:
        await db.execute(
            _UPDATE_ITEM_SQL,
            {
                "order_id": order_id,
                "listing_id": item.listing_id,
                "quantity": item.quantity,
                "profit_cents": item.profit_cents,
                **_check_params(item.status_checks),
            },
        )

    async def delete_item(self, db: AsyncSession, order_id: str, listing_id: str) -> None:
        await db.execute(_DELETE_ITEM_SQL, {"order_id": order_id, "listing_id": listing_id})

    async def delete(self, db: AsyncSession, order_id: str) -> bool:
        result = await db.execute(_DELETE_ORDER_SQL, {"id": order_id})
        return result.fetchone() is not None

    async def list_orders(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Order]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "status": status,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        if not rows:
            return []
        items = await self._load_items(db, [row.id for row in rows])
        return [_row_to_order(row, items.get(row.id, [])) for row in rows]
