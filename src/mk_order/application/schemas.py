"""Pydantic schemas for the mk_order API.

Wire format is camelCase (CamelModel); Python attributes stay snake_case.

Cursor format for orders (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<order_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import datetime
from typing import Literal

from pydantic import Field

from src.mk_common.money import cents_to_display
from src.mk_common.schemas import CamelModel
from src.mk_listing.application.schemas import ListingStock
from src.mk_order.domain.models import CustomerInfo, Order, OrderItem, SellerInfo

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_order: Order) -> str:
    """Encode composite cursor from last order in page."""
    assert last_order.created_at is not None
    payload = {
        "ts": last_order.created_at.isoformat(),
        "id": last_order.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, order_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return data["ts"], data["id"]
    except (ValueError, KeyError, TypeError):
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class OrderLineRequest(CamelModel):
    listing_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., ge=1)
    selected_size: str | None = Field(None, max_length=10)


class CustomerInfoIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)
    payment_method: Literal["cash", "instapay"] = "cash"

    def to_domain(self) -> CustomerInfo:
        return CustomerInfo(
            name=self.name,
            phone_number=self.phone_number,
            address=self.address,
            city=self.city,
            district=self.district,
            payment_method=self.payment_method,
        )


class CreateOrderRequest(CamelModel):
    order_items: list[OrderLineRequest] = Field(..., min_length=1)
    customer_info: CustomerInfoIn
    notes: str | None = Field(None, max_length=500)


class SetStatusRequest(CamelModel):
    # Free-form on purpose: unknown values surface as InvalidStatusError (4005)
    status: str


class UpdateQuantityRequest(CamelModel):
    new_quantity: int | None = None


class StatusChecksRequest(CamelModel):
    # Keyed by wire name (itemReceived, ...); unknown keys are rejected by the domain
    status_checks: dict[str, bool]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class SellerInfoOut(CamelModel):
    username: str
    email: str
    phone_number: str
    city: str
    district: str
    address: str
    contact_preference: str

    @classmethod
    def from_domain(cls, s: SellerInfo) -> "SellerInfoOut":
        return cls(**vars(s))


class CustomerInfoOut(CamelModel):
    name: str
    phone_number: str
    address: str
    city: str
    district: str
    payment_method: str

    @classmethod
    def from_domain(cls, c: CustomerInfo) -> "CustomerInfoOut":
        return cls(**vars(c))


class OrderItemResponse(CamelModel):
    item_id: str
    listing_id: str
    name: str
    description: str
    type: str
    price_cents: int
    price_display: str
    quantity: int
    line_total_cents: int
    profit_cents: int
    seller_info: SellerInfoOut
    status_checks: dict[str, bool]
    selected_size: str | None = None
    dimensions: str | None = None
    width: int | None = None
    height: int | None = None
    depth: int | None = None

    @classmethod
    def from_domain(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            item_id=item.listing_id,
            listing_id=item.listing_id,
            name=item.name,
            description=item.description,
            type=item.type,
            price_cents=item.price_cents,
            price_display=cents_to_display(item.price_cents),
            quantity=item.quantity,
            line_total_cents=item.line_total_cents,
            profit_cents=item.profit_cents,
            seller_info=SellerInfoOut.from_domain(item.seller_info),
            status_checks=item.status_checks.to_wire(),
            selected_size=item.selected_size,
            dimensions=item.dimensions,
            width=item.width,
            height=item.height,
            depth=item.depth,
        )


class OrderResponse(CamelModel):
    id: str
    status: str
    customer_info: CustomerInfoOut
    order_items: list[OrderItemResponse]
    notes: str | None
    subtotal_cents: int
    shipment_fee_cents: int
    total_price_cents: int
    total_price_display: str
    cadre_profit_cents: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            status=order.status.value,
            customer_info=CustomerInfoOut.from_domain(order.customer_info),
            order_items=[OrderItemResponse.from_domain(i) for i in order.items],
            notes=order.notes,
            subtotal_cents=order.subtotal_cents,
            shipment_fee_cents=order.shipment_fee_cents,
            total_price_cents=order.total_price_cents,
            total_price_display=cents_to_display(order.total_price_cents),
            cadre_profit_cents=order.cadre_profit_cents,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class CreateOrderResponse(CamelModel):
    order_id: str
    status: str
    total_price_cents: int


class OrderListResponse(CamelModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool


class DeleteOrderResponse(CamelModel):
    order_id: str
    deleted: bool = True


class SkippedItem(CamelModel):
    """An item whose listing side effect was rolled back during a status change."""

    listing_id: str
    reason: str


class SetStatusResponse(CamelModel):
    order: OrderResponse
    skipped_items: list[SkippedItem]


class DeleteItemResponse(CamelModel):
    order_deleted: bool
    order: OrderResponse | None = None


class UpdateQuantityResponse(CamelModel):
    order: OrderResponse
    listing_stock: ListingStock


class StatusChecksResponse(CamelModel):
    order_id: str
    item_id: str
    status_checks: dict[str, bool]
