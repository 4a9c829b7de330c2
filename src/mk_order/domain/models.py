"""Order aggregate — pure dataclasses, no SQLAlchemy dependency.

An order embeds a snapshot of every purchased listing, frozen at purchase
time. Only status, item quantity / profit and the fulfillment checklist
change afterwards. Totals are always derived from the items:

    total_price  = sum(price * quantity) + shipment_fee
    cadre_profit = platform cut of sum(price * quantity)
"""
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime

from src.mk_common.enums import OrderStatus, PaymentMethod, StatusCheck
from src.mk_common.errors import InvalidFieldError, OrderItemNotFoundError
from src.mk_common.money import platform_cut, seller_profit


@dataclass
class SellerInfo:
    username: str
    email: str
    phone_number: str
    city: str
    district: str
    address: str
    contact_preference: str


@dataclass
class CustomerInfo:
    name: str
    phone_number: str
    address: str
    city: str
    district: str
    payment_method: str = PaymentMethod.CASH.value


# StatusCheck wire name -> dataclass attribute
_CHECK_ATTRS: dict[str, str] = {
    StatusCheck.ITEM_RECEIVED.value: "item_received",
    StatusCheck.ITEM_VERIFIED.value: "item_verified",
    StatusCheck.ITEM_PACKED.value: "item_packed",
    StatusCheck.READY_FOR_SHIPMENT.value: "ready_for_shipment",
}


@dataclass
class StatusChecks:
    """Fulfillment checklist. Flags are independent; no ordering is enforced."""

    item_received: bool = False
    item_verified: bool = False
    item_packed: bool = False
    ready_for_shipment: bool = False

    def merged(self, updates: Mapping[str, bool]) -> "StatusChecks":
        """Return a copy with `updates` (keyed by wire name) applied."""
        unknown = [key for key in updates if key not in _CHECK_ATTRS]
        if unknown:
            raise InvalidFieldError(unknown)
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, flag in updates.items():
            values[_CHECK_ATTRS[key]] = bool(flag)
        return StatusChecks(**values)

    def to_wire(self) -> dict[str, bool]:
        return {key: getattr(self, attr) for key, attr in _CHECK_ATTRS.items()}


@dataclass
class OrderItem:
    # Identity within the order: the listing this line was bought from
    listing_id: str
    # Snapshot, frozen at purchase time
    name: str
    description: str
    price_cents: int
    type: str
    seller_info: SellerInfo
    # Mutable
    quantity: int
    profit_cents: int  # seller share of this line
    status_checks: StatusChecks = field(default_factory=StatusChecks)
    # Clothing only
    selected_size: str | None = None
    # Non-clothing only (depth only for 3D)
    dimensions: str | None = None
    width: int | None = None
    height: int | None = None
    depth: int | None = None

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.quantity

    def change_quantity(self, quantity: int, unit_price_cents: int) -> None:
        """Set a new quantity and recompute the seller share at `unit_price_cents`."""
        self.quantity = quantity
        self.profit_cents = seller_profit(unit_price_cents, quantity)


@dataclass
class Order:
    id: str
    customer_info: CustomerInfo
    items: list[OrderItem]
    shipment_fee_cents: int
    status: OrderStatus = OrderStatus.PLACED
    total_price_cents: int = 0
    cadre_profit_cents: int = 0
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def subtotal_cents(self) -> int:
        return sum(item.line_total_cents for item in self.items)

    @property
    def is_active(self) -> bool:
        """Items of an active order still hold reserved stock."""
        return self.status in (OrderStatus.PLACED, OrderStatus.OUT_FOR_DELIVERY)

    def recompute_totals(self) -> None:
        subtotal = self.subtotal_cents
        self.total_price_cents = subtotal + self.shipment_fee_cents
        self.cadre_profit_cents = platform_cut(subtotal)

    def find_item(self, listing_id: str) -> OrderItem:
        for item in self.items:
            if item.listing_id == listing_id:
                return item
        raise OrderItemNotFoundError(self.id, listing_id)

    def remove_item(self, listing_id: str) -> OrderItem:
        item = self.find_item(listing_id)
        self.items.remove(item)
        return item
