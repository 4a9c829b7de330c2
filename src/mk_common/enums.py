"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ListingStatus(str, Enum):
    PENDING = "Pending"
    FOR_SALE = "For Sale"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    SOLD = "Sold"
    SFS = "SFS"  # legacy, never written by this service


class ListingType(str, Enum):
    """Derived from initial_quantity: exactly one unit means unique."""
    UNIQUE = "unique"
    STOCK = "stock"


class OrderStatus(str, Enum):
    PLACED = "placed"
    OUT_FOR_DELIVERY = "out for delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    INSTAPAY = "instapay"


class Dimensions(str, Enum):
    TWO_D = "2D"
    THREE_D = "3D"


class StatusCheck(str, Enum):
    """Fulfillment checklist flags on an order item; independent of each other."""
    ITEM_RECEIVED = "itemReceived"
    ITEM_VERIFIED = "itemVerified"
    ITEM_PACKED = "itemPacked"
    READY_FOR_SHIPMENT = "readyForShipment"


CLOTHING_TYPE = "Clothing & Wearables"
