"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Listing / Inventory
  4xxx: Order
  9xxx: System

Every AppError is caller-visible and never retried by the service itself.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Listing / Inventory ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(2001, f"Listing not found: {listing_id}", 404)


class InsufficientStockError(AppError):
    def __init__(self, listing: str, requested: int, available: int) -> None:
        self.listing = listing
        self.requested = requested
        self.available = available
        super().__init__(
            2002,
            f"Not enough stock for listing {listing}: requested {requested}, "
            f"only {available} remaining",
            400,
        )


# --- 4xxx: Order ---

class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4001, f"Order not found: {order_id}", 404)


class OrderItemNotFoundError(AppError):
    def __init__(self, order_id: str, item_id: str) -> None:
        super().__init__(4002, f"Order item {item_id} not found in order {order_id}", 404)


class EmptyOrderError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "No valid items found in the order", 400)


class InvalidQuantityError(AppError):
    def __init__(self, quantity: object) -> None:
        super().__init__(4004, f"Quantity must be at least 1, got {quantity}", 400)


class InvalidStatusError(AppError):
    def __init__(self, status: object) -> None:
        super().__init__(4005, f"Invalid order status: {status}", 400)


class InvalidStatusTransitionError(AppError):
    def __init__(self, order_id: str, from_status: str, to_status: str) -> None:
        super().__init__(
            4006,
            f"Order {order_id} cannot move from '{from_status}' to '{to_status}'",
            400,
        )


class InvalidFieldError(AppError):
    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(4007, f"Invalid fields: {', '.join(fields)}", 400)


class OrderNotEditableError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(
            4008,
            f"Order {order_id} is '{status}': item quantities can no longer change",
            400,
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
