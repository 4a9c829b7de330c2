"""Order status machine and the listing side effects of each transition.

    placed ──► out for delivery ──► delivered
      │                  │               │
      └──────────────────┴──► cancelled ◄┘

placed may also jump straight to delivered. cancelled is terminal;
delivered only leaves through cancellation (a return).

Per-item listing effects of entering a status:

    out for delivery  unique, or stock with nothing left, and For Sale -> Confirmed
    delivered         Confirmed -> Sold
    cancelled         Confirmed / Sold -> For Sale; stock items also release their quantity
"""

from dataclasses import dataclass

from src.mk_common.enums import ListingStatus, OrderStatus
from src.mk_common.errors import InvalidStatusError, InvalidStatusTransitionError
from src.mk_listing.domain.models import Listing

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PLACED: frozenset(
        {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class ListingEffect:
    new_status: ListingStatus | None = None
    release_quantity: int = 0

    @property
    def is_noop(self) -> bool:
        return self.new_status is None and self.release_quantity == 0


NO_EFFECT = ListingEffect()


def parse_status(value: object) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusError(value) from None


def check_transition(order_id: str, current: OrderStatus, target: OrderStatus) -> None:
    if target not in TRANSITIONS[current]:
        raise InvalidStatusTransitionError(order_id, current.value, target.value)


def listing_effect(target: OrderStatus, listing: Listing, item_quantity: int) -> ListingEffect:
    """What entering `target` does to one listing referenced by an order item."""
    status = listing.status

    if target is OrderStatus.OUT_FOR_DELIVERY:
        claimable = listing.is_unique or listing.is_sold_out
        if claimable and status == ListingStatus.FOR_SALE.value:
            return ListingEffect(new_status=ListingStatus.CONFIRMED)
        return NO_EFFECT

    if target is OrderStatus.DELIVERED:
        if status == ListingStatus.CONFIRMED.value:
            return ListingEffect(new_status=ListingStatus.SOLD)
        return NO_EFFECT

    if target is OrderStatus.CANCELLED:
        new_status = None
        if status in (ListingStatus.CONFIRMED.value, ListingStatus.SOLD.value):
            new_status = ListingStatus.FOR_SALE
        release = 0 if listing.is_unique else item_quantity
        return ListingEffect(new_status=new_status, release_quantity=release)

    return NO_EFFECT
