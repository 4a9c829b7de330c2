"""Snapshot layer: copies listing and seller data into an order item at purchase time."""

from src.mk_common.enums import Dimensions
from src.mk_common.money import seller_profit
from src.mk_listing.domain.models import Listing
from src.mk_order.domain.models import OrderItem, SellerInfo


def seller_snapshot(listing: Listing) -> SellerInfo:
    """Seller contact/shipping details as they are right now, with placeholders for gaps."""
    return SellerInfo(
        username=listing.owner_username or "Unknown Seller",
        email=listing.owner_email or "No Email",
        phone_number=listing.phone_number or "No Phone",
        city=listing.city or "Unknown City",
        district=listing.district or "Unknown District",
        address=listing.address or "No Address",
        contact_preference=listing.contact_preference or "No Preference",
    )


def snapshot_item(
    listing: Listing, quantity: int, selected_size: str | None = None
) -> OrderItem:
    """
    Build the order line for `quantity` units of `listing`.

    - Clothing: keeps the size the buyer picked, no dimensions.
    - Everything else: copies dimensions/width/height, and depth only for 3D.
    """
    item = OrderItem(
        listing_id=listing.id,
        name=listing.name or "Unnamed Product",
        description=listing.description or "No Description",
        price_cents=listing.price_cents,
        type=listing.type or "Unknown Type",
        seller_info=seller_snapshot(listing),
        quantity=quantity,
        profit_cents=seller_profit(listing.price_cents, quantity),
    )
    if listing.is_clothing:
        item.selected_size = selected_size
        return item

    item.dimensions = listing.dimensions
    item.width = listing.width
    item.height = listing.height
    if listing.dimensions == Dimensions.THREE_D.value:
        item.depth = listing.depth
    return item


def merge_lines(
    lines: list[tuple[str, int, str | None]],
) -> list[tuple[str, int, str | None]]:
    """Collapse repeated listing ids into one line, summing quantities.

    Keeps first-seen order and the first non-empty selected size.
    """
    quantities: dict[str, int] = {}
    sizes: dict[str, str | None] = {}
    for listing_id, quantity, size in lines:
        quantities[listing_id] = quantities.get(listing_id, 0) + quantity
        if sizes.get(listing_id) is None:
            sizes[listing_id] = size
    return [(lid, qty, sizes[lid]) for lid, qty in quantities.items()]
