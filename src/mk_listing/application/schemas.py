"""Pydantic schemas for the listing read API."""

from datetime import datetime

from src.mk_common.money import cents_to_display
from src.mk_common.schemas import CamelModel
from src.mk_listing.domain.models import Listing


class ListingStock(CamelModel):
    current_quantity: int
    sold_quantity: int

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingStock":
        return cls(
            current_quantity=listing.current_quantity,
            sold_quantity=listing.sold_quantity,
        )


class ListingResponse(CamelModel):
    id: str
    name: str
    description: str
    type: str
    price_cents: int
    price_display: str
    listing_type: str
    status: str
    initial_quantity: int
    current_quantity: int
    sold_quantity: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            name=listing.name,
            description=listing.description,
            type=listing.type,
            price_cents=listing.price_cents,
            price_display=cents_to_display(listing.price_cents),
            listing_type=listing.listing_type.value,
            status=listing.status,
            initial_quantity=listing.initial_quantity,
            current_quantity=listing.current_quantity,
            sold_quantity=listing.sold_quantity,
            created_at=listing.created_at,
            updated_at=listing.updated_at,
        )
