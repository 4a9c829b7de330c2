"""Listing domain model — pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime

from src.mk_common.enums import CLOTHING_TYPE, ListingStatus, ListingType


@dataclass
class Listing:
    id: str
    name: str
    description: str
    price_cents: int
    type: str  # catalogue category, e.g. "Paintings & Drawings"
    # Quantity counters: current + sold == initial, always
    initial_quantity: int
    current_quantity: int
    sold_quantity: int
    status: str = ListingStatus.PENDING.value
    owner_id: str | None = None
    # Shipping / contact details of the seller, as entered on the listing
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    district: str | None = None
    contact_preference: str | None = None
    # Physical shape (non-clothing only)
    dimensions: str | None = None  # 2D / 3D
    width: int | None = None
    height: int | None = None
    depth: int | None = None
    # Owner account, joined from users
    owner_username: str | None = None
    owner_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def listing_type(self) -> ListingType:
        return ListingType.UNIQUE if self.initial_quantity == 1 else ListingType.STOCK

    @property
    def is_unique(self) -> bool:
        return self.listing_type is ListingType.UNIQUE

    @property
    def is_sold_out(self) -> bool:
        return self.current_quantity == 0

    @property
    def is_clothing(self) -> bool:
        return self.type == CLOTHING_TYPE

    @property
    def quantity_conserved(self) -> bool:
        return (
            self.current_quantity + self.sold_quantity == self.initial_quantity
            and 0 <= self.current_quantity <= self.initial_quantity
            and 0 <= self.sold_quantity <= self.initial_quantity
        )
