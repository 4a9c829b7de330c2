"""Inventory ledger results — pure dataclasses."""

from dataclasses import dataclass

from src.mk_listing.domain.models import Listing


@dataclass
class StockMovement:
    """Outcome of one ledger operation on a single listing.

    requested: signed quantity asked for (positive = reserve, negative = release)
    moved:     signed quantity actually moved between current and sold
    """

    listing: Listing
    requested: int
    moved: int

    @property
    def clamped(self) -> bool:
        return self.moved != self.requested
