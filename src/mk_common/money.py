"""Integer arithmetic for marketplace money.

All prices, fees and profits are int minor units (cents / piastres). No float.
The platform cut rounds up to the minor unit, the seller share is what is left.
"""

from config.settings import settings

_BPS_DENOMINATOR = 10_000
MIN_LISTING_PRICE_CENTS = 100 * 100  # 100 EGP


def platform_cut(amount_cents: int, fee_bps: int | None = None) -> int:
    """Platform share of an amount: ceil(amount * fee_bps / 10000).

    Using integer ceiling: (a + b - 1) // b
    """
    bps = settings.PLATFORM_FEE_BPS if fee_bps is None else fee_bps
    if amount_cents == 0 or bps == 0:
        return 0
    return (amount_cents * bps + _BPS_DENOMINATOR - 1) // _BPS_DENOMINATOR


def seller_profit(price_cents: int, quantity: int, fee_bps: int | None = None) -> int:
    """Seller share of one order line (the line total minus the platform cut)."""
    line_total = price_cents * quantity
    return line_total - platform_cut(line_total, fee_bps)


def cents_to_display(cents: int, currency: str = "EGP") -> str:
    """Convert cents to display string: 258500 -> 'EGP 2,585.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-{currency} {abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"{currency} {cents // 100:,}.{cents % 100:02d}"
