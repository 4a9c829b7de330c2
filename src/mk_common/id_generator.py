"""Human-readable order ids: prefix + zero-padded sequence number.

    CM00001, CM00002, ... CM99999, CM100000

The number comes from a Redis INCR counter, so ids are assigned in order
instead of drawn at random. The orders primary key remains the uniqueness
guarantee (a flushed counter surfaces as an insert conflict, not a silent
overwrite).
"""

from typing import Protocol

from config.settings import settings

ORDER_SEQUENCE_KEY = "orders:seq"


class SequenceStore(Protocol):
    async def incr(self, name: str) -> int: ...


def format_order_id(number: int, prefix: str | None = None, digits: int | None = None) -> str:
    if number < 1:
        raise ValueError(f"order number must be positive, got {number}")
    prefix = settings.ORDER_ID_PREFIX if prefix is None else prefix
    digits = settings.ORDER_ID_DIGITS if digits is None else digits
    return f"{prefix}{number:0{digits}d}"


class OrderIdGenerator:
    """Allocates order ids from a shared counter."""

    def __init__(self, store: SequenceStore, key: str = ORDER_SEQUENCE_KEY) -> None:
        self._store = store
        self._key = key

    async def next_id(self) -> str:
        number = await self._store.incr(self._key)
        return format_order_id(int(number))
