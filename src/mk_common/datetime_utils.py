"""UTC datetime helpers."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Timezone-aware UTC now; all order timestamps are stored in UTC."""
    return datetime.now(UTC)


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
