from __future__ import annotations

from datetime import UTC, datetime


class InvalidValueError(ValueError):
    """Base exception for validation failures."""


class InvalidTimestampError(InvalidValueError):
    """Raised when a stored timestamp cannot be parsed."""


class UnknownChannelError(InvalidValueError):
    """Raised when a share channel id is not part of the fixed channel set."""


class GiveawayNotFoundError(InvalidValueError):
    """Raised when a giveaway id is not present in the catalog."""


def parse_timestamp(raw: object) -> datetime:
    if isinstance(raw, datetime):
        parsed = raw
    else:
        value = str(raw or "").strip()
        if not value:
            raise InvalidTimestampError("A timestamp value is required")
        normalized = value.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError as exc:
            raise InvalidTimestampError(f"Invalid timestamp: {value}") from exc

    try:
        return as_utc(parsed)
    except (OverflowError, ValueError) as exc:
        raise InvalidTimestampError(f"Timestamp out of range: {raw}") from exc


def as_utc(value: datetime) -> datetime:
    """Treat naive values as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Return an ISO-8601 UTC string with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def validate_window(starts_at: datetime, ends_at: datetime) -> tuple[datetime, datetime]:
    starts_utc = starts_at.astimezone(UTC)
    ends_utc = ends_at.astimezone(UTC)
    if ends_utc <= starts_utc:
        raise InvalidValueError("Giveaway end must be after the start time")
    return starts_utc, ends_utc


def validate_counter(name: str, value: int) -> int:
    if value < 0:
        raise InvalidValueError(f"{name} cannot be negative")
    return value


__all__ = [
    "InvalidValueError",
    "InvalidTimestampError",
    "UnknownChannelError",
    "GiveawayNotFoundError",
    "as_utc",
    "parse_timestamp",
    "format_timestamp",
    "validate_window",
    "validate_counter",
]
