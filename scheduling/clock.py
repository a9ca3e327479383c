"""Wall-clock abstraction and UTC helpers."""

from datetime import datetime, timezone


class Clock:
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Always returns the same instant. Used by tests and replays."""

    def __init__(self, instant: datetime):
        self.instant = to_utc(instant)

    def now(self) -> datetime:
        return self.instant


def to_utc(value: datetime | None) -> datetime | None:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Storage form: SQLite keeps no zone, so timestamps are written as naive UTC."""
    if value is None:
        return None
    return to_utc(value).replace(tzinfo=None)


def isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return to_utc(value).isoformat().replace("+00:00", "Z")
