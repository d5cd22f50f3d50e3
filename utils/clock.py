# utils/clock.py - Injectable time source
from datetime import datetime, timezone


class Clock:
    """Source of the current time as naive UTC, matching the stored columns."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalise client supplied datetimes to the naive UTC form we persist."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


system_clock = Clock()

def get_clock() -> Clock:
    return system_clock
