"""Clock abstraction so "today" is supplied rather than read globally."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Return the current timezone-aware instant."""


@dataclass
class SystemClock(Clock):
    """Wall clock in a configured timezone."""

    timezone_name: str = "UTC"

    def now(self) -> datetime:
        return datetime.now(tz=ZoneInfo(self.timezone_name))


def today(clock: Clock) -> date:
    """Return the calendar day of the clock's current instant."""
    return clock.now().date()
