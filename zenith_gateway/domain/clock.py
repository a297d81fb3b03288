"""Injectable clock so domain rules never read the system time directly"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def _at_noon_utc(value: datetime | date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day, 12, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of the current time"""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware datetime"""
        ...

    def today(self) -> date:
        """Current business date"""
        return self.now().date()


class SystemClock(Clock):
    """Wall clock in the configured business timezone"""

    def __init__(self, tz_name: str = "UTC"):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock(Clock):
    """Clock frozen at a given instant (tests, replays, backfills)"""

    def __init__(self, fixed_time: datetime | date):
        self._fixed_time = _at_noon_utc(fixed_time)

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, time: datetime | date) -> None:
        """Move the frozen instant"""
        self._fixed_time = _at_noon_utc(time)
