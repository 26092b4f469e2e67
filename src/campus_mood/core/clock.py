"""Wall-clock and calendar-day source shared by every day-bucketed component."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from campus_mood.db.time import utcnow


class Clock(Protocol):
    """Time source injected into the gate, aggregator, meter and store."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...

    def start_of_day(self, day: date) -> datetime: ...


def day_key(day: date) -> str:
    """Return the YYYY-MM-DD key used to bucket per-day records."""
    return day.isoformat()


def parse_day_key(value: str) -> date:
    """Parse a YYYY-MM-DD key, raising ValueError on anything else."""
    return date.fromisoformat(value)


def recent_day_keys(clock: Clock, days: int) -> list[str]:
    """Return day keys for the last ``days`` days including today, newest first."""
    today = clock.today()
    return [day_key(today - timedelta(days=offset)) for offset in range(days)]


class SystemClock:
    """Real clock. "Today" is the local calendar date of the configured zone.

    With no zone configured the host's local time zone is used.
    """

    def __init__(self, timezone: str | None = None) -> None:
        self._zone = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        return utcnow()

    def today(self) -> date:
        if self._zone is not None:
            return self.now().astimezone(self._zone).date()
        return self.now().astimezone().date()

    def start_of_day(self, day: date) -> datetime:
        """Return local midnight of ``day`` as an aware UTC datetime."""
        if self._zone is not None:
            midnight = datetime.combine(day, time.min, tzinfo=self._zone)
        else:
            midnight = datetime.combine(day, time.min).astimezone()
        return midnight.astimezone(UTC)
