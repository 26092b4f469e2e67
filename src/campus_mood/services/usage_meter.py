"""Daily read/write accounting against the backing store's free-tier quota.

The meter is advisory: it counts, classifies and logs, but never blocks or
rejects the operation that triggered it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_mood.core.clock import Clock, day_key
from campus_mood.core.errors import StoreError
from campus_mood.models import UsageStats

logger = logging.getLogger(__name__)

Operation = Literal["read", "write"]


class UsageLevel(str, Enum):
    """Classification of one quota's consumption."""

    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UsageReport:
    """Today's counts and the level of each quota after a ``track`` call."""

    date: str
    reads: int
    writes: int
    read_ratio: float
    write_ratio: float
    read_level: UsageLevel
    write_level: UsageLevel


class UsageMeter:
    """Counts backing-store operations per calendar day."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock,
        *,
        read_limit: int = 50_000,
        write_limit: int = 20_000,
        warning_threshold: float = 0.8,
        critical_threshold: float = 0.95,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self.read_limit = read_limit
        self.write_limit = write_limit
        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold
        # Serializes first-of-day row creation between interleaved tasks.
        self._lock = asyncio.Lock()

    def classify(self, ratio: float) -> UsageLevel:
        if ratio >= self.critical_threshold:
            return UsageLevel.CRITICAL
        if ratio >= self.warning_threshold:
            return UsageLevel.WARNING
        return UsageLevel.NOMINAL

    def report(self, date: str, reads: int, writes: int) -> UsageReport:
        read_ratio = reads / self.read_limit if self.read_limit else 0.0
        write_ratio = writes / self.write_limit if self.write_limit else 0.0
        return UsageReport(
            date=date,
            reads=reads,
            writes=writes,
            read_ratio=read_ratio,
            write_ratio=write_ratio,
            read_level=self.classify(read_ratio),
            write_level=self.classify(write_ratio),
        )

    async def track(self, operation: Operation, count: int = 1) -> UsageReport | None:
        """Add ``count`` operations to today's counter and classify both quotas.

        Returns None when nothing was recorded (zero count or the meter's own
        write failed). Failures are logged, never raised: metering must not
        break the operation being metered.
        """
        if operation not in ("read", "write"):
            raise ValueError(f"Unknown operation: {operation}")
        if count <= 0:
            return None

        today = day_key(self._clock.today())
        try:
            async with self._lock, self._session_factory.begin() as session:
                usage = await session.get(UsageStats, today)
                if usage is None:
                    usage = UsageStats(
                        date=today,
                        daily_reads=0,
                        daily_writes=0,
                        warning_threshold=self.warning_threshold,
                        critical_threshold=self.critical_threshold,
                    )
                    session.add(usage)
                if operation == "read":
                    usage.daily_reads += count
                else:
                    usage.daily_writes += count
                reads, writes = usage.daily_reads, usage.daily_writes
        except SQLAlchemyError:
            logger.exception("Error tracking %s usage", operation)
            return None

        report = self.report(today, reads, writes)
        self._log_levels(report)
        return report

    async def get_current_usage(self) -> UsageStats | None:
        """Return today's usage record, or None if nothing was tracked yet today."""
        today = day_key(self._clock.today())
        try:
            async with self._session_factory() as session:
                return await session.get(UsageStats, today)
        except SQLAlchemyError as exc:
            logger.exception("Error getting current usage")
            raise StoreError() from exc

    def _log_levels(self, report: UsageReport) -> None:
        levels = (report.read_level, report.write_level)
        if UsageLevel.CRITICAL in levels:
            logger.error(
                "CRITICAL: Approaching backing store usage limits! reads=%d/%d (%.1f%%) "
                "writes=%d/%d (%.1f%%)",
                report.reads,
                self.read_limit,
                report.read_ratio * 100,
                report.writes,
                self.write_limit,
                report.write_ratio * 100,
            )
        elif UsageLevel.WARNING in levels:
            logger.warning(
                "WARNING: High backing store usage detected. reads=%d/%d (%.1f%%) "
                "writes=%d/%d (%.1f%%)",
                report.reads,
                self.read_limit,
                report.read_ratio * 100,
                report.writes,
                self.write_limit,
                report.write_ratio * 100,
            )
