from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord


@dataclass(frozen=True)
class WorkStats:
    hours: Decimal = Decimal("0")
    payment: Decimal = Decimal("0")


ZERO_STATS = WorkStats()


@dataclass(frozen=True)
class WorkSession:
    """An arrival and the departure paired with it (None while still open)."""

    arrival: AttendanceRecord
    departure: Optional[AttendanceRecord] = None

    @property
    def seconds(self) -> float:
        if self.departure is None:
            return 0.0
        return (self.departure.timestamp - self.arrival.timestamp).total_seconds()


@dataclass(frozen=True)
class AggregateStats:
    per_employee: dict[int, WorkStats] = field(default_factory=dict)
    totals: WorkStats = ZERO_STATS
    scans: int = 0
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
