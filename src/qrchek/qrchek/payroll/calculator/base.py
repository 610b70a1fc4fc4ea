from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from decimal import Decimal
from typing import Mapping, Sequence

from ...attendance.model import AttendanceRecord
from ...core.constants import DEFAULT_HOURLY_RATE
from ..model import WorkSession, WorkStats


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def pair(self, records: Sequence[AttendanceRecord]) -> list[WorkSession]:
        """Pair one employee's records (ascending by timestamp) into sessions."""

        raise NotImplementedError

    @abstractmethod
    def compute(self, records: Sequence[AttendanceRecord], rate: Decimal) -> WorkStats:
        raise NotImplementedError

    def compute_by_employee(
        self,
        records: Sequence[AttendanceRecord],
        rates: Mapping[int, Decimal],
        *,
        default_rate: Decimal = DEFAULT_HOURLY_RATE,
    ) -> dict[int, WorkStats]:
        """Bucket mixed records by employee, then compute each bucket."""

        ordered = sorted(records, key=lambda r: r.timestamp)
        buckets: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for r in ordered:
            buckets[r.employee_id].append(r)

        return {
            employee_id: self.compute(bucket, rates.get(employee_id, default_rate))
            for employee_id, bucket in buckets.items()
        }
