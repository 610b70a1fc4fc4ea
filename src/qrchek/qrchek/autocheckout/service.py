from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock, latest_cutoff
from ..core.constants import DEFAULT_AUTO_CHECKOUT_TIME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoCheckoutResult:
    processed: int
    employees: list[str] = field(default_factory=list)
    cutoff: Optional[datetime] = None


class AutoCheckoutService:
    """Closes forgotten arrivals with a synthetic departure at the daily cutoff.

    Re-running is safe: an employee closed once has the synthetic departure as
    latest record and is not found again. The insert itself is conditional on
    the arrival still being the latest record, so sweeps on different workers
    cannot both close the same arrival.
    """

    def __init__(self, attendance: AttendanceRepository, *, clock: Clock, cutoff: time = DEFAULT_AUTO_CHECKOUT_TIME):
        self._attendance = attendance
        self._clock = clock
        self.cutoff = cutoff

    def cutoff_for(self, now: datetime) -> datetime:
        return latest_cutoff(now, self.cutoff, self._clock.tz)

    def run(self, *, now: Optional[datetime] = None) -> AutoCheckoutResult:
        checkout_time = self.cutoff_for(now or self._clock.now())

        open_arrivals = self._attendance.find_employees_with_open_arrival(checkout_time)
        logger.info("[Auto-Checkout] Found %d employees with open arrivals as of %s", len(open_arrivals), checkout_time)

        processed: list[str] = []
        for employee in open_arrivals:
            try:
                record = self._attendance.close_open_arrival(
                    employee_id=employee.employee_id,
                    employee_name=employee.name,
                    arrival_id=employee.arrival_id,
                    timestamp=checkout_time,
                )
            except Exception:
                logger.exception("[Auto-Checkout] Failed to create auto-departure for %s", employee.name)
                continue

            if record is None:
                logger.info("[Auto-Checkout] Skipped %s, arrival already closed", employee.name)
                continue

            processed.append(employee.name)
            logger.info("[Auto-Checkout] Created auto-departure for %s (%s)", employee.name, employee.email)

        logger.info("[Auto-Checkout] Completed. Processed %d employees", len(processed))
        return AutoCheckoutResult(processed=len(processed), employees=processed, cutoff=checkout_time)
