from __future__ import annotations

import math
import threading
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_SCAN_COOLDOWN_SECONDS
from .model import AttendanceRecord


class CooldownGovernor:
    """Minimum interval between two accepted scans of the same employee.

    Accepted scan times are kept in memory. After a restart the window is
    derived from the employee's latest scan record instead, so the governor
    stays correct without its own storage. Synthetic departures never start a
    window.
    """

    def __init__(self, window_seconds: int = DEFAULT_SCAN_COOLDOWN_SECONDS):
        self.window_seconds = int(window_seconds)
        self._lock = threading.Lock()
        self._last_accepted: dict[int, datetime] = {}

    def remaining(self, employee_id: int, *, now: datetime, last_record: Optional[AttendanceRecord] = None) -> int:
        """Whole seconds left in the window, 0 when a scan may proceed."""

        if self.window_seconds <= 0:
            return 0

        started = self._window_start(employee_id, last_record)
        if started is None:
            return 0

        elapsed = (now - started).total_seconds()
        left = self.window_seconds - elapsed
        if left <= 0:
            return 0
        return min(self.window_seconds, math.ceil(left))

    def mark(self, employee_id: int, at: datetime) -> None:
        with self._lock:
            self._last_accepted[int(employee_id)] = at

    def reset(self, employee_id: int) -> None:
        with self._lock:
            self._last_accepted.pop(int(employee_id), None)

    def _window_start(self, employee_id: int, last_record: Optional[AttendanceRecord]) -> Optional[datetime]:
        with self._lock:
            started = self._last_accepted.get(int(employee_id))
        if last_record is not None and not last_record.auto_generated:
            if started is None or last_record.timestamp > started:
                started = last_record.timestamp
        return started
