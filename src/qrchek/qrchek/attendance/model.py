from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RecordType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one arrival or departure event.

    ``confirmed`` only means something when ``auto_generated`` is true: a
    synthetic departure the employee has acknowledged.
    """

    record_id: int
    employee_id: int
    employee_name: str
    timestamp: datetime
    type: RecordType
    auto_generated: bool = False
    confirmed: bool = False

    @property
    def awaiting_confirmation(self) -> bool:
        return self.auto_generated and not self.confirmed


@dataclass(frozen=True)
class OpenArrival:
    """Read-model: employee whose latest record is still an arrival."""

    employee_id: int
    name: str
    email: str
    last_arrival: datetime
    arrival_id: int


@dataclass(frozen=True)
class ScanResult:
    record: AttendanceRecord
    cooldown_remaining: Optional[int] = None
