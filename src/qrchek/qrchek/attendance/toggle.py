from __future__ import annotations

from typing import Optional

from ..core.enums import RecordType, ToggleState
from .model import AttendanceRecord

_NEXT_TYPE = {
    ToggleState.AWAITING_ARRIVAL: RecordType.ARRIVAL,
    ToggleState.AWAITING_DEPARTURE: RecordType.DEPARTURE,
}


def state_after(last: Optional[AttendanceRecord]) -> ToggleState:
    """Scan state implied by the employee's latest record.

    Only the type of that record matters, its age is not consulted.
    """

    if last is None or last.type == RecordType.DEPARTURE:
        return ToggleState.AWAITING_ARRIVAL
    return ToggleState.AWAITING_DEPARTURE


def next_type(last: Optional[AttendanceRecord]) -> RecordType:
    return _NEXT_TYPE[state_after(last)]
