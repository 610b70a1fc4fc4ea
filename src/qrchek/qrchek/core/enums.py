from __future__ import annotations

from enum import Enum


class RecordType(str, Enum):
    """Attendance record type as stored in the database."""

    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class ToggleState(str, Enum):
    """Per-employee scan state (2-state machine)."""

    AWAITING_ARRIVAL = "AWAITING_ARRIVAL"
    AWAITING_DEPARTURE = "AWAITING_DEPARTURE"


class GateAction(str, Enum):
    """Employee answer to a pending synthetic departure."""

    CONFIRM = "confirm"
    DISMISS = "dismiss"


class ExportPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"
