from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..common.clock import Clock
from ..core.enums import GateAction
from ..core.exceptions import AuthorizationError, NotFoundError, StoreUnavailableError, ValidationError
from ..users.model import Employee
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateState:
    blocked: bool
    record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class GateResolution:
    unblocked: bool
    confirmed: bool
    record: Optional[AttendanceRecord] = None


class PendingConfirmationGate:
    """Surfaces synthetic departures the employee has not confirmed yet.

    A session is blocked while such a record exists. Confirming flips
    ``confirmed``; dismissing only unblocks the current session. Records older
    than ``max_age`` stop blocking but stay unconfirmed for the admin list.
    """

    def __init__(self, attendance: AttendanceRepository, *, clock: Clock, max_age: Optional[timedelta] = None):
        self._attendance = attendance
        self._clock = clock
        self._max_age = max_age

    def get_pending_departure(self, employee_id: int) -> Optional[AttendanceRecord]:
        pending = self._attendance.find_pending_confirmations(employee_id=employee_id)
        if not pending:
            return None

        newest = max(pending, key=lambda r: (r.timestamp, r.record_id))
        if self._max_age is not None and self._clock.now() - newest.timestamp > self._max_age:
            return None
        return newest

    def start_session(self, employee: Employee) -> GateState:
        if employee.is_admin:
            return GateState(blocked=False)

        record = self.get_pending_departure(employee.employee_id)
        return GateState(blocked=record is not None, record=record)

    def confirm_departure(self, record_id: int, *, employee_id: Optional[int] = None) -> AttendanceRecord:
        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Record not found")
        if employee_id is not None and record.employee_id != employee_id:
            raise AuthorizationError("You can only confirm your own records")
        if not record.auto_generated:
            raise ValidationError("Only automatic departures need confirmation")

        if not record.confirmed and not self._attendance.update_record_confirmed(record.record_id, True):
            raise NotFoundError("Record not found")

        logger.info("Employee %s confirmed automatic departure %s", record.employee_id, record.record_id)
        return AttendanceRecord(
            record_id=record.record_id,
            employee_id=record.employee_id,
            employee_name=record.employee_name,
            timestamp=record.timestamp,
            type=record.type,
            auto_generated=True,
            confirmed=True,
        )

    def resolve(self, employee_id: int, record_id: int, action: GateAction) -> GateResolution:
        """Answer the gate. Always unblocks.

        A store failure while confirming is logged and swallowed: the session
        continues and the record stays unconfirmed, so the gate shows it again
        next time.
        """

        if action == GateAction.DISMISS:
            return GateResolution(unblocked=True, confirmed=False)

        try:
            record = self.confirm_departure(record_id, employee_id=employee_id)
        except StoreUnavailableError:
            logger.exception("Could not confirm departure %s for employee %s", record_id, employee_id)
            return GateResolution(unblocked=True, confirmed=False)
        return GateResolution(unblocked=True, confirmed=True, record=record)
