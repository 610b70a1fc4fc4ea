from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.clock import Clock
from ..common.locks import KeyedLocks
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import RecordType
from ..core.exceptions import (
    AuthorizationError,
    CooldownError,
    InvalidQRCodeError,
    NotFoundError,
    ValidationError,
)
from ..users.model import Employee
from ..users.repository import EmployeeRepository
from .cooldown import CooldownGovernor
from .model import AttendanceRecord, ScanResult
from .repository import AttendanceRepository
from .toggle import next_type

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: record scans and let employees correct their own records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        clock: Clock,
        cooldown: CooldownGovernor,
        valid_qr_codes: Iterable[str],
        locks: Optional[KeyedLocks] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock
        self._cooldown = cooldown
        self._valid_qr_codes = frozenset(c.strip() for c in valid_qr_codes if c and c.strip())
        self._locks = locks or KeyedLocks()

    def validate_qr_code(self, qr_code: object) -> str:
        if not isinstance(qr_code, str) or not qr_code.strip():
            raise ValidationError("QR code is required")
        code = qr_code.strip()
        if code not in self._valid_qr_codes:
            raise InvalidQRCodeError("Invalid QR code. Please scan the official company QR code.")
        return code

    def submit_scan(self, employee_id: int, *, qr_code: object) -> ScanResult:
        """Record a scan, toggling between arrival and departure.

        The read-decide-write sequence runs under a per-employee lock and the
        insert is conditional on the latest record not having changed, so two
        concurrent scans never both become arrivals.
        """

        self.validate_qr_code(qr_code)

        employee = self._require_employee(employee_id)

        with self._locks.hold(employee.employee_id):
            now = self._clock.now()
            last = self._attendance.get_last_record(employee.employee_id)

            remaining = self._cooldown.remaining(employee.employee_id, now=now, last_record=last)
            if remaining > 0:
                logger.info("Scan from employee %s rejected, cooldown %ss", employee.employee_id, remaining)
                raise CooldownError(remaining)

            record = self._attendance.append_scan(
                employee_id=employee.employee_id,
                employee_name=employee.name,
                record_type=next_type(last),
                timestamp=now,
                expected_last_id=last.record_id if last else None,
            )
            self._cooldown.mark(employee.employee_id, record.timestamp)

        logger.info("Recorded %s for employee %s", record.type.value, employee.employee_id)
        return ScanResult(record=record, cooldown_remaining=self._cooldown.window_seconds or None)

    def history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_recent(employee_id=employee_id, limit=limit)

    def get_record(self, record_id: int, *, actor: Employee) -> AttendanceRecord:
        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Record not found")
        if record.employee_id != actor.employee_id and not actor.is_admin:
            raise AuthorizationError("You can only change your own records")
        return record

    def update_type(self, record_id: int, new_type: object, *, actor: Employee) -> AttendanceRecord:
        try:
            record_type = RecordType(new_type)
        except ValueError as e:
            raise ValidationError("Type must be 'arrival' or 'departure'") from e

        record = self.get_record(record_id, actor=actor)
        updated = self._attendance.update_record_type(record.record_id, record_type)
        if not updated:
            raise NotFoundError("Record not found")

        # Editing a synthetic departure is an explicit answer to it.
        if updated.awaiting_confirmation:
            self._attendance.update_record_confirmed(updated.record_id, True)
            updated = self._attendance.get_by_id(updated.record_id) or updated

        logger.info("Record %s changed to %s by employee %s", record_id, record_type.value, actor.employee_id)
        return updated

    def delete(self, record_id: int, *, actor: Employee) -> None:
        """Delete a record. Removing the latest scan also clears the cooldown it started."""

        record = self.get_record(record_id, actor=actor)
        with self._locks.hold(record.employee_id):
            last = self._attendance.get_last_record(record.employee_id)
            if not self._attendance.delete_record(record.record_id):
                raise NotFoundError("Record not found")
            if last is not None and last.record_id == record.record_id:
                self._cooldown.reset(record.employee_id)
        logger.info("Record %s deleted by employee %s", record_id, actor.employee_id)

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee
