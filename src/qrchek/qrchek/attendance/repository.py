from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RecordType
from .model import AttendanceRecord, OpenArrival


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_last_record(self, employee_id: int) -> Optional[AttendanceRecord]:
        """Most recent record by timestamp (ties broken by id)."""

        raise NotImplementedError

    def get_records_in_range(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start <= timestamp < end, ascending by timestamp.

        ``employee_id=None`` means every employee; a missing bound is open.
        """

        raise NotImplementedError

    def list_recent(self, *, employee_id: Optional[int] = None, limit: int) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def insert_record(
        self,
        *,
        employee_id: int,
        employee_name: str,
        record_type: RecordType,
        timestamp: datetime,
        auto_generated: bool = False,
        confirmed: bool = False,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def append_scan(
        self,
        *,
        employee_id: int,
        employee_name: str,
        record_type: RecordType,
        timestamp: datetime,
        expected_last_id: Optional[int],
    ) -> AttendanceRecord:
        """Insert only if the employee's latest record is still ``expected_last_id``.

        Raises ConflictError otherwise (another scan won the race).
        """

        raise NotImplementedError

    def close_open_arrival(
        self,
        *,
        employee_id: int,
        employee_name: str,
        arrival_id: int,
        timestamp: datetime,
    ) -> Optional[AttendanceRecord]:
        """Insert an unconfirmed synthetic departure if ``arrival_id`` is still the latest record.

        Returns None when something was recorded after that arrival (a real
        departure, or another sweep got there first).
        """

        raise NotImplementedError

    def update_record_type(self, record_id: int, new_type: RecordType) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def update_record_confirmed(self, record_id: int, confirmed: bool) -> bool:
        raise NotImplementedError

    def delete_record(self, record_id: int) -> bool:
        raise NotImplementedError

    def find_employees_with_open_arrival(self, as_of: datetime) -> Sequence[OpenArrival]:
        """Employees whose latest record at or before ``as_of`` is an arrival."""

        raise NotImplementedError

    def find_pending_confirmations(self, *, employee_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        """auto_generated and not confirmed, newest first."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
