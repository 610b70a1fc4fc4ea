from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from werkzeug.security import generate_password_hash

from src.qrchek.qrchek.attendance.model import AttendanceRecord, OpenArrival
from src.qrchek.qrchek.core.constants import DEFAULT_HOURLY_RATE
from src.qrchek.qrchek.core.enums import RecordType
from src.qrchek.qrchek.core.exceptions import ConflictError, StoreUnavailableError
from src.qrchek.qrchek.users.model import Employee


def fast_hash(password: str) -> str:
    return generate_password_hash(password, method="pbkdf2:sha256:1000")


class InMemoryEmployees:
    def __init__(self):
        self._by_id: dict[int, Employee] = {}
        self._id = 0

    def add(
        self,
        name: str,
        email: str,
        *,
        password: str = "secret1",
        hourly_rate: Decimal = DEFAULT_HOURLY_RATE,
        is_admin: bool = False,
        is_verified: bool = True,
    ) -> Employee:
        return self.create_employee(
            name=name,
            email=email,
            password_hash=fast_hash(password),
            hourly_rate=Decimal(hourly_rate),
            is_admin=is_admin,
            is_verified=is_verified,
        )

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def get_by_email(self, email: str) -> Optional[Employee]:
        needle = (email or "").strip().lower()
        for e in self._by_id.values():
            if e.email.lower() == needle:
                return e
        return None

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda e: e.employee_id)

    def create_employee(self, *, name, email, password_hash, hourly_rate, is_admin=False, is_verified=False) -> Employee:
        self._id += 1
        employee = Employee(
            employee_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            hourly_rate=hourly_rate,
            is_admin=is_admin,
            is_verified=is_verified,
        )
        self._by_id[self._id] = employee
        return employee

    def update_employee(self, employee_id, *, hourly_rate=None, is_admin=None, is_verified=None, password_hash=None):
        current = self._by_id.get(int(employee_id))
        if current is None:
            return None
        changes = {
            "hourly_rate": hourly_rate,
            "is_admin": is_admin,
            "is_verified": is_verified,
            "password_hash": password_hash,
        }
        updated = replace(current, **{k: v for k, v in changes.items() if v is not None})
        self._by_id[updated.employee_id] = updated
        return updated

    def count(self) -> int:
        return len(self._by_id)


class InMemoryAttendance:
    """Attendance store backed by a list.

    ``failing_employee_ids`` makes inserts for those employees raise, and
    ``unavailable`` makes every write raise StoreUnavailableError.
    """

    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self._employees = employees
        self._records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._lock = threading.Lock()
        self.failing_employee_ids: set[int] = set()
        self.unavailable = False

    def _ordered(self, employee_id: Optional[int] = None) -> list[AttendanceRecord]:
        items = [r for r in self._records.values() if employee_id is None or r.employee_id == employee_id]
        items.sort(key=lambda r: (r.timestamp, r.record_id))
        return items

    def _check_available(self) -> None:
        if self.unavailable:
            raise StoreUnavailableError("database is down")

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._records.get(int(record_id))

    def get_last_record(self, employee_id: int) -> Optional[AttendanceRecord]:
        items = self._ordered(employee_id)
        return items[-1] if items else None

    def get_records_in_range(self, *, employee_id=None, start=None, end=None):
        return [
            r
            for r in self._ordered(employee_id)
            if (start is None or r.timestamp >= start) and (end is None or r.timestamp < end)
        ]

    def list_recent(self, *, employee_id=None, limit: int):
        return list(reversed(self._ordered(employee_id)))[:limit]

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
        self._check_available()
        if employee_id in self.failing_employee_ids:
            raise RuntimeError(f"insert failed for employee {employee_id}")
        with self._lock:
            self._id += 1
            record = AttendanceRecord(
                record_id=self._id,
                employee_id=employee_id,
                employee_name=employee_name,
                timestamp=timestamp,
                type=RecordType(record_type),
                auto_generated=auto_generated,
                confirmed=confirmed,
            )
            self._records[record.record_id] = record
            return record

    def append_scan(self, *, employee_id, employee_name, record_type, timestamp, expected_last_id):
        self._check_available()
        with self._lock:
            last = self.get_last_record(employee_id)
            if (last.record_id if last else None) != expected_last_id:
                raise ConflictError("Another scan was recorded at the same time, please scan again")
            self._id += 1
            record = AttendanceRecord(
                record_id=self._id,
                employee_id=employee_id,
                employee_name=employee_name,
                timestamp=timestamp,
                type=RecordType(record_type),
            )
            self._records[record.record_id] = record
            return record

    def close_open_arrival(self, *, employee_id, employee_name, arrival_id, timestamp):
        self._check_available()
        if employee_id in self.failing_employee_ids:
            raise RuntimeError(f"insert failed for employee {employee_id}")
        with self._lock:
            last = self.get_last_record(employee_id)
            if last is None or last.record_id != arrival_id:
                return None
            self._id += 1
            record = AttendanceRecord(
                record_id=self._id,
                employee_id=employee_id,
                employee_name=employee_name,
                timestamp=timestamp,
                type=RecordType.DEPARTURE,
                auto_generated=True,
            )
            self._records[record.record_id] = record
            return record

    def update_record_type(self, record_id, new_type):
        self._check_available()
        current = self._records.get(int(record_id))
        if current is None:
            return None
        updated = replace(current, type=RecordType(new_type))
        self._records[updated.record_id] = updated
        return updated

    def update_record_confirmed(self, record_id, confirmed) -> bool:
        self._check_available()
        current = self._records.get(int(record_id))
        if current is None:
            return False
        self._records[current.record_id] = replace(current, confirmed=bool(confirmed))
        return True

    def delete_record(self, record_id) -> bool:
        self._check_available()
        return self._records.pop(int(record_id), None) is not None

    def find_employees_with_open_arrival(self, as_of: datetime):
        latest: dict[int, AttendanceRecord] = {}
        for r in self._ordered():
            if r.timestamp <= as_of:
                latest[r.employee_id] = r

        out = []
        for employee_id in sorted(latest):
            r = latest[employee_id]
            if r.type != RecordType.ARRIVAL:
                continue
            employee = self._employees.get_by_id(employee_id) if self._employees else None
            out.append(
                OpenArrival(
                    employee_id=employee_id,
                    name=employee.name if employee else r.employee_name,
                    email=employee.email if employee else "",
                    last_arrival=r.timestamp,
                    arrival_id=r.record_id,
                )
            )
        return out

    def find_pending_confirmations(self, *, employee_id=None):
        return [r for r in reversed(self._ordered(employee_id)) if r.auto_generated and not r.confirmed]

    def count(self) -> int:
        return len(self._records)
