from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..payroll.model import WorkStats
from ..users.model import Employee


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def money(value: Decimal) -> float:
    return float(value)


def record_payload(r: AttendanceRecord) -> dict:
    return {
        "id": r.record_id,
        "employeeId": r.employee_id,
        "employeeName": r.employee_name,
        "timestamp": iso(r.timestamp),
        "type": r.type.value,
        "autoGenerated": r.auto_generated,
        "confirmed": r.confirmed,
    }


def employee_payload(e: Employee) -> dict:
    return {
        "id": e.employee_id,
        "name": e.name,
        "email": e.email,
        "isAdmin": e.is_admin,
        "hourlyRate": money(e.hourly_rate),
        "emailVerified": e.is_verified,
        "createdAt": iso(e.created_at),
    }


def stats_payload(s: WorkStats) -> dict:
    return {"hours": money(s.hours), "payment": money(s.payment)}
