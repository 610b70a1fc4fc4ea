from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock, local_midnight
from ..core.constants import DEFAULT_HOURLY_RATE, DEFAULT_RECENT_ACTIVITY_LIMIT, MONTH_DAYS, WEEK_DAYS
from ..core.enums import ExportPeriod
from ..core.exceptions import NotFoundError
from ..users.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.pairing_calculator import ForwardPairingCalculator, round_2
from .model import ZERO_STATS, AggregateStats, ReportData, WorkStats


class PayrollReportService:
    """Read-only hours/pay aggregates for the admin dashboard and exports.

    Windows follow the dashboard: today starts at local midnight, week and
    month are the last 7 and 30 days counted from that midnight.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        clock: Clock,
        calculator: Optional[PayrollCalculator] = None,
        default_rate: Decimal = DEFAULT_HOURLY_RATE,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock
        self._calculator = calculator or ForwardPairingCalculator()
        self._default_rate = default_rate

    def window_starts(self) -> dict[str, datetime]:
        now = self._clock.now().astimezone(self._clock.tz)
        today = local_midnight(self._clock.tz, now.date())
        return {
            "today": today,
            "week": today - timedelta(days=WEEK_DAYS),
            "month": today - timedelta(days=MONTH_DAYS),
        }

    def get_employee_stats(
        self,
        employee_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> WorkStats:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        records = self._attendance.get_records_in_range(employee_id=employee_id, start=start, end=end)
        return self._calculator.compute(records, employee.hourly_rate)

    def get_aggregate_stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> AggregateStats:
        records = self._attendance.get_records_in_range(start=start, end=end)
        per_employee = self._calculator.compute_by_employee(
            records,
            self._rates(),
            default_rate=self._default_rate,
        )

        total_hours = sum((s.hours for s in per_employee.values()), Decimal("0"))
        total_payment = sum((s.payment for s in per_employee.values()), Decimal("0"))
        return AggregateStats(
            per_employee=per_employee,
            totals=WorkStats(hours=round_2(total_hours), payment=round_2(total_payment)),
            scans=len(records),
            start=start,
            end=end,
        )

    def dashboard_stats(self) -> dict:
        employees = self._employees.list_all()
        out: dict = {
            "employees": {
                "total": len(employees),
                "verified": sum(1 for e in employees if e.is_verified),
                "pending": sum(1 for e in employees if not e.is_verified and not e.is_admin),
            }
        }
        for name, start in self.window_starts().items():
            agg = self.get_aggregate_stats(start=start)
            out[name] = {"scans": agg.scans, "hours": agg.totals.hours, "payment": agg.totals.payment}

        out["recent_activity"] = list(self._attendance.list_recent(limit=DEFAULT_RECENT_ACTIVITY_LIMIT))
        return out

    def employee_overview(self) -> list[dict]:
        """Each employee with today/week/month hours and payment."""

        windows = {name: self.get_aggregate_stats(start=start) for name, start in self.window_starts().items()}
        out: list[dict] = []
        for e in self._employees.list_all():
            row = {"employee": e}
            for name, agg in windows.items():
                row[name] = agg.per_employee.get(e.employee_id, ZERO_STATS)
            out.append(row)
        return out

    def build_summary_export(self, *, employee_id: Optional[int] = None) -> ReportData:
        rows: list[dict] = []
        for item in self.employee_overview():
            e = item["employee"]
            if employee_id is not None and e.employee_id != employee_id:
                continue
            rows.append(
                {
                    "employee": e.name,
                    "email": e.email,
                    "hourly_rate": e.hourly_rate,
                    "hours_today": item["today"].hours,
                    "payment_today": item["today"].payment,
                    "hours_week": item["week"].hours,
                    "payment_week": item["week"].payment,
                    "hours_month": item["month"].hours,
                    "payment_month": item["month"].payment,
                }
            )
        return ReportData(rows=rows, summary=[])

    def build_sessions_export(
        self,
        *,
        period: ExportPeriod = ExportPeriod.ALL,
        employee_id: Optional[int] = None,
    ) -> ReportData:
        """One row per arrival with its paired departure, duration and pay."""

        start = None if period == ExportPeriod.ALL else self.window_starts()[_WINDOW_FOR_PERIOD[period]]
        records = self._attendance.get_records_in_range(employee_id=employee_id, start=start)
        rates = self._rates()
        tz = self._clock.tz

        by_employee: dict[int, list] = {}
        for r in records:
            by_employee.setdefault(r.employee_id, []).append(r)

        rows: list[dict] = []
        summary: list[dict] = []
        for emp_id, emp_records in by_employee.items():
            rate = rates.get(emp_id, self._default_rate)
            for session in self._calculator.pair(emp_records):
                arrival = session.arrival.timestamp.astimezone(tz)
                row = {
                    "employee": session.arrival.employee_name,
                    "date": arrival.strftime("%Y-%m-%d"),
                    "arrival": arrival.strftime("%H:%M:%S"),
                    "departure": "-",
                    "hours": "-",
                    "payment": "-",
                    "auto_generated": False,
                }
                if session.departure is not None:
                    hours = round_2(Decimal(str(session.seconds)) / Decimal(3600))
                    row.update(
                        departure=session.departure.timestamp.astimezone(tz).strftime("%H:%M:%S"),
                        hours=hours,
                        payment=round_2(hours * rate),
                        auto_generated=session.departure.auto_generated,
                    )
                rows.append(row)

            stats = self._calculator.compute(emp_records, rate)
            summary.append(
                {
                    "employee_id": emp_id,
                    "employee": emp_records[0].employee_name,
                    "hours": stats.hours,
                    "payment": stats.payment,
                }
            )

        summary.sort(key=lambda x: x["hours"], reverse=True)
        return ReportData(rows=rows, summary=summary)

    def _rates(self) -> dict[int, Decimal]:
        return {e.employee_id: e.hourly_rate for e in self._employees.list_all()}


_WINDOW_FOR_PERIOD = {
    ExportPeriod.DAY: "today",
    ExportPeriod.WEEK: "week",
    ExportPeriod.MONTH: "month",
}
