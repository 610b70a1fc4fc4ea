from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time, timedelta
from decimal import Decimal
from typing import Callable, Optional

from .attendance.confirmation import PendingConfirmationGate
from .attendance.cooldown import CooldownGovernor
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .autocheckout.scheduler import AutoCheckoutScheduler
from .autocheckout.service import AutoCheckoutService
from .common.clock import Clock, SystemClock, get_timezone
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import PayrollReportService
from .users.mysql_user_repository import MySQLEmployeeRepository
from .users.repository import EmployeeRepository
from .users.service import AuthService, EmployeeService
from .users.tokens import TokenService


@dataclass(frozen=True)
class ContainerOptions:
    secret_key: str
    timezone: str = constants.DEFAULT_TIMEZONE
    auto_checkout_time: time = constants.DEFAULT_AUTO_CHECKOUT_TIME
    scan_cooldown_seconds: int = constants.DEFAULT_SCAN_COOLDOWN_SECONDS
    default_rate: Decimal = constants.DEFAULT_HOURLY_RATE
    valid_qr_codes: tuple[str, ...] = constants.DEFAULT_VALID_QR_CODES
    pending_max_age_days: Optional[int] = constants.DEFAULT_PENDING_MAX_AGE_DAYS
    token_max_age_days: int = constants.DEFAULT_TOKEN_MAX_AGE_DAYS


def _no_ping() -> None:
    return None


@dataclass(frozen=True)
class Container:
    options: ContainerOptions
    clock: Clock

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    confirmation_gate: PendingConfirmationGate
    payroll_report_service: PayrollReportService
    auto_checkout_service: AutoCheckoutService
    auto_checkout_scheduler: AutoCheckoutScheduler

    ping: Callable[[], None] = field(default=_no_ping)


def assemble_container(
    *,
    options: ContainerOptions,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    clock: Optional[Clock] = None,
    ping: Callable[[], None] = _no_ping,
) -> Container:
    """Wire services on top of any repository implementation (MySQL or fakes)."""

    clock = clock or SystemClock(get_timezone(options.timezone))

    tokens = TokenService(options.secret_key, max_age_seconds=options.token_max_age_days * 86400)
    auth_service = AuthService(employees_repo, tokens, default_rate=options.default_rate)
    employee_service = EmployeeService(employees_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        clock=clock,
        cooldown=CooldownGovernor(options.scan_cooldown_seconds),
        valid_qr_codes=options.valid_qr_codes,
    )
    max_age = timedelta(days=options.pending_max_age_days) if options.pending_max_age_days else None
    confirmation_gate = PendingConfirmationGate(attendance_repo, clock=clock, max_age=max_age)
    payroll_report_service = PayrollReportService(
        attendance_repo,
        employees_repo,
        clock=clock,
        default_rate=options.default_rate,
    )
    auto_checkout_service = AutoCheckoutService(attendance_repo, clock=clock, cutoff=options.auto_checkout_time)
    auto_checkout_scheduler = AutoCheckoutScheduler(auto_checkout_service, timezone=clock.tz)

    return Container(
        options=options,
        clock=clock,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        auth_service=auth_service,
        employee_service=employee_service,
        attendance_service=attendance_service,
        confirmation_gate=confirmation_gate,
        payroll_report_service=payroll_report_service,
        auto_checkout_service=auto_checkout_service,
        auto_checkout_scheduler=auto_checkout_scheduler,
        ping=ping,
    )


def build_container(*, db_config: dict, options: ContainerOptions) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return assemble_container(
        options=options,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        ping=conn.ping,
    )
