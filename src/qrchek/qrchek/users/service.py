from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_HOURLY_RATE, MIN_PASSWORD_LENGTH
from ..core.exceptions import (
    AccountPendingError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import Employee, SessionEmployee
from .repository import EmployeeRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: register and authenticate employees."""

    def __init__(
        self,
        employees: EmployeeRepository,
        tokens: TokenService,
        *,
        default_rate: Decimal = DEFAULT_HOURLY_RATE,
    ):
        self._employees = employees
        self._tokens = tokens
        self._default_rate = default_rate

    def register(self, *, name: str, email: str, password: str) -> Employee:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        employee = self._employees.create_employee(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            hourly_rate=self._default_rate,
            is_admin=False,
            is_verified=False,
        )
        logger.info("Registered employee %s, waiting for admin approval", employee.email)
        return employee

    def authenticate(self, email: str, password: str) -> SessionEmployee:
        if not email or not password:
            raise ValidationError("Email and password are required")

        employee = self._employees.get_by_email(email.strip())
        if not employee:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(employee.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        if not employee.is_verified and not employee.is_admin:
            raise AccountPendingError(
                "Your account is pending admin approval. Please wait for an admin to verify your account."
            )

        return SessionEmployee(
            employee_id=employee.employee_id,
            name=employee.name,
            email=employee.email,
            is_admin=employee.is_admin,
            token=self._tokens.issue(employee.employee_id),
        )

    def employee_for_token(self, token: str) -> Employee:
        employee_id = self._tokens.verify(token)
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise AuthenticationError("Invalid or expired token")
        return employee


class EmployeeService:
    """Use case: manage employees (admin)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update_settings(
        self,
        employee_id: int,
        *,
        hourly_rate: object = None,
        is_admin: Optional[bool] = None,
        is_verified: Optional[bool] = None,
    ) -> Employee:
        self.get_employee(employee_id)

        rate: Optional[Decimal] = None
        if hourly_rate is not None:
            rate = parse_rate(hourly_rate)

        updated = self._employees.update_employee(
            employee_id,
            hourly_rate=rate,
            is_admin=is_admin,
            is_verified=is_verified,
        )
        if not updated:
            raise NotFoundError("Employee not found")
        return updated

    def verify(self, employee_id: int) -> Employee:
        employee = self.update_settings(employee_id, is_verified=True)
        logger.info("Admin verified employee %s", employee.email)
        return employee

    def reset_password(self, employee_id: int, new_password: str) -> None:
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        employee = self.get_employee(employee_id)
        self._employees.update_employee(employee_id, password_hash=generate_password_hash(new_password))
        logger.info("Admin reset password for employee %s", employee.email)


def parse_rate(value: object) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError("Hourly rate must be a number")
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("Hourly rate must be a number") from e
    if not rate.is_finite() or rate < 0:
        raise ValidationError("Hourly rate must be zero or positive")
    return rate.quantize(Decimal("0.01"))
