from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create_employee(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        hourly_rate: Decimal,
        is_admin: bool = False,
        is_verified: bool = False,
    ) -> Employee:
        raise NotImplementedError

    def update_employee(
        self,
        employee_id: int,
        *,
        hourly_rate: Optional[Decimal] = None,
        is_admin: Optional[bool] = None,
        is_verified: Optional[bool] = None,
        password_hash: Optional[str] = None,
    ) -> Optional[Employee]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
