from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_HOURLY_RATE


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Plain data object (no DB access code). ``is_verified`` means approved by an
    admin, employees never verify themselves.
    """

    employee_id: int
    name: str
    email: str
    password_hash: str
    hourly_rate: Decimal = DEFAULT_HOURLY_RATE
    is_admin: bool = False
    is_verified: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionEmployee:
    """What the login endpoint hands back to the client."""

    employee_id: int
    name: str
    email: str
    is_admin: bool
    token: str
