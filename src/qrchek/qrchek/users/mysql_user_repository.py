from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_timestamp
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "id, name, email, password_hash, hourly_rate, is_admin, is_verified, created_at"


def _to_employee(row: dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        hourly_rate=Decimal(str(row["hourly_rate"])),
        is_admin=bool(row.get("is_admin")),
        is_verified=bool(row.get("is_verified")),
        created_at=from_db_timestamp(row.get("created_at")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY id ASC")
            return [_to_employee(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(name, email, password_hash, hourly_rate, is_admin, is_verified)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, email, password_hash, hourly_rate, int(is_admin), int(is_verified)),
            )
            new_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (new_id,))
            return _to_employee(fetchone(cur))

    def update_employee(
        self,
        employee_id: int,
        *,
        hourly_rate: Optional[Decimal] = None,
        is_admin: Optional[bool] = None,
        is_verified: Optional[bool] = None,
        password_hash: Optional[str] = None,
    ) -> Optional[Employee]:
        sets: list[str] = []
        params: list[object] = []
        if hourly_rate is not None:
            sets.append("hourly_rate=%s")
            params.append(hourly_rate)
        if is_admin is not None:
            sets.append("is_admin=%s")
            params.append(int(is_admin))
        if is_verified is not None:
            sets.append("is_verified=%s")
            params.append(int(is_verified))
        if password_hash is not None:
            sets.append("password_hash=%s")
            params.append(password_hash)

        if not sets:
            return self.get_by_id(employee_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET {', '.join(sets)} WHERE id=%s",
                (*params, int(employee_id)),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employees")
            return int(fetchone(cur)["n"])
