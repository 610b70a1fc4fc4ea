from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import RecordType
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_timestamp, to_db_timestamp
from .model import AttendanceRecord, OpenArrival
from .repository import AttendanceRepository

_COLUMNS = "id, employee_id, employee_name, recorded_at, type, auto_generated, confirmed"


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        timestamp=from_db_timestamp(r["recorded_at"]),
        type=RecordType(r["type"]),
        auto_generated=bool(r.get("auto_generated")),
        confirmed=bool(r.get("confirmed")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_last_record(self, employee_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._last_record(cur, employee_id)

    def _last_record(self, cur, employee_id: int) -> Optional[AttendanceRecord]:
        cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE employee_id=%s
            ORDER BY recorded_at DESC, id DESC
            LIMIT 1
            """,
            (int(employee_id),),
        )
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get_records_in_range(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if start is not None:
            clauses.append("recorded_at >= %s")
            params.append(to_db_timestamp(start))
        if end is not None:
            clauses.append("recorded_at < %s")
            params.append(to_db_timestamp(end))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY recorded_at ASC, id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_recent(self, *, employee_id: Optional[int] = None, limit: int) -> Sequence[AttendanceRecord]:
        where = "WHERE employee_id=%s" if employee_id is not None else ""
        params: tuple = (int(employee_id), int(limit)) if employee_id is not None else (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                {where}
                ORDER BY recorded_at DESC, id DESC
                LIMIT %s
                """,
                params,
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert(
                cur,
                employee_id=employee_id,
                employee_name=employee_name,
                record_type=record_type,
                timestamp=timestamp,
                auto_generated=auto_generated,
                confirmed=confirmed,
            )

    def _insert(self, cur, *, employee_id, employee_name, record_type, timestamp, auto_generated, confirmed):
        cur.execute(
            """
            INSERT INTO attendance_records(employee_id, employee_name, type, recorded_at, auto_generated, confirmed)
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (
                int(employee_id),
                employee_name,
                record_type.value,
                to_db_timestamp(timestamp),
                int(auto_generated),
                int(confirmed),
            ),
        )
        return AttendanceRecord(
            record_id=int(cur.lastrowid),
            employee_id=int(employee_id),
            employee_name=employee_name,
            timestamp=timestamp,
            type=record_type,
            auto_generated=auto_generated,
            confirmed=confirmed,
        )

    def append_scan(
        self,
        *,
        employee_id: int,
        employee_name: str,
        record_type: RecordType,
        timestamp: datetime,
        expected_last_id: Optional[int],
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the employee serializes scans across server processes.
            cur.execute("SELECT id FROM employees WHERE id=%s FOR UPDATE", (int(employee_id),))
            if not fetchone(cur):
                raise NotFoundError("Employee not found")

            current = self._last_record(cur, employee_id)
            current_id = current.record_id if current else None
            if current_id != expected_last_id:
                raise ConflictError("Another scan was recorded at the same time, please retry")

            return self._insert(
                cur,
                employee_id=employee_id,
                employee_name=employee_name,
                record_type=record_type,
                timestamp=timestamp,
                auto_generated=False,
                confirmed=False,
            )

    def close_open_arrival(
        self,
        *,
        employee_id: int,
        employee_name: str,
        arrival_id: int,
        timestamp: datetime,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            # same row lock as append_scan, so sweeps on other workers wait here
            cur.execute("SELECT id FROM employees WHERE id=%s FOR UPDATE", (int(employee_id),))
            if not fetchone(cur):
                return None

            current = self._last_record(cur, employee_id)
            if current is None or current.record_id != int(arrival_id):
                return None

            return self._insert(
                cur,
                employee_id=employee_id,
                employee_name=employee_name,
                record_type=RecordType.DEPARTURE,
                timestamp=timestamp,
                auto_generated=True,
                confirmed=False,
            )

    def update_record_type(self, record_id: int, new_type: RecordType) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET type=%s WHERE id=%s",
                (new_type.value, int(record_id)),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def update_record_confirmed(self, record_id: int, confirmed: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET confirmed=%s WHERE id=%s",
                (int(confirmed), int(record_id)),
            )
            return cur.rowcount > 0

    def delete_record(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE id=%s", (int(record_id),))
            return cur.rowcount > 0

    def find_employees_with_open_arrival(self, as_of: datetime) -> Sequence[OpenArrival]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT e.id, e.name, e.email, latest.record_id, latest.recorded_at
                FROM employees e
                JOIN (
                    SELECT id AS record_id, employee_id, type, recorded_at,
                           ROW_NUMBER() OVER (PARTITION BY employee_id ORDER BY recorded_at DESC, id DESC) AS rn
                    FROM attendance_records
                    WHERE recorded_at <= %s
                ) latest ON latest.employee_id = e.id AND latest.rn = 1
                WHERE latest.type = 'arrival'
                ORDER BY e.id ASC
                """,
                (to_db_timestamp(as_of),),
            )
            return [
                OpenArrival(
                    employee_id=int(r["id"]),
                    name=r["name"],
                    email=r["email"],
                    last_arrival=from_db_timestamp(r["recorded_at"]),
                    arrival_id=int(r["record_id"]),
                )
                for r in fetchall(cur)
            ]

    def find_pending_confirmations(self, *, employee_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        clauses = ["auto_generated=1", "confirmed=0"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(clauses)}
                ORDER BY recorded_at DESC, id DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records")
            return int(fetchone(cur)["n"])
