from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errors as mysql_errors

from ..core.exceptions import StoreUnavailableError
from .connection import DatabaseConnection

# Connection-level failures are transient; constraint/programming errors are not.
_TRANSIENT_ERRORS = (mysql_errors.InterfaceError, mysql_errors.OperationalError, mysql_errors.PoolError)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except _TRANSIENT_ERRORS as e:
        raise StoreUnavailableError("Database is unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except _TRANSIENT_ERRORS as e:
        _safe_rollback(conn)
        raise StoreUnavailableError("Database is unavailable") from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        # The connection is already broken; the original error is what matters.
        pass


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_db_timestamp(value: datetime) -> datetime:
    """Aware datetime -> naive UTC for DATETIME(6) columns."""

    if value.tzinfo is None:
        raise ValueError("Refusing to store a naive timestamp")
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_db_timestamp(value: Any) -> Optional[datetime]:
    """DATETIME columns hold UTC; hand back aware datetimes."""

    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
