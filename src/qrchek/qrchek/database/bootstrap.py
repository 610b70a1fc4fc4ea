from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)


@contextmanager
def _connection(target: DBConfig, *, with_database: bool = True) -> Iterator:
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        connection_timeout=target.connect_timeout,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quotes; drops '--' comment lines."""

    buf: list[str] = []
    quote = ""
    escape = False

    for line in sql.splitlines(keepends=True):
        if not quote and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif quote:
                if ch == quote:
                    quote = ""
            elif ch in ("'", '"'):
                quote = ch
            elif ch == ";":
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue
            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    with _connection(target, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    """Apply schema.sql (idempotent: CREATE ... IF NOT EXISTS)."""

    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    with _connection(DBConfig.from_mapping(db_config)) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)


def ensure_admin_user(
    db_config: dict,
    *,
    email: str,
    password: str,
    name: str = "Admin User",
    hourly_rate: Decimal = Decimal("10.00"),
) -> bool:
    """Create or repair the bootstrap admin. Returns True when a row was created."""

    password_hash = generate_password_hash(password)
    with _connection(DBConfig.from_mapping(db_config)) as conn:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT id FROM employees WHERE LOWER(email)=LOWER(%s)", (email,))
        if cur.fetchone():
            cur.execute(
                "UPDATE employees SET password_hash=%s, is_admin=1, is_verified=1 WHERE LOWER(email)=LOWER(%s)",
                (password_hash, email),
            )
            logger.info("Updated existing admin user %s", email)
            return False

        cur.execute(
            """
            INSERT INTO employees(name, email, password_hash, hourly_rate, is_admin, is_verified)
            VALUES(%s,%s,%s,%s,1,1)
            """,
            (name, email.lower(), password_hash, hourly_rate),
        )
        logger.info("Created admin user %s", email)
        return True


def list_tables(db_config: dict) -> list[str]:
    with _connection(DBConfig.from_mapping(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
