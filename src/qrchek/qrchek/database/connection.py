from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import mysql.connector

DEFAULT_PORT = 3306
DEFAULT_CONNECT_TIMEOUT = 10


@dataclass(frozen=True)
class DBConfig:
    host: str
    user: str
    password: str
    database: str
    port: int = DEFAULT_PORT
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_mapping(cls, values: Mapping) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict. host/user/database are required."""
        missing = [k for k in ("host", "user", "database") if not values.get(k)]
        if missing:
            raise ValueError(f"DB_CONFIG is missing: {', '.join(missing)}")
        return cls(
            host=str(values["host"]),
            user=str(values["user"]),
            password=str(values.get("password") or ""),
            database=str(values["database"]),
            port=int(values.get("port") or DEFAULT_PORT),
            connect_timeout=int(values.get("connect_timeout") or DEFAULT_CONNECT_TIMEOUT),
        )

    def describe(self) -> str:
        # never includes the password; safe for logs
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Connection factory for the MySQL repositories.

    Every repository call opens a short-lived connection. Sessions run in UTC
    so DATETIME columns hold UTC and the services convert to the business
    timezone.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @property
    def target(self) -> str:
        return self._config.describe()

    def connect(self):
        c = self._config
        return mysql.connector.connect(
            host=c.host,
            port=c.port,
            user=c.user,
            password=c.password,
            database=c.database,
            connection_timeout=c.connect_timeout,
            time_zone="+00:00",
        )

    def ping(self) -> None:
        conn = self.connect()
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.fetchall()
            cur.close()
        finally:
            conn.close()
