"""Settings shared by every environment, read from the process environment."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def env_list(name: str, default: str) -> tuple:
    raw = os.getenv(name) or default
    return tuple(code.strip() for code in raw.split(",") if code.strip())


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qrchek"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

# Accepted QR payloads (VALID_QR_CODE kept for single-code deployments)
VALID_QR_CODES = env_list("VALID_QR_CODES", os.getenv("VALID_QR_CODE", "QRCHEK-2024-COMPANY"))

TIMEZONE = os.getenv("TIMEZONE", "Europe/Bratislava")
AUTO_CHECKOUT_TIME = os.getenv("AUTO_CHECKOUT_TIME", "20:00")
SCAN_COOLDOWN_SECONDS = int(os.getenv("SCAN_COOLDOWN_SECONDS", "60"))
DEFAULT_HOURLY_RATE = os.getenv("DEFAULT_HOURLY_RATE", "5.00")
PENDING_MAX_AGE_DAYS = int(os.getenv("PENDING_MAX_AGE_DAYS", "7"))
TOKEN_MAX_AGE_DAYS = int(os.getenv("TOKEN_MAX_AGE_DAYS", "7"))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password123")
