"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

DEFAULT_HOURLY_RATE = Decimal("5.00")
DEFAULT_SCAN_COOLDOWN_SECONDS = 60
DEFAULT_AUTO_CHECKOUT_TIME = time(20, 0)
DEFAULT_TIMEZONE = "Europe/Bratislava"
DEFAULT_PENDING_MAX_AGE_DAYS = 7
DEFAULT_TOKEN_MAX_AGE_DAYS = 7
DEFAULT_HISTORY_LIMIT = 200
DEFAULT_RECENT_ACTIVITY_LIMIT = 10
DEFAULT_VALID_QR_CODES = ("QRCHEK-2024-COMPANY",)

MIN_PASSWORD_LENGTH = 6
WEEK_DAYS = 7
MONTH_DAYS = 30

MONEY_QUANTUM = Decimal("0.01")
