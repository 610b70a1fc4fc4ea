from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
AUTO_CHECKOUT_ENABLED = False

VALID_QR_CODES = ("QRCHEK-2024-COMPANY",)
SCAN_COOLDOWN_SECONDS = 60
