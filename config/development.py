import os

from .base import *  # noqa: F401,F403
from .base import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-insecure-secret")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also create the bootstrap admin (ADMIN_EMAIL / ADMIN_PASSWORD)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")

AUTO_CHECKOUT_ENABLED = env_flag("ENABLE_AUTO_CHECKOUT", "0")
