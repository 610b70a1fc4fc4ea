"""Create the bootstrap admin, or reset its password and flags if it exists.

Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD (see config/base.py).
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.qrchek.qrchek.database.bootstrap import ensure_admin_user


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    created = ensure_admin_user(
        dict(settings.DB_CONFIG),
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD,
    )
    print(f"OK: {'Created' if created else 'Updated'} admin user {settings.ADMIN_EMAIL}")


if __name__ == "__main__":
    main()
