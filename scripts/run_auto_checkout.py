"""Run the auto-checkout sweep once, outside the server's timer.

Safe to repeat: employees already closed are not found again.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.qrchek.qrchek.container import build_container
from src.qrchek.qrchek.main import options_from_settings


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG), options=options_from_settings(settings))

    result = container.auto_checkout_scheduler.run_now()
    print(f"OK: processed={result.processed} cutoff={result.cutoff.isoformat()} employees={', '.join(result.employees) or '-'}")


if __name__ == "__main__":
    main()
