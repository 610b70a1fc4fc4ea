from __future__ import annotations

import importlib
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .admin.controller import register as register_admin
from .attendance.controller import register as register_attendance
from .common.clock import parse_hhmm
from .common.http import register_error_handlers
from .container import Container, ContainerOptions, build_container
from .core import constants
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .database.connection import DBConfig
from .health.controller import register as register_health
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def options_from_settings(settings) -> ContainerOptions:
    qr_codes = getattr(settings, "VALID_QR_CODES", constants.DEFAULT_VALID_QR_CODES)
    max_age = getattr(settings, "PENDING_MAX_AGE_DAYS", constants.DEFAULT_PENDING_MAX_AGE_DAYS)
    return ContainerOptions(
        secret_key=getattr(settings, "SECRET_KEY"),
        timezone=getattr(settings, "TIMEZONE", constants.DEFAULT_TIMEZONE),
        auto_checkout_time=parse_hhmm(getattr(settings, "AUTO_CHECKOUT_TIME", "20:00")),
        scan_cooldown_seconds=int(getattr(settings, "SCAN_COOLDOWN_SECONDS", constants.DEFAULT_SCAN_COOLDOWN_SECONDS)),
        default_rate=Decimal(str(getattr(settings, "DEFAULT_HOURLY_RATE", constants.DEFAULT_HOURLY_RATE))),
        valid_qr_codes=tuple(qr_codes),
        pending_max_age_days=int(max_age) if max_age else None,
        token_max_age_days=int(getattr(settings, "TOKEN_MAX_AGE_DAYS", constants.DEFAULT_TOKEN_MAX_AGE_DAYS)),
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_admin_user(
                db_config,
                email=getattr(settings, "ADMIN_EMAIL", "admin@example.com"),
                password=getattr(settings, "ADMIN_PASSWORD", "password123"),
            )
            logger.info("bootstrap admin ready")

        container = build_container(db_config=db_config, options=options_from_settings(settings))

    app.extensions["qrchek"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_admin(app, container)
    register_health(app, container)

    if bool(getattr(settings, "AUTO_CHECKOUT_ENABLED", False)):
        container.auto_checkout_scheduler.start()
    else:
        logger.info("Auto-checkout job disabled (set ENABLE_AUTO_CHECKOUT=true to enable)")

    return app
