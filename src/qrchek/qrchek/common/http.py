from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, tzinfo
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AccountPendingError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    CooldownError,
    DomainError,
    InvalidQRCodeError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from .clock import localize, parse_iso_date

logger = logging.getLogger(__name__)

_STATUS = (
    (InvalidQRCodeError, 400),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AccountPendingError, 403),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (CooldownError, 429),
    (StoreUnavailableError, 503),
)


def status_for(exc: DomainError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        body: dict = {"success": False, "error": str(exc)}
        if isinstance(exc, CooldownError):
            body.update(cooldown=True, remainingSeconds=exc.remaining_seconds)
        elif isinstance(exc, InvalidQRCodeError):
            body["invalidQR"] = True
        elif isinstance(exc, AccountPendingError):
            body["pendingApproval"] = True
        elif isinstance(exc, StoreUnavailableError):
            logger.error("Store unavailable on %s %s", request.method, request.path, exc_info=exc)
            body["error"] = "Service temporarily unavailable, please try again"
        return jsonify(body), status_for(exc)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"success": False, "error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "error": "Internal server error"}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_arg(name: str, tz: tzinfo, *, end_of_day: bool = False) -> Optional[datetime]:
    """?from=YYYY-MM-DD&to=YYYY-MM-DD -> aware bounds; ``to`` is inclusive."""

    raw = request.args.get(name)
    if not raw:
        return None
    try:
        day = parse_iso_date(raw)
    except ValueError as e:
        raise ValidationError(f"'{name}' must be a date like 2024-01-31") from e

    if end_of_day:
        day = day + timedelta(days=1)
    return localize(tz, datetime.combine(day, time.min))
