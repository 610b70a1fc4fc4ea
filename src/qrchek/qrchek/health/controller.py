from __future__ import annotations

import logging
import time

from flask import Flask, jsonify

from ..common.serializers import iso
from ..container import Container

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def register(app: Flask, container: Container) -> None:
    started = time.monotonic()

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        body: dict = {
            "status": "healthy",
            "timestamp": iso(container.clock.now()),
            "uptime": round(time.monotonic() - started, 3),
            "version": VERSION,
            "checks": {
                "database": {"status": "up"},
                "autoCheckout": {"scheduled": container.auto_checkout_scheduler.started},
            },
        }

        try:
            t0 = time.monotonic()
            container.ping()
            body["checks"]["database"]["latencyMs"] = round((time.monotonic() - t0) * 1000, 2)
        except Exception as e:
            logger.warning("Health check: database down (%s)", e)
            body["checks"]["database"] = {"status": "down", "error": str(e)}
            body["status"] = "unhealthy"
            return jsonify(body), 503

        try:
            body["stats"] = {
                "employeeCount": container.employees_repo.count(),
                "attendanceCount": container.attendance_repo.count(),
            }
        except Exception:
            logger.exception("Error getting health stats")

        return jsonify(body), 200

    @app.route("/api/health/ping", methods=["GET"], endpoint="health_ping")
    def health_ping():
        return jsonify({"pong": True, "timestamp": iso(container.clock.now())})

    @app.route("/api/health/ready", methods=["GET"], endpoint="health_ready")
    def health_ready():
        try:
            container.ping()
        except Exception:
            logger.warning("Readiness check failed", exc_info=True)
            return jsonify({"ready": False}), 503
        return jsonify({"ready": True})

    @app.route("/api/health/live", methods=["GET"], endpoint="health_live")
    def health_live():
        return jsonify({"live": True})
