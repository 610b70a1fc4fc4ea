from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import date_arg, json_body
from ..common.serializers import record_payload, stats_payload
from ..container import Container
from ..core.enums import GateAction
from ..users.guards import build_guards


def register(app: Flask, container: Container) -> None:
    login_required, _ = build_guards(container)
    tz = container.clock.tz

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_scan")
    @login_required
    def attendance_scan():
        """QR scan: arrival or departure is decided from the last record."""

        data = json_body()
        result = container.attendance_service.submit_scan(
            g.employee.employee_id,
            qr_code=data.get("qrCode"),
        )
        return jsonify({
            "success": True,
            "record": record_payload(result.record),
            "cooldownSeconds": result.cooldown_remaining,
        }), 201

    @app.route("/api/attendance/me", methods=["GET"], endpoint="attendance_me")
    @login_required
    def attendance_me():
        rows = container.attendance_service.history(g.employee.employee_id)
        return jsonify([record_payload(r) for r in rows])

    @app.route("/api/attendance/<int:record_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def attendance_update(record_id: int):
        data = json_body()
        record = container.attendance_service.update_type(record_id, data.get("type"), actor=g.employee)
        return jsonify({"success": True, "record": record_payload(record)})

    @app.route("/api/attendance/<int:record_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    def attendance_delete(record_id: int):
        container.attendance_service.delete(record_id, actor=g.employee)
        return jsonify({"success": True, "message": "Record deleted"})

    @app.route("/api/attendance/pending-departure", methods=["GET"], endpoint="attendance_pending_departure")
    @login_required
    def attendance_pending_departure():
        gate = container.confirmation_gate.start_session(g.employee)
        if not gate.blocked:
            return jsonify({"pending": False})
        return jsonify({"pending": True, "record": record_payload(gate.record)})

    @app.route(
        "/api/attendance/confirm-departure/<int:record_id>",
        methods=["POST"],
        endpoint="attendance_confirm_departure",
    )
    @login_required
    def attendance_confirm_departure(record_id: int):
        resolution = container.confirmation_gate.resolve(g.employee.employee_id, record_id, GateAction.CONFIRM)
        return jsonify({
            "success": resolution.confirmed,
            "unblocked": resolution.unblocked,
            "record": record_payload(resolution.record) if resolution.record else None,
        }), (200 if resolution.confirmed else 202)

    @app.route(
        "/api/attendance/dismiss-departure/<int:record_id>",
        methods=["POST"],
        endpoint="attendance_dismiss_departure",
    )
    @login_required
    def attendance_dismiss_departure(record_id: int):
        resolution = container.confirmation_gate.resolve(g.employee.employee_id, record_id, GateAction.DISMISS)
        return jsonify({"success": True, "unblocked": resolution.unblocked})

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        stats = container.payroll_report_service.get_employee_stats(
            g.employee.employee_id,
            date_arg("from", tz),
            date_arg("to", tz, end_of_day=True),
        )
        return jsonify(stats_payload(stats))
