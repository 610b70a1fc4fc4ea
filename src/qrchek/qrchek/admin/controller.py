from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.http import date_arg, json_body
from ..common.serializers import employee_payload, iso, money, record_payload, stats_payload
from ..container import Container
from ..core.enums import ExportPeriod
from ..core.exceptions import ValidationError
from ..users.guards import build_guards

SUMMARY_FIELDS = [
    "employee",
    "email",
    "hourly_rate",
    "hours_today",
    "payment_today",
    "hours_week",
    "payment_week",
    "hours_month",
    "payment_month",
]

SESSION_FIELDS = ["employee", "date", "arrival", "departure", "hours", "payment", "auto_generated"]


def register(app: Flask, container: Container) -> None:
    _, admin_required = build_guards(container)
    tz = container.clock.tz

    def _write_csv(*, rows, fieldnames, filename: str):
        """Write report rows to a CSV attachment."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_employees")
    @admin_required
    def admin_employees():
        out = []
        for item in container.payroll_report_service.employee_overview():
            payload = employee_payload(item["employee"])
            payload.update(
                today=stats_payload(item["today"]),
                week=stats_payload(item["week"]),
                month=stats_payload(item["month"]),
            )
            out.append(payload)
        return jsonify(out)

    @app.route("/api/admin/employees/<int:employee_id>", methods=["PUT"], endpoint="admin_update_employee")
    @admin_required
    def admin_update_employee(employee_id: int):
        data = json_body()
        is_admin = data.get("isAdmin")
        verified = data.get("emailVerified")
        updated = container.employee_service.update_settings(
            employee_id,
            hourly_rate=data.get("hourlyRate"),
            is_admin=is_admin if isinstance(is_admin, bool) else None,
            is_verified=verified if isinstance(verified, bool) else None,
        )
        return jsonify({"success": True, "employee": employee_payload(updated)})

    @app.route("/api/admin/employees/<int:employee_id>/verify", methods=["POST"], endpoint="admin_verify_employee")
    @admin_required
    def admin_verify_employee(employee_id: int):
        updated = container.employee_service.verify(employee_id)
        return jsonify({
            "success": True,
            "message": "Employee verified successfully",
            "employee": employee_payload(updated),
        })

    @app.route(
        "/api/admin/employees/<int:employee_id>/reset-password",
        methods=["POST"],
        endpoint="admin_reset_password",
    )
    @admin_required
    def admin_reset_password(employee_id: int):
        data = json_body()
        container.employee_service.reset_password(employee_id, str(data.get("newPassword") or ""))
        return jsonify({"success": True, "message": "Password reset successfully"})

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_required
    def admin_stats():
        stats = container.payroll_report_service.dashboard_stats()
        body = {"employees": stats["employees"]}
        for window in ("today", "week", "month"):
            w = stats[window]
            body[window] = {"scans": w["scans"], "hours": money(w["hours"]), "payment": money(w["payment"])}
        body["recentActivity"] = [record_payload(r) for r in stats["recent_activity"]]
        return jsonify(body)

    @app.route("/api/admin/aggregate", methods=["GET"], endpoint="admin_aggregate")
    @admin_required
    def admin_aggregate():
        agg = container.payroll_report_service.get_aggregate_stats(
            date_arg("from", tz),
            date_arg("to", tz, end_of_day=True),
        )
        return jsonify({
            "from": iso(agg.start),
            "to": iso(agg.end),
            "scans": agg.scans,
            "employees": {str(emp_id): stats_payload(s) for emp_id, s in agg.per_employee.items()},
            "totals": stats_payload(agg.totals),
        })

    @app.route("/api/admin/export", methods=["GET"], endpoint="admin_export")
    @admin_required
    def admin_export():
        raw_employee = request.args.get("employeeId")
        try:
            employee_id = int(raw_employee) if raw_employee else None
        except ValueError as e:
            raise ValidationError("employeeId must be a number") from e

        if request.args.get("type") == "summary":
            data = container.payroll_report_service.build_summary_export(employee_id=employee_id)
            return _write_csv(rows=data.rows, fieldnames=SUMMARY_FIELDS, filename="employee-summary.csv")

        try:
            period = ExportPeriod(request.args.get("period") or ExportPeriod.ALL.value)
        except ValueError as e:
            raise ValidationError("period must be day, week, month or all") from e

        data = container.payroll_report_service.build_sessions_export(period=period, employee_id=employee_id)
        return _write_csv(rows=data.rows, fieldnames=SESSION_FIELDS, filename=f"attendance-{period.value}.csv")

    @app.route("/api/admin/missing-departures", methods=["GET"], endpoint="admin_missing_departures")
    @admin_required
    def admin_missing_departures():
        now = container.clock.now()
        rates = {e.employee_id: e.hourly_rate for e in container.employee_service.list_employees()}
        rows = container.attendance_repo.find_employees_with_open_arrival(now)
        return jsonify([
            {
                "id": r.employee_id,
                "name": r.name,
                "email": r.email,
                "hourlyRate": money(rates.get(r.employee_id, container.options.default_rate)),
                "lastArrival": iso(r.last_arrival),
                "status": "missing",
            }
            for r in rows
        ])

    @app.route("/api/admin/pending-confirmations", methods=["GET"], endpoint="admin_pending_confirmations")
    @admin_required
    def admin_pending_confirmations():
        employees = {e.employee_id: e for e in container.employee_service.list_employees()}
        out = []
        for r in container.attendance_repo.find_pending_confirmations():
            e = employees.get(r.employee_id)
            out.append({
                "id": r.record_id,
                "employeeId": r.employee_id,
                "employeeName": r.employee_name,
                "email": e.email if e else "",
                "hourlyRate": money(e.hourly_rate if e else container.options.default_rate),
                "departureTime": iso(r.timestamp),
                "status": "pending_confirmation",
            })
        return jsonify(out)

    @app.route("/api/admin/auto-checkout", methods=["POST"], endpoint="admin_auto_checkout")
    @admin_required
    def admin_auto_checkout():
        result = container.auto_checkout_scheduler.run_now()
        return jsonify({
            "success": True,
            "message": f"Auto-checkout completed. Processed {result.processed} employees.",
            "processed": result.processed,
            "employees": result.employees,
            "cutoff": iso(result.cutoff),
        })
