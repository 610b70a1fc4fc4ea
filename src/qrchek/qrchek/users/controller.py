from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..common.serializers import iso, record_payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        employee = container.auth_service.register(
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            password=str(data.get("password") or ""),
        )
        return jsonify({
            "message": "Registration successful. Please wait for an admin to verify your account.",
            "email": employee.email,
        }), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        s_employee = container.auth_service.authenticate(
            str(data.get("email") or ""),
            str(data.get("password") or ""),
        )

        employee = container.employee_service.get_employee(s_employee.employee_id)
        gate = container.confirmation_gate.start_session(employee)

        return jsonify({
            "token": s_employee.token,
            "employee": {
                "id": s_employee.employee_id,
                "name": s_employee.name,
                "email": s_employee.email,
                "isAdmin": s_employee.is_admin,
            },
            "pendingDeparture": {
                "pending": gate.blocked,
                "record": record_payload(gate.record) if gate.record else None,
                "departureTime": iso(gate.record.timestamp) if gate.record else None,
            },
        }), 200
