from __future__ import annotations

from datetime import datetime

import pytest

from src.qrchek.qrchek.core.enums import RecordType

QR = "QRCHEK-2024-COMPANY"


def _login(client, email, password):
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.get_json()
    return res.get_json()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_token(client, alice):
    return _login(client, "alice@example.com", "alicepw")["token"]


@pytest.fixture
def admin_token(client, admin):
    return _login(client, "admin@example.com", "adminpw")["token"]


def test_health_endpoints(client):
    assert client.get("/api/health/live").get_json() == {"live": True}
    assert client.get("/api/health/ready").status_code == 200

    body = client.get("/api/health").get_json()
    assert body["status"] == "healthy"
    assert body["stats"]["employeeCount"] == 3
    assert body["checks"]["autoCheckout"]["scheduled"] is False


def test_unknown_route_is_json_404(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.get_json()["success"] is False


def test_register_then_login_is_pending(client):
    res = client.post("/api/auth/register", json={"name": "Carol", "email": "carol@example.com", "password": "carolpw"})
    assert res.status_code == 201

    res = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "carolpw"})
    assert res.status_code == 403
    assert res.get_json()["pendingApproval"] is True


def test_bad_credentials(client, alice):
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
    assert res.status_code == 401


def test_scan_requires_token(client):
    res = client.post("/api/attendance", json={"qrCode": QR})
    assert res.status_code == 401


def test_scan_without_qr_code_is_rejected(client, alice_token, attendance):
    res = client.post("/api/attendance", json={}, headers=_auth(alice_token))
    assert res.status_code == 400
    assert res.get_json()["success"] is False

    res = client.post("/api/attendance", json={"qrCode": None}, headers=_auth(alice_token))
    assert res.status_code == 400
    assert attendance.count() == 0


def test_scan_flow_with_cooldown(client, alice_token, clock):
    res = client.post("/api/attendance", json={"qrCode": "WRONG"}, headers=_auth(alice_token))
    assert res.status_code == 400
    assert res.get_json()["invalidQR"] is True

    res = client.post("/api/attendance", json={"qrCode": QR}, headers=_auth(alice_token))
    assert res.status_code == 201
    assert res.get_json()["record"]["type"] == "arrival"
    assert res.get_json()["cooldownSeconds"] == 60

    res = client.post("/api/attendance", json={"qrCode": QR}, headers=_auth(alice_token))
    assert res.status_code == 429
    assert res.get_json()["remainingSeconds"] == 60

    clock.advance(hours=8)
    res = client.post("/api/attendance", json={"qrCode": QR}, headers=_auth(alice_token))
    assert res.get_json()["record"]["type"] == "departure"

    stats = client.get("/api/attendance/stats", headers=_auth(alice_token)).get_json()
    assert stats == {"hours": 8.0, "payment": 80.0}

    history = client.get("/api/attendance/me", headers=_auth(alice_token)).get_json()
    assert [r["type"] for r in history] == ["departure", "arrival"]


def test_employee_cannot_use_admin_routes(client, alice_token):
    assert client.get("/api/admin/stats", headers=_auth(alice_token)).status_code == 403


def test_auto_checkout_then_confirmation_on_login(client, attendance, alice, admin_token, tz):
    attendance.insert_record(
        employee_id=alice.employee_id,
        employee_name=alice.name,
        record_type=RecordType.ARRIVAL,
        timestamp=tz.localize(datetime(2024, 3, 12, 9, 0)),
    )

    res = client.post("/api/admin/auto-checkout", headers=_auth(admin_token))
    assert res.status_code == 200
    assert res.get_json()["employees"] == ["Alice"]

    pending = client.get("/api/admin/pending-confirmations", headers=_auth(admin_token)).get_json()
    assert [p["employeeName"] for p in pending] == ["Alice"]

    login = _login(client, "alice@example.com", "alicepw")
    assert login["pendingDeparture"]["pending"] is True
    record_id = login["pendingDeparture"]["record"]["id"]
    token = login["token"]

    res = client.post(f"/api/attendance/confirm-departure/{record_id}", headers=_auth(token))
    assert res.status_code == 200
    assert res.get_json()["record"]["confirmed"] is True

    res = client.get("/api/attendance/pending-departure", headers=_auth(token))
    assert res.get_json() == {"pending": False}


def test_admin_updates_rate_and_exports_csv(client, admin_token, bob, attendance, tz):
    res = client.put(
        f"/api/admin/employees/{bob.employee_id}",
        json={"hourlyRate": 7.5},
        headers=_auth(admin_token),
    )
    assert res.get_json()["employee"]["hourlyRate"] == 7.5

    attendance.insert_record(
        employee_id=bob.employee_id,
        employee_name=bob.name,
        record_type=RecordType.ARRIVAL,
        timestamp=tz.localize(datetime(2024, 3, 13, 6, 0)),
    )
    attendance.insert_record(
        employee_id=bob.employee_id,
        employee_name=bob.name,
        record_type=RecordType.DEPARTURE,
        timestamp=tz.localize(datetime(2024, 3, 13, 8, 0)),
    )

    res = client.get("/api/admin/export?period=day", headers=_auth(admin_token))
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    text = res.data.decode("utf-8-sig")
    assert text.splitlines()[0] == "employee,date,arrival,departure,hours,payment,auto_generated"
    assert "Bob,2024-03-13,06:00:00,08:00:00,2.00,15.00,False" in text

    res = client.get("/api/admin/export?period=year", headers=_auth(admin_token))
    assert res.status_code == 400
