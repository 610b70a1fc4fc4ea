from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.qrchek.qrchek.common.clock import FixedClock, get_timezone
from src.qrchek.qrchek.container import ContainerOptions, assemble_container
from tests.fakes import InMemoryAttendance, InMemoryEmployees

QR_CODE = "QRCHEK-2024-COMPANY"


@pytest.fixture
def tz():
    return get_timezone("Europe/Bratislava")


@pytest.fixture
def fixed_now(tz):
    # Wednesday morning, local time
    return tz.localize(datetime(2024, 3, 13, 10, 0))


@pytest.fixture
def clock(fixed_now):
    return FixedClock(fixed_now)


@pytest.fixture
def employees():
    repo = InMemoryEmployees()
    repo.add("Admin User", "admin@example.com", password="adminpw", hourly_rate=Decimal("10.00"), is_admin=True)
    repo.add("Alice", "alice@example.com", password="alicepw", hourly_rate=Decimal("10.00"))
    repo.add("Bob", "bob@example.com", password="bobpw1", hourly_rate=Decimal("5.00"))
    return repo


@pytest.fixture
def admin(employees):
    return employees.get_by_email("admin@example.com")


@pytest.fixture
def alice(employees):
    return employees.get_by_email("alice@example.com")


@pytest.fixture
def bob(employees):
    return employees.get_by_email("bob@example.com")


@pytest.fixture
def attendance(employees):
    return InMemoryAttendance(employees)


@pytest.fixture
def options():
    return ContainerOptions(secret_key="test-secret", valid_qr_codes=(QR_CODE,))


@pytest.fixture
def container(options, employees, attendance, clock):
    return assemble_container(options=options, employees_repo=employees, attendance_repo=attendance, clock=clock)


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.qrchek.qrchek.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()
