from datetime import timedelta

import pytest

from src.qrchek.qrchek.attendance.confirmation import PendingConfirmationGate
from src.qrchek.qrchek.core.enums import GateAction, RecordType
from src.qrchek.qrchek.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _synthetic(attendance, employee, ts):
    return attendance.insert_record(
        employee_id=employee.employee_id,
        employee_name=employee.name,
        record_type=RecordType.DEPARTURE,
        timestamp=ts,
        auto_generated=True,
    )


@pytest.fixture
def gate(attendance, clock):
    return PendingConfirmationGate(attendance, clock=clock, max_age=timedelta(days=7))


def test_no_pending_record_means_not_blocked(gate, alice):
    state = gate.start_session(alice)
    assert state.blocked is False
    assert state.record is None


def test_unconfirmed_synthetic_departure_blocks_session(gate, attendance, alice, fixed_now):
    rec = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))

    state = gate.start_session(alice)
    assert state.blocked is True
    assert state.record.record_id == rec.record_id


def test_newest_pending_record_is_surfaced(gate, attendance, alice, fixed_now):
    _synthetic(attendance, alice, fixed_now - timedelta(days=2))
    newest = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))

    assert gate.get_pending_departure(alice.employee_id).record_id == newest.record_id


def test_admin_is_never_blocked(gate, attendance, admin, fixed_now):
    _synthetic(attendance, admin, fixed_now - timedelta(hours=14))
    assert gate.start_session(admin).blocked is False


def test_old_pending_record_ages_out(gate, attendance, alice, fixed_now):
    _synthetic(attendance, alice, fixed_now - timedelta(days=8))

    assert gate.start_session(alice).blocked is False
    # still listed for the admin
    assert len(attendance.find_pending_confirmations()) == 1


def test_confirm_unblocks_and_persists(gate, attendance, alice, fixed_now):
    rec = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))

    resolution = gate.resolve(alice.employee_id, rec.record_id, GateAction.CONFIRM)

    assert resolution.unblocked is True
    assert resolution.confirmed is True
    assert attendance.get_by_id(rec.record_id).confirmed is True
    assert gate.start_session(alice).blocked is False


def test_dismiss_unblocks_without_confirming(gate, attendance, alice, fixed_now):
    rec = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))

    resolution = gate.resolve(alice.employee_id, rec.record_id, GateAction.DISMISS)

    assert resolution.unblocked is True
    assert resolution.confirmed is False
    # shown again on the next session
    assert gate.start_session(alice).blocked is True


def test_confirm_fails_open_when_store_is_down(gate, attendance, alice, fixed_now):
    rec = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))
    attendance.unavailable = True

    resolution = gate.resolve(alice.employee_id, rec.record_id, GateAction.CONFIRM)

    assert resolution.unblocked is True
    assert resolution.confirmed is False
    attendance.unavailable = False
    assert attendance.get_by_id(rec.record_id).confirmed is False


def test_confirm_checks_owner_and_kind(gate, attendance, alice, bob, fixed_now):
    rec = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))
    manual = attendance.insert_record(
        employee_id=alice.employee_id,
        employee_name=alice.name,
        record_type=RecordType.DEPARTURE,
        timestamp=fixed_now,
    )

    with pytest.raises(AuthorizationError):
        gate.confirm_departure(rec.record_id, employee_id=bob.employee_id)
    with pytest.raises(ValidationError):
        gate.confirm_departure(manual.record_id, employee_id=alice.employee_id)
    with pytest.raises(NotFoundError):
        gate.confirm_departure(12345)


def test_confirming_twice_is_harmless(gate, attendance, alice, fixed_now):
    rec = _synthetic(attendance, alice, fixed_now - timedelta(hours=14))

    gate.confirm_departure(rec.record_id, employee_id=alice.employee_id)
    again = gate.confirm_departure(rec.record_id, employee_id=alice.employee_id)

    assert again.confirmed is True
