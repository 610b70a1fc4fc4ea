from datetime import datetime, time, timedelta

import pytest

from src.qrchek.qrchek.attendance.confirmation import PendingConfirmationGate
from src.qrchek.qrchek.autocheckout.scheduler import AutoCheckoutScheduler
from src.qrchek.qrchek.autocheckout.service import AutoCheckoutService
from src.qrchek.qrchek.common.clock import FixedClock
from src.qrchek.qrchek.core.enums import RecordType
from src.qrchek.qrchek.core.exceptions import ConflictError
from tests.fakes import InMemoryAttendance


def _scan(attendance, employee, record_type, ts):
    return attendance.insert_record(
        employee_id=employee.employee_id,
        employee_name=employee.name,
        record_type=record_type,
        timestamp=ts,
    )


@pytest.fixture
def evening(tz):
    return FixedClock(tz.localize(datetime(2024, 3, 13, 20, 0)))


@pytest.fixture
def service(attendance, evening):
    return AutoCheckoutService(attendance, clock=evening, cutoff=time(20, 0))


def test_open_arrival_gets_synthetic_departure_at_cutoff(service, attendance, alice, bob, tz):
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 0)))
    _scan(attendance, bob, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 8, 0)))
    _scan(attendance, bob, RecordType.DEPARTURE, tz.localize(datetime(2024, 3, 13, 16, 0)))

    result = service.run()

    assert result.processed == 1
    assert result.employees == ["Alice"]
    last = attendance.get_last_record(alice.employee_id)
    assert last.type == RecordType.DEPARTURE
    assert last.auto_generated is True
    assert last.confirmed is False
    assert last.timestamp == tz.localize(datetime(2024, 3, 13, 20, 0))
    assert attendance.get_last_record(bob.employee_id).auto_generated is False


def test_rerun_is_idempotent(service, attendance, alice, tz):
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 0)))

    assert service.run().processed == 1
    assert service.run().processed == 0
    assert attendance.count() == 2


def test_arrival_from_previous_day_is_closed_too(service, attendance, alice, tz):
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 11, 9, 0)))

    assert service.run().processed == 1


def test_one_failing_employee_does_not_stop_the_sweep(service, attendance, alice, bob, tz):
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 0)))
    _scan(attendance, bob, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 30)))
    attendance.failing_employee_ids.add(alice.employee_id)

    result = service.run()

    assert result.processed == 1
    assert result.employees == ["Bob"]
    assert attendance.get_last_record(alice.employee_id).type == RecordType.ARRIVAL


def test_manual_run_before_cutoff_uses_previous_day(attendance, alice, tz):
    morning = FixedClock(tz.localize(datetime(2024, 3, 13, 7, 0)))
    service = AutoCheckoutService(attendance, clock=morning, cutoff=time(20, 0))
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 12, 9, 0)))
    # today's arrival is after yesterday's cutoff and must stay open
    _scan(attendance, alice, RecordType.DEPARTURE, tz.localize(datetime(2024, 3, 12, 17, 0)))
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 6, 30)))

    result = service.run()

    assert result.processed == 0
    assert result.cutoff == tz.localize(datetime(2024, 3, 12, 20, 0))


def test_cutoff_for_handles_both_sides_of_cutoff(service, tz):
    assert service.cutoff_for(tz.localize(datetime(2024, 3, 13, 21, 15))) == tz.localize(datetime(2024, 3, 13, 20, 0))
    assert service.cutoff_for(tz.localize(datetime(2024, 3, 13, 19, 59))) == tz.localize(datetime(2024, 3, 12, 20, 0))


def test_scheduler_has_no_timer_until_started(service, tz):
    scheduler = AutoCheckoutScheduler(service, timezone=tz)
    assert scheduler.started is False


def test_run_now_uses_the_same_sweep(service, attendance, alice, tz):
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 0)))
    scheduler = AutoCheckoutScheduler(service, timezone=tz)

    assert scheduler.run_now().processed == 1


def test_run_now_refuses_overlapping_runs(service, tz):
    scheduler = AutoCheckoutScheduler(service, timezone=tz)
    scheduler._running.acquire()
    try:
        with pytest.raises(ConflictError):
            scheduler.run_now()
    finally:
        scheduler._running.release()


def test_start_registers_daily_cron_job(service, tz):
    from apscheduler.schedulers.background import BackgroundScheduler

    backend = BackgroundScheduler(timezone=tz)
    scheduler = AutoCheckoutScheduler(service, timezone=tz, scheduler=backend)
    scheduler.start()
    try:
        assert scheduler.started is True
        job = backend.get_job("auto-checkout")
        assert job is not None
        next_run = job.next_run_time.astimezone(tz)
        assert (next_run.hour, next_run.minute) == (20, 0)
        assert next_run > datetime.now(tz) - timedelta(minutes=1)
    finally:
        scheduler.shutdown()


class _SharedStore(InMemoryAttendance):
    """Lets another worker's sweep run while this one is between lookup and insert."""

    def __init__(self, employees):
        super().__init__(employees)
        self.during_lookup = None

    def find_employees_with_open_arrival(self, as_of):
        found = super().find_employees_with_open_arrival(as_of)
        hook, self.during_lookup = self.during_lookup, None
        if hook is not None:
            hook()
        return found


def test_overlapping_sweeps_on_two_workers_close_each_arrival_once(employees, alice, evening, tz):
    store = _SharedStore(employees)
    _scan(store, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 0)))
    worker_a = AutoCheckoutScheduler(AutoCheckoutService(store, clock=evening, cutoff=time(20, 0)), timezone=tz)
    worker_b = AutoCheckoutScheduler(AutoCheckoutService(store, clock=evening, cutoff=time(20, 0)), timezone=tz)

    results = []
    store.during_lookup = lambda: results.append(worker_b.run_now())
    results.append(worker_a.run_now())

    assert sorted(r.processed for r in results) == [0, 1]
    pending = store.find_pending_confirmations(employee_id=alice.employee_id)
    assert len(pending) == 1

    gate = PendingConfirmationGate(store, clock=evening)
    gate.confirm_departure(pending[0].record_id, employee_id=alice.employee_id)
    assert gate.get_pending_departure(alice.employee_id) is None


def test_departure_after_cutoff_is_left_alone(attendance, alice, tz):
    late = FixedClock(tz.localize(datetime(2024, 3, 13, 22, 0)))
    service = AutoCheckoutService(attendance, clock=late, cutoff=time(20, 0))
    _scan(attendance, alice, RecordType.ARRIVAL, tz.localize(datetime(2024, 3, 13, 9, 0)))
    _scan(attendance, alice, RecordType.DEPARTURE, tz.localize(datetime(2024, 3, 13, 21, 0)))

    result = service.run()

    assert result.processed == 0
    assert [r.auto_generated for r in attendance.get_records_in_range(employee_id=alice.employee_id)] == [False, False]
