import asyncio
from datetime import timedelta

from services.sweeper import OverdueSweeper, sweep_overdue
from tables.reservations import Reservation, ReservationStatus

from conftest import NOW


def statuses(db):
    db.expire_all()
    return {r.id: r.status for r in db.query(Reservation).all()}


def test_lapsed_active_reservations_become_overdue(db, customer, store, make_reservation):
    past_pending = make_reservation(customer, store, when=NOW - timedelta(hours=1))
    soon_approved = make_reservation(customer, store, when=NOW + timedelta(minutes=5),
                                     status=ReservationStatus.APPROVED, confirmation_number="100000000001")
    later = make_reservation(customer, store, when=NOW + timedelta(minutes=11))

    assert sweep_overdue(db, NOW) == 2

    result = statuses(db)
    assert result[past_pending.id] == ReservationStatus.OVERDUE
    assert result[soon_approved.id] == ReservationStatus.OVERDUE
    assert result[later.id] == ReservationStatus.PENDING


def test_terminal_reservations_are_left_alone(db, customer, store, make_reservation):
    past = NOW - timedelta(days=1)
    rows = {
        status: make_reservation(customer, store, when=past, status=status)
        for status in (ReservationStatus.REJECTED, ReservationStatus.CANCELLED,
                       ReservationStatus.COMPLETED, ReservationStatus.OVERDUE)
    }

    assert sweep_overdue(db, NOW) == 0

    result = statuses(db)
    for status, reservation in rows.items():
        assert result[reservation.id] == status


def test_sweep_is_idempotent(db, customer, store, make_reservation):
    make_reservation(customer, store, when=NOW - timedelta(minutes=30))

    assert sweep_overdue(db, NOW) == 1
    assert sweep_overdue(db, NOW) == 0


def test_sweep_stamps_updated_at_and_bumps_version(db, customer, store, make_reservation):
    reservation = make_reservation(customer, store, when=NOW)
    version = reservation.version
    swept_at = NOW + timedelta(minutes=1)

    sweep_overdue(db, swept_at)

    db.expire_all()
    refreshed = db.get(Reservation, reservation.id)
    assert refreshed.updated_at == swept_at
    assert refreshed.version == version + 1


def test_run_once_uses_its_own_session(session_factory, clock, customer, store, make_reservation):
    make_reservation(customer, store, when=NOW + timedelta(minutes=3))
    sweeper = OverdueSweeper(session_factory=session_factory, clock=clock, interval_seconds=60)

    assert sweeper.run_once() == 1
    clock.advance(minutes=5)
    assert sweeper.run_once() == 0


def test_failed_tick_does_not_stop_the_loop(session_factory, clock, customer, store, make_reservation, db):
    reservation = make_reservation(customer, store, when=NOW - timedelta(minutes=1))
    calls = []

    def flaky_factory():
        calls.append(1)
        if len(calls) != 2:
            raise RuntimeError("database unavailable")
        return session_factory()

    sweeper = OverdueSweeper(session_factory=flaky_factory, clock=clock, interval_seconds=0.01)

    async def scenario():
        sweeper.start()
        while len(calls) < 3:
            await asyncio.sleep(0.01)
        await sweeper.stop()

    asyncio.run(asyncio.wait_for(scenario(), timeout=5))

    assert len(calls) >= 3
    assert statuses(db)[reservation.id] == ReservationStatus.OVERDUE


def test_stop_without_start_is_a_no_op():
    asyncio.run(OverdueSweeper(interval_seconds=1).stop())
