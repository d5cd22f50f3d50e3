# services/state_machine.py - Reservation status transitions and time-window rules
"""Pure transition rules for a single reservation.

Nothing here touches the database: callers load and lock the row, apply one
of the functions below and commit. Every function raises one of the
``utils.errors`` kinds on violation and otherwise mutates the reservation in
place, stamping ``updated_at`` with the supplied ``now``.
"""
from datetime import datetime, timedelta
from typing import Callable, Dict, FrozenSet, Optional, Union
from tables.reservations import Reservation, ReservationStatus
from config import (
    RESERVATION_MIN_LEAD_MINUTES,
    RESCHEDULE_MIN_LEAD_MINUTES,
    RESERVATION_MAX_AHEAD_DAYS,
)
from utils.errors import InvalidStatus, InvalidTime

PENDING = ReservationStatus.PENDING
APPROVED = ReservationStatus.APPROVED
REJECTED = ReservationStatus.REJECTED
CANCELLED = ReservationStatus.CANCELLED
COMPLETED = ReservationStatus.COMPLETED
OVERDUE = ReservationStatus.OVERDUE

# PENDING -> PENDING and APPROVED -> PENDING are reschedules
TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    PENDING: frozenset({PENDING, APPROVED, REJECTED, CANCELLED, OVERDUE}),
    APPROVED: frozenset({PENDING, CANCELLED, OVERDUE, COMPLETED}),
    REJECTED: frozenset(),
    CANCELLED: frozenset(),
    COMPLETED: frozenset(),
    OVERDUE: frozenset(),
}

def parse_status(value: Union[str, ReservationStatus]) -> ReservationStatus:
    """Map a client supplied status name onto the enum, or raise InvalidStatus.

    Names must match exactly; "approved" or " PENDING " are rejected.
    """
    if isinstance(value, ReservationStatus):
        return value
    try:
        return ReservationStatus(value)
    except ValueError:
        raise InvalidStatus.of(value)


def parse_optional_status(value: Optional[str]) -> Optional[ReservationStatus]:
    if value is None or value == "":
        return None
    return parse_status(value)


def can_transition(current: ReservationStatus, target: ReservationStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: ReservationStatus) -> bool:
    return not TRANSITIONS[status]


# Statuses a user may still reschedule or cancel, and the sweeper may expire
ACTIVE_STATUSES = tuple(s for s in ReservationStatus if not is_terminal(s))

# Targets a partner may choose when deciding on a request
DECISIONS = frozenset({APPROVED, REJECTED})


def validate_reservation_time(requested: datetime, now: datetime):
    if requested < now + timedelta(minutes=RESERVATION_MIN_LEAD_MINUTES):
        raise InvalidTime(
            f"Reservation time must be at least {RESERVATION_MIN_LEAD_MINUTES} minutes from now."
        )
    if requested > now + timedelta(days=RESERVATION_MAX_AHEAD_DAYS):
        raise InvalidTime("Reservation time cannot be more than 2 weeks from now.")


def validate_reschedule_time(new_time: datetime, now: datetime):
    if new_time < now:
        raise InvalidTime("Reservation time cannot be in the past.")
    if new_time > now + timedelta(days=RESERVATION_MAX_AHEAD_DAYS):
        raise InvalidTime("Reservation time cannot be more than 2 weeks from now.")
    if new_time < now + timedelta(minutes=RESCHEDULE_MIN_LEAD_MINUTES):
        raise InvalidTime(
            f"Reservation time cannot be within the next {RESCHEDULE_MIN_LEAD_MINUTES} minutes."
        )


def _require_transition(reservation: Reservation, target: ReservationStatus):
    if not can_transition(reservation.status, target):
        raise InvalidStatus.of(reservation.status)


def new_reservation(user_id: int, store_id: int, partner_id: int, requested: datetime, now: datetime) -> Reservation:
    validate_reservation_time(requested, now)
    return Reservation(
        user_id=user_id,
        store_id=store_id,
        partner_id=partner_id,
        reservation_time=requested,
        status=PENDING,
        confirmation_number=None,
        reviewed=False,
        created_at=now,
        updated_at=now,
    )


def reschedule(reservation: Reservation, new_time: datetime, now: datetime):
    # An approved reservation goes back to PENDING; its code is left as is.
    _require_transition(reservation, PENDING)
    validate_reschedule_time(new_time, now)
    reservation.reservation_time = new_time
    reservation.status = PENDING
    reservation.updated_at = now


def cancel(reservation: Reservation, now: datetime):
    _require_transition(reservation, CANCELLED)
    reservation.status = CANCELLED
    reservation.updated_at = now


def decide(
    reservation: Reservation,
    decision: Union[str, ReservationStatus],
    now: datetime,
    issue_code: Callable[[], str],
):
    """Approve or reject a PENDING reservation; approval stamps a confirmation code."""
    target = parse_status(decision)
    if not any(can_transition(reservation.status, d) for d in DECISIONS):
        raise InvalidStatus.of(reservation.status)
    if target not in DECISIONS:
        raise InvalidStatus.of(target)

    reservation.status = target
    if target == APPROVED:
        reservation.confirmation_number = issue_code()

    reservation.updated_at = now


def complete(reservation: Reservation, now: datetime):
    # Redeeming a code bypasses the transition table: any holder of the
    # code is completed, whatever its prior status.
    reservation.status = COMPLETED
    reservation.updated_at = now
