from datetime import timedelta

import pytest

from repository.reservations import ReservationRepo
from services.confirmation import ConfirmationCodeGenerator
from services import state_machine
from services.reservations import ReservationService
from services.sweeper import sweep_overdue
from tables.reservations import Reservation, ReservationStatus
from tables.users import UserRole
from utils.errors import AccessDenied, Conflict, InvalidStatus, InvalidTime, NotFound

from conftest import NOW


def scripted_generator(*codes):
    """Generator whose randbelow replays the halves of the given 12-digit codes"""
    halves = []
    for code in codes:
        halves.extend([int(code[:6]), int(code[6:])])
    draws = iter(halves)
    return ConfirmationCodeGenerator(randbelow=lambda bound: next(draws))


class TestCreate:

    def test_one_hour_ahead_is_pending(self, db, customer, store):
        reservation = ReservationService.create(db, customer.username, store.id, NOW + timedelta(hours=1), NOW)

        assert reservation.id is not None
        assert reservation.status == ReservationStatus.PENDING
        assert reservation.confirmation_number is None
        assert reservation.partner_id == store.partner_id
        assert reservation.created_at == NOW

    def test_ten_minutes_ahead_is_rejected(self, db, customer, store):
        with pytest.raises(InvalidTime):
            ReservationService.create(db, customer.username, store.id, NOW + timedelta(minutes=10), NOW)

    def test_three_weeks_ahead_is_rejected(self, db, customer, store):
        with pytest.raises(InvalidTime):
            ReservationService.create(db, customer.username, store.id, NOW + timedelta(days=21), NOW)

    def test_unknown_store(self, db, customer):
        with pytest.raises(NotFound):
            ReservationService.create(db, customer.username, 999, NOW + timedelta(hours=1), NOW)

    def test_unknown_caller(self, db, store):
        with pytest.raises(NotFound):
            ReservationService.create(db, "ghost", store.id, NOW + timedelta(hours=1), NOW)


class TestApproveAndConfirm:

    def test_full_lifecycle(self, db, customer, partner, store):
        reservation = ReservationService.create(db, customer.username, store.id, NOW + timedelta(hours=1), NOW)

        approved = ReservationService.approve_or_reject(
            db, partner.username, reservation.id, "APPROVED", NOW + timedelta(minutes=1)
        )
        assert approved.status == ReservationStatus.APPROVED
        code = approved.confirmation_number
        assert len(code) == 12 and code.isdigit()

        completed = ReservationService.confirm_by_code(db, partner.username, code, NOW + timedelta(minutes=50))
        assert completed.id == reservation.id
        assert completed.status == ReservationStatus.COMPLETED
        assert completed.updated_at == NOW + timedelta(minutes=50)

    def test_reject_leaves_no_code(self, db, customer, partner, store, make_reservation):
        reservation = make_reservation(customer, store)

        rejected = ReservationService.approve_or_reject(db, partner.username, reservation.id, "REJECTED", NOW)

        assert rejected.status == ReservationStatus.REJECTED
        assert rejected.confirmation_number is None

    def test_other_partner_is_denied(self, db, customer, store, make_reservation, make_user):
        reservation = make_reservation(customer, store)
        rival = make_user("partner_park", UserRole.PARTNER)

        with pytest.raises(AccessDenied):
            ReservationService.approve_or_reject(db, rival.username, reservation.id, "APPROVED", NOW)

    def test_decision_is_parsed_before_the_partner_check(self, db, customer, store, make_reservation):
        reservation = make_reservation(customer, store)

        with pytest.raises(InvalidStatus):
            ReservationService.approve_or_reject(db, customer.username, reservation.id, "approved", NOW)

    def test_unknown_decision(self, db, customer, partner, store, make_reservation):
        reservation = make_reservation(customer, store)

        with pytest.raises(InvalidStatus):
            ReservationService.approve_or_reject(db, partner.username, reservation.id, "CANCELLED", NOW)

    def test_already_decided(self, db, customer, partner, store, make_reservation):
        reservation = make_reservation(customer, store, status=ReservationStatus.APPROVED,
                                       confirmation_number="000001000001")

        with pytest.raises(InvalidStatus):
            ReservationService.approve_or_reject(db, partner.username, reservation.id, "REJECTED", NOW)

    def test_unknown_reservation(self, db, partner, store):
        with pytest.raises(NotFound):
            ReservationService.approve_or_reject(db, partner.username, 4242, "APPROVED", NOW)

    def test_confirm_with_other_partners_code_is_not_found(self, db, customer, store, make_reservation, make_user):
        make_reservation(customer, store, status=ReservationStatus.APPROVED, confirmation_number="123123123123")
        rival = make_user("partner_park", UserRole.PARTNER)

        with pytest.raises(NotFound):
            ReservationService.confirm_by_code(db, rival.username, "123123123123", NOW)

    def test_confirm_unknown_code(self, db, partner):
        with pytest.raises(NotFound):
            ReservationService.confirm_by_code(db, partner.username, "999999999999", NOW)

    def test_generator_draws_again_on_known_code(self, db, customer, partner, store, make_reservation):
        make_reservation(customer, store, status=ReservationStatus.APPROVED, confirmation_number="000042000042")
        pending = make_reservation(customer, store)

        approved = ReservationService.approve_or_reject(
            db, partner.username, pending.id, "APPROVED", NOW,
            generator=scripted_generator("000042000042", "000043000043"),
        )

        assert approved.confirmation_number == "000043000043"

    def test_concurrent_clash_is_retried(self, db, customer, partner, store, make_reservation, monkeypatch):
        # Simulates another approval committing the same code between the
        # pre-check and our commit: the pre-check sees nothing, the unique
        # constraint rejects the first commit.
        make_reservation(customer, store, status=ReservationStatus.APPROVED, confirmation_number="555555000001")
        pending = make_reservation(customer, store)
        monkeypatch.setattr(ReservationRepo, "exists_by_partner_and_code", staticmethod(lambda *args: False))

        approved = ReservationService.approve_or_reject(
            db, partner.username, pending.id, "APPROVED", NOW,
            generator=scripted_generator("555555000001", "555555000002"),
        )

        assert approved.status == ReservationStatus.APPROVED
        assert approved.confirmation_number == "555555000002"
        codes = [r.confirmation_number for r in db.query(Reservation).all()]
        assert sorted(codes) == ["555555000001", "555555000002"]

    def test_same_code_allowed_across_partners(self, db, customer, store, make_store, make_user, make_reservation):
        other_partner = make_user("partner_park", UserRole.PARTNER)
        other_store = make_store(other_partner, name="Red Lantern")
        make_reservation(customer, store, status=ReservationStatus.APPROVED, confirmation_number="777777777777")
        pending = make_reservation(customer, other_store)

        approved = ReservationService.approve_or_reject(
            db, other_partner.username, pending.id, "APPROVED", NOW,
            generator=scripted_generator("777777777777"),
        )

        assert approved.confirmation_number == "777777777777"


class TestReschedule:

    def test_approved_goes_back_to_pending_and_keeps_code(self, db, customer, store, make_reservation):
        reservation = make_reservation(customer, store, status=ReservationStatus.APPROVED,
                                       confirmation_number="314159265358")

        moved = ReservationService.reschedule(db, customer.username, reservation.id, NOW + timedelta(days=2), NOW)

        assert moved.status == ReservationStatus.PENDING
        assert moved.reservation_time == NOW + timedelta(days=2)
        assert moved.confirmation_number == "314159265358"

    def test_only_owner_may_reschedule(self, db, customer, store, make_reservation, make_user):
        reservation = make_reservation(customer, store)
        stranger = make_user("stranger_choi")

        with pytest.raises(AccessDenied):
            ReservationService.reschedule(db, stranger.username, reservation.id, NOW + timedelta(days=1), NOW)

    def test_ownership_is_checked_before_status(self, db, customer, store, make_reservation, make_user):
        reservation = make_reservation(customer, store, status=ReservationStatus.CANCELLED)
        stranger = make_user("stranger_choi")

        with pytest.raises(AccessDenied):
            ReservationService.reschedule(db, stranger.username, reservation.id, NOW + timedelta(days=1), NOW)

    def test_terminal_reservation_cannot_move(self, db, customer, store, make_reservation):
        reservation = make_reservation(customer, store, status=ReservationStatus.OVERDUE)

        with pytest.raises(InvalidStatus):
            ReservationService.reschedule(db, customer.username, reservation.id, NOW + timedelta(days=1), NOW)

    def test_too_soon(self, db, customer, store, make_reservation):
        reservation = make_reservation(customer, store)

        with pytest.raises(InvalidTime):
            ReservationService.reschedule(db, customer.username, reservation.id, NOW + timedelta(minutes=5), NOW)


class TestCancel:

    def test_owner_cancels(self, db, customer, store, make_reservation):
        reservation = make_reservation(customer, store, status=ReservationStatus.APPROVED,
                                       confirmation_number="100000000001")

        cancelled = ReservationService.cancel(db, customer.username, reservation.id, NOW)

        assert cancelled.status == ReservationStatus.CANCELLED

    def test_cancel_twice(self, db, customer, store, make_reservation):
        reservation = make_reservation(customer, store)
        ReservationService.cancel(db, customer.username, reservation.id, NOW)

        with pytest.raises(InvalidStatus):
            ReservationService.cancel(db, customer.username, reservation.id, NOW)

    def test_partner_cannot_cancel_for_user(self, db, customer, partner, store, make_reservation):
        reservation = make_reservation(customer, store)

        with pytest.raises(AccessDenied):
            ReservationService.cancel(db, partner.username, reservation.id, NOW)


class TestDetail:

    def test_visible_to_owner_and_partner(self, db, customer, partner, store, make_reservation):
        reservation = make_reservation(customer, store)

        assert ReservationService.detail(db, customer.username, reservation.id).id == reservation.id
        assert ReservationService.detail(db, partner.username, reservation.id).id == reservation.id

    def test_hidden_from_others(self, db, customer, store, make_reservation, make_user):
        reservation = make_reservation(customer, store)
        stranger = make_user("stranger_choi")

        with pytest.raises(AccessDenied):
            ReservationService.detail(db, stranger.username, reservation.id)


class TestConcurrentMutations:

    def test_approval_after_a_committed_cancel_sees_the_cancel(self, db, session_factory, customer, partner,
                                                                 store, make_reservation):
        reservation = make_reservation(customer, store)
        partner_session = session_factory()
        try:
            # The partner's session already holds the PENDING row
            ReservationRepo.get(partner_session, reservation.id)
            ReservationService.cancel(db, customer.username, reservation.id, NOW)

            with pytest.raises(InvalidStatus):
                ReservationService.approve_or_reject(partner_session, partner.username, reservation.id,
                                                     "APPROVED", NOW)
        finally:
            partner_session.close()

        db.expire_all()
        stored = db.get(Reservation, reservation.id)
        assert stored.status == ReservationStatus.CANCELLED
        assert stored.confirmation_number is None

    def test_sweep_between_read_and_commit_is_a_conflict(self, db, session_factory, customer, store,
                                                         make_reservation, monkeypatch):
        reservation = make_reservation(customer, store, when=NOW + timedelta(minutes=5))
        cancel = state_machine.cancel

        def cancel_while_sweeper_runs(row, now):
            cancel(row, now)
            sweeper_session = session_factory()
            try:
                assert sweep_overdue(sweeper_session, now) == 1
            finally:
                sweeper_session.close()

        monkeypatch.setattr(state_machine, "cancel", cancel_while_sweeper_runs)

        with pytest.raises(Conflict):
            ReservationService.cancel(db, customer.username, reservation.id, NOW)

        db.expire_all()
        stored = db.get(Reservation, reservation.id)
        assert stored.status == ReservationStatus.OVERDUE
        assert stored.version == 2
