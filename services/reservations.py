# services/reservations.py - Reservation lifecycle operations
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from config import CONFIRMATION_COMMIT_ATTEMPTS
from repository.reservations import ReservationRepo
from repository.stores import StoreRepo
from repository.users import UserRepo
from services import state_machine
from services.confirmation import ConfirmationCodeGenerator, code_generator
from services.transactions import commit
from tables.reservations import Reservation
from utils.errors import AccessDenied, Conflict, NotFound

logger = logging.getLogger(__name__)

class ReservationService:
    """Every mutation loads the row locked, applies one state machine step and commits."""

    @staticmethod
    def create(db: Session, caller: str, store_id: int, requested_time: datetime, now: datetime) -> Reservation:
        user = UserRepo.get_by_username(db, caller)
        store = StoreRepo.get(db, store_id)

        reservation = state_machine.new_reservation(
            user_id=user.id,
            store_id=store.id,
            partner_id=store.partner_id,
            requested=requested_time,
            now=now,
        )
        ReservationRepo.insert(db, reservation)
        commit(db, "Reservation")
        db.refresh(reservation)

        logger.info(f"Reservation {reservation.id} created by {caller} at store {store.id} for {requested_time}")
        return reservation

    @staticmethod
    def reschedule(db: Session, caller: str, reservation_id: int, new_time: datetime, now: datetime) -> Reservation:
        user = UserRepo.get_by_username(db, caller)
        reservation = ReservationRepo.get_for_update(db, reservation_id)

        if reservation.user_id != user.id:
            raise AccessDenied.reservation(caller, reservation_id)

        state_machine.reschedule(reservation, new_time, now)
        commit(db, "Reservation")
        db.refresh(reservation)

        logger.info(f"Reservation {reservation_id} rescheduled to {new_time} by {caller}")
        return reservation

    @staticmethod
    def cancel(db: Session, caller: str, reservation_id: int, now: datetime) -> Reservation:
        user = UserRepo.get_by_username(db, caller)
        reservation = ReservationRepo.get_for_update(db, reservation_id)

        if reservation.user_id != user.id:
            raise AccessDenied.reservation(caller, reservation_id)

        state_machine.cancel(reservation, now)
        commit(db, "Reservation")
        db.refresh(reservation)

        logger.info(f"Reservation {reservation_id} cancelled by {caller}")
        return reservation

    @staticmethod
    def approve_or_reject(
        db: Session,
        caller: str,
        reservation_id: int,
        decision: str,
        now: datetime,
        generator: Optional[ConfirmationCodeGenerator] = None,
    ) -> Reservation:
        """Partner decision on a PENDING reservation.

        The decision is parsed once the reservation is found and before the
        partner check, so an unknown value is InvalidStatus for any caller.
        Approval draws a confirmation number. If another approval for the same
        partner committed the same number first, the unique constraint fails
        the commit and the whole decision is re-run against fresh state.
        """
        generator = generator or code_generator

        for attempt in range(1, CONFIRMATION_COMMIT_ATTEMPTS + 1):
            partner = UserRepo.get_by_username(db, caller)
            reservation = ReservationRepo.get_for_update(db, reservation_id)
            target = state_machine.parse_status(decision)
            store = StoreRepo.get(db, reservation.store_id)

            if store.partner_id != partner.id:
                raise AccessDenied.reservation(caller, reservation_id)

            state_machine.decide(
                reservation,
                target,
                now,
                issue_code=lambda: generator.generate(db, partner.id),
            )

            try:
                commit(db, "Reservation")
            except IntegrityError:
                db.rollback()
                logger.warning(
                    f"Confirmation number clash approving reservation {reservation_id} "
                    f"(attempt {attempt}/{CONFIRMATION_COMMIT_ATTEMPTS})"
                )
                continue

            db.refresh(reservation)
            logger.info(f"Reservation {reservation_id} set to {reservation.status.value} by {caller}")
            return reservation

        raise Conflict("Could not issue a unique confirmation number, please retry.")

    @staticmethod
    def confirm_by_code(db: Session, caller: str, code: str, now: datetime) -> Reservation:
        partner = UserRepo.get_by_username(db, caller)
        reservation = ReservationRepo.find_by_code_and_partner_for_update(db, code, partner.id)
        if reservation is None:
            raise NotFound.confirmation_number(code)

        state_machine.complete(reservation, now)
        commit(db, "Reservation")
        db.refresh(reservation)

        logger.info(f"Reservation {reservation.id} completed with confirmation number by {caller}")
        return reservation

    @staticmethod
    def detail(db: Session, caller: str, reservation_id: int) -> Reservation:
        user = UserRepo.get_by_username(db, caller)
        reservation = ReservationRepo.get(db, reservation_id)
        store = StoreRepo.get(db, reservation.store_id)

        if user.id != reservation.user_id and user.id != store.partner_id:
            raise AccessDenied.reservation(caller, reservation_id)
        return reservation
