# repository/reservations.py - Reservation persistence, locking and bulk status updates
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session
from tables.reservations import Reservation, ReservationStatus
from repository.pagination import PageRequest, PageResult, paginate, parse_sort
from utils.errors import NotFound

RESERVATION_SORT_COLUMNS = {
    "reservation_time": Reservation.reservation_time,
    "created_at": Reservation.created_at,
    "updated_at": Reservation.updated_at,
    "status": Reservation.status,
    "id": Reservation.id,
}

class ReservationRepo:
    @staticmethod
    def insert(db: Session, reservation: Reservation):
        db.add(reservation)
        db.flush()
        return reservation

    @staticmethod
    def get(db: Session, reservation_id: int) -> Reservation:
        reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
        if reservation is None:
            raise NotFound.reservation(reservation_id)
        return reservation

    @staticmethod
    def get_for_update(db: Session, reservation_id: int) -> Reservation:
        """Load a reservation with a row lock for a read-modify-write, refreshing any cached copy"""
        reservation = db.query(Reservation).filter(
            Reservation.id == reservation_id
        ).with_for_update().populate_existing().first()
        if reservation is None:
            raise NotFound.reservation(reservation_id)
        return reservation

    @staticmethod
    def find_by_code_and_partner_for_update(db: Session, code: str, partner_id: int) -> Optional[Reservation]:
        return db.query(Reservation).filter(
            and_(
                Reservation.confirmation_number == code,
                Reservation.partner_id == partner_id
            )
        ).with_for_update().populate_existing().first()

    @staticmethod
    def exists_by_partner_and_code(db: Session, partner_id: int, code: str) -> bool:
        return db.query(Reservation.id).filter(
            and_(
                Reservation.partner_id == partner_id,
                Reservation.confirmation_number == code
            )
        ).first() is not None

    @staticmethod
    def exists_by_store(db: Session, store_id: int) -> bool:
        return db.query(Reservation.id).filter(Reservation.store_id == store_id).first() is not None

    @staticmethod
    def exists_by_user(db: Session, user_id: int) -> bool:
        return db.query(Reservation.id).filter(Reservation.user_id == user_id).first() is not None

    @staticmethod
    def update_to_overdue(
        db: Session,
        threshold: datetime,
        statuses: Iterable[ReservationStatus],
        now: datetime,
    ) -> int:
        """Single conditional UPDATE; returns the number of rows moved to OVERDUE"""
        return db.query(Reservation).filter(
            and_(
                Reservation.status.in_(list(statuses)),
                Reservation.reservation_time < threshold
            )
        ).update(
            {
                Reservation.status: ReservationStatus.OVERDUE,
                Reservation.updated_at: now,
                Reservation.version: Reservation.version + 1,
            },
            synchronize_session=False
        )

    @staticmethod
    def find_page(db: Session, predicates: List, page_request: PageRequest) -> PageResult:
        query = db.query(Reservation).filter(and_(*predicates))
        order = parse_sort(page_request.sort, RESERVATION_SORT_COLUMNS, "reservation_time")
        return paginate(query, page_request, order, Reservation.id.asc())
