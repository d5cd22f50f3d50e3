# services/reservation_queries.py - Filtered, paginated reservation views
from datetime import date, datetime, time
from typing import List, Optional
from sqlalchemy.orm import Session
from repository.pagination import PageRequest, PageResult
from repository.reservations import ReservationRepo
from repository.stores import StoreRepo
from repository.users import UserRepo
from services.state_machine import ACTIVE_STATUSES, parse_optional_status
from tables.reservations import Reservation
from utils.errors import AccessDenied

def _day_predicate(day: date):
    start_of_day = datetime.combine(day, time.min)
    end_of_day = datetime.combine(day, time.max)
    return Reservation.reservation_time.between(start_of_day, end_of_day)

class ReservationQueries:

    @staticmethod
    def for_partner_store(
        db: Session,
        caller: str,
        store_id: int,
        day: Optional[date],
        status: Optional[str],
        page_request: PageRequest,
    ) -> PageResult:
        """All reservations of a store, visible only to its partner"""
        partner = UserRepo.get_by_username(db, caller)
        store = StoreRepo.get(db, store_id)
        if store.partner_id != partner.id:
            raise AccessDenied.store(caller, store.name)

        wanted_status = parse_optional_status(status)
        predicates: List = [Reservation.store_id == store.id]
        if day is not None:
            predicates.append(_day_predicate(day))
        if wanted_status is not None:
            predicates.append(Reservation.status == wanted_status)

        return ReservationRepo.find_page(db, predicates, page_request)

    @staticmethod
    def for_public_store(db: Session, store_id: int, day: Optional[date], page_request: PageRequest) -> PageResult:
        """Occupancy of a store as shown to users: only PENDING and APPROVED rows"""
        store = StoreRepo.get(db, store_id)

        predicates: List = [
            Reservation.store_id == store.id,
            Reservation.status.in_(ACTIVE_STATUSES),
        ]
        if day is not None:
            predicates.append(_day_predicate(day))

        return ReservationRepo.find_page(db, predicates, page_request)

    @staticmethod
    def for_caller(
        db: Session,
        caller: str,
        day: Optional[date],
        status: Optional[str],
        page_request: PageRequest,
    ) -> PageResult:
        user = UserRepo.get_by_username(db, caller)

        wanted_status = parse_optional_status(status)
        predicates: List = [Reservation.user_id == user.id]
        if day is not None:
            predicates.append(_day_predicate(day))
        if wanted_status is not None:
            predicates.append(Reservation.status == wanted_status)

        return ReservationRepo.find_page(db, predicates, page_request)
