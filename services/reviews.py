# services/reviews.py - Reviews of completed reservations and the store rating they drive
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from repository.pagination import PageRequest, PageResult
from repository.reservations import ReservationRepo
from repository.reviews import ReviewRepo
from repository.stores import StoreRepo
from repository.users import UserRepo
from services.rating import RatingAggregator
from services.transactions import commit
from tables.reservations import ReservationStatus
from tables.reviews import Review
from utils.errors import AccessDenied, AlreadyExists, InvalidStatus

logger = logging.getLogger(__name__)

class ReviewService:
    """Review mutations; each one updates the store aggregate in the same transaction."""

    @staticmethod
    def create(db: Session, caller: str, reservation_id: int, rating: int, comment: Optional[str], now: datetime) -> Review:
        user = UserRepo.get_by_username(db, caller)
        reservation = ReservationRepo.get_for_update(db, reservation_id)

        if reservation.user_id != user.id:
            raise AccessDenied.reservation(caller, reservation_id)

        if reservation.status != ReservationStatus.COMPLETED:
            raise InvalidStatus(f"Reservation with ID {reservation_id} is not completed and cannot be reviewed.")

        if reservation.reviewed:
            raise AlreadyExists(f"Reservation with ID {reservation_id} has already been reviewed.")

        store = StoreRepo.get_for_update(db, reservation.store_id)

        review = Review(
            user_id=user.id,
            store_id=store.id,
            reservation_id=reservation.id,
            rating=rating,
            comment=comment,
            created_at=now,
            updated_at=now,
        )
        ReviewRepo.insert(db, review)

        reservation.reviewed = True
        reservation.updated_at = now
        RatingAggregator.on_create(store, rating)
        store.updated_at = now

        commit(db, "Review")
        db.refresh(review)

        logger.info(f"Review {review.id} created for reservation {reservation_id} (store {store.id})")
        return review

    @staticmethod
    def update(db: Session, caller: str, review_id: int, rating: int, comment: Optional[str], now: datetime) -> Review:
        user = UserRepo.get_by_username(db, caller)
        store_id = ReviewRepo.get(db, review_id).store_id

        # Store first, then the review, so old_rating is read under the lock
        store = StoreRepo.get_for_update(db, store_id)
        review = ReviewRepo.get_for_update(db, review_id)

        if review.user_id != user.id:
            raise AccessDenied.review(caller, review_id)

        old_rating = review.rating

        review.rating = rating
        review.comment = comment
        review.updated_at = now
        RatingAggregator.on_update(store, old_rating, rating)
        store.updated_at = now

        commit(db, "Review")
        db.refresh(review)
        return review

    @staticmethod
    def delete(db: Session, caller: str, review_id: int, now: datetime):
        """Remove a review (author or store partner) and re-open its reservation for review"""
        user = UserRepo.get_by_username(db, caller)
        store_id = ReviewRepo.get(db, review_id).store_id

        store = StoreRepo.get_for_update(db, store_id)
        review = ReviewRepo.get_for_update(db, review_id)

        if review.user_id != user.id and store.partner_id != user.id:
            raise AccessDenied.review(caller, review_id)

        reservation = ReservationRepo.get_for_update(db, review.reservation_id)
        reservation.reviewed = False
        reservation.updated_at = now

        old_rating = review.rating
        ReviewRepo.delete(db, review)
        RatingAggregator.on_delete(store, old_rating)
        store.updated_at = now

        commit(db, "Review")
        logger.info(f"Review {review_id} deleted by {caller}")

    @staticmethod
    def list_for_store(
        db: Session,
        store_id: int,
        min_rating: Optional[int],
        max_rating: Optional[int],
        page_request: PageRequest,
    ) -> PageResult:
        StoreRepo.get(db, store_id)
        return ReviewRepo.find_by_store(db, store_id, min_rating, max_rating, page_request)

    @staticmethod
    def list_for_user(db: Session, user_id: int, page_request: PageRequest) -> PageResult:
        return ReviewRepo.find_by_user(db, user_id, page_request)
