# repository/reviews.py - Review persistence
from typing import Optional
from sqlalchemy.orm import Session
from tables.reviews import Review
from repository.pagination import PageRequest, PageResult, paginate, parse_sort
from utils.errors import NotFound

REVIEW_SORT_COLUMNS = {
    "created_at": Review.created_at,
    "rating": Review.rating,
    "id": Review.id,
}

class ReviewRepo:
    @staticmethod
    def insert(db: Session, review: Review):
        db.add(review)
        db.flush()
        return review

    @staticmethod
    def get(db: Session, review_id: int) -> Review:
        review = db.query(Review).filter(Review.id == review_id).first()
        if review is None:
            raise NotFound.review(review_id)
        return review

    @staticmethod
    def get_for_update(db: Session, review_id: int) -> Review:
        """Re-read a review under a row lock; call after locking its store"""
        review = db.query(Review).filter(
            Review.id == review_id
        ).with_for_update().populate_existing().first()
        if review is None:
            raise NotFound.review(review_id)
        return review

    @staticmethod
    def delete(db: Session, review: Review):
        db.delete(review)
        db.flush()

    @staticmethod
    def find_by_store(
        db: Session,
        store_id: int,
        min_rating: Optional[int],
        max_rating: Optional[int],
        page_request: PageRequest,
    ) -> PageResult:
        query = db.query(Review).filter(Review.store_id == store_id)
        if min_rating is not None:
            query = query.filter(Review.rating >= min_rating)
        if max_rating is not None:
            query = query.filter(Review.rating <= max_rating)
        order = parse_sort(page_request.sort, REVIEW_SORT_COLUMNS, "created_at", descending=True)
        return paginate(query, page_request, order, Review.id.desc())

    @staticmethod
    def find_by_user(db: Session, user_id: int, page_request: PageRequest) -> PageResult:
        query = db.query(Review).filter(Review.user_id == user_id)
        order = parse_sort(page_request.sort, REVIEW_SORT_COLUMNS, "created_at", descending=True)
        return paginate(query, page_request, order, Review.id.desc())
