# routes/reviews.py - Reviews of completed reservations
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from config import get_db
from models.common import Page, ResponseSchema
from models.reviews import ReviewCreateRequest, ReviewUpdateRequest, ReviewResponse
from repository.pagination import PageRequest
from repository.users import get_current_username
from routes.dependencies import page_request
from services.reviews import ReviewService
from utils.clock import Clock, get_clock

router = APIRouter(prefix="/reviews", tags=["Reviews"])

@router.post("", response_model=ReviewResponse)
def create_review(
    req: ReviewCreateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    """Review a completed reservation"""
    return ReviewService.create(db, caller, req.reservation_id, req.rating, req.comment, clock.now())

@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    req: ReviewUpdateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    return ReviewService.update(db, caller, review_id, req.rating, req.comment, clock.now())

@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    ReviewService.delete(db, caller, review_id, clock.now())
    return ResponseSchema(
        code="200",
        status="OK",
        message="Review deleted successfully",
    ).model_dump(exclude_none=True)

@router.get("/store/{store_id}", response_model=Page[ReviewResponse])
def get_store_reviews(
    store_id: int,
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    max_rating: Optional[int] = Query(None, ge=1, le=5),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
):
    result = ReviewService.list_for_store(db, store_id, min_rating, max_rating, paging)
    return Page[ReviewResponse].from_result(result, ReviewResponse)

@router.get("/user/{user_id}", response_model=Page[ReviewResponse])
def get_user_reviews(
    user_id: int,
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
):
    result = ReviewService.list_for_user(db, user_id, paging)
    return Page[ReviewResponse].from_result(result, ReviewResponse)
