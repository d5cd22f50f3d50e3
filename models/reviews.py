# models/reviews.py - Review request/response models
from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from typing import Optional

def _check_rating(v: int) -> int:
    if not 1 <= v <= 5:
        raise ValueError('Rating must be between 1 and 5')
    return v

def _check_comment(v: Optional[str]) -> Optional[str]:
    if v and len(v) > 1000:
        raise ValueError('Comment cannot exceed 1000 characters')
    return v

class ReviewCreateRequest(BaseModel):
    reservation_id: int
    rating: int
    comment: Optional[str] = None

    validate_rating = field_validator('rating')(_check_rating)
    validate_comment = field_validator('comment')(_check_comment)

class ReviewUpdateRequest(BaseModel):
    rating: int
    comment: Optional[str] = None

    validate_rating = field_validator('rating')(_check_rating)
    validate_comment = field_validator('comment')(_check_comment)

class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    store_id: int
    user_id: int
    reservation_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
