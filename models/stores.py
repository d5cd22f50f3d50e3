# models/stores.py - Store request/response models
from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from typing import Optional

class StoreRegisterRequest(BaseModel):
    name: str
    location: str
    description: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v or len(v) > 100:
            raise ValueError('Store name must be between 1 and 100 characters')
        return v

    @field_validator('location')
    @classmethod
    def validate_location(cls, v):
        v = v.strip()
        if not v or len(v) > 255:
            raise ValueError('Location must be between 1 and 255 characters')
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        if len(v) > 2000:
            raise ValueError('Description cannot exceed 2000 characters')
        return v

class StoreUpdateRequest(StoreRegisterRequest):
    id: int

class StoreDeleteRequest(BaseModel):
    id: int

class StoreDetailUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
    description: str
    rating: float = 0.0
    reviews: int = 0

class StoreDetailPartnerResponse(StoreDetailUserResponse):
    partner_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

class StoreSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
    rating: float = 0.0
    reviews: int = 0
