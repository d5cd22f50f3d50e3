# models/reservations.py - Reservation request/response models
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional
from tables.reservations import ReservationStatus

class ReservationRequest(BaseModel):
    store_id: int
    reservation_time: datetime

class ReservationUpdateRequest(BaseModel):
    id: int
    new_reservation_time: datetime

class ReservationCancelRequest(BaseModel):
    reservation_id: int

class ReservationApprovalRequest(BaseModel):
    reservation_id: int
    # Validated by the state machine so unknown values surface as InvalidStatus
    status: str

class ReservationCreateResponse(BaseModel):
    id: int
    store_name: str
    reservation_time: datetime
    status: ReservationStatus
    created_at: datetime

class ReservationUpdateResponse(ReservationCreateResponse):
    updated_at: Optional[datetime] = None

class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    store_id: int
    reservation_time: datetime
    status: ReservationStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    confirmation_number: Optional[str] = None
    reviewed: bool = False

class ReservationSimpleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    store_id: int
    reservation_time: datetime
    status: ReservationStatus
