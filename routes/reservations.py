# routes/reservations.py - Reservation lifecycle endpoints
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from config import get_db
from models.common import Page, ResponseSchema
from models.reservations import (
    ReservationRequest, ReservationUpdateRequest, ReservationCancelRequest,
    ReservationApprovalRequest, ReservationCreateResponse, ReservationUpdateResponse,
    ReservationResponse, ReservationSimpleResponse
)
from repository.pagination import PageRequest
from repository.stores import StoreRepo
from repository.users import get_current_username
from services.reservation_queries import ReservationQueries
from services.reservations import ReservationService
from routes.dependencies import page_request
from utils.clock import Clock, get_clock, to_naive_utc

router = APIRouter(prefix="/reservations", tags=["Reservations"])

@router.post("/create", response_model=ReservationCreateResponse)
def create_reservation(
    req: ReservationRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    """Reserve a time slot at a store"""
    reservation = ReservationService.create(
        db, caller, req.store_id, to_naive_utc(req.reservation_time), clock.now()
    )
    store = StoreRepo.get(db, reservation.store_id)
    return ReservationCreateResponse(
        id=reservation.id,
        store_name=store.name,
        reservation_time=reservation.reservation_time,
        status=reservation.status,
        created_at=reservation.created_at,
    )

@router.put("/update", response_model=ReservationUpdateResponse)
def update_reservation(
    req: ReservationUpdateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    """Move a reservation to a new time; it goes back to PENDING"""
    reservation = ReservationService.reschedule(
        db, caller, req.id, to_naive_utc(req.new_reservation_time), clock.now()
    )
    store = StoreRepo.get(db, reservation.store_id)
    return ReservationUpdateResponse(
        id=reservation.id,
        store_name=store.name,
        reservation_time=reservation.reservation_time,
        status=reservation.status,
        created_at=reservation.created_at,
        updated_at=reservation.updated_at,
    )

@router.delete("/cancel")
def cancel_reservation(
    req: ReservationCancelRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    ReservationService.cancel(db, caller, req.reservation_id, clock.now())
    return ResponseSchema(
        code="200",
        status="OK",
        message="Reservation cancelled successfully",
        result={"reservation_id": req.reservation_id},
    ).model_dump(exclude_none=True)

@router.put("/approve")
def approve_or_reject_reservation(
    req: ReservationApprovalRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    """Partner approves (issuing a confirmation number) or rejects a pending reservation"""
    reservation = ReservationService.approve_or_reject(
        db, caller, req.reservation_id, req.status, clock.now()
    )
    return ResponseSchema(
        code="200",
        status="OK",
        message=f"Reservation {reservation.status.value.lower()}",
        result={
            "reservation_id": reservation.id,
            "status": reservation.status.value,
        },
    ).model_dump(exclude_none=True)

@router.get("/confirm/{confirmation_number}", response_model=ReservationResponse)
def confirm_reservation(
    confirmation_number: str,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    """Partner redeems a confirmation number at the point of service"""
    return ReservationService.confirm_by_code(db, caller, confirmation_number, clock.now())

@router.get("/detail/{reservation_id}", response_model=ReservationResponse)
def get_reservation_detail(
    reservation_id: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
):
    return ReservationService.detail(db, caller, reservation_id)

@router.get("/store/{store_id}", response_model=Page[ReservationResponse])
def get_partner_store_reservations(
    store_id: int,
    day: Optional[date] = Query(None, alias="date", description="Filter by day (YYYY-MM-DD)"),
    status: Optional[str] = Query(None, description="Filter by status"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
):
    """All reservations of one of the caller's stores"""
    result = ReservationQueries.for_partner_store(db, caller, store_id, day, status, paging)
    return Page[ReservationResponse].from_result(result, ReservationResponse)

@router.get(
    "/user/store/{store_id}",
    response_model=Page[ReservationSimpleResponse],
    dependencies=[Depends(get_current_username)],
)
def get_user_store_reservations(
    store_id: int,
    day: Optional[date] = Query(None, alias="date", description="Filter by day (YYYY-MM-DD)"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
):
    """Taken slots of a store, as users see them"""
    result = ReservationQueries.for_public_store(db, store_id, day, paging)
    return Page[ReservationSimpleResponse].from_result(result, ReservationSimpleResponse)

@router.get("/user/reservations", response_model=Page[ReservationResponse])
def get_user_reservations(
    day: Optional[date] = Query(None, alias="date", description="Filter by day (YYYY-MM-DD)"),
    status: Optional[str] = Query(None, description="Filter by status"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
):
    result = ReservationQueries.for_caller(db, caller, day, status, paging)
    return Page[ReservationResponse].from_result(result, ReservationResponse)
