# routes/stores.py - Store registration, partner edits and listings
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from config import get_db
from models.common import Page, ResponseSchema
from models.stores import (
    StoreRegisterRequest, StoreUpdateRequest, StoreDeleteRequest,
    StoreDetailUserResponse, StoreDetailPartnerResponse, StoreSummaryResponse
)
from repository.pagination import PageRequest
from repository.users import get_current_username
from routes.dependencies import page_request
from services.stores import StoreService
from utils.clock import Clock, get_clock

router = APIRouter(prefix="/stores", tags=["Stores"])

@router.post("/register")
def register_store(
    req: StoreRegisterRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    store = StoreService.register(db, caller, req.name, req.location, req.description, clock.now())
    return ResponseSchema(
        code="200",
        status="OK",
        message="Store registered successfully",
        result={"store_id": store.id},
    ).model_dump(exclude_none=True)

@router.put("/update", response_model=StoreDetailPartnerResponse)
def update_store(
    req: StoreUpdateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    return StoreService.update(db, caller, req.id, req.name, req.location, req.description, clock.now())

@router.delete("/withdraw")
def withdraw_store(
    req: StoreDeleteRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
):
    StoreService.withdraw(db, caller, req.id)
    return ResponseSchema(
        code="200",
        status="OK",
        message="Store withdrawn successfully",
    ).model_dump(exclude_none=True)

@router.get("/detail/user/{store_id}", response_model=StoreDetailUserResponse)
def get_store_detail_user(store_id: int, db: Session = Depends(get_db)):
    return StoreService.detail_for_user(db, store_id)

@router.get("/detail/partner/{store_id}", response_model=StoreDetailPartnerResponse)
def get_store_detail_partner(
    store_id: int,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
):
    return StoreService.detail_for_partner(db, caller, store_id)

@router.get("", response_model=Page[StoreSummaryResponse])
def list_stores(
    min_rating: Optional[float] = Query(None, ge=0, le=5, description="Minimum rating filter"),
    sort_by: str = Query("rating", pattern="^(rating|reviews)$", description="Sort by: rating, reviews"),
    paging: PageRequest = Depends(page_request),
    db: Session = Depends(get_db),
):
    """Stores ordered by rating or review count, highest first"""
    result = StoreService.list_stores(db, min_rating, sort_by, paging)
    return Page[StoreSummaryResponse].from_result(result, StoreSummaryResponse)
