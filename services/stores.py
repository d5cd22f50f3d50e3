# services/stores.py - Store registration and partner edits
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from repository.pagination import PageRequest, PageResult
from repository.reservations import ReservationRepo
from repository.stores import StoreRepo
from repository.users import UserRepo
from services.transactions import commit
from tables.stores import Store
from tables.users import UserRole, Users
from utils.errors import AccessDenied, AlreadyExists, Conflict

logger = logging.getLogger(__name__)

def _ensure_partner(user: Users, store: Store):
    if store.partner_id != user.id:
        raise AccessDenied.store(user.username, store.name)

class StoreService:

    @staticmethod
    def register(db: Session, caller: str, name: str, location: str, description: str, now: datetime) -> Store:
        user = UserRepo.get_by_username(db, caller)
        if user.role != UserRole.PARTNER:
            raise AccessDenied(f"User {caller} must be a partner to register a store")

        if StoreRepo.exists_by_name(db, name):
            raise AlreadyExists(f"Store already exists with name: {name}")

        store = Store(
            partner_id=user.id,
            name=name,
            location=location,
            description=description,
            rating=0.0,
            reviews=0,
            created_at=now,
            updated_at=now,
        )
        StoreRepo.insert(db, store)
        commit(db, "Store")
        db.refresh(store)

        logger.info(f"Store {store.id} ({name}) registered by {caller}")
        return store

    @staticmethod
    def update(
        db: Session,
        caller: str,
        store_id: int,
        name: str,
        location: str,
        description: str,
        now: datetime,
    ) -> Store:
        user = UserRepo.get_by_username(db, caller)
        store = StoreRepo.get_for_update(db, store_id)
        _ensure_partner(user, store)

        if store.name != name and StoreRepo.exists_by_name(db, name):
            raise AlreadyExists(f"Store already exists with name: {name}")

        store.name = name
        store.location = location
        store.description = description
        store.updated_at = now
        commit(db, "Store")
        db.refresh(store)
        return store

    @staticmethod
    def withdraw(db: Session, caller: str, store_id: int):
        user = UserRepo.get_by_username(db, caller)
        store = StoreRepo.get_for_update(db, store_id)
        _ensure_partner(user, store)

        # Reservations are kept as history, so their store must stay
        if ReservationRepo.exists_by_store(db, store.id):
            raise Conflict(f"Store {store.name} has reservations and cannot be withdrawn")

        StoreRepo.delete(db, store)
        commit(db, "Store")
        logger.info(f"Store {store_id} withdrawn by {caller}")

    @staticmethod
    def detail_for_user(db: Session, store_id: int) -> Store:
        return StoreRepo.get(db, store_id)

    @staticmethod
    def detail_for_partner(db: Session, caller: str, store_id: int) -> Store:
        user = UserRepo.get_by_username(db, caller)
        store = StoreRepo.get(db, store_id)
        _ensure_partner(user, store)
        return store

    @staticmethod
    def list_stores(db: Session, min_rating: Optional[float], sort_by: str, page_request: PageRequest) -> PageResult:
        return StoreRepo.find_page(db, min_rating, sort_by, page_request)
