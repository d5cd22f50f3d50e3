# repository/stores.py - Store persistence
from typing import Optional
from sqlalchemy.orm import Session
from tables.stores import Store
from repository.pagination import PageRequest, PageResult, paginate
from utils.errors import NotFound

class StoreRepo:
    @staticmethod
    def insert(db: Session, store: Store):
        db.add(store)
        db.flush()
        return store

    @staticmethod
    def get(db: Session, store_id: int) -> Store:
        store = db.query(Store).filter(Store.id == store_id).first()
        if store is None:
            raise NotFound.store(store_id)
        return store

    @staticmethod
    def get_for_update(db: Session, store_id: int) -> Store:
        """Load the store row locked so aggregate read-modify-write serialises,
        overwriting any stale copy already in the session
        """
        store = db.query(Store).filter(Store.id == store_id).with_for_update().populate_existing().first()
        if store is None:
            raise NotFound.store(store_id)
        return store

    @staticmethod
    def exists_by_name(db: Session, name: str) -> bool:
        return db.query(Store.id).filter(Store.name == name).first() is not None

    @staticmethod
    def exists_by_partner(db: Session, partner_id: int) -> bool:
        return db.query(Store.id).filter(Store.partner_id == partner_id).first() is not None

    @staticmethod
    def find_page(db: Session, min_rating: Optional[float], sort_by: str, page_request: PageRequest) -> PageResult:
        query = db.query(Store)
        if min_rating is not None:
            query = query.filter(Store.rating >= min_rating)
        primary = Store.reviews if sort_by == "reviews" else Store.rating
        return paginate(query, page_request, primary.desc(), Store.id.asc())

    @staticmethod
    def delete(db: Session, store: Store):
        db.delete(store)
        db.flush()
