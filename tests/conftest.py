"""
Pytest fixtures for the Table Planner tests.

Every test gets a fresh in-memory SQLite database, a fixed clock and a
FastAPI test client wired to both.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import Base, get_db
import tables.users, tables.stores, tables.reservations, tables.reviews
from main import app
from repository.users import JWTRepo
from tables.reservations import Reservation, ReservationStatus
from tables.stores import Store
from tables.users import UserRole, Users
from utils.clock import Clock, get_clock

NOW = datetime(2030, 3, 14, 12, 0, 0)


class FixedClock(Clock):
    """Clock that only moves when a test says so."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def client(session_factory, clock):
    """FastAPI test client on the test database and clock"""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(username: str, role: UserRole = UserRole.USER) -> Users:
        user = Users(
            username=username,
            password="not-a-real-hash",
            email=f"{username}@example.com",
            role=role,
            create_date=NOW,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_store(db):
    def _make_store(partner: Users, name: str = "Blue Table", rating: float = 0.0, reviews: int = 0) -> Store:
        store = Store(
            partner_id=partner.id,
            name=name,
            location="12 Harbour Road",
            description="Seafood and small plates",
            rating=rating,
            reviews=reviews,
            created_at=NOW,
            updated_at=NOW,
        )
        db.add(store)
        db.commit()
        db.refresh(store)
        return store
    return _make_store


@pytest.fixture
def make_reservation(db):
    def _make_reservation(
        user: Users,
        store: Store,
        when: datetime = NOW + timedelta(hours=2),
        status: ReservationStatus = ReservationStatus.PENDING,
        confirmation_number: str = None,
        reviewed: bool = False,
    ) -> Reservation:
        reservation = Reservation(
            user_id=user.id,
            store_id=store.id,
            partner_id=store.partner_id,
            reservation_time=when,
            status=status,
            confirmation_number=confirmation_number,
            reviewed=reviewed,
            created_at=NOW,
            updated_at=NOW,
        )
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation
    return _make_reservation


@pytest.fixture
def partner(make_user):
    return make_user("partner_kim", UserRole.PARTNER)


@pytest.fixture
def customer(make_user):
    return make_user("customer_lee")


@pytest.fixture
def store(make_store, partner):
    return make_store(partner)


@pytest.fixture
def auth_headers():
    def _auth_headers(username: str) -> dict:
        return {"Authorization": f"Bearer {JWTRepo.generate_token(username)}"}
    return _auth_headers
