# services/users.py - Account management and login
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from repository.reservations import ReservationRepo
from repository.stores import StoreRepo
from repository.users import UserRepo, JWTRepo, pwd_context
from services.transactions import commit
from tables.users import UserRole, Users
from utils.errors import AccessDenied, AlreadyExists, Conflict

logger = logging.getLogger(__name__)

def _ensure_self(caller: str, username: str):
    if caller != username:
        raise AccessDenied(f"User {caller} cannot act on account {username}")

class UserService:

    @staticmethod
    def register(db: Session, username: str, password: str, email: str, now: datetime) -> Users:
        if UserRepo.exists_by_username(db, username):
            raise AlreadyExists(f"Username already exists: {username}")
        if UserRepo.exists_by_email(db, email):
            raise AlreadyExists(f"Email already exists: {email}")

        user = Users(
            username=username,
            password=pwd_context.hash(password),
            email=email,
            role=UserRole.USER,
            create_date=now,
        )
        UserRepo.insert(db, user)
        commit(db, "User")
        db.refresh(user)

        logger.info(f"User {username} registered")
        return user

    @staticmethod
    def update(db: Session, caller: str, username: str, new_password: str, email: str, now: datetime) -> Users:
        _ensure_self(caller, username)
        user = UserRepo.get_by_username(db, username)

        if user.email != email and UserRepo.exists_by_email(db, email):
            raise AlreadyExists(f"Email already exists: {email}")

        user.password = pwd_context.hash(new_password)
        user.email = email
        user.update_date = now
        commit(db, "User")
        db.refresh(user)
        return user

    @staticmethod
    def withdraw(db: Session, caller: str, username: str):
        _ensure_self(caller, username)
        user = UserRepo.get_by_username(db, username)

        if StoreRepo.exists_by_partner(db, user.id) or ReservationRepo.exists_by_user(db, user.id):
            raise Conflict(f"User {username} still owns stores or reservations")

        UserRepo.delete(db, user)
        commit(db, "User")
        logger.info(f"User {username} withdrawn")

    @staticmethod
    def details(db: Session, username: str) -> Users:
        return UserRepo.get_by_username(db, username)

    @staticmethod
    def set_partner(db: Session, caller: str, username: str, now: datetime) -> Users:
        _ensure_self(caller, username)
        user = UserRepo.get_by_username(db, username)

        if user.role == UserRole.PARTNER:
            raise Conflict("User is already a partner")

        user.role = UserRole.PARTNER
        user.update_date = now
        commit(db, "User")
        db.refresh(user)

        logger.info(f"User {username} promoted to partner")
        return user

    @staticmethod
    def login(db: Session, username: str, password: str) -> Optional[str]:
        """Return a bearer token, or None when the credentials do not match"""
        user = UserRepo.find_by_username(db, username)
        if not user or not pwd_context.verify(password, user.password):
            return None
        return JWTRepo.generate_token(user.username)
