# repository/users.py - User persistence, password hashing and bearer-token identity
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from tables.users import Users
from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from utils.errors import NotFound

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
security = HTTPBearer()

class UserRepo:
    @staticmethod
    def insert(db: Session, user: Users):
        db.add(user)
        db.flush()
        return user

    @staticmethod
    def find_by_username(db: Session, username: str) -> Optional[Users]:
        return db.query(Users).filter(Users.username == username).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Users:
        """Resolve a caller identity to its user row or raise NotFound"""
        user = UserRepo.find_by_username(db, username)
        if user is None:
            raise NotFound.username(username)
        return user

    @staticmethod
    def exists_by_username(db: Session, username: str) -> bool:
        return db.query(Users.id).filter(Users.username == username).first() is not None

    @staticmethod
    def exists_by_email(db: Session, email: str) -> bool:
        return db.query(Users.id).filter(Users.email == email).first() is not None

    @staticmethod
    def delete(db: Session, user: Users):
        db.delete(user)
        db.flush()

class JWTRepo:
    @staticmethod
    def generate_token(username: str, expires_delta: Optional[timedelta] = None) -> str:
        """Issue a signed access token whose subject is the username"""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
        payload = {
            "sub": username,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> Optional[str]:
        """Verify JWT token and extract the username"""
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
            username = payload.get("sub")
            if username is None:
                raise JWTError("Invalid token format")
            return username
        except JWTError:
            return None

def get_current_username(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Resolve the caller identity once per request from the bearer token"""
    username = JWTRepo.verify_token(credentials.credentials)

    if username is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return username
