# models/users.py - Account request/response models
from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
from tables.users import UserRole

def _check_username(v: str) -> str:
    v = v.strip()
    if not 3 <= len(v) <= 50:
        raise ValueError('Username must be between 3 and 50 characters')
    return v

def _check_password(v: str) -> str:
    if len(v) < 6:
        raise ValueError('Password must be at least 6 characters long')
    if len(v.encode("utf-8")) > 72:
        raise ValueError('Password cannot exceed 72 bytes')
    return v

def _check_email(v: str) -> str:
    v = v.strip()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError('Email must be a valid address')
    return v

class UserRegisterRequest(BaseModel):
    username: str
    password: str
    email: str

    validate_username = field_validator('username')(_check_username)
    validate_password = field_validator('password')(_check_password)
    validate_email = field_validator('email')(_check_email)

class UserUpdateRequest(BaseModel):
    username: str
    new_password: str
    email: str

    validate_password = field_validator('new_password')(_check_password)
    validate_email = field_validator('email')(_check_email)

class UserDeleteRequest(BaseModel):
    username: str

class UserSetPartnerRequest(BaseModel):
    username: str

class UserDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    email: str
    role: UserRole
    create_date: datetime

class Login(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
