# routes/users.py - Account management and login
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from config import get_db
from models.common import ResponseSchema
from models.users import (
    UserRegisterRequest, UserUpdateRequest, UserDeleteRequest,
    UserSetPartnerRequest, UserDetailResponse, Login, TokenResponse
)
from repository.users import get_current_username
from services.users import UserService
from utils.clock import Clock, get_clock

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)

auth_router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

@auth_router.post('/login', response_model=TokenResponse)
def login(request: Login, db: Session = Depends(get_db)):
    token = UserService.login(db, request.username, request.password)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=token)

@router.post('/register')
def register(request: UserRegisterRequest, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    user = UserService.register(db, request.username, request.password, request.email, clock.now())
    return ResponseSchema(
        code="200",
        status="OK",
        message="User registered successfully",
        result={"user_id": user.id, "username": user.username},
    ).model_dump(exclude_none=True)

@router.put('/update')
def update(
    request: UserUpdateRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    UserService.update(db, caller, request.username, request.new_password, request.email, clock.now())
    return ResponseSchema(
        code="200",
        status="OK",
        message="User updated successfully",
    ).model_dump(exclude_none=True)

@router.delete('/delete')
def delete(
    request: UserDeleteRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
):
    UserService.withdraw(db, caller, request.username)
    return ResponseSchema(
        code="200",
        status="OK",
        message="User deleted successfully",
    ).model_dump(exclude_none=True)

@router.get(
    '/details/{username}',
    response_model=UserDetailResponse,
    dependencies=[Depends(get_current_username)],
)
def get_user_details(username: str, db: Session = Depends(get_db)):
    return UserService.details(db, username)

@router.post('/set-partner')
def set_partner(
    request: UserSetPartnerRequest,
    db: Session = Depends(get_db),
    caller: str = Depends(get_current_username),
    clock: Clock = Depends(get_clock),
):
    UserService.set_partner(db, caller, request.username, clock.now())
    return ResponseSchema(
        code="200",
        status="OK",
        message="User is now a partner",
    ).model_dump(exclude_none=True)
