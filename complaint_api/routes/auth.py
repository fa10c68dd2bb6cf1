"""Registration and login endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from complaint_api.db.session import get_db
from complaint_api.services.accounts import AccountService

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    """Registration request; missing fields are reported as 400, not 422."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    userId: int


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user account."""
    user = AccountService(db).register(
        name=request_data.name,
        email=request_data.email,
        password=request_data.password,
        phone=request_data.phone,
    )
    return RegisterResponse(userId=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(request_data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    token, user = AccountService(db).authenticate(request_data.email, request_data.password)
    return LoginResponse(
        token=token,
        user=UserResponse(id=user.id, name=user.name, email=user.email, role=user.role),
    )
