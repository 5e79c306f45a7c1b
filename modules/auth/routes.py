from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from database.base import get_db
from modules.auth.schemas import RegisterRequest, RegisterResponse, LoginRequest, TokenResponse
from modules.auth.service import AuthService
from modules.users.models import UserRole
from config.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new customer account.

    - Email and username must be unique
    """
    auth_service = AuthService(db)
    customer = auth_service.register(request)

    return RegisterResponse(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        username=customer.username,
        role=UserRole.CUSTOMER.value,
        message="Registration successful. Please login."
    )


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Login with username (or email) and password.

    `role` selects the account table: customer (default) or admin.
    """
    auth_service = AuthService(db)
    account, access_token = auth_service.login(request)

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=auth_service.get_profile(account, request.role)
    )
