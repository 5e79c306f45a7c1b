from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
import re

from modules.users.models import UserRole


# ============ Register ============
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    username: str = Field(..., min_length=3, max_length=50, pattern="^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        if v and not re.match(r'^\+?[0-9][0-9\- ]{5,19}$', v):
            raise ValueError('Invalid phone number format')
        return v


class RegisterResponse(BaseModel):
    id: int
    name: str
    email: str
    username: str
    role: str
    message: str


# ============ Login ============
class LoginRequest(BaseModel):
    identifier: str = Field(..., description="Email or username")
    password: str
    role: UserRole = UserRole.CUSTOMER


class AccountProfile(BaseModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    role: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: AccountProfile
