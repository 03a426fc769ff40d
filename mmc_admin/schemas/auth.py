# mmc_admin/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Dict, Any

from mmc_admin.models.user import UserRole


def password_validator(v: str) -> str:
    if len(v) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not any(c.isalpha() for c in v):
        raise ValueError('Password must contain at least one letter')
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain at least one digit')
    return v


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.admin

    @field_validator('password')
    def validate_password(cls, v):
        return password_validator(v)


class Principal(BaseModel):
    """Authenticated identity carried by a verified token."""
    id: str
    username: str
    role: str
    email: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: Principal


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user: Principal


class VerifyResponse(BaseModel):
    success: bool = True
    user: Principal
