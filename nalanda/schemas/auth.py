"""
Authentication schemas module.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from nalanda.schemas.user import User


class GoogleLoginRequest(BaseModel):
    """Authorization code returned by Google's consent screen."""
    code: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Schema for local reader registration."""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8)


class RegisterAuthorRequest(RegisterRequest):
    """Schema for author registration."""
    nic: str = Field(..., min_length=1, max_length=12)
    phone: Optional[str] = Field(None, max_length=15)


class LoginRequest(BaseModel):
    """Schema for local login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class AuthResponse(BaseModel):
    """Issued access token together with the authenticated user."""
    token: str
    token_type: str = "bearer"
    user: User
