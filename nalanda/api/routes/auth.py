"""
Authentication API endpoints.
"""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nalanda.core.google_oauth import GoogleOAuthClient, get_google_oauth_client
from nalanda.core.security import get_current_user
from nalanda.db.session import get_db
from nalanda.models.user import User
from nalanda.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    RegisterAuthorRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from nalanda.schemas.user import MessageResponse, User as UserSchema
from nalanda.services.auth_service import AuthService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/auth/google",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with a Google authorization code"
)
async def login_with_google(
    payload: GoogleLoginRequest,
    db: Session = Depends(get_db),
    oauth_client: GoogleOAuthClient = Depends(get_google_oauth_client),
):
    """
    Exchange a Google authorization code and issue an access token.

    First-time Google users are registered as free readers.
    """
    return AuthService(db, oauth_client).login_with_google(payload)


@router.post(
    "/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a reader"
)
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Register a reader with email and password."""
    return AuthService(db).register_local(payload)


@router.post(
    "/auth/register-author",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an author"
)
async def register_author(payload: RegisterAuthorRequest, db: Session = Depends(get_db)):
    """Register an author with email, password and identity details."""
    return AuthService(db).register_author(payload)


@router.post(
    "/auth/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with email and password"
)
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate with email and password.

    Unknown emails, wrong passwords and deactivated accounts all answer 401.
    """
    return AuthService(db).login_local(payload)


@router.post(
    "/auth/forgot-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request a password reset"
)
async def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    AuthService(db).forgot_password(payload.email)
    return MessageResponse(message="If the email exists, a reset link has been sent.")


@router.post(
    "/auth/reset-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset a password with a reset token"
)
async def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    AuthService(db).reset_password(payload)
    return MessageResponse(message="Password has been reset successfully.")


@router.get(
    "/auth/me",
    response_model=UserSchema,
    status_code=status.HTTP_200_OK,
    summary="Get the authenticated user"
)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
