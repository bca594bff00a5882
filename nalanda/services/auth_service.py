"""
Authentication service module.

Composes password hashing, the Google OAuth exchange, token issuance and the
user repository into the register and login flows.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from nalanda.core.config import settings
from nalanda.core.exceptions import AuthenticationError, InvalidRequestError
from nalanda.core.google_oauth import GoogleOAuthClient
from nalanda.core.security import create_access_token, get_password_hash, verify_password
from nalanda.models.user import Role, SubscriptionTier, User, UserProfile
from nalanda.repositories.user_repository import UserRepository
from nalanda.schemas.auth import (
    AuthResponse,
    GoogleLoginRequest,
    LoginRequest,
    RegisterAuthorRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from nalanda.schemas.user import User as UserSchema

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service for registration and login flows.
    """

    def __init__(self, db: Session, oauth_client: Optional[GoogleOAuthClient] = None):
        """
        Initialize the auth service.

        Args:
            db: Database session
            oauth_client: Client used for the Google code exchange
        """
        self.db = db
        self.users = UserRepository(db)
        self.oauth_client = oauth_client or GoogleOAuthClient()

    def _issue(self, user: User) -> AuthResponse:
        return AuthResponse(
            token=create_access_token(user),
            user=UserSchema.model_validate(user),
        )

    def login_with_google(self, request: GoogleLoginRequest) -> AuthResponse:
        """
        Log in with a Google authorization code, creating the user on first login.

        Raises:
            InvalidRequestError: If the code or redirect URI is malformed
            OAuthExchangeError: If the exchange with Google fails
            AuthenticationError: If the account is deactivated
        """
        try:
            info = self.oauth_client.exchange_code(request.code, request.redirect_uri)
        except ValueError as e:
            raise InvalidRequestError(str(e))

        user = self.users.get_by_google_id(info.id)
        if user is None:
            user = self.users.get_by_email(info.email)
            if user is not None:
                # Same person previously registered with a password
                user.google_id = info.id
                self.users.save()
                logger.info(f"Linked Google account to existing user {user.id}")
            else:
                user = self.users.add(User(
                    google_id=info.id,
                    email=info.email,
                    name=info.name,
                    role=Role.READER,
                    subscription=SubscriptionTier.FREE,
                    active=True,
                ))

        if not user.active:
            logger.warning(f"Google login attempt for inactive user: {user.email}")
            raise AuthenticationError("Account is deactivated")

        logger.info(f"Successful Google login for user: {user.email}")
        return self._issue(user)

    def register_local(self, request: RegisterRequest) -> AuthResponse:
        """
        Register a reader with email and password.

        Raises:
            ConflictError: If the email is already registered
        """
        user = self.users.add(User(
            email=request.email,
            name=request.name,
            password_hash=get_password_hash(request.password),
            role=Role.READER,
            subscription=SubscriptionTier.FREE,
            active=True,
        ))
        return self._issue(user)

    def register_author(self, request: RegisterAuthorRequest) -> AuthResponse:
        """
        Register an author together with their identity profile.

        Raises:
            ConflictError: If the email is already registered
        """
        user = User(
            email=request.email,
            name=request.name,
            password_hash=get_password_hash(request.password),
            role=Role.AUTHOR,
            subscription=SubscriptionTier.AUTHOR,
            active=True,
        )
        user.profile = UserProfile(nic=request.nic, phone=request.phone)
        user = self.users.add(user)
        return self._issue(user)

    def login_local(self, request: LoginRequest) -> AuthResponse:
        """
        Log in with email and password.

        Raises:
            AuthenticationError: On unknown email, wrong password or inactive account
        """
        user = self.users.get_by_email(request.email)

        if not user or not user.password_hash or not verify_password(request.password, user.password_hash):
            logger.warning(f"Failed login attempt for user: {request.email}")
            raise AuthenticationError("Invalid email or password")

        if not user.active:
            logger.warning(f"Login attempt for inactive user: {request.email}")
            raise AuthenticationError("Account is deactivated")

        logger.info(f"Successful login for user: {request.email}")
        return self._issue(user)

    def forgot_password(self, email: str) -> Optional[str]:
        """
        Start a password reset.

        Unknown emails and Google-only accounts are ignored so callers cannot
        probe which addresses are registered.

        Returns:
            Optional[str]: The reset token, or None if nothing was issued
        """
        user = self.users.get_by_email(email)
        if not user or not user.password_hash:
            logger.info(f"Password reset requested for unknown account: {email}")
            return None

        token = secrets.token_urlsafe(32)
        user.password_reset_token = token
        user.password_reset_token_expiry = datetime.utcnow() + timedelta(
            minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
        )
        self.users.save()

        # TODO: deliver the reset link by email once a mail provider is configured
        logger.info(f"Password reset token issued for user {user.id}")
        return token

    def reset_password(self, request: ResetPasswordRequest) -> None:
        """
        Complete a password reset.

        Raises:
            InvalidRequestError: If the token is unknown or expired
        """
        user = self.users.get_by_reset_token(request.token)
        if (
            not user
            or not user.password_reset_token_expiry
            or user.password_reset_token_expiry < datetime.utcnow()
        ):
            raise InvalidRequestError("Invalid or expired reset token")

        user.password_hash = get_password_hash(request.new_password)
        user.password_reset_token = None
        user.password_reset_token_expiry = None
        self.users.save()
        logger.info(f"Password reset for user {user.id}")

    def ensure_default_admin(self) -> Optional[User]:
        """
        Create the configured admin account if no admin exists yet.

        Does nothing unless ADMIN_PASSWORD is set.

        Returns:
            Optional[User]: The created admin, or None if nothing was created
        """
        if not settings.ADMIN_PASSWORD:
            return None
        if self.users.any_with_role(Role.ADMIN):
            return None

        admin = self.users.add(User(
            email=settings.ADMIN_EMAIL,
            name=settings.ADMIN_NAME,
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            role=Role.ADMIN,
            subscription=SubscriptionTier.PREMIUM,
            active=True,
        ))
        logger.info(f"Seeded default admin account {admin.email}")
        return admin
