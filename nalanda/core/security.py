"""
Security utilities module.
Provides utilities for password hashing, token creation, and authentication.
"""
import base64
import binascii
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq, getrandbytes, rng
from pydantic import ValidationError
from sqlalchemy.orm import Session

from nalanda.core.config import settings
from nalanda.core.exceptions import AuthenticationError, PermissionDeniedError
from nalanda.db.session import get_db
from nalanda.models.user import Role, User
from nalanda.schemas.token import TokenData

logger = logging.getLogger(__name__)

SALT_SIZE = 16  # 128 bits
KEY_SIZE = 32  # 256 bits
ITERATIONS = 10000

# Bearer scheme; missing credentials are reported by the dependencies below
bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """
    Hash a password with a random salt.

    Args:
        password: The plain-text password

    Returns:
        str: ``base64(salt):base64(hash)``

    Raises:
        ValueError: If the password is empty or whitespace
    """
    if password is None or not password.strip():
        raise ValueError("Password cannot be null or empty.")

    salt = getrandbytes(rng, SALT_SIZE)
    key = pbkdf2_hmac("sha256", password, salt, ITERATIONS, KEY_SIZE)
    return f"{base64.b64encode(salt).decode('ascii')}:{base64.b64encode(key).decode('ascii')}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against a stored hash.

    Malformed stored hashes never raise; they simply fail verification.

    Args:
        plain_password: The plain-text password
        hashed_password: The stored ``salt:hash`` string

    Returns:
        bool: True if the password matches the hash
    """
    if not hashed_password or plain_password is None:
        return False

    parts = hashed_password.split(":")
    if len(parts) != 2:
        return False

    try:
        salt = base64.b64decode(parts[0], validate=True)
        expected = base64.b64decode(parts[1], validate=True)
    except (binascii.Error, ValueError):
        return False

    computed = pbkdf2_hmac("sha256", plain_password, salt, ITERATIONS, KEY_SIZE)
    return consteq(expected, computed)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token for a user.

    Args:
        user: The user the token identifies
        expires_delta: Optional expiration time

    Returns:
        str: The encoded JWT token
    """
    now = datetime.utcnow()
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": Role(user.role).value,
        "subscription": user.subscription.value if user.subscription else None,
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenData:
    """
    Decode and validate an access token.

    Args:
        token: The JWT token

    Returns:
        TokenData: The claims carried by the token

    Raises:
        AuthenticationError: If the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Expired access token presented")
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT error: {str(e)}")
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("sub")
    if user_id is None:
        logger.warning("Missing user_id in token")
        raise AuthenticationError("Could not validate credentials")

    try:
        return TokenData(
            user_id=int(user_id),
            email=payload.get("email"),
            name=payload.get("name"),
            role=payload.get("role") or Role.READER,
            subscription=payload.get("subscription") or "Free",
        )
    except (ValueError, ValidationError):
        logger.warning(f"Malformed claims in token for subject {user_id}")
        raise AuthenticationError("Could not validate credentials")


def _load_active_user(db: Session, token_data: TokenData) -> User:
    user = db.query(User).filter(User.id == token_data.user_id).first()

    if user is None:
        logger.warning(f"User not found: {token_data.user_id}")
        raise AuthenticationError("Could not validate credentials")

    if not user.active:
        logger.warning(f"Inactive user presented a token: {token_data.user_id}")
        raise AuthenticationError("Account is deactivated")

    return user


def token_data_for(user: User) -> TokenData:
    """Build caller claims from the stored account rather than the token."""
    return TokenData(
        user_id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        subscription=user.subscription,
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the database.

    Args:
        credentials: The bearer token sent with the request
        db: Database session

    Returns:
        User: The authenticated user

    Raises:
        AuthenticationError: If no valid token was sent, or the user no longer
            exists or is inactive
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return _load_active_user(db, decode_access_token(credentials.credentials))


def get_optional_token_data(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[TokenData]:
    """Return the caller's current claims, or None for anonymous requests."""
    if credentials is None:
        return None
    user = _load_active_user(db, decode_access_token(credentials.credentials))
    return token_data_for(user)


def get_token_data(user: User = Depends(get_current_user)) -> TokenData:
    """
    Get the claims of the authenticated caller.

    Role and subscription come from the stored account, so a deactivation or a
    tier change takes effect before the token expires.
    """
    return token_data_for(user)


def require_roles(*roles: Role):
    """
    Build a dependency that only admits active callers holding one of ``roles``.
    """
    def dependency(token_data: TokenData = Depends(get_token_data)) -> TokenData:
        if token_data.role not in roles:
            logger.warning(f"User {token_data.user_id} with role {token_data.role.value} denied")
            raise PermissionDeniedError("You do not have permission to perform this action")
        return token_data

    return dependency
