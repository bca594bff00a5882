"""
Service-level exceptions.

Services raise these with a human-readable message; the exception handler
registered in main.py turns them into JSON error responses.
"""
from datetime import datetime
from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(ServiceError):
    status_code = 400


class OAuthExchangeError(ServiceError):
    """The OAuth provider rejected the code or could not be reached."""
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class PermissionDeniedError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class QuotaExceededError(ServiceError):
    """A free reader has used up their chunk allowance."""
    status_code = 429

    def __init__(self, message: str, remaining: int = 0, reset_at: Optional[datetime] = None):
        super().__init__(message)
        self.remaining = remaining
        self.reset_at = reset_at
