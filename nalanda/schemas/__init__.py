"""
Schemas package initialization.
"""
from nalanda.schemas.base import BaseSchema
from nalanda.schemas.token import TokenData
from nalanda.schemas.user import (
    User,
    ReaderSummary,
    AuthorSummary,
    SubscriptionUpdate,
    ProfilePictureUpdate,
    UserProfile,
    UserProfileUpdate,
    MessageResponse,
)
from nalanda.schemas.auth import (
    GoogleLoginRequest,
    RegisterRequest,
    RegisterAuthorRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    AuthResponse,
)
from nalanda.schemas.book import Book, BookCreate, BookUpdate, BookChunk, BookChunkCreate
from nalanda.schemas.review import BookReview, BookReviewCreate, BookReviewUpdate, BookReviewStats
from nalanda.schemas.bookmark import Bookmark, BookmarkCreate
from nalanda.schemas.usage import UsageCheck, UsageSummary

__all__ = [
    "BaseSchema",
    "TokenData",
    "User",
    "ReaderSummary",
    "AuthorSummary",
    "SubscriptionUpdate",
    "ProfilePictureUpdate",
    "UserProfile",
    "UserProfileUpdate",
    "MessageResponse",
    "GoogleLoginRequest",
    "RegisterRequest",
    "RegisterAuthorRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "AuthResponse",
    "Book",
    "BookCreate",
    "BookUpdate",
    "BookChunk",
    "BookChunkCreate",
    "BookReview",
    "BookReviewCreate",
    "BookReviewUpdate",
    "BookReviewStats",
    "Bookmark",
    "BookmarkCreate",
    "UsageCheck",
    "UsageSummary",
]
