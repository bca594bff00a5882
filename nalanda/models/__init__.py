"""
Models package initialization.
"""

from nalanda.models.base import BaseModel
from nalanda.models.user import User, UserProfile, Role, SubscriptionTier
from nalanda.models.book import Book, BookChunk, BookReview, Bookmark
from nalanda.models.usage import ReaderUsage, PeriodType

__all__ = [
    "BaseModel",
    "User",
    "UserProfile",
    "Role",
    "SubscriptionTier",
    "Book",
    "BookChunk",
    "BookReview",
    "Bookmark",
    "ReaderUsage",
    "PeriodType",
]
