"""
Bookmark schemas module.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class BookmarkCreate(BaseModel):
    book_id: int


class Bookmark(BaseModel):
    """Schema for bookmark response."""
    id: int
    user_id: int
    book_id: int
    book_title: Optional[str] = None
    created_at: datetime
