"""
Book review schemas module.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class BookReviewCreate(BaseModel):
    """
    Schema for review creation.

    Rating bounds are checked by the service so that out-of-range values
    surface as a 400 with a readable message.
    """
    book_id: int
    rating: int
    review_text: Optional[str] = Field(None, max_length=5000)


class BookReviewUpdate(BaseModel):
    """Schema for review update."""
    rating: int
    review_text: Optional[str] = Field(None, max_length=5000)


class BookReview(BaseModel):
    """Schema for review response."""
    id: int
    book_id: int
    user_id: int
    user_name: str
    rating: int
    review_text: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookReviewStats(BaseModel):
    """Aggregate rating information for a book."""
    book_id: int
    average_rating: float
    total_reviews: int
