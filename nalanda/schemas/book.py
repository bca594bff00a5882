"""
Book schemas module.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from nalanda.schemas.base import BaseSchema


class BookChunk(BaseModel):
    """Schema for chunk response."""
    id: int
    book_id: int
    chunk_number: int
    storage_path: str

    class Config:
        from_attributes = True


class BookChunkCreate(BaseModel):
    """Schema for registering a stored chunk."""
    storage_path: str = Field(..., min_length=1, max_length=1024)


class BookCreate(BaseModel):
    """Schema for book submission."""
    title: str = Field(..., min_length=1, max_length=250)
    description: Optional[str] = Field(None, max_length=2000)
    cover_path: Optional[str] = Field(None, max_length=1024)
    chunk_urls: List[str] = []


class BookUpdate(BaseModel):
    """Schema for book update."""
    title: Optional[str] = Field(None, min_length=1, max_length=250)
    description: Optional[str] = Field(None, max_length=2000)
    cover_path: Optional[str] = Field(None, max_length=1024)


class Book(BaseSchema):
    """Schema for book response."""
    title: str
    description: Optional[str] = None
    author_id: int
    author_name: str
    is_approved: bool
    slug: str
    cover_path: Optional[str] = None
    chunks: List[BookChunk] = []
