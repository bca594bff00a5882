"""
Book models module.
Defines the catalog entry, its chunks, reviews and bookmarks.

author_id and user_id columns are plain integers: users live in the auth
service's schema, so there is no foreign key to the users table.
"""
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from nalanda.models.base import BaseModel


class Book(BaseModel):
    """
    Book model for storing catalog entries.
    """
    __tablename__ = "books"

    title = Column(String(250), nullable=False, index=True)
    description = Column(String(2000))
    author_id = Column(Integer, nullable=False, index=True)
    author_name = Column(String(255), nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    slug = Column(String(300), unique=True, index=True, nullable=False)
    cover_path = Column(String(1024))

    # Relationships
    chunks = relationship(
        "BookChunk",
        back_populates="book",
        order_by="BookChunk.chunk_number",
        cascade="all, delete-orphan",
    )
    reviews = relationship("BookReview", back_populates="book", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="book", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Book {self.slug}>"


class BookChunk(BaseModel):
    """
    Ordered page-range slice of a book's PDF.
    """
    __tablename__ = "book_chunks"
    __table_args__ = (
        UniqueConstraint("book_id", "chunk_number", name="uq_book_chunks_book_number"),
    )

    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    chunk_number = Column(Integer, nullable=False)
    storage_path = Column(String(1024), nullable=False)

    book = relationship("Book", back_populates="chunks")

    def __repr__(self):
        return f"<BookChunk {self.book_id}#{self.chunk_number}>"


class BookReview(BaseModel):
    """
    A reader's rating and review text for a book.
    """
    __tablename__ = "book_reviews"
    __table_args__ = (
        UniqueConstraint("book_id", "user_id", name="uq_book_reviews_book_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_book_reviews_rating"),
    )

    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    user_name = Column(String(255), nullable=False, default="")
    rating = Column(Integer, nullable=False)
    review_text = Column(Text)
    # Only set once the review has been edited
    updated_at = Column(DateTime, nullable=True)

    book = relationship("Book", back_populates="reviews")

    def __repr__(self):
        return f"<BookReview book={self.book_id} user={self.user_id}>"


class Bookmark(BaseModel):
    """
    A reader's bookmark on a book.
    """
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_bookmarks_user_book"),
    )

    user_id = Column(Integer, nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)

    book = relationship("Book", back_populates="bookmarks")

    def __repr__(self):
        return f"<Bookmark user={self.user_id} book={self.book_id}>"
