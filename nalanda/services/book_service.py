"""
Book catalog service module.

Provides the submission, approval and chunk delivery workflow.
"""
import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from nalanda.core.config import settings
from nalanda.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
)
from nalanda.db.session import commit_or_rollback
from nalanda.models.book import Book, BookChunk
from nalanda.models.user import Role, SubscriptionTier
from nalanda.schemas.book import BookCreate, BookUpdate
from nalanda.schemas.token import TokenData
from nalanda.services.usage_service import UsageService

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.strip().lower()).strip("-")
    return slug or "book"


class BookService:
    """
    Service for book catalog operations.
    """

    def __init__(self, db: Session, usage_service: Optional[UsageService] = None):
        """
        Initialize the book service.

        Args:
            db: Database session
            usage_service: Quota tracker consulted when free readers fetch chunks
        """
        self.db = db
        self.usage_service = usage_service or UsageService(db)

    def _unique_slug(self, title: str, exclude_id: Optional[int] = None) -> str:
        base = slugify(title)
        candidate = base
        suffix = 2
        while True:
            query = self.db.query(Book.id).filter(Book.slug == candidate)
            if exclude_id is not None:
                query = query.filter(Book.id != exclude_id)
            if query.first() is None:
                return candidate
            candidate = f"{base}-{suffix}"
            suffix += 1

    @staticmethod
    def _can_manage(book: Book, caller: TokenData) -> bool:
        return caller.is_admin or book.author_id == caller.user_id

    def _is_visible(self, book: Book, caller: Optional[TokenData]) -> bool:
        if book.is_approved:
            return True
        return caller is not None and self._can_manage(book, caller)

    def _get_or_404(self, book_id: int) -> Book:
        book = self.db.query(Book).filter(Book.id == book_id).first()
        if not book:
            logger.warning(f"Book not found: {book_id}")
            raise NotFoundError("Book not found")
        return book

    def _get_managed(self, book_id: int, caller: TokenData) -> Book:
        book = self._get_or_404(book_id)
        if not self._can_manage(book, caller):
            logger.warning(f"User {caller.user_id} may not modify book {book_id}")
            raise PermissionDeniedError("Only the book's author or an admin can modify this book")
        return book

    def _commit(self, action: str) -> None:
        commit_or_rollback(self.db, action)

    def create_book(self, data: BookCreate, caller: TokenData) -> Book:
        """
        Submit a new book. Books start unapproved.

        Args:
            data: Book details and optional chunk storage paths, in reading order
            caller: The submitting author
        """
        book = Book(
            title=data.title,
            description=data.description,
            author_id=caller.user_id,
            author_name=caller.name or "",
            is_approved=False,
            slug=self._unique_slug(data.title),
            cover_path=data.cover_path,
            chunks=[
                BookChunk(chunk_number=index + 1, storage_path=url)
                for index, url in enumerate(data.chunk_urls)
            ],
        )
        self.db.add(book)
        self._commit("create book")
        self.db.refresh(book)

        logger.info(f"Book {book.id} submitted by author {caller.user_id}")
        return book

    def list_approved(self) -> List[Book]:
        return self.db.query(Book).filter(Book.is_approved.is_(True)).order_by(Book.created_at.desc()).all()

    def list_pending(self) -> List[Book]:
        return self.db.query(Book).filter(Book.is_approved.is_(False)).order_by(Book.created_at).all()

    def list_by_author(self, author_id: int) -> List[Book]:
        return self.db.query(Book).filter(Book.author_id == author_id).order_by(Book.created_at.desc()).all()

    def get_book(self, book_id: int, caller: Optional[TokenData] = None) -> Book:
        """
        Fetch a book visible to the caller.

        Unapproved books are only visible to admins and their author; everyone
        else gets NotFoundError.
        """
        book = self._get_or_404(book_id)
        if not self._is_visible(book, caller):
            raise NotFoundError("Book not found")
        return book

    def approve_book(self, book_id: int) -> Book:
        """
        Approve a book. Approving an already approved book is a no-op.

        Raises:
            NotFoundError: If the book does not exist
        """
        book = self._get_or_404(book_id)
        if book.is_approved:
            logger.info(f"Book {book_id} already approved")
            return book

        book.is_approved = True
        self._commit("approve book")
        self.db.refresh(book)
        logger.info(f"Book {book_id} approved")
        return book

    def update_book(self, book_id: int, data: BookUpdate, caller: TokenData) -> Book:
        book = self._get_managed(book_id, caller)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("title") and changes["title"] != book.title:
            book.slug = self._unique_slug(changes["title"], exclude_id=book.id)

        for key, value in changes.items():
            if value is not None:
                setattr(book, key, value)

        self._commit("update book")
        self.db.refresh(book)
        return book

    def delete_book(self, book_id: int, caller: TokenData) -> None:
        """
        Delete a book together with its chunks, reviews and bookmarks.
        """
        book = self._get_managed(book_id, caller)
        self.db.delete(book)
        self._commit("delete book")
        logger.info(f"Book {book_id} deleted by user {caller.user_id}")

    def add_chunk(self, book_id: int, storage_path: str, caller: TokenData) -> BookChunk:
        """
        Append a stored chunk as the book's next chunk number.
        """
        book = self._get_managed(book_id, caller)
        next_number = max((c.chunk_number for c in book.chunks), default=0) + 1

        chunk = BookChunk(book_id=book.id, chunk_number=next_number, storage_path=storage_path)
        self.db.add(chunk)
        self._commit("add chunk")
        self.db.refresh(chunk)
        return chunk

    def get_chunk(self, book_id: int, chunk_number: int, caller: Optional[TokenData] = None) -> BookChunk:
        """
        Fetch one chunk of a book visible to the caller.

        Anonymous callers only get the preview chunks. Free-tier readers may
        read the preview chunks freely; later chunks count against their usage
        quota.

        Raises:
            NotFoundError: If the book or chunk does not exist or is not visible
            AuthenticationError: If an anonymous caller asks past the preview
            QuotaExceededError: If a free reader has no allowance left
        """
        book = self.get_book(book_id, caller)

        chunk = self.db.query(BookChunk).filter(
            BookChunk.book_id == book.id,
            BookChunk.chunk_number == chunk_number,
        ).first()
        if not chunk:
            raise NotFoundError("Chunk not found")

        if caller is None and chunk_number > settings.PREVIEW_CHUNK_COUNT:
            logger.info(f"Anonymous read of chunk {chunk_number} of book {book_id} refused")
            raise AuthenticationError("Sign in to read beyond the preview")

        # consume re-checks the caps inside its own transaction
        if self._is_metered(book, chunk, caller):
            check = self.usage_service.can_consume(caller.user_id)
            if not check.allowed:
                logger.info(f"User {caller.user_id} reached the free reading limit")
                raise QuotaExceededError(
                    "Free reading limit reached",
                    remaining=check.remaining,
                    reset_at=check.reset_at,
                )
            self.usage_service.consume(caller.user_id)

        return chunk

    def _is_metered(self, book: Book, chunk: BookChunk, caller: Optional[TokenData]) -> bool:
        if caller is None or caller.role != Role.READER:
            return False
        if caller.subscription != SubscriptionTier.FREE:
            return False
        return chunk.chunk_number > settings.PREVIEW_CHUNK_COUNT
