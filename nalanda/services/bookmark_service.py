"""
Bookmark service module.
"""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from nalanda.core.exceptions import ConflictError, NotFoundError
from nalanda.db.session import commit_or_rollback
from nalanda.models.book import Book, Bookmark
from nalanda.schemas.bookmark import Bookmark as BookmarkSchema

logger = logging.getLogger(__name__)


def _to_schema(bookmark: Bookmark) -> BookmarkSchema:
    return BookmarkSchema(
        id=bookmark.id,
        user_id=bookmark.user_id,
        book_id=bookmark.book_id,
        book_title=bookmark.book.title if bookmark.book else None,
        created_at=bookmark.created_at,
    )


class BookmarkService:
    """
    Service for reader bookmarks.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_bookmark(self, user_id: int, book_id: int) -> BookmarkSchema:
        """
        Bookmark a book for a user.

        Raises:
            NotFoundError: If the book does not exist
            ConflictError: If the bookmark already exists
        """
        if self.db.query(Book.id).filter(Book.id == book_id).first() is None:
            raise NotFoundError("Book not found")

        exists = self.db.query(Bookmark.id).filter(
            Bookmark.user_id == user_id,
            Bookmark.book_id == book_id,
        ).first()
        if exists:
            raise ConflictError("Bookmark already exists")

        bookmark = Bookmark(user_id=user_id, book_id=book_id)
        self.db.add(bookmark)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Bookmark already exists")

        self.db.refresh(bookmark)
        logger.info(f"User {user_id} bookmarked book {book_id}")
        return _to_schema(bookmark)

    def remove_bookmark(self, user_id: int, book_id: int) -> None:
        """
        Remove a user's bookmark on a book.

        Raises:
            NotFoundError: If the user has no bookmark on the book
        """
        bookmark = self.db.query(Bookmark).filter(
            Bookmark.user_id == user_id,
            Bookmark.book_id == book_id,
        ).first()
        if not bookmark:
            raise NotFoundError("Bookmark not found")

        self.db.delete(bookmark)
        commit_or_rollback(self.db, "remove bookmark")

    def list_bookmarks(self, user_id: int) -> List[BookmarkSchema]:
        bookmarks = (
            self.db.query(Bookmark)
            .options(joinedload(Bookmark.book))
            .filter(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .all()
        )
        return [_to_schema(b) for b in bookmarks]
