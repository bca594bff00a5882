"""
Book review service module.
"""
import logging
from datetime import datetime
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nalanda.core.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from nalanda.db.session import commit_or_rollback
from nalanda.models.book import Book, BookReview
from nalanda.schemas.review import BookReviewCreate, BookReviewStats, BookReviewUpdate
from nalanda.schemas.token import TokenData

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _validate_rating(rating: int) -> None:
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRequestError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


class ReviewService:
    """
    Service for book reviews.
    """

    def __init__(self, db: Session):
        self.db = db

    def _require_book(self, book_id: int) -> None:
        if self.db.query(Book.id).filter(Book.id == book_id).first() is None:
            raise NotFoundError("Book not found")

    def _get_or_404(self, review_id: int) -> BookReview:
        review = self.db.query(BookReview).filter(BookReview.id == review_id).first()
        if not review:
            raise NotFoundError("Review not found")
        return review

    def _get_owned(self, review_id: int, caller: TokenData) -> BookReview:
        review = self._get_or_404(review_id)
        if review.user_id != caller.user_id and not caller.is_admin:
            raise PermissionDeniedError("You can only modify your own reviews")
        return review

    def list_reviews(self) -> List[BookReview]:
        return self.db.query(BookReview).order_by(BookReview.created_at.desc(), BookReview.id.desc()).all()

    def get_review(self, review_id: int) -> BookReview:
        return self._get_or_404(review_id)

    def list_by_book(self, book_id: int) -> List[BookReview]:
        self._require_book(book_id)
        return self.db.query(BookReview).filter(
            BookReview.book_id == book_id
        ).order_by(BookReview.created_at.desc(), BookReview.id.desc()).all()

    def list_by_user(self, user_id: int) -> List[BookReview]:
        return self.db.query(BookReview).filter(
            BookReview.user_id == user_id
        ).order_by(BookReview.created_at.desc(), BookReview.id.desc()).all()

    def create_review(self, data: BookReviewCreate, caller: TokenData) -> BookReview:
        """
        Create a review. Each user may review a book once.

        Raises:
            InvalidRequestError: If the rating is outside 1-5
            NotFoundError: If the book does not exist
            ConflictError: If the user already reviewed the book
        """
        _validate_rating(data.rating)
        self._require_book(data.book_id)

        existing = self.db.query(BookReview).filter(
            BookReview.book_id == data.book_id,
            BookReview.user_id == caller.user_id,
        ).first()
        if existing:
            raise ConflictError("User has already reviewed this book")

        review = BookReview(
            book_id=data.book_id,
            user_id=caller.user_id,
            user_name=caller.name or "",
            rating=data.rating,
            review_text=data.review_text,
        )
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User has already reviewed this book")

        self.db.refresh(review)
        logger.info(f"Review {review.id} created for book {data.book_id} by user {caller.user_id}")
        return review

    def update_review(self, review_id: int, data: BookReviewUpdate, caller: TokenData) -> BookReview:
        """
        Update a review's rating and text.

        Raises:
            InvalidRequestError: If the rating is outside 1-5
            NotFoundError: If the review does not exist
            PermissionDeniedError: If the caller did not write the review
        """
        _validate_rating(data.rating)
        review = self._get_owned(review_id, caller)

        review.rating = data.rating
        review.review_text = data.review_text
        review.updated_at = datetime.utcnow()

        commit_or_rollback(self.db, "update review")
        self.db.refresh(review)
        return review

    def delete_review(self, review_id: int, caller: TokenData) -> None:
        review = self._get_owned(review_id, caller)
        self.db.delete(review)
        commit_or_rollback(self.db, "delete review")
        logger.info(f"Review {review_id} deleted by user {caller.user_id}")

    def get_stats(self, book_id: int) -> BookReviewStats:
        """
        Average rating and review count for a book.

        Raises:
            NotFoundError: If the book does not exist
        """
        self._require_book(book_id)
        average, total = self.db.query(
            func.avg(BookReview.rating),
            func.count(BookReview.id),
        ).filter(BookReview.book_id == book_id).one()

        return BookReviewStats(
            book_id=book_id,
            average_rating=round(float(average), 2) if average is not None else 0.0,
            total_reviews=total,
        )
