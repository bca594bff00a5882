"""
Book review API endpoints.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from nalanda.core.security import get_token_data
from nalanda.db.session import get_db
from nalanda.schemas.review import BookReview, BookReviewCreate, BookReviewStats, BookReviewUpdate
from nalanda.schemas.token import TokenData
from nalanda.services.review_service import ReviewService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[BookReview], summary="List all reviews")
async def list_reviews(db: Session = Depends(get_db)):
    return ReviewService(db).list_reviews()


@router.post(
    "",
    response_model=BookReview,
    status_code=status.HTTP_201_CREATED,
    summary="Review a book"
)
async def create_review(
    payload: BookReviewCreate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    """
    Create a review for a book.

    Raises:
        400 if the rating is outside 1-5, 404 if the book is unknown and
        409 if the caller already reviewed the book.
    """
    return ReviewService(db).create_review(payload, caller)


@router.get("/book/{book_id}", response_model=List[BookReview], summary="List a book's reviews")
async def list_book_reviews(book_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).list_by_book(book_id)


@router.get("/book/{book_id}/stats", response_model=BookReviewStats, summary="Rating summary for a book")
async def get_book_review_stats(book_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).get_stats(book_id)


@router.get("/user/{user_id}", response_model=List[BookReview], summary="List a user's reviews")
async def list_user_reviews(user_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).list_by_user(user_id)


@router.get("/{review_id}", response_model=BookReview, summary="Get a review")
async def get_review(review_id: int, db: Session = Depends(get_db)):
    return ReviewService(db).get_review(review_id)


@router.put("/{review_id}", response_model=BookReview, summary="Update a review")
async def update_review(
    review_id: int,
    payload: BookReviewUpdate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    return ReviewService(db).update_review(review_id, payload, caller)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a review")
async def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    ReviewService(db).delete_review(review_id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
