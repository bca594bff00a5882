"""
Book catalog API endpoints.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from nalanda.core.security import get_optional_token_data, get_token_data, require_roles
from nalanda.db.session import get_db
from nalanda.models.user import Role
from nalanda.schemas.book import Book, BookChunk, BookChunkCreate, BookCreate, BookUpdate
from nalanda.schemas.token import TokenData
from nalanda.services.book_service import BookService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=List[Book],
    status_code=status.HTTP_200_OK,
    summary="List approved books"
)
async def list_books(db: Session = Depends(get_db)):
    return BookService(db).list_approved()


@router.post(
    "",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a book"
)
async def create_book(
    payload: BookCreate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(require_roles(Role.AUTHOR, Role.ADMIN)),
):
    """
    Submit a book for approval.

    Args:
        payload: Title, description, cover and optional chunk storage paths
        db: Database session
        caller: The submitting author or admin

    Returns:
        Book: The new, unapproved book
    """
    return BookService(db).create_book(payload, caller)


@router.get(
    "/pending",
    response_model=List[Book],
    status_code=status.HTTP_200_OK,
    summary="List books awaiting approval"
)
async def list_pending_books(
    db: Session = Depends(get_db),
    _: TokenData = Depends(require_roles(Role.ADMIN)),
):
    return BookService(db).list_pending()


@router.get(
    "/mine",
    response_model=List[Book],
    status_code=status.HTTP_200_OK,
    summary="List the caller's books"
)
async def list_my_books(
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    return BookService(db).list_by_author(caller.user_id)


@router.get(
    "/{book_id}",
    response_model=Book,
    status_code=status.HTTP_200_OK,
    summary="Get a book"
)
async def get_book(
    book_id: int,
    db: Session = Depends(get_db),
    caller: Optional[TokenData] = Depends(get_optional_token_data),
):
    return BookService(db).get_book(book_id, caller)


@router.put(
    "/{book_id}",
    response_model=Book,
    status_code=status.HTTP_200_OK,
    summary="Update a book"
)
async def update_book(
    book_id: int,
    payload: BookUpdate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    return BookService(db).update_book(book_id, payload, caller)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book"
)
async def delete_book(
    book_id: int,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    BookService(db).delete_book(book_id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{book_id}/approve",
    response_model=Book,
    status_code=status.HTTP_200_OK,
    summary="Approve a book"
)
async def approve_book(
    book_id: int,
    db: Session = Depends(get_db),
    _: TokenData = Depends(require_roles(Role.ADMIN)),
):
    """
    Approve a pending book. Approving an approved book returns it unchanged.
    """
    return BookService(db).approve_book(book_id)


@router.post(
    "/{book_id}/chunks",
    response_model=BookChunk,
    status_code=status.HTTP_201_CREATED,
    summary="Register the next chunk of a book"
)
async def add_chunk(
    book_id: int,
    payload: BookChunkCreate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    return BookService(db).add_chunk(book_id, payload.storage_path, caller)


@router.get(
    "/{book_id}/chunks/{chunk_number}",
    response_model=BookChunk,
    status_code=status.HTTP_200_OK,
    summary="Get a chunk of a book"
)
async def get_chunk(
    book_id: int,
    chunk_number: int,
    db: Session = Depends(get_db),
    caller: Optional[TokenData] = Depends(get_optional_token_data),
):
    """
    Fetch a chunk of a book.

    Free readers past the preview chunks are metered; once their allowance
    runs out this answers 429 with the reset time.
    """
    return BookService(db).get_chunk(book_id, chunk_number, caller)
