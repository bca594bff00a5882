"""
Bookmark API endpoints.
"""
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from nalanda.core.security import get_token_data
from nalanda.db.session import get_db
from nalanda.schemas.bookmark import Bookmark, BookmarkCreate
from nalanda.schemas.token import TokenData
from nalanda.services.bookmark_service import BookmarkService

router = APIRouter()


@router.get("", response_model=List[Bookmark], summary="List the caller's bookmarks")
async def list_bookmarks(db: Session = Depends(get_db), caller: TokenData = Depends(get_token_data)):
    return BookmarkService(db).list_bookmarks(caller.user_id)


@router.post("", response_model=Bookmark, status_code=status.HTTP_201_CREATED, summary="Bookmark a book")
async def add_bookmark(
    payload: BookmarkCreate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    return BookmarkService(db).add_bookmark(caller.user_id, payload.book_id)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove a bookmark")
async def remove_bookmark(
    book_id: int,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    BookmarkService(db).remove_bookmark(caller.user_id, book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
