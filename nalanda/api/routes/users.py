"""
User administration API endpoints.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from nalanda.core.exceptions import PermissionDeniedError
from nalanda.core.security import get_current_user, get_token_data, require_roles
from nalanda.db.session import get_db
from nalanda.models.user import Role, User
from nalanda.schemas.token import TokenData
from nalanda.schemas.user import (
    AuthorSummary,
    MessageResponse,
    ProfilePictureUpdate,
    ReaderSummary,
    SubscriptionUpdate,
    User as UserSchema,
    UserProfile,
    UserProfileUpdate,
)
from nalanda.services.user_service import UserService

router = APIRouter()
logger = logging.getLogger(__name__)

admin_only = require_roles(Role.ADMIN)


def _require_self_or_admin(user_id: int, caller: TokenData) -> None:
    if caller.user_id != user_id and not caller.is_admin:
        logger.warning(f"User {caller.user_id} attempted to modify user {user_id}")
        raise PermissionDeniedError("Not authorized to modify this user")


@router.get(
    "/users/me/profile",
    response_model=UserProfile,
    status_code=status.HTTP_200_OK,
    summary="Get the caller's profile"
)
async def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = UserService(db).get_profile(current_user.id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.put(
    "/users/me/profile",
    response_model=UserProfile,
    status_code=status.HTTP_200_OK,
    summary="Create or update the caller's profile"
)
async def update_my_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return UserService(db).update_profile(current_user.id, payload)


@router.get(
    "/users/readers",
    response_model=List[ReaderSummary],
    status_code=status.HTTP_200_OK,
    summary="List readers"
)
async def list_readers(db: Session = Depends(get_db), _: TokenData = Depends(admin_only)):
    return UserService(db).list_readers()


@router.get(
    "/users/readers/{user_id}",
    response_model=ReaderSummary,
    status_code=status.HTTP_200_OK,
    summary="Get a reader"
)
async def get_reader(user_id: int, db: Session = Depends(get_db), _: TokenData = Depends(admin_only)):
    reader = UserService(db).get_reader(user_id)
    if reader is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reader not found")
    return reader


@router.get(
    "/users/authors",
    response_model=List[AuthorSummary],
    status_code=status.HTTP_200_OK,
    summary="List authors"
)
async def list_authors(db: Session = Depends(get_db), _: TokenData = Depends(admin_only)):
    return UserService(db).list_authors()


@router.get(
    "/users/authors/{user_id}",
    response_model=AuthorSummary,
    status_code=status.HTTP_200_OK,
    summary="Get an author"
)
async def get_author(user_id: int, db: Session = Depends(get_db), _: TokenData = Depends(admin_only)):
    author = UserService(db).get_author(user_id)
    if author is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author not found")
    return author


@router.patch(
    "/users/{user_id}/activate",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Activate a user"
)
async def activate_user(user_id: int, db: Session = Depends(get_db), _: TokenData = Depends(admin_only)):
    UserService(db).activate_user(user_id)
    return MessageResponse(message=f"User {user_id} activated successfully")


@router.patch(
    "/users/{user_id}/deactivate",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Deactivate a user"
)
async def deactivate_user(user_id: int, db: Session = Depends(get_db), _: TokenData = Depends(admin_only)):
    UserService(db).deactivate_user(user_id)
    return MessageResponse(message=f"User {user_id} deactivated successfully")


@router.patch(
    "/users/{user_id}/profile-picture",
    response_model=UserSchema,
    status_code=status.HTTP_200_OK,
    summary="Change a user's profile picture"
)
async def change_profile_picture(
    user_id: int,
    payload: ProfilePictureUpdate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    _require_self_or_admin(user_id, caller)
    return UserService(db).change_profile_picture(user_id, str(payload.picture_url))


@router.patch(
    "/users/readers/{user_id}/subscription",
    response_model=ReaderSummary,
    status_code=status.HTTP_200_OK,
    summary="Change a reader's subscription tier"
)
async def change_subscription(
    user_id: int,
    payload: SubscriptionUpdate,
    db: Session = Depends(get_db),
    caller: TokenData = Depends(get_token_data),
):
    """
    Change a reader's subscription.

    Readers may change their own tier; admins may change anyone's.
    """
    _require_self_or_admin(user_id, caller)
    user = UserService(db).change_subscription(user_id, payload.subscription)
    return ReaderSummary.model_validate(user)
