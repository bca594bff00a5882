"""
User schemas module.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, HttpUrl

from nalanda.models.user import Role, SubscriptionTier
from nalanda.schemas.base import BaseSchema


class User(BaseSchema):
    """Schema for user response."""
    email: str
    name: str
    role: Role
    subscription: SubscriptionTier
    active: bool
    profile_picture_url: Optional[str] = None


class ReaderSummary(BaseModel):
    """Reader projection used by the administration endpoints."""
    id: int
    name: str
    email: str
    subscription: SubscriptionTier
    created_at: datetime
    active: bool

    class Config:
        from_attributes = True


class AuthorSummary(BaseModel):
    """Author projection used by the administration endpoints."""
    id: int
    name: str
    email: str
    created_at: datetime
    active: bool

    class Config:
        from_attributes = True


class SubscriptionUpdate(BaseModel):
    """Schema for subscription change."""
    subscription: SubscriptionTier


class ProfilePictureUpdate(BaseModel):
    """Schema for profile picture change."""
    picture_url: HttpUrl


class UserProfileBase(BaseModel):
    """Base user profile schema."""
    nic: Optional[str] = Field(None, max_length=12)
    phone: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = Field(None, max_length=255)
    occupation: Optional[str] = Field(None, max_length=100)


class UserProfileUpdate(UserProfileBase):
    """Schema for profile update."""
    pass


class UserProfile(UserProfileBase):
    """Schema for profile response."""
    user_id: int

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Plain message response."""
    message: str
