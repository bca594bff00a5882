"""
User models module.
Defines the user identity record and its optional profile extension.
"""
import enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from nalanda.models.base import BaseModel


class Role(str, enum.Enum):
    """User roles gating catalog visibility and administrative actions."""
    READER = "Reader"
    AUTHOR = "Author"
    ADMIN = "Admin"


class SubscriptionTier(str, enum.Enum):
    """Subscription tiers controlling usage quota and catalog access."""
    FREE = "Free"
    PREMIUM = "Premium"
    AUTHOR = "Author"


class User(BaseModel):
    """
    User model for storing identity information.

    A user always has at least one login method: a Google id or a password hash.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "google_id IS NOT NULL OR password_hash IS NOT NULL",
            name="ck_users_login_method",
        ),
    )

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    google_id = Column(String(100), unique=True, index=True, nullable=True)
    password_hash = Column(String(512), nullable=True)
    role = Column(Enum(Role), nullable=False, default=Role.READER)
    subscription = Column(Enum(SubscriptionTier), nullable=False, default=SubscriptionTier.FREE)
    active = Column(Boolean, nullable=False, default=True)
    profile_picture_url = Column(String(1024), nullable=True)
    password_reset_token = Column(String(255), unique=True, index=True, nullable=True)
    password_reset_token_expiry = Column(DateTime, nullable=True)

    profile = relationship(
        "UserProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User {self.email}>"


class UserProfile(BaseModel):
    """
    Optional 1:1 profile extension owned by a user.
    """
    __tablename__ = "user_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    nic = Column(String(12))
    phone = Column(String(15))
    address = Column(String(255))
    occupation = Column(String(100))

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<UserProfile user={self.user_id}>"
