"""
Token schemas module.
"""
from typing import Optional
from pydantic import BaseModel

from nalanda.models.user import Role, SubscriptionTier


class TokenData(BaseModel):
    """Claims carried by an access token."""
    user_id: int
    email: Optional[str] = None
    name: Optional[str] = None
    role: Role = Role.READER
    subscription: SubscriptionTier = SubscriptionTier.FREE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
