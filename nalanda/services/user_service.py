"""
User administration service module.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from nalanda.core.exceptions import InvalidRequestError, NotFoundError
from nalanda.models.user import Role, SubscriptionTier, User, UserProfile
from nalanda.repositories.user_repository import UserRepository
from nalanda.schemas.user import AuthorSummary, ReaderSummary, UserProfileUpdate

logger = logging.getLogger(__name__)

READER_TIERS = (SubscriptionTier.FREE, SubscriptionTier.PREMIUM)


class UserService:
    """
    Service for user administration.
    """

    def __init__(self, db: Session):
        """
        Initialize the user service.

        Args:
            db: Database session
        """
        self.db = db
        self.users = UserRepository(db)

    def _get_or_404(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if not user:
            logger.warning(f"User not found: {user_id}")
            raise NotFoundError("User not found")
        return user

    def list_readers(self) -> List[ReaderSummary]:
        return [ReaderSummary.model_validate(u) for u in self.users.list_by_role(Role.READER)]

    def get_reader(self, user_id: int) -> Optional[ReaderSummary]:
        user = self.users.get_by_id(user_id)
        if not user or user.role != Role.READER:
            return None
        return ReaderSummary.model_validate(user)

    def list_authors(self) -> List[AuthorSummary]:
        return [AuthorSummary.model_validate(u) for u in self.users.list_by_role(Role.AUTHOR)]

    def get_author(self, user_id: int) -> Optional[AuthorSummary]:
        user = self.users.get_by_id(user_id)
        if not user or user.role != Role.AUTHOR:
            return None
        return AuthorSummary.model_validate(user)

    def activate_user(self, user_id: int) -> User:
        """
        Activate a user account.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self._get_or_404(user_id)
        user.active = True
        self.users.save()
        logger.info(f"Activated user {user_id}")
        return user

    def deactivate_user(self, user_id: int) -> User:
        """
        Deactivate a user account.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self._get_or_404(user_id)
        user.active = False
        self.users.save()
        logger.info(f"Deactivated user {user_id}")
        return user

    def change_subscription(self, user_id: int, subscription: SubscriptionTier) -> User:
        """
        Change a reader's subscription tier.

        Args:
            user_id: The reader's id
            subscription: The new tier; only Free and Premium are reader tiers

        Raises:
            NotFoundError: If the user does not exist
            InvalidRequestError: If the user is not a reader or the tier is not a reader tier
        """
        user = self._get_or_404(user_id)

        if user.role != Role.READER:
            raise InvalidRequestError("Subscription can only be changed for readers")

        if subscription not in READER_TIERS:
            raise InvalidRequestError(f"'{subscription.value}' is not a reader subscription tier")

        user.subscription = subscription
        self.users.save()
        logger.info(f"Changed subscription of user {user_id} to {subscription.value}")
        return user

    def change_profile_picture(self, user_id: int, picture_url: str) -> User:
        """
        Set a user's profile picture URL.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self._get_or_404(user_id)
        user.profile_picture_url = picture_url
        self.users.save()
        return user

    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        return self._get_or_404(user_id).profile

    def update_profile(self, user_id: int, data: UserProfileUpdate) -> UserProfile:
        """
        Create or update a user's profile.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self._get_or_404(user_id)
        if user.profile is None:
            user.profile = UserProfile()

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(user.profile, key, value)

        self.users.save()
        self.db.refresh(user)
        return user.profile
