"""
User repository module.

CRUD over the users table. Uniqueness violations surface as ConflictError.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nalanda.core.exceptions import ConflictError
from nalanda.models.user import Role, User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Repository for user persistence.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.google_id == google_id).first()

    def get_by_reset_token(self, token: str) -> Optional[User]:
        return self.db.query(User).filter(User.password_reset_token == token).first()

    def list_by_role(self, role: Role) -> List[User]:
        return self.db.query(User).filter(User.role == role).order_by(User.id).all()

    def any_with_role(self, role: Role) -> bool:
        return self.db.query(User.id).filter(User.role == role).first() is not None

    def add(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If the email or Google id is already taken
        """
        user.email = user.email.lower()
        if self.get_by_email(user.email):
            raise ConflictError("A user with this email already exists.")

        self.db.add(user)
        self.save()
        self.db.refresh(user)
        logger.info(f"Created user {user.id} ({user.email})")
        return user

    def save(self) -> None:
        """
        Commit pending changes.

        Raises:
            ConflictError: If a uniqueness constraint is violated
        """
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error while saving user: {str(e.orig)}")
            raise ConflictError("A user with these details already exists.")
