"""
User directory - resolves actors and their roles
"""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from quizhub.exceptions import NotFoundError, ValidationError
from quizhub.models import User
from quizhub.models.enums import UserRole
from quizhub.repositories import UserRepository
from quizhub.utils.ids import parse_id

logger = logging.getLogger(__name__)


class UserService:

    def find_by_id(self, db: Session, user_id: Any) -> Optional[User]:
        return UserRepository(db).find_by_id(parse_id(user_id, "user ID"))

    def require_user(self, db: Session, user_id: Any, label: str = "User") -> User:
        user = self.find_by_id(db, user_id)
        if not user:
            raise NotFoundError(f"{label} not found.")
        return user

    def create_user(self, db: Session, role: str, display_name: str, email: Optional[str] = None) -> User:
        try:
            role = UserRole(role).value
        except ValueError:
            raise ValidationError(f"Unknown role '{role}'.") from None
        if not display_name or not display_name.strip():
            raise ValidationError("Display name is required.")

        user = UserRepository(db).create(User(role=role, display_name=display_name.strip(), email=email))
        logger.info(f"User created: {user.id} ({role})")
        return user


# Global instance
user_service = UserService()
