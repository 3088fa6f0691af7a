"""
User service - onboarding (discipline, access password) and admin user management
"""
import hmac
from typing import List, Optional

from sqlalchemy.orm import Session

from visionsprint.core.config import get_settings
from visionsprint.core.exceptions import (NotFoundError,
                                          PermissionDeniedError,
                                          VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.user import Discipline, User

logger = LoggingConfig.get_logger(__name__)


class UserService:
    """Service for user profile and admin operations"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    def set_discipline(self, user: User, discipline: Optional[str]) -> User:
        """
        Set the user's discipline once

        Raises:
            VisionSprintError: Invalid value, or discipline already set
        """
        try:
            value = Discipline(discipline).value
        except ValueError:
            allowed = ", ".join(d.value for d in Discipline)
            raise VisionSprintError(f"Invalid discipline. Must be one of: {allowed}")

        if user.discipline:
            raise VisionSprintError("Discipline already set and cannot be changed")

        user.discipline = value
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.id} set discipline {value}")
        return user

    def verify_access(self, user: User, password: Optional[str]) -> User:
        """
        Check the shared access password and mark the user verified

        Raises:
            VisionSprintError: No password given
            PermissionDeniedError: Wrong password
        """
        if not password:
            raise VisionSprintError("Password is required")

        if not hmac.compare_digest(password.encode(), self.settings.access_password.encode()):
            logger.info(f"User {user.id} failed access verification")
            raise PermissionDeniedError("Incorrect password")

        user.access_verified = True
        self.db.commit()
        self.db.refresh(user)
        return user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.name.asc()).all()

    def set_admin(self, email: str, is_admin: bool = True) -> User:
        """
        Grant or revoke admin rights by email

        Raises:
            NotFoundError: No user with that email
        """
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            raise NotFoundError(f"User with email {email} not found")
        user.is_admin = is_admin
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.id} admin={is_admin}")
        return user
