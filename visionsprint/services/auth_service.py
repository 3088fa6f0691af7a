"""
Authentication service for users, linked accounts and sessions
"""
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from visionsprint.core.config import get_settings
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.base import utcnow
from visionsprint.models.user import Account, Session as UserSession, User

logger = LoggingConfig.get_logger(__name__)


class AuthService:
    """Service for user authentication and session management"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.session_duration_hours = self.settings.session_duration_hours

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def dev_login(self, email: str) -> User:
        """
        Find or create a user for development sign-in

        New users are marked access-verified; the configured dev admin email
        becomes an admin.

        Args:
            email: Email address to sign in as

        Returns:
            User object
        """
        email = email.strip().lower()
        user = self.get_user_by_email(email)
        if user:
            return user

        user = User(
            email=email,
            name=email.split("@")[0],
            is_admin=email == self.settings.dev_admin_email.lower(),
            access_verified=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Created dev-login user {user.id} (admin: {user.is_admin})")
        return user

    def upsert_oauth_user(
        self,
        provider: str,
        provider_account_id: str,
        profile: Dict[str, Any],
        tokens: Dict[str, Any],
    ) -> User:
        """
        Resolve the user for an identity-provider sign-in and store its tokens

        Lookup order: linked account, then email, then a new user.

        Args:
            provider: Provider name (e.g. "google")
            provider_account_id: Stable subject id from the provider
            profile: Userinfo payload (email, name, picture, email_verified)
            tokens: Token endpoint payload (access_token, refresh_token, expires_in, ...)

        Returns:
            User object
        """
        account = self.db.query(Account).filter(
            Account.provider == provider,
            Account.provider_account_id == provider_account_id,
        ).first()

        email = (profile.get("email") or "").lower() or None
        if account:
            user = account.user
        else:
            user = self.get_user_by_email(email) if email else None
            if not user:
                user = User(email=email, name=profile.get("name"), image=profile.get("picture"))
                self.db.add(user)
                self.db.flush()
                logger.info(f"Created user {user.id} from {provider} sign-in")
            account = Account(
                user_id=user.id,
                type="oauth",
                provider=provider,
                provider_account_id=provider_account_id,
            )
            self.db.add(account)

        # Keep profile details fresh
        if profile.get("name") and not user.name:
            user.name = profile["name"]
        if profile.get("picture"):
            user.image = profile["picture"]
        if profile.get("email_verified") and not user.email_verified:
            user.email_verified = utcnow()

        account.access_token = tokens.get("access_token")
        if tokens.get("refresh_token"):
            account.refresh_token = tokens["refresh_token"]
        if tokens.get("expires_in"):
            account.expires_at = int(utcnow().timestamp()) + int(tokens["expires_in"])
        account.token_type = tokens.get("token_type")
        account.scope = tokens.get("scope")
        account.id_token = tokens.get("id_token")

        self.db.commit()
        self.db.refresh(user)
        return user

    def get_provider_access_token(self, user_id: str, provider: str = "google") -> Optional[str]:
        """Access token stored at the user's last sign-in with the provider, if any"""
        account = self.db.query(Account).filter(
            Account.user_id == user_id,
            Account.provider == provider,
        ).first()
        return account.access_token if account else None

    def create_session(self, user_id: str, duration_hours: Optional[int] = None) -> UserSession:
        """
        Create a new session for a user

        Args:
            user_id: User ID
            duration_hours: Session duration in hours (default from settings)

        Returns:
            Created Session object
        """
        token = secrets.token_urlsafe(32)
        duration = duration_hours or self.session_duration_hours

        session = UserSession(
            user_id=user_id,
            token=token,
            expires_at=utcnow() + timedelta(hours=duration),
        )

        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"Created session for user {user_id}")
        return session

    def validate_session(self, token: str) -> Optional[User]:
        """
        Validate a session token and return the associated user

        Args:
            token: Session token

        Returns:
            User object if session is valid, None otherwise
        """
        session = self.db.query(UserSession).filter(UserSession.token == token).first()
        if not session:
            return None

        if session.expires_at < utcnow():
            logger.info(f"Session {session.id} expired")
            self.db.delete(session)
            self.db.commit()
            return None

        session.last_activity = utcnow()
        self.db.commit()

        return self.db.query(User).filter(User.id == session.user_id).first()

    def logout(self, token: str) -> bool:
        """
        Logout by invalidating a session

        Returns:
            True if session was found and deleted, False otherwise
        """
        session = self.db.query(UserSession).filter(UserSession.token == token).first()
        if not session:
            return False

        self.db.delete(session)
        self.db.commit()
        logger.info(f"Session {session.id} invalidated")
        return True

    def cleanup_expired_sessions(self) -> int:
        """
        Remove all expired sessions from the database

        Returns:
            Number of sessions deleted
        """
        count = self.db.query(UserSession).filter(
            UserSession.expires_at < utcnow()
        ).delete(synchronize_session=False)
        self.db.commit()
        if count > 0:
            logger.info(f"Cleaned up {count} expired sessions")
        return count
