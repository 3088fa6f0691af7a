"""
Authentication dependencies
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from visionsprint.core.config import get_settings
from visionsprint.core.database import get_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.user import User
from visionsprint.services.auth_service import AuthService

logger = LoggingConfig.get_logger(__name__)

SESSION_COOKIE = "session_token"

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


def get_session_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Session token from the Authorization header, else the session cookie"""
    if credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Get current user from request (from token or cookie)

    Returns:
        User object if authenticated, None otherwise
    """
    token = get_session_token(request, credentials)
    if not token:
        return None

    user = AuthService(db).validate_session(token)
    if user:
        LoggingConfig.set_context(user_id=user.id)
    return user


async def get_current_user_required(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """
    Get current user, requiring authentication

    When the access gate is enabled the user must also have entered the
    shared access password.

    Raises:
        HTTPException: 401 if not authenticated, 403 if access is not verified
    """
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if get_settings().enable_access_gate and not user.access_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access verification required",
        )
    return user


async def get_signed_in_user(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """Like get_current_user_required but without the access gate (used to pass the gate)"""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_admin_user(
    user: User = Depends(get_current_user_required),
) -> User:
    """
    Require an admin user

    Raises:
        HTTPException: 401 if not authenticated, 403 if not an admin
    """
    if not user.is_admin:
        logger.warning(f"User {user.id} attempted an admin action")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
