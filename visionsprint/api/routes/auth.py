"""
Authentication API routes - Google sign-in, development sign-in and sessions
"""
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import (SESSION_COOKIE, get_current_user,
                                    get_session_token, get_signed_in_user,
                                    security)
from visionsprint.core.config import get_settings
from visionsprint.core.database import get_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.user import User
from visionsprint.services.auth_service import AuthService
from visionsprint.services.google_oauth import GoogleOAuthClient, GoogleOAuthError

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

OAUTH_STATE_COOKIE = "oauth_state"


class DevLoginRequest(BaseModel):
    """Development sign-in request"""
    email: str = Field(..., min_length=3, max_length=255)


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_duration_hours * 60 * 60,
    )


def _user_payload(user: User) -> dict:
    data = user.to_dict()
    data["needs_onboarding"] = not user.discipline
    data["needs_access_verification"] = get_settings().enable_access_gate and not user.access_verified
    return data


@router.get("/google/login")
async def google_login():
    """Redirect the browser to Google's consent screen"""
    settings = get_settings()
    if not settings.google_oauth_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is not configured",
        )

    state = secrets.token_urlsafe(24)
    response = RedirectResponse(GoogleOAuthClient().authorization_url(state), status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=10 * 60,
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Finish Google sign-in: exchange the code, link the account, start a session"""
    settings = get_settings()
    if not settings.google_oauth_configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Google sign-in is not configured")
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Google sign-in failed: {error}")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OAuth state")

    try:
        client = GoogleOAuthClient()
        tokens = await client.exchange_code(code)
        profile = await client.fetch_userinfo(tokens["access_token"])

        auth_service = AuthService(db)
        user = auth_service.upsert_oauth_user("google", profile["sub"], profile, tokens)
        session = auth_service.create_session(user.id)
    except GoogleOAuthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise_http_error(e, "complete Google sign-in")

    logger.info(f"User {user.id} signed in with Google")
    response = RedirectResponse(settings.frontend_url, status_code=status.HTTP_302_FOUND)
    _set_session_cookie(response, session.token)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@router.post("/dev-login")
async def dev_login(
    request: DevLoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """Sign in by email alone (development only)"""
    if not get_settings().dev_login_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    try:
        auth_service = AuthService(db)
        user = auth_service.dev_login(request.email)
        session = auth_service.create_session(user.id)
    except Exception as e:
        raise_http_error(e, "sign in")

    _set_session_cookie(response, session.token)
    return {
        "token": session.token,
        "expires_at": session.expires_at.isoformat(),
        "user": _user_payload(user),
    }


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
):
    """Logout and invalidate session"""
    token = get_session_token(request, credentials)
    try:
        if token:
            AuthService(db).logout(token)
    except Exception as e:
        raise_http_error(e, "logout")

    response.delete_cookie(SESSION_COOKIE)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_me(user: User = Depends(get_signed_in_user)):
    """Get current user information with onboarding flags"""
    return _user_payload(user)


@router.get("/session")
async def get_session(user: Optional[User] = Depends(get_current_user)):
    """Current user or null, without failing for anonymous visitors"""
    return {"user": _user_payload(user) if user else None}
