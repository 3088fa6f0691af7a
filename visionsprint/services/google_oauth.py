"""
Google OAuth 2.0 authorization-code flow
"""
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from visionsprint.core.config import get_settings
from visionsprint.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

# drive.metadata.readonly lets the server read demo video durations as the user
SCOPES = (
    "openid",
    "email",
    "profile",
    "https://www.googleapis.com/auth/drive.metadata.readonly",
)


class GoogleOAuthError(Exception):
    """Google rejected the code exchange or userinfo request"""


class GoogleOAuthClient:
    """Builds the consent URL and exchanges callback codes for tokens and profile"""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self.http_client = http_client

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.settings.google_client_id,
            "redirect_uri": self.settings.google_redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens

        Returns:
            Token payload (access_token, refresh_token, expires_in, scope, id_token, ...)

        Raises:
            GoogleOAuthError: Token endpoint returned an error
        """
        data = {
            "code": code,
            "client_id": self.settings.google_client_id,
            "client_secret": self.settings.google_client_secret,
            "redirect_uri": self.settings.google_redirect_uri,
            "grant_type": "authorization_code",
        }
        response = await self._request("POST", TOKEN_URL, data=data)
        if response.status_code != 200:
            logger.error(f"Google token exchange failed: {response.status_code} - {response.text[:200]}")
            raise GoogleOAuthError("Failed to exchange authorization code")
        return response.json()

    async def fetch_userinfo(self, access_token: str) -> Dict[str, Any]:
        """
        Fetch the OpenID profile (sub, email, name, picture, email_verified)

        Raises:
            GoogleOAuthError: Userinfo endpoint returned an error
        """
        response = await self._request(
            "GET", USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        if response.status_code != 200:
            logger.error(f"Google userinfo failed: {response.status_code}")
            raise GoogleOAuthError("Failed to fetch Google profile")
        profile = response.json()
        if not profile.get("sub"):
            raise GoogleOAuthError("Google profile has no subject id")
        return profile

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            if self.http_client is not None:
                return await self.http_client.request(method, url, **kwargs)
            async with httpx.AsyncClient(timeout=15.0) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Google OAuth request to {url} failed: {e}")
            raise GoogleOAuthError("Could not reach Google") from e
