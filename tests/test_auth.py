"""
Tests for sessions, development sign-in, Google sign-in and the access gate
"""
from datetime import timedelta

import httpx
import pytest

from visionsprint.models.base import utcnow
from visionsprint.models.user import Account, Session as UserSession, User
from visionsprint.services.auth_service import AuthService
from visionsprint.services.google_oauth import (AUTHORIZE_URL, TOKEN_URL,
                                                USERINFO_URL,
                                                GoogleOAuthClient,
                                                GoogleOAuthError)

GOOGLE_PROFILE = {
    "sub": "google-123",
    "email": "Dana@Example.com",
    "name": "Dana Designer",
    "picture": "https://example.com/dana.png",
    "email_verified": True,
}
GOOGLE_TOKENS = {
    "access_token": "ya29.token",
    "refresh_token": "1//refresh",
    "expires_in": 3599,
    "token_type": "Bearer",
    "scope": "openid email profile",
}


def google_handler(request: httpx.Request) -> httpx.Response:
    url = str(request.url)
    if url.startswith(TOKEN_URL):
        return httpx.Response(200, json=GOOGLE_TOKENS)
    if url.startswith(USERINFO_URL):
        assert request.headers["Authorization"] == "Bearer ya29.token"
        return httpx.Response(200, json=GOOGLE_PROFILE)
    return httpx.Response(404)


@pytest.fixture
def google_configured(settings, monkeypatch):
    monkeypatch.setattr(settings, "google_client_id", "client-id.apps.googleusercontent.com")
    monkeypatch.setattr(settings, "google_client_secret", "client-secret")
    monkeypatch.setattr(
        "visionsprint.api.routes.auth.GoogleOAuthClient",
        lambda: GoogleOAuthClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(google_handler))),
    )


def test_dev_login_creates_user(client, db):
    response = client.post("/api/auth/dev-login", json={"email": "Carol@Example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["email"] == "carol@example.com"
    assert data["user"]["name"] == "carol"
    assert data["user"]["is_admin"] is False
    assert data["user"]["needs_onboarding"] is True
    assert db.query(User).count() == 1


def test_dev_login_admin_email(client):
    data = client.post("/api/auth/dev-login", json={"email": "alice@example.com"}).json()

    assert data["user"]["is_admin"] is True


def test_dev_login_reuses_user_and_sets_cookie(client, db):
    first = client.post("/api/auth/dev-login", json={"email": "carol@example.com"}).json()
    second = client.post("/api/auth/dev-login", json={"email": "carol@example.com"}).json()

    assert first["user"]["id"] == second["user"]["id"]
    assert first["token"] != second["token"]
    assert db.query(User).count() == 1

    # The session cookie alone authenticates
    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == "carol@example.com"


def test_dev_login_disabled(client, settings, monkeypatch):
    monkeypatch.setattr(settings, "enable_dev_login", False)

    assert client.post("/api/auth/dev-login", json={"email": "carol@example.com"}).status_code == 404


def test_me_requires_session(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_session_endpoint_allows_anonymous(client, user_headers):
    assert client.get("/api/auth/session").json() == {"user": None}
    assert client.get("/api/auth/session", headers=user_headers).json()["user"]["email"] == "bob@example.com"


def test_logout_invalidates_session(client, db, user_headers):
    response = client.post("/api/auth/logout", headers=user_headers)

    assert response.status_code == 200
    assert db.query(UserSession).count() == 0
    assert client.get("/api/auth/me", headers=user_headers).status_code == 401


def test_expired_session_is_removed(client, db, user):
    session = AuthService(db).create_session(user.id)
    session.expires_at = utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {session.token}"})

    assert response.status_code == 401
    assert db.query(UserSession).count() == 0


def test_cleanup_expired_sessions(db, user):
    service = AuthService(db)
    expired = service.create_session(user.id)
    service.create_session(user.id)
    expired.expires_at = utcnow() - timedelta(hours=1)
    db.commit()

    assert service.cleanup_expired_sessions() == 1
    assert db.query(UserSession).count() == 1


def test_access_gate(client, settings, monkeypatch, make_user, auth_headers):
    monkeypatch.setattr(settings, "enable_access_gate", True)
    headers = auth_headers(make_user(access_verified=False))

    response = client.get("/api/user/discipline", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Access verification required"

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["needs_access_verification"] is True

    response = client.post("/api/user/verify-access", json={"password": settings.access_password}, headers=headers)
    assert response.status_code == 200
    assert client.get("/api/user/discipline", headers=headers).status_code == 200


def test_google_login_not_configured(client):
    response = client.get("/api/auth/google/login", follow_redirects=False)

    assert response.status_code == 503


def test_google_login_redirects(client, google_configured):
    response = client.get("/api/auth/google/login", follow_redirects=False)

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(AUTHORIZE_URL)
    assert "access_type=offline" in location
    assert "drive.metadata.readonly" in location
    assert "oauth_state" in response.cookies


def test_google_callback_rejects_bad_state(client, google_configured):
    client.cookies.set("oauth_state", "expected")

    response = client.get(
        "/api/auth/google/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid OAuth state"


def test_google_callback_signs_in(client, db, settings, google_configured):
    client.cookies.set("oauth_state", "state-123")

    response = client.get(
        "/api/auth/google/callback", params={"code": "abc", "state": "state-123"}, follow_redirects=False
    )

    assert response.status_code == 302
    assert response.headers["location"] == settings.frontend_url
    assert "session_token" in response.cookies

    user = db.query(User).filter(User.email == "dana@example.com").one()
    assert user.name == "Dana Designer"
    assert user.email_verified is not None
    assert AuthService(db).get_provider_access_token(user.id) == "ya29.token"


def test_upsert_oauth_user_links_existing_email(db, user):
    service = AuthService(db)
    profile = dict(GOOGLE_PROFILE, email="BOB@example.com")

    linked = service.upsert_oauth_user("google", "google-bob", profile, GOOGLE_TOKENS)

    assert linked.id == user.id
    assert linked.image == GOOGLE_PROFILE["picture"]
    # Existing names are kept
    assert linked.name == "Bob Developer"
    assert db.query(Account).filter(Account.user_id == user.id).count() == 1


def test_upsert_oauth_user_refreshes_tokens(db):
    service = AuthService(db)
    first = service.upsert_oauth_user("google", "google-123", GOOGLE_PROFILE, GOOGLE_TOKENS)
    second = service.upsert_oauth_user(
        "google", "google-123", GOOGLE_PROFILE, {"access_token": "ya29.newer", "expires_in": 3599}
    )

    assert first.id == second.id
    account = db.query(Account).one()
    assert account.access_token == "ya29.newer"
    # Google only sends a refresh token on consent; the old one is kept
    assert account.refresh_token == "1//refresh"


async def test_oauth_client_exchange_code_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
    client = GoogleOAuthClient(http_client=httpx.AsyncClient(transport=transport))

    with pytest.raises(GoogleOAuthError, match="Failed to exchange authorization code"):
        await client.exchange_code("bad-code")


async def test_oauth_client_userinfo_requires_subject():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"email": "x@example.com"}))
    client = GoogleOAuthClient(http_client=httpx.AsyncClient(transport=transport))

    with pytest.raises(GoogleOAuthError, match="no subject id"):
        await client.fetch_userinfo("token")


async def test_oauth_client_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = GoogleOAuthClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(GoogleOAuthError, match="Could not reach Google"):
        await client.exchange_code("code")
