"""
Pytest configuration and fixtures
"""
import os

# Settings are read on first import, so the test environment goes in first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["ENABLE_DEV_LOGIN"] = "true"
os.environ["ENABLE_ACCESS_GATE"] = "false"
os.environ["GOOGLE_API_KEY"] = ""
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""

import pytest  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

import visionsprint.models  # noqa: F401,E402
from visionsprint.core.config import get_settings  # noqa: E402
from visionsprint.core.database import (Base, get_engine,  # noqa: E402
                                        get_session_local)
from visionsprint.models.project import Project, ProjectType  # noqa: E402
from visionsprint.models.sprint import AppStage  # noqa: E402
from visionsprint.models.user import User  # noqa: E402
from visionsprint.services.app_state_service import \
    AppStateService  # noqa: E402
from visionsprint.services.auth_service import AuthService  # noqa: E402


@pytest.fixture(scope="function")
def db() -> Session:
    """Create a database session on a fresh schema"""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = get_session_local()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db: Session):
    """Create test client with database dependency override"""
    from fastapi.testclient import TestClient

    from visionsprint.core.database import get_db
    from visionsprint.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    """Cached settings; change fields with monkeypatch.setattr so they are restored"""
    return get_settings()


@pytest.fixture
def make_user(db: Session):
    """Factory creating users directly in the database"""
    counter = {"n": 0}

    def _make_user(name=None, email=None, is_admin=False, access_verified=True, discipline=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            is_admin=is_admin,
            access_verified=access_verified,
            discipline=discipline,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers(db: Session):
    """Factory returning Authorization headers for a fresh session of a user"""
    def _auth_headers(user: User):
        session = AuthService(db).create_session(user.id)
        return {"Authorization": f"Bearer {session.token}"}

    return _auth_headers


@pytest.fixture
def user(make_user):
    return make_user(name="Bob Developer", email="bob@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(name="Alice Admin", email="alice@example.com", is_admin=True)


@pytest.fixture
def user_headers(user, auth_headers):
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def app_state(db: Session):
    """App state service with the default sprint created"""
    service = AppStateService(db)
    service.get_app_state()
    return service


@pytest.fixture
def set_stage(app_state):
    """Move the current sprint to a stage"""
    def _set_stage(stage: AppStage, test_mode: bool = False):
        app_state.update_state({"stage": stage.value, "test_mode": test_mode})

    return _set_stage


@pytest.fixture
def make_project(db: Session, app_state):
    """Factory creating projects in the current sprint"""
    def _make_project(creator: User, name="Dark Mode Support", **fields):
        project = Project(
            name=name,
            description=fields.pop("description", "Add a dark theme"),
            project_type=fields.pop("project_type", ProjectType.DELIGHT.value),
            slack_channel=fields.pop("slack_channel", "#dark-mode"),
            creator_id=creator.id,
            sprint_id=fields.pop("sprint_id", app_state.get_current_sprint_id()),
            **fields,
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make_project


@pytest.fixture
def stale_lookup(monkeypatch):
    """
    Make a service's existence lookup miss once, as when a concurrent request
    inserts the row between the check and the commit
    """
    def _stale_lookup(service, method_name: str):
        real_lookup = getattr(service, method_name)
        calls = []

        def lookup(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real_lookup(*args, **kwargs)

        monkeypatch.setattr(service, method_name, lookup)

    return _stale_lookup
