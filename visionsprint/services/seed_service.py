"""
Demo data for local development
"""
from datetime import datetime
from typing import Dict, Type

from sqlalchemy.orm import Session

from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.project import Project, ProjectType, Vote
from visionsprint.models.sprint import APP_STATE_ID, AppStage, AppState, Sprint
from visionsprint.models.user import Discipline, User

logger = LoggingConfig.get_logger(__name__)

DEMO_USERS = (
    ("alice@example.com", "Alice Admin", True, Discipline.PRODUCT),
    ("bob@example.com", "Bob Developer", False, Discipline.DEV),
    ("carol@example.com", "Carol Data", False, Discipline.DATA),
)

DEMO_PROJECTS = (
    (
        "AI-Powered Code Review",
        "An AI assistant that helps review code changes, suggest improvements, "
        "and catch potential bugs before they reach production.",
        ProjectType.MOONSHOT,
        "#ai-code-review",
        "alice@example.com",
    ),
    (
        "Dark Mode Support",
        "Add system-preference-based dark mode to the application for better user experience.",
        ProjectType.DELIGHT,
        "#dark-mode",
        "bob@example.com",
    ),
)

# voter email -> project name
DEMO_VOTES = (
    ("bob@example.com", "AI-Powered Code Review"),
    ("carol@example.com", "AI-Powered Code Review"),
    ("alice@example.com", "Dark Mode Support"),
)


def _get_or_create(db: Session, model: Type, defaults: Dict = None, **filters):
    instance = db.query(model).filter_by(**filters).first()
    if instance:
        return instance, False
    instance = model(**filters, **(defaults or {}))
    db.add(instance)
    db.flush()
    return instance, True


def seed_demo_data(db: Session) -> Dict[str, int]:
    """
    Create demo users, a sprint, projects and votes; safe to run repeatedly

    Returns:
        Number of rows created per kind
    """
    created = {"users": 0, "sprints": 0, "projects": 0, "votes": 0}

    users = {}
    for email, name, is_admin, discipline in DEMO_USERS:
        user, was_created = _get_or_create(
            db, User, email=email,
            defaults={
                "name": name,
                "is_admin": is_admin,
                "access_verified": True,
                "discipline": discipline.value,
            },
        )
        users[email] = user
        created["users"] += was_created

    sprint, was_created = _get_or_create(
        db, Sprint, name="Sprint 1",
        defaults={
            "stage": AppStage.RECEIVING_SUBMISSIONS.value,
            "sprint_start_date": datetime(2026, 3, 2, 9, 0),
            "sprint_end_date": datetime(2026, 3, 3, 18, 0),
        },
    )
    created["sprints"] += was_created

    _get_or_create(db, AppState, id=APP_STATE_ID, defaults={"current_sprint_id": sprint.id, "test_mode": False})

    projects = {}
    for name, description, project_type, slack_channel, creator_email in DEMO_PROJECTS:
        project, was_created = _get_or_create(
            db, Project, name=name,
            defaults={
                "description": description,
                "project_type": project_type.value,
                "slack_channel": slack_channel,
                "creator_id": users[creator_email].id,
                "sprint_id": sprint.id,
            },
        )
        projects[name] = project
        created["projects"] += was_created

    for voter_email, project_name in DEMO_VOTES:
        _, was_created = _get_or_create(
            db, Vote, user_id=users[voter_email].id, project_id=projects[project_name].id
        )
        created["votes"] += was_created

    db.commit()
    logger.info("Seeded demo data", extra={"created": created})
    return created
