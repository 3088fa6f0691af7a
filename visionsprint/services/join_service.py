"""
Join service - users flag interest in working on a project
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from visionsprint.core.config import get_settings
from visionsprint.core.exceptions import (LimitExceededError, NotFoundError,
                                          VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.metrics import joins_total
from visionsprint.models.project import Project, ProjectJoin
from visionsprint.models.user import User
from visionsprint.services.app_state_service import AppStateService
from visionsprint.services.vote_service import count_in_sprint

logger = LoggingConfig.get_logger(__name__)


class JoinService:
    """Service for toggling and listing project joins"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.app_state = AppStateService(db)

    def _get_join(self, user_id: str, project_id: str) -> Optional[ProjectJoin]:
        return self.db.query(ProjectJoin).filter(
            ProjectJoin.user_id == user_id,
            ProjectJoin.project_id == project_id,
        ).first()

    def toggle_join(self, user: User, project_id: Optional[str]) -> Tuple[bool, Optional[ProjectJoin]]:
        """
        Join a project, or leave it when already joined

        Returns:
            (joined, join) - join is None after leaving

        Raises:
            StageClosedError: Joining is closed
            VisionSprintError: Missing project id
            NotFoundError: Project does not exist
            LimitExceededError: Per-sprint join limit reached
        """
        self.app_state.require(self.app_state.can_join(), "join", "Joining projects is closed")
        if not project_id:
            raise VisionSprintError("Project ID required")

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")

        existing = self._get_join(user.id, project_id)
        if existing:
            self.db.delete(existing)
            self.db.commit()
            joins_total.labels(action="left").inc()
            logger.info(f"User {user.id} left project {project_id}")
            return False, None

        limit = self.settings.max_joins_per_user
        if limit and count_in_sprint(self.db, ProjectJoin, user.id, project.sprint_id) >= limit:
            raise LimitExceededError(f"You can join at most {limit} projects")

        join = ProjectJoin(user_id=user.id, project_id=project_id)
        self.db.add(join)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request joined first; report the join that exists
            self.db.rollback()
            join = self._get_join(user.id, project_id)
            return True, join
        self.db.refresh(join)

        joins_total.labels(action="joined").inc()
        logger.info(f"User {user.id} joined project {project_id}")
        return True, join

    def list_joins(self, project_id: Optional[str], user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Joins on a project, newest first

        Returns:
            {"joins": [...], "has_joined": bool, "count": int}

        Raises:
            VisionSprintError: Missing project id
        """
        if not project_id:
            raise VisionSprintError("Project ID required")

        joins: List[ProjectJoin] = self.db.query(ProjectJoin).filter(
            ProjectJoin.project_id == project_id
        ).order_by(ProjectJoin.created_at.desc()).all()

        return {
            "joins": [join.to_dict() for join in joins],
            "has_joined": bool(user_id) and any(join.user_id == user_id for join in joins),
            "count": len(joins),
        }
