"""
Vote service - one vote per user per project while submissions are open
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from visionsprint.core.config import get_settings
from visionsprint.core.exceptions import (ConflictError, LimitExceededError,
                                          NotFoundError, VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.metrics import votes_total
from visionsprint.models.project import Project, Vote
from visionsprint.models.user import User
from visionsprint.services.app_state_service import AppStateService

logger = LoggingConfig.get_logger(__name__)


def count_in_sprint(db: Session, model, user_id: str, sprint_id: Optional[str]) -> int:
    """Count a user's votes or joins on projects of one sprint"""
    query = db.query(model).join(Project, model.project_id == Project.id).filter(model.user_id == user_id)
    if sprint_id is None:
        query = query.filter(Project.sprint_id.is_(None))
    else:
        query = query.filter(Project.sprint_id == sprint_id)
    return query.count()


class VoteService:
    """Service for casting and withdrawing votes"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.app_state = AppStateService(db)

    def _get_vote(self, user_id: str, project_id: str) -> Optional[Vote]:
        return self.db.query(Vote).filter(Vote.user_id == user_id, Vote.project_id == project_id).first()

    def cast_vote(self, user: User, project_id: Optional[str]) -> Vote:
        """
        Vote for a project

        Raises:
            StageClosedError: Voting is closed
            VisionSprintError: Missing project id
            NotFoundError: Project does not exist
            ConflictError: Already voted for this project
            LimitExceededError: Per-sprint vote limit reached
        """
        self.app_state.require(self.app_state.can_vote(), "vote", "Voting is closed")
        if not project_id:
            raise VisionSprintError("Project ID required")

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")

        if self._get_vote(user.id, project_id):
            raise ConflictError("Already voted")

        limit = self.settings.max_votes_per_user
        if limit and count_in_sprint(self.db, Vote, user.id, project.sprint_id) >= limit:
            raise LimitExceededError(f"You can vote for at most {limit} projects")

        vote = Vote(user_id=user.id, project_id=project_id)
        self.db.add(vote)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Already voted")
        self.db.refresh(vote)

        votes_total.labels(action="cast").inc()
        logger.info(f"User {user.id} voted for project {project_id}")
        return vote

    def remove_vote(self, user: User, project_id: Optional[str]) -> None:
        """
        Withdraw a vote

        Raises:
            StageClosedError: Voting changes are closed
            VisionSprintError: Missing project id
            NotFoundError: No vote to withdraw
        """
        self.app_state.require(self.app_state.can_vote(), "unvote", "Voting changes are closed")
        if not project_id:
            raise VisionSprintError("Project ID required")

        vote = self._get_vote(user.id, project_id)
        if not vote:
            raise NotFoundError("Vote not found")

        self.db.delete(vote)
        self.db.commit()

        votes_total.labels(action="withdrawn").inc()
        logger.info(f"User {user.id} withdrew vote for project {project_id}")
