"""
Team service - admins assemble teams for projects; team members submit demo videos
"""
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from visionsprint.core.config import get_settings
from visionsprint.core.exceptions import (LimitExceededError, NotFoundError,
                                          PermissionDeniedError,
                                          VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.metrics import submissions_total
from visionsprint.models.project import Project
from visionsprint.models.team import Submission, Team, TeamMember
from visionsprint.models.user import User
from visionsprint.services.app_state_service import AppStateService

logger = LoggingConfig.get_logger(__name__)


class TeamService:
    """Service for teams and their demo submissions"""

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.app_state = AppStateService(db)

    def _query(self):
        return self.db.query(Team).options(
            selectinload(Team.project),
            selectinload(Team.members).selectinload(TeamMember.user),
            selectinload(Team.submission),
        )

    def list_teams(self, sprint_id: Optional[str] = None) -> List[Team]:
        """All teams, newest first, optionally limited to projects of one sprint"""
        query = self._query()
        if sprint_id:
            query = query.join(Project, Team.project_id == Project.id).filter(Project.sprint_id == sprint_id)
        return query.order_by(Team.created_at.desc()).all()

    def get_team(self, team_id: str) -> Team:
        team = self._query().filter(Team.id == team_id).first()
        if not team:
            raise NotFoundError("Team not found")
        return team

    def create_team(self, project_id: Optional[str], team_name: Optional[str], member_ids: Optional[List[str]]) -> Team:
        """
        Create a team for a project

        Args:
            project_id: Project the team works on
            team_name: Display name
            member_ids: User ids; duplicates are ignored

        Returns:
            Created Team with members

        Raises:
            VisionSprintError: Missing field or unknown member ids
            NotFoundError: Project does not exist
            LimitExceededError: More members than the team size limit
        """
        if not project_id or not team_name or not member_ids:
            raise VisionSprintError("Project ID, team name, and member IDs required")

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")

        unique_ids = list(dict.fromkeys(member_ids))
        limit = self.settings.max_team_size
        if limit and len(unique_ids) > limit:
            raise LimitExceededError(f"A team can have at most {limit} members")

        found = {row.id for row in self.db.query(User.id).filter(User.id.in_(unique_ids)).all()}
        unknown = [user_id for user_id in unique_ids if user_id not in found]
        if unknown:
            raise VisionSprintError(f"Unknown user IDs: {', '.join(unknown)}")

        team_number = self.db.query(Team).filter(Team.project_id == project_id).count() + 1
        team = Team(project_id=project_id, team_name=team_name, team_number=team_number)
        self.db.add(team)
        self.db.flush()
        for user_id in unique_ids:
            self.db.add(TeamMember(team_id=team.id, user_id=user_id))
        self.db.commit()

        logger.info(f"Created team {team.id} #{team_number} for project {project_id} with {len(unique_ids)} members")
        return self.get_team(team.id)

    def delete_team(self, team_id: str) -> None:
        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise NotFoundError("Team not found")
        self.db.delete(team)
        self.db.commit()
        logger.info(f"Deleted team {team_id}")

    def _get_submission(self, team_id: str) -> Optional[Submission]:
        return self.db.query(Submission).filter(Submission.team_id == team_id).first()

    def submit_video(self, user: User, team_id: Optional[str], video_url: Optional[str]) -> Tuple[Submission, bool]:
        """
        Create or replace a team's demo video submission

        Returns:
            (submission, created)

        Raises:
            StageClosedError: Not in the sprint
            VisionSprintError: Missing team id or video URL
            NotFoundError: Team does not exist
            PermissionDeniedError: Caller is neither a member nor an admin
        """
        self.app_state.require(
            self.app_state.can_submit_videos(), "submit_video", "Submissions are only allowed during the sprint"
        )
        if not team_id or not video_url:
            raise VisionSprintError("Team ID and video URL required")

        team = self.db.query(Team).filter(Team.id == team_id).first()
        if not team:
            raise NotFoundError("Team not found")
        if not team.has_member(user.id) and not user.is_admin:
            raise PermissionDeniedError("You must be a team member to submit")

        submission = self._get_submission(team.id)
        created = submission is None
        if created:
            submission = Submission(team_id=team.id, video_url=video_url)
            self.db.add(submission)
        else:
            submission.video_url = video_url
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created the submission first; overwrite its URL
            self.db.rollback()
            submission = self._get_submission(team.id)
            submission.video_url = video_url
            created = False
            self.db.commit()
        self.db.refresh(submission)

        action = "created" if created else "updated"
        submissions_total.labels(action=action).inc()
        logger.info(f"User {user.id} {action} submission for team {team_id}")
        return submission, created
