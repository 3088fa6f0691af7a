"""
Project service - project ideas, their stage-dependent editing and duplication
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from visionsprint.core.exceptions import (NotFoundError,
                                          PermissionDeniedError,
                                          VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.project import Project, ProjectType
from visionsprint.models.team import Team, TeamMember
from visionsprint.models.user import User
from visionsprint.models.vision import Vision
from visionsprint.services.app_state_service import AppStateService
from visionsprint.services.google_drive import GoogleDriveClient

logger = LoggingConfig.get_logger(__name__)

REQUIRED_FIELDS = ("name", "description", "project_type", "slack_channel")
OPTIONAL_FIELDS = ("pitch_video_url", "doc_link", "business_rationale", "vision_id", "department")


def parse_project_type(value: Any) -> str:
    try:
        return ProjectType(value).value
    except ValueError:
        allowed = ", ".join(t.value for t in ProjectType)
        raise VisionSprintError(f"Invalid project type. Allowed types: {allowed}")


def serialize_project(project: Project, user_id: Optional[str] = None, include_reactions: bool = False) -> Dict[str, Any]:
    """
    Project with creator, vision, votes, joins and teams, plus counts and the
    caller's vote/join status
    """
    data = project.to_dict()
    data["creator"] = project.creator.to_public_dict() if project.creator else None
    data["vision"] = project.vision.to_summary_dict() if project.vision else None
    data["votes"] = [vote.to_dict() for vote in project.votes]
    data["joins"] = [join.to_dict() for join in project.joins]
    data["teams"] = [team.to_dict() for team in project.teams]
    data["_count"] = {
        "votes": len(project.votes),
        "reactions": len(project.reactions),
        "joins": len(project.joins),
    }
    data["has_voted"] = bool(user_id) and any(vote.user_id == user_id for vote in project.votes)
    data["has_joined"] = bool(user_id) and any(join.user_id == user_id for join in project.joins)
    if include_reactions:
        data["reactions"] = [reaction.to_dict() for reaction in project.reactions]
    return data


class ProjectService:
    """Service for managing project ideas"""

    def __init__(self, db: Session):
        self.db = db
        self.app_state = AppStateService(db)

    def _query(self):
        return self.db.query(Project).options(
            selectinload(Project.creator),
            selectinload(Project.vision),
            selectinload(Project.votes),
            selectinload(Project.joins),
            selectinload(Project.reactions),
            selectinload(Project.teams).selectinload(Team.members).selectinload(TeamMember.user),
            selectinload(Project.teams).selectinload(Team.submission),
        )

    def get_project(self, project_id: str) -> Project:
        """
        Raises:
            NotFoundError: Project does not exist
        """
        project = self._query().filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_projects(self, sprint_id: Optional[str] = None) -> List[Project]:
        """
        List projects for a sprint, most voted first

        Args:
            sprint_id: Sprint to list; defaults to the current sprint. With no
                sprint at all every project is listed.

        Returns:
            Projects sorted by vote count, newest first among equals
        """
        if not sprint_id:
            sprint_id = self.app_state.get_current_sprint_id()

        query = self._query()
        if sprint_id:
            query = query.filter(Project.sprint_id == sprint_id)

        projects = query.order_by(Project.created_at.desc()).all()
        # sorted() is stable, so the newest-first order survives among equal counts
        return sorted(projects, key=lambda project: len(project.votes), reverse=True)

    async def validate_pitch_video(self, video_url: Optional[str], access_token: Optional[str]) -> None:
        """
        Reject pitch videos that are known to be over the length limit

        Only checked when there is something to check with: a Google token or
        the server API key.

        Raises:
            VisionSprintError: Video is too long
        """
        if not video_url:
            return
        drive = GoogleDriveClient()
        if not access_token and not drive.api_key:
            return
        result = await drive.validate_video_duration(video_url, access_token)
        if not result["valid"]:
            raise VisionSprintError(result["error"])

    def create_project(self, creator: User, fields: Dict[str, Any]) -> Project:
        """
        Create a project in the current sprint

        Args:
            creator: Submitting user
            fields: name, description, project_type, slack_channel and the
                optional pitch_video_url, doc_link, business_rationale,
                vision_id, department

        Returns:
            Created Project

        Raises:
            StageClosedError: Submissions are closed
            VisionSprintError: Missing required field or invalid project type
            NotFoundError: vision_id does not exist
        """
        self.app_state.require(
            self.app_state.can_submit_projects(), "create_project", "Project submissions are closed"
        )

        if not all(fields.get(field) for field in REQUIRED_FIELDS):
            raise VisionSprintError("Missing required fields")
        project_type = parse_project_type(fields["project_type"])

        vision_id = fields.get("vision_id") or None
        if vision_id:
            self._require_vision(vision_id)

        project = Project(
            name=fields["name"],
            description=fields["description"],
            project_type=project_type,
            slack_channel=fields["slack_channel"],
            pitch_video_url=fields.get("pitch_video_url") or None,
            doc_link=fields.get("doc_link") or None,
            business_rationale=fields.get("business_rationale") or None,
            vision_id=vision_id,
            department=fields.get("department") or None,
            creator_id=creator.id,
            sprint_id=self.app_state.get_current_sprint_id(),
        )
        self.db.add(project)
        self.db.commit()

        logger.info(f"User {creator.id} created project {project.id}")
        return self.get_project(project.id)

    def update_project(self, project_id: str, user: User, changes: Dict[str, Any]) -> Project:
        """
        Update a project as its creator or an admin

        During the sprint only slack_channel and doc_link change; after it
        nothing does. Empty values never overwrite required fields.

        Args:
            project_id: Project ID
            user: Acting user
            changes: Fields present in the request body

        Returns:
            Updated Project

        Raises:
            NotFoundError: Project or vision does not exist
            PermissionDeniedError: Not the creator or an admin
            StageClosedError: Sprint is over
            VisionSprintError: Invalid project type
        """
        project = self.get_project(project_id)
        self.require_owner(project, user)

        allowed = self.app_state.editable_project_fields(list(changes))

        for field in allowed:
            value = changes[field]
            if field in REQUIRED_FIELDS:
                if not value:
                    continue
                if field == "project_type":
                    value = parse_project_type(value)
            elif field in OPTIONAL_FIELDS:
                value = value or None
                if field == "vision_id" and value:
                    self._require_vision(value)
            else:
                continue
            setattr(project, field, value)

        self.db.commit()
        logger.info(f"User {user.id} updated project {project.id} ({', '.join(allowed) or 'no fields'})")
        return self.get_project(project.id)

    def delete_project(self, project_id: str, user: User) -> None:
        """
        Delete a project while submissions are open

        Raises:
            NotFoundError: Project does not exist
            PermissionDeniedError: Not the creator or an admin
            StageClosedError: Sprint has started
        """
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        self.require_owner(project, user)
        self.app_state.require(
            self.app_state.can_delete_projects(), "delete_project", "Deleting projects is disabled during sprint"
        )

        self.db.delete(project)
        self.db.commit()
        logger.info(f"User {user.id} deleted project {project_id}")

    def duplicate_project(self, project_id: Optional[str]) -> Project:
        """
        Copy a project so another team can work on it

        The copy is "<name> (Team N+2)" with slack channel "<channel>-N+2",
        N being the original's team count. The first duplicate also renames
        the original to "<name> (Team 1)".

        Raises:
            VisionSprintError: Missing project id
            NotFoundError: Project does not exist
        """
        if not project_id:
            raise VisionSprintError("Project ID required")
        original = self.get_project(project_id)

        team_count = len(original.teams)
        copy_number = team_count + 2
        duplicate = Project(
            name=f"{original.name} (Team {copy_number})",
            description=original.description,
            pitch_video_url=original.pitch_video_url,
            doc_link=original.doc_link,
            project_type=original.project_type,
            slack_channel=f"{original.slack_channel}-{copy_number}",
            business_rationale=original.business_rationale,
            vision_id=original.vision_id,
            department=original.department,
            creator_id=original.creator_id,
            sprint_id=original.sprint_id,
        )
        self.db.add(duplicate)

        if team_count == 0:
            original.name = f"{original.name} (Team 1)"

        self.db.commit()
        logger.info(f"Duplicated project {original.id} as {duplicate.id}")
        return self.get_project(duplicate.id)

    def require_owner(self, project: Project, user: User) -> None:
        if project.creator_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Forbidden")

    def _require_vision(self, vision_id: str) -> None:
        if not self.db.query(Vision.id).filter(Vision.id == vision_id).first():
            raise NotFoundError("Vision not found")
