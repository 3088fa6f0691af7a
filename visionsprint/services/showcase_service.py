"""
Showcase service - emoji reactions on projects and watched demo videos
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from visionsprint.core.exceptions import NotFoundError, VisionSprintError
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.metrics import reactions_total
from visionsprint.models.project import Project
from visionsprint.models.showcase import Reaction, ReactionType, WatchedVideo
from visionsprint.models.team import Team
from visionsprint.models.user import User

logger = LoggingConfig.get_logger(__name__)


class ShowcaseService:
    """Service for reactions and watched videos"""

    def __init__(self, db: Session):
        self.db = db

    def _get_reaction(self, user_id: str, project_id: str, reaction_type: str) -> Optional[Reaction]:
        return self.db.query(Reaction).filter(
            Reaction.user_id == user_id,
            Reaction.project_id == project_id,
            Reaction.reaction_type == reaction_type,
        ).first()

    def _get_watched(self, user_id: str, team_id: str) -> Optional[WatchedVideo]:
        return self.db.query(WatchedVideo).filter(
            WatchedVideo.user_id == user_id,
            WatchedVideo.team_id == team_id,
        ).first()

    def toggle_reaction(self, user: User, project_id: Optional[str], reaction_type: Optional[str]) -> Optional[Reaction]:
        """
        Add a reaction, or remove it when the user already reacted with that type

        Returns:
            The new Reaction, or None when one was removed

        Raises:
            VisionSprintError: Missing field or unknown reaction type
            NotFoundError: Project does not exist
        """
        if not project_id or not reaction_type:
            raise VisionSprintError("Project ID and reaction type required")
        try:
            reaction_type = ReactionType(reaction_type).value
        except ValueError:
            raise VisionSprintError(f"Invalid reaction type: {reaction_type}")

        if not self.db.query(Project.id).filter(Project.id == project_id).first():
            raise NotFoundError("Project not found")

        existing = self._get_reaction(user.id, project_id, reaction_type)
        if existing:
            self.db.delete(existing)
            self.db.commit()
            reactions_total.labels(reaction_type=reaction_type, action="removed").inc()
            return None

        reaction = Reaction(user_id=user.id, project_id=project_id, reaction_type=reaction_type)
        self.db.add(reaction)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return self._get_reaction(user.id, project_id, reaction_type)
        self.db.refresh(reaction)

        reactions_total.labels(reaction_type=reaction_type, action="added").inc()
        return reaction

    def get_reactions(self, project_id: Optional[str]) -> Dict[str, Any]:
        """
        Reaction counts per type plus the individual reactions

        Returns:
            {"counts": {TYPE: n}, "reactions": [{"reaction_type", "user_id"}]}
        """
        if not project_id:
            raise VisionSprintError("Project ID required")

        reactions = self.db.query(Reaction).filter(Reaction.project_id == project_id).all()
        counts: Dict[str, int] = {}
        for reaction in reactions:
            counts[reaction.reaction_type] = counts.get(reaction.reaction_type, 0) + 1

        return {
            "counts": counts,
            "reactions": [
                {"reaction_type": reaction.reaction_type, "user_id": reaction.user_id}
                for reaction in reactions
            ],
        }

    def mark_watched(self, user: User, team_id: Optional[str]) -> Tuple[WatchedVideo, bool]:
        """
        Record that the user watched a team's video; repeated calls are no-ops

        Returns:
            (watched record, created)
        """
        if not team_id:
            raise VisionSprintError("Team ID required")
        if not self.db.query(Team.id).filter(Team.id == team_id).first():
            raise NotFoundError("Team not found")

        watched = self._get_watched(user.id, team_id)
        if watched:
            return watched, False

        watched = WatchedVideo(user_id=user.id, team_id=team_id)
        self.db.add(watched)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            watched = self._get_watched(user.id, team_id)
            return watched, False
        return watched, True

    def list_watched_team_ids(self, user: User) -> List[str]:
        rows = self.db.query(WatchedVideo.team_id).filter(WatchedVideo.user_id == user.id).all()
        return [row.team_id for row in rows]
