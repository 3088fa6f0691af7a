"""
Showcase models - emoji reactions on projects and watched demo videos
"""
from enum import Enum
from typing import Any, Dict

from sqlalchemy import (Column, DateTime, ForeignKey, String,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from visionsprint.core.database import Base
from visionsprint.models.base import generate_id, isoformat, utcnow


class ReactionType(str, Enum):
    """Showcase reaction"""
    MEDAL = "MEDAL"
    HEART = "HEART"
    SHOCK = "SHOCK"
    PARTY = "PARTY"


REACTION_EMOJIS = {
    ReactionType.MEDAL: "\U0001F947",
    ReactionType.HEART: "❤️",
    ReactionType.SHOCK: "\U0001F631",
    ReactionType.PARTY: "\U0001F389",
}


class Reaction(Base):
    """A user's reaction of one type on a project"""
    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", "reaction_type", name="uq_reactions_user_project_type"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    reaction_type = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", back_populates="reactions")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "reaction_type": self.reaction_type,
            "created_at": isoformat(self.created_at),
        }


class WatchedVideo(Base):
    """Marks a team's demo video as watched by a user"""
    __tablename__ = "watched_videos"
    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="uq_watched_videos_user_team"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    team = relationship("Team", back_populates="watched_by")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "team_id": self.team_id,
            "created_at": isoformat(self.created_at),
        }
