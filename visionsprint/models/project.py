"""
Project idea models with the votes and joins collected while submissions are open
"""
from enum import Enum
from typing import Any, Dict

from sqlalchemy import (Column, DateTime, ForeignKey, String, Text,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from visionsprint.core.database import Base
from visionsprint.models.base import generate_id, isoformat, utcnow


class ProjectType(str, Enum):
    """Project size / flavour"""
    MOONSHOT = "MOONSHOT"
    SMALL_FEATURE = "SMALL_FEATURE"
    DELIGHT = "DELIGHT"
    EFFICIENCY = "EFFICIENCY"


PROJECT_TYPE_LABELS = {
    ProjectType.MOONSHOT: "Moon Shot",
    ProjectType.SMALL_FEATURE: "Small Feature",
    ProjectType.DELIGHT: "Delight",
    ProjectType.EFFICIENCY: "Efficiency Improvement",
}


class Project(Base):
    """Project idea submitted by a user"""
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    pitch_video_url = Column(String(1024), nullable=True)
    doc_link = Column(String(1024), nullable=True)
    project_type = Column(String(50), nullable=False)
    slack_channel = Column(String(255), nullable=False)
    business_rationale = Column(Text, nullable=True)
    vision_id = Column(String(36), ForeignKey("visions.id", ondelete="SET NULL"), nullable=True, index=True)
    department = Column(String(255), nullable=True)
    creator_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sprint_id = Column(String(36), ForeignKey("sprints.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    creator = relationship("User")
    vision = relationship("Vision", back_populates="projects")
    sprint = relationship("Sprint", back_populates="projects")
    votes = relationship(
        "Vote", back_populates="project", cascade="all, delete-orphan",
        passive_deletes=True, order_by="Vote.created_at",
    )
    joins = relationship(
        "ProjectJoin", back_populates="project", cascade="all, delete-orphan",
        passive_deletes=True, order_by="ProjectJoin.created_at.desc()",
    )
    teams = relationship(
        "Team", back_populates="project", cascade="all, delete-orphan",
        passive_deletes=True, order_by="Team.team_number",
    )
    reactions = relationship(
        "Reaction", back_populates="project", cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name}, type={self.project_type})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "pitch_video_url": self.pitch_video_url,
            "doc_link": self.doc_link,
            "project_type": self.project_type,
            "slack_channel": self.slack_channel,
            "business_rationale": self.business_rationale,
            "vision_id": self.vision_id,
            "department": self.department,
            "creator_id": self.creator_id,
            "sprint_id": self.sprint_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def to_summary_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "project_type": self.project_type}


class Vote(Base):
    """A user's vote for a project"""
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_votes_user_project"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User")
    project = relationship("Project", back_populates="votes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "created_at": isoformat(self.created_at),
            "user": self.user.to_public_dict() if self.user else None,
        }


class ProjectJoin(Base):
    """A user's interest in working on a project"""
    __tablename__ = "project_joins"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_project_joins_user_project"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User")
    project = relationship("Project", back_populates="joins")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "created_at": isoformat(self.created_at),
            "user": self.user.to_public_dict() if self.user else None,
        }
