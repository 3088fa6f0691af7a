"""
Team models - admins form teams per project, teams submit a demo video
"""
from typing import Any, Dict

from sqlalchemy import (Column, DateTime, ForeignKey, Integer, String,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from visionsprint.core.database import Base
from visionsprint.models.base import generate_id, isoformat, utcnow


class Team(Base):
    """Team working on a project during the sprint"""
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=generate_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    team_name = Column(String(255), nullable=False)
    team_number = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    project = relationship("Project", back_populates="teams")
    members = relationship(
        "TeamMember", back_populates="team", cascade="all, delete-orphan",
        passive_deletes=True, order_by="TeamMember.created_at",
    )
    submission = relationship(
        "Submission", back_populates="team", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    watched_by = relationship(
        "WatchedVideo", back_populates="team", cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Team(id={self.id}, name={self.team_name}, project_id={self.project_id})>"

    def has_member(self, user_id: str) -> bool:
        return any(member.user_id == user_id for member in self.members)

    def to_dict(self, include_project: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "project_id": self.project_id,
            "team_name": self.team_name,
            "team_number": self.team_number,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "members": [member.to_dict() for member in self.members],
            "submission": self.submission.to_dict() if self.submission else None,
        }
        if include_project:
            data["project"] = self.project.to_summary_dict() if self.project else None
        return data


class TeamMember(Base):
    """User assigned to a team"""
    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    team = relationship("Team", back_populates="members")
    user = relationship("User")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "user_id": self.user_id,
            "created_at": isoformat(self.created_at),
            "user": self.user.to_public_dict() if self.user else None,
        }


class Submission(Base):
    """Demo video submitted by a team (one per team)"""
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=generate_id)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, unique=True)
    video_url = Column(String(1024), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    team = relationship("Team", back_populates="submission")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "video_url": self.video_url,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
