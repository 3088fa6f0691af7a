"""
Sprint and AppState models

Each sprint runs through the hackathon stages on its own; AppState points at
the sprint the site is currently running.
"""
from enum import Enum
from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from visionsprint.core.database import Base
from visionsprint.models.base import generate_id, isoformat, utcnow

APP_STATE_ID = "singleton"


class AppStage(str, Enum):
    """Hackathon stage, in the order a sprint moves through them"""
    RECEIVING_SUBMISSIONS = "RECEIVING_SUBMISSIONS"
    EXECUTING_SPRINT = "EXECUTING_SPRINT"
    SPRINT_OVER = "SPRINT_OVER"


class Sprint(Base):
    """One hackathon round"""
    __tablename__ = "sprints"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    stage = Column(String(50), nullable=False, default=AppStage.RECEIVING_SUBMISSIONS.value)
    submission_end_date = Column(DateTime, nullable=True)
    sprint_start_date = Column(DateTime, nullable=True)
    sprint_end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    projects = relationship("Project", back_populates="sprint", passive_deletes=True)

    def __repr__(self):
        return f"<Sprint(id={self.id}, name={self.name}, stage={self.stage})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "stage": self.stage,
            "submission_end_date": isoformat(self.submission_end_date),
            "sprint_start_date": isoformat(self.sprint_start_date),
            "sprint_end_date": isoformat(self.sprint_end_date),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class AppState(Base):
    """Single-row global state"""
    __tablename__ = "app_state"

    id = Column(String(36), primary_key=True, default=APP_STATE_ID)
    current_sprint_id = Column(String(36), ForeignKey("sprints.id", ondelete="SET NULL"), nullable=True)
    test_mode = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    current_sprint = relationship("Sprint")

    @property
    def stage(self) -> str:
        """Effective stage: the current sprint's, or submissions open when there is none"""
        if self.current_sprint is not None:
            return self.current_sprint.stage
        return AppStage.RECEIVING_SUBMISSIONS.value

    def __repr__(self):
        return f"<AppState(current_sprint_id={self.current_sprint_id}, test_mode={self.test_mode})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "current_sprint_id": self.current_sprint_id,
            "test_mode": self.test_mode,
            "stage": self.stage,
            "current_sprint": self.current_sprint.to_dict() if self.current_sprint else None,
            "updated_at": isoformat(self.updated_at),
        }
