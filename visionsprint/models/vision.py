"""
Business vision models - themes admins publish for projects to align with
"""
from typing import Any, Dict

from sqlalchemy import (Column, DateTime, ForeignKey, String, Text,
                        UniqueConstraint)
from sqlalchemy.orm import relationship

from visionsprint.core.database import Base
from visionsprint.models.base import generate_id, isoformat, utcnow

VISION_AREAS = (
    "Growth",
    "Retention",
    "Efficiency",
    "Customer Experience",
    "Product Innovation",
    "Revenue",
    "Operations",
    "Data & Analytics",
    "Platform",
    "Other",
)


class Vision(Base):
    """Business vision"""
    __tablename__ = "visions"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    area = Column(String(100), nullable=False)
    doc_url = Column(String(1024), nullable=True)
    kpis = Column(Text, nullable=True)
    created_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    created_by = relationship("User")
    likes = relationship(
        "VisionLike",
        back_populates="vision",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="VisionLike.created_at",
    )
    projects = relationship("Project", back_populates="vision", passive_deletes=True)

    def __repr__(self):
        return f"<Vision(id={self.id}, title={self.title}, area={self.area})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "area": self.area,
            "doc_url": self.doc_url,
            "kpis": self.kpis,
            "created_by_id": self.created_by_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def to_summary_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "area": self.area}


class VisionLike(Base):
    """A user's like on a vision"""
    __tablename__ = "vision_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "vision_id", name="uq_vision_likes_user_vision"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    vision_id = Column(String(36), ForeignKey("visions.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User")
    vision = relationship("Vision", back_populates="likes")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "vision_id": self.vision_id,
            "created_at": isoformat(self.created_at),
            "user": self.user.to_public_dict() if self.user else None,
        }
