"""
Vision service - business visions and their likes
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from visionsprint.core.exceptions import (ConflictError, NotFoundError,
                                          VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.project import Project
from visionsprint.models.user import User
from visionsprint.models.vision import Vision, VisionLike

logger = LoggingConfig.get_logger(__name__)


def serialize_vision(vision: Vision, user_id: Optional[str] = None, include_projects: bool = False) -> Dict[str, Any]:
    data = vision.to_dict()
    data["created_by"] = vision.created_by.to_public_dict() if vision.created_by else None
    data["likes"] = [like.to_dict() for like in vision.likes]
    data["_count"] = {"likes": len(vision.likes), "projects": len(vision.projects)}
    data["has_liked"] = bool(user_id) and any(like.user_id == user_id for like in vision.likes)
    if include_projects:
        data["projects"] = [
            {
                **project.to_dict(),
                "creator": project.creator.to_public_dict() if project.creator else None,
                "_count": {"votes": len(project.votes)},
            }
            for project in vision.projects
        ]
    return data


class VisionService:
    """Service for managing visions"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Vision).options(
            selectinload(Vision.created_by),
            selectinload(Vision.likes).selectinload(VisionLike.user),
            selectinload(Vision.projects).selectinload(Project.votes),
            selectinload(Vision.projects).selectinload(Project.creator),
        )

    def list_visions(self) -> List[Vision]:
        """Visions ordered by like count, newest first among equals"""
        visions = self._query().order_by(Vision.created_at.desc()).all()
        return sorted(visions, key=lambda vision: len(vision.likes), reverse=True)

    def get_vision(self, vision_id: str) -> Vision:
        vision = self._query().filter(Vision.id == vision_id).first()
        if not vision:
            raise NotFoundError("Vision not found")
        return vision

    def create_vision(self, creator: User, fields: Dict[str, Any]) -> Vision:
        """
        Create a vision

        Raises:
            VisionSprintError: title, description or area missing
        """
        if not (fields.get("title") and fields.get("description") and fields.get("area")):
            raise VisionSprintError("Missing required fields (title, description, area)")

        vision = Vision(
            title=fields["title"],
            description=fields["description"],
            area=fields["area"],
            doc_url=fields.get("doc_url") or None,
            kpis=fields.get("kpis") or None,
            created_by_id=creator.id,
        )
        self.db.add(vision)
        self.db.commit()

        logger.info(f"Admin {creator.id} created vision {vision.id}")
        return self.get_vision(vision.id)

    def update_vision(self, vision_id: str, changes: Dict[str, Any]) -> Vision:
        """Partial update; empty values never overwrite title, description or area"""
        vision = self.get_vision(vision_id)

        for field in ("title", "description", "area"):
            if changes.get(field):
                setattr(vision, field, changes[field])
        for field in ("doc_url", "kpis"):
            if field in changes:
                setattr(vision, field, changes[field] or None)

        self.db.commit()
        return self.get_vision(vision_id)

    def delete_vision(self, vision_id: str) -> None:
        vision = self.db.query(Vision).filter(Vision.id == vision_id).first()
        if not vision:
            raise NotFoundError("Vision not found")

        # Projects outlive the vision they were aligned to
        self.db.query(Project).filter(Project.vision_id == vision_id).update(
            {Project.vision_id: None}, synchronize_session=False
        )
        self.db.delete(vision)
        self.db.commit()
        logger.info(f"Deleted vision {vision_id}")

    def _get_like(self, user_id: str, vision_id: str) -> Optional[VisionLike]:
        return self.db.query(VisionLike).filter(
            VisionLike.user_id == user_id,
            VisionLike.vision_id == vision_id,
        ).first()

    def like_vision(self, user: User, vision_id: str) -> VisionLike:
        """
        Raises:
            NotFoundError: Vision does not exist
            ConflictError: Already liked
        """
        if not self.db.query(Vision.id).filter(Vision.id == vision_id).first():
            raise NotFoundError("Vision not found")

        if self._get_like(user.id, vision_id):
            raise ConflictError("Already liked this vision")

        like = VisionLike(user_id=user.id, vision_id=vision_id)
        self.db.add(like)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Already liked this vision")
        self.db.refresh(like)
        return like

    def unlike_vision(self, user: User, vision_id: str) -> None:
        like = self._get_like(user.id, vision_id)
        if not like:
            raise NotFoundError("Like not found")

        self.db.delete(like)
        self.db.commit()
