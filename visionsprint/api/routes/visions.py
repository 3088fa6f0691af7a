"""
Vision API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import (get_admin_user, get_current_user,
                                    get_current_user_required)
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.vision_service import (VisionService,
                                                  serialize_vision)

router = APIRouter(prefix="/api/visions", tags=["visions"])


class VisionCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    area: Optional[str] = None
    doc_url: Optional[str] = None
    kpis: Optional[str] = None


class VisionUpdate(VisionCreate):
    """Partial update"""


@router.get("")
async def list_visions(
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_current_user),
):
    """List visions, most liked first"""
    try:
        user_id = user.id if user else None
        return [serialize_vision(vision, user_id) for vision in VisionService(db).list_visions()]
    except Exception as e:
        raise_http_error(e, "fetch visions")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_vision(
    request: VisionCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    try:
        vision = VisionService(db).create_vision(admin, request.model_dump())
        return serialize_vision(vision, admin.id)
    except Exception as e:
        raise_http_error(e, "create vision")


@router.get("/{vision_id}")
async def get_vision(
    vision_id: str,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_current_user),
):
    """Get a vision with the projects aligned to it"""
    try:
        vision = VisionService(db).get_vision(vision_id)
        return serialize_vision(vision, user.id if user else None, include_projects=True)
    except Exception as e:
        raise_http_error(e, "fetch vision")


@router.put("/{vision_id}")
async def update_vision(
    vision_id: str,
    request: VisionUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    try:
        vision = VisionService(db).update_vision(vision_id, request.model_dump(exclude_unset=True))
        return serialize_vision(vision, admin.id)
    except Exception as e:
        raise_http_error(e, "update vision")


@router.delete("/{vision_id}")
async def delete_vision(
    vision_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    try:
        VisionService(db).delete_vision(vision_id)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "delete vision")


@router.post("/{vision_id}/likes", status_code=status.HTTP_201_CREATED)
async def like_vision(
    vision_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    try:
        return VisionService(db).like_vision(user, vision_id).to_dict()
    except Exception as e:
        raise_http_error(e, "like vision")


@router.delete("/{vision_id}/likes")
async def unlike_vision(
    vision_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    try:
        VisionService(db).unlike_vision(user, vision_id)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "unlike vision")
