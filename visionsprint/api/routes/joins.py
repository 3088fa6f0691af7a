"""
Project join API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_current_user, get_current_user_required
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.join_service import JoinService

router = APIRouter(prefix="/api/joins", tags=["joins"])


class JoinRequest(BaseModel):
    project_id: Optional[str] = None


@router.post("")
async def toggle_join(
    request: JoinRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Join a project, or leave it if already joined"""
    try:
        joined, join = JoinService(db).toggle_join(user, request.project_id)
    except Exception as e:
        raise_http_error(e, "toggle join")

    if not joined:
        return {"joined": False}
    return JSONResponse(status_code=status.HTTP_201_CREATED, content={"joined": True, "join": join.to_dict()})


@router.get("")
async def list_joins(
    project_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_current_user),
):
    """Joins on a project, newest first"""
    try:
        return JoinService(db).list_joins(project_id, user.id if user else None)
    except Exception as e:
        raise_http_error(e, "fetch joins")
