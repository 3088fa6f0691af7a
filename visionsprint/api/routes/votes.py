"""
Vote API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_current_user_required
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.vote_service import VoteService

router = APIRouter(prefix="/api/votes", tags=["votes"])


class VoteRequest(BaseModel):
    project_id: Optional[str] = None


@router.post("", status_code=status.HTTP_201_CREATED)
async def cast_vote(
    request: VoteRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Vote for a project"""
    try:
        return VoteService(db).cast_vote(user, request.project_id).to_dict()
    except Exception as e:
        raise_http_error(e, "vote")


@router.delete("")
async def remove_vote(
    project_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Withdraw a vote"""
    try:
        VoteService(db).remove_vote(user, project_id)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "remove vote")
