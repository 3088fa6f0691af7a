"""
Showcase API routes - reactions and watched videos
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_current_user_required
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.showcase_service import ShowcaseService

reactions_router = APIRouter(prefix="/api/reactions", tags=["showcase"])
watched_router = APIRouter(prefix="/api/watched", tags=["showcase"])


class ReactionRequest(BaseModel):
    project_id: Optional[str] = None
    reaction_type: Optional[str] = None


class WatchedRequest(BaseModel):
    team_id: Optional[str] = None


@reactions_router.post("")
async def toggle_reaction(
    request: ReactionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Add a reaction, or remove it when already given"""
    try:
        reaction = ShowcaseService(db).toggle_reaction(user, request.project_id, request.reaction_type)
    except Exception as e:
        raise_http_error(e, "handle reaction")

    if reaction is None:
        return {"removed": True}
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=reaction.to_dict())


@reactions_router.get("")
async def get_reactions(project_id: Optional[str] = None, db: Session = Depends(get_db)):
    try:
        return ShowcaseService(db).get_reactions(project_id)
    except Exception as e:
        raise_http_error(e, "fetch reactions")


@watched_router.post("")
async def mark_watched(
    request: WatchedRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    try:
        _, created = ShowcaseService(db).mark_watched(user, request.team_id)
        return {"success": True, "created": created}
    except Exception as e:
        raise_http_error(e, "mark video as watched")


@watched_router.get("")
async def list_watched(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Team ids whose videos the caller has watched"""
    try:
        return ShowcaseService(db).list_watched_team_ids(user)
    except Exception as e:
        raise_http_error(e, "fetch watched videos")
