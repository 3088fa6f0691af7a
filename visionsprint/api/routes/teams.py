"""
Team and submission API routes
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_admin_user, get_current_user_required
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.team_service import TeamService

router = APIRouter(prefix="/api/teams", tags=["teams"])
submissions_router = APIRouter(prefix="/api/submissions", tags=["submissions"])


class TeamCreate(BaseModel):
    project_id: Optional[str] = None
    team_name: Optional[str] = None
    member_ids: List[str] = Field(default_factory=list)


class SubmissionRequest(BaseModel):
    team_id: Optional[str] = None
    video_url: Optional[str] = None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_team(
    request: TeamCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """Create a team for a project (admin only)"""
    try:
        team = TeamService(db).create_team(request.project_id, request.team_name, request.member_ids)
        return team.to_dict(include_project=True)
    except Exception as e:
        raise_http_error(e, "create team")


@router.get("")
async def list_teams(sprint_id: Optional[str] = None, db: Session = Depends(get_db)):
    """List teams with project summary, members and submission"""
    try:
        return [team.to_dict(include_project=True) for team in TeamService(db).list_teams(sprint_id)]
    except Exception as e:
        raise_http_error(e, "fetch teams")


@router.get("/{team_id}")
async def get_team(team_id: str, db: Session = Depends(get_db)):
    try:
        return TeamService(db).get_team(team_id).to_dict(include_project=True)
    except Exception as e:
        raise_http_error(e, "fetch team")


@router.delete("/{team_id}")
async def delete_team(
    team_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    try:
        TeamService(db).delete_team(team_id)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "delete team")


@submissions_router.post("")
async def submit_video(
    request: SubmissionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Create or replace the team's demo video"""
    try:
        submission, _ = TeamService(db).submit_video(user, request.team_id, request.video_url)
        return submission.to_dict()
    except Exception as e:
        raise_http_error(e, "create submission")
