"""
Sprint API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_admin_user
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.app_state_service import AppStateService

router = APIRouter(prefix="/api/sprints", tags=["sprints"])


class SprintCreate(BaseModel):
    name: Optional[str] = None
    submission_end_date: Optional[str] = None
    sprint_start_date: Optional[str] = None
    sprint_end_date: Optional[str] = None
    set_as_current: bool = False


class SprintUpdate(BaseModel):
    """Explicit nulls clear a date; omitted fields are left unchanged"""
    name: Optional[str] = None
    stage: Optional[str] = None
    submission_end_date: Optional[str] = None
    sprint_start_date: Optional[str] = None
    sprint_end_date: Optional[str] = None


@router.get("")
async def list_sprints(db: Session = Depends(get_db)):
    """List sprints, newest first"""
    try:
        return [sprint.to_dict() for sprint in AppStateService(db).list_sprints()]
    except Exception as e:
        raise_http_error(e, "fetch sprints")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sprint(
    request: SprintCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """Create a sprint (admin only)"""
    try:
        sprint = AppStateService(db).create_sprint(
            name=request.name,
            submission_end_date=request.submission_end_date,
            sprint_start_date=request.sprint_start_date,
            sprint_end_date=request.sprint_end_date,
            set_as_current=request.set_as_current,
        )
        return sprint.to_dict()
    except Exception as e:
        raise_http_error(e, "create sprint")


@router.get("/{sprint_id}")
async def get_sprint(sprint_id: str, db: Session = Depends(get_db)):
    try:
        return AppStateService(db).get_sprint(sprint_id).to_dict()
    except Exception as e:
        raise_http_error(e, "fetch sprint")


@router.put("/{sprint_id}")
async def update_sprint(
    sprint_id: str,
    request: SprintUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """Update a sprint's name, stage or dates (admin only)"""
    try:
        sprint = AppStateService(db).update_sprint(sprint_id, request.model_dump(exclude_unset=True))
        return sprint.to_dict()
    except Exception as e:
        raise_http_error(e, "update sprint")
