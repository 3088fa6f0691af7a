"""
Project API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_current_user, get_current_user_required
from visionsprint.core.database import get_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.user import User
from visionsprint.services.auth_service import AuthService
from visionsprint.services.google_drive import (GoogleDriveClient,
                                                extract_drive_file_id)
from visionsprint.services.project_service import (ProjectService,
                                                   serialize_project)

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


class ProjectCreate(BaseModel):
    """Project submission"""
    name: Optional[str] = None
    description: Optional[str] = None
    project_type: Optional[str] = None
    slack_channel: Optional[str] = None
    pitch_video_url: Optional[str] = None
    doc_link: Optional[str] = None
    business_rationale: Optional[str] = None
    vision_id: Optional[str] = None
    department: Optional[str] = None


class ProjectUpdate(ProjectCreate):
    """Partial update; only fields present in the body are considered"""


class CheckVideoRequest(BaseModel):
    video_url: Optional[str] = None


@router.get("")
async def list_projects(
    sprint_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_current_user),
):
    """List projects of a sprint (default: current), most voted first"""
    try:
        user_id = user.id if user else None
        return [serialize_project(project, user_id) for project in ProjectService(db).list_projects(sprint_id)]
    except Exception as e:
        raise_http_error(e, "fetch projects")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Submit a project idea"""
    try:
        service = ProjectService(db)
        # Stage is checked before the slower video lookup
        service.app_state.require(
            service.app_state.can_submit_projects(), "create_project", "Project submissions are closed"
        )
        await service.validate_pitch_video(
            request.pitch_video_url, AuthService(db).get_provider_access_token(user.id)
        )
        project = service.create_project(user, request.model_dump())
        return serialize_project(project, user.id)
    except Exception as e:
        raise_http_error(e, "create project")


@router.post("/check-video")
async def check_video(
    request: CheckVideoRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Check a Google Drive video's length before it is submitted"""
    if not request.video_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No video URL provided")
    if not extract_drive_file_id(request.video_url):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not extract file ID from URL")

    try:
        access_token = AuthService(db).get_provider_access_token(user.id)
        drive = GoogleDriveClient()
        if not access_token and not drive.api_key:
            return {
                "valid": True,
                "warning": "Could not verify video duration (no Google access token). "
                           "Duration will be checked on submission.",
            }
        return await drive.validate_video_duration(request.video_url, access_token)
    except Exception as e:
        raise_http_error(e, "check video")


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_current_user),
):
    """Get a project with votes, joins, teams and reactions"""
    try:
        project = ProjectService(db).get_project(project_id)
        return serialize_project(project, user.id if user else None, include_reactions=True)
    except Exception as e:
        raise_http_error(e, "fetch project")


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    request: ProjectUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Edit a project as its creator or an admin; what may change depends on the stage"""
    try:
        service = ProjectService(db)
        changes = request.model_dump(exclude_unset=True)
        service.require_owner(service.get_project(project_id), user)
        if changes.get("pitch_video_url") and service.app_state.can_fully_edit_projects():
            await service.validate_pitch_video(
                changes["pitch_video_url"], AuthService(db).get_provider_access_token(user.id)
            )
        project = service.update_project(project_id, user, changes)
        return serialize_project(project, user.id)
    except Exception as e:
        raise_http_error(e, "update project")


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    try:
        ProjectService(db).delete_project(project_id, user)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "delete project")
