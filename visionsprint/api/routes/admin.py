"""
Admin API routes - users, project duplication and data backup
"""
import json
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_admin_user
from visionsprint.core.database import get_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.user import User
from visionsprint.services.backup_service import BackupService
from visionsprint.services.project_service import (ProjectService,
                                                   serialize_project)
from visionsprint.services.user_service import UserService

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


class DuplicateProjectRequest(BaseModel):
    project_id: Optional[str] = None


@router.get("/users")
async def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """List users by name, for building teams"""
    try:
        return [
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "image": user.image,
                "is_admin": user.is_admin,
                "discipline": user.discipline,
            }
            for user in UserService(db).list_users()
        ]
    except Exception as e:
        raise_http_error(e, "fetch users")


@router.post("/duplicate-project", status_code=status.HTTP_201_CREATED)
async def duplicate_project(
    request: DuplicateProjectRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """Copy a project so one more team can work on it"""
    try:
        project = ProjectService(db).duplicate_project(request.project_id)
        return serialize_project(project, admin.id)
    except Exception as e:
        raise_http_error(e, "duplicate project")


@router.get("/backup")
async def backup(
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """Download every hackathon table as a JSON attachment"""
    try:
        service = BackupService(db)
        payload = service.export()
    except Exception as e:
        raise_http_error(e, "create backup")

    logger.info(f"Admin {admin.id} downloaded a backup")
    return Response(
        content=json.dumps(payload, indent=2, ensure_ascii=False),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={service.filename()}"},
    )
