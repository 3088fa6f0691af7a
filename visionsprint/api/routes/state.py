"""
App state API routes - current stage, test mode and the sprint the site runs
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_admin_user
from visionsprint.core.database import get_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.user import User
from visionsprint.services.app_state_service import AppStateService

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/admin/state", tags=["state"])


class AppStateUpdate(BaseModel):
    """Admin update; omitted fields are left unchanged"""
    stage: Optional[str] = None
    submission_end_date: Optional[str] = None
    sprint_start_date: Optional[str] = None
    sprint_end_date: Optional[str] = None
    test_mode: Optional[bool] = None
    current_sprint_id: Optional[str] = None


@router.get("")
async def get_app_state(db: Session = Depends(get_db)):
    """Get the app state with the effective stage and current sprint"""
    try:
        return AppStateService(db).get_app_state().to_dict()
    except Exception as e:
        raise_http_error(e, "fetch app state")


@router.put("")
async def update_app_state(
    request: AppStateUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user),
):
    """Update stage, sprint dates, test mode or the current sprint (admin only)"""
    try:
        state = AppStateService(db).update_state(request.model_dump(exclude_unset=True))
        logger.info(f"Admin {admin.id} updated app state", extra={"stage": state.stage, "test_mode": state.test_mode})
        return state.to_dict()
    except Exception as e:
        raise_http_error(e, "update app state")
