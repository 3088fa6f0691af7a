"""
User onboarding API routes
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from visionsprint.api.errors import raise_http_error
from visionsprint.core.auth import get_current_user_required, get_signed_in_user
from visionsprint.core.database import get_db
from visionsprint.models.user import User
from visionsprint.services.user_service import UserService

router = APIRouter(prefix="/api/user", tags=["user"])


class DisciplineRequest(BaseModel):
    discipline: Optional[str] = None


class VerifyAccessRequest(BaseModel):
    password: Optional[str] = None


@router.get("/discipline")
async def get_discipline(user: User = Depends(get_current_user_required)):
    return {"discipline": user.discipline}


@router.put("/discipline")
async def set_discipline(
    request: DisciplineRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_required),
):
    """Set the caller's discipline (only once)"""
    try:
        user = UserService(db).set_discipline(user, request.discipline)
        return {"id": user.id, "name": user.name, "email": user.email, "discipline": user.discipline}
    except Exception as e:
        raise_http_error(e, "update discipline")


@router.post("/verify-access")
async def verify_access(
    request: VerifyAccessRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_signed_in_user),
):
    """Unlock the site with the shared access password"""
    try:
        UserService(db).verify_access(user, request.password)
        return {"success": True}
    except Exception as e:
        raise_http_error(e, "verify access")
