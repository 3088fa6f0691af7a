"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from visionsprint import __version__
from visionsprint.core.config import get_settings
from visionsprint.core.database import get_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.base import utcnow
from visionsprint.services.app_state_service import AppStateService

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "service": get_settings().app_name,
    }


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Detailed health check with component status

    Returns:
        dict: Detailed health status of all components
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.app_env,
        "components": {},
    }

    try:
        db.execute(text("SELECT 1"))
        db.commit()
        health_status["components"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
            "error": type(e).__name__,
        }
        return health_status

    try:
        state = AppStateService(db).get_app_state()
        health_status["components"]["app_state"] = {
            "status": "healthy",
            "stage": state.stage,
            "test_mode": state.test_mode,
            "current_sprint": state.current_sprint.name if state.current_sprint else None,
        }
    except Exception as e:
        logger.warning(f"App state health check failed: {e}")
        health_status["status"] = "degraded"
        health_status["components"]["app_state"] = {
            "status": "unhealthy",
            "message": str(e),
            "error": type(e).__name__,
        }

    health_status["components"]["google"] = {
        "status": "healthy" if settings.google_oauth_configured else "warning",
        "oauth_configured": settings.google_oauth_configured,
        "api_key_configured": bool(settings.google_api_key),
    }

    return health_status
