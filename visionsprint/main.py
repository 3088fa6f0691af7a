"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from visionsprint import __version__
from visionsprint.api.routes import (admin, auth, health, joins, metrics,
                                     projects, showcase, sprints, state,
                                     teams, user, visions, votes)
from visionsprint.core.config import get_settings
from visionsprint.core.database import get_session_local, init_db
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.middleware import (LoggingContextMiddleware,
                                          MetricsMiddleware)
from visionsprint.services.auth_service import AuthService

# Configure logging first
LoggingConfig.configure()

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")

    # Production schemas are managed by alembic
    if not settings.is_production:
        init_db()

    db = get_session_local()()
    try:
        AuthService(db).cleanup_expired_sessions()
    finally:
        db.close()

    yield

    logger.info(f"Shutting down {settings.app_name}...")


_settings = get_settings()
app = FastAPI(
    title=_settings.app_name,
    description="Hackathon platform: pitch projects, vote, form teams, showcase demos",
    version=__version__,
    lifespan=lifespan,
)

# Add logging context middleware (before CORS to capture all requests)
app.add_middleware(LoggingContextMiddleware)
app.add_middleware(MetricsMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler to log all unhandled errors"""
    if isinstance(exc, FastAPIHTTPException):
        raise exc

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": type(exc).__name__,
        },
    )


app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(auth.router)
app.include_router(user.router)
app.include_router(state.router)
app.include_router(sprints.router)
app.include_router(admin.router)
app.include_router(visions.router)
app.include_router(projects.router)
app.include_router(votes.router)
app.include_router(joins.router)
app.include_router(teams.router)
app.include_router(teams.submissions_router)
app.include_router(showcase.reactions_router)
app.include_router(showcase.watched_router)


@app.get("/api")
async def root():
    """Root API endpoint"""
    settings = get_settings()
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "environment": settings.app_env,
    }


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "visionsprint.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
