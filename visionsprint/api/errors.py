"""
Translate service-layer errors into HTTP responses
"""
from typing import NoReturn

from fastapi import HTTPException, status

from visionsprint.core.exceptions import VisionSprintError
from visionsprint.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


def raise_http_error(error: Exception, action: str) -> NoReturn:
    """
    Re-raise ``error`` as an HTTPException

    Domain errors keep their status code and message; anything else is
    logged with its traceback and reported as a generic 500.

    Args:
        error: Caught exception
        action: What was being attempted, for the 500 message ("create project")
    """
    if isinstance(error, HTTPException):
        raise error
    if isinstance(error, VisionSprintError):
        raise HTTPException(status_code=error.status_code, detail=error.message)

    logger.error(f"Failed to {action}: {error}", exc_info=True)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )
