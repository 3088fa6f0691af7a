"""
Domain errors raised by the service layer

Routes translate these into HTTP responses; services never raise HTTPException.
"""


class VisionSprintError(ValueError):
    """Base class for rule violations caused by the request (HTTP 400)"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(VisionSprintError):
    """Referenced entity does not exist"""

    status_code = 404


class PermissionDeniedError(VisionSprintError):
    """Caller is authenticated but may not perform the action"""

    status_code = 403


class StageClosedError(PermissionDeniedError):
    """Action is not allowed in the current hackathon stage"""

    def __init__(self, message: str, stage: str, operation: str):
        super().__init__(message)
        self.stage = stage
        self.operation = operation


class ConflictError(VisionSprintError):
    """Duplicate of something that may exist only once (already voted, already liked)"""


class LimitExceededError(VisionSprintError):
    """A configured per-user or per-team limit would be exceeded"""
