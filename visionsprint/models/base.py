"""
Shared column helpers for models
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


def generate_id() -> str:
    """Primary keys are opaque UUID4 strings"""
    return str(uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
