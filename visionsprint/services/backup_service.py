"""
Backup service - JSON export of all hackathon data
"""
from datetime import date, datetime
from typing import Any, Dict, List

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from visionsprint.core.logging_config import LoggingConfig
from visionsprint.models.base import utcnow
from visionsprint.models.project import Project, ProjectJoin, Vote
from visionsprint.models.showcase import Reaction, WatchedVideo
from visionsprint.models.sprint import AppState, Sprint
from visionsprint.models.team import Submission, Team, TeamMember
from visionsprint.models.user import User
from visionsprint.models.vision import Vision, VisionLike

logger = LoggingConfig.get_logger(__name__)

BACKUP_FORMAT_VERSION = "1.0"

# Sessions and linked accounts hold credentials and are never exported
BACKUP_TABLES = (
    ("app_state", AppState, None),
    ("sprints", Sprint, Sprint.created_at.desc()),
    ("users", User, None),
    ("projects", Project, Project.created_at.desc()),
    ("votes", Vote, None),
    ("project_joins", ProjectJoin, None),
    ("teams", Team, None),
    ("team_members", TeamMember, None),
    ("submissions", Submission, None),
    ("reactions", Reaction, None),
    ("watched_videos", WatchedVideo, None),
    ("visions", Vision, Vision.created_at.desc()),
    ("vision_likes", VisionLike, None),
)


def _row_to_dict(obj) -> Dict[str, Any]:
    data = {}
    for column in inspect(obj).mapper.column_attrs:
        value = getattr(obj, column.key)
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        data[column.key] = value
    return data


class BackupService:
    """Builds a full data export for admins"""

    def __init__(self, db: Session):
        self.db = db

    def export(self) -> Dict[str, Any]:
        """
        Export every hackathon table as plain column dictionaries

        Returns:
            {"exported_at", "app_version", "tables": {name: [rows]}}
        """
        tables: Dict[str, List[Dict[str, Any]]] = {}
        for name, model, order in BACKUP_TABLES:
            query = self.db.query(model)
            if order is not None:
                query = query.order_by(order)
            tables[name] = [_row_to_dict(row) for row in query.all()]

        logger.info(
            "Exported backup",
            extra={"row_counts": {name: len(rows) for name, rows in tables.items()}},
        )
        return {
            "exported_at": utcnow().isoformat() + "Z",
            "app_version": BACKUP_FORMAT_VERSION,
            "tables": tables,
        }

    @staticmethod
    def filename() -> str:
        return f"visionsprint-backup-{utcnow().date().isoformat()}.json"
