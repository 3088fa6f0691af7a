"""
App state service - current sprint, stage gates and sprint management
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from visionsprint.core.exceptions import (NotFoundError, StageClosedError,
                                          VisionSprintError)
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.metrics import stage_gate_rejections_total
from visionsprint.models.base import utcnow
from visionsprint.models.sprint import APP_STATE_ID, AppStage, AppState, Sprint

logger = LoggingConfig.get_logger(__name__)

SPRINT_DATE_FIELDS = ("submission_end_date", "sprint_start_date", "sprint_end_date")

# Fields a creator may still change once the sprint is running
SPRINT_EDITABLE_PROJECT_FIELDS = frozenset({"slack_channel", "doc_link"})


def parse_stage(value: Any) -> AppStage:
    """Parse a stage name, raising VisionSprintError for anything unknown"""
    try:
        return AppStage(value)
    except ValueError:
        allowed = ", ".join(stage.value for stage in AppStage)
        raise VisionSprintError(f"Invalid stage. Allowed stages: {allowed}")


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date/datetime string; None and "" clear the date"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise VisionSprintError(f"Invalid date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class AppStateService:
    """Service for the singleton app state, its sprints and stage gating"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # App state
    # ------------------------------------------------------------------

    def get_app_state(self) -> AppState:
        """
        Get the singleton app state, creating it on first use

        When no sprint exists yet a default sprint named after the current
        month is created and made current.

        Returns:
            AppState object
        """
        state = self._find_state()
        if state:
            return state

        state = AppState(id=APP_STATE_ID)
        if self.db.query(Sprint).count() == 0:
            sprint = Sprint(name=utcnow().strftime("%B %Y"))
            self.db.add(sprint)
            self.db.flush()
            state.current_sprint_id = sprint.id
            logger.info(f"Created default sprint '{sprint.name}'")

        self.db.add(state)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent first request created it; its default sprint wins
            self.db.rollback()
            return self._find_state()
        self.db.refresh(state)
        return state

    def _find_state(self) -> Optional[AppState]:
        return self.db.query(AppState).filter(AppState.id == APP_STATE_ID).first()

    def get_stage(self) -> AppStage:
        return AppStage(self.get_app_state().stage)

    def get_current_sprint_id(self) -> Optional[str]:
        return self.get_app_state().current_sprint_id

    def update_state(self, changes: Dict[str, Any]) -> AppState:
        """
        Apply an admin update to the app state

        Stage and dates are written to the current sprint; keys missing from
        ``changes`` are left alone.

        Args:
            changes: Subset of stage, submission_end_date, sprint_start_date,
                sprint_end_date, test_mode, current_sprint_id

        Returns:
            Updated AppState

        Raises:
            VisionSprintError: Invalid stage or date
            NotFoundError: current_sprint_id does not exist
        """
        state = self.get_app_state()

        if "current_sprint_id" in changes and changes["current_sprint_id"] is not None:
            sprint = self.db.query(Sprint).filter(Sprint.id == changes["current_sprint_id"]).first()
            if not sprint:
                raise NotFoundError("Sprint not found")
            state.current_sprint_id = sprint.id
            state.current_sprint = sprint

        if changes.get("test_mode") is not None:
            state.test_mode = bool(changes["test_mode"])

        sprint = state.current_sprint
        if changes.get("stage") is not None:
            stage = parse_stage(changes["stage"])
            if sprint is None:
                raise VisionSprintError("No current sprint to set the stage on")
            if sprint.stage != stage.value:
                logger.info(f"Sprint {sprint.id} stage {sprint.stage} -> {stage.value}")
            sprint.stage = stage.value

        for field in SPRINT_DATE_FIELDS:
            if field in changes:
                if sprint is None:
                    raise VisionSprintError("No current sprint to set dates on")
                setattr(sprint, field, parse_date(changes[field]))

        state.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(state)
        return state

    # ------------------------------------------------------------------
    # Stage gates
    # ------------------------------------------------------------------

    def _stage_allows(self, *stages: AppStage) -> bool:
        state = self.get_app_state()
        if state.test_mode:
            return True
        return state.stage in {stage.value for stage in stages}

    def can_submit_projects(self) -> bool:
        return self._stage_allows(AppStage.RECEIVING_SUBMISSIONS)

    def can_vote(self) -> bool:
        return self._stage_allows(AppStage.RECEIVING_SUBMISSIONS)

    def can_join(self) -> bool:
        return self._stage_allows(AppStage.RECEIVING_SUBMISSIONS)

    def can_submit_videos(self) -> bool:
        return self._stage_allows(AppStage.EXECUTING_SPRINT)

    def can_delete_projects(self) -> bool:
        return self._stage_allows(AppStage.RECEIVING_SUBMISSIONS)

    def can_fully_edit_projects(self) -> bool:
        return self._stage_allows(AppStage.RECEIVING_SUBMISSIONS)

    def editable_project_fields(self, requested: List[str]) -> List[str]:
        """
        Filter requested project fields down to what the stage allows editing

        Raises:
            StageClosedError: Nothing may be edited once the sprint is over
        """
        state = self.get_app_state()
        if state.test_mode or state.stage == AppStage.RECEIVING_SUBMISSIONS.value:
            return list(requested)
        if state.stage == AppStage.EXECUTING_SPRINT.value:
            return [field for field in requested if field in SPRINT_EDITABLE_PROJECT_FIELDS]
        self._reject("edit_project", state.stage, "Editing is disabled after sprint ends")

    def require(self, allowed: bool, operation: str, message: str) -> None:
        """Raise StageClosedError for ``operation`` unless ``allowed``"""
        if not allowed:
            self._reject(operation, self.get_app_state().stage, message)

    def _reject(self, operation: str, stage: str, message: str) -> None:
        stage_gate_rejections_total.labels(operation=operation, stage=stage).inc()
        logger.info(f"Rejected {operation} in stage {stage}")
        raise StageClosedError(message, stage=stage, operation=operation)

    # ------------------------------------------------------------------
    # Sprints
    # ------------------------------------------------------------------

    def list_sprints(self) -> List[Sprint]:
        return self.db.query(Sprint).order_by(Sprint.created_at.desc()).all()

    def get_sprint(self, sprint_id: str) -> Sprint:
        sprint = self.db.query(Sprint).filter(Sprint.id == sprint_id).first()
        if not sprint:
            raise NotFoundError("Sprint not found")
        return sprint

    def create_sprint(
        self,
        name: Optional[str],
        submission_end_date: Any = None,
        sprint_start_date: Any = None,
        sprint_end_date: Any = None,
        set_as_current: bool = False,
    ) -> Sprint:
        """
        Create a sprint in RECEIVING_SUBMISSIONS

        Args:
            name: Sprint name (required)
            set_as_current: Point the app state at the new sprint

        Returns:
            Created Sprint

        Raises:
            VisionSprintError: Missing name or invalid date
        """
        if not name or not name.strip():
            raise VisionSprintError("Sprint name is required")

        sprint = Sprint(
            name=name.strip(),
            stage=AppStage.RECEIVING_SUBMISSIONS.value,
            submission_end_date=parse_date(submission_end_date),
            sprint_start_date=parse_date(sprint_start_date),
            sprint_end_date=parse_date(sprint_end_date),
        )
        self.db.add(sprint)
        self.db.flush()

        if set_as_current:
            state = self.get_app_state()
            state.current_sprint_id = sprint.id
            state.current_sprint = sprint

        self.db.commit()
        self.db.refresh(sprint)
        logger.info(f"Created sprint {sprint.id} '{sprint.name}' (current: {set_as_current})")
        return sprint

    def update_sprint(self, sprint_id: str, changes: Dict[str, Any]) -> Sprint:
        """
        Update a sprint; a date key present with None clears that date

        Raises:
            NotFoundError: Sprint does not exist
            VisionSprintError: Invalid stage, date or empty name
        """
        sprint = self.get_sprint(sprint_id)

        if changes.get("name") is not None:
            if not str(changes["name"]).strip():
                raise VisionSprintError("Sprint name is required")
            sprint.name = str(changes["name"]).strip()
        if changes.get("stage") is not None:
            sprint.stage = parse_stage(changes["stage"]).value
        for field in SPRINT_DATE_FIELDS:
            if field in changes:
                setattr(sprint, field, parse_date(changes[field]))

        self.db.commit()
        self.db.refresh(sprint)
        return sprint
