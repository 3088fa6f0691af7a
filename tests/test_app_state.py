"""
Tests for app state, stage gates and sprints
"""
from datetime import datetime

import pytest

from visionsprint.core.database import get_session_local
from visionsprint.core.exceptions import (NotFoundError, StageClosedError,
                                          VisionSprintError)
from visionsprint.models.sprint import APP_STATE_ID, AppStage, Sprint
from visionsprint.services.app_state_service import (AppStateService,
                                                     parse_date, parse_stage)


def test_first_access_creates_default_sprint(db):
    """App state is created lazily together with a current sprint"""
    state = AppStateService(db).get_app_state()

    assert state.current_sprint_id is not None
    assert state.test_mode is False
    assert state.stage == AppStage.RECEIVING_SUBMISSIONS.value
    assert db.query(Sprint).count() == 1


def test_get_app_state_is_singleton(db):
    service = AppStateService(db)
    first = service.get_app_state()
    second = service.get_app_state()

    assert first.id == second.id
    assert db.query(Sprint).count() == 1


def test_concurrent_first_access_reuses_existing_state(db, stale_lookup):
    AppStateService(db).get_app_state()
    other_session = get_session_local()()
    try:
        service = AppStateService(other_session)
        stale_lookup(service, "_find_state")

        state = service.get_app_state()

        assert state.id == APP_STATE_ID
        assert other_session.query(Sprint).count() == 1
    finally:
        other_session.close()


def test_stage_gates_follow_current_sprint(app_state, set_stage):
    assert app_state.can_submit_projects()
    assert app_state.can_vote()
    assert app_state.can_join()
    assert not app_state.can_submit_videos()

    set_stage(AppStage.EXECUTING_SPRINT)
    assert not app_state.can_submit_projects()
    assert not app_state.can_vote()
    assert not app_state.can_delete_projects()
    assert app_state.can_submit_videos()

    set_stage(AppStage.SPRINT_OVER)
    assert not app_state.can_submit_videos()
    assert not app_state.can_join()


def test_test_mode_opens_every_gate(app_state, set_stage):
    set_stage(AppStage.SPRINT_OVER, test_mode=True)

    assert app_state.can_submit_projects()
    assert app_state.can_vote()
    assert app_state.can_submit_videos()
    assert app_state.editable_project_fields(["name", "slack_channel"]) == ["name", "slack_channel"]


def test_editable_fields_per_stage(app_state, set_stage):
    requested = ["name", "description", "slack_channel", "doc_link"]
    assert app_state.editable_project_fields(requested) == requested

    set_stage(AppStage.EXECUTING_SPRINT)
    assert app_state.editable_project_fields(requested) == ["slack_channel", "doc_link"]

    set_stage(AppStage.SPRINT_OVER)
    with pytest.raises(StageClosedError, match="Editing is disabled after sprint ends") as exc_info:
        app_state.editable_project_fields(requested)
    assert exc_info.value.stage == AppStage.SPRINT_OVER.value
    assert exc_info.value.operation == "edit_project"


def test_require_raises_stage_closed(app_state, set_stage):
    set_stage(AppStage.EXECUTING_SPRINT)
    with pytest.raises(StageClosedError, match="Voting is closed"):
        app_state.require(app_state.can_vote(), "vote", "Voting is closed")


def test_parse_stage_rejects_unknown():
    assert parse_stage("SPRINT_OVER") == AppStage.SPRINT_OVER
    with pytest.raises(VisionSprintError, match="Invalid stage"):
        parse_stage("VOTING")


def test_parse_date_handles_empty_and_utc_suffix():
    assert parse_date(None) is None
    assert parse_date("") is None
    assert parse_date("2026-03-02T09:00:00Z") == datetime(2026, 3, 2, 9, 0)
    assert parse_date("2026-03-02T11:00:00+02:00") == datetime(2026, 3, 2, 9, 0)
    with pytest.raises(VisionSprintError, match="Invalid date"):
        parse_date("next tuesday")


def test_update_state_writes_stage_and_dates_to_current_sprint(db, app_state):
    state = app_state.update_state({
        "stage": "EXECUTING_SPRINT",
        "sprint_start_date": "2026-03-02T09:00:00Z",
    })

    sprint = db.query(Sprint).filter(Sprint.id == state.current_sprint_id).one()
    assert sprint.stage == "EXECUTING_SPRINT"
    assert sprint.sprint_start_date == datetime(2026, 3, 2, 9, 0)

    app_state.update_state({"sprint_start_date": None})
    db.refresh(sprint)
    assert sprint.sprint_start_date is None


def test_update_state_unknown_sprint(app_state):
    with pytest.raises(NotFoundError, match="Sprint not found"):
        app_state.update_state({"current_sprint_id": "missing"})


def test_switching_sprint_changes_effective_stage(app_state, set_stage):
    set_stage(AppStage.SPRINT_OVER)
    new_sprint = app_state.create_sprint("April 2026", set_as_current=True)

    assert app_state.get_current_sprint_id() == new_sprint.id
    assert app_state.get_stage() == AppStage.RECEIVING_SUBMISSIONS


def test_get_state_api_is_public(client):
    response = client.get("/api/admin/state")

    assert response.status_code == 200
    data = response.json()
    assert data["stage"] == "RECEIVING_SUBMISSIONS"
    assert data["current_sprint"]["id"] == data["current_sprint_id"]


def test_update_state_api_requires_admin(client, user_headers, admin_headers):
    assert client.put("/api/admin/state", json={"stage": "EXECUTING_SPRINT"}).status_code == 401
    assert client.put(
        "/api/admin/state", json={"stage": "EXECUTING_SPRINT"}, headers=user_headers
    ).status_code == 403

    response = client.put("/api/admin/state", json={"stage": "EXECUTING_SPRINT"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["stage"] == "EXECUTING_SPRINT"


def test_update_state_api_errors(client, admin_headers):
    response = client.put("/api/admin/state", json={"stage": "BOGUS"}, headers=admin_headers)
    assert response.status_code == 400
    assert "Invalid stage" in response.json()["detail"]

    response = client.put("/api/admin/state", json={"current_sprint_id": "nope"}, headers=admin_headers)
    assert response.status_code == 404


def test_sprints_api(client, admin_headers, user_headers):
    response = client.post(
        "/api/sprints",
        json={"name": "Spring Sprint", "sprint_end_date": "2026-04-10T18:00:00Z", "set_as_current": True},
        headers=admin_headers,
    )
    assert response.status_code == 201
    sprint = response.json()
    assert sprint["stage"] == "RECEIVING_SUBMISSIONS"
    assert sprint["sprint_end_date"].startswith("2026-04-10T18:00:00")

    state = client.get("/api/admin/state").json()
    assert state["current_sprint_id"] == sprint["id"]

    sprints = client.get("/api/sprints").json()
    assert sprint["id"] in [s["id"] for s in sprints]

    response = client.put(
        f"/api/sprints/{sprint['id']}",
        json={"name": "Renamed", "sprint_end_date": None},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["sprint_end_date"] is None

    assert client.post("/api/sprints", json={"name": "x"}, headers=user_headers).status_code == 403
    assert client.post("/api/sprints", json={"name": "  "}, headers=admin_headers).status_code == 400
    assert client.get("/api/sprints/missing").status_code == 404
