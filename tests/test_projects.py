"""
Tests for project submission, listing, stage-dependent editing and duplication
"""
import httpx
import pytest

from visionsprint.core.exceptions import PermissionDeniedError
from visionsprint.models.project import Project, ProjectJoin, Vote
from visionsprint.models.showcase import Reaction, WatchedVideo
from visionsprint.models.sprint import AppStage
from visionsprint.models.team import Submission, Team, TeamMember
from visionsprint.services.google_drive import GoogleDriveClient
from visionsprint.services.project_service import ProjectService

PROJECT_BODY = {
    "name": "AI-Powered Code Review",
    "description": "An assistant that reviews pull requests",
    "project_type": "MOONSHOT",
    "slack_channel": "#ai-code-review",
}


def test_create_project(client, user, user_headers):
    response = client.post("/api/projects", json=PROJECT_BODY, headers=user_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == PROJECT_BODY["name"]
    assert data["creator"]["id"] == user.id
    assert data["_count"] == {"votes": 0, "reactions": 0, "joins": 0}
    assert data["has_voted"] is False

    state = client.get("/api/admin/state").json()
    assert data["sprint_id"] == state["current_sprint_id"]


def test_create_project_requires_auth(client):
    assert client.post("/api/projects", json=PROJECT_BODY).status_code == 401


def test_create_project_missing_fields(client, user_headers):
    body = dict(PROJECT_BODY, slack_channel="")
    response = client.post("/api/projects", json=body, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"


def test_create_project_invalid_type(client, user_headers):
    body = dict(PROJECT_BODY, project_type="GIANT")
    response = client.post("/api/projects", json=body, headers=user_headers)

    assert response.status_code == 400
    assert "Invalid project type" in response.json()["detail"]


def test_create_project_unknown_vision(client, user_headers):
    body = dict(PROJECT_BODY, vision_id="missing")
    assert client.post("/api/projects", json=body, headers=user_headers).status_code == 404


def test_create_project_closed_after_submissions(client, user_headers, set_stage):
    set_stage(AppStage.EXECUTING_SPRINT)
    response = client.post("/api/projects", json=PROJECT_BODY, headers=user_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Project submissions are closed"


def test_create_project_allowed_in_test_mode(client, user_headers, set_stage):
    set_stage(AppStage.SPRINT_OVER, test_mode=True)
    assert client.post("/api/projects", json=PROJECT_BODY, headers=user_headers).status_code == 201


def test_create_project_rejects_long_pitch_video(client, user_headers, settings, monkeypatch):
    def handler(request):
        return httpx.Response(200, json={
            "name": "pitch.mp4",
            "mimeType": "video/mp4",
            "videoMediaMetadata": {"durationMillis": "305000"},
        })

    monkeypatch.setattr(settings, "google_api_key", "test-key")
    monkeypatch.setattr(
        "visionsprint.services.project_service.GoogleDriveClient",
        lambda: GoogleDriveClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))),
    )

    body = dict(PROJECT_BODY, pitch_video_url="https://drive.google.com/file/d/abc123/view")
    response = client.post("/api/projects", json=body, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Video is 5:05 long. Maximum allowed is 4:00."


def test_list_projects_sorted_by_votes(client, db, make_user, make_project, user, user_headers):
    quiet = make_project(user, name="Quiet Project")
    popular = make_project(user, name="Popular Project")
    for voter in (make_user(), make_user()):
        db.add(Vote(user_id=voter.id, project_id=popular.id))
    db.add(Vote(user_id=user.id, project_id=quiet.id))
    db.commit()

    projects = client.get("/api/projects", headers=user_headers).json()

    assert [p["name"] for p in projects] == ["Popular Project", "Quiet Project"]
    assert projects[0]["_count"]["votes"] == 2
    assert projects[0]["has_voted"] is False
    assert projects[1]["has_voted"] is True


def test_list_projects_filters_by_sprint(client, app_state, make_project, user):
    make_project(user, name="Old Sprint Project")
    old_sprint_id = app_state.get_current_sprint_id()
    app_state.create_sprint("Next Sprint", set_as_current=True)
    make_project(user, name="New Sprint Project")

    assert [p["name"] for p in client.get("/api/projects").json()] == ["New Sprint Project"]
    old = client.get("/api/projects", params={"sprint_id": old_sprint_id}).json()
    assert [p["name"] for p in old] == ["Old Sprint Project"]


def test_get_project(client, make_project, user):
    project = make_project(user)

    response = client.get(f"/api/projects/{project.id}")
    assert response.status_code == 200
    assert response.json()["reactions"] == []
    assert client.get("/api/projects/missing").status_code == 404


def test_update_project_while_receiving(client, make_project, user, user_headers):
    project = make_project(user)

    response = client.put(
        f"/api/projects/{project.id}",
        json={"name": "Dark Mode Everywhere", "description": "", "department": "Design"},
        headers=user_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Dark Mode Everywhere"
    # Empty values never clear required fields
    assert data["description"] == "Add a dark theme"
    assert data["department"] == "Design"


def test_update_project_during_sprint_only_changes_links(client, make_project, user, user_headers, set_stage):
    project = make_project(user)
    set_stage(AppStage.EXECUTING_SPRINT)

    response = client.put(
        f"/api/projects/{project.id}",
        json={"name": "Renamed", "slack_channel": "#dark-mode-team", "doc_link": "https://docs.example.com/x"},
        headers=user_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Dark Mode Support"
    assert data["slack_channel"] == "#dark-mode-team"
    assert data["doc_link"] == "https://docs.example.com/x"


def test_update_project_after_sprint_is_rejected(client, make_project, user, user_headers, set_stage):
    project = make_project(user)
    set_stage(AppStage.SPRINT_OVER)

    response = client.put(f"/api/projects/{project.id}", json={"doc_link": "x"}, headers=user_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Editing is disabled after sprint ends"


def test_update_project_permissions(client, make_user, make_project, auth_headers, admin_headers, set_stage):
    owner = make_user()
    project = make_project(owner)
    stranger_headers = auth_headers(make_user())

    response = client.put(f"/api/projects/{project.id}", json={"name": "Mine"}, headers=stranger_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Forbidden"

    assert client.put("/api/projects/missing", json={"name": "x"}, headers=stranger_headers).status_code == 404

    response = client.put(f"/api/projects/{project.id}", json={"name": "Admin Edit"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Admin Edit"

    # Ownership is checked before the stage gate
    set_stage(AppStage.SPRINT_OVER)
    response = client.put(f"/api/projects/{project.id}", json={"doc_link": "x"}, headers=stranger_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Forbidden"


def test_delete_project(client, db, make_user, make_project, user, user_headers):
    project = make_project(user)
    voter = make_user()
    team = Team(project_id=project.id, team_name="Night Owls", team_number=1)
    db.add_all([
        Vote(user_id=voter.id, project_id=project.id),
        ProjectJoin(user_id=voter.id, project_id=project.id),
        Reaction(user_id=voter.id, project_id=project.id, reaction_type="HEART"),
        team,
    ])
    db.flush()
    db.add_all([
        TeamMember(team_id=team.id, user_id=user.id),
        Submission(team_id=team.id, video_url="https://drive.google.com/file/d/demo/view"),
        WatchedVideo(user_id=voter.id, team_id=team.id),
    ])
    db.commit()

    response = client.delete(f"/api/projects/{project.id}", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    db.expire_all()
    for model in (Project, Vote, ProjectJoin, Reaction, Team, TeamMember, Submission, WatchedVideo):
        assert db.query(model).count() == 0, model.__name__


def test_delete_project_disabled_during_sprint(client, make_project, user, user_headers, set_stage):
    project = make_project(user)
    set_stage(AppStage.EXECUTING_SPRINT)

    response = client.delete(f"/api/projects/{project.id}", headers=user_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Deleting projects is disabled during sprint"


def test_delete_project_not_owner(db, make_user, make_project):
    project = make_project(make_user())

    with pytest.raises(PermissionDeniedError):
        ProjectService(db).delete_project(project.id, make_user())


def test_duplicate_project_without_teams(client, make_project, user, admin_headers):
    project = make_project(user)

    response = client.post("/api/admin/duplicate-project", json={"project_id": project.id}, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Dark Mode Support (Team 2)"
    assert data["slack_channel"] == "#dark-mode-2"
    assert data["creator_id"] == user.id
    assert client.get(f"/api/projects/{project.id}").json()["name"] == "Dark Mode Support (Team 1)"


def test_duplicate_project_with_team(db, make_project, user):
    project = make_project(user)
    db.add(Team(project_id=project.id, team_name="Night Owls", team_number=1))
    db.commit()

    duplicate = ProjectService(db).duplicate_project(project.id)

    assert duplicate.name == "Dark Mode Support (Team 3)"
    assert duplicate.slack_channel == "#dark-mode-3"
    db.refresh(project)
    assert project.name == "Dark Mode Support"


def test_duplicate_project_errors(client, user_headers, admin_headers):
    assert client.post("/api/admin/duplicate-project", json={}, headers=admin_headers).status_code == 400
    assert client.post(
        "/api/admin/duplicate-project", json={"project_id": "missing"}, headers=admin_headers
    ).status_code == 404
    assert client.post(
        "/api/admin/duplicate-project", json={"project_id": "missing"}, headers=user_headers
    ).status_code == 403


def test_check_video_validation(client, user_headers):
    response = client.post("/api/projects/check-video", json={}, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "No video URL provided"

    response = client.post(
        "/api/projects/check-video", json={"video_url": "https://youtube.com/watch?v=1"}, headers=user_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Could not extract file ID from URL"


def test_check_video_without_credentials_warns(client, user_headers):
    response = client.post(
        "/api/projects/check-video",
        json={"video_url": "https://drive.google.com/file/d/abc123/view"},
        headers=user_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert "no Google access token" in data["warning"]
