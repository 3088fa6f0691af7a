"""
Tests for visions and vision likes
"""
import pytest

from visionsprint.core.exceptions import ConflictError
from visionsprint.models.project import Project
from visionsprint.models.vision import Vision, VisionLike
from visionsprint.services.vision_service import VisionService

VISION_BODY = {
    "title": "Self-serve analytics",
    "description": "Every team answers its own data questions",
    "area": "Data",
}


def _create_vision(client, headers, **overrides):
    response = client.post("/api/visions", json=dict(VISION_BODY, **overrides), headers=headers)
    assert response.status_code == 201
    return response.json()


def test_create_vision_admin_only(client, admin, admin_headers, user_headers):
    assert client.post("/api/visions", json=VISION_BODY, headers=user_headers).status_code == 403

    vision = _create_vision(client, admin_headers, kpis="Weekly active analysts")
    assert vision["created_by"]["id"] == admin.id
    assert vision["kpis"] == "Weekly active analysts"
    assert vision["_count"] == {"likes": 0, "projects": 0}


def test_create_vision_missing_fields(client, admin_headers):
    response = client.post("/api/visions", json={"title": "Only a title"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields (title, description, area)"


def test_like_and_unlike_vision(client, admin_headers, user_headers):
    vision = _create_vision(client, admin_headers)
    url = f"/api/visions/{vision['id']}/likes"

    assert client.post(url, headers=user_headers).status_code == 201
    response = client.post(url, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Already liked this vision"

    data = client.get(f"/api/visions/{vision['id']}", headers=user_headers).json()
    assert data["has_liked"] is True
    assert data["_count"]["likes"] == 1

    assert client.delete(url, headers=user_headers).status_code == 200
    response = client.delete(url, headers=user_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Like not found"


def test_like_unknown_vision(client, user_headers):
    assert client.post("/api/visions/missing/likes", headers=user_headers).status_code == 404


def test_list_visions_sorted_by_likes(client, admin_headers, user_headers):
    _create_vision(client, admin_headers, title="Plain")
    liked = _create_vision(client, admin_headers, title="Liked")
    client.post(f"/api/visions/{liked['id']}/likes", headers=user_headers)

    titles = [vision["title"] for vision in client.get("/api/visions").json()]

    assert titles == ["Liked", "Plain"]


def test_get_vision_includes_projects(client, admin_headers, make_project, user):
    vision = _create_vision(client, admin_headers)
    make_project(user, vision_id=vision["id"])

    data = client.get(f"/api/visions/{vision['id']}").json()

    assert data["_count"]["projects"] == 1
    assert data["projects"][0]["name"] == "Dark Mode Support"
    assert data["projects"][0]["creator"]["id"] == user.id
    assert data["projects"][0]["_count"] == {"votes": 0}


def test_update_vision(client, admin_headers):
    vision = _create_vision(client, admin_headers, doc_url="https://docs.example.com/v")

    response = client.put(
        f"/api/visions/{vision['id']}",
        json={"title": "Renamed", "area": "", "doc_url": ""},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Renamed"
    assert data["area"] == "Data"
    assert data["doc_url"] is None


def test_delete_vision_keeps_projects(client, db, admin_headers, make_project, user):
    vision = _create_vision(client, admin_headers)
    project = make_project(user, vision_id=vision["id"])

    assert client.delete(f"/api/visions/{vision['id']}", headers=admin_headers).status_code == 200

    assert db.query(Vision).count() == 0
    remaining = db.query(Project).filter(Project.id == project.id).one()
    assert remaining.vision_id is None
    assert client.delete(f"/api/visions/{vision['id']}", headers=admin_headers).status_code == 404


def test_concurrent_duplicate_like_is_a_conflict(db, admin, user, stale_lookup):
    service = VisionService(db)
    vision = service.create_vision(admin, dict(VISION_BODY))
    service.like_vision(user, vision.id)
    stale_lookup(service, "_get_like")

    with pytest.raises(ConflictError, match="Already liked this vision"):
        service.like_vision(user, vision.id)
    assert db.query(VisionLike).count() == 1
