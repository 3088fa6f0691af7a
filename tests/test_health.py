"""
Tests for health, metrics and request middleware
"""


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["service"] == "VisionSprint"


def test_detailed_health(client):
    data = client.get("/health/detailed").json()

    assert data["status"] == "healthy"
    assert data["components"]["database"]["status"] == "healthy"
    assert data["components"]["app_state"]["stage"] == "RECEIVING_SUBMISSIONS"
    assert data["components"]["google"]["oauth_configured"] is False


def test_api_root(client):
    data = client.get("/api").json()

    assert data["status"] == "running"
    assert data["version"] == "1.0.0"


def test_metrics_endpoint(client, make_project, user, user_headers):
    project = make_project(user)
    client.post("/api/votes", json={"project_id": project.id}, headers=user_headers)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "visionsprint_votes_total" in response.text
    assert "http_requests_total" in response.text


def test_request_id_header(client):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"

    assert client.get("/health").headers["X-Request-ID"]


def test_request_metrics_use_route_templates(client):
    client.get("/api/projects/not-a-real-id")
    client.get("/wp-admin/setup.php")

    text = client.get("/metrics").text

    assert 'endpoint="/api/projects/{project_id}"' in text
    assert 'endpoint="unmatched"' in text
    assert "not-a-real-id" not in text
    assert "wp-admin" not in text
