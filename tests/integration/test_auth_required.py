import pytest


PROTECTED = [
    ("post", "/api/tasks"),
    ("patch", "/api/tasks/task-1/status"),
    ("patch", "/api/tasks/task-1"),
    ("delete", "/api/tasks/task-1"),
    ("post", "/api/tasks/task-1/comments"),
    ("post", "/api/sprint-tasks"),
    ("post", "/api/sprints"),
    ("get", "/api/sprints/sprint-1/retrospectives"),
    ("get", "/api/dashboard/overview"),
    ("get", "/api/dashboard/teams"),
    ("get", "/api/teams/team-core/members"),
    ("get", "/api/teams/team-core/backlog"),
    ("get", "/api/teams/team-core/kanban"),
    ("get", "/api/teams/team-core/epics-labels"),
    ("post", "/api/ai/performance-metrics"),
    ("post", "/api/ai/predictive-analytics"),
    ("post", "/api/ai/retrospective"),
    ("post", "/api/ai/risk-heatmap"),
    ("post", "/api/ai/scope-check"),
    ("post", "/api/ai/sprints/sprint-1/scope-check"),
    ("post", "/api/ai/sprint-plan"),
]


@pytest.mark.parametrize("method,path", PROTECTED)
def test_missing_identity_is_unauthorized(client, method, path):
    kwargs = {"json": {}} if method in ("post", "patch") else {}

    response = getattr(client, method)(path, **kwargs)

    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"


def test_unknown_user_is_unauthorized(client):
    response = client.get("/api/dashboard/overview", headers={"X-User-ID": "mallory"})

    assert response.status_code == 401


def test_health_is_public(client):
    assert client.get("/health/live").json() == {"status": "alive"}


def test_readiness_without_store(client):
    response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["status"] == "not_ready"
