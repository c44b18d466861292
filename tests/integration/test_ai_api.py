from sqlalchemy import select

from sprintpulse.storage.models import RetrospectiveModel

SPRINT_PLAN = {
    "sprintName": "Sprint 2 - Auth hardening",
    "recommendedTasks": ["task-3", "task-4"],
    "totalStoryPoints": 10,
    "estimatedCompletion": "85%",
    "workloadDistribution": [{"memberId": "alice", "tasks": ["task-4"], "storyPoints": 3}],
    "reasoning": "High priority work first",
}

SCOPE = {
    "scopeCreepDetected": True,
    "scopeIncreasePercentage": 53.8,
    "addedTasks": [{"taskId": "task-3", "taskTitle": "Audit trail", "storyPoints": 7, "addedDate": "2024-01-04"}],
    "removedTasks": [],
    "originalStoryPoints": 13,
    "currentStoryPoints": 20,
    "netStoryPointsChange": 7,
    "riskLevel": "high",
    "recommendations": ["Move the audit trail to the next sprint"],
    "warning": "Scope grew by more than 15%",
}


class TestAnalytics:

    def test_performance_metrics(self, client, auth_headers):
        response = client.post(
            "/api/ai/performance-metrics",
            json={"teamIds": ["team-core"], "timeRange": 30},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["sprintVelocity"][0]["completionRate"] == 25
        assert body["qualityMetrics"]["isSimulated"] is True

    def test_performance_metrics_without_sprints(self, client, auth_headers):
        response = client.post("/api/ai/performance-metrics", json={"teamIds": ["team-web"]}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "No sprints found"

    def test_performance_metrics_accepts_zero_time_range(self, client, auth_headers):
        response = client.post(
            "/api/ai/performance-metrics",
            json={"teamIds": ["team-core"], "timeRange": 0},
            headers=auth_headers,
        )

        # An empty window holds no sprints; the default window is not substituted
        assert response.status_code == 404
        assert response.json()["detail"] == "No sprints found"

    def test_predictive_analytics_without_sprint_id(self, client, auth_headers):
        response = client.post("/api/ai/predictive-analytics", json={"teamIds": ["team-core"]}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Sprint not found"

    def test_predictive_analytics(self, client, auth_headers):
        response = client.post(
            "/api/ai/predictive-analytics",
            json={"sprintId": "sprint-1", "teamIds": ["team-core"]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["additionalMetrics"]["totalStoryPoints"] == 20
        assert 10 <= body["sprintCompletion"]["probability"] <= 100
        assert body["burndownPrediction"][0]["actual"] == 15

    def test_predictive_analytics_unknown_sprint(self, client, auth_headers):
        response = client.post(
            "/api/ai/predictive-analytics",
            json={"sprintId": "missing", "teamIds": ["team-core"]},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Sprint not found"


class TestRetrospectiveEndpoint:

    def test_generate_then_conflict(self, client, auth_headers, fake_llm, session_factory):
        first = client.post("/api/ai/retrospective", json={"sprintId": "sprint-1"}, headers=auth_headers)

        assert first.status_code == 200
        body = first.json()
        assert body["sprintId"] == "sprint-1"
        assert body["content"] == fake_llm.text

        second = client.post("/api/ai/retrospective", json={"sprintId": "sprint-1"}, headers=auth_headers)

        assert second.status_code == 409
        assert len(fake_llm.prompts) == 1
        with session_factory() as session:
            rows = session.scalars(select(RetrospectiveModel)).all()
        assert [r.id for r in rows] == [body["id"]]

        listed = client.get("/api/sprints/sprint-1/retrospectives", headers=auth_headers).json()
        assert listed[0]["createdBy"] == "alice"

    def test_missing_sprint_id(self, client, auth_headers):
        response = client.post("/api/ai/retrospective", json={}, headers=auth_headers)

        assert response.status_code == 400

    def test_unknown_sprint(self, client, auth_headers):
        response = client.post("/api/ai/retrospective", json={"sprintId": "missing"}, headers=auth_headers)

        assert response.status_code == 404


class TestGenerativeEndpoints:

    def test_sprint_plan(self, client, auth_headers, fake_llm):
        fake_llm.json_payloads["SprintPlanSuggestion"] = SPRINT_PLAN

        response = client.post(
            "/api/ai/sprint-plan",
            json={"tasks": [{"id": "task-3"}, {"id": "task-4"}], "teamCapacity": 80, "sprintDuration": 14},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["recommendedTasks"] == ["task-3", "task-4"]
        assert "Team Capacity: 80.0 hours total" in fake_llm.prompts[0]

    def test_scope_check_for_stored_sprint(self, client, auth_headers, fake_llm):
        fake_llm.json_payloads["ScopeAnalysis"] = SCOPE

        response = client.post("/api/ai/sprints/sprint-1/scope-check", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["sprintId"] == "sprint-1"
        assert response.json()["riskLevel"] == "high"

    def test_scope_check(self, client, auth_headers, fake_llm):
        fake_llm.json_payloads["ScopeAnalysis"] = SCOPE

        response = client.post(
            "/api/ai/scope-check",
            json={"originalTasks": [], "currentTasks": [], "sprintStartDate": "2024-01-01", "sprintName": "Sprint 1"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["scopeCreepDetected"] is True

    def test_unusable_answer_is_a_generic_failure(self, client, auth_headers):
        response = client.post(
            "/api/ai/risk-heatmap",
            json={"tasks": [], "teamMembers": [], "currentDate": "2024-01-06"},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate risk analysis"
