"""Integration tests for the /api/conversation endpoints."""

from fastapi.testclient import TestClient

INIT_BODY = {
    "agent1Personality": "Logical analyst who values data",
    "agent2Personality": "Creative thinker who uses metaphors",
    "topic": "The future of artificial intelligence",
}


def _init(client: TestClient, **overrides):
    body = dict(INIT_BODY)
    body.update(overrides)
    return client.post("/api/conversation/init", json=body)


def _complete(client: TestClient, **overrides) -> str:
    data = _init(client, **overrides).json()
    while data["isOngoing"]:
        data = client.post("/api/conversation/follow", json={"conversationId": data["conversationId"]}).json()
    return data["conversationId"]


class TestInit:
    def test_returns_first_message(self, client: TestClient) -> None:
        response = _init(client)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "reply 1"
        assert data["agentType"] == "A1"
        assert data["iterationNumber"] == 1
        assert data["phase"] == "introduction"
        assert data["isOngoing"] is True
        assert data["totalMessages"] == 1
        assert data["expectedTotalMessages"] == 10
        assert data["conversationId"]

    def test_normalizes_politeness_and_length(self, client: TestClient, fake_engine) -> None:
        response = _init(client, politenessLevel="aggressive", conversationLength=25)

        assert response.status_code == 200
        assert response.json()["expectedTotalMessages"] == 24
        assert "balanced tone" in fake_engine.calls[0]["system"]

    def test_invalid_length_defaults_to_three(self, client: TestClient) -> None:
        response = _init(client, conversationLength="lots")

        assert response.json()["expectedTotalMessages"] == 10

    def test_blank_field_is_400(self, client: TestClient) -> None:
        response = _init(client, topic="   ")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_missing_field_is_400(self, client: TestClient) -> None:
        response = client.post("/api/conversation/init", json={"topic": "x"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_error"
        assert {e["field"] for e in data["errors"]} >= {"agent1Personality", "agent2Personality"}

    def test_provider_failure_is_500(self, client: TestClient, fake_engine) -> None:
        fake_engine.fail_with = "OpenAI unavailable"

        response = _init(client)

        assert response.status_code == 500
        assert response.json() == {"error": "generation_error", "message": "OpenAI unavailable"}


class TestFollow:
    def test_full_conversation_then_conflict(self, client: TestClient) -> None:
        conversation_id = _init(client, conversationLength=3).json()["conversationId"]

        responses = [
            client.post("/api/conversation/follow", json={"conversationId": conversation_id}).json()
            for _ in range(9)
        ]

        assert [r["isOngoing"] for r in responses] == [True] * 8 + [False]
        assert [r["agentType"] for r in responses] == ["A2", "A1"] * 4 + ["A2"]
        assert [r["phase"] for r in responses] == (
            ["introduction"] + ["conversation"] * 6 + ["conclusion"] * 2
        )
        assert [r["totalMessages"] for r in responses] == list(range(2, 11))

        tenth = client.post("/api/conversation/follow", json={"conversationId": conversation_id})
        assert tenth.status_code == 400
        assert tenth.json()["error"] == "conflict"

    def test_unknown_id_is_404(self, client: TestClient) -> None:
        response = client.post("/api/conversation/follow", json={"conversationId": "nope"})

        assert response.status_code == 404

    def test_missing_id_is_400(self, client: TestClient) -> None:
        response = client.post("/api/conversation/follow", json={})

        assert response.status_code == 400


class TestGetAndExport:
    def test_in_progress_is_404(self, client: TestClient) -> None:
        conversation_id = _init(client).json()["conversationId"]

        assert client.get(f"/api/conversation/{conversation_id}").status_code == 404
        assert client.get(f"/api/conversation/{conversation_id}/export?format=json").status_code == 404

    def test_completed_transcript(self, client: TestClient) -> None:
        conversation_id = _complete(client, conversationLength=1)

        response = client.get(f"/api/conversation/{conversation_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Completed"
        assert data["messageCount"] == 6
        assert data["markdown"].split("\n")[0] == "**A1:** reply 1"
        assert data["topic"] == INIT_BODY["topic"]
        assert data["endTime"] is not None

    def test_export_formats(self, client: TestClient) -> None:
        conversation_id = _complete(client, conversationLength=1)

        for fmt, media_type in (
            ("json", "application/json"),
            ("md", "text/markdown"),
            ("txt", "text/plain"),
            ("xml", "application/xml"),
        ):
            response = client.get(f"/api/conversation/{conversation_id}/export", params={"format": fmt})
            assert response.status_code == 200
            assert response.headers["content-type"].startswith(media_type)
            assert f"conversation_{conversation_id}.{fmt}" in response.headers["content-disposition"]

    def test_export_json_messages(self, client: TestClient) -> None:
        conversation_id = _complete(client, conversationLength=1)

        data = client.get(f"/api/conversation/{conversation_id}/export?format=json").json()

        assert [m["content"] for m in data["messages"]] == [f"reply {i}" for i in range(1, 7)]
        assert [m["agentType"] for m in data["messages"]] == ["A1", "A2"] * 3

    def test_unsupported_format_is_400(self, client: TestClient) -> None:
        conversation_id = _complete(client, conversationLength=1)

        response = client.get(f"/api/conversation/{conversation_id}/export?format=pdf")

        assert response.status_code == 400


def test_healthz(client: TestClient) -> None:
    assert client.get("/healthz").json() == {"ok": True}
