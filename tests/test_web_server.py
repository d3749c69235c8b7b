from __future__ import annotations

from fastapi.testclient import TestClient

from portal_assistant.web.server import app

client = TestClient(app)

CONTEXT = {
    "userName": "Asha",
    "courses": [{"id": "c1", "title": "Compilers", "status": "ongoing", "progress": 30}],
}


def test_health() -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_stateless_chat() -> None:
    response = client.post("/api/chat", json={"message": "What courses am I taking?", "context": CONTEXT})

    assert response.status_code == 200
    reply = response.json()["reply"]
    assert reply["intent"] == "courses"
    assert reply["sub_intent"] == "summary"
    assert "Currently studying: 1 course" in reply["text"]


def test_chat_rejects_empty_message() -> None:
    response = client.post("/api/chat", json={"message": ""})

    assert response.status_code == 422


def test_session_transcript_flow() -> None:
    created = client.post("/api/sessions", json={"context": CONTEXT}).json()
    session_id = created["session_id"]
    assert created["welcome"].startswith("Hello Asha!")

    first = client.post(f"/api/sessions/{session_id}/messages", json={"message": "show my current courses"}).json()
    assert "1. Compilers (30%)" in first["reply"]["content"]
    assert first["count"] == 2

    blank = client.post(f"/api/sessions/{session_id}/messages", json={"message": "   "}).json()
    assert blank["reply"] is None
    assert blank["count"] == 2

    listed = client.get(f"/api/sessions/{session_id}/messages").json()
    assert listed["count"] == 2
    assert [m["role"] for m in listed["messages"]] == ["user", "assistant"]
    assert listed["messages"][0]["content"] == "show my current courses"


def test_session_context_can_be_replaced() -> None:
    session_id = client.post("/api/sessions", json={}).json()["session_id"]

    response = client.post(
        f"/api/sessions/{session_id}/messages",
        json={"message": "show my current courses", "context": CONTEXT},
    )

    assert "Compilers" in response.json()["reply"]["content"]


def test_unknown_session_is_404() -> None:
    assert client.get("/api/sessions/does-not-exist/messages").status_code == 404
    assert client.post("/api/sessions/does-not-exist/messages", json={"message": "hi"}).status_code == 404
