import pytest
from fastapi.testclient import TestClient

import api_server
from config import Settings
from interview.errors import ConfigurationError
from interview.orchestrator import InterviewOrchestrator


@pytest.fixture
def client(orchestrator):
    return TestClient(api_server.create_app(orchestrator=orchestrator))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_start_session(client):
    response = client.post("/api/v1/interview/sessions", json={"level": "medium", "user_id": "u1"})
    assert response.status_code == 201
    body = response.json()
    assert body["level"] == "medium"
    assert body["total_questions"] == 9
    assert body["question"]["id"] == "q0_college"


def test_unknown_session_is_404(client):
    assert client.get("/api/v1/interview/sessions/nope").status_code == 404
    response = client.post("/api/v1/interview/sessions/nope/answer", json={"answer": "hi"})
    assert response.status_code == 404
    assert client.get("/api/v1/interview/sessions/nope/summary").status_code == 404


def test_blank_answer_is_400(client):
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    response = client.post(f"/api/v1/interview/sessions/{session_id}/answer", json={"answer": "  "})
    assert response.status_code == 400


def test_malformed_body_is_422(client):
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    response = client.post(f"/api/v1/interview/sessions/{session_id}/answer", json={"text": "no answer field"})
    assert response.status_code == 422


def test_summary_of_active_session_is_409(client):
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    assert client.get(f"/api/v1/interview/sessions/{session_id}/summary").status_code == 409


def test_answer_and_duplicate_flag(client):
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    url = f"/api/v1/interview/sessions/{session_id}/answer"
    first = client.post(url, json={"question_id": "q0_college", "answer": "Stanford."}).json()
    assert first["next_question"]["id"] == "q0_major"
    assert first["grade"] == "B"
    assert first["analysis"]["scores"]["total_score"] == 13
    assert not first["duplicate"]

    repeat = client.post(url, json={"question_id": "q0_college", "answer": "Stanford."}).json()
    assert repeat["duplicate"]
    assert repeat["next_question"]["id"] == "q0_major"
    snapshot = client.get(f"/api/v1/interview/sessions/{session_id}").json()
    assert len(snapshot["answers"]) == 1


def test_abort(client):
    session_id = client.post("/api/v1/interview/sessions", json={}).json()["session_id"]
    body = client.post(f"/api/v1/interview/sessions/{session_id}/abort").json()
    assert body["status"] == "aborted"
    assert body["question"] is None


def test_chat_new_session(client):
    body = client.post("/api/v1/chat", json={"messages": [], "session_id": "stale", "level": "easy"}).json()
    assert body["is_new_session"]
    assert body["question_id"] == "q0_college"


def test_create_app_without_credential_fails():
    cfg = Settings(_env_file=None, OPENAI_API_KEY="", GPT_API_KEY="")
    with pytest.raises(ConfigurationError):
        api_server.create_app(settings=cfg)


def test_create_app_wires_grader_from_settings():
    cfg = Settings(_env_file=None, OPENAI_API_KEY="sk-test")
    app = api_server.create_app(settings=cfg)
    orchestrator = app.state.orchestrator
    assert isinstance(orchestrator, InterviewOrchestrator)
    assert len(orchestrator.store) == 0


def test_answer_suggestions_skip_blank_tips(store, grader_factory, analysis_factory):
    grader = grader_factory([analysis_factory(improvements=["", "  Name the lab you will join. "])])
    client = TestClient(api_server.create_app(orchestrator=InterviewOrchestrator(store, grader)))
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    body = client.post(f"/api/v1/interview/sessions/{session_id}/answer", json={"answer": "MIT."}).json()
    assert body["suggestions"] == ["Name the lab you will join."]


def test_report_of_active_session_is_409(client):
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    assert client.get(f"/api/v1/interview/sessions/{session_id}/report.pdf").status_code == 409
    assert client.get("/api/v1/interview/sessions/nope/report.pdf").status_code == 404


def test_summary_of_ungraded_finished_session_is_404(store, failing_grader):
    client = TestClient(api_server.create_app(orchestrator=InterviewOrchestrator(store, failing_grader)))
    session_id = client.post("/api/v1/interview/sessions", json={"level": "easy"}).json()["session_id"]
    client.post(f"/api/v1/interview/sessions/{session_id}/answer", json={"answer": "MIT."})
    client.post(f"/api/v1/interview/sessions/{session_id}/finish")
    assert client.get(f"/api/v1/interview/sessions/{session_id}/summary").status_code == 404
