import json

import httpx
import pytest

from classroom.core.errors import AIServiceError
from classroom.main import app
from classroom.services import ai_feedback
from classroom.services.ai_feedback import OllamaClient, get_ai_client


@pytest.fixture()
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(ai_feedback.time, "sleep", calls.append)
    return calls


def make_client(handler, **kwargs) -> OllamaClient:
    return OllamaClient(
        base_url="http://ollama.test",
        model="llama2",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_generate_feedback_posts_prompt_and_strips_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "  Good use of examples.  "})

    text = make_client(handler).generate_feedback("Photosynthesis turns light into sugar.")

    assert text == "Good use of examples."
    assert seen["path"] == "/api/generate"
    assert seen["body"]["model"] == "llama2"
    assert seen["body"]["stream"] is False
    assert seen["body"]["prompt"].endswith("Photosynthesis turns light into sugar.")


def test_generate_feedback_retries_with_backoff(sleeps):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(500, json={"error": "model loading"})
        return httpx.Response(200, json={"response": "Fine work."})

    assert make_client(handler, max_retries=3).generate_feedback("answer") == "Fine work."
    assert len(attempts) == 3
    assert sleeps == [1.0, 2.0]


def test_generate_feedback_gives_up_after_max_retries(sleeps):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AIServiceError):
        make_client(handler, max_retries=2).generate_feedback("answer")
    assert len(attempts) == 3
    assert sleeps == [1.0, 2.0]


def test_generate_feedback_needs_answer_text():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(AIServiceError):
        make_client(handler).generate_feedback("   ")


def test_generate_feedback_rejects_empty_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"response": ""})

    with pytest.raises(AIServiceError):
        make_client(handler).generate_feedback("answer")


def test_check_connection_operational():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="Ollama is running")

    result = make_client(handler).check_connection()
    assert result["status"] == "operational"
    assert result["model"] == "llama2"
    assert result["response_ms"] >= 0


def test_check_connection_unexpected_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>nginx</html>")

    assert make_client(handler).check_connection()["status"] == "unavailable"


def test_check_connection_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = make_client(handler).check_connection()
    assert result["status"] == "unavailable"
    assert "connection refused" in result["error"]


def test_grading_without_feedback_uses_ai_draft(client, auth, seed):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"response": "Correct result, show your steps next time."})

    app.dependency_overrides[get_ai_client] = lambda: make_client(handler)

    client.post(
        f"/assignments/{seed.assignment_id}/submit",
        headers=auth(seed.student_a_id),
        json={"response_text": "1/2 + 1/4 = 3/4"},
    )
    r = client.post(
        f"/assignments/{seed.assignment_id}/submissions/{seed.student_a_id}/grade",
        headers=auth(seed.teacher_id),
        json={"grade": 88},
    )
    assert r.status_code == 200, r.text
    record = next(s for s in r.json()["submissions"] if s["student_id"] == seed.student_a_id)
    assert record["feedback_text"] == "Correct result, show your steps next time."
    assert record["status"] == "graded"


def test_grading_when_ai_is_down_leaves_record_unchanged(client, auth, seed):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    app.dependency_overrides[get_ai_client] = lambda: make_client(handler, max_retries=0)

    client.post(
        f"/assignments/{seed.assignment_id}/submit",
        headers=auth(seed.student_a_id),
        json={"response_text": "1/2 + 1/4 = 3/4"},
    )
    r = client.post(
        f"/assignments/{seed.assignment_id}/submissions/{seed.student_a_id}/grade",
        headers=auth(seed.teacher_id),
        json={"grade": 88},
    )
    assert r.status_code == 503
    assert r.json()["kind"] == "ai_unavailable"

    r = client.get(f"/assignments/{seed.assignment_id}", headers=auth(seed.teacher_id))
    record = next(s for s in r.json()["submissions"] if s["student_id"] == seed.student_a_id)
    assert record["status"] == "submitted"


def test_ai_health_endpoint(client, auth, seed):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="Ollama is running")

    app.dependency_overrides[get_ai_client] = lambda: make_client(handler)

    r = client.get("/ai/health", headers=auth(seed.teacher_id))
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "operational"

    r = client.get("/ai/health", headers=auth(seed.student_a_id))
    assert r.status_code == 403


def test_ai_draft_is_requested_before_the_row_lock(client, auth, seed, monkeypatch):
    from classroom.routers import submissions

    calls = []
    load_for_update = submissions._load_assignment_for_update

    def recording_load(db, assignment_id):
        calls.append("lock")
        return load_for_update(db, assignment_id)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append("ai")
        return httpx.Response(200, json={"response": "Well argued."})

    monkeypatch.setattr(submissions, "_load_assignment_for_update", recording_load)
    app.dependency_overrides[get_ai_client] = lambda: make_client(handler)

    client.post(
        f"/assignments/{seed.assignment_id}/submit",
        headers=auth(seed.student_a_id),
        json={"response_text": "1/2 + 1/4 = 3/4"},
    )
    calls.clear()

    r = client.post(
        f"/assignments/{seed.assignment_id}/submissions/{seed.student_a_id}/grade",
        headers=auth(seed.teacher_id),
        json={"grade": 90},
    )
    assert r.status_code == 200, r.text
    assert calls == ["ai", "lock"]


def test_ai_draft_without_answer_text_is_a_validation_error(client, auth, seed):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    app.dependency_overrides[get_ai_client] = lambda: make_client(handler)

    # student B never delivered, so the record has no answer text
    r = client.post(
        f"/assignments/{seed.assignment_id}/submissions/{seed.student_b_id}/grade",
        headers=auth(seed.teacher_id),
        json={"grade": 40},
    )
    assert r.status_code == 422
    assert r.json()["kind"] == "validation_error"

    r = client.get(f"/assignments/{seed.assignment_id}", headers=auth(seed.teacher_id))
    record = next(s for s in r.json()["submissions"] if s["student_id"] == seed.student_b_id)
    assert record["status"] == "pending"
    assert record["grade"] is None
