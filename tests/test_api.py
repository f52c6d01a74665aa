"""FastAPI endpoint tests using httpx.AsyncClient."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from errors import PersistenceError
from main import app
from services.record_store import EVALUATIONS, InMemoryRecordStore
from services.throttle import NoThrottle

from tests.conftest import StubEvaluator


@pytest.fixture
def api_store():
    return InMemoryRecordStore()


@pytest.fixture
def api_evaluator():
    return StubEvaluator()


@pytest.fixture
async def client(api_store, api_evaluator):
    app.state.record_store = api_store
    app.state.evaluator = api_evaluator
    app.state.throttle_factory = NoThrottle
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _publish(client, questions=None):
    resp = await client.post("/api/exams", json={
        "title": "Physics",
        "questions": questions or [
            {"text": "Q1", "referenceAnswer": "A1", "keywords": ["x", "y"]},
            {"text": "Q2", "answer": "A2", "keywords": []},
        ],
    })
    assert resp.status_code == 201
    return resp.json()


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "store": "ok"}


async def test_request_id_header(client):
    resp = await client.get("/api/health", headers={"X-Request-ID": "abc123"})
    assert resp.headers["x-request-id"] == "abc123"


# ── Exams & questions ────────────────────────────────────────


async def test_publish_exam(client):
    data = await _publish(client)
    assert data["message"] == "Exam and questions published successfully!"
    assert data["examId"]
    assert len(data["questionIds"]) == 2


async def test_publish_exam_missing_title(client):
    resp = await client.post("/api/exams", json={"questions": []})
    assert resp.status_code == 422


async def test_publish_exam_store_failure(client, api_store):
    with patch.object(
        api_store, "insert_one", new_callable=AsyncMock,
        side_effect=PersistenceError("insert_one", "down"),
    ):
        resp = await client.post("/api/exams", json={"title": "T", "questions": []})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to publish exam and questions"


async def test_question_round_trip(client):
    data = await _publish(client)
    resp = await client.get(f"/api/questions/{data['questionIds'][0]}")
    assert resp.status_code == 200
    q = resp.json()
    assert q["text"] == "Q1"
    assert q["referenceAnswer"] == "A1"
    assert q["keywords"] == ["x", "y"]
    assert q["examId"] == data["examId"]


async def test_question_not_found(client):
    resp = await client.get("/api/questions/64b7f0c2a1b2c3d4e5f60718")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Question not found"


async def test_list_and_filter_questions(client):
    first = await _publish(client)
    await _publish(client, [{"text": "Other", "referenceAnswer": "O"}])

    all_resp = await client.get("/api/questions")
    assert len(all_resp.json()) == 3

    filtered = await client.get("/api/getQuestions", params={"examId": first["examId"]})
    assert filtered.status_code == 200
    assert [q["id"] for q in filtered.json()] == first["questionIds"]

    unfiltered = await client.get("/api/getQuestions")
    assert len(unfiltered.json()) == 3


async def test_exams_list_and_get(client):
    data = await _publish(client)
    resp = await client.get("/api/exams")
    assert resp.json() == [{"id": data["examId"], "title": "Physics"}]

    one = await client.get(f"/api/exams/{data['examId']}")
    assert one.json()["title"] == "Physics"

    missing = await client.get("/api/exams/nope")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Exam not found"


# ── Submission pipeline ──────────────────────────────────────


async def test_submit_then_student_result(client, api_store):
    data = await _publish(client)
    q1, q2 = data["questionIds"]

    resp = await client.post("/api/submit-answers", json={"answers": [
        {"questionId": q1, "answer": "my first answer"},
        {"questionId": q2, "answerText": "my second answer"},
    ]})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Answers submitted and evaluated successfully!"
    assert body["count"] == 2
    user_id = body["userId"]

    result = await client.get(f"/api/studentResult/{data['examId']}/{user_id}")
    assert result.status_code == 200
    records = result.json()
    assert len(records) == 2
    assert {r["userId"] for r in records} == {user_id}
    assert {r["questionId"] for r in records} == {q1, q2}
    assert records[0]["answerText"] == "my first answer"
    assert records[0]["evaluation"]["finalScore"] == 82
    assert "submittedAt" in records[0]


async def test_submit_evaluator_failure_persists_nothing(client, api_store, api_evaluator):
    data = await _publish(client)
    api_evaluator.fail_on = {2}
    resp = await client.post("/api/submit-answers", json={"answers": [
        {"questionId": qid, "answer": "x"} for qid in data["questionIds"]
    ]})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to submit and evaluate answers"
    assert api_store.count(EVALUATIONS) == 0


async def test_submit_unknown_question(client, api_store):
    resp = await client.post("/api/submit-answers", json={"answers": [
        {"questionId": "64b7f0c2a1b2c3d4e5f60718", "answer": "x"},
    ]})
    assert resp.status_code == 404
    assert api_store.count(EVALUATIONS) == 0


async def test_submit_empty_batch_rejected(client):
    resp = await client.post("/api/submit-answers", json={"answers": []})
    assert resp.status_code == 422


async def test_submissions_by_question(client):
    data = await _publish(client)
    q1 = data["questionIds"][0]
    await client.post("/api/submit-answers", json={"answers": [{"questionId": q1, "answer": "x"}]})

    resp = await client.get(f"/api/submissions/{q1}")
    assert resp.status_code == 200
    assert len(resp.json()) == 1

    empty = await client.get(f"/api/submissions/{data['questionIds'][1]}")
    assert empty.status_code == 404


async def test_student_result_not_found(client):
    data = await _publish(client)
    resp = await client.get(f"/api/studentResult/{data['examId']}/nobody")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No student result found for this exam and userID"


# ── Score updates ────────────────────────────────────────────


async def test_update_scores_by_question(client):
    data = await _publish(client)
    q1 = data["questionIds"][0]
    await client.post("/api/submit-answers", json={"answers": [{"questionId": q1, "answer": "x"}]})

    payload = {"keywordScore": "80", "relevanceScore": "90", "grammarScore": "70"}
    for _ in range(2):  # idempotent
        resp = await client.post(f"/api/updateScores/{q1}", json=payload)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Scores updated successfully"}

    record = (await client.get(f"/api/submissions/{q1}")).json()[0]
    assert record["evaluation"]["finalScore"] == 82
    assert record["evaluation"]["keyword"]["score"] == 80


async def test_update_scores_unknown_question(client):
    resp = await client.post(
        "/api/updateScores/missing",
        json={"keywordScore": 1, "relevanceScore": 2, "grammarScore": 3},
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Submission not found"


async def test_update_scores_non_numeric(client):
    resp = await client.post(
        "/api/updateScores/anything",
        json={"keywordScore": "abc", "relevanceScore": 2, "grammarScore": 3},
    )
    assert resp.status_code == 422


async def test_update_scores_by_evaluation_id(client):
    data = await _publish(client)
    q1 = data["questionIds"][0]
    for _ in range(2):
        await client.post("/api/submit-answers", json={"answers": [{"questionId": q1, "answer": "x"}]})
    records = (await client.get(f"/api/submissions/{q1}")).json()

    resp = await client.post(
        f"/api/evaluations/{records[1]['id']}/scores",
        json={"keywordScore": 100, "relevanceScore": 100, "grammarScore": 100},
    )
    assert resp.status_code == 200

    after = (await client.get(f"/api/submissions/{q1}")).json()
    assert after[0]["evaluation"]["finalScore"] == 82
    assert after[1]["evaluation"]["finalScore"] == 100
