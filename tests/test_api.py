import json
import threading

import pytest
from fastapi.testclient import TestClient

import api.session as session
import config
from api.app import create_app
from ielts_exam.services.result_store import InMemoryResultStore, JsonResultStore


@pytest.fixture
def store():
    return InMemoryResultStore()


@pytest.fixture
def client(store):
    app = create_app(result_store=store, background=False)
    with TestClient(app) as c:
        yield c


def started(client):
    client.post("/api/start-sample-exam")
    return client.post("/api/start").json()


def test_actions_without_exam_are_404(client):
    assert client.post("/api/start").status_code == 404
    assert client.get("/api/exam-state").status_code == 404


def test_list_exams(client):
    assert "listening-sample" in client.get("/api/exams").json()["exam_ids"]


def test_load_exam_from_disk(client):
    resp = client.post("/api/exams/listening-sample/load")
    assert resp.status_code == 200
    exam = resp.json()["exam"]
    assert exam["kind"] == "listening"
    assert exam["total_questions"] == 5

    state = client.get("/api/exam-state").json()
    assert state["state"] == "not_started"


def test_load_failure_creates_no_session(client, tmp_path, monkeypatch):
    (tmp_path / "bad.json").write_text(json.dumps({"_id": "bad", "type": "reading"}))
    monkeypatch.setattr(config, "EXAMS_DIR", str(tmp_path))

    assert client.post("/api/exams/missing/load").status_code == 404
    assert client.post("/api/exams/bad/load").status_code == 422
    assert client.get("/api/exam-state").status_code == 404


def test_start_sets_timer(client):
    state = started(client)
    assert state["ok"] is True
    assert state["state"] == "in_progress"
    assert state["time_remaining_seconds"] == 20 * 60
    assert state["time_display"] == "20:00"

    again = client.post("/api/start").json()
    assert again["ok"] is False


def test_question_hides_answer_key_until_submitted(client):
    started(client)
    q = client.get("/api/question").json()
    assert q["id"] == "1"
    assert q["section_title"] == "The History of Tea"
    assert "correct_answer" not in q

    client.post("/api/submit")
    q = client.get("/api/question").json()
    assert q["correct_answer"] == "B"


def test_answer_navigate_flag(client):
    started(client)
    assert client.post("/api/answer", json={"question_id": "1", "answer": 1}).json()["ok"]
    assert client.post("/api/flag", json={"question_id": "1"}).json()["flags"] == ["1"]

    state = client.post("/api/navigate", json={"direction": "next"}).json()
    assert (state["section_index"], state["question_index"]) == (0, 1)

    state = client.post("/api/navigate", json={"section_index": 1, "question_index": 0}).json()
    assert state["position"] == 4

    state = client.post("/api/navigate", json={"direction": "prev"}).json()
    assert (state["section_index"], state["question_index"]) == (0, 3)

    q = client.get("/api/question").json()
    assert q["id"] == "4"
    assert q["saved_answer"] is None

    assert client.post("/api/navigate", json={}).status_code == 422


def test_submit_and_results(client, store):
    started(client)
    for qid, value in [("1", "B"), ("2", 0), ("4", "500"), ("5", "A")]:
        client.post("/api/answer", json={"question_id": qid, "answer": value})

    assert client.get("/api/results").status_code == 400

    first = client.post("/api/submit").json()
    second = client.post("/api/submit").json()
    assert first["ok"] is True and second["ok"] is False
    assert len(store.records) == 1

    results = client.get("/api/results").json()
    assert results["total_questions"] == 7
    assert results["correct_answers"] == 3
    assert results["answered_count"] == 4
    assert results["unanswered_count"] == 3
    assert results["band_score"] == 1.5
    assert [s["section_title"] for s in results["section_scores"]] == [
        "Passage 1: The History of Tea", "Passage 2: Urban Beekeeping",
    ]
    assert results["incorrect_question_ids"] == ["3", "5", "6", "7"]


def test_answers_after_submit_are_ignored(client):
    started(client)
    client.post("/api/submit")
    resp = client.post("/api/answer", json={"question_id": "1", "answer": "B"})
    assert resp.status_code == 200
    assert resp.json()["ok"] is False
    assert resp.json()["answers"] == {}


def test_detailed_results_are_grouped(client):
    started(client)
    client.post("/api/answer", json={"question_id": "5", "answer": "C"})
    client.post("/api/submit")
    assert client.post("/api/review", json={"reviewing": True}).json()["reviewing"] is True

    detailed = client.get("/api/results/detailed").json()["sections"]
    assert [s["section_title"] for s in detailed] == [
        "Passage 1: The History of Tea", "Passage 2: Urban Beekeeping",
    ]
    q5 = detailed[1]["questions"][0]
    assert (q5["id"], q5["user_answer"], q5["is_correct"]) == ("5", "C", True)


def test_ticker_expires_exam(client):
    started(client)
    for _ in range(20 * 60):
        session.tick_all()

    state = client.get("/api/exam-state").json()
    assert state["state"] == "submitted"
    assert state["auto_submitted"] is True
    assert state["time_remaining_seconds"] == 0
    assert session.tick_all() == 0


def test_reset_discards_attempt(client):
    started(client)
    client.post("/api/reset")
    assert client.get("/api/exam-state").status_code == 404


def test_sessions_are_isolated(store):
    app = create_app(result_store=store, background=False)
    with TestClient(app) as a, TestClient(app) as b:
        started(a)
        assert b.get("/api/exam-state").status_code == 404


def test_json_result_store(tmp_path, client):
    client.app.state.result_store = JsonResultStore(str(tmp_path))
    started(client)
    client.post("/api/submit")
    files = list(tmp_path.glob("sample-reading-*.json"))
    assert len(files) == 1
    saved = json.loads(files[0].read_text(encoding="utf-8"))
    assert saved["exam_kind"] == "reading"
    assert saved["score_result"]["total_questions"] == 7


def test_submission_is_saved_outside_the_lock(client):
    lock_was_free = []

    def try_lock():
        acquired = session.lock.acquire(timeout=1)
        if acquired:
            session.lock.release()
        lock_was_free.append(acquired)

    class CheckingStore(InMemoryResultStore):
        def save(self, record):
            t = threading.Thread(target=try_lock)
            t.start()
            t.join()
            super().save(record)

    store = CheckingStore()
    client.app.state.result_store = store
    started(client)
    client.post("/api/submit")

    assert lock_was_free == [True]
    assert len(store.records) == 1
