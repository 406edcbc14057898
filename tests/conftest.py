import pytest

import api.session as session
from ielts_exam.models.exam_model import Exam
from ielts_exam.models.session_state import ExamSession


class FakeClock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_exam(kind="reading", duration=60, sections=None, exam_id="exam-1") -> Exam:
    """
    Build an exam from ``sections``: a list of question lists, each question a
    dict with at least ``id`` and ``type``.
    """
    sections = sections or [[{"id": "q1", "type": "multiple-choice", "correctAnswer": "A"}]]
    return Exam.model_validate({
        "_id": exam_id,
        "title": "Test exam",
        "type": kind,
        "duration": duration,
        "sections": [
            {"id": f"s{i + 1}", "title": f"Part {i + 1}", "questions": questions}
            for i, questions in enumerate(sections)
        ],
    })


def ungraded(qid, qtype="fill-blank"):
    return {"id": qid, "type": qtype}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def reading_exam():
    # answer key in mixed encodings
    return make_exam(sections=[[
        {"id": "q1", "type": "multiple-choice", "correctAnswer": "B"},
        {"id": "q2", "type": "true-false-notgiven", "correctAnswer": "TRUE"},
        {"id": "q3", "type": "fill-blank", "correctAnswer": "42"},
        {"id": "q4", "type": "multiple-choice", "correctAnswer": 2},
    ]])


@pytest.fixture
def sectioned_exam():
    # 2 + 3 + 1 questions
    return make_exam(kind="listening", sections=[
        [ungraded("a1"), ungraded("a2")],
        [ungraded("b1"), ungraded("b2"), ungraded("b3")],
        [ungraded("c1")],
    ])


@pytest.fixture
def make_session(clock):
    def _make(exam, **kwargs):
        return ExamSession(exam=exam, clock=clock, **kwargs)
    return _make


@pytest.fixture(autouse=True)
def _clear_store():
    session.clear_all()
    yield
    session.clear_all()
