import json
import os

import pytest

import config
from api.sample_exam import SAMPLE_EXAM_PAYLOAD, sample_exam
from ielts_exam.models.exam_model import ExamKind, QuestionType
from ielts_exam.services.exam_loader import ExamLoadError, list_exam_ids, load_exam, parse_exam
from ielts_exam.services.exam_service import score


def write(tmp_path, name, payload):
    path = tmp_path / f"{name}.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return path


def test_bundled_listening_exam_loads():
    exam = load_exam("listening-sample", config.EXAMS_DIR)

    assert exam.kind == ExamKind.LISTENING
    assert exam.duration_minutes == 10
    assert [len(s.questions) for s in exam.sections] == [3, 2]
    assert exam.sections[0].audio_url == "/audio/listening-sample-s1.mp3"
    assert exam.sections[0].questions[0].audio_timestamp == 12.5


def test_sample_reading_exam_folds_passages():
    exam = sample_exam()
    assert exam.kind == ExamKind.READING
    assert [s.title for s in exam.sections] == ["The History of Tea", "Urban Beekeeping"]
    assert exam.sections[0].questions[0].type == QuestionType.MULTIPLE_CHOICE
    assert "passages" in SAMPLE_EXAM_PAYLOAD


def test_sample_exam_answer_key_is_consistent():
    exam = sample_exam()
    answers = {"1": 1, "2": "true", "3": "NOT GIVEN", "4": "500", "5": "C", "6": "A", "7": "gardens"}
    result = score(exam, answers)
    assert result.correct_answers == result.total_questions == 7


def test_missing_file(tmp_path):
    with pytest.raises(ExamLoadError) as exc:
        load_exam("nope", str(tmp_path))
    assert exc.value.not_found


@pytest.mark.parametrize("exam_id", ["", "../etc/passwd", "a b"])
def test_bad_ids_are_rejected(tmp_path, exam_id):
    with pytest.raises(ExamLoadError):
        load_exam(exam_id, str(tmp_path))


def test_malformed_json(tmp_path):
    write(tmp_path, "broken", "{not json")
    with pytest.raises(ExamLoadError) as exc:
        load_exam("broken", str(tmp_path))
    assert not exc.value.not_found


def test_duplicate_question_ids_are_rejected():
    payload = {
        "_id": "dup", "type": "reading", "duration": 10,
        "passages": [
            {"title": "A", "questions": [{"id": "1", "type": "fill-blank"}]},
            {"title": "B", "questions": [{"id": "1", "type": "fill-blank"}]},
        ],
    }
    with pytest.raises(ExamLoadError):
        parse_exam(payload)


@pytest.mark.parametrize("change", [
    {"type": "speaking"},
    {"duration": 0},
    {"sections": []},
    {"sections": [{"title": "empty", "questions": []}]},
    {"sections": [{"title": "x", "questions": [{"id": "1", "type": "essay"}]}]},
    {"sections": [{"title": "x", "questions": [{"id": "1", "type": "multiple-choice", "correctAnswer": True}]}]},
    {"sections": [{"title": "x", "questions": [{"id": "1", "type": "true-false-notgiven", "correctAnswer": False}]}]},
])
def test_invalid_content_is_rejected(change):
    payload = {
        "_id": "x", "type": "listening", "duration": 10,
        "sections": [{"title": "S", "questions": [{"id": "1", "type": "fill-blank"}]}],
    }
    payload.update(change)
    with pytest.raises(ExamLoadError):
        parse_exam(payload)


def test_failure_envelope_is_rejected():
    with pytest.raises(ExamLoadError):
        parse_exam({"success": False, "data": {}})


def test_numeric_question_ids_become_strings():
    exam = parse_exam({
        "_id": "n", "type": "reading", "duration": 5,
        "passages": [{"title": "P", "questions": [{"id": 7, "type": "fill-blank"}]}],
    })
    assert exam.sections[0].questions[0].id == "7"


def test_list_exam_ids(tmp_path):
    write(tmp_path, "b-exam", {})
    write(tmp_path, "a-exam", {})
    (tmp_path / "notes.txt").write_text("x")
    assert list_exam_ids(str(tmp_path)) == ["a-exam", "b-exam"]
    assert list_exam_ids(os.path.join(str(tmp_path), "missing")) == []


def test_boolean_answer_key_from_json_is_rejected(tmp_path):
    payload = {
        "_id": "boolkey", "type": "reading", "duration": 5,
        "passages": [{"title": "P", "questions": [
            {"id": "1", "type": "multiple-choice", "correctAnswer": True},
        ]}],
    }
    write(tmp_path, "boolkey", payload)
    with pytest.raises(ExamLoadError):
        load_exam("boolkey", str(tmp_path))
