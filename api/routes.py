"""
api/routes.py - FastAPI endpoints

Each POST endpoint dispatches one UI event into the caller's ExamSession.
A transition the session rejects (e.g. answering after submission) is
reported as {"ok": false}, never as an HTTP error.
"""

from functools import partial
from typing import Optional, Union

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

import config
import api.session as session
from api.sample_exam import sample_exam
from ielts_exam.models.exam_model import Exam, Question
from ielts_exam.models.session_state import Direction, ExamSession
from ielts_exam.services import navigation
from ielts_exam.services.band_score import band_level
from ielts_exam.services.exam_loader import ExamLoadError, list_exam_ids, load_exam
from ielts_exam.services.exam_service import (
    detailed_results, group_by_section, incorrect_outcomes,
    section_accuracy, section_scores,
)
from ielts_exam.services.timer import format_time, is_warning

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class AnswerBody(BaseModel):
    question_id: str
    answer: Union[int, str]

class FlagBody(BaseModel):
    question_id: str

class NavigateBody(BaseModel):
    direction: Optional[Direction] = None
    section_index: Optional[int] = None
    question_index: Optional[int] = None

class ReviewBody(BaseModel):
    reviewing: bool = True


# ── helpers ──────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _require_exam_session(request: Request) -> ExamSession:
    exam_session = session.get_exam_session(_sid(request))
    if exam_session is None:
        raise HTTPException(status_code=404, detail="No exam loaded.")
    return exam_session


def _question_to_dict(q: Question, include_key: bool) -> dict:
    d = {
        "id": q.id,
        "type": q.type.value,
        "question": q.question,
        "options": q.options,
        "audio_timestamp": q.audio_timestamp,
    }
    if include_key:
        d["correct_answer"] = q.correct_answer
    return d


def _exam_overview(exam: Exam) -> dict:
    return {
        "id": exam.id,
        "title": exam.title,
        "kind": exam.kind.value,
        "duration_minutes": exam.duration_minutes,
        "difficulty": exam.difficulty,
        "description": exam.description,
        "total_questions": navigation.total_questions(exam),
        "sections": [
            {
                "title": s.title,
                "content": s.content,
                "audio_url": s.audio_url,
                "question_count": len(s.questions),
            }
            for s in exam.sections
        ],
    }


def _state_to_dict(es: ExamSession) -> dict:
    total = navigation.total_questions(es.exam)
    return {
        "state": es.state.value,
        "reviewing": es.reviewing,
        "section_index": es.cursor.section_index,
        "question_index": es.cursor.question_index,
        "position": navigation.global_index(es.exam, es.cursor),
        "total": total,
        "time_remaining_seconds": es.time_remaining_seconds,
        "time_display": format_time(es.time_remaining_seconds),
        "time_warning": es.is_in_progress and is_warning(es.time_remaining_seconds),
        "started_at": es.started_at,
        "answered_count": es.answered_count,
        "answers": dict(es.answers),
        "flags": sorted(es.flags),
        "auto_submitted": es.auto_submitted,
    }


def _dispatch(request: Request, action) -> dict:
    """
    Run one transition under the store lock and report the new state.
    A submission it caused is saved after the lock is released.
    """
    with session.lock:
        exam_session = _require_exam_session(request)
        accepted = action(exam_session)
        state = {"ok": accepted, **_state_to_dict(exam_session)}
    session.flush_submissions()
    return state


def _open_exam(request: Request, exam: Exam) -> dict:
    store = request.app.state.result_store
    exam_session = ExamSession(exam=exam, on_submit=partial(session.queue_submission, store))
    session.set_exam_session(_sid(request), exam_session)
    return {"ok": True, "exam": _exam_overview(exam)}


# ── endpoints ────────────────────────────────────────────────────────────────

@router.get("/api/exams")
async def list_exams():
    return {"exam_ids": list_exam_ids(config.EXAMS_DIR)}


@router.post("/api/exams/{exam_id}/load")
async def api_load_exam(exam_id: str, request: Request):
    # A failed load leaves any previous slot untouched and creates nothing.
    try:
        exam = load_exam(exam_id, config.EXAMS_DIR)
    except ExamLoadError as e:
        raise HTTPException(status_code=404 if e.not_found else 422, detail=str(e))
    return _open_exam(request, exam)


@router.post("/api/start-sample-exam")
async def start_sample_exam(request: Request):
    return _open_exam(request, sample_exam())


@router.post("/api/start")
async def start(request: Request):
    return _dispatch(request, lambda es: es.start())


@router.post("/api/answer")
async def answer(body: AnswerBody, request: Request):
    return _dispatch(request, lambda es: es.answer(body.question_id, body.answer))


@router.post("/api/flag")
async def toggle_flag(body: FlagBody, request: Request):
    return _dispatch(request, lambda es: es.toggle_flag(body.question_id))


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    if body.direction is not None:
        return _dispatch(request, lambda es: es.navigate(body.direction))
    if body.section_index is None or body.question_index is None:
        raise HTTPException(
            status_code=422,
            detail="Give either a direction or both section_index and question_index.",
        )
    return _dispatch(request, lambda es: es.jump_to(body.section_index, body.question_index))


@router.post("/api/submit")
async def submit(request: Request):
    return _dispatch(request, lambda es: es.submit())


@router.post("/api/review")
async def review(body: ReviewBody, request: Request):
    return _dispatch(request, lambda es: es.set_reviewing(body.reviewing))


@router.get("/api/exam-state")
async def get_exam_state(request: Request):
    with session.lock:
        exam_session = _require_exam_session(request)
        return {"exam": _exam_overview(exam_session.exam), **_state_to_dict(exam_session)}


@router.get("/api/question")
async def get_question(request: Request):
    with session.lock:
        es = _require_exam_session(request)
        q = es.current_question()
        if q is None:
            raise HTTPException(status_code=404, detail="Question not found.")

        section = es.exam.sections[es.cursor.section_index]
        d = _question_to_dict(q, include_key=es.is_submitted)
        d.update({
            "section_index": es.cursor.section_index,
            "question_index": es.cursor.question_index,
            "section_title": section.title,
            "section_content": section.content,
            "audio_url": section.audio_url,
            "saved_answer": es.answers.get(q.id),
            "flagged": es.is_flagged(q.id),
            "position": navigation.global_index(es.exam, es.cursor),
            "total": navigation.total_questions(es.exam),
        })
        return d


def _require_submitted(request: Request) -> ExamSession:
    es = _require_exam_session(request)
    if not es.is_submitted or es.score_result is None:
        raise HTTPException(status_code=400, detail="The exam has not been submitted yet.")
    return es


@router.get("/api/results")
async def get_results(request: Request):
    with session.lock:
        es = _require_submitted(request)
        result = es.score_result
        sections = []
        for bucket in section_scores(es.exam, es.answers):
            sections.append({**bucket.model_dump(), "accuracy": section_accuracy(bucket)})

        return {
            **result.model_dump(),
            "band_level": band_level(result.band_score),
            "unanswered_count": result.total_questions - result.answered_count,
            "time_spent_seconds": es.time_spent_seconds,
            "auto_submitted": es.auto_submitted,
            "section_scores": sections,
            "incorrect_question_ids": [o.question.id for o in incorrect_outcomes(es.exam, es.answers)],
        }


@router.get("/api/results/detailed")
async def get_detailed_results(request: Request):
    with session.lock:
        es = _require_submitted(request)
        grouped = group_by_section(detailed_results(es.exam, es.answers))
        return {
            "sections": [
                {
                    "section_title": title,
                    "questions": [
                        {
                            **_question_to_dict(o.question, include_key=True),
                            "user_answer": o.user_answer,
                            "is_correct": o.is_correct,
                        }
                        for o in outcomes
                    ],
                }
                for title, outcomes in grouped.items()
            ],
        }


@router.post("/api/reset")
async def reset_session(request: Request):
    session.reset(_sid(request))
    return {"ok": True}
