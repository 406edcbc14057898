"""
models/result_model.py

Scoring output models. All are derived from (exam, answers) and can be
recomputed at any time.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ielts_exam.models.exam_model import AnswerValue, ExamKind, Question


class BandResult(BaseModel):
    """Band-table lookup result."""

    model_config = ConfigDict(frozen=True)

    band_score: float = Field(..., ge=0.0, le=9.0)
    description: str


class ScoreResult(BaseModel):
    """
    Overall result of one attempt.

    Attributes:
        total_questions: number of questions actually present in the exam.
        correct_answers: questions whose normalized answer matches the key.
        answered_count:  questions with any answer recorded.
        percentage:      0-100. Correct ratio when the exam is graded,
                         completion ratio otherwise.
        band_score:      IELTS band, or 0.0 when no answer key exists.
        description:     band description or completion remark.
    """

    model_config = ConfigDict(frozen=True)

    total_questions: int = Field(..., ge=0)
    correct_answers: int = Field(..., ge=0)
    answered_count: int = Field(0, ge=0)
    percentage: int = Field(..., ge=0, le=100)
    band_score: float = 0.0
    description: str = ""


class QuestionOutcome(BaseModel):
    """Per-question row of the detailed review."""

    model_config = ConfigDict(frozen=True)

    question: Question
    user_answer: Optional[AnswerValue] = None
    is_correct: bool = False
    section_title: str


class SectionScore(BaseModel):
    section_title: str
    total: int = 0
    correct: int = 0
    incorrect: int = 0
    unanswered: int = 0


class SubmissionRecord(BaseModel):
    """Payload handed to the result store when an attempt is submitted."""

    exam_id: str
    exam_title: str = ""
    exam_kind: ExamKind
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)
    time_spent_seconds: int = Field(..., ge=0)
    score_result: ScoreResult
    submitted_at: int = Field(..., description="Epoch milliseconds")
