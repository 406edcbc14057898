"""
models/exam_model.py

IELTS exam content models: Exam -> Section -> Question.
Pydantic v2; read-only once loaded. No UI code.

Reading exams call their sections "passages", Listening exams call them
"sections"; both are stored in ``Exam.sections`` with the same structure.
"""

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ExamKind(str, Enum):
    READING = "reading"
    LISTENING = "listening"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_BLANK = "fill-blank"
    TRUE_FALSE_NOT_GIVEN = "true-false-notgiven"
    MATCHING = "matching"
    MAP_LABELING = "map-labeling"


# Raw answer encodings: letter / label / free text, or a 0-based index.
AnswerValue = Union[int, str]


class Question(BaseModel):
    """
    A single exam question.

    ``correct_answer`` is optional: a question without one is ungraded
    (counted in totals, never correct). Its encoding depends on ``type``,
    e.g. ``"B"`` or ``1`` for multiple-choice, ``"TRUE"`` or ``0`` for
    true-false-notgiven.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Question id, unique within the exam",
    )
    type: QuestionType = Field(
        ...,
        description="Question type; selects the answer normalization rule",
    )
    question: str = Field(
        "",
        description="Prompt text",
    )
    options: Optional[List[str]] = Field(
        None,
        description="Ordered choices (multiple-choice, matching)",
    )
    correct_answer: Optional[AnswerValue] = Field(
        None,
        alias="correctAnswer",
        description="Answer key; None for ungraded items",
    )
    audio_timestamp: Optional[float] = Field(
        None,
        alias="audioTimestamp",
        ge=0,
        description="Offset (seconds) into the section audio where the answer is heard",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        # Exam payloads sometimes number their questions.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("correct_answer", mode="before")
    @classmethod
    def reject_bool_key(cls, v: Any) -> Any:
        # bool is an int subclass; a true/false key must not become index 1/0
        if isinstance(v, bool):
            raise ValueError("correctAnswer must be a letter, label, text or index, not a boolean")
        return v


class Section(BaseModel):
    """One reading passage or one listening section."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = ""
    title: str = ""
    content: Optional[str] = None
    description: Optional[str] = None
    audio_url: Optional[str] = Field(None, alias="audioUrl")
    duration: Optional[int] = None
    questions: List[Question] = Field(default_factory=list)

    @field_validator("questions")
    @classmethod
    def validate_questions_not_empty(cls, v: List[Question]) -> List[Question]:
        if not v:
            raise ValueError("a section needs at least one question")
        return v


class Exam(BaseModel):
    """
    A loaded IELTS Reading or Listening exam.

    Accepts payloads that carry the sections under ``passages`` (reading)
    or ``sections`` (listening).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., alias="_id", min_length=1)
    title: str = ""
    kind: ExamKind = Field(..., alias="type")
    duration_minutes: int = Field(..., alias="duration", gt=0)
    difficulty: Optional[str] = None
    description: Optional[str] = None
    total_questions: Optional[int] = Field(
        None,
        alias="totalQuestions",
        description="Metadata only; scoring counts the actual questions",
    )
    sections: List[Section] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def fold_passages(cls, data: Any) -> Any:
        if isinstance(data, dict) and "passages" in data:
            data = dict(data)
            passages = data.pop("passages") or []
            if not data.get("sections"):
                data["sections"] = passages
        return data

    @model_validator(mode="after")
    def validate_content(self) -> "Exam":
        if not self.sections:
            raise ValueError("exam has no sections")
        seen = set()
        for section in self.sections:
            for q in section.questions:
                if q.id in seen:
                    raise ValueError(f"duplicate question id: {q.id!r}")
                seen.add(q.id)
        return self

    @property
    def section_label(self) -> str:
        return "Passage" if self.kind == ExamKind.READING else "Section"

    def all_questions(self) -> List[Question]:
        """All questions in section order."""
        return [q for section in self.sections for q in section.questions]


class Cursor(BaseModel):
    """Position of the question on screen: (section, question within section)."""

    model_config = ConfigDict(frozen=True)

    section_index: int = Field(0, ge=0)
    question_index: int = Field(0, ge=0)
