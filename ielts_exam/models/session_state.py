"""
models/session_state.py

State of one exam attempt and its transitions.
Pydantic BaseModel based, no UI code: the HTTP layer (or a test) drives it
by calling the transition methods below.

    NOT_STARTED --start()--> IN_PROGRESS --submit() / timer expiry--> SUBMITTED

Transitions requested in the wrong state are ignored and return False;
they never raise into the caller. "Reviewing" is only a presentation flag
on a submitted session.
"""

import logging
import math
import time
from enum import Enum
from typing import Callable, Dict, Optional, Set

from pydantic import BaseModel, Field

from ielts_exam.models.exam_model import AnswerValue, Cursor, Exam, Question
from ielts_exam.models.result_model import ScoreResult, SubmissionRecord
from ielts_exam.services import navigation
from ielts_exam.services.band_score import band_score_of
from ielts_exam.services.exam_service import BandLookup, score

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class Direction(str, Enum):
    NEXT = "next"
    PREV = "prev"


SubmitHandler = Callable[[SubmissionRecord], None]


def _now_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


class ExamSession(BaseModel):
    """
    One attempt at one exam.

    Attributes:
        exam:                   the loaded exam (immutable).
        answers:                {question.id: raw answer}. Overwrite only.
        state:                  lifecycle state.
        cursor:                 question currently shown.
        time_remaining_seconds: countdown; frozen once submitted.
        started_at:             epoch ms of start(), None before.
        submitted_at:           epoch ms of submit(), None before.
        time_spent_seconds:     whole seconds between start and submit.
        flags:                  "review later" markers, no scoring effect.
        reviewing:              detailed-review toggle (submitted only).
        score_result:           cached result, computed once on submit.
        auto_submitted:         True when the timer ended the attempt.
    """

    exam: Exam
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)
    state: SessionState = SessionState.NOT_STARTED
    cursor: Cursor = Field(default_factory=Cursor)
    time_remaining_seconds: int = Field(0, ge=0)
    started_at: Optional[int] = None
    submitted_at: Optional[int] = None
    time_spent_seconds: int = 0
    flags: Set[str] = Field(default_factory=set)
    reviewing: bool = False
    score_result: Optional[ScoreResult] = None
    auto_submitted: bool = False

    # Collaborators; not part of the serialized state.
    clock: Callable[[], float] = Field(default=time.time, exclude=True)
    band_lookup: BandLookup = Field(default=band_score_of, exclude=True)
    on_submit: Optional[SubmitHandler] = Field(default=None, exclude=True)

    model_config = {"arbitrary_types_allowed": True}

    # ── read side ───────────────────────────────────────────────────────────

    @property
    def is_in_progress(self) -> bool:
        return self.state == SessionState.IN_PROGRESS

    @property
    def is_submitted(self) -> bool:
        return self.state == SessionState.SUBMITTED

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def current_question(self) -> Optional[Question]:
        return navigation.question_at(self.exam, self.cursor)

    def is_flagged(self, question_id: str) -> bool:
        return question_id in self.flags

    def _reject(self, action: str) -> bool:
        logger.debug(f"{action} ignored in state {self.state.value} (exam {self.exam.id})")
        return False

    # ── transitions ─────────────────────────────────────────────────────────

    def start(self) -> bool:
        """NOT_STARTED -> IN_PROGRESS. Never restarts a running timer."""
        if self.state != SessionState.NOT_STARTED:
            return self._reject("start")

        self.state = SessionState.IN_PROGRESS
        self.started_at = _now_ms(self.clock)
        self.time_remaining_seconds = self.exam.duration_minutes * 60
        self.cursor = Cursor()
        logger.info(
            f"exam {self.exam.id} started: {navigation.total_questions(self.exam)} questions, "
            f"{self.exam.duration_minutes} min"
        )
        return True

    def tick(self) -> bool:
        """
        One second elapsed. Auto-submits when the countdown reaches 0.
        Ignored outside IN_PROGRESS, so a late tick cannot touch a
        submitted session.
        """
        if not self.is_in_progress:
            return False

        self.time_remaining_seconds = max(0, self.time_remaining_seconds - 1)
        if self.time_remaining_seconds == 0:
            logger.info(f"exam {self.exam.id}: time is up, submitting")
            self.auto_submitted = True
            self.submit()
        return True

    def answer(self, question_id: str, raw_value: AnswerValue) -> bool:
        """Record (or overwrite) the answer to one question."""
        if not self.is_in_progress:
            return self._reject("answer")
        if navigation.cursor_of(self.exam, question_id) is None:
            logger.debug(f"answer to unknown question {question_id!r} ignored")
            return False
        if raw_value is None or isinstance(raw_value, bool) or not isinstance(raw_value, (int, str)):
            logger.debug(f"answer {raw_value!r} for {question_id!r} ignored: unsupported value")
            return False

        self.answers[question_id] = raw_value
        return True

    def toggle_flag(self, question_id: str) -> bool:
        if not self.is_in_progress:
            return self._reject("toggle_flag")
        if navigation.cursor_of(self.exam, question_id) is None:
            return False

        if question_id in self.flags:
            self.flags.discard(question_id)
        else:
            self.flags.add(question_id)
        return True

    def navigate(self, direction: Direction) -> bool:
        """
        Move one question forward or back, crossing section boundaries.
        Returns False when the move is rejected or the cursor is already at
        the first/last question.
        """
        if not self.is_in_progress:
            return self._reject("navigate")

        try:
            direction = Direction(direction)
        except ValueError:
            return self._reject(f"navigate({direction!r})")

        if direction == Direction.NEXT:
            target = navigation.next_cursor(self.exam, self.cursor)
        else:
            target = navigation.prev_cursor(self.exam, self.cursor)
        if target == self.cursor:
            return False
        self.cursor = target
        return True

    def jump_to(self, section_index: int, question_index: int) -> bool:
        """Move straight to a question (question palette)."""
        if not self.is_in_progress:
            return self._reject("jump_to")
        if section_index < 0 or question_index < 0:
            return False

        target = Cursor(section_index=section_index, question_index=question_index)
        if not navigation.is_valid_cursor(self.exam, target):
            return False
        self.cursor = target
        return True

    def submit(self) -> bool:
        """
        IN_PROGRESS -> SUBMITTED, exactly once.

        Freezes the timer, scores the attempt and caches the result, then
        hands a SubmissionRecord to ``on_submit``. A failing handler is
        logged; the session stays submitted either way.
        """
        if not self.is_in_progress:
            return self._reject("submit")

        self.state = SessionState.SUBMITTED
        self.submitted_at = _now_ms(self.clock)
        elapsed_ms = max(0, self.submitted_at - (self.started_at or self.submitted_at))
        self.time_spent_seconds = math.floor(elapsed_ms / 1000)
        self.score_result = score(self.exam, self.answers, band_lookup=self.band_lookup)

        logger.info(
            f"exam {self.exam.id} submitted: {self.score_result.correct_answers}/"
            f"{self.score_result.total_questions} correct, band {self.score_result.band_score}, "
            f"{self.time_spent_seconds}s"
        )
        self._emit_submission()
        return True

    def set_reviewing(self, reviewing: bool) -> bool:
        """Toggle the detailed-review view of a submitted attempt."""
        if not self.is_submitted:
            return self._reject("set_reviewing")
        self.reviewing = bool(reviewing)
        return True

    def submission_record(self) -> Optional[SubmissionRecord]:
        if not self.is_submitted or self.score_result is None:
            return None
        return SubmissionRecord(
            exam_id=self.exam.id,
            exam_title=self.exam.title,
            exam_kind=self.exam.kind,
            answers=dict(self.answers),
            time_spent_seconds=self.time_spent_seconds,
            score_result=self.score_result,
            submitted_at=self.submitted_at,
        )

    def _emit_submission(self) -> None:
        if self.on_submit is None:
            return
        record = self.submission_record()
        try:
            self.on_submit(record)
        except Exception:
            # The local result stays authoritative for this session.
            logger.exception(f"exam {self.exam.id}: saving the submitted result failed")
