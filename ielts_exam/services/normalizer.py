"""
services/normalizer.py

Answer normalization shared by scoring and the detailed review.
Pure functions, no side effects.

Raw answers arrive in different encodings (letter vs. index for
multiple-choice, label vs. index for TRUE/FALSE/NOT GIVEN). Both the
answer key and the user's answer are mapped to one canonical form before
they are compared.
"""

import re
from typing import Optional

from ielts_exam.models.exam_model import AnswerValue, Question, QuestionType

TFNG_LABELS = ("TRUE", "FALSE", "NOT GIVEN")

_CHOICE_LETTER = re.compile(r"^[A-D]$")


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _normalize_choice(value: AnswerValue) -> AnswerValue:
    if isinstance(value, str) and _CHOICE_LETTER.match(value):
        return ord(value) - ord("A")
    return value


def _normalize_tfng(value: AnswerValue) -> AnswerValue:
    if _is_index(value) and 0 <= value < len(TFNG_LABELS):
        return TFNG_LABELS[value]
    if isinstance(value, str):
        return value.upper()
    return value


def normalize(question: Question, value: Optional[AnswerValue]) -> Optional[AnswerValue]:
    """
    Canonical comparable form of ``value`` for ``question``.

    - multiple-choice: letters A-D become 0-based indices, indices pass through.
    - true-false-notgiven: indices 0-2 become "TRUE"/"FALSE"/"NOT GIVEN",
      strings are upper-cased.
    - fill-blank, matching, map-labeling: unchanged (exact match).

    ``None`` means "no answer" and stays ``None``.
    """
    if value is None:
        return None
    if question.type == QuestionType.MULTIPLE_CHOICE:
        return _normalize_choice(value)
    if question.type == QuestionType.TRUE_FALSE_NOT_GIVEN:
        return _normalize_tfng(value)
    return value


def is_correct(question: Question, user_answer: Optional[AnswerValue]) -> bool:
    """
    True when the user's answer matches the key after normalization.

    Ungraded questions (no key) and unanswered questions are never correct.
    """
    if question.correct_answer is None or user_answer is None:
        return False
    return normalize(question, question.correct_answer) == normalize(question, user_answer)
