"""
services/exam_service.py

Scoring and result analysis for IELTS Reading/Listening attempts.
Pure Python functions: no UI code, no global state.

Every correctness check goes through ``normalizer.is_correct`` so the
overall score and the detailed review can never disagree.
"""

import math
from typing import Callable, Dict, List, Mapping, Optional

from ielts_exam.models.exam_model import AnswerValue, Exam, ExamKind
from ielts_exam.models.result_model import (
    BandResult,
    QuestionOutcome,
    ScoreResult,
    SectionScore,
)
from ielts_exam.services.band_score import band_score_of
from ielts_exam.services.normalizer import is_correct

BandLookup = Callable[[ExamKind, int], BandResult]

# (minimum completion percentage, remark), checked top-down
COMPLETION_REMARKS = (
    (90, "Excellent"),
    (80, "Good"),
    (70, "Fairly good"),
    (60, "Average"),
    (0, "Needs more practice"),
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero (``round()`` would round half to even)."""
    return int(math.floor(value + 0.5))


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def completion_remark(percentage: int) -> str:
    for threshold, remark in COMPLETION_REMARKS:
        if percentage >= threshold:
            return remark
    return COMPLETION_REMARKS[-1][1]


def answered_count(exam: Exam, answers: Mapping[str, AnswerValue]) -> int:
    """Number of exam questions with an answer recorded (stray keys ignored)."""
    return sum(1 for q in exam.all_questions() if answers.get(q.id) is not None)


def score(
    exam: Exam,
    answers: Mapping[str, AnswerValue],
    band_lookup: BandLookup = band_score_of,
) -> ScoreResult:
    """
    Score an attempt.

    totalQuestions is counted from the actual question list, not from the
    exam's ``total_questions`` metadata. Unanswered questions count as
    incorrect.

    If at least one question has an answer key, the band table is consulted.
    Otherwise (unscored preview content) the result is a completion ratio
    with ``band_score = 0.0`` and the band table is never called.

    Args:
        exam:        the loaded exam.
        answers:     {question_id: raw answer}.
        band_lookup: band-table collaborator.

    Returns:
        ScoreResult; identical inputs give identical output.
    """
    questions = exam.all_questions()
    total = len(questions)
    correct = sum(1 for q in questions if is_correct(q, answers.get(q.id)))
    answered = answered_count(exam, answers)
    has_gradable_content = any(q.correct_answer is not None for q in questions)

    if has_gradable_content and exam.kind in (ExamKind.READING, ExamKind.LISTENING):
        band = band_lookup(exam.kind, correct)
        return ScoreResult(
            total_questions=total,
            correct_answers=correct,
            answered_count=answered,
            percentage=_percent(correct, total),
            band_score=band.band_score,
            description=band.description,
        )

    percentage = _percent(answered, total)
    return ScoreResult(
        total_questions=total,
        correct_answers=correct,
        answered_count=answered,
        percentage=percentage,
        band_score=0.0,
        description=completion_remark(percentage),
    )


def section_title(exam: Exam, section_index: int) -> str:
    """``"Passage 1: <title>"`` for reading, ``"Section 1: <title>"`` for listening."""
    section = exam.sections[section_index]
    return f"{exam.section_label} {section_index + 1}: {section.title}"


def detailed_results(
    exam: Exam,
    answers: Mapping[str, AnswerValue],
) -> List[QuestionOutcome]:
    """
    One outcome per question, in exam order (the detailed-review view).
    """
    outcomes: List[QuestionOutcome] = []
    for s_idx, section in enumerate(exam.sections):
        title = section_title(exam, s_idx)
        for q in section.questions:
            user_answer = answers.get(q.id)
            outcomes.append(
                QuestionOutcome(
                    question=q,
                    user_answer=user_answer,
                    is_correct=is_correct(q, user_answer),
                    section_title=title,
                )
            )
    return outcomes


def group_by_section(outcomes: List[QuestionOutcome]) -> Dict[str, List[QuestionOutcome]]:
    """Group outcomes by section title, keeping first-seen section order."""
    grouped: Dict[str, List[QuestionOutcome]] = {}
    for outcome in outcomes:
        grouped.setdefault(outcome.section_title, []).append(outcome)
    return grouped


def incorrect_outcomes(
    exam: Exam,
    answers: Mapping[str, AnswerValue],
) -> List[QuestionOutcome]:
    """
    Graded questions answered wrongly or left blank (mistake review).
    Questions without an answer key are excluded.
    """
    return [
        o for o in detailed_results(exam, answers)
        if o.question.correct_answer is not None and not o.is_correct
    ]


def section_scores(
    exam: Exam,
    answers: Mapping[str, AnswerValue],
) -> List[SectionScore]:
    """
    Per-section breakdown, in section order.

    Ungraded questions only count towards ``total``.
    """
    buckets: Dict[str, SectionScore] = {}
    for outcome in detailed_results(exam, answers):
        bucket = buckets.setdefault(
            outcome.section_title, SectionScore(section_title=outcome.section_title)
        )
        bucket.total += 1
        if outcome.question.correct_answer is None:
            continue
        if outcome.user_answer is None:
            bucket.unanswered += 1
        elif outcome.is_correct:
            bucket.correct += 1
        else:
            bucket.incorrect += 1
    return list(buckets.values())


def section_accuracy(bucket: SectionScore) -> Optional[float]:
    """Correct ratio (0-100, one decimal) over the graded questions of a section."""
    scorable = bucket.correct + bucket.incorrect + bucket.unanswered
    if not scorable:
        return None
    return round(bucket.correct / scorable * 100, 1)
