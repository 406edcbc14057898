"""
services/navigation.py

Cursor arithmetic over a sectioned exam.
A cursor is (section_index, question_index); sections may hold different
numbers of questions.
"""

from typing import List, Optional

from ielts_exam.models.exam_model import Cursor, Exam, Question


def get_questions_of(exam: Exam, section_index: int) -> List[Question]:
    """Ordered questions of one section; empty list when out of range."""
    if 0 <= section_index < len(exam.sections):
        return list(exam.sections[section_index].questions)
    return []


def total_sections(exam: Exam) -> int:
    return len(exam.sections)


def total_questions(exam: Exam) -> int:
    return sum(len(s.questions) for s in exam.sections)


def is_valid_cursor(exam: Exam, cursor: Cursor) -> bool:
    if not 0 <= cursor.section_index < total_sections(exam):
        return False
    return 0 <= cursor.question_index < len(exam.sections[cursor.section_index].questions)


def question_at(exam: Exam, cursor: Cursor) -> Optional[Question]:
    if not is_valid_cursor(exam, cursor):
        return None
    return exam.sections[cursor.section_index].questions[cursor.question_index]


def next_cursor(exam: Exam, cursor: Cursor) -> Cursor:
    """
    One question forward. From the last question of a section this moves
    to the first question of the next section; from the last question of
    the exam the cursor is returned unchanged.
    """
    count = len(get_questions_of(exam, cursor.section_index))
    if cursor.question_index < count - 1:
        return Cursor(section_index=cursor.section_index, question_index=cursor.question_index + 1)
    if cursor.section_index < total_sections(exam) - 1:
        return Cursor(section_index=cursor.section_index + 1, question_index=0)
    return cursor


def prev_cursor(exam: Exam, cursor: Cursor) -> Cursor:
    """
    One question back. From the first question of a section this moves to
    the *last* question of the previous section; from the first question of
    the exam the cursor is returned unchanged.
    """
    if cursor.question_index > 0:
        return Cursor(section_index=cursor.section_index, question_index=cursor.question_index - 1)
    if cursor.section_index > 0:
        previous = cursor.section_index - 1
        last = len(get_questions_of(exam, previous)) - 1
        return Cursor(section_index=previous, question_index=last)
    return cursor


def global_index(exam: Exam, cursor: Cursor) -> int:
    """0-based position of the cursor in the flattened question list."""
    before = sum(len(s.questions) for s in exam.sections[: cursor.section_index])
    return before + cursor.question_index


def cursor_of(exam: Exam, question_id: str) -> Optional[Cursor]:
    for s_idx, section in enumerate(exam.sections):
        for q_idx, q in enumerate(section.questions):
            if q.id == question_id:
                return Cursor(section_index=s_idx, question_index=q_idx)
    return None
