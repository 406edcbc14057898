"""
services/exam_loader.py

Loads exam content (JSON) into validated Exam models.
Public API:
  - load_exam(exam_id, exams_dir) -> Exam   : read <exams_dir>/<exam_id>.json
  - parse_exam(payload) -> Exam              : validate an already decoded payload
  - list_exam_ids(exams_dir) -> List[str]    : ids of the exam files on disk

Any failure raises ExamLoadError; nothing is retried. A caller that gets
an ExamLoadError must not create a session for that exam.
"""

import json
import logging
import os
import re
from typing import Any, List

from pydantic import ValidationError

from config import EXAMS_DIR
from ielts_exam.models.exam_model import Exam

logger = logging.getLogger(__name__)

_EXAM_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class ExamLoadError(ValueError):
    """Exam content is missing or malformed."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found


def parse_exam(payload: Any) -> Exam:
    """
    Validate a decoded exam payload.

    Accepts the envelope ``{"success": true, "data": {...}}`` as well as a
    bare exam object.
    """
    if isinstance(payload, dict) and "data" in payload and isinstance(payload["data"], dict):
        if payload.get("success") is False:
            raise ExamLoadError("exam payload reports failure")
        payload = payload["data"]
    if not isinstance(payload, dict):
        raise ExamLoadError("exam payload must be a JSON object")

    try:
        return Exam.model_validate(payload)
    except ValidationError as e:
        raise ExamLoadError(f"invalid exam content: {e.error_count()} error(s)\n{e}") from e


def load_exam(exam_id: str, exams_dir: str = EXAMS_DIR) -> Exam:
    if not exam_id or not _EXAM_ID.match(exam_id):
        raise ExamLoadError(f"invalid exam id: {exam_id!r}", not_found=True)

    path = os.path.join(exams_dir, f"{exam_id}.json")
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        raise ExamLoadError(f"exam {exam_id} not found", not_found=True) from None
    except json.JSONDecodeError as e:
        logger.error(f"load_exam: {path} is not valid JSON - {e}")
        raise ExamLoadError(f"exam {exam_id} is not valid JSON") from e
    except OSError as e:
        logger.error(f"load_exam: cannot read {path} - {e}")
        raise ExamLoadError(f"exam {exam_id} could not be read") from e

    exam = parse_exam(payload)
    logger.info(
        f"load_exam: {exam.id} ({exam.kind.value}, {len(exam.sections)} sections, "
        f"{len(exam.all_questions())} questions)"
    )
    return exam


def list_exam_ids(exams_dir: str = EXAMS_DIR) -> List[str]:
    if not os.path.isdir(exams_dir):
        return []
    ids = []
    for name in os.listdir(exams_dir):
        stem, ext = os.path.splitext(name)
        if ext == ".json" and _EXAM_ID.match(stem):
            ids.append(stem)
    return sorted(ids)
