"""
services/result_store.py

Where submitted attempts go. Each submission reaches ``store.save(record)``
once, either straight from ExamSession.on_submit or, in the HTTP app, from
the session store queue after the store lock is released. A failing save is
logged; the session keeps its local result.
"""

import logging
import os
import threading
from typing import List, Protocol

from config import RESULTS_DIR
from ielts_exam.models.result_model import SubmissionRecord

logger = logging.getLogger(__name__)


class ResultStore(Protocol):
    def save(self, record: SubmissionRecord) -> None: ...


class JsonResultStore:
    """One JSON file per submission: ``<exam_id>-<submitted_at>.json``."""

    def __init__(self, results_dir: str = RESULTS_DIR):
        self.results_dir = results_dir

    def save(self, record: SubmissionRecord) -> None:
        os.makedirs(self.results_dir, exist_ok=True)
        path = os.path.join(self.results_dir, f"{record.exam_id}-{record.submitted_at}.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write(record.model_dump_json(indent=2))
        logger.info(f"result saved: {path}")


class InMemoryResultStore:
    def __init__(self):
        self._lock = threading.Lock()
        self.records: List[SubmissionRecord] = []

    def save(self, record: SubmissionRecord) -> None:
        with self._lock:
            self.records.append(record)
