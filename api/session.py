"""
api/session.py - multi-user in-memory session store (cookie based)

Each browser gets a UUID session id; each id owns at most one exam attempt.
Slots expire after SESSION_TTL seconds without access.

The request handlers and the ticker thread both mutate ExamSession objects,
so every mutation happens while holding ``lock``. Submitted attempts are
queued under the lock and written to their result store by
``flush_submissions()`` once it has been released.
"""

import logging
import threading
import time
import uuid
from typing import Any, Optional

from config import SESSION_TTL
from ielts_exam.models.result_model import SubmissionRecord
from ielts_exam.models.session_state import ExamSession
from ielts_exam.services.result_store import ResultStore

logger = logging.getLogger(__name__)

lock = threading.RLock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}
_pending: list[tuple[ResultStore, SubmissionRecord]] = []


def _new_state() -> dict[str, Any]:
    return {
        "exam_session": None,
    }


def create_session() -> str:
    """Create a session slot and return its id."""
    sid = uuid.uuid4().hex
    with lock:
        _sessions[sid] = _new_state()
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """Session data for ``sid``; None when unknown or expired."""
    with lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            del _sessions[sid]
            del _timestamps[sid]
            return None
        _timestamps[sid] = time.time()  # refresh on access
        return _sessions[sid]


def get_exam_session(sid: str) -> Optional[ExamSession]:
    data = get_session(sid)
    if data is None:
        return None
    return data["exam_session"]


def set_exam_session(sid: str, exam_session: ExamSession) -> None:
    """Replace the attempt held by ``sid``. Unknown ids are ignored."""
    with lock:
        if sid in _sessions:
            _sessions[sid]["exam_session"] = exam_session
            _timestamps[sid] = time.time()


def reset(sid: str) -> None:
    """Discard the attempt held by ``sid`` (abandon or restart)."""
    with lock:
        if sid in _sessions:
            _sessions[sid] = _new_state()
            _timestamps[sid] = time.time()


def queue_submission(store: ResultStore, record: SubmissionRecord) -> None:
    """ExamSession submit handler: remember the record for the next flush."""
    with lock:
        _pending.append((store, record))


def flush_submissions() -> int:
    """
    Save every queued submission. Must be called without holding ``lock``
    so a slow store never blocks the ticker or other requests.
    Returns how many were saved; failures are logged and dropped.
    """
    with lock:
        batch = list(_pending)
        _pending.clear()

    saved = 0
    for store, record in batch:
        try:
            store.save(record)
            saved += 1
        except Exception:
            logger.exception(f"exam {record.exam_id}: saving the submitted result failed")
    return saved


def tick_all() -> int:
    """Advance every running exam by one second. Returns how many were ticked."""
    ticked = 0
    with lock:
        for data in _sessions.values():
            exam_session: Optional[ExamSession] = data["exam_session"]
            if exam_session is not None and exam_session.tick():
                ticked += 1
    flush_submissions()
    return ticked


def cleanup_expired() -> int:
    """Drop expired slots. Returns how many were removed."""
    now = time.time()
    removed = 0
    with lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            del _sessions[sid]
            del _timestamps[sid]
            removed += 1
    return removed


def clear_all() -> None:
    with lock:
        _sessions.clear()
        _timestamps.clear()
        _pending.clear()
