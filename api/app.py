"""
api/app.py - FastAPI app instance + session middleware + background threads
"""

import logging
import threading
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import CLEANUP_INTERVAL, RESULTS_DIR, TICK_INTERVAL
from api.routes import router
import api.session as session
from ielts_exam.services.result_store import JsonResultStore, ResultStore

SESSION_COOKIE = "ielts_session"

logger = logging.getLogger(__name__)

# The session store is process-wide, so its threads are too.
_background_lock = threading.Lock()
_background_started = False


def _cleanup_loop() -> None:
    while True:
        time.sleep(CLEANUP_INTERVAL)
        removed = session.cleanup_expired()
        if removed:
            logger.info(f"removed {removed} expired session(s)")


def _ticker_loop() -> None:
    # Fixed cadence; a slow tick does not make the next one fire early.
    next_at = time.monotonic() + TICK_INTERVAL
    while True:
        time.sleep(max(0.0, next_at - time.monotonic()))
        next_at += TICK_INTERVAL
        try:
            session.tick_all()
        except Exception:
            logger.exception("exam ticker failed")


def _start_background() -> bool:
    """Start the cleanup and ticker threads unless already running."""
    global _background_started
    with _background_lock:
        if _background_started:
            return False
        for target in (_cleanup_loop, _ticker_loop):
            threading.Thread(target=target, daemon=True).start()
        _background_started = True
    return True


def create_app(
    result_store: ResultStore | None = None,
    background: bool = True,
) -> FastAPI:
    """
    Build the API.

    Args:
        result_store: where submitted attempts are saved (JSON files by default).
        background:   start the session-cleanup and exam-ticker threads.
                      Started at most once per process. Tests pass
                      False and call ``tick_all()`` themselves.
    """
    app = FastAPI(title="IELTS Exam Engine", docs_url=None, redoc_url=None)
    app.state.result_store = result_store or JsonResultStore(RESULTS_DIR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Read the session id from the cookie, issue a new one when missing/expired.
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=session.SESSION_TTL,
        )
        return response

    app.include_router(router)

    @app.get("/api/health")
    async def health():
        return {"ok": True}

    if background:
        _start_background()

    return app
