"""
main.py - IELTS exam engine server entry point
"""

import os
import sys
import logging
import traceback

# ── Import path (must come first) ────────────────────────────────────────────
# Run from any directory: make config / api / ielts_exam importable.
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

from config import BASE_DIR, LOG_FILE, DEFAULT_HOST, DEFAULT_PORT

# ── Logging ──────────────────────────────────────────────────────────────────
try:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
except PermissionError:
    # log file locked or read-only: console only
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)


def run(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    try:
        import uvicorn
        from api.app import create_app
        logger.info(f"Starting uvicorn on {host}:{port}")
        app = create_app()
        uvicorn.run(app, host=host, port=port, log_level="info")
    except Exception:
        logger.error(f"Server error:\n{traceback.format_exc()}")
        sys.exit(1)


if __name__ == "__main__":
    logger.info("=== IELTS Exam Engine Started ===")
    os.chdir(BASE_DIR)
    run()
