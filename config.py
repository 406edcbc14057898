import os

# Base directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Paths
EXAMS_DIR = os.getenv("IELTS_EXAMS_DIR", os.path.join(BASE_DIR, "exams"))
RESULTS_DIR = os.getenv("IELTS_RESULTS_DIR", os.path.join(BASE_DIR, "results"))
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# Server
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))

# Sessions
SESSION_TTL = int(os.getenv("SESSION_TTL", "7200"))   # seconds; covers a full 60 min test + review
CLEANUP_INTERVAL = 300                                # expired-session sweep period (s)

# Exam timer
TICK_INTERVAL = 1.0             # one tick per wall-clock second
TIMER_WARNING_SECONDS = 600     # under 10 minutes the countdown turns red
