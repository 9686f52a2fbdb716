# backend/filevault/config.py
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# --- STORAGE ---
STORAGE_DIR = os.environ.get("STORAGE_DIR", os.path.join(BASE_DIR, "storage"))
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{os.path.join(BASE_DIR, 'database.db')}"
)

# --- WORKER POOL ---
WORKER_COUNT = int(os.environ.get("WORKER_COUNT", "5"))
# 0 keeps submit() in lockstep with free workers
QUEUE_SIZE = int(os.environ.get("QUEUE_SIZE", "0"))
# threads that may sit blocked in submit() for uploads; separate from the
# threadpool that serves sync endpoints
SUBMIT_THREADS = int(os.environ.get("SUBMIT_THREADS", "8"))

# --- DATABASE ---
# seconds a store call waits on a locked sqlite database
DB_TIMEOUT = float(os.environ.get("DB_TIMEOUT", "2.0"))

# --- I/O ---
HASH_CHUNK_SIZE = int(os.environ.get("HASH_CHUNK_SIZE", str(64 * 1024)))
UPLOAD_CHUNK_SIZE = int(os.environ.get("UPLOAD_CHUNK_SIZE", str(1024 * 1024)))

# --- LOGGING ---
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").lower()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()

# set by the test suite; disables structlog logger caching
TESTING = os.environ.get("TESTING", "").lower() in ("1", "true", "yes")

# --- SERVER ---
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
