import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so changes in backend/.env take effect on process reload.
#
# For automated tests (SQLite), backend/.env must not override the test
# DATABASE_URL. Set DISABLE_DOTENV=1 to skip loading .env.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_bool(name: str, default: str = "1") -> bool:
    return (os.getenv(name, default) or default).strip() in {"1", "true", "True", "yes", "YES"}


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Default to a local SQLite DB for dev so the backend can start out-of-the-box.
# Absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()

# -------------------- Uploads --------------------
# Absolute path; override with UPLOAD_DIR in env (useful for tests).
UPLOAD_DIR = os.getenv("UPLOAD_DIR") or (Path(__file__).resolve().parent.parent / "uploads").as_posix()
MAX_RESUME_BYTES = int(os.getenv("MAX_RESUME_BYTES", str(10 * 1024 * 1024)) or str(10 * 1024 * 1024))

# Public base of this API; used to build absolute resume/pdf URLs in track responses.
API_BASE_URL = (os.getenv("API_BASE_URL") or "http://localhost:8000").rstrip("/")
# Frontend origin; the track link in confirmation emails points here.
CLIENT_ORIGIN = (os.getenv("CLIENT_ORIGIN") or "http://localhost:5173").rstrip("/")

# -------------------- Track tokens --------------------
# 24 random bytes -> 48 hex chars.
TRACK_TOKEN_BYTES = int(os.getenv("TRACK_TOKEN_BYTES", "24") or "24")
TRACK_TOKEN_MAX_ATTEMPTS = int(os.getenv("TRACK_TOKEN_MAX_ATTEMPTS", "5") or "5")

# -------------------- Quick-apply extras --------------------
SUMMARY_PDF_ENABLED = _env_bool("SUMMARY_PDF_ENABLED", "1")
SEED_JOBS = _env_bool("SEED_JOBS", "1")

# SMTP (confirmation emails). Left empty, emails are skipped.
SMTP_HOST = (os.getenv("SMTP_HOST") or "").strip()
SMTP_PORT = int((os.getenv("SMTP_PORT") or "587").strip())
SMTP_USER = (os.getenv("SMTP_USER") or "").strip()
SMTP_PASS = (os.getenv("SMTP_PASS") or "").strip()
SMTP_FROM = (os.getenv("SMTP_FROM") or SMTP_USER or "no-reply@example.com").strip()
SMTP_TLS = _env_bool("SMTP_TLS", "1")
RECRUITER_EMAIL = (os.getenv("RECRUITER_EMAIL") or "").strip() or None
