import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api import applications as applications_api
from .api import jobs as jobs_api
from .api import uploads as uploads_api
from .config import CLIENT_ORIGIN, LOG_LEVEL, SEED_JOBS, UPLOAD_DIR
from .database import SessionLocal, init_db
from .services.job_catalog import seed_jobs
from .utils.error_handlers import register_exception_handlers

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Job Portal Quick Apply")

register_exception_handlers(app)

app.include_router(jobs_api.router)
app.include_router(applications_api.router)
app.include_router(uploads_api.router)

# Stored resumes and summaries are served byte-for-byte under /uploads.
Path(UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


@app.get("/")
def root():
    return {
        "success": True,
        "message": "Job Portal Backend API is running!",
        "endpoints": {
            "health": "/api/health",
            "quickApply": "/api/jobs/{job_id}/quick-apply",
            "track": "/api/applications/track/{token}",
            "uploads": "/uploads/{reference}",
        },
    }


@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    return {
        "success": True,
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


_default_origins = [CLIENT_ORIGIN, "http://localhost:5173", "http://127.0.0.1:5173"]
_extra_origins = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=[*dict.fromkeys([*_default_origins, *_extra_origins])],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    if not SEED_JOBS:
        return
    db = SessionLocal()
    try:
        seed_jobs(db)
    except Exception as e:
        # A failed seed must not keep the API from serving.
        logger.warning(f"Job seed failed: {e}")
    finally:
        db.close()
