import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.quickapply...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before anything imports backend.quickapply.config.
_SCRATCH = Path(tempfile.mkdtemp(prefix="quickapply-tests-"))
os.environ["DISABLE_DOTENV"] = "1"
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{(_SCRATCH / 'default.sqlite3').as_posix()}")
os.environ.setdefault("UPLOAD_DIR", str(_SCRATCH / "uploads"))
# Tests never send real email even if the developer machine has SMTP configured.
os.environ["SMTP_HOST"] = ""
os.environ["SEED_JOBS"] = "0"


@pytest.fixture()
def upload_dir(tmp_path: Path) -> Path:
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture()
def artifacts(upload_dir: Path):
    from backend.quickapply.services.artifact_store import ArtifactStore

    return ArtifactStore(upload_dir)


@pytest.fixture()
def database(tmp_path: Path):
    """
    Fresh SQLite file per test, wired into the shared database module so
    request dependencies (`get_db`) use it.
    """
    from backend.quickapply import database as db

    engine = db.build_engine(f"sqlite+pysqlite:///{(tmp_path / 'test.sqlite3').as_posix()}")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    # Import models so Base metadata is populated, then create tables.
    from backend.quickapply import models  # noqa: F401

    db.Base.metadata.create_all(bind=engine)
    yield db
    engine.dispose()


@pytest.fixture()
def db_session(database):
    """Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app."""
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def app(database, artifacts, upload_dir: Path) -> FastAPI:
    """
    FastAPI app with the real routers, a temporary DB and an isolated uploads dir.

    `backend.quickapply.main` is not imported here so the global UPLOAD_DIR
    mount and startup seed stay out of the way.
    """
    from backend.quickapply.api import applications as applications_api
    from backend.quickapply.api import jobs as jobs_api
    from backend.quickapply.api import uploads as uploads_api
    from backend.quickapply.utils.dependencies import get_artifact_store
    from backend.quickapply.utils.error_handlers import register_exception_handlers

    fastapi_app = FastAPI()
    register_exception_handlers(fastapi_app)
    fastapi_app.include_router(jobs_api.router)
    fastapi_app.include_router(applications_api.router)
    fastapi_app.include_router(uploads_api.router)
    fastapi_app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")
    fastapi_app.dependency_overrides[get_artifact_store] = lambda: artifacts
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_job(db_session):
    from backend.quickapply.models.job import Job

    def _make(title: str = "Backend Engineer", company: str = "Tech Corp", **extra):
        job = Job(title=title, company=company, **extra)
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return _make


@pytest.fixture()
def job(make_job):
    return make_job()


@pytest.fixture()
def pdf_bytes() -> bytes:
    # 20 bytes, starts with a PDF header.
    data = b"%PDF-1.4\n%resume012\n"
    assert len(data) == 20
    return data
