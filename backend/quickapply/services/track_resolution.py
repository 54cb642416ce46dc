import logging
from datetime import datetime, timezone

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from .. import config
from ..models.quick_application import QuickApplication
from ..schemas.quick_apply import TrackView
from ..utils.error_handlers import NotFoundError, PersistenceError, get_error_message
from .application_store import ApplicationRecordStore
from .artifact_store import ArtifactStore
from .job_catalog import get_job

logger = logging.getLogger(__name__)


def isoformat_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; they were written as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class TrackResolutionService:
    def __init__(
        self,
        db: Session,
        *,
        records: ApplicationRecordStore | None = None,
        base_url: str | None = None,
    ):
        self.db = db
        self.records = records or ApplicationRecordStore(db)
        self.base_url = config.API_BASE_URL if base_url is None else base_url.rstrip("/")

    def resolve(self, token: str, *, email: str | None = None) -> TrackView:
        application = self.records.find_by_track_token(token)
        if application is None:
            raise NotFoundError(get_error_message("application_not_found"))
        if email is not None and application.email != email.strip().lower():
            # Same response as an unknown token; a mismatched email reveals nothing.
            raise NotFoundError(get_error_message("application_not_found"))

        try:
            job = get_job(self.db, application.job_id)
        except NotFoundError as e:
            logger.error(f"Application {application.id} references missing job {application.job_id}")
            raise PersistenceError("Application record is inconsistent") from e

        return self.build_view(application, job_title=job.title, company=job.company)

    def build_view(self, application: QuickApplication, *, job_title: str, company: str) -> TrackView:
        resume_url = ArtifactStore.public_url(application.resume_reference)
        pdf_url = ArtifactStore.public_url(application.pdf_reference)
        try:
            return TrackView(
                id=application.id,
                jobId=application.job_id,
                trackToken=application.track_token,
                name=application.name,
                email=application.email,
                phone=application.phone,
                message=application.message or "",
                jobTitle=job_title,
                company=company,
                status=application.status,
                appliedAt=isoformat_utc(application.applied_at),
                resumeUrl=resume_url,
                resumeUrlFull=f"{self.base_url}{resume_url}" if resume_url else None,
                pdfUrl=pdf_url,
                pdfUrlFull=f"{self.base_url}{pdf_url}" if pdf_url else None,
            )
        except SchemaValidationError as e:
            logger.error(f"Application {application.id} failed track view contract: {e}")
            raise PersistenceError("Application record is incomplete") from e
