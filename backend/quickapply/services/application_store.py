import logging
import secrets
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import TRACK_TOKEN_BYTES, TRACK_TOKEN_MAX_ATTEMPTS
from ..models.quick_application import INITIAL_STATUS, QuickApplication
from ..utils.error_handlers import DuplicateApplicationError, PersistenceError, get_error_message
from ..utils.validation import is_well_formed_track_token

logger = logging.getLogger(__name__)


def new_track_token() -> str:
    return secrets.token_hex(TRACK_TOKEN_BYTES)


class ApplicationRecordStore:
    """
    Persistence for quick applications.

    `create` commits a fully populated row in one transaction, so readers either
    see the whole record or nothing. Track-token uniqueness is enforced by the
    unique index; a conflicting token is regenerated and the insert retried.
    """

    def __init__(
        self,
        db: Session,
        *,
        token_factory: Callable[[], str] = new_track_token,
        max_token_attempts: int = TRACK_TOKEN_MAX_ATTEMPTS,
    ):
        self.db = db
        self.token_factory = token_factory
        self.max_token_attempts = max(1, int(max_token_attempts))

    def create(
        self,
        *,
        job_id: int,
        name: str,
        email: str,
        resume_reference: str,
        phone: str | None = None,
        message: str | None = None,
        resume_original_filename: str | None = None,
        resume_content_type: str | None = None,
        resume_size_bytes: int = 0,
        pdf_reference: str | None = None,
        applied_at: datetime | None = None,
    ) -> QuickApplication:
        applied_at = applied_at or datetime.now(timezone.utc)
        for attempt in range(1, self.max_token_attempts + 1):
            token = self.token_factory()
            application = QuickApplication(
                job_id=int(job_id),
                name=name,
                email=email.lower(),
                phone=phone or None,
                message=message or "",
                resume_reference=resume_reference,
                resume_original_filename=resume_original_filename,
                resume_content_type=resume_content_type,
                resume_size_bytes=int(resume_size_bytes or 0),
                pdf_reference=pdf_reference,
                status=INITIAL_STATUS,
                track_token=token,
                applied_at=applied_at,
            )
            try:
                self.db.add(application)
                self.db.commit()
                self.db.refresh(application)
                return application
            except IntegrityError as e:
                self.db.rollback()
                if self._token_taken(token):
                    logger.warning(
                        f"Track token collision on attempt {attempt}/{self.max_token_attempts}; regenerating"
                    )
                    continue
                if self._job_email_taken(job_id, email):
                    raise DuplicateApplicationError() from e
                logger.error(f"Integrity error creating application for job {job_id}: {e}")
                raise PersistenceError(get_error_message("application_failed")) from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Database error creating application for job {job_id}: {e}")
                raise PersistenceError(get_error_message("application_failed")) from e

        raise PersistenceError(
            "Could not allocate a unique track token",
            details={"attempts": self.max_token_attempts},
        )

    def find_by_track_token(self, token: str) -> QuickApplication | None:
        if not is_well_formed_track_token(token):
            return None
        try:
            return self.db.query(QuickApplication).filter(QuickApplication.track_token == token).first()
        except SQLAlchemyError as e:
            logger.error(f"Database error looking up track token: {e}")
            raise PersistenceError() from e

    def find_by_job(self, job_id: int, *, email: str | None = None) -> list[QuickApplication]:
        try:
            q = self.db.query(QuickApplication).filter(QuickApplication.job_id == int(job_id))
            if email is not None:
                q = q.filter(QuickApplication.email == email.strip().lower())
            return q.order_by(QuickApplication.applied_at.desc(), QuickApplication.id.desc()).all()
        except SQLAlchemyError as e:
            logger.error(f"Database error listing applications for job {job_id}: {e}")
            raise PersistenceError() from e

    def _token_taken(self, token: str) -> bool:
        return self.db.query(QuickApplication.id).filter(QuickApplication.track_token == token).first() is not None

    def _job_email_taken(self, job_id: int, email: str) -> bool:
        return bool(self.find_by_job(job_id, email=email))
