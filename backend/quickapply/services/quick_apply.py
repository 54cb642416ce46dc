"""
Quick-apply submission: the no-account, single-step application flow.

    received -> validated -> stored -> recorded -> completed
                   (failed is reachable from any non-terminal state)

Validation has no side effects. Once the resume is stored, a failure to
write the record leaves the artifact orphaned; it is not rolled back here
(cleanup of unreferenced artifacts is a separate maintenance task). The
summary PDF and the confirmation email are best-effort.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from pathlib import Path
from typing import Callable
from urllib.parse import quote

from sqlalchemy.orm import Session

from .. import config
from ..models.quick_application import QuickApplication
from ..utils.error_handlers import (
    DuplicateApplicationError,
    FileTooLargeError,
    FileUploadError,
    ValidationError,
    get_error_message,
)
from ..utils.validation import (
    sanitize_filename,
    validate_email,
    validate_resume_extension,
    validate_string_field,
)
from . import emailer
from .application_store import ApplicationRecordStore
from .artifact_store import SUMMARIES_SUBDIR, ArtifactStore
from .job_catalog import get_job
from .summary_pdf import render_application_summary

logger = logging.getLogger(__name__)

DEFAULT_ORIGINAL_FILENAME = "resume.pdf"


class SubmissionState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    STORED = "stored"
    RECORDED = "recorded"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS = {
    SubmissionState.RECEIVED: {SubmissionState.VALIDATED, SubmissionState.FAILED},
    SubmissionState.VALIDATED: {SubmissionState.STORED, SubmissionState.FAILED},
    SubmissionState.STORED: {SubmissionState.RECORDED, SubmissionState.FAILED},
    SubmissionState.RECORDED: {SubmissionState.COMPLETED, SubmissionState.FAILED},
    SubmissionState.COMPLETED: set(),
    SubmissionState.FAILED: set(),
}


@dataclass
class Submission:
    job_id: int
    state: SubmissionState = SubmissionState.RECEIVED
    history: list[SubmissionState] = field(default_factory=lambda: [SubmissionState.RECEIVED])

    def advance(self, new_state: SubmissionState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal submission transition {self.state.value} -> {new_state.value}")
        logger.info(f"Quick-apply job={self.job_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)


@dataclass
class QuickApplyResult:
    track_token: str
    application: QuickApplication
    track_url: str
    submission: Submission


def build_track_url(track_token: str, email: str | None = None) -> str:
    url = f"{config.CLIENT_ORIGIN}/track?token={quote(track_token)}"
    if email:
        url += f"&email={quote(email)}"
    return url


def _safe_original_filename(filename: str | None) -> str:
    # The client name only contributes an extension; unusable names fall back to the default.
    if not filename:
        return DEFAULT_ORIGINAL_FILENAME
    try:
        return sanitize_filename(Path(filename).name)
    except FileUploadError:
        logger.info(f"Unusable resume filename {filename!r}; using {DEFAULT_ORIGINAL_FILENAME}")
        return DEFAULT_ORIGINAL_FILENAME


class QuickApplyService:
    def __init__(
        self,
        db: Session,
        artifacts: ArtifactStore,
        *,
        records: ApplicationRecordStore | None = None,
        render_summary: bool | None = None,
        send_email: Callable[..., None] | None = None,
        max_resume_bytes: int | None = None,
    ):
        self.db = db
        self.artifacts = artifacts
        self.records = records or ApplicationRecordStore(db)
        self.render_summary = config.SUMMARY_PDF_ENABLED if render_summary is None else render_summary
        self.send_email = send_email
        self.max_resume_bytes = max_resume_bytes or config.MAX_RESUME_BYTES
        self.last_submission: Submission | None = None

    def submit(
        self,
        *,
        job_id,
        name: str | None,
        email: str | None,
        phone: str | None = None,
        message: str | None = None,
        filename: str | None = None,
        content: bytes | None = None,
        content_type: str | None = None,
    ) -> QuickApplyResult:
        submission = Submission(job_id=job_id)
        self.last_submission = submission
        try:
            return self._run(
                submission,
                job_id=job_id,
                name=name,
                email=email,
                phone=phone,
                message=message,
                filename=filename,
                content=content,
                content_type=content_type,
            )
        except Exception:
            if submission.state is not SubmissionState.COMPLETED:
                submission.advance(SubmissionState.FAILED)
            raise

    def _run(self, submission: Submission, *, job_id, name, email, phone, message, filename, content, content_type):
        # 1. validate (no side effects)
        job = get_job(self.db, job_id)
        name = validate_string_field(name, "Name", min_length=1, max_length=255, required=True)
        email = validate_email(email)
        phone = validate_string_field(phone, "Phone", min_length=1, max_length=30, required=False)
        message = validate_string_field(message, "Message", min_length=0, max_length=5000, required=False)

        if content is None:
            raise ValidationError(get_error_message("file_required"))
        if len(content) == 0:
            raise ValidationError(get_error_message("file_empty"))
        if len(content) > self.max_resume_bytes:
            raise FileTooLargeError(limit_bytes=self.max_resume_bytes)
        original_filename = _safe_original_filename(filename)
        validate_resume_extension(original_filename)

        if self.records.find_by_job(job.id, email=email):
            raise DuplicateApplicationError()
        submission.advance(SubmissionState.VALIDATED)

        # 2. store artifact
        resume_reference = self.artifacts.store(content, original_filename)
        submission.advance(SubmissionState.STORED)

        applied_at = datetime.now(timezone.utc)
        summary_pdf, pdf_reference = self._render_summary(
            job=job, name=name, email=email, phone=phone, message=message, applied_at=applied_at
        )

        # 3. create record (mints the track token)
        application = self.records.create(
            job_id=job.id,
            name=name,
            email=email,
            phone=phone,
            message=message,
            resume_reference=resume_reference,
            resume_original_filename=original_filename,
            resume_content_type=content_type,
            resume_size_bytes=len(content),
            pdf_reference=pdf_reference,
            applied_at=applied_at,
        )
        submission.advance(SubmissionState.RECORDED)

        track_url = build_track_url(application.track_token, application.email)
        self._notify(application, job=job, track_url=track_url, summary_pdf=summary_pdf)

        submission.advance(SubmissionState.COMPLETED)
        logger.info(f"Quick application {application.id} recorded for job {job.id}")
        return QuickApplyResult(
            track_token=application.track_token,
            application=application,
            track_url=track_url,
            submission=submission,
        )

    def _render_summary(self, *, job, name, email, phone, message, applied_at) -> tuple[bytes | None, str | None]:
        if not self.render_summary:
            return None, None
        try:
            pdf_bytes = render_application_summary(
                job=job, name=name, email=email, phone=phone, message=message, applied_at=applied_at
            )
            reference = self.artifacts.store(pdf_bytes, "summary.pdf", prefix="summary", subdir=SUMMARIES_SUBDIR)
        except Exception as e:
            logger.warning(f"Summary PDF generation failed for job {job.id}: {e}")
            return None, None
        return pdf_bytes, reference

    def _notify(self, application: QuickApplication, *, job, track_url: str, summary_pdf: bytes | None) -> None:
        send = self.send_email
        if send is None:
            if not emailer.smtp_configured():
                logger.info("SMTP not configured; skipping confirmation email")
                return
            send = emailer.send_application_received_email
        try:
            send(
                to_email=application.email,
                applicant_name=application.name,
                job_title=job.title,
                company=job.company,
                status=application.status,
                track_url=track_url,
                summary_pdf=summary_pdf,
            )
        except Exception as e:
            logger.warning(f"Confirmation email failed for application {application.id}: {e}")
