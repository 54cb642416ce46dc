from concurrent.futures import ThreadPoolExecutor

import pytest

from backend.quickapply.models.quick_application import QuickApplication
from backend.quickapply.services.application_store import ApplicationRecordStore
from backend.quickapply.services.artifact_store import ArtifactStore
from backend.quickapply.services.quick_apply import QuickApplyService, Submission, SubmissionState
from backend.quickapply.services.track_resolution import TrackResolutionService
from backend.quickapply.utils.error_handlers import (
    NotFoundError,
    PersistenceError,
    StorageError,
    ValidationError,
)


def _submit(service, job_id, **overrides):
    fields = {
        "job_id": job_id,
        "name": "Jane Doe",
        "email": "jane@x.com",
        "phone": "555-0100",
        "message": "Interested",
        "filename": "resume.pdf",
        "content": b"%PDF-1.4\n%resume012\n",
        "content_type": "application/pdf",
    }
    fields.update(overrides)
    return service.submit(**fields)


class FailingRecords(ApplicationRecordStore):
    def create(self, **kwargs):
        raise PersistenceError("Failed to save application")


def test_successful_submission_walks_every_state(db_session, artifacts, job):
    service = QuickApplyService(db_session, artifacts, render_summary=False)
    result = _submit(service, job.id)

    assert result.submission.state is SubmissionState.COMPLETED
    assert result.submission.history == [
        SubmissionState.RECEIVED,
        SubmissionState.VALIDATED,
        SubmissionState.STORED,
        SubmissionState.RECORDED,
        SubmissionState.COMPLETED,
    ]
    assert result.application.pdf_reference is None
    assert result.application.resume_size_bytes == 20
    assert result.application.resume_original_filename == "resume.pdf"


def test_submitted_token_resolves_immediately(db_session, artifacts, job):
    result = _submit(QuickApplyService(db_session, artifacts), job.id)
    view = TrackResolutionService(db_session).resolve(result.track_token)

    assert view.name == "Jane Doe"
    assert view.jobTitle == job.title
    assert view.status == "submitted"
    assert view.pdfUrl and view.pdfUrl.startswith("/uploads/summaries/")
    assert artifacts.read(result.application.resume_reference) == b"%PDF-1.4\n%resume012\n"


def test_validation_failure_ends_in_failed_state(db_session, artifacts, job):
    service = QuickApplyService(db_session, artifacts)
    with pytest.raises(ValidationError):
        _submit(service, job.id, email="")

    assert service.last_submission.state is SubmissionState.FAILED
    assert service.last_submission.history == [SubmissionState.RECEIVED, SubmissionState.FAILED]
    assert artifacts.list_references() == []


def test_unknown_job_is_not_found(db_session, artifacts):
    with pytest.raises(NotFoundError):
        _submit(QuickApplyService(db_session, artifacts), 31337)
    assert artifacts.list_references() == []


def test_storage_failure_creates_no_record(db_session, job, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    service = QuickApplyService(db_session, ArtifactStore(blocker))

    with pytest.raises(StorageError):
        _submit(service, job.id)
    assert service.last_submission.history[-2:] == [SubmissionState.VALIDATED, SubmissionState.FAILED]
    assert db_session.query(QuickApplication).count() == 0


def test_record_failure_leaves_orphaned_artifact_and_no_token(db_session, artifacts, job):
    service = QuickApplyService(
        db_session, artifacts, records=FailingRecords(db_session), render_summary=False
    )
    with pytest.raises(PersistenceError):
        _submit(service, job.id)

    assert service.last_submission.history[-2:] == [SubmissionState.STORED, SubmissionState.FAILED]
    assert len(artifacts.list_references()) == 1
    assert db_session.query(QuickApplication).count() == 0

    # A manual retry succeeds with a second artifact and exactly one record.
    result = _submit(QuickApplyService(db_session, artifacts, render_summary=False), job.id)
    assert result.track_token
    assert len(artifacts.list_references()) == 2
    assert db_session.query(QuickApplication).count() == 1


def test_confirmation_email_receives_track_url_and_summary(db_session, artifacts, job):
    sent = []
    service = QuickApplyService(db_session, artifacts, send_email=lambda **kw: sent.append(kw))
    result = _submit(service, job.id)

    assert len(sent) == 1
    assert sent[0]["to_email"] == "jane@x.com"
    assert sent[0]["job_title"] == job.title
    assert result.track_token in sent[0]["track_url"]
    assert sent[0]["summary_pdf"].startswith(b"%PDF")


def test_email_failure_does_not_fail_submission(db_session, artifacts, job):
    def boom(**kwargs):
        raise RuntimeError("SMTP down")

    result = _submit(QuickApplyService(db_session, artifacts, send_email=boom), job.id)
    assert result.submission.state is SubmissionState.COMPLETED


def test_summary_failure_does_not_fail_submission(db_session, artifacts, job, monkeypatch):
    from backend.quickapply.services import quick_apply

    def broken(**kwargs):
        raise ValueError("font missing")

    monkeypatch.setattr(quick_apply, "render_application_summary", broken)
    result = _submit(QuickApplyService(db_session, artifacts, render_summary=True), job.id)
    assert result.application.pdf_reference is None
    assert artifacts.list_references("summaries") == []


def test_unusable_filename_falls_back_to_default_name(db_session, artifacts, job):
    result = _submit(QuickApplyService(db_session, artifacts, render_summary=False), job.id, filename="..")

    assert result.submission.state is SubmissionState.COMPLETED
    assert result.application.resume_original_filename == "resume.pdf"
    assert result.application.resume_reference.endswith(".pdf")


def test_illegal_transition_is_rejected():
    s = Submission(job_id=1)
    with pytest.raises(RuntimeError):
        s.advance(SubmissionState.RECORDED)


def test_concurrent_submissions_mint_distinct_tokens(database, artifacts, job):
    job_id = job.id

    def submit(i):
        session = database.SessionLocal()
        try:
            service = QuickApplyService(session, artifacts, render_summary=False)
            return _submit(
                service,
                job_id,
                name=f"Applicant {i}",
                email=f"applicant{i}@example.com",
                content=f"%PDF-1.4 resume {i}".encode(),
            ).track_token
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        tokens = list(pool.map(submit, range(8)))

    assert len(set(tokens)) == 8
    assert len(artifacts.list_references()) == 8
    with database.SessionLocal() as session:
        assert session.query(QuickApplication).count() == 8
