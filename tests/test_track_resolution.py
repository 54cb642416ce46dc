from datetime import datetime, timezone

import pytest

from backend.quickapply.services.application_store import ApplicationRecordStore
from backend.quickapply.services.track_resolution import TrackResolutionService, isoformat_utc
from backend.quickapply.utils.error_handlers import NotFoundError, PersistenceError

REQUIRED_FIELDS = ("name", "email", "jobTitle", "company", "status", "appliedAt", "resumeUrl")


@pytest.fixture()
def application(db_session, job):
    return ApplicationRecordStore(db_session).create(
        job_id=job.id,
        name="Jane Doe",
        email="jane@x.com",
        phone="555-0100",
        resume_reference="resumes/resume-1-abc.pdf",
        pdf_reference="summaries/summary-1-def.pdf",
    )


def test_resolve_exposes_required_fields(db_session, job, application):
    view = TrackResolutionService(db_session, base_url="https://api.example.com/").resolve(application.track_token)

    data = view.model_dump()
    for field in REQUIRED_FIELDS:
        assert data[field], field
    assert view.jobTitle == job.title
    assert view.company == job.company
    assert view.resumeUrl == "/uploads/resumes/resume-1-abc.pdf"
    assert view.resumeUrlFull == "https://api.example.com/uploads/resumes/resume-1-abc.pdf"
    assert view.pdfUrl == "/uploads/summaries/summary-1-def.pdf"
    assert view.pdfUrlFull == "https://api.example.com/uploads/summaries/summary-1-def.pdf"
    assert view.trackToken == application.track_token


def test_resolve_without_summary_has_no_pdf_url(db_session, make_job):
    job = make_job(title="Go Developer", company="GoServices")
    a = ApplicationRecordStore(db_session).create(
        job_id=job.id, name="John", email="john@x.com", resume_reference="resumes/r.pdf"
    )
    view = TrackResolutionService(db_session).resolve(a.track_token)
    assert view.pdfUrl is None
    assert view.pdfUrlFull is None
    assert view.message == ""


def test_resolve_unknown_token_is_not_found(db_session, application):
    with pytest.raises(NotFoundError):
        TrackResolutionService(db_session).resolve("e" * 48)


def test_resolve_with_mismatched_email_is_not_found(db_session, application):
    service = TrackResolutionService(db_session)
    assert service.resolve(application.track_token, email=" JANE@x.com ").email == "jane@x.com"
    with pytest.raises(NotFoundError):
        service.resolve(application.track_token, email="someone@else.com")


def test_incomplete_record_is_persistence_error_not_partial_view(db_session, application):
    with pytest.raises(PersistenceError):
        TrackResolutionService(db_session).build_view(application, job_title="", company="Tech Corp")


def test_isoformat_utc_treats_naive_values_as_utc():
    naive = datetime(2024, 5, 1, 12, 30)
    assert isoformat_utc(naive) == "2024-05-01T12:30:00+00:00"
    aware = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    assert isoformat_utc(aware) == "2024-05-01T12:30:00+00:00"
    assert isoformat_utc(None) is None
