import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ..config import API_BASE_URL, MAX_RESUME_BYTES
from ..database import get_db
from ..schemas.quick_apply import QuickApplyResponse, QuickApplySummary
from ..services.artifact_store import ArtifactStore
from ..services.quick_apply import QuickApplyService
from ..utils.dependencies import get_artifact_store
from ..utils.error_handlers import FileTooLargeError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])

CHUNK_SIZE = 1024 * 1024  # 1MB


async def _read_upload(file: UploadFile | None) -> bytes | None:
    if file is None:
        return None
    chunks: list[bytes] = []
    size = 0
    try:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > MAX_RESUME_BYTES:
                raise FileTooLargeError(limit_bytes=MAX_RESUME_BYTES)
            chunks.append(chunk)
    finally:
        await file.close()
    return b"".join(chunks)


@router.post("/{job_id}/quick-apply", status_code=201, response_model=QuickApplyResponse)
async def quick_apply(
    job_id: str,
    name: str | None = Form(None),
    email: str | None = Form(None),
    phone: str | None = Form(None),
    message: str | None = Form(None),
    resume: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    artifacts: ArtifactStore = Depends(get_artifact_store),
):
    """
    Guest flow: no account, resume + contact fields in one multipart request.
    Returns the track token the applicant uses to check status later.
    """
    content = await _read_upload(resume)
    result = QuickApplyService(db, artifacts).submit(
        job_id=job_id,
        name=name,
        email=email,
        phone=phone,
        message=message,
        filename=resume.filename if resume else None,
        content=content,
        content_type=resume.content_type if resume else None,
    )

    a = result.application
    resume_url = ArtifactStore.public_url(a.resume_reference)
    pdf_url = ArtifactStore.public_url(a.pdf_reference)
    return QuickApplyResponse(
        trackToken=result.track_token,
        trackUrl=result.track_url,
        application=QuickApplySummary(
            id=a.id,
            jobId=a.job_id,
            status=a.status,
            trackToken=a.track_token,
            resumeUrl=resume_url,
            resumeUrlFull=f"{API_BASE_URL}{resume_url}",
            pdfUrl=pdf_url,
            pdfUrlFull=f"{API_BASE_URL}{pdf_url}" if pdf_url else None,
        ),
    )
