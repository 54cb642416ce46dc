from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from ..services.artifact_store import RESUMES_SUBDIR, SUMMARIES_SUBDIR, ArtifactStore
from ..utils.dependencies import get_artifact_store
from ..utils.error_handlers import NotFoundError, ValidationError

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])

_SUBDIRS = {"resume": RESUMES_SUBDIR, "pdf": SUMMARIES_SUBDIR}


@router.get("/download")
def download(
    type: str | None = Query(None),
    file: str | None = Query(None),
    artifacts: ArtifactStore = Depends(get_artifact_store),
):
    """Download a stored artifact as an attachment."""
    if not type or not file:
        raise ValidationError("type and file required")
    if type not in _SUBDIRS:
        raise ValidationError("invalid type")
    if ".." in file or "/" in file or "\\" in file:
        raise ValidationError("invalid filename")

    reference = f"{_SUBDIRS[type]}/{file}"
    if not artifacts.exists(reference):
        raise NotFoundError("File not found")

    path = artifacts.absolute_path(reference)
    media_type = "application/pdf" if path.suffix.lower() == ".pdf" else "application/octet-stream"
    return FileResponse(path, media_type=media_type, filename=path.name)
