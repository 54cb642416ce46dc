from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.track_resolution import TrackResolutionService
from ..utils.error_handlers import ValidationError, get_error_message

router = APIRouter(prefix="/api/applications", tags=["Applications"])


def _track_payload(view) -> dict:
    data = view.model_dump()
    # Fields are mirrored at the top level for clients that read them there.
    return {"success": True, "application": data, **data}


@router.get("/track")
def track_by_query(
    token: str | None = Query(None),
    email: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """Public tracking link from the confirmation email: both token and email are required."""
    if not token or not email:
        raise ValidationError(get_error_message("track_params_required"))
    return _track_payload(TrackResolutionService(db).resolve(token, email=email))


@router.get("/track/{token}")
def track(token: str, db: Session = Depends(get_db)):
    return _track_payload(TrackResolutionService(db).resolve(token))
