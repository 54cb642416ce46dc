from pydantic import BaseModel, Field, field_validator

from ..models.quick_application import APPLICATION_STATUSES


class TrackView(BaseModel):
    """Public view of a quick application, resolved from its track token."""

    # Always present and non-empty whenever the record exists.
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    jobTitle: str = Field(min_length=1)
    company: str = Field(min_length=1)
    status: str
    appliedAt: str = Field(min_length=1)
    resumeUrl: str = Field(min_length=1)

    id: int
    jobId: int
    trackToken: str
    phone: str | None = None
    message: str = ""
    resumeUrlFull: str
    pdfUrl: str | None = None
    pdfUrlFull: str | None = None

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str) -> str:
        if v not in APPLICATION_STATUSES:
            raise ValueError(f"unknown status {v!r}")
        return v


class QuickApplySummary(BaseModel):
    id: int
    jobId: int
    status: str
    trackToken: str
    resumeUrl: str
    resumeUrlFull: str
    pdfUrl: str | None = None
    pdfUrlFull: str | None = None


class QuickApplyResponse(BaseModel):
    success: bool = True
    message: str = "Application received"
    trackToken: str
    trackUrl: str
    application: QuickApplySummary
