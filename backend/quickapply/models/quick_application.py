from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base


APPLICATION_STATUSES = ("submitted", "reviewed", "rejected", "accepted")
INITIAL_STATUS = "submitted"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuickApplication(Base):
    __tablename__ = "quick_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "email", name="uq_quick_applications_job_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)  # stored lower-cased
    phone = Column(String(30), nullable=True)
    message = Column(Text, nullable=False, default="")
    # Relative path under UPLOAD_DIR (portable across machines)
    resume_reference = Column(String(500), nullable=False)
    resume_original_filename = Column(String(255), nullable=True)
    resume_content_type = Column(String(120), nullable=True)
    resume_size_bytes = Column(Integer, nullable=False, default=0)
    # Generated application summary; NULL when rendering was skipped or failed.
    pdf_reference = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=INITIAL_STATUS)
    track_token = Column(String(128), nullable=False, unique=True, index=True)
    applied_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    job = relationship("Job", back_populates="quick_applications")
