from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(150), nullable=False)
    company = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(100), nullable=True)
    salary_range = Column(String(50), nullable=True)
    job_type = Column(String(30), nullable=True)
    experience_level = Column(String(30), nullable=True)
    skills_required = Column(Text, nullable=True)  # JSON string list
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    quick_applications = relationship("QuickApplication", back_populates="job")
