from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ats_portal.db.base import Base


class ATSScore(Base):
    """A resume version scored against one job."""
    __tablename__ = "ats_scores"

    id = Column(Integer, primary_key=True, index=True)
    resume_version_id = Column(Integer, ForeignKey("resume_versions.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("job_postings.id", ondelete="SET NULL"), nullable=True, index=True)
    # Set when the score came from a job submission; that Submission is the scored event
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=True, index=True)
    score = Column(Integer, nullable=False)
    keywords_matched = Column(JSON, nullable=False, default=list)
    skills_matched = Column(JSON, nullable=False, default=list)
    experience_years = Column(Float, nullable=False, default=0)
    # Nullable: aggregation falls back to the parent version's timestamp
    created_at = Column(DateTime(timezone=True), nullable=True)

    resume_version = relationship("ResumeVersion", back_populates="ats_scores")
    job = relationship("JobPosting")
