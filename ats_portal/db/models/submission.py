"""
Submission model: one application to a job posting, scored on arrival.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ats_portal.db.base import Base


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("job_postings.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    applicant_name = Column(String(100), nullable=False)
    applicant_email = Column(String, nullable=False, index=True)
    applicant_phone = Column(String, nullable=True)

    ats_score = Column(Integer, nullable=False, index=True)
    parsed_resume_data = Column(JSON, nullable=False)
    analysis = Column(JSON, nullable=False)  # AnalysisResult
    raw_resume_text = Column(Text, nullable=False)
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)

    status = Column(String, nullable=False, default="new", index=True)  # new | reviewed | shortlisted | rejected | hired
    review_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    job = relationship("JobPosting", back_populates="submissions")
    user = relationship("User", foreign_keys=[user_id], backref="submissions")

    __table_args__ = (
        Index('idx_job_submitted', 'job_id', 'submitted_at'),
    )

    def __repr__(self):
        return f"<Submission(id={self.id}, job_id={self.job_id}, ats_score={self.ats_score})>"
