"""
JobPosting model for jobs published by recruiters.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON, Boolean, Float
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ats_portal.db.base import Base


class JobPosting(Base):
    """
    A job posting candidates apply to.
    
    Skills, requirements and experience level form the requirement set
    resumes are scored against.
    """
    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    experience_level = Column(String, nullable=False, default="mid")  # entry | mid | senior | executive
    employment_type = Column(String, nullable=True)
    location = Column(String, nullable=True)
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String, nullable=False, default="USD")

    is_public = Column(Boolean, nullable=False, default=True)
    status = Column(String, nullable=False, default="active", index=True)  # active | paused | closed | draft
    slug = Column(String, nullable=False, unique=True, index=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    application_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User", backref="job_postings")
    submissions = relationship(
        "Submission",
        back_populates="job",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index('idx_public_status', 'is_public', 'status'),
    )

    def __repr__(self):
        return f"<JobPosting(id={self.id}, slug='{self.slug}', title='{self.title}')>"
