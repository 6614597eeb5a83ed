"""
Database models module.

Imports every model so they are registered with SQLAlchemy's Base.metadata
before table creation.
"""
from ats_portal.db.models.user import User
from ats_portal.db.models.job_posting import JobPosting
from ats_portal.db.models.resume_version import ResumeVersion
from ats_portal.db.models.ats_score import ATSScore
from ats_portal.db.models.submission import Submission

__all__ = [
    "User",
    "JobPosting",
    "ResumeVersion",
    "ATSScore",
    "Submission",
]
