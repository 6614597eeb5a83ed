"""
Pydantic schemas for job applications (submissions).
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr

from ats_portal.schemas.analysis import AnalysisResult
from ats_portal.schemas.resume import ParsedResumeData

SUBMISSION_STATUS_PATTERN = "^(new|reviewed|shortlisted|rejected|hired)$"


class SubmissionCreate(BaseModel):
    """Application to a job posting with already-extracted resume text."""
    job_slug: str = Field(..., min_length=1)
    applicant_name: str = Field(..., min_length=1, max_length=100)
    applicant_email: EmailStr
    applicant_phone: Optional[str] = None
    resume_text: str = Field(..., min_length=1, description="Resume text extracted by the upload layer")
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    create_profile: bool = Field(False, description="Also store the resume as a version on the applicant's profile")


class SubmissionResponse(BaseModel):
    id: int
    job_id: int
    user_id: Optional[int] = None
    applicant_name: str
    applicant_email: str
    applicant_phone: Optional[str] = None
    ats_score: int
    parsed_resume_data: ParsedResumeData
    analysis: AnalysisResult
    file_name: Optional[str] = None
    status: str
    submitted_at: datetime

    class Config:
        from_attributes = True


class SubmissionListResponse(BaseModel):
    submissions: List[SubmissionResponse]
    total: int


class SubmissionStatusUpdate(BaseModel):
    status: str = Field(..., pattern=SUBMISSION_STATUS_PATTERN)
    review_notes: Optional[str] = None
