"""
Pydantic schemas for the applicant dashboard.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class UserScoreSummary(BaseModel):
    """Rolling score statistics for one user."""
    average_score: int = 0
    latest_score: int = 0
    improvement: float = 0.0


class ATSScoreEntry(BaseModel):
    job_id: Optional[int] = None
    job_title: str = "Unknown Job"
    score: int
    keywords_matched: List[str] = Field(default_factory=list)
    skills_matched: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ResumeVersionEntry(BaseModel):
    id: int
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    creation_mode: str
    ats_score: Optional[int] = None
    ats_scores: List[ATSScoreEntry] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ApplicationEntry(BaseModel):
    id: int
    job_id: int
    job_title: str = "Unknown Job"
    ats_score: int = 0
    status: str
    submitted_at: Optional[datetime] = None


class DashboardStats(BaseModel):
    total_resumes: int = 0
    total_applications: int = 0
    average_score: int = 0
    latest_score: int = 0
    improvement: float = 0.0


class DashboardResponse(BaseModel):
    stats: DashboardStats
    resume_versions: List[ResumeVersionEntry]
    applications: List[ApplicationEntry]


class ResumeVersionCreate(BaseModel):
    """Add a resume version, optionally already scored against a job."""
    parsed_text: str = Field(..., min_length=1)
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    job_id: Optional[int] = None
    ats_score: Optional[int] = Field(None, ge=0, le=100)
