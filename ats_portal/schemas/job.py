"""
Pydantic schemas for job posting endpoints.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from ats_portal.schemas.coercion import as_str, as_str_list

EXPERIENCE_LEVEL_PATTERN = "^(entry|mid|senior|executive)$"
EMPLOYMENT_TYPE_PATTERN = "^(full-time|part-time|contract|internship|freelance)$"
JOB_STATUS_PATTERN = "^(active|paused|closed|draft)$"


class JobRequirementSet(BaseModel):
    """What a resume is scored against. Read-only for the scoring services."""
    title: str = ""
    description: str = ""
    skills: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    experience_level: str = ""

    class Config:
        from_attributes = True

    @field_validator("title", "description", "experience_level", mode="before")
    @classmethod
    def _text(cls, value):
        return as_str(value)

    @field_validator("skills", "requirements", mode="before")
    @classmethod
    def _lists(cls, value):
        return as_str_list(value)


class JobBase(BaseModel):
    """Base job schema with common fields."""
    title: str = Field(..., description="Job title", min_length=1, max_length=200)
    description: str = Field(..., description="Job description", min_length=1, max_length=5000)
    location: Optional[str] = Field(None, description="Job location")
    experience_level: str = Field("mid", pattern=EXPERIENCE_LEVEL_PATTERN)
    employment_type: Optional[str] = Field(None, pattern=EMPLOYMENT_TYPE_PATTERN)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: str = Field("USD", max_length=3)
    skills: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    deadline: Optional[datetime] = None
    is_public: bool = True
    status: str = Field("active", pattern=JOB_STATUS_PATTERN)


class JobCreate(JobBase):
    """Schema for creating a new job posting."""
    pass


class JobUpdate(BaseModel):
    """Schema for updating an existing job posting. Only sent fields change."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    location: Optional[str] = None
    experience_level: Optional[str] = Field(None, pattern=EXPERIENCE_LEVEL_PATTERN)
    employment_type: Optional[str] = Field(None, pattern=EMPLOYMENT_TYPE_PATTERN)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: Optional[str] = Field(None, max_length=3)
    skills: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    deadline: Optional[datetime] = None
    is_public: Optional[bool] = None
    status: Optional[str] = Field(None, pattern=JOB_STATUS_PATTERN)


class JobResponse(JobBase):
    """Schema for job response."""
    id: int
    slug: str
    created_by: int
    application_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    """Schema for list of jobs response."""
    jobs: list[JobResponse]
    total: int
    page: int = 1
    page_size: int = 10


class JobGenerateRequest(BaseModel):
    """Chat-style messages describing a role; only user messages are used."""
    messages: List[dict] = Field(..., min_length=1)
