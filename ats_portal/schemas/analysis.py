"""
Pydantic schemas for scoring output.

AnalysisResult is the output shape of every job and generated-resume scoring
path, AI or heuristic. ResumeAnalysis is the standalone quality assessment
with per-section scores. Validation coerces model output: missing or
mistyped fields become empty lists / zero, scores are clamped into [0, 100].
"""
from typing import List
from pydantic import BaseModel, Field, field_validator

from ats_portal.schemas.coercion import LenientModel, clamp_score


class AnalysisResult(LenientModel):
    """Canonical analysis of a resume, optionally against a job."""
    ats_score: int = Field(0, ge=0, le=100, description="Overall ATS score 0-100")
    skills_matched: List[str] = Field(default_factory=list)
    skills_missing: List[str] = Field(default_factory=list)
    experience_match: int = Field(0, ge=0, le=100, description="Advisory experience fit 0-100")
    improvement_suggestions: List[str] = Field(default_factory=list)
    strengths_identified: List[str] = Field(default_factory=list)

    @field_validator("ats_score", "experience_match", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_score(value)

    class Config:
        json_schema_extra = {
            "example": {
                "ats_score": 72,
                "skills_matched": ["Python", "SQL"],
                "skills_missing": ["Kubernetes"],
                "experience_match": 60,
                "improvement_suggestions": ["Quantify achievements in recent roles"],
                "strengths_identified": ["Strong backend experience"],
            }
        }


class JobPostingDraft(LenientModel):
    """Job posting fields extracted from a recruiter's free-text description."""
    title: str = ""
    description: str = ""
    location: str = ""
    experience_level: str = "mid"
    employment_type: str = "full-time"
    salary_min: str = ""
    salary_max: str = ""
    salary_currency: str = "USD"
    skills: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    deadline: str = ""
    is_public: bool = True
    status: str = "active"

    @field_validator("experience_level", mode="after")
    @classmethod
    def _level(cls, value):
        return value.lower() if value.lower() in ("entry", "mid", "senior", "executive") else "mid"

    @field_validator("employment_type", mode="after")
    @classmethod
    def _employment(cls, value):
        allowed = ("full-time", "part-time", "contract", "internship", "freelance")
        return value.lower() if value.lower() in allowed else "full-time"

    @field_validator("salary_currency", mode="after")
    @classmethod
    def _currency(cls, value):
        return value.upper() if value.upper() in ("USD", "EUR", "GBP", "INR") else "USD"

    @field_validator("is_public", mode="before")
    @classmethod
    def _public(cls, value):
        return value is not False

    @field_validator("status", mode="after")
    @classmethod
    def _status(cls, value):
        return value.lower() if value.lower() in ("active", "draft") else "active"


# ============================================
# Standalone resume analysis (no job involved)
# ============================================

class SectionScore(LenientModel):
    score: int = Field(0, ge=0, le=100)
    feedback: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_score(value)


class ResumeSections(LenientModel):
    formatting: SectionScore = Field(default_factory=SectionScore)
    content: SectionScore = Field(default_factory=SectionScore)
    keywords: SectionScore = Field(default_factory=SectionScore)
    ats_compatibility: SectionScore = Field(default_factory=SectionScore)

    @field_validator("formatting", "content", "keywords", "ats_compatibility", mode="before")
    @classmethod
    def _section(cls, value):
        return value if isinstance(value, (dict, SectionScore)) else {}


class ToneAssessment(LenientModel):
    category: str = ""
    reasoning: str = ""


class ExtractedInfo(LenientModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    experience: str = ""
    education: str = ""
    skills: List[str] = Field(default_factory=list)


class ResumeAnalysis(LenientModel):
    """Quality assessment of a resume on its own, with per-section scores."""
    overall_score: int = Field(0, ge=0, le=100)
    tone: ToneAssessment = Field(default_factory=ToneAssessment)
    sections: ResumeSections = Field(default_factory=ResumeSections)
    extracted_info: ExtractedInfo = Field(default_factory=ExtractedInfo)
    improvements: List[str] = Field(default_factory=list)
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_score(value)

    @field_validator("tone", "sections", "extracted_info", mode="before")
    @classmethod
    def _nested(cls, value):
        return value if isinstance(value, (dict, BaseModel)) else {}
