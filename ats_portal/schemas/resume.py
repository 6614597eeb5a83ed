"""
Pydantic schemas for resume data.

ResumeDraft is what the guided intake (chat or form) collects.
ParsedResumeData is what resume parsing extracts from free text.
Both accept camelCase or snake_case keys and never hold None for
strings or lists.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from ats_portal.schemas.analysis import AnalysisResult, ResumeAnalysis
from ats_portal.schemas.coercion import LenientModel, as_dict_list, as_number


# ============================================
# Guided intake
# ============================================

class PersonalInfo(LenientModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    portfolio: str = ""


class Skill(LenientModel):
    name: str = ""
    proof: str = ""
    validated: bool = False

    @field_validator("validated", mode="before")
    @classmethod
    def _truthy(cls, value):
        # Forms send "true"/"1"; anything else is unvalidated
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1")
        return value is True or value == 1


class WorkExperience(LenientModel):
    company: str = ""
    title: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    achievements: List[str] = Field(default_factory=list)


class Education(LenientModel):
    school: str = ""
    degree: str = ""
    field: str = ""
    year: str = ""
    description: str = ""


class Project(LenientModel):
    name: str = ""
    description: str = ""
    technologies: List[str] = Field(default_factory=list)
    link: str = ""


class Achievement(LenientModel):
    title: str = ""
    description: str = ""
    date: str = ""


class ResumeDraft(LenientModel):
    """Structured, not-yet-scored candidate profile."""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    target_role: str = ""
    experience: str = Field("", description="Experience level label, e.g. '5 years'")
    skills: List[Skill] = Field(default_factory=list)
    work_experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)

    @field_validator("personal_info", mode="before")
    @classmethod
    def _personal_info(cls, value):
        return value if isinstance(value, (dict, PersonalInfo)) else {}

    @field_validator("skills", mode="before")
    @classmethod
    def _skills(cls, value):
        if not isinstance(value, (list, tuple)):
            return []
        skills = []
        for item in value:
            if isinstance(item, str) and item.strip():
                skills.append({"name": item.strip()})
            elif isinstance(item, (dict, Skill)):
                skills.append(item)
        return skills

    @field_validator("work_experience", "education", "projects", "achievements", mode="before")
    @classmethod
    def _sections(cls, value):
        if isinstance(value, (list, tuple)) and all(isinstance(v, BaseModel) for v in value):
            return list(value)
        return as_dict_list(value)


# ============================================
# Parsed free-text resume
# ============================================

class ParsedExperience(LenientModel):
    company: str = ""
    position: str = ""
    duration: str = ""
    description: str = ""


class ParsedEducation(LenientModel):
    institution: str = ""
    degree: str = ""
    year: str = ""


class ParsedResumeData(LenientModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: List[ParsedExperience] = Field(default_factory=list)
    education: List[ParsedEducation] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    summary: str = ""
    total_experience_years: float = 0.0

    @field_validator("experience", "education", mode="before")
    @classmethod
    def _entries(cls, value):
        if isinstance(value, (list, tuple)) and all(isinstance(v, BaseModel) for v in value):
            return list(value)
        return [item for item in as_dict_list(value) if isinstance(item, dict)]

    @field_validator("total_experience_years", mode="before")
    @classmethod
    def _years(cls, value):
        return max(0.0, as_number(value))


# ============================================
# Request/response models
# ============================================

class GenerateResumeRequest(BaseModel):
    data: ResumeDraft
    mode: str = Field("form", pattern="^(chat|form)$")


class GenerateResumeResponse(BaseModel):
    success: bool = True
    resume: dict
    ats_score: int
    analysis: AnalysisResult
    resume_version_id: Optional[int] = None
    metadata: dict = Field(default_factory=dict)


class SaveResumeRequest(BaseModel):
    structured_data: ResumeDraft
    generated_resume: dict
    creation_mode: str = Field(..., pattern="^(chat|form|upload)$")
    ats_score: Optional[int] = Field(None, ge=0, le=100)
    is_public: bool = False


class SaveResumeResponse(BaseModel):
    success: bool = True
    resume_version_id: int
    shareable_id: str
    share_url: str
    message: str = "Resume saved successfully"


class SharedResumeResponse(BaseModel):
    shareable_id: str
    generated_resume: Optional[dict] = None
    structured_data: Optional[dict] = None
    creation_mode: str
    ats_score: Optional[int] = None
    created_at: Optional[str] = None



class AnalyzeResumeRequest(BaseModel):
    resume_text: str = Field(..., min_length=1, description="Text extracted from the uploaded resume")
    file_name: Optional[str] = None
    file_type: Optional[str] = None


class AnalyzeResumeResponse(BaseModel):
    success: bool = True
    analysis: ResumeAnalysis
    resume_version_id: int
    analysis_source: str
