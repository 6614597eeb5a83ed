"""
Deterministic generated-resume content from an intake draft.
"""
import secrets
from typing import Union

from ats_portal.schemas.resume import ResumeDraft


def generate_summary(draft: ResumeDraft) -> str:
    role = draft.target_role or "professional"
    if draft.experience:
        return (
            f"Experienced {role} with {draft.experience} of professional experience. "
            f"Proven track record of delivering high-quality results."
        )
    return f"Motivated {role} focused on delivering high-quality results."


def build_resume_content(resume: Union[ResumeDraft, dict]) -> dict:
    draft = resume if isinstance(resume, ResumeDraft) else ResumeDraft.model_validate(resume or {})
    return {
        "personal_info": draft.personal_info.model_dump(),
        "summary": generate_summary(draft),
        "experience": [entry.model_dump() for entry in draft.work_experience],
        "education": [entry.model_dump() for entry in draft.education],
        "skills": [skill.name for skill in draft.skills if skill.name],
        "projects": [entry.model_dump() for entry in draft.projects],
        "achievements": [entry.model_dump() for entry in draft.achievements],
    }


def new_shareable_id() -> str:
    return secrets.token_urlsafe(12)
