"""
Resume analysis service.

Builds prompts, makes exactly one completion call per operation, extracts
and validates the JSON reply, and falls back to the rule-based analysis in
score_calculator when the provider fails or the reply is unusable. Callers
always get a fully populated result and never see an AI failure.
"""
import json
import logging
import re
from functools import lru_cache
from typing import Callable, List, Optional, Union

from pydantic import ValidationError

from ats_portal.llm.errors import AIProviderUnavailable, ExtractionError
from ats_portal.llm.json_extract import extract_json
from ats_portal.llm.provider import LLMProvider
from ats_portal.llm.router import get_model_for_feature, get_provider
from ats_portal.schemas.analysis import AnalysisResult, JobPostingDraft, ResumeAnalysis
from ats_portal.schemas.job import JobRequirementSet
from ats_portal.schemas.resume import ParsedResumeData, ResumeDraft
from ats_portal.services.score_calculator import (
    heuristic_generated_analysis,
    heuristic_job_match,
    heuristic_resume_analysis,
)

logger = logging.getLogger(__name__)

# Prompt input limits (characters)
MAX_RESUME_CHARS = 6000
MAX_JOB_CHARS = 3000
FALLBACK_SUMMARY_CHARS = 200

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(r"(?:\+?1[-.\s]?)?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}")

# Errors that send an operation down the rule-based path
RECOVERABLE_ERRORS = (AIProviderUnavailable, ExtractionError, ValidationError)


PARSE_RESUME_PROMPT = """
Extract structured data from the resume text below. Return a JSON object with exactly these keys:
{{
  "name": "full name",
  "email": "email address",
  "phone": "phone number",
  "skills": ["skill", ...],
  "experience": [
    {{"company": "company name", "position": "job title", "duration": "e.g. 2020-2023", "description": "short description"}}
  ],
  "education": [
    {{"institution": "school or university", "degree": "degree and field", "year": "graduation year"}}
  ],
  "certifications": ["certification", ...],
  "summary": "short professional summary",
  "total_experience_years": number
}}

Compute total_experience_years from the work history. Use empty strings or empty arrays
for anything the resume does not state.

Resume text:
{resume_text}

Return ONLY the JSON object.
"""

RESUME_ANALYSIS_PROMPT = """
You are an ATS specialist. Assess the resume below on its own, without a specific job in mind.

Resume text:
{resume_text}

Return a JSON object with exactly these keys:
{{
  "overall_score": number (0-100),
  "tone": {{"category": "short label", "reasoning": "one sentence"}},
  "sections": {{
    "formatting": {{"score": number (0-100), "feedback": "string"}},
    "content": {{"score": number (0-100), "feedback": "string"}},
    "keywords": {{"score": number (0-100), "feedback": "string"}},
    "ats_compatibility": {{"score": number (0-100), "feedback": "string"}}
  }},
  "extracted_info": {{
    "name": "string", "email": "string", "phone": "string", "location": "string",
    "summary": "string", "experience": "string", "education": "string", "skills": ["skill", ...]
  }},
  "improvements": ["specific, actionable improvement", ...],
  "matched_skills": ["skill identified in the resume", ...],
  "missing_skills": ["skill worth adding", ...]
}}

Weigh ATS compatibility at 25%, content quality and quantified achievements at 25%, keywords at 25%,
presentation at 15% and extraction completeness at 10% when computing overall_score.
Return ONLY the JSON object.
"""

JOB_MATCH_PROMPT = """
Analyze this resume against the job posting and produce an ATS compatibility assessment.

Job posting:
Title: {title}
Description: {description}
Required skills: {skills}
Experience level: {experience_level}
Requirements: {requirements}

Candidate:
{candidate}

Return a JSON object with exactly these keys:
{{
  "ats_score": number (0-100),
  "skills_matched": ["skill", ...],
  "skills_missing": ["skill", ...],
  "experience_match": number (0-100),
  "improvement_suggestions": ["suggestion", ...],
  "strengths_identified": ["strength", ...]
}}

Weigh skill match at 40%, experience relevance at 30%, education at 15% and overall fit at 15%
when computing ats_score. experience_match rates only years and seniority against the level asked for.
Keep suggestions specific and actionable. Return ONLY the JSON object.
"""

GENERATED_RESUME_PROMPT = """
You are an ATS specialist reviewing a resume built through a guided questionnaire.
Target role: {target_role}
Experience level: {experience}

Resume data (JSON):
{resume_json}

Return a JSON object with exactly these keys:
{{
  "ats_score": number (0-100, how well this resume would pass ATS screening for the target role),
  "skills_matched": ["listed skills relevant to the target role"],
  "skills_missing": ["skills commonly expected for the target role that are absent"],
  "experience_match": number (0-100, how well the experience supports the target role),
  "improvement_suggestions": ["specific, actionable improvement"],
  "strengths_identified": ["strength"]
}}

Return ONLY the JSON object.
"""

JOB_POSTING_PROMPT = """
You are a job posting assistant. Extract a structured job posting from the recruiter's notes below,
considering every message. Leave a field empty when it cannot be determined.

Recruiter notes:
{conversation}

Return a JSON object with exactly these keys:
{{
  "title": "job title",
  "description": "detailed job description",
  "location": "job location",
  "experience_level": "entry | mid | senior | executive",
  "employment_type": "full-time | part-time | contract | internship | freelance",
  "salary_min": "minimum salary as a number string",
  "salary_max": "maximum salary as a number string",
  "salary_currency": "USD | EUR | GBP | INR",
  "skills": ["required skill", ...],
  "requirements": ["requirement", ...],
  "benefits": ["benefit", ...],
  "deadline": "YYYY-MM-DD if mentioned"
}}

Return ONLY the JSON object.
"""


def _join(items: List[str]) -> str:
    return ", ".join(items) if items else "Not specified"


def _as_requirements(job) -> JobRequirementSet:
    """Job data as a JobRequirementSet; unusable input becomes an empty one."""
    if isinstance(job, JobRequirementSet):
        return job
    if job is None:
        return JobRequirementSet()
    try:
        if isinstance(job, dict):
            return JobRequirementSet.model_validate(job)
        return JobRequirementSet.model_validate(job, from_attributes=True)
    except ValidationError as e:
        logger.warning(f"Unusable job data, scoring against empty requirements: {e}")
        return JobRequirementSet()


def fallback_parsed_data(resume_text: str) -> ParsedResumeData:
    """Minimal parsed-resume shell: contact details by regex, text head as summary."""
    text = resume_text or ""
    email = EMAIL_RE.search(text)
    phone = PHONE_RE.search(text)
    summary = text[:FALLBACK_SUMMARY_CHARS]
    if len(text) > FALLBACK_SUMMARY_CHARS:
        summary += "..."
    return ParsedResumeData(
        email=email.group(0) if email else "",
        phone=phone.group(0) if phone else "",
        summary=summary,
    )


class ResumeAnalysisService:
    """
    AI-backed resume analysis with a rule-based safety net.
    
    The provider is injected; None means "not configured" and every call
    goes straight to the rule-based path.
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        model_for: Optional[Callable[[str], Optional[str]]] = None,
    ):
        self.provider = provider
        self.model_for = model_for

    @property
    def ai_enabled(self) -> bool:
        return self.provider is not None

    def _complete(self, prompt: str, feature: str) -> str:
        """One completion call. Any provider failure becomes AIProviderUnavailable."""
        if self.provider is None:
            raise AIProviderUnavailable("No AI provider configured")

        model = self.model_for(feature) if self.model_for else None
        try:
            return self.provider.complete(prompt, model=model)
        except Exception as e:
            logger.error(f"AI completion failed for {feature}: {type(e).__name__}: {e}", exc_info=True)
            raise AIProviderUnavailable(str(e)) from e

    def _request_json(self, prompt: str, feature: str) -> dict:
        return extract_json(self._complete(prompt, feature))

    # ============================================
    # Resume parsing
    # ============================================

    def parse_resume(self, resume_text: str) -> ParsedResumeData:
        """Extract structured fields from free resume text."""
        prompt = PARSE_RESUME_PROMPT.format(resume_text=(resume_text or "")[:MAX_RESUME_CHARS])
        try:
            parsed = ParsedResumeData.model_validate(self._request_json(prompt, "resume_parse"))
            logger.info(f"Resume parsed: skills_count={len(parsed.skills)}, years={parsed.total_experience_years}")
            return parsed
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Resume parsing failed, using rule-based fallback: {e}")
            return fallback_parsed_data(resume_text)

    # ============================================
    # Standalone resume analysis
    # ============================================

    def analyze_resume(self, resume_text: str) -> ResumeAnalysis:
        """Assess a resume without a job: overall score, section scores and extracted info. Never raises."""
        prompt = RESUME_ANALYSIS_PROMPT.format(resume_text=(resume_text or "")[:MAX_RESUME_CHARS])
        try:
            result = ResumeAnalysis.model_validate(self._request_json(prompt, "resume_analysis"))
            logger.info(f"Resume analyzed: overall_score={result.overall_score}")
            return result
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Resume analysis failed, using rule-based fallback: {e}")
            return heuristic_resume_analysis(resume_text, fallback_parsed_data(resume_text))

    # ============================================
    # Job match
    # ============================================

    def _candidate_block(self, resume_text: str, parsed: Optional[ParsedResumeData]) -> str:
        if parsed is None:
            return f"Resume text:\n{(resume_text or '')[:MAX_RESUME_CHARS]}"
        lines = [
            f"Name: {parsed.name or 'Not specified'}",
            f"Skills: {_join(parsed.skills)}",
            f"Total experience: {parsed.total_experience_years:g} years",
            f"Summary: {parsed.summary or 'Not specified'}",
        ]
        if parsed.experience:
            roles = "; ".join(f"{e.position} at {e.company} ({e.duration})" for e in parsed.experience)
            lines.append(f"Experience: {roles}")
        if parsed.education:
            degrees = "; ".join(f"{e.degree}, {e.institution}" for e in parsed.education)
            lines.append(f"Education: {degrees}")
        if not parsed.skills and resume_text:
            # Parsing found nothing structured; give the model the raw text too
            lines.append(f"Resume text:\n{resume_text[:MAX_RESUME_CHARS]}")
        return "\n".join(lines)

    def analyze_for_job(
        self,
        resume_text: str,
        job: Union[JobRequirementSet, dict, object],
        parsed: Optional[ParsedResumeData] = None,
    ) -> AnalysisResult:
        """
        Score a resume against a job. Never raises.
        
        Args:
            resume_text: Raw resume text
            job: JobRequirementSet, dict, or a JobPosting row
            parsed: Structured resume data when already available
        """
        requirements = _as_requirements(job)
        prompt = JOB_MATCH_PROMPT.format(
            title=requirements.title or "Not specified",
            description=requirements.description[:MAX_JOB_CHARS] or "Not specified",
            skills=_join(requirements.skills),
            experience_level=requirements.experience_level or "Not specified",
            requirements=_join(requirements.requirements),
            candidate=self._candidate_block(resume_text, parsed),
        )
        try:
            result = AnalysisResult.model_validate(self._request_json(prompt, "job_match"))
            logger.info(f"Job match analyzed: job='{requirements.title}', ats_score={result.ats_score}")
            return result
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Job match analysis failed, using rule-based fallback: {e}")
            return heuristic_job_match(parsed or ParsedResumeData(), requirements, resume_text)

    # ============================================
    # Generated resume
    # ============================================

    def analyze_generated(self, resume: Union[ResumeDraft, dict]) -> AnalysisResult:
        """Analyze a resume built through the guided intake. Never raises."""
        draft = resume if isinstance(resume, ResumeDraft) else ResumeDraft.model_validate(resume or {})
        prompt = GENERATED_RESUME_PROMPT.format(
            target_role=draft.target_role or "Not specified",
            experience=draft.experience or "Not specified",
            resume_json=json.dumps(draft.model_dump(), indent=2)[:MAX_RESUME_CHARS],
        )
        try:
            result = AnalysisResult.model_validate(self._request_json(prompt, "generated_resume"))
            logger.info(f"Generated resume analyzed: ats_score={result.ats_score}")
            return result
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Generated resume analysis failed, using rule-based fallback: {e}")
            return heuristic_generated_analysis(draft)

    # ============================================
    # Job posting drafts
    # ============================================

    def generate_job_posting(self, messages: List[dict]) -> JobPostingDraft:
        """Turn a recruiter's free-text messages into a job posting draft."""
        conversation = "\n\n".join(
            str(message.get("content", "")).strip()
            for message in messages
            if isinstance(message, dict) and message.get("role", "user") == "user"
        )
        prompt = JOB_POSTING_PROMPT.format(conversation=conversation[:MAX_JOB_CHARS * 2])
        try:
            return JobPostingDraft.model_validate(self._request_json(prompt, "job_posting"))
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Job posting generation failed, returning plain draft: {e}")
            return JobPostingDraft(description=conversation)


@lru_cache(maxsize=1)
def _configured_provider() -> Optional[LLMProvider]:
    return get_provider()


def get_analysis_service() -> ResumeAnalysisService:
    """FastAPI dependency: service wired to the configured provider."""
    return ResumeAnalysisService(provider=_configured_provider(), model_for=get_model_for_feature)
