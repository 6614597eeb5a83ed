"""
Deterministic resume scoring.

compute_score rates a structured resume draft for completeness (0-100).
The heuristic_* functions are the rule-based analyses used whenever the AI
provider is unavailable or its reply cannot be parsed; they live here so
there is one tested scoring module instead of copies per call site.
"""
import logging
import math
import re
from typing import Iterable, List, Optional, Tuple, Union

from ats_portal.schemas.analysis import (
    AnalysisResult,
    ExtractedInfo,
    ResumeAnalysis,
    ResumeSections,
    SectionScore,
    ToneAssessment,
)
from ats_portal.schemas.job import JobRequirementSet
from ats_portal.schemas.resume import ResumeDraft, ParsedResumeData

logger = logging.getLogger(__name__)

# Category weights, summing to 100
REQUIRED_PERSONAL_POINTS = 20
OPTIONAL_PERSONAL_POINTS = 5
TARGET_ROLE_POINTS = 15
EXPERIENCE_LEVEL_POINTS = 10
SKILLS_BASE_POINTS = 10
SKILLS_VALIDATED_POINTS = 10
WORK_EXPERIENCE_POINTS = 15
EDUCATION_POINTS = 10
PROJECTS_POINTS = 10
ACHIEVEMENTS_POINTS = 5

# Rule-based job match
SKILL_MATCH_WEIGHT = 0.6
POINTS_PER_EXPERIENCE_YEAR = 5
EXPERIENCE_MATCH_PER_YEAR = 20
NO_JOB_SKILLS_MATCH_PERCENT = 50.0

# Rule-based generated-resume analysis
SECTION_POINTS_TOTAL = 85
SKILL_BONUS_PER_SKILL = 3
SKILL_BONUS_CAP = 15
EXPERIENCE_MATCH_PER_ROLE = 25

# Rule-based standalone analysis: section weights of the overall score
ATS_COMPATIBILITY_WEIGHT = 0.25
CONTENT_WEIGHT = 0.25
KEYWORDS_WEIGHT = 0.25
FORMATTING_WEIGHT = 0.15
EXTRACTION_WEIGHT = 0.10
MIN_RESUME_WORDS = 150
MAX_RESUME_WORDS = 1000
POINTS_PER_LISTED_SKILL = 10
POINTS_PER_QUANTIFIED_RESULT = 10
POINTS_PER_ACTION_VERB = 5
CONTENT_BASE_POINTS = 20
ACTION_ORIENTED_VERB_COUNT = 3


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 away from zero for positives."""
    return int(math.floor(value + 0.5))


def _filled(*values: str) -> bool:
    return all(value and value.strip() for value in values)


def _as_draft(resume: Union[ResumeDraft, dict, None]) -> ResumeDraft:
    if isinstance(resume, ResumeDraft):
        return resume
    return ResumeDraft.model_validate(resume or {})


def _has_work(draft: ResumeDraft) -> bool:
    return any(_filled(entry.company, entry.title) for entry in draft.work_experience)


def _has_education(draft: ResumeDraft) -> bool:
    return any(_filled(entry.school, entry.degree) for entry in draft.education)


def _has_project(draft: ResumeDraft) -> bool:
    return any(_filled(entry.name, entry.description) for entry in draft.projects)


def _has_achievement(draft: ResumeDraft) -> bool:
    return any(_filled(entry.title, entry.description) for entry in draft.achievements)


def score_breakdown(resume: Union[ResumeDraft, dict, None]) -> dict:
    """Points earned per category, before capping and rounding."""
    draft = _as_draft(resume)
    info = draft.personal_info

    required = [info.full_name, info.email, info.phone, info.location]
    optional = [info.linkedin, info.portfolio]
    required_present = sum(1 for value in required if _filled(value))
    optional_present = sum(1 for value in optional if _filled(value))

    skills_points = 0.0
    if draft.skills:
        validated = sum(1 for skill in draft.skills if skill.validated)
        skills_points = SKILLS_BASE_POINTS + (validated / len(draft.skills)) * SKILLS_VALIDATED_POINTS

    return {
        "personal_info": (required_present / len(required)) * REQUIRED_PERSONAL_POINTS
        + (optional_present / len(optional)) * OPTIONAL_PERSONAL_POINTS,
        "target_role": TARGET_ROLE_POINTS if _filled(draft.target_role) else 0,
        "experience": EXPERIENCE_LEVEL_POINTS if _filled(draft.experience) else 0,
        "skills": skills_points,
        "work_experience": WORK_EXPERIENCE_POINTS if _has_work(draft) else 0,
        "education": EDUCATION_POINTS if _has_education(draft) else 0,
        "projects": PROJECTS_POINTS if _has_project(draft) else 0,
        "achievements": ACHIEVEMENTS_POINTS if _has_achievement(draft) else 0,
    }


def compute_score(resume: Union[ResumeDraft, dict, None]) -> int:
    """
    Completeness score of a structured resume draft, an integer in [0, 100].
    
    Pure and deterministic. Missing sections contribute 0; nothing raises.
    """
    breakdown = score_breakdown(resume)
    total = sum(breakdown.values())
    logger.debug(f"ATS score calculation: {breakdown}, total={total}")
    return min(round_half_up(total), 100)


# ============================================
# Rule-based fallbacks
# ============================================

def _skill_overlap(required: str, listed: Iterable[str]) -> bool:
    needle = required.lower()
    for skill in listed:
        candidate = skill.lower()
        if candidate and (candidate in needle or needle in candidate):
            return True
    return False


def match_skills(
    job_skills: List[str],
    resume_skills: List[str],
    resume_text: Optional[str] = None,
) -> Tuple[List[str], List[str]]:
    """
    Split job skills into (matched, missing) by case-insensitive containment.
    
    When the resume lists no skills at all, raw resume text is searched instead.
    """
    matched, missing = [], []
    text = (resume_text or "").lower() if not resume_skills else ""
    for skill in job_skills:
        if not skill.strip():
            continue
        if _skill_overlap(skill, resume_skills) or (text and skill.lower() in text):
            matched.append(skill)
        else:
            missing.append(skill)
    return matched, missing


def heuristic_job_match(
    parsed: ParsedResumeData,
    job: JobRequirementSet,
    resume_text: Optional[str] = None,
) -> AnalysisResult:
    """Rule-based job match: skill overlap ratio plus years of experience."""
    matched, missing = match_skills(job.skills, parsed.skills, resume_text)
    required_count = len(matched) + len(missing)

    match_percent = (len(matched) / required_count) * 100 if required_count else NO_JOB_SKILLS_MATCH_PERCENT
    years = parsed.total_experience_years
    ats_score = round_half_up(match_percent * SKILL_MATCH_WEIGHT + years * POINTS_PER_EXPERIENCE_YEAR)

    suggestions = []
    if missing:
        suggestions.append(f"Add experience with: {', '.join(missing[:3])}")
    if years == 0:
        suggestions.append("State your total years of relevant experience clearly")
    suggestions.append("Detailed AI feedback is unavailable right now; scores are rule-based")

    strengths = ["Basic resume parsing completed"]
    if matched:
        strengths.insert(0, f"Matches {len(matched)} of {required_count} required skills")

    return AnalysisResult(
        ats_score=ats_score,
        skills_matched=matched,
        skills_missing=missing,
        experience_match=years * EXPERIENCE_MATCH_PER_YEAR,
        improvement_suggestions=suggestions,
        strengths_identified=strengths,
    )


SECTION_LABELS = {
    "contact": "contact details",
    "target_role": "target role",
    "experience": "experience level",
    "skills": "skills",
    "work_experience": "work experience",
    "education": "education",
    "projects": "projects",
    "achievements": "achievements",
}


def section_completeness(resume: Union[ResumeDraft, dict, None]) -> Tuple[List[str], List[str]]:
    """Return (complete, incomplete) section keys of a resume draft."""
    draft = _as_draft(resume)
    checks = {
        "contact": _filled(draft.personal_info.full_name, draft.personal_info.email),
        "target_role": _filled(draft.target_role),
        "experience": _filled(draft.experience),
        "skills": bool(draft.skills),
        "work_experience": _has_work(draft),
        "education": _has_education(draft),
        "projects": _has_project(draft),
        "achievements": _has_achievement(draft),
    }
    complete = [key for key, ok in checks.items() if ok]
    incomplete = [key for key, ok in checks.items() if not ok]
    return complete, incomplete


def heuristic_generated_analysis(resume: Union[ResumeDraft, dict, None]) -> AnalysisResult:
    """Rule-based analysis of a generated resume: section completeness plus a skills bonus."""
    draft = _as_draft(resume)
    complete, incomplete = section_completeness(draft)

    section_points = (len(complete) / len(SECTION_LABELS)) * SECTION_POINTS_TOTAL
    skill_bonus = min(SKILL_BONUS_CAP, SKILL_BONUS_PER_SKILL * len(draft.skills))
    completed_roles = sum(1 for entry in draft.work_experience if _filled(entry.company, entry.title))

    return AnalysisResult(
        ats_score=round_half_up(section_points + skill_bonus),
        skills_matched=[skill.name for skill in draft.skills if skill.name],
        skills_missing=[],
        experience_match=completed_roles * EXPERIENCE_MATCH_PER_ROLE,
        improvement_suggestions=[f"Add your {SECTION_LABELS[key]}" for key in incomplete],
        strengths_identified=[f"Complete {SECTION_LABELS[key]} section" for key in complete],
    )


RESUME_HEADINGS = {
    "summary": ("summary", "professional summary", "profile", "objective"),
    "experience": ("experience", "work experience", "professional experience", "employment", "work history"),
    "education": ("education",),
    "skills": ("skills", "technical skills", "core skills"),
    "projects": ("projects",),
}
ACTION_VERBS = (
    "achieved", "built", "created", "delivered", "designed", "developed", "improved",
    "implemented", "increased", "launched", "led", "managed", "reduced", "shipped",
)
ACTION_VERB_RE = re.compile(r"\b(" + "|".join(ACTION_VERBS) + r")\b", re.IGNORECASE)
QUANTIFIED_RE = re.compile(r"\d+(?:\.\d+)?\s*%|\$\s?\d")
SKILL_SEPARATOR_RE = re.compile(r"[,;|•]")

HEADING_FORMAT_POINTS = 70
LENGTH_OK_POINTS = 30
LENGTH_OFF_POINTS = 10
CONTACT_POINTS = 25
HEADING_ATS_POINTS = 50


def _lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _heading_of(line: str) -> Optional[str]:
    label = line.split(":", 1)[0].strip().lower()
    for key, names in RESUME_HEADINGS.items():
        if label in names:
            return key
    return None


def find_resume_headings(text: str) -> List[str]:
    """Section keys whose heading starts a line, in RESUME_HEADINGS order."""
    found = {_heading_of(line) for line in _lines(text)}
    return [key for key in RESUME_HEADINGS if key in found]


def listed_skills(text: str) -> List[str]:
    """Skills from a "Skills: a, b" line, or the line after a bare skills heading."""
    lines = _lines(text)
    for index, line in enumerate(lines):
        if _heading_of(line) != "skills":
            continue
        _, _, rest = line.partition(":")
        if not rest.strip() and index + 1 < len(lines):
            rest = lines[index + 1]
        skills = [item.strip() for item in SKILL_SEPARATOR_RE.split(rest) if item.strip()]
        if skills:
            return skills
    return []


def _guess_name(text: str) -> str:
    lines = _lines(text)
    if not lines:
        return ""
    first = lines[0]
    if "@" in first or any(char.isdigit() for char in first) or _heading_of(first):
        return ""
    return first if 1 <= len(first.split()) <= 4 else ""


def heuristic_resume_analysis(resume_text: str, parsed: Optional[ParsedResumeData] = None) -> ResumeAnalysis:
    """
    Rule-based quality assessment of a resume on its own.
    
    Section headings, contact details, quantified results, action verbs and
    listed skills drive the four section scores; the overall score weighs
    them the same way the AI prompt does, with extraction completeness as
    the fifth part.
    """
    text = resume_text or ""
    parsed = parsed or ParsedResumeData()
    headings = find_resume_headings(text)
    missing_headings = [key for key in RESUME_HEADINGS if key not in headings]
    heading_ratio = len(headings) / len(RESUME_HEADINGS)
    word_count = len(text.split())
    quantified = len(QUANTIFIED_RE.findall(text))
    verbs = {match.lower() for match in ACTION_VERB_RE.findall(text)}
    skills = parsed.skills or listed_skills(text)

    if MIN_RESUME_WORDS <= word_count <= MAX_RESUME_WORDS:
        length_points = LENGTH_OK_POINTS
    else:
        length_points = LENGTH_OFF_POINTS if word_count else 0
    formatting = round_half_up(heading_ratio * HEADING_FORMAT_POINTS + length_points)

    content = 0
    if word_count:
        content = min(100, CONTENT_BASE_POINTS
                      + quantified * POINTS_PER_QUANTIFIED_RESULT
                      + len(verbs) * POINTS_PER_ACTION_VERB)

    keywords = min(100, len(skills) * POINTS_PER_LISTED_SKILL)

    ats_compatibility = round_half_up(
        (CONTACT_POINTS if parsed.email else 0)
        + (CONTACT_POINTS if parsed.phone else 0)
        + heading_ratio * HEADING_ATS_POINTS
    )

    info = ExtractedInfo(
        name=parsed.name or _guess_name(text),
        email=parsed.email,
        phone=parsed.phone,
        summary=parsed.summary,
        experience="; ".join(f"{e.position} at {e.company}" for e in parsed.experience if e.company),
        education="; ".join(f"{e.degree}, {e.institution}" for e in parsed.education if e.institution),
        skills=skills,
    )
    extracted = [info.name, info.email, info.phone, info.summary, info.skills]
    extraction = sum(1 for value in extracted if value) / len(extracted) * 100

    overall = round_half_up(
        ats_compatibility * ATS_COMPATIBILITY_WEIGHT
        + content * CONTENT_WEIGHT
        + keywords * KEYWORDS_WEIGHT
        + formatting * FORMATTING_WEIGHT
        + extraction * EXTRACTION_WEIGHT
    )

    improvements = [f"Add a {key} section" for key in missing_headings]
    if not parsed.email:
        improvements.append("Add your email address")
    if not parsed.phone:
        improvements.append("Add your phone number")
    if not quantified:
        improvements.append("Quantify achievements with percentages or amounts")
    if word_count < MIN_RESUME_WORDS:
        improvements.append("Expand the resume with more detail on your roles and results")
    elif word_count > MAX_RESUME_WORDS:
        improvements.append("Shorten the resume to the most relevant experience")
    improvements.append("Detailed AI feedback is unavailable right now; scores are rule-based")

    if len(verbs) >= ACTION_ORIENTED_VERB_COUNT:
        tone = ToneAssessment(category="Action-oriented", reasoning=f"Uses {len(verbs)} distinct action verbs")
    else:
        tone = ToneAssessment(category="Descriptive", reasoning="Few achievements are led by action verbs")

    logger.debug(
        f"Standalone resume analysis: headings={headings}, words={word_count}, "
        f"quantified={quantified}, verbs={len(verbs)}, skills={len(skills)}, overall={overall}"
    )
    return ResumeAnalysis(
        overall_score=overall,
        tone=tone,
        sections=ResumeSections(
            formatting=SectionScore(score=formatting, feedback=f"{len(headings)} of {len(RESUME_HEADINGS)} standard sections found, {word_count} words"),
            content=SectionScore(score=content, feedback=f"{quantified} quantified results, {len(verbs)} action verbs"),
            keywords=SectionScore(score=keywords, feedback=f"{len(skills)} skills listed"),
            ats_compatibility=SectionScore(score=ats_compatibility, feedback="Contact details and section headings checked"),
        ),
        extracted_info=info,
        improvements=improvements,
        matched_skills=skills,
        missing_skills=[],
    )
