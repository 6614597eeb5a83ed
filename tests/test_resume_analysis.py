"""
Tests for the resume analysis service: AI replies are validated and
coerced, and every failure falls back to a complete rule-based result.
"""
import json
import pytest

from ats_portal.schemas.analysis import AnalysisResult, ResumeAnalysis
from ats_portal.schemas.job import JobRequirementSet
from ats_portal.schemas.resume import ParsedResumeData
from ats_portal.services.resume_analysis import ResumeAnalysisService, fallback_parsed_data
from tests.conftest import FakeProvider


RESUME_TEXT = (
    "Ada Lovelace\nada@example.com | (555) 123-4567\n"
    "Python developer with 3 years building data pipelines on PostgreSQL."
)

JOB = JobRequirementSet(
    title="Backend Engineer",
    description="Build APIs",
    skills=["Python", "Kubernetes"],
    experience_level="mid",
)

ANALYSIS_FIELDS = set(AnalysisResult.model_fields)


def assert_complete(result: AnalysisResult):
    assert set(result.model_dump()) == ANALYSIS_FIELDS
    assert 0 <= result.ats_score <= 100
    assert 0 <= result.experience_match <= 100
    for name in ("skills_matched", "skills_missing", "improvement_suggestions", "strengths_identified"):
        assert isinstance(getattr(result, name), list)


# ============================================
# No provider / provider failures
# ============================================

def test_no_provider_uses_rule_based_path():
    service = ResumeAnalysisService(provider=None)
    assert not service.ai_enabled

    result = service.analyze_for_job(RESUME_TEXT, JOB)

    assert_complete(result)
    assert result.skills_matched == ["Python"]
    assert result.skills_missing == ["Kubernetes"]
    assert result.ats_score == 30


@pytest.mark.parametrize("reply", [
    RuntimeError("connection reset"),
    TimeoutError("timed out"),
    "I'm sorry, I can't help with that.",
    "",
    '{"ats_score": "high", "skills_matched": ',
])
def test_failed_or_malformed_reply_falls_back(reply):
    provider = FakeProvider(reply)
    service = ResumeAnalysisService(provider=provider)

    result = service.analyze_for_job(RESUME_TEXT, JOB)

    assert_complete(result)
    assert result == ResumeAnalysisService(provider=None).analyze_for_job(RESUME_TEXT, JOB)
    assert len(provider.calls) == 1


def test_parse_resume_fallback_extracts_contact_details():
    parsed = ResumeAnalysisService(provider=FakeProvider(RuntimeError("down"))).parse_resume(RESUME_TEXT)

    assert parsed.email == "ada@example.com"
    assert parsed.phone == "(555) 123-4567"
    assert parsed.skills == []
    assert parsed.total_experience_years == 0
    assert parsed.summary == RESUME_TEXT


def test_fallback_summary_is_truncated():
    parsed = fallback_parsed_data("x" * 250)
    assert parsed.summary == "x" * 200 + "..."
    assert parsed.email == ""


# ============================================
# Valid replies
# ============================================

def test_ai_analysis_is_used_when_valid():
    reply = json.dumps({
        "ats_score": 82,
        "skills_matched": ["Python"],
        "skills_missing": ["Kubernetes"],
        "experience_match": 70,
        "improvement_suggestions": ["Add Kubernetes projects"],
        "strengths_identified": ["Strong Python"],
    })
    provider = FakeProvider(f"Here you go:\n```json\n{reply}\n```")
    service = ResumeAnalysisService(provider=provider)

    result = service.analyze_for_job(RESUME_TEXT, JOB)

    assert result.ats_score == 82
    assert result.experience_match == 70
    assert result.improvement_suggestions == ["Add Kubernetes projects"]
    assert "Backend Engineer" in provider.prompts[0]
    assert "Python, Kubernetes" in provider.prompts[0]


def test_ai_reply_is_coerced():
    reply = json.dumps({
        "atsScore": "150",
        "skillsMatched": "Python",
        "skills_missing": ["Kubernetes", None, ""],
        "experience_match": -20,
        "strengths_identified": None,
    })
    result = ResumeAnalysisService(provider=FakeProvider(reply)).analyze_for_job(RESUME_TEXT, JOB)

    assert result.ats_score == 100
    assert result.experience_match == 0
    assert result.skills_matched == []
    assert result.skills_missing == ["Kubernetes"]
    assert result.improvement_suggestions == []
    assert result.strengths_identified == []


def test_ai_score_is_taken_as_is():
    reply = json.dumps({"ats_score": 12.5, "experience_match": 99})
    result = ResumeAnalysisService(provider=FakeProvider(reply)).analyze_for_job(RESUME_TEXT, JOB)
    assert result.ats_score == 13
    assert result.experience_match == 99


def test_parse_resume_coerces_reply():
    reply = json.dumps({
        "name": "Ada Lovelace",
        "skills": ["Python", 42, "SQL"],
        "experience": [{"company": "Engines Ltd", "position": "Dev", "duration": "2020-2023"}, "freelance"],
        "education": "Self-taught",
        "totalExperienceYears": "3.5",
    })
    parsed = ResumeAnalysisService(provider=FakeProvider(reply)).parse_resume(RESUME_TEXT)

    assert parsed.name == "Ada Lovelace"
    assert parsed.skills == ["Python", "42", "SQL"]
    assert parsed.experience[0].company == "Engines Ltd"
    assert parsed.experience[1].description == "freelance"
    assert parsed.education == []
    assert parsed.total_experience_years == 3.5
    assert parsed.certifications == []


def test_negative_experience_years_become_zero():
    parsed = ParsedResumeData.model_validate({"total_experience_years": -4})
    assert parsed.total_experience_years == 0


def test_model_routing_is_passed_to_provider():
    provider = FakeProvider('{"ats_score": 50}')
    service = ResumeAnalysisService(provider=provider, model_for=lambda feature: f"model-for-{feature}")

    service.analyze_for_job(RESUME_TEXT, JOB)

    assert provider.calls[0]["model"] == "model-for-job_match"


def test_job_accepts_dict():
    provider = FakeProvider('{"ats_score": 40}')
    result = ResumeAnalysisService(provider=provider).analyze_for_job(
        RESUME_TEXT, {"title": "Data Engineer", "skills": ["Spark"], "requirements": None},
    )
    assert result.ats_score == 40
    assert "Data Engineer" in provider.prompts[0]


# ============================================
# Generated resumes and job postings
# ============================================

def test_analyze_generated_ai_and_fallback():
    draft = {"personal_info": {"full_name": "Ada", "email": "a@x.com"}, "target_role": "Engineer"}

    ai = ResumeAnalysisService(provider=FakeProvider('{"ats_score": 77, "skills_missing": ["Go"]}'))
    result = ai.analyze_generated(draft)
    assert result.ats_score == 77
    assert result.skills_missing == ["Go"]

    fallback = ResumeAnalysisService(provider=FakeProvider(RuntimeError("quota"))).analyze_generated(draft)
    assert_complete(fallback)
    # contact + target role of 8 sections
    assert fallback.ats_score == 21


def test_generate_job_posting_normalizes_fields():
    reply = json.dumps({
        "title": "Senior Data Engineer",
        "experience_level": "Senior",
        "employment_type": "permanent",
        "salary_currency": "eur",
        "salary_min": 90000,
        "skills": ["Spark", "Airflow"],
    })
    provider = FakeProvider(reply)
    messages = [
        {"role": "user", "content": "We need a senior data engineer in Berlin."},
        {"role": "assistant", "content": "What salary?"},
        {"role": "user", "content": "90k EUR, Spark and Airflow."},
    ]

    draft = ResumeAnalysisService(provider=provider).generate_job_posting(messages)

    assert draft.title == "Senior Data Engineer"
    assert draft.experience_level == "senior"
    assert draft.employment_type == "full-time"
    assert draft.salary_currency == "EUR"
    assert draft.salary_min == "90000"
    assert draft.status == "active"
    assert "What salary?" not in provider.prompts[0]
    assert "90k EUR" in provider.prompts[0]


def test_generate_job_posting_fallback_keeps_notes():
    messages = [{"role": "user", "content": "Hiring a QA intern."}]
    draft = ResumeAnalysisService(provider=None).generate_job_posting(messages)

    assert draft.description == "Hiring a QA intern."
    assert draft.title == ""
    assert draft.experience_level == "mid"


@pytest.mark.parametrize("job", [
    {"skills": ["Python"], "experience_level": 3},
    {"title": None, "skills": "Python", "requirements": [{"text": "SQL"}], "experience_level": ["senior"]},
    None,
    [],
])
def test_mistyped_job_data_never_raises(job):
    result = ResumeAnalysisService(provider=None).analyze_for_job("Python dev", job)
    assert_complete(result)


def test_mistyped_experience_level_is_coerced():
    provider = FakeProvider('{"ats_score": 58}')

    result = ResumeAnalysisService(provider=provider).analyze_for_job(
        "Python dev", {"skills": ["Python"], "experience_level": 3},
    )

    assert result.ats_score == 58
    assert "Experience level: 3" in provider.prompts[0]


# ============================================
# Standalone resume analysis
# ============================================

def test_analyze_resume_takes_camel_case_reply():
    reply = {
        "overallScore": "87",
        "tone": {"category": "Confident", "reasoning": "Clear ownership"},
        "sections": {
            "formatting": {"score": 90, "feedback": "Clean"},
            "content": {"score": 120},
            "keywords": "good",
            "atsCompatibility": {"score": 80.5, "feedback": None},
        },
        "extractedInfo": {"name": "Ada Lovelace", "skills": ["Python", None, 3]},
        "improvements": ["Add metrics", ""],
        "matchedSkills": ["Python"],
        "missingSkills": None,
    }
    provider = FakeProvider("```json\n" + json.dumps(reply) + "\n```")

    result = ResumeAnalysisService(provider=provider, model_for=lambda feature: f"m-{feature}").analyze_resume(RESUME_TEXT)

    assert result.overall_score == 87
    assert result.tone.category == "Confident"
    assert result.sections.formatting.score == 90
    assert result.sections.content.score == 100
    assert result.sections.keywords.score == 0
    assert result.sections.ats_compatibility.score == 81
    assert result.sections.ats_compatibility.feedback == ""
    assert result.extracted_info.name == "Ada Lovelace"
    assert result.extracted_info.skills == ["Python", "3"]
    assert result.improvements == ["Add metrics"]
    assert result.missing_skills == []
    assert provider.calls[0]["model"] == "m-resume_analysis"
    assert "Ada Lovelace" in provider.prompts[0]


@pytest.mark.parametrize("reply", [
    RuntimeError("quota exceeded"),
    "I cannot assess this resume.",
    '["not", "an", "object"]',
])
def test_analyze_resume_falls_back(reply):
    result = ResumeAnalysisService(provider=FakeProvider(reply)).analyze_resume(RESUME_TEXT)

    assert isinstance(result, ResumeAnalysis)
    assert 0 <= result.overall_score <= 100
    assert result.extracted_info.email == "ada@example.com"
    assert result.extracted_info.phone == "(555) 123-4567"
    assert result.extracted_info.name == "Ada Lovelace"
    assert result.improvements[-1] == "Detailed AI feedback is unavailable right now; scores are rule-based"


def test_analyze_resume_without_provider_is_deterministic():
    service = ResumeAnalysisService(provider=None)
    assert service.analyze_resume(RESUME_TEXT) == service.analyze_resume(RESUME_TEXT)
