"""
Resume-to-job matching: parse the resume, then score it against the job.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ats_portal.schemas.analysis import AnalysisResult
from ats_portal.schemas.resume import ParsedResumeData
from ats_portal.services.resume_analysis import ResumeAnalysisService

logger = logging.getLogger(__name__)


@dataclass
class JobMatch:
    parsed_data: ParsedResumeData
    analysis: AnalysisResult

    @property
    def ats_score(self) -> int:
        return self.analysis.ats_score


class JobMatchScorer:
    """Thin composition over ResumeAnalysisService."""

    def __init__(self, service: ResumeAnalysisService):
        self.service = service

    def match(self, resume_text: str, job, parsed_data: Optional[ParsedResumeData] = None) -> JobMatch:
        """Parse (unless already parsed) and score. Always returns a complete result."""
        if parsed_data is None:
            parsed_data = self.service.parse_resume(resume_text)
        analysis = self.service.analyze_for_job(resume_text, job, parsed=parsed_data)
        logger.debug(f"Job match complete: ats_score={analysis.ats_score}, matched={len(analysis.skills_matched)}")
        return JobMatch(parsed_data=parsed_data, analysis=analysis)


def match_resume_to_job(resume_text: str, job, service: ResumeAnalysisService) -> AnalysisResult:
    return JobMatchScorer(service).match(resume_text, job).analysis
