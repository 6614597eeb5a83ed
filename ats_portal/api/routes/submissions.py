"""
Job application endpoint: score a resume against a posting and store it.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ats_portal.core.auth_dependency import get_db
from ats_portal.db.models.ats_score import ATSScore
from ats_portal.db.models.resume_version import ResumeVersion
from ats_portal.db.models.submission import Submission
from ats_portal.db.models.user import User
from ats_portal.schemas.submission import SubmissionCreate, SubmissionResponse
from ats_portal.services.job_match import JobMatchScorer
from ats_portal.services.job_service import get_active_job
from ats_portal.services.resume_analysis import ResumeAnalysisService, get_analysis_service
from ats_portal.services.user_scores import update_user_scores

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SubmissionResponse)
def create_submission(
    request: SubmissionCreate,
    db: Session = Depends(get_db),
    service: ResumeAnalysisService = Depends(get_analysis_service),
):
    """
    Apply to an active job posting.
    
    The resume is parsed and scored (AI or rule-based). When the email
    belongs to a registered user the submission is linked to them and their
    score summary is recomputed.
    """
    job = get_active_job(db, request.job_slug)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found or no longer active")

    resume_text = request.resume_text.strip()
    if not resume_text:
        raise HTTPException(status_code=400, detail="Resume text must be provided")

    match = JobMatchScorer(service).match(resume_text, job)
    email = request.applicant_email.lower()
    user = db.query(User).filter(User.email == email).first()
    now = datetime.now(timezone.utc)

    try:
        submission = Submission(
            job_id=job.id,
            user_id=user.id if user else None,
            applicant_name=request.applicant_name,
            applicant_email=email,
            applicant_phone=request.applicant_phone,
            ats_score=match.ats_score,
            parsed_resume_data=match.parsed_data.model_dump(),
            analysis=match.analysis.model_dump(),
            raw_resume_text=resume_text,
            file_name=request.file_name,
            file_type=request.file_type,
            status="new",
            created_at=now,
        )
        db.add(submission)
        db.flush()

        if request.create_profile and user:
            version = ResumeVersion(
                user_id=user.id,
                parsed_text=resume_text,
                creation_mode="upload",
                file_name=request.file_name,
                file_type=request.file_type,
                created_at=now,
            )
            version.ats_scores.append(ATSScore(
                job_id=job.id,
                submission_id=submission.id,
                score=match.ats_score,
                keywords_matched=match.analysis.skills_matched,
                skills_matched=match.analysis.skills_matched,
                experience_years=match.parsed_data.total_experience_years,
                created_at=now,
            ))
            db.add(version)

        job.application_count = (job.application_count or 0) + 1
        db.commit()
        db.refresh(submission)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save submission for job {job.slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create submission")

    logger.info(f"Submission created: submission_id={submission.id}, job_id={job.id}, ats_score={submission.ats_score}")

    if user:
        update_user_scores(db, user.id)
        db.refresh(submission)

    return SubmissionResponse.model_validate(submission)
