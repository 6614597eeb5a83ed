"""
Applicant dashboard: resume versions, applications and score summary.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ats_portal.core.auth_dependency import get_db, get_current_user_obj
from ats_portal.db.models.ats_score import ATSScore
from ats_portal.db.models.job_posting import JobPosting
from ats_portal.db.models.resume_version import ResumeVersion
from ats_portal.db.models.submission import Submission
from ats_portal.db.models.user import User
from ats_portal.schemas.dashboard import (
    ApplicationEntry,
    ATSScoreEntry,
    DashboardResponse,
    DashboardStats,
    ResumeVersionCreate,
    ResumeVersionEntry,
)
from ats_portal.services.user_scores import update_user_scores

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applicant", tags=["Applicant"])


def _job_title(job) -> str:
    return job.title if job else "Unknown Job"


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    current_user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    versions = (
        db.query(ResumeVersion)
        .options(selectinload(ResumeVersion.ats_scores).selectinload(ATSScore.job))
        .filter(ResumeVersion.user_id == current_user.id)
        .order_by(ResumeVersion.created_at.desc(), ResumeVersion.id.desc())
        .all()
    )
    submissions = (
        db.query(Submission)
        .options(selectinload(Submission.job))
        .filter(or_(
            Submission.user_id == current_user.id,
            Submission.applicant_email == current_user.email.lower(),
        ))
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )

    return DashboardResponse(
        stats=DashboardStats(
            total_resumes=len(versions),
            total_applications=len(submissions),
            average_score=current_user.average_score or 0,
            latest_score=current_user.latest_score or 0,
            improvement=current_user.improvement or 0.0,
        ),
        resume_versions=[
            ResumeVersionEntry(
                id=version.id,
                file_name=version.file_name,
                file_type=version.file_type,
                creation_mode=version.creation_mode,
                ats_score=version.ats_score,
                ats_scores=[
                    ATSScoreEntry(
                        job_id=entry.job_id,
                        job_title=_job_title(entry.job),
                        score=entry.score,
                        keywords_matched=entry.keywords_matched or [],
                        skills_matched=entry.skills_matched or [],
                        created_at=entry.created_at or version.created_at,
                    )
                    for entry in version.ats_scores
                ],
                created_at=version.created_at,
            )
            for version in versions
        ],
        applications=[
            ApplicationEntry(
                id=submission.id,
                job_id=submission.job_id,
                job_title=_job_title(submission.job),
                ats_score=submission.ats_score or 0,
                status=submission.status,
                submitted_at=submission.submitted_at,
            )
            for submission in submissions
        ],
    )


@router.post("/resume-versions", status_code=status.HTTP_201_CREATED, response_model=ResumeVersionEntry)
def add_resume_version(
    request: ResumeVersionCreate,
    current_user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Add a resume version; with job_id and ats_score it also records the job score."""
    job = None
    if request.job_id is not None:
        job = db.get(JobPosting, request.job_id)
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")

    now = datetime.now(timezone.utc)
    version = ResumeVersion(
        user_id=current_user.id,
        parsed_text=request.parsed_text,
        file_name=request.file_name,
        file_type=request.file_type,
        creation_mode="upload",
        created_at=now,
    )
    if job and request.ats_score is not None:
        version.ats_scores.append(ATSScore(job_id=job.id, score=request.ats_score, created_at=now))

    try:
        db.add(version)
        db.commit()
        db.refresh(version)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving resume version: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save resume version")

    logger.info(f"Resume version added: id={version.id}, user_id={current_user.id}, job_id={request.job_id}")
    update_user_scores(db, current_user.id)

    return ResumeVersionEntry(
        id=version.id,
        file_name=version.file_name,
        file_type=version.file_type,
        creation_mode=version.creation_mode,
        ats_score=version.ats_score,
        ats_scores=[
            ATSScoreEntry(job_id=entry.job_id, job_title=_job_title(job), score=entry.score, created_at=entry.created_at)
            for entry in version.ats_scores
        ],
        created_at=version.created_at,
    )


@router.delete("/resume-versions/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resume_version(
    version_id: int,
    current_user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Delete a version and its job scores, then refresh the score summary."""
    version = db.query(ResumeVersion).filter(
        ResumeVersion.id == version_id,
        ResumeVersion.user_id == current_user.id,
    ).first()
    if not version:
        raise HTTPException(status_code=404, detail="Version not found")

    db.delete(version)
    db.commit()
    logger.info(f"Resume version deleted: id={version_id}, user_id={current_user.id}")
    update_user_scores(db, current_user.id)
