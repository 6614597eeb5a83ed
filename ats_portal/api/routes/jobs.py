"""
Job posting endpoints.

Public listing and detail by slug; recruiters create, edit and delete their
own postings and review the applications they receive.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ats_portal.core.auth_dependency import get_db, require_hr
from ats_portal.db.models.job_posting import JobPosting
from ats_portal.db.models.submission import Submission
from ats_portal.db.models.user import User
from ats_portal.schemas.analysis import JobPostingDraft
from ats_portal.schemas.job import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobListResponse,
    JobGenerateRequest,
)
from ats_portal.schemas.submission import (
    SubmissionResponse,
    SubmissionListResponse,
    SubmissionStatusUpdate,
)
from ats_portal.services.job_service import unique_slug
from ats_portal.services.resume_analysis import ResumeAnalysisService, get_analysis_service
from ats_portal.services.user_scores import update_user_scores

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_owned_job(slug: str, user: User, db: Session) -> JobPosting:
    """Fetch a posting by slug, 404 unless the user owns it (admins own everything)."""
    job = db.query(JobPosting).filter(JobPosting.slug == slug).first()
    if not job or (job.created_by != user.id and user.role != "admin"):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found or unauthorized"
        )
    return job


@router.get("", response_model=JobListResponse)
def list_jobs(
    search: Optional[str] = Query(None, description="Search in title and description"),
    experience_level: Optional[str] = Query(None, description="Filter by experience level"),
    location: Optional[str] = Query(None, description="Filter by location (partial match)"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """List public, active job postings."""
    query = db.query(JobPosting).filter(
        JobPosting.is_public.is_(True),
        JobPosting.status == "active",
    )

    if search:
        term = f"%{search}%"
        query = query.filter(or_(JobPosting.title.ilike(term), JobPosting.description.ilike(term)))
    if experience_level:
        query = query.filter(JobPosting.experience_level == experience_level)
    if location:
        query = query.filter(JobPosting.location.ilike(f"%{location}%"))

    total = query.count()
    jobs = query.order_by(JobPosting.created_at.desc()).offset((page - 1) * page_size).limit(page_size).all()

    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/mine", response_model=JobListResponse)
def list_my_jobs(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(require_hr),
    db: Session = Depends(get_db)
):
    """List the recruiter's own postings, any status."""
    query = db.query(JobPosting).filter(JobPosting.created_by == current_user.id)
    if status_filter:
        query = query.filter(JobPosting.status == status_filter)
    jobs = query.order_by(JobPosting.created_at.desc()).all()
    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs],
        total=len(jobs),
        page=1,
        page_size=max(len(jobs), 1),
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=JobResponse)
def create_job(
    job_data: JobCreate,
    current_user: User = Depends(require_hr),
    db: Session = Depends(get_db)
):
    """Create a job posting with a unique slug derived from its title."""
    try:
        job = JobPosting(
            created_by=current_user.id,
            slug=unique_slug(db, job_data.title),
            **job_data.model_dump(),
        )
        db.add(job)
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create job: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create job"
        )

    logger.info(f"Job created: job_id={job.id}, slug={job.slug}, user_id={current_user.id}")
    return JobResponse.model_validate(job)


@router.post("/generate", response_model=JobPostingDraft)
def generate_job(
    request: JobGenerateRequest,
    current_user: User = Depends(require_hr),
    service: ResumeAnalysisService = Depends(get_analysis_service),
):
    """Draft a job posting from free-text recruiter messages."""
    if not any(str(m.get("content", "")).strip() for m in request.messages):
        raise HTTPException(status_code=400, detail="Messages are required")
    return service.generate_job_posting(request.messages)


@router.get("/{slug}", response_model=JobResponse)
def get_job(slug: str, db: Session = Depends(get_db)):
    job = db.query(JobPosting).filter(
        JobPosting.slug == slug,
        JobPosting.is_public.is_(True),
    ).first()
    if not job or job.status == "draft":
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.model_validate(job)


@router.put("/{slug}", response_model=JobResponse)
def update_job(
    slug: str,
    job_data: JobUpdate,
    current_user: User = Depends(require_hr),
    db: Session = Depends(get_db)
):
    job = get_owned_job(slug, current_user, db)
    changes = job_data.model_dump(exclude_unset=True)

    try:
        if "title" in changes and changes["title"] != job.title:
            job.slug = unique_slug(db, changes["title"], exclude_id=job.id)
        for field, value in changes.items():
            setattr(job, field, value)
        db.commit()
        db.refresh(job)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update job {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update job")

    logger.info(f"Job updated: job_id={job.id}, fields={sorted(changes)}")
    return JobResponse.model_validate(job)


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    slug: str,
    current_user: User = Depends(require_hr),
    db: Session = Depends(get_db)
):
    """Delete a posting and, by cascade, its submissions."""
    job = get_owned_job(slug, current_user, db)
    affected_users = {s.user_id for s in job.submissions if s.user_id is not None}
    # Anonymous submissions still count for the user who owns the email
    emails = {s.applicant_email.lower() for s in job.submissions if s.applicant_email}
    if emails:
        matched = db.query(User.id).filter(func.lower(User.email).in_(emails)).all()
        affected_users.update(user_id for (user_id,) in matched)

    try:
        db.delete(job)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete job {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete job")

    logger.info(f"Job deleted: slug={slug}, submissions_removed_for_users={len(affected_users)}")
    # Their scored submissions are gone
    for user_id in affected_users:
        update_user_scores(db, user_id)


@router.get("/{slug}/applications", response_model=SubmissionListResponse)
def list_applications(
    slug: str,
    sort: str = Query("recent", pattern="^(recent|score)$"),
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(require_hr),
    db: Session = Depends(get_db)
):
    job = get_owned_job(slug, current_user, db)
    query = db.query(Submission).filter(Submission.job_id == job.id)
    if status_filter:
        query = query.filter(Submission.status == status_filter)
    order = Submission.ats_score.desc() if sort == "score" else Submission.submitted_at.desc()
    submissions = query.order_by(order, Submission.id.desc()).all()

    return SubmissionListResponse(
        submissions=[SubmissionResponse.model_validate(s) for s in submissions],
        total=len(submissions),
    )


@router.put("/{slug}/applications/{submission_id}", response_model=SubmissionResponse)
def update_application_status(
    slug: str,
    submission_id: int,
    update: SubmissionStatusUpdate,
    current_user: User = Depends(require_hr),
    db: Session = Depends(get_db)
):
    job = get_owned_job(slug, current_user, db)
    submission = db.query(Submission).filter(
        Submission.id == submission_id,
        Submission.job_id == job.id,
    ).first()
    if not submission:
        raise HTTPException(status_code=404, detail="Application not found")

    submission.status = update.status
    if update.review_notes is not None:
        submission.review_notes = update.review_notes
    submission.reviewed_by = current_user.id
    submission.reviewed_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(submission)

    logger.info(f"Application status updated: submission_id={submission.id}, status={submission.status}")
    return SubmissionResponse.model_validate(submission)
