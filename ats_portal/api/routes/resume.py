"""
Resume endpoints: standalone analysis of uploaded text, and the guided
intake flow (generate, save, share).
"""
import json
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ats_portal.core.auth_dependency import get_db, get_current_user_obj
from ats_portal.core.config import PUBLIC_BASE_URL
from ats_portal.db.models.resume_version import ResumeVersion
from ats_portal.db.models.user import User
from ats_portal.schemas.resume import (
    AnalyzeResumeRequest,
    AnalyzeResumeResponse,
    GenerateResumeRequest,
    GenerateResumeResponse,
    SaveResumeRequest,
    SaveResumeResponse,
    SharedResumeResponse,
)
from ats_portal.services.resume_analysis import ResumeAnalysisService, get_analysis_service
from ats_portal.services.resume_builder import build_resume_content, new_shareable_id
from ats_portal.services.score_calculator import compute_score
from ats_portal.services.user_scores import update_user_scores

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["Resume"])


@router.post("/analyze", status_code=status.HTTP_201_CREATED, response_model=AnalyzeResumeResponse)
def analyze_resume(
    request: AnalyzeResumeRequest,
    current_user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
    service: ResumeAnalysisService = Depends(get_analysis_service),
):
    """
    Analyze an uploaded resume's text and store it as a scored resume
    version of the current user.
    """
    if not request.resume_text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume text is empty")

    analysis = service.analyze_resume(request.resume_text)

    try:
        version = ResumeVersion(
            user_id=current_user.id,
            parsed_text=request.resume_text,
            structured_data=analysis.extracted_info.model_dump(),
            creation_mode="upload",
            file_name=request.file_name,
            file_type=request.file_type,
            ats_score=analysis.overall_score,
        )
        db.add(version)
        db.commit()
        db.refresh(version)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving analyzed resume: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save resume analysis")

    logger.info(f"Resume analyzed and saved: id={version.id}, user_id={current_user.id}, score={analysis.overall_score}")
    update_user_scores(db, current_user.id)

    return AnalyzeResumeResponse(
        analysis=analysis,
        resume_version_id=version.id,
        analysis_source="ai" if service.ai_enabled else "rule-based",
    )


@router.post("/generate", response_model=GenerateResumeResponse)
def generate_resume(
    request: GenerateResumeRequest,
    current_user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
    service: ResumeAnalysisService = Depends(get_analysis_service),
):
    """
    Build resume content from an intake draft, score it and store it as a
    new resume version of the current user.
    """
    draft = request.data
    if not draft.personal_info.full_name or not draft.target_role:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: full_name and target_role"
        )

    content = build_resume_content(draft)
    ats_score = compute_score(draft)
    analysis = service.analyze_generated(draft)

    version_id = None
    try:
        version = ResumeVersion(
            user_id=current_user.id,
            parsed_text=json.dumps(content),
            structured_data=draft.model_dump(),
            generated_resume=content,
            creation_mode=request.mode,
            file_name=f"{draft.personal_info.full_name} - {draft.target_role}",
            file_type="generated",
            ats_score=ats_score,
        )
        db.add(version)
        db.commit()
        version_id = version.id
        update_user_scores(db, current_user.id)
    except SQLAlchemyError as e:
        # The generated resume is still returned
        db.rollback()
        logger.error(f"Error saving generated resume version: {e}", exc_info=True)

    return GenerateResumeResponse(
        resume=content,
        ats_score=ats_score,
        analysis=analysis,
        resume_version_id=version_id,
        metadata={
            "mode": request.mode,
            "validated_skills": sum(1 for skill in draft.skills if skill.validated),
            "total_sections": len(content),
            "analysis_source": "ai" if service.ai_enabled else "rule-based",
        },
    )


@router.post("/save", status_code=status.HTTP_201_CREATED, response_model=SaveResumeResponse)
def save_resume(
    request: SaveResumeRequest,
    current_user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Save a resume version with a shareable link."""
    ats_score = request.ats_score if request.ats_score is not None else compute_score(request.structured_data)

    try:
        version = ResumeVersion(
            user_id=current_user.id,
            parsed_text=json.dumps(request.generated_resume),
            structured_data=request.structured_data.model_dump(),
            generated_resume=request.generated_resume,
            creation_mode=request.creation_mode,
            ats_score=ats_score,
            shareable_id=new_shareable_id(),
            is_public=request.is_public,
        )
        db.add(version)
        db.commit()
        db.refresh(version)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving resume: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save resume")

    logger.info(f"Resume version saved: id={version.id}, user_id={current_user.id}, ats_score={ats_score}")
    update_user_scores(db, current_user.id)

    return SaveResumeResponse(
        resume_version_id=version.id,
        shareable_id=version.shareable_id,
        share_url=f"{PUBLIC_BASE_URL.rstrip('/')}/resume/share/{version.shareable_id}",
    )


@router.get("/share/{shareable_id}", response_model=SharedResumeResponse)
def get_shared_resume(shareable_id: str, db: Session = Depends(get_db)):
    version = db.query(ResumeVersion).filter(
        ResumeVersion.shareable_id == shareable_id,
        ResumeVersion.is_public.is_(True),
    ).first()
    if not version:
        raise HTTPException(status_code=404, detail="Resume not found")

    return SharedResumeResponse(
        shareable_id=version.shareable_id,
        generated_resume=version.generated_resume,
        structured_data=version.structured_data,
        creation_mode=version.creation_mode,
        ats_score=version.ats_score,
        created_at=version.created_at.isoformat() if version.created_at else None,
    )
