"""
Health check endpoint for deployment monitoring.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ats_portal.core.auth_dependency import get_db
from ats_portal.services.resume_analysis import ResumeAnalysisService, get_analysis_service

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(
    db: Session = Depends(get_db),
    service: ResumeAnalysisService = Depends(get_analysis_service),
):
    """
    Returns "healthy" when the database answers; "degraded" otherwise.
    
    AI availability is reported but never degrades health: analysis falls
    back to rule-based scoring without it.
    """
    status = "healthy"
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"error: {type(e).__name__}"
        status = "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": db_status,
        "ai": "configured" if service.ai_enabled else "rule-based",
        "version": "1.0.0",
    }
