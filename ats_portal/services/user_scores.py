"""
Per-user score aggregation.

Every saved resume score and every scored job submission is a ScoredEvent.
After any of them is written, the user's summary (latest, average,
improvement) is recomputed in full from all events and overwritten.
"""
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ats_portal.db.models.resume_version import ResumeVersion
from ats_portal.db.models.submission import Submission
from ats_portal.db.models.user import User
from ats_portal.schemas.dashboard import UserScoreSummary
from ats_portal.services.score_calculator import round_half_up

logger = logging.getLogger(__name__)

SOURCE_RESUME_VERSION = "resume-version"
SOURCE_SUBMISSION = "submission"

IMPROVEMENT_RANGE = (-10.0, 10.0)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ScoredEvent:
    score: int
    source: str
    created_at: datetime
    job_id: Optional[int] = None


def _timestamp(*candidates: Optional[datetime]) -> datetime:
    """First non-null timestamp, made timezone-aware (SQLite returns naive values)."""
    for value in candidates:
        if value is not None:
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return _EPOCH


class UserScoreAggregator:
    """
    Recomputes UserScoreSummary for one user from resume versions and submissions.
    
    `improvement` is a uniform draw in [-10, 10] on every call, not a trend.
    """

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    def _resume_events(self, user: User) -> List[ScoredEvent]:
        versions = (
            self.db.query(ResumeVersion)
            .options(selectinload(ResumeVersion.ats_scores))
            .filter(ResumeVersion.user_id == user.id)
            .all()
        )
        events = []
        for version in versions:
            if version.ats_score is not None:
                events.append(ScoredEvent(
                    score=version.ats_score,
                    source=SOURCE_RESUME_VERSION,
                    created_at=_timestamp(version.created_at),
                ))
            for entry in version.ats_scores:
                if entry.submission_id is not None:
                    # Counted once, through the submission
                    continue
                events.append(ScoredEvent(
                    score=entry.score,
                    source=SOURCE_RESUME_VERSION,
                    created_at=_timestamp(entry.created_at, version.created_at),
                    job_id=entry.job_id,
                ))
        return events

    def _submission_events(self, user: User) -> List[ScoredEvent]:
        submissions = (
            self.db.query(Submission)
            .filter(or_(
                Submission.user_id == user.id,
                func.lower(Submission.applicant_email) == user.email.lower(),
            ))
            .all()
        )
        return [
            ScoredEvent(
                score=submission.ats_score,
                source=SOURCE_SUBMISSION,
                created_at=_timestamp(submission.created_at, submission.submitted_at),
                job_id=submission.job_id,
            )
            for submission in submissions
            if submission.ats_score is not None
        ]

    def collect_events(self, user: User) -> List[ScoredEvent]:
        """All scored events of a user, newest first."""
        events = self._resume_events(user) + self._submission_events(user)
        events.sort(key=lambda event: event.created_at, reverse=True)
        return events

    def summarize(self, events: List[ScoredEvent]) -> UserScoreSummary:
        latest = events[0].score if events else 0
        average = round_half_up(sum(event.score for event in events) / len(events)) if events else 0
        improvement = round(self.rng.uniform(*IMPROVEMENT_RANGE), 1)
        return UserScoreSummary(average_score=average, latest_score=latest, improvement=improvement)

    def recompute(self, user_id: int) -> Optional[UserScoreSummary]:
        """
        Recompute and persist the user's score summary.
        
        Returns None (and leaves the stored summary untouched) when the user
        does not exist or the database cannot be read or written.
        """
        try:
            user = self.db.get(User, user_id)
            if user is None:
                logger.warning(f"Score recompute skipped: user_id={user_id} not found")
                return None

            events = self.collect_events(user)
            summary = self.summarize(events)

            user.average_score = summary.average_score
            user.latest_score = summary.latest_score
            user.improvement = summary.improvement
            user.scores_updated_at = datetime.now(timezone.utc)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Score recompute failed for user_id={user_id}: {e}", exc_info=True)
            return None

        logger.info(
            f"User scores updated: user_id={user_id}, events={len(events)}, "
            f"average={summary.average_score}, latest={summary.latest_score}"
        )
        return summary


def update_user_scores(db: Session, user_id: Optional[int]) -> Optional[UserScoreSummary]:
    """Recompute a user's summary after a score-changing write. No-op for anonymous data."""
    if user_id is None:
        return None
    return UserScoreAggregator(db).recompute(user_id)
