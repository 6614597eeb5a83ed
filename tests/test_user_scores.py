"""
Unit tests for per-user score aggregation.
Tests event collection across sources, summary math and persistence.
"""
import random
from datetime import datetime, timedelta, timezone

from ats_portal.db.models.ats_score import ATSScore
from ats_portal.db.models.resume_version import ResumeVersion
from ats_portal.db.models.submission import Submission
from ats_portal.services.user_scores import (
    SOURCE_RESUME_VERSION,
    SOURCE_SUBMISSION,
    UserScoreAggregator,
    update_user_scores,
)


T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def add_version(db, user, created_at, ats_score=None, entries=()):
    version = ResumeVersion(
        user_id=user.id,
        parsed_text="resume",
        ats_score=ats_score,
        created_at=created_at,
    )
    for job_id, score, entry_created_at in entries:
        version.ats_scores.append(ATSScore(job_id=job_id, score=score, created_at=entry_created_at))
    db.add(version)
    db.commit()
    return version


def add_submission(db, job, email, score, created_at, user=None):
    submission = Submission(
        job_id=job.id,
        user_id=user.id if user else None,
        applicant_name="Applicant",
        applicant_email=email,
        ats_score=score,
        parsed_resume_data={},
        analysis={},
        raw_resume_text="resume",
        created_at=created_at,
    )
    db.add(submission)
    db.commit()
    return submission


def test_latest_and_average_across_sources(db, applicant, job):
    add_version(db, applicant, T0, ats_score=80)
    add_version(db, applicant, T0 + timedelta(hours=1), entries=[(job.id, 60, T0 + timedelta(hours=1))])
    add_submission(db, job, applicant.email, 90, T0 + timedelta(hours=2), user=applicant)

    summary = UserScoreAggregator(db).recompute(applicant.id)

    assert summary.latest_score == 90
    assert summary.average_score == 77
    assert -10 <= summary.improvement <= 10


def test_events_are_ordered_newest_first(db, applicant, job):
    add_submission(db, job, applicant.email, 90, T0 + timedelta(hours=2), user=applicant)
    add_version(db, applicant, T0, ats_score=80)

    events = UserScoreAggregator(db).collect_events(applicant)

    assert [event.score for event in events] == [90, 80]
    assert [event.source for event in events] == [SOURCE_SUBMISSION, SOURCE_RESUME_VERSION]
    assert events[0].job_id == job.id


def test_summary_is_persisted(db, applicant, job):
    add_version(db, applicant, T0, ats_score=70)

    update_user_scores(db, applicant.id)
    db.refresh(applicant)

    assert applicant.latest_score == 70
    assert applicant.average_score == 70
    assert applicant.scores_updated_at is not None


def test_no_events_gives_zeros(db, applicant):
    summary = UserScoreAggregator(db).recompute(applicant.id)

    assert summary.latest_score == 0
    assert summary.average_score == 0


def test_missing_user_returns_none(db):
    assert UserScoreAggregator(db).recompute(9999) is None


def test_anonymous_data_is_a_no_op(db):
    assert update_user_scores(db, None) is None


def test_entry_without_timestamp_uses_version_timestamp(db, applicant, job):
    add_submission(db, job, applicant.email, 50, T0 + timedelta(hours=1), user=applicant)
    add_version(db, applicant, T0 + timedelta(hours=2), entries=[(job.id, 70, None)])

    summary = UserScoreAggregator(db).recompute(applicant.id)

    assert summary.latest_score == 70
    assert summary.average_score == 60


def test_submission_matched_by_email(db, applicant, job):
    add_submission(db, job, applicant.email.lower(), 64, T0)
    add_submission(db, job, "someone.else@example.com", 99, T0 + timedelta(hours=1))

    summary = UserScoreAggregator(db).recompute(applicant.id)

    assert summary.latest_score == 64
    assert summary.average_score == 64


def test_average_rounds_half_up(db, applicant):
    add_version(db, applicant, T0, ats_score=70)
    add_version(db, applicant, T0 + timedelta(hours=1), ats_score=71)

    summary = UserScoreAggregator(db).recompute(applicant.id)

    assert summary.average_score == 71


def test_improvement_uses_injected_rng(db, applicant):
    add_version(db, applicant, T0, ats_score=70)

    summary = UserScoreAggregator(db, rng=random.Random(7)).recompute(applicant.id)

    assert summary.improvement == round(random.Random(7).uniform(-10, 10), 1)


def test_recompute_overwrites_previous_summary(db, applicant, job):
    version = add_version(db, applicant, T0, ats_score=40)
    update_user_scores(db, applicant.id)

    db.delete(version)
    db.commit()
    update_user_scores(db, applicant.id)
    db.refresh(applicant)

    assert applicant.latest_score == 0
    assert applicant.average_score == 0


def test_entry_linked_to_submission_is_not_counted_twice(db, applicant, job):
    submission = add_submission(db, job, applicant.email, 30, T0 + timedelta(hours=1), user=applicant)
    version = add_version(db, applicant, T0 + timedelta(hours=1), entries=[(job.id, 30, T0 + timedelta(hours=1))])
    version.ats_scores[0].submission_id = submission.id
    add_version(db, applicant, T0, ats_score=40)
    db.commit()

    events = UserScoreAggregator(db).collect_events(applicant)

    assert [(event.score, event.source) for event in events] == [(30, SOURCE_SUBMISSION), (40, SOURCE_RESUME_VERSION)]
    assert UserScoreAggregator(db).recompute(applicant.id).average_score == 35
