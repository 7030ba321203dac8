"""
Tests for report and verification submission
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from core.config import settings
from core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from core.reports import (
    count_reports,
    has_verified,
    leaderboard,
    list_reports,
    submit_report,
    submit_verification,
    verdict_stats,
)
from models import NewsStatus, Verdict


def test_submit_report_scores_and_stores(db, make_profile):
    reporter = make_profile()

    report = submit_report(
        db,
        reporter_id=reporter.id,
        title="SHOCKING miracle cure!!!!",
        content="Doctors hate this one secret",
        image_url="https://example.com/cure.jpg",
    )

    assert report.status == NewsStatus.PENDING
    assert report.reported_by == reporter.id
    assert report.suspicion_score == 40
    assert report.final_verdict is None
    assert report.finalized_at is None
    assert report.image_url == "https://example.com/cure.jpg"


def test_blank_image_url_stored_as_none(db, make_profile):
    report = submit_report(db, make_profile().id, "Title", "Body", image_url="  ")
    assert report.image_url is None


@pytest.mark.parametrize("title,content", [
    ("", "Body"),
    ("   ", "Body"),
    ("Title", ""),
    ("x" * 201, "Body"),
    ("Title", "y" * 2001),
])
def test_submit_report_validation(db, make_profile, title, content):
    with pytest.raises(ValidationError):
        submit_report(db, make_profile().id, title, content)
    assert list_reports(db) == []


def test_length_bounds_are_inclusive(db, make_profile):
    report = submit_report(db, make_profile().id, "x" * 200, "y" * 2000)
    assert len(report.title) == 200


def test_submit_verification(db, make_profile, make_report):
    report = make_report(make_profile())
    voter = make_profile()

    verification = submit_verification(db, report.id, voter.id, "fake", comment="Photo is from 2015")

    assert verification.verdict == Verdict.FAKE
    assert verification.comment == "Photo is from 2015"
    assert has_verified(db, report.id, voter.id)


def test_verification_requires_pending_report(db, make_profile, make_report):
    report = make_report(make_profile())
    report.status = NewsStatus.VERIFIED_TRUE
    db.commit()

    with pytest.raises(NotFoundError):
        submit_verification(db, report.id, make_profile().id, "true")
    with pytest.raises(NotFoundError):
        submit_verification(db, "missing", make_profile().id, "true")


def test_verification_rejects_unknown_verdict(db, make_profile, make_report):
    report = make_report(make_profile())
    with pytest.raises(ValidationError):
        submit_verification(db, report.id, make_profile().id, "maybe")


def test_duplicate_votes_accepted_by_default(db, make_profile, make_report):
    report = make_report(make_profile())
    voter = make_profile()
    submit_verification(db, report.id, voter.id, "true")
    submit_verification(db, report.id, voter.id, "fake")

    db.refresh(report)
    assert verdict_stats(report.verifications) == {"true_count": 1, "fake_count": 1, "total": 2}


def test_duplicate_votes_rejected_when_enabled(db, make_profile, make_report, monkeypatch):
    monkeypatch.setattr(settings, "REJECT_DUPLICATE_VERIFICATIONS", True)
    report = make_report(make_profile())
    voter = make_profile()
    submit_verification(db, report.id, voter.id, "true")

    with pytest.raises(ConflictError):
        submit_verification(db, report.id, voter.id, "true")


def test_self_verification_policy(db, make_profile, make_report, monkeypatch):
    reporter = make_profile()
    report = make_report(reporter)
    submit_verification(db, report.id, reporter.id, "true")

    monkeypatch.setattr(settings, "REJECT_SELF_VERIFICATION", True)
    with pytest.raises(ConflictError):
        submit_verification(db, report.id, reporter.id, "true")


def test_same_timestamp_reports_have_stable_order(db, make_profile, make_report):
    reporter = make_profile()
    reports = [make_report(reporter, title=f"Story {n}") for n in range(4)]
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    for report in reports:
        report.created_at = stamp
    db.commit()

    expected = sorted((r.id for r in reports), reverse=True)
    assert [r.id for r in list_reports(db)] == expected
    assert [r.id for r in list_reports(db, skip=2, limit=2)] == expected[2:]


@pytest.mark.parametrize("read", [list_reports, leaderboard, count_reports])
def test_store_read_failure_is_persistence_error(db, monkeypatch, read):
    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", None, Exception("disk I/O error"))

    monkeypatch.setattr(db, "execute", broken_execute)
    with pytest.raises(PersistenceError):
        read(db)
