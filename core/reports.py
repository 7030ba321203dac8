"""
Report and verification submission

Reports enter the system as pending with a suspicion score computed once
from their text. Any authenticated user may then cast a true/fake verdict
on a pending report.
"""

from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from core.scorer import compute_suspicion_score
from models import NewsReport, NewsStatus, Profile, Verdict, Verification

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 2000


def parse_verdict(value) -> Verdict:
    try:
        return Verdict(value)
    except ValueError:
        raise ValidationError(f"Verdict must be 'true' or 'fake', got {value!r}")


def _validate_text(field_name: str, value: Optional[str], max_length: int) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value


@contextmanager
def reading_store(db: Session, action: str):
    """Turn a failed store read into PersistenceError"""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {str(e)}", exc_info=True)
        raise PersistenceError(f"Could not {action}") from e


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {str(e)}", exc_info=True)
        raise PersistenceError(f"Could not {action}") from e


def submit_report(
    db: Session,
    reporter_id: str,
    title: str,
    content: str,
    image_url: Optional[str] = None,
) -> NewsReport:
    """
    Persist a new pending report with its suspicion score

    Args:
        db: Database session
        reporter_id: Profile id of the submitting user
        title: Headline, at most 200 characters
        content: Body, at most 2000 characters
        image_url: Optional image link; blank is stored as no image

    Returns:
        The stored NewsReport

    Raises:
        ValidationError: If title or content is empty or too long
        PersistenceError: If the insert fails
    """
    title = _validate_text("Title", title, TITLE_MAX_LENGTH)
    content = _validate_text("Content", content, CONTENT_MAX_LENGTH)
    image_url = image_url.strip() if image_url else None

    suspicion_score = compute_suspicion_score(title, content)

    report = NewsReport(
        title=title,
        content=content,
        image_url=image_url or None,
        reported_by=reporter_id,
        status=NewsStatus.PENDING,
        suspicion_score=suspicion_score,
    )
    db.add(report)
    _commit(db, "submit report")
    db.refresh(report)

    logger.info(f"Report {report.id} submitted by {reporter_id} (suspicion {suspicion_score})")
    return report


def submit_verification(
    db: Session,
    news_id: str,
    verifier_id: str,
    verdict,
    comment: Optional[str] = None,
) -> Verification:
    """
    Record one user's verdict on a pending report

    Duplicate votes and votes on one's own report are accepted unless the
    matching REJECT_* setting is on.

    Raises:
        ValidationError: If the verdict is not 'true' or 'fake'
        NotFoundError: If news_id is not an existing pending report
        ConflictError: If a configured policy guard rejects the vote
        PersistenceError: If the insert fails
    """
    verdict = parse_verdict(verdict)

    with reading_store(db, "load news report"):
        report = db.get(NewsReport, news_id)
    if report is None or report.status != NewsStatus.PENDING:
        raise NotFoundError(f"No pending news report {news_id}")

    if settings.REJECT_SELF_VERIFICATION and report.reported_by == verifier_id:
        raise ConflictError("You cannot verify your own report")
    if settings.REJECT_DUPLICATE_VERIFICATIONS and has_verified(db, news_id, verifier_id):
        raise ConflictError("You have already verified this report")

    verification = Verification(
        news_id=news_id,
        verified_by=verifier_id,
        verdict=verdict,
        comment=comment or None,
    )
    db.add(verification)
    _commit(db, "submit verification")
    db.refresh(verification)

    logger.info(f"Verification {verification.id}: {verifier_id} voted {verdict.value} on {news_id}")
    return verification


def has_verified(db: Session, news_id: str, verifier_id: str) -> bool:
    with reading_store(db, "check existing verifications"):
        count = db.execute(
            select(func.count(Verification.id)).where(
                Verification.news_id == news_id,
                Verification.verified_by == verifier_id,
            )
        ).scalar_one()
    return count > 0


def verdict_stats(verifications: Iterable[Verification]) -> Dict[str, int]:
    """Tally community votes for a report"""
    verdicts = [v.verdict for v in verifications]
    true_count = sum(1 for v in verdicts if v == Verdict.TRUE)
    fake_count = sum(1 for v in verdicts if v == Verdict.FAKE)
    return {"true_count": true_count, "fake_count": fake_count, "total": len(verdicts)}


def get_report(db: Session, report_id: str) -> NewsReport:
    with reading_store(db, "load news report"):
        report = db.execute(
            select(NewsReport)
            .options(selectinload(NewsReport.verifications).selectinload(Verification.verifier))
            .where(NewsReport.id == report_id)
        ).scalar_one_or_none()
    if report is None:
        raise NotFoundError(f"News report {report_id} not found")
    return report


def list_reports(
    db: Session,
    status: Optional[NewsStatus] = None,
    reported_by: Optional[str] = None,
    skip: int = 0,
    limit: int = 10,
) -> List[NewsReport]:
    """Newest reports first, optionally filtered by status or reporter"""
    query = select(NewsReport).options(
        selectinload(NewsReport.reporter),
        selectinload(NewsReport.verifications).selectinload(Verification.verifier),
    )
    if status is not None:
        query = query.where(NewsReport.status == status)
    if reported_by is not None:
        query = query.where(NewsReport.reported_by == reported_by)
    # created_at has one-second resolution on SQLite; id keeps ties stable
    query = query.order_by(NewsReport.created_at.desc(), NewsReport.id.desc()).offset(skip).limit(limit)
    with reading_store(db, "list news reports"):
        return list(db.execute(query).scalars().all())


def list_verifications_by(db: Session, verifier_id: str) -> List[Verification]:
    with reading_store(db, "list verifications"):
        return list(
            db.execute(
                select(Verification)
                .options(selectinload(Verification.report))
                .where(Verification.verified_by == verifier_id)
                .order_by(Verification.created_at.desc(), Verification.id.desc())
            ).scalars().all()
        )


def count_reports(db: Session) -> int:
    with reading_store(db, "count news reports"):
        return db.execute(select(func.count(NewsReport.id))).scalar_one()


def count_verifications_by(db: Session, verifier_id: str) -> int:
    with reading_store(db, "count verifications"):
        return db.execute(
            select(func.count(Verification.id)).where(Verification.verified_by == verifier_id)
        ).scalar_one()


def leaderboard(db: Session, limit: int = 5) -> List[Profile]:
    with reading_store(db, "load leaderboard"):
        return list(
            db.execute(
                select(Profile).order_by(Profile.trust_score.desc(), Profile.full_name).limit(limit)
            ).scalars().all()
        )
