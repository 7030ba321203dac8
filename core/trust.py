"""
Trust Score Recalculator

Adjusts the trust score of every user who voted on a finalized report,
based on whether their verdict agreed with the final one, and re-derives
their role from the new score.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import NotFoundError, PersistenceError
from models import NewsReport, Profile, UserRole, Verdict, Verification

logger = logging.getLogger(__name__)

MODERATOR_THRESHOLD = 25
CORRECT_VOTE_DELTA = 2
INCORRECT_VOTE_DELTA = -1


@dataclass
class TrustAdjustment:
    profile_id: str
    verdict: Verdict
    is_correct: bool
    delta: int
    previous_score: int
    new_score: int
    role: UserRole


@dataclass
class RecalculationResult:
    report_id: str
    final_verdict: Verdict
    adjustments: List[TrustAdjustment] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def score_delta(verdict: Verdict, final_verdict: Verdict) -> int:
    return CORRECT_VOTE_DELTA if verdict == final_verdict else INCORRECT_VOTE_DELTA


def next_trust_score(current_score: int, delta: int) -> int:
    """Trust never goes below zero"""
    return max(0, current_score + delta)


def role_for_score(score: int) -> UserRole:
    return UserRole.MODERATOR if score >= MODERATOR_THRESHOLD else UserRole.USER


def recalculate(db: Session, report_id: str, final_verdict: Verdict) -> RecalculationResult:
    """
    Apply trust adjustments for every verification of a report.

    Each voter is updated inside its own SAVEPOINT, so a failure for one
    voter is logged and skipped without undoing the others. The caller owns
    the surrounding transaction and decides when to commit.

    Args:
        db: Session with an open transaction
        report_id: Finalized report
        final_verdict: Verdict the moderator settled on

    Returns:
        RecalculationResult listing applied adjustments and skipped voters

    Raises:
        NotFoundError: If the report does not exist
        PersistenceError: If the verifications cannot be loaded
    """
    final_verdict = Verdict(final_verdict)

    try:
        if db.get(NewsReport, report_id) is None:
            raise NotFoundError(f"News report {report_id} not found")
        verifications = db.execute(
            select(Verification.verified_by, Verification.verdict)
            .where(Verification.news_id == report_id)
            .order_by(Verification.created_at)
        ).all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load verifications for report {report_id}") from e

    result = RecalculationResult(report_id=report_id, final_verdict=final_verdict)
    logger.info(f"Recalculating trust for {len(verifications)} voters on report {report_id}")

    for voter_id, verdict in verifications:
        try:
            with db.begin_nested():
                adjustment = _adjust_voter(db, voter_id, verdict, final_verdict)
        except (NotFoundError, PersistenceError, SQLAlchemyError) as e:
            logger.error(f"Skipping trust update for {voter_id} on report {report_id}: {e}", exc_info=True)
            result.failed.append(voter_id)
            continue

        result.adjustments.append(adjustment)
        logger.info(
            f"Trust for {voter_id}: {adjustment.previous_score} -> {adjustment.new_score} "
            f"({adjustment.role.value})"
        )

    return result


def _adjust_voter(db: Session, voter_id: str, verdict: Verdict, final_verdict: Verdict) -> TrustAdjustment:
    """
    Compare-and-swap the voter's trust score

    The update only lands if trust_score still holds the value read just
    before; otherwise another recalculation got there first and the read is
    retried.
    """
    delta = score_delta(verdict, final_verdict)

    for attempt in range(1, settings.TRUST_UPDATE_MAX_RETRIES + 1):
        current_score = _load_trust_score(db, voter_id)
        new_score = next_trust_score(current_score, delta)
        new_role = role_for_score(new_score)

        outcome = db.execute(
            update(Profile)
            .where(Profile.id == voter_id, Profile.trust_score == current_score)
            .values(trust_score=new_score, role=new_role)
            .execution_options(synchronize_session=False)
        )
        if outcome.rowcount == 1:
            return TrustAdjustment(
                profile_id=voter_id,
                verdict=Verdict(verdict),
                is_correct=(verdict == final_verdict),
                delta=delta,
                previous_score=current_score,
                new_score=new_score,
                role=new_role,
            )

        logger.warning(f"Trust score for {voter_id} changed concurrently (attempt {attempt})")

    raise PersistenceError(
        f"Trust score for {voter_id} kept changing; gave up after "
        f"{settings.TRUST_UPDATE_MAX_RETRIES} attempts"
    )


def _load_trust_score(db: Session, profile_id: str) -> int:
    current: Optional[int] = db.execute(
        select(Profile.trust_score).where(Profile.id == profile_id)
    ).scalar_one_or_none()
    if current is None:
        raise NotFoundError(f"Profile {profile_id} not found")
    return current
