"""
Finalization Workflow

A moderator fixes a pending report's terminal verdict. The status change and
the trust recalculation for every voter are committed together; if the
commit fails neither is visible.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthorizationError, ConflictError, NotFoundError, PersistenceError, TruthlineError
from core.reports import parse_verdict
from core.trust import RecalculationResult, recalculate
from models import NewsReport, NewsStatus, Profile, UserRole, Verdict

logger = logging.getLogger(__name__)

STATUS_FOR_VERDICT = {
    Verdict.TRUE: NewsStatus.VERIFIED_TRUE,
    Verdict.FAKE: NewsStatus.VERIFIED_FAKE,
}


@dataclass
class FinalizationResult:
    report: NewsReport
    recalculation: RecalculationResult


def finalize(db: Session, report_id: str, final_verdict, moderator_id: str) -> FinalizationResult:
    """
    Finalize a report and recalculate its voters' trust scores

    States: pending -> verified_true | verified_fake, no transitions after.

    With ENFORCE_FINALIZATION_GUARD off, an already finalized report is
    finalized again and its voters are recalculated a second time.

    Args:
        db: Database session
        report_id: Report to finalize
        final_verdict: 'true' or 'fake'
        moderator_id: Profile id of the acting moderator

    Returns:
        FinalizationResult with the refreshed report and trust adjustments

    Raises:
        ValidationError: If final_verdict is not 'true' or 'fake'
        AuthorizationError: If the caller is not a moderator
        NotFoundError: If the report does not exist
        ConflictError: If the report is already finalized (guard on)
        PersistenceError: If the store fails
    """
    final_verdict = parse_verdict(final_verdict)

    try:
        moderator = db.get(Profile, moderator_id)
        report = db.get(NewsReport, report_id)
    except SQLAlchemyError as e:
        raise PersistenceError("Could not load report for finalization") from e

    if moderator is None or moderator.role != UserRole.MODERATOR:
        raise AuthorizationError("You must be a moderator to finalize reports")
    if report is None:
        raise NotFoundError(f"News report {report_id} not found")

    statement = update(NewsReport).where(NewsReport.id == report_id)
    if settings.ENFORCE_FINALIZATION_GUARD:
        # Conditional on pending so two moderators cannot both win
        statement = statement.where(NewsReport.status == NewsStatus.PENDING)

    try:
        outcome = db.execute(
            statement.values(
                status=STATUS_FOR_VERDICT[final_verdict],
                final_verdict=final_verdict,
                finalized_at=datetime.now(timezone.utc),
                finalized_by=moderator_id,
            ).execution_options(synchronize_session=False)
        )
        if outcome.rowcount != 1:
            raise ConflictError(f"News report {report_id} has already been finalized")

        recalculation = recalculate(db, report_id, final_verdict)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Finalization of {report_id} failed: {str(e)}", exc_info=True)
        raise PersistenceError(f"Could not finalize news report {report_id}") from e
    except TruthlineError:
        db.rollback()
        raise

    db.refresh(report)
    logger.info(
        f"Report {report_id} finalized as {final_verdict.value} by {moderator_id}; "
        f"{len(recalculation.adjustments)} voters updated, {len(recalculation.failed)} skipped"
    )
    return FinalizationResult(report=report, recalculation=recalculation)
