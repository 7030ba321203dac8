from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
import logging

from database import get_db
from models import NewsReport, NewsStatus, Profile, UserRole, Verdict
from auth import require_moderator
from core.finalization import finalize
from core.reports import list_reports
from routes.reports import ReportResponse, report_to_response

logger = logging.getLogger(__name__)

router = APIRouter()


class FinalizeRequest(BaseModel):
    final_verdict: str


class CommunityVerification(BaseModel):
    verified_by: str
    verifier_name: Optional[str]
    verdict: Verdict
    comment: Optional[str] = None


class ModerationItem(ReportResponse):
    verifications: List[CommunityVerification]


class AdjustmentResponse(BaseModel):
    profile_id: str
    verdict: Verdict
    is_correct: bool
    delta: int
    previous_score: int
    new_score: int
    role: UserRole


class FinalizeResponse(BaseModel):
    report: ReportResponse
    adjustments: List[AdjustmentResponse]
    failed: List[str]


def _moderation_item(report: NewsReport) -> ModerationItem:
    base = report_to_response(report)
    return ModerationItem(
        **base.model_dump(),
        verifications=[
            CommunityVerification(
                verified_by=v.verified_by,
                verifier_name=v.verifier.full_name if v.verifier else None,
                verdict=v.verdict,
                comment=v.comment,
            )
            for v in report.verifications
        ],
    )


@router.get("/pending", response_model=List[ModerationItem])
def pending_reports(
    skip: int = 0,
    limit: int = 20,
    moderator: Profile = Depends(require_moderator),
    db: Session = Depends(get_db)
):
    """
    Pending reports with every community verdict, for review before finalizing.
    """
    reports = list_reports(db, status=NewsStatus.PENDING, skip=skip, limit=limit)
    return [_moderation_item(r) for r in reports]


@router.post("/reports/{report_id}/finalize", response_model=FinalizeResponse)
def finalize_report(
    report_id: str,
    request: FinalizeRequest,
    moderator: Profile = Depends(require_moderator),
    db: Session = Depends(get_db)
):
    """
    Fix the report's final verdict and update every voter's trust score.
    """
    logger.info(f"Finalize request for {report_id} from moderator {moderator.id}")
    result = finalize(db, report_id, request.final_verdict, moderator.id)
    return FinalizeResponse(
        report=report_to_response(result.report),
        adjustments=[
            AdjustmentResponse(**vars(adjustment))
            for adjustment in result.recalculation.adjustments
        ],
        failed=result.recalculation.failed,
    )
