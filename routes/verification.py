from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
import logging

from database import get_db
from models import NewsStatus, Profile, Verdict
from auth import get_current_profile
from core.reports import submit_verification, list_verifications_by

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


class VerifyRequest(BaseModel):
    """Request model for submitting a verdict"""
    verdict: str
    comment: Optional[str] = None


class VerificationResponse(BaseModel):
    """A single user's verdict on a report"""
    id: str
    news_id: str
    verified_by: str
    verdict: Verdict
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MyVerificationResponse(VerificationResponse):
    report_title: Optional[str] = None
    report_status: Optional[NewsStatus] = None


@router.post(
    "/api/reports/{report_id}/verifications",
    response_model=VerificationResponse,
    status_code=status.HTTP_201_CREATED,
)
def verify_report(
    report_id: str,
    request: VerifyRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """
    Cast a true/fake verdict on a pending report

    Args:
        report_id: Report being verified
        request: VerifyRequest with the verdict and an optional comment
        profile: Authenticated user's profile (from JWT token)

    Returns:
        The stored verification

    Raises:
        ValidationError: If the verdict is not 'true' or 'fake'
        NotFoundError: If the report does not exist or is no longer pending
    """
    logger.info(f"Verification request from user: {profile.id}")
    return submit_verification(
        db,
        news_id=report_id,
        verifier_id=profile.id,
        verdict=request.verdict,
        comment=request.comment,
    )


@router.get("/api/verifications/mine", response_model=List[MyVerificationResponse])
def my_verifications(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    return [
        MyVerificationResponse(
            id=v.id,
            news_id=v.news_id,
            verified_by=v.verified_by,
            verdict=v.verdict,
            comment=v.comment,
            created_at=v.created_at,
            report_title=v.report.title if v.report else None,
            report_status=v.report.status if v.report else None,
        )
        for v in list_verifications_by(db, profile.id)
    ]
