from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from database import get_db
from models import NewsReport, NewsStatus, Profile, Verdict
from auth import get_current_profile
from core import reports as report_service

router = APIRouter()

MAX_PAGE_SIZE = 50


# Pydantic schemas
class ReportCreate(BaseModel):
    title: str
    content: str
    image_url: Optional[str] = None


class VerdictStats(BaseModel):
    true_count: int
    fake_count: int
    total: int


class ReportResponse(BaseModel):
    id: str
    title: str
    content: str
    image_url: Optional[str]
    reported_by: str
    reporter_name: Optional[str] = None
    status: NewsStatus
    suspicion_score: int
    high_risk: bool
    final_verdict: Optional[Verdict] = None
    finalized_at: Optional[datetime] = None
    finalized_by: Optional[str] = None
    created_at: Optional[datetime] = None
    stats: VerdictStats
    already_verified: bool = False


def report_to_response(report: NewsReport, viewer_id: Optional[str] = None) -> ReportResponse:
    verifications = report.verifications or []
    return ReportResponse(
        id=report.id,
        title=report.title,
        content=report.content,
        image_url=report.image_url,
        reported_by=report.reported_by,
        reporter_name=report.reporter.full_name if report.reporter else None,
        status=report.status,
        suspicion_score=report.suspicion_score,
        high_risk=report.high_risk,
        final_verdict=report.final_verdict,
        finalized_at=report.finalized_at,
        finalized_by=report.finalized_by,
        created_at=report.created_at,
        stats=VerdictStats(**report_service.verdict_stats(verifications)),
        already_verified=any(v.verified_by == viewer_id for v in verifications) if viewer_id else False,
    )


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def submit_report(
    report_data: ReportCreate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """
    Submit a news item suspected of being fake.
    The suspicion score is computed here, once, before the report is stored.
    """
    report = report_service.submit_report(
        db,
        reporter_id=profile.id,
        title=report_data.title,
        content=report_data.content,
        image_url=report_data.image_url,
    )
    return report_to_response(report, profile.id)


@router.get("", response_model=List[ReportResponse])
def list_reports(
    status: Optional[NewsStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """
    Newest reports first. Filter with ?status=pending for the verification queue.
    """
    reports = report_service.list_reports(db, status=status, skip=skip, limit=limit)
    return [report_to_response(r, profile.id) for r in reports]


@router.get("/recent", response_model=List[ReportResponse])
def recent_reports(limit: int = Query(6, ge=1, le=MAX_PAGE_SIZE), db: Session = Depends(get_db)):
    """
    Public feed of the latest reports.
    """
    return [report_to_response(r) for r in report_service.list_reports(db, limit=limit)]


@router.get("/mine", response_model=List[ReportResponse])
def my_reports(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    reports = report_service.list_reports(db, reported_by=profile.id, skip=skip, limit=limit)
    return [report_to_response(r, profile.id) for r in reports]


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(
    report_id: str,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    return report_to_response(report_service.get_report(db, report_id), profile.id)
