"""
update-trust-scores backend function

Deployed separately from the main API and reachable only with the service
credential, since it rewrites arbitrary users' profiles:

    uvicorn functions.update_trust_scores:app

Body: {"reportId": "...", "finalVerdict": "true" | "fake"}
Returns {"success": true, ...} or {"error": "..."} with a non-2xx status.
"""

import logging

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import require_service_role
from core.config import settings
from core.errors import PersistenceError, TruthlineError
from core.reports import parse_verdict
from core.trust import recalculate
from database import get_db

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

app = FastAPI(title="update-trust-scores")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["*"],
)


class TrustUpdateRequest(BaseModel):
    reportId: str
    finalVerdict: str


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=CORS_HEADERS)


@app.exception_handler(TruthlineError)
async def truthline_error_handler(request: Request, exc: TruthlineError):
    logger.error(f"Error: {exc.message}")
    return _error(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error("Body must be {reportId: string, finalVerdict: 'true' | 'fake'}", status.HTTP_400_BAD_REQUEST)


@app.options("/update-trust-scores")
def preflight():
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@app.post("/update-trust-scores", dependencies=[Depends(require_service_role)])
def update_trust_scores(payload: TrustUpdateRequest, db: Session = Depends(get_db)):
    final_verdict = parse_verdict(payload.finalVerdict)

    result = recalculate(db, payload.reportId, final_verdict)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Could not save trust scores for report {payload.reportId}") from e

    return JSONResponse(
        content={
            "success": True,
            "updated": len(result.adjustments),
            "failed": result.failed,
        },
        headers=CORS_HEADERS,
    )
