from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.helpers.cv_export import render_cv_text, cv_filename
from app.models.payloads import AnalyzeJobRequest
from app.models.response import AnalyzeJobResponse
from app.models.schemas import JobMatchModel
from app.routers.dependencies import get_current_user
from app.services.db import job_matches_coll
from app.services.match_service import MatchService
from app.utils.exceptions import ExceptionContext, ResourceNotFoundError
from app.utils.logging_config import get_logger, PerformanceMonitor

router = APIRouter()
logger = get_logger(__name__)


@router.post("/analyze", response_model=AnalyzeJobResponse)
async def analyze_job(payload: AnalyzeJobRequest, request: Request, user_id: str = Depends(get_current_user)):
    """Score the caller's profile against one of their postings and store the result"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    logger.info(
        f"Analyzing job {payload.job_id}",
        extra={"request_id": request_id, "user_id": user_id, "job_id": payload.job_id}
    )

    with PerformanceMonitor("analyze_job", logger):
        with ExceptionContext("analyze_job", logger, request_id=request_id, job_id=payload.job_id):
            match = await MatchService.analyze_job_match(user_id, payload.job_id)

    return AnalyzeJobResponse(success=True, match=match)


@router.get("/", response_model=List[JobMatchModel])
async def list_matches(request: Request, user_id: str = Depends(get_current_user)):
    """All stored matches of the caller, best first"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    with ExceptionContext("list_matches", logger, request_id=request_id):
        cursor = job_matches_coll.find({"user_id": user_id}).sort("match_score", -1)
        matches = await cursor.to_list(length=None)

    logger.info(
        f"Fetched {len(matches)} matches",
        extra={"request_id": request_id, "user_id": user_id, "match_count": len(matches)}
    )
    return [JobMatchModel(**m) for m in matches]


@router.get("/{job_id}", response_model=JobMatchModel)
async def get_match(job_id: str, request: Request, user_id: str = Depends(get_current_user)):
    """The stored match for one posting"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    with ExceptionContext("get_match", logger, request_id=request_id, job_id=job_id):
        match = await job_matches_coll.find_one({"user_id": user_id, "job_id": job_id})

    if not match:
        raise ResourceNotFoundError("Match not found", resource="job_match", resource_id=job_id)
    return JobMatchModel(**match)


@router.get("/{job_id}/cv", response_class=PlainTextResponse)
async def download_cv(job_id: str, request: Request, user_id: str = Depends(get_current_user)):
    """The optimized CV of a stored match as a plain-text attachment"""
    with ExceptionContext("download_cv", logger, request_id=getattr(request.state, 'request_id', 'unknown'), job_id=job_id):
        match = await job_matches_coll.find_one({"user_id": user_id, "job_id": job_id})

    if not match:
        raise ResourceNotFoundError("Match not found", resource="job_match", resource_id=job_id)

    cv = match.get("optimized_cv") or {}
    return PlainTextResponse(
        render_cv_text(cv),
        headers={"Content-Disposition": f'attachment; filename="{cv_filename(cv)}"'},
    )
