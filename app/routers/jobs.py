import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pymongo import ReturnDocument

from app.models.payloads import JobPostingCreate, JobStatusUpdate
from app.models.schemas import JobPostingModel, JobStatus
from app.routers.dependencies import get_current_user
from app.services.db import job_postings_coll, job_matches_coll
from app.utils.exceptions import ExceptionContext, ResourceNotFoundError
from app.utils.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/", response_model=JobPostingModel)
async def create_job(payload: JobPostingCreate, request: Request, user_id: str = Depends(get_current_user)):
    """Start tracking a job posting"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    job = JobPostingModel(job_id=str(uuid.uuid4()), user_id=user_id, **payload.model_dump())

    with ExceptionContext("create_job", logger, request_id=request_id, job_id=job.job_id):
        await job_postings_coll.insert_one(job.model_dump())

    logger.info(
        f"Created job {job.job_id}: {job.title} at {job.company}",
        extra={"request_id": request_id, "user_id": user_id, "job_id": job.job_id}
    )
    return job


@router.get("/", response_model=List[JobPostingModel])
async def list_jobs(
    request: Request,
    status: Optional[JobStatus] = Query(None, description="Only postings with this status"),
    user_id: str = Depends(get_current_user),
):
    """Postings tracked by the caller, newest first"""
    query = {"user_id": user_id}
    if status:
        query["status"] = status.value

    with ExceptionContext("list_jobs", logger, request_id=getattr(request.state, 'request_id', 'unknown')):
        cursor = job_postings_coll.find(query).sort("created_at", -1)
        jobs = await cursor.to_list(length=None)

    return [JobPostingModel(**j) for j in jobs]


@router.get("/{job_id}", response_model=JobPostingModel)
async def get_job(job_id: str, request: Request, user_id: str = Depends(get_current_user)):
    with ExceptionContext("get_job", logger, request_id=getattr(request.state, 'request_id', 'unknown'), job_id=job_id):
        job = await job_postings_coll.find_one({"job_id": job_id, "user_id": user_id})

    if not job:
        raise ResourceNotFoundError("Job not found", resource="job_posting", resource_id=job_id)
    return JobPostingModel(**job)


@router.patch("/{job_id}/status", response_model=JobPostingModel)
async def update_job_status(
    job_id: str, payload: JobStatusUpdate, request: Request, user_id: str = Depends(get_current_user)
):
    """Move a posting through active/applied/interview/rejected/offer"""
    with ExceptionContext("update_job_status", logger, request_id=getattr(request.state, 'request_id', 'unknown'), job_id=job_id):
        job = await job_postings_coll.find_one_and_update(
            {"job_id": job_id, "user_id": user_id},
            {"$set": {"status": payload.status.value}},
            return_document=ReturnDocument.AFTER,
        )

    if not job:
        raise ResourceNotFoundError("Job not found", resource="job_posting", resource_id=job_id)

    logger.info(f"Job {job_id} moved to {payload.status.value}")
    return JobPostingModel(**job)


@router.delete("/{job_id}")
async def delete_job(job_id: str, request: Request, user_id: str = Depends(get_current_user)):
    """Stop tracking a posting; its stored analysis goes with it"""
    request_id = getattr(request.state, 'request_id', 'unknown')

    with ExceptionContext("delete_job", logger, request_id=request_id, job_id=job_id):
        result = await job_postings_coll.delete_one({"job_id": job_id, "user_id": user_id})
        if result.deleted_count == 0:
            raise ResourceNotFoundError("Job not found", resource="job_posting", resource_id=job_id)
        matches = await job_matches_coll.delete_one({"job_id": job_id, "user_id": user_id})

    logger.info(
        f"Deleted job {job_id} and {matches.deleted_count} stored match(es)",
        extra={"request_id": request_id, "user_id": user_id, "job_id": job_id}
    )
    return {"success": True, "job_id": job_id, "matches_deleted": matches.deleted_count}
