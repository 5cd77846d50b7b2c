"""
Match Service: loads a candidate profile and a job posting, runs the match
engine, and stores the result keyed by (user_id, job_id)
"""
from datetime import datetime
from typing import List, Optional, Tuple

import pydantic
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from app.models.models import JobPosting, SkillRecord, ProjectRecord, ExperienceRecord, MatchResult
from app.models.schemas import JobMatchModel
from app.services.db import (
    job_postings_coll, skills_coll, projects_coll, experience_coll, job_matches_coll
)
from app.services.matching import MatchEngine
from app.utils.exceptions import (
    DatabaseError, ResourceNotFoundError, ValidationError, retry_with_logging
)
from app.utils.logging_config import get_logger, PerformanceMonitor
from app.utils.utils import PROJECT_LIMIT

logger = get_logger(__name__)


def _job_record(doc: dict) -> JobPosting:
    try:
        return JobPosting(
            title=doc.get("title"),
            company=doc.get("company"),
            required_skills=doc.get("required_skills") or [],
            preferred_skills=doc.get("preferred_skills") or [],
            description=doc.get("description"),
            location=doc.get("location"),
            salary_range=doc.get("salary_range"),
            job_url=doc.get("job_url"),
        )
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Stored job posting {doc.get('job_id')} is malformed",
            field="job_postings", value=doc.get("job_id"), cause=e
        ) from e


def _profile_records(skill_docs, project_docs, experience_docs) -> Tuple[
    List[SkillRecord], List[ProjectRecord], List[ExperienceRecord]
]:
    try:
        skills = [
            SkillRecord(
                name=d["name"],
                proficiency_level=d.get("proficiency_level", 1),
                category=d.get("category", "technical"),
                source=d.get("source", "manual"),
                evidence=d.get("evidence") or [],
            )
            for d in skill_docs
        ]
        projects = [
            ProjectRecord(
                name=d["name"],
                description=d.get("description"),
                url=d.get("github_url"),
                languages=d.get("languages") or [],
                topics=d.get("topics") or [],
                stars=d.get("stars", 0),
            )
            for d in project_docs
        ]
        experience = [
            ExperienceRecord(
                company=d["company"],
                position=d["position"],
                description=d.get("description"),
                start_date=d["start_date"],
                end_date=d.get("end_date"),
            )
            for d in experience_docs
        ]
    except (KeyError, pydantic.ValidationError) as e:
        raise ValidationError(f"Stored profile data is malformed: {e}", field="profile", cause=e) from e
    return skills, projects, experience


class MatchService:
    """Service boundary around MatchEngine"""

    engine = MatchEngine()

    @staticmethod
    async def load_job(user_id: str, job_id: str) -> JobPosting:
        """The posting must exist and belong to the caller"""
        try:
            doc = await job_postings_coll.find_one({"job_id": job_id, "user_id": user_id})
        except Exception as e:
            raise DatabaseError(
                f"Failed to load job {job_id}", operation="load_job",
                collection="job_postings", cause=e
            ) from e

        if not doc:
            logger.warning(f"Job {job_id} not found for user {user_id}")
            raise ResourceNotFoundError("Job not found", resource="job_posting", resource_id=job_id)
        return _job_record(doc)

    @staticmethod
    async def load_profile(user_id: str) -> Tuple[
        List[SkillRecord], List[ProjectRecord], List[ExperienceRecord]
    ]:
        """Skills, top projects by stars, and experience most-recent-first"""
        try:
            skill_docs = await skills_coll.find({"user_id": user_id}).to_list(length=None)
            project_docs = await (
                projects_coll.find({"user_id": user_id})
                .sort([("stars", DESCENDING), ("name", ASCENDING)])
                .limit(PROJECT_LIMIT)
                .to_list(length=None)
            )
            experience_docs = await (
                experience_coll.find({"user_id": user_id})
                .sort("start_date", DESCENDING)
                .to_list(length=None)
            )
        except Exception as e:
            raise DatabaseError(
                f"Failed to load profile for user {user_id}",
                operation="load_profile", cause=e
            ) from e

        return _profile_records(skill_docs, project_docs, experience_docs)

    @staticmethod
    @retry_with_logging(max_attempts=3, backoff_factor=0.2, exceptions=(DatabaseError,), logger=logger)
    async def save_match(user_id: str, job_id: str, result: MatchResult) -> JobMatchModel:
        """Upsert the analysis; repeating it overwrites the previous result"""
        now = datetime.utcnow()
        try:
            doc = await job_matches_coll.find_one_and_update(
                {"user_id": user_id, "job_id": job_id},
                {
                    "$set": {
                        "match_score": result.match_score,
                        "matching_skills": result.matching_skills,
                        "missing_skills": result.missing_skills,
                        "recommendations": result.recommendations,
                        "optimized_cv": result.optimized_cv.model_dump(by_alias=True),
                        "updated_at": now,
                    },
                    "$setOnInsert": {"created_at": now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            raise DatabaseError(
                f"Failed to store match for job {job_id}", operation="save_match",
                collection="job_matches", cause=e
            ) from e

        return JobMatchModel(**doc)

    @staticmethod
    async def analyze_job_match(user_id: str, job_id: str, engine: Optional[MatchEngine] = None) -> JobMatchModel:
        logger.debug(f"Analyzing job {job_id} for user {user_id}")
        job = await MatchService.load_job(user_id, job_id)
        skills, projects, experience = await MatchService.load_profile(user_id)

        with PerformanceMonitor(f"match_engine job={job_id}", logger, threshold_ms=250):
            result = (engine or MatchService.engine).compute(job, skills, projects, experience)

        match = await MatchService.save_match(user_id, job_id, result)
        logger.info(f"Stored match for user {user_id}, job {job_id}: score {result.match_score}")
        return match
