import asyncio
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

from pymongo import ASCENDING, DESCENDING

from app.services.match_service import MatchService
from app.utils.exceptions import DatabaseError, ResourceNotFoundError, ValidationError
from app.utils.utils import PROJECT_LIMIT

JOB_DOC = {
    "job_id": "job-1",
    "user_id": "user-1",
    "title": "Platform Engineer",
    "company": "Globex",
    "required_skills": ["Python", "Kubernetes"],
    "preferred_skills": ["Go"],
    "status": "active",
}
SKILL_DOCS = [
    {"user_id": "user-1", "name": "python", "proficiency_level": 4},
    {"user_id": "user-1", "name": "Go", "proficiency_level": 2},
]
PROJECT_DOCS = [
    {"user_id": "user-1", "name": "deployer", "github_url": "https://github.com/u/deployer",
     "languages": ["Go"], "topics": ["kubernetes"], "stars": 40},
    {"user_id": "user-1", "name": "notes", "languages": ["Markdown"], "topics": [], "stars": 1},
]
EXPERIENCE_DOCS = [
    {"user_id": "user-1", "company": "Initech", "position": "Python Developer",
     "description": "APIs", "start_date": "2021-05-01", "end_date": None},
]


def _echo_upsert(filter_, update, **kwargs):
    return {**filter_, **update["$set"], **update["$setOnInsert"]}


@pytest.fixture
def collections(make_cursor):
    with patch("app.services.match_service.job_postings_coll") as jobs, \
         patch("app.services.match_service.skills_coll") as skills, \
         patch("app.services.match_service.projects_coll") as projects, \
         patch("app.services.match_service.experience_coll") as experience, \
         patch("app.services.match_service.job_matches_coll") as matches:
        jobs.find_one = AsyncMock(return_value=dict(JOB_DOC))
        skills.find = MagicMock(return_value=make_cursor(SKILL_DOCS))
        projects.find = MagicMock(return_value=make_cursor(PROJECT_DOCS))
        experience.find = MagicMock(return_value=make_cursor(EXPERIENCE_DOCS))
        matches.find_one_and_update = AsyncMock(side_effect=_echo_upsert)
        yield {"jobs": jobs, "skills": skills, "projects": projects,
               "experience": experience, "matches": matches}


class TestMatchService:
    """Loading inputs, running the engine and upserting the result"""

    def test_analyze_job_match_stores_result(self, collections):
        match = asyncio.run(MatchService.analyze_job_match("user-1", "job-1"))

        # 70 * 1/2 + 20 + 10
        assert match.match_score == 65
        assert match.matching_skills == ["Python", "Go"]
        assert match.missing_skills == ["Kubernetes"]
        assert match.optimized_cv["jobTitle"] == "Platform Engineer"
        assert [p["name"] for p in match.optimized_cv["highlightedProjects"]] == ["deployer"]
        assert match.optimized_cv["highlightedProjects"][0]["url"] == "https://github.com/u/deployer"
        assert [e["company"] for e in match.optimized_cv["highlightedExperience"]] == ["Initech"]

    def test_upsert_is_keyed_by_user_and_job(self, collections):
        asyncio.run(MatchService.analyze_job_match("user-1", "job-1"))

        args, kwargs = collections["matches"].find_one_and_update.call_args
        assert args[0] == {"user_id": "user-1", "job_id": "job-1"}
        assert kwargs["upsert"] is True
        assert "created_at" in args[1]["$setOnInsert"]
        assert isinstance(args[1]["$set"]["updated_at"], datetime)

    def test_repeated_analysis_overwrites(self, collections):
        first = asyncio.run(MatchService.analyze_job_match("user-1", "job-1"))
        second = asyncio.run(MatchService.analyze_job_match("user-1", "job-1"))

        assert first.match_score == second.match_score
        assert collections["matches"].find_one_and_update.call_count == 2
        assert collections["matches"].insert_one.call_count == 0

    def test_job_lookup_is_scoped_to_owner(self, collections):
        asyncio.run(MatchService.load_job("user-1", "job-1"))
        collections["jobs"].find_one.assert_awaited_once_with({"job_id": "job-1", "user_id": "user-1"})

    def test_missing_job_raises_not_found(self, collections):
        collections["jobs"].find_one = AsyncMock(return_value=None)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            asyncio.run(MatchService.analyze_job_match("user-2", "job-1"))

        assert exc_info.value.message == "Job not found"
        collections["matches"].find_one_and_update.assert_not_called()

    def test_profile_loaded_in_relevance_order(self, collections):
        asyncio.run(MatchService.load_profile("user-1"))

        project_cursor = collections["projects"].find.return_value
        project_cursor.sort.assert_called_once_with([("stars", DESCENDING), ("name", ASCENDING)])
        project_cursor.limit.assert_called_once_with(PROJECT_LIMIT)
        collections["experience"].find.return_value.sort.assert_called_once_with("start_date", DESCENDING)

    def test_malformed_profile_is_rejected_before_scoring(self, collections, make_cursor):
        collections["skills"].find = MagicMock(return_value=make_cursor([{"user_id": "user-1"}]))

        with pytest.raises(ValidationError):
            asyncio.run(MatchService.analyze_job_match("user-1", "job-1"))
        collections["matches"].find_one_and_update.assert_not_called()

    def test_storage_failure_surfaces_as_database_error(self, collections):
        collections["matches"].find_one_and_update = AsyncMock(side_effect=RuntimeError("connection reset"))

        with patch("app.utils.exceptions.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(DatabaseError):
                asyncio.run(MatchService.analyze_job_match("user-1", "job-1"))

        # idempotent upsert is retried
        assert collections["matches"].find_one_and_update.call_count == 3
