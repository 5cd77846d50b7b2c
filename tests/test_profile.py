import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock, patch


@pytest.fixture
def test_app():
    from fastapi import FastAPI
    from app.routers import profile
    from app.middleware.error_handlers import ExceptionHandlerMiddleware

    app = FastAPI()
    app.add_middleware(ExceptionHandlerMiddleware)
    app.include_router(profile.router, prefix="/profile")
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


def _echo_upsert(filter_, update, **kwargs):
    return {**update["$set"], **update["$setOnInsert"]}


class TestProfileRouter:
    """Test cases for the profile router"""

    @patch('app.routers.profile.experience_coll')
    @patch('app.routers.profile.projects_coll')
    @patch('app.routers.profile.skills_coll')
    def test_get_profile(self, mock_skills, mock_projects, mock_experience, client, headers, make_cursor):
        mock_skills.find = MagicMock(return_value=make_cursor([{"user_id": "user-1", "name": "Python"}]))
        mock_projects.find = MagicMock(return_value=make_cursor([
            {"project_id": "p1", "user_id": "user-1", "name": "api", "stars": 5}
        ]))
        mock_experience.find = MagicMock(return_value=make_cursor([
            {"experience_id": "e1", "user_id": "user-1", "company": "Initech",
             "position": "Developer", "start_date": "2020-01-01"}
        ]))

        response = client.get("/profile/", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert [s["name"] for s in data["skills"]] == ["Python"]
        assert data["projects"][0]["name"] == "api"
        assert data["experience"][0]["end_date"] is None
        mock_projects.find.return_value.sort.assert_called_once_with("stars", -1)
        mock_experience.find.return_value.sort.assert_called_once_with("start_date", -1)

    @patch('app.routers.profile.skills_coll')
    def test_upsert_skill(self, mock_skills, client, headers):
        mock_skills.find_one_and_update = AsyncMock(side_effect=_echo_upsert)

        response = client.put("/profile/skills", json={"name": "Rust", "proficiency_level": 3}, headers=headers)

        assert response.status_code == 200
        assert response.json()["proficiency_level"] == 3
        args, kwargs = mock_skills.find_one_and_update.call_args
        assert args[0] == {"user_id": "user-1", "name": "Rust"}
        assert kwargs["upsert"] is True

    def test_upsert_skill_rejects_out_of_range_proficiency(self, client, headers):
        response = client.put("/profile/skills", json={"name": "Rust", "proficiency_level": 9}, headers=headers)
        assert response.status_code == 422

    @patch('app.routers.profile.projects_coll')
    def test_add_project(self, mock_projects, client, headers):
        mock_projects.insert_one = AsyncMock()

        response = client.post("/profile/projects", json={
            "name": "deployer", "github_url": "https://github.com/u/deployer",
            "languages": ["Go"], "topics": ["kubernetes"], "stars": 40
        }, headers=headers)

        assert response.status_code == 200
        assert response.json()["user_id"] == "user-1"
        mock_projects.insert_one.assert_awaited_once()

    @patch('app.routers.profile.experience_coll')
    def test_add_experience(self, mock_experience, client, headers):
        mock_experience.insert_one = AsyncMock()

        response = client.post("/profile/experience", json={
            "company": "Initech", "position": "Python Developer", "start_date": "2021-05-01", "is_current": True
        }, headers=headers)

        assert response.status_code == 200
        assert response.json()["is_current"] is True

    @patch('app.routers.profile.skills_coll')
    @patch('app.routers.profile.projects_coll')
    def test_derive_skills_from_projects(self, mock_projects, mock_skills, client, headers, make_cursor):
        mock_projects.find = MagicMock(return_value=make_cursor([
            {"user_id": "user-1", "name": "api", "languages": ["Python"], "topics": ["docker"]},
            {"user_id": "user-1", "name": "etl", "languages": ["Python"], "topics": []},
        ]))
        mock_skills.find_one_and_update = AsyncMock(side_effect=_echo_upsert)

        response = client.post("/profile/skills/derive", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["projects_count"] == 2
        assert data["skills_count"] == 2
        python = data["skills"][0]
        assert python["name"] == "Python"
        assert python["evidence"] == ["api", "etl"]
        assert python["source"] == "github"
        assert mock_skills.find_one_and_update.await_count == 2


def _echo_profile_upsert(filter_, update, **kwargs):
    return {**filter_, **update["$set"], **update["$setOnInsert"]}


class TestProfileInfo:
    """Profile basics and the manual LinkedIn import"""

    @patch('app.routers.profile.profiles_coll')
    def test_get_info_defaults_to_empty_profile(self, mock_profiles, client, headers):
        mock_profiles.find_one = AsyncMock(return_value=None)

        response = client.get("/profile/info", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user-1"
        assert data["full_name"] is None
        mock_profiles.find_one.assert_awaited_once_with({"user_id": "user-1"})

    @patch('app.routers.profile.profiles_coll')
    def test_update_info_sets_only_sent_fields(self, mock_profiles, client, headers):
        mock_profiles.find_one_and_update = AsyncMock(side_effect=_echo_profile_upsert)

        response = client.put("/profile/info", json={"full_name": "Ada Lovelace", "github_username": "ada"},
                              headers=headers)

        assert response.status_code == 200
        assert response.json()["github_username"] == "ada"
        args, kwargs = mock_profiles.find_one_and_update.call_args
        assert args[0] == {"user_id": "user-1"}
        assert set(args[1]["$set"]) == {"full_name", "github_username", "updated_at"}
        assert kwargs["upsert"] is True

    @patch('app.routers.profile.skills_coll')
    @patch('app.routers.profile.experience_coll')
    @patch('app.routers.profile.profiles_coll')
    def test_import_applies_manual_defaults(self, mock_profiles, mock_experience, mock_skills, client, headers):
        mock_profiles.find_one_and_update = AsyncMock(side_effect=_echo_profile_upsert)
        mock_experience.insert_many = AsyncMock()
        mock_skills.find_one_and_update = AsyncMock(side_effect=_echo_upsert)

        payload = {
            "full_name": "Ada Lovelace",
            "location": "London",
            "bio": "Analyst",
            "linkedin_url": "https://linkedin.com/in/ada",
            "experiences": [
                {"company": "Analytical Engines", "position": "Engineer", "start_date": "2020-01-01",
                 "is_current": True}
            ],
            "skills": ["Python", "SQL", "Python", " "],
        }

        response = client.post("/profile/import", json=payload, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["experiences_added"] == 1
        assert data["skills_imported"] == 2
        assert data["profile"]["linkedin_url"] == "https://linkedin.com/in/ada"

        stored_exp = mock_experience.insert_many.call_args[0][0][0]
        assert stored_exp["description"] == ""
        assert stored_exp["end_date"] is None
        assert stored_exp["skills_used"] == []

        skill_sets = [c.args[1]["$set"] for c in mock_skills.find_one_and_update.call_args_list]
        assert [s["name"] for s in skill_sets] == ["Python", "SQL"]
        for s in skill_sets:
            assert (s["proficiency_level"], s["source"], s["evidence"]) == (3, "manual", [])

    @patch('app.routers.profile.skills_coll')
    @patch('app.routers.profile.experience_coll')
    @patch('app.routers.profile.profiles_coll')
    def test_import_without_experience_skips_insert(self, mock_profiles, mock_experience, mock_skills, client, headers):
        mock_profiles.find_one_and_update = AsyncMock(side_effect=_echo_profile_upsert)
        mock_experience.insert_many = AsyncMock()

        response = client.post("/profile/import", json={"full_name": "Ada"}, headers=headers)

        assert response.status_code == 200
        mock_experience.insert_many.assert_not_called()
        assert set(mock_profiles.find_one_and_update.call_args[0][1]["$set"]) == {"full_name", "updated_at"}

    def test_import_requires_identity(self, client):
        assert client.post("/profile/import", json={}).status_code == 401
