import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pymongo import ReturnDocument

from app.helpers.skills import derive_skills_from_projects
from app.models.models import ProjectRecord
from app.models.payloads import SkillUpsert, ProjectCreate, ExperienceCreate, ProfileUpdate, ProfileImport
from app.models.response import ProfileSnapshot, SkillDeriveResponse, ProfileImportResponse
from app.models.schemas import SkillModel, ProjectModel, WorkExperienceModel, ProfileModel
from app.routers.dependencies import get_current_user
from app.services.db import skills_coll, projects_coll, experience_coll, profiles_coll
from app.utils.exceptions import ExceptionContext
from app.utils.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, 'request_id', 'unknown')


@router.get("/", response_model=ProfileSnapshot)
async def get_profile(request: Request, user_id: str = Depends(get_current_user)):
    """Skills, projects (most starred first) and experience (most recent first)"""
    with ExceptionContext("get_profile", logger, request_id=_request_id(request)):
        skills = await skills_coll.find({"user_id": user_id}).to_list(length=None)
        projects = await projects_coll.find({"user_id": user_id}).sort("stars", -1).to_list(length=None)
        experience = await experience_coll.find({"user_id": user_id}).sort("start_date", -1).to_list(length=None)

    return ProfileSnapshot(
        user_id=user_id,
        skills=[SkillModel(**s) for s in skills],
        projects=[ProjectModel(**p) for p in projects],
        experience=[WorkExperienceModel(**e) for e in experience],
    )


async def _upsert_skill(skill: SkillModel) -> SkillModel:
    data = skill.model_dump(exclude={"created_at"})
    doc = await skills_coll.find_one_and_update(
        {"user_id": skill.user_id, "name": skill.name},
        {"$set": data, "$setOnInsert": {"created_at": skill.created_at}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return SkillModel(**doc)


@router.put("/skills", response_model=SkillModel)
async def upsert_skill(payload: SkillUpsert, request: Request, user_id: str = Depends(get_current_user)):
    """Add a skill or replace the one with the same name"""
    with ExceptionContext("upsert_skill", logger, request_id=_request_id(request)):
        skill = await _upsert_skill(SkillModel(user_id=user_id, **payload.model_dump()))

    logger.info(f"Stored skill '{skill.name}' for user {user_id}")
    return skill


@router.post("/projects", response_model=ProjectModel)
async def add_project(payload: ProjectCreate, request: Request, user_id: str = Depends(get_current_user)):
    project = ProjectModel(project_id=str(uuid.uuid4()), user_id=user_id, **payload.model_dump())
    with ExceptionContext("add_project", logger, request_id=_request_id(request)):
        await projects_coll.insert_one(project.model_dump())
    return project


@router.post("/experience", response_model=WorkExperienceModel)
async def add_experience(payload: ExperienceCreate, request: Request, user_id: str = Depends(get_current_user)):
    experience = WorkExperienceModel(experience_id=str(uuid.uuid4()), user_id=user_id, **payload.model_dump())
    with ExceptionContext("add_experience", logger, request_id=_request_id(request)):
        await experience_coll.insert_one(experience.model_dump())
    return experience


@router.post("/skills/derive", response_model=SkillDeriveResponse)
async def derive_skills(request: Request, user_id: str = Depends(get_current_user)):
    """Rebuild project-evidenced skills from the projects already on the profile"""
    with ExceptionContext("derive_skills", logger, request_id=_request_id(request)):
        project_docs = await projects_coll.find({"user_id": user_id}).to_list(length=None)
        projects = [
            ProjectRecord(
                name=p["name"], languages=p.get("languages") or [], topics=p.get("topics") or [],
                stars=p.get("stars", 0),
            )
            for p in project_docs
        ]

        stored = []
        now = datetime.utcnow()
        for record in derive_skills_from_projects(projects):
            stored.append(await _upsert_skill(SkillModel(user_id=user_id, created_at=now, **record.model_dump())))

    logger.info(
        f"Derived {len(stored)} skills from {len(projects)} projects",
        extra={"request_id": _request_id(request), "user_id": user_id}
    )
    return SkillDeriveResponse(
        user_id=user_id, projects_count=len(projects), skills_count=len(stored), skills=stored
    )


async def _update_profile_info(user_id: str, fields: dict) -> ProfileModel:
    now = datetime.utcnow()
    doc = await profiles_coll.find_one_and_update(
        {"user_id": user_id},
        {"$set": {**fields, "updated_at": now}, "$setOnInsert": {"created_at": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return ProfileModel(**doc)


@router.get("/info", response_model=ProfileModel)
async def get_profile_info(request: Request, user_id: str = Depends(get_current_user)):
    """Profile basics; a caller who never saved any gets an empty profile"""
    with ExceptionContext("get_profile_info", logger, request_id=_request_id(request)):
        doc = await profiles_coll.find_one({"user_id": user_id})
    return ProfileModel(**doc) if doc else ProfileModel(user_id=user_id)


@router.put("/info", response_model=ProfileModel)
async def update_profile_info(payload: ProfileUpdate, request: Request, user_id: str = Depends(get_current_user)):
    with ExceptionContext("update_profile_info", logger, request_id=_request_id(request)):
        profile = await _update_profile_info(user_id, payload.model_dump(exclude_unset=True))
    return profile


@router.post("/import", response_model=ProfileImportResponse)
async def import_profile(payload: ProfileImport, request: Request, user_id: str = Depends(get_current_user)):
    """Manual LinkedIn import: profile basics, work history and skill names"""
    request_id = _request_id(request)

    experiences = [
        WorkExperienceModel(
            experience_id=str(uuid.uuid4()), user_id=user_id,
            **{**exp.model_dump(), "description": exp.description or ""}
        )
        for exp in payload.experiences
    ]
    # Imported skills carry no evidence and a mid-scale proficiency
    skills = [
        SkillModel(user_id=user_id, name=name, category="general", proficiency_level=3,
                   source="manual", evidence=[])
        for name in dict.fromkeys(s.strip() for s in payload.skills if s.strip())
    ]

    with ExceptionContext("import_profile", logger, request_id=request_id):
        profile = await _update_profile_info(
            user_id, payload.model_dump(include={"full_name", "location", "bio", "linkedin_url"}, exclude_none=True)
        )
        if experiences:
            await experience_coll.insert_many([e.model_dump() for e in experiences])
        for skill in skills:
            await _upsert_skill(skill)

    logger.info(
        f"Imported {len(experiences)} experiences and {len(skills)} skills",
        extra={"request_id": request_id, "user_id": user_id}
    )
    return ProfileImportResponse(
        profile=profile, experiences_added=len(experiences), skills_imported=len(skills)
    )
