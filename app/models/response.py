# models/response.py
from pydantic import BaseModel
from typing import List

from app.models.schemas import JobMatchModel, SkillModel, ProjectModel, WorkExperienceModel, ProfileModel


class AnalyzeJobResponse(BaseModel):
    success: bool = True
    match: JobMatchModel


class ProfileSnapshot(BaseModel):
    user_id: str
    skills: List[SkillModel]
    projects: List[ProjectModel]
    experience: List[WorkExperienceModel]


class SkillDeriveResponse(BaseModel):
    user_id: str
    projects_count: int
    skills_count: int
    skills: List[SkillModel]


class ProfileImportResponse(BaseModel):
    success: bool = True
    profile: ProfileModel
    experiences_added: int
    skills_imported: int
