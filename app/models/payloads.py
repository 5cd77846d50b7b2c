from pydantic import BaseModel, Field
from typing import List, Optional

from app.models.schemas import JobStatus

# Request bodies accepted by the routers

class JobPostingCreate(BaseModel):
    """New posting tracked by the caller"""
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    description: Optional[str] = None
    requirements: Optional[str] = None
    required_skills: List[str] = []
    preferred_skills: List[str] = []
    location: Optional[str] = None
    salary_range: Optional[str] = None
    job_url: Optional[str] = None

class JobStatusUpdate(BaseModel):
    status: JobStatus

class SkillUpsert(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = "technical"
    proficiency_level: int = Field(default=1, ge=1, le=5)
    source: str = "manual"
    evidence: List[str] = []

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    github_url: Optional[str] = None
    languages: List[str] = []
    topics: List[str] = []
    stars: int = Field(default=0, ge=0)
    forks: int = Field(default=0, ge=0)
    last_updated: Optional[str] = None

class ExperienceCreate(BaseModel):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    is_current: bool = False
    achievements: List[str] = []
    skills_used: List[str] = []

class AnalyzeJobRequest(BaseModel):
    """Payload for POST /api/matches/analyze"""
    job_id: str = Field(..., min_length=1)

class ProfileUpdate(BaseModel):
    """Only the fields sent are changed"""
    full_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_username: Optional[str] = None

class ImportedExperience(BaseModel):
    company: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    is_current: bool = False

class ProfileImport(BaseModel):
    """Profile data copied by hand from LinkedIn"""
    full_name: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    experiences: List[ImportedExperience] = []
    skills: List[str] = []
