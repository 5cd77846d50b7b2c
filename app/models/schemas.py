from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum

# -------- Job postings --------
class JobStatus(str, Enum):
    """Where the candidate stands with a posting"""
    ACTIVE = "active"
    APPLIED = "applied"
    INTERVIEW = "interview"
    REJECTED = "rejected"
    OFFER = "offer"

class JobPostingModel(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    job_id: str
    user_id: str
    title: str
    company: str
    description: Optional[str] = None
    requirements: Optional[str] = None
    required_skills: List[str] = []
    preferred_skills: List[str] = []
    location: Optional[str] = None
    salary_range: Optional[str] = None
    job_url: Optional[str] = None
    status: JobStatus = JobStatus.ACTIVE
    posting_date: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)

# -------- Profile --------
class SkillModel(BaseModel):
    user_id: str
    name: str
    category: str = "technical"
    proficiency_level: int = Field(default=1, ge=1, le=5)
    source: str = "manual"
    evidence: List[str] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)

class ProjectModel(BaseModel):
    project_id: str
    user_id: str
    name: str
    description: Optional[str] = None
    github_url: Optional[str] = None
    languages: List[str] = []
    topics: List[str] = []
    stars: int = Field(default=0, ge=0)
    forks: int = Field(default=0, ge=0)
    last_updated: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

class WorkExperienceModel(BaseModel):
    experience_id: str
    user_id: str
    company: str
    position: str
    description: Optional[str] = None
    start_date: str  # ISO date, sorts lexicographically
    end_date: Optional[str] = None
    is_current: bool = False
    achievements: List[str] = []
    skills_used: List[str] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)

# -------- Matches --------
class JobMatchModel(BaseModel):
    user_id: str
    job_id: str
    match_score: int
    matching_skills: List[str] = []
    missing_skills: List[str] = []
    recommendations: Optional[str] = None
    optimized_cv: Dict[str, Any] = {}
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

# -------- Profile basics --------
class ProfileModel(BaseModel):
    """Contact and background fields shown on the candidate's profile"""
    user_id: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_username: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
