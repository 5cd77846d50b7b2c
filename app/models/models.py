from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# Inputs consumed by the match engine. Stored documents are validated into
# these records by the service layer before the engine sees them.

class JobPosting(BaseModel):
    title: str
    company: str
    required_skills: List[str] = Field(default_factory=list)
    preferred_skills: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    location: Optional[str] = None
    salary_range: Optional[str] = None
    job_url: Optional[str] = None

class SkillRecord(BaseModel):
    name: str
    proficiency_level: int = Field(default=1, ge=1, le=5)
    category: str = "technical"
    source: str = "manual"
    evidence: List[str] = Field(default_factory=list)

class ProjectRecord(BaseModel):
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    stars: int = Field(default=0, ge=0)

class ExperienceRecord(BaseModel):
    company: str
    position: str
    description: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None  # None means ongoing

# -------- Engine output --------

class SkillPartition(BaseModel):
    matching_required: List[str] = Field(default_factory=list)
    matching_preferred: List[str] = Field(default_factory=list)
    missing_required: List[str] = Field(default_factory=list)

    @property
    def matching(self) -> List[str]:
        # required matches first, duplicates kept
        return self.matching_required + self.matching_preferred

class HighlightedProject(BaseModel):
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    stars: int = 0

class HighlightedExperience(BaseModel):
    company: str
    position: str
    description: Optional[str] = None
    duration: str

class OptimizedCV(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_title: str = Field(alias="jobTitle")
    company: str
    targeted_skills: List[str] = Field(default_factory=list, alias="targetedSkills")
    highlighted_projects: List[HighlightedProject] = Field(default_factory=list, alias="highlightedProjects")
    highlighted_experience: List[HighlightedExperience] = Field(default_factory=list, alias="highlightedExperience")
    summary: str

class MatchResult(BaseModel):
    match_score: int = Field(ge=0, le=100)
    matching_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    recommendations: str
    optimized_cv: OptimizedCV
