"""
Match Engine Settings: scoring weights, tiers, limits and sentence templates
"""
from pydantic import BaseModel, Field, model_validator


class ScoreWeights(BaseModel):
    """Points contributed by each component of the match score"""
    required_weight: float = Field(default=70.0, ge=0.0, description="Points for full required-skill coverage")
    preferred_weight: float = Field(default=20.0, ge=0.0, description="Points for full preferred-skill coverage")
    experience_present: float = Field(default=10.0, ge=0.0, description="Bonus when any experience is documented")
    experience_absent: float = Field(default=5.0, ge=0.0, description="Bonus when no experience is documented")

    @model_validator(mode="after")
    def validate_total(self):
        total = self.required_weight + self.preferred_weight + self.experience_present
        if abs(total - 100.0) > 0.01:
            raise ValueError("required_weight + preferred_weight + experience_present must sum to 100")
        if self.experience_absent > self.experience_present:
            raise ValueError("experience_absent must not exceed experience_present")
        return self


class ScoreTiers(BaseModel):
    """Lower bounds of the recommendation tiers (0-100 scale)"""
    excellent_min: int = Field(default=80, ge=0, le=100)
    good_min: int = Field(default=60, ge=0, le=100)
    moderate_min: int = Field(default=40, ge=0, le=100)

    @model_validator(mode="after")
    def validate_order(self):
        if not self.excellent_min > self.good_min > self.moderate_min:
            raise ValueError("Tier thresholds must be strictly descending: excellent > good > moderate")
        return self


class HighlightLimits(BaseModel):
    """How many items each recommendation sentence and CV section may show"""
    missing_in_recommendation: int = Field(default=5, ge=1)
    projects_in_recommendation: int = Field(default=3, ge=1)
    matching_in_recommendation: int = Field(default=5, ge=1)
    highlighted_projects: int = Field(default=5, ge=0)
    highlighted_experience: int = Field(default=3, ge=0)
    summary_skills: int = Field(default=3, ge=1)


class RecommendationTemplates(BaseModel):
    """Literal sentences used to assemble recommendations and the CV summary"""
    excellent: str = "Excellent match! You are highly compatible with this position."
    good: str = "Good match. You meet most of the requirements."
    moderate: str = "Moderate match. Consider strengthening some skills."
    low: str = "Low match. This position may be outside your current profile."
    missing_skills: str = "Consider developing these skills: {skills}."
    projects: str = "Highlight these projects in your CV: {projects}."
    experience: str = "Emphasize your experience at {company} for this position."
    matching_skills: str = "Make sure to highlight these key skills: {skills}."
    summary: str = "Professional with experience in {skills} looking to contribute at {company}."
    ongoing_end_date: str = "Present"


class MatchSettings(BaseModel):
    """Complete match engine configuration"""
    weights: ScoreWeights = Field(default_factory=ScoreWeights)
    tiers: ScoreTiers = Field(default_factory=ScoreTiers)
    limits: HighlightLimits = Field(default_factory=HighlightLimits)
    templates: RecommendationTemplates = Field(default_factory=RecommendationTemplates)


DEFAULT_MATCH_SETTINGS = MatchSettings()
