from typing import Dict, List, Optional, Sequence
from app.models.models import (
    JobPosting, SkillRecord, ProjectRecord, ExperienceRecord,
    SkillPartition, HighlightedProject, HighlightedExperience,
    OptimizedCV, MatchResult,
)
from app.models.match_settings import MatchSettings, DEFAULT_MATCH_SETTINGS
from app.utils.utils import round_half_up
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

def skill_lookup(skills: Sequence[SkillRecord]) -> Dict[str, int]:
    # proficiency is carried along but does not weigh into the score
    return {s.name.lower(): s.proficiency_level for s in skills}

def partition_skills(job: JobPosting, lookup: Dict[str, int]) -> SkillPartition:
    return SkillPartition(
        matching_required=[s for s in job.required_skills if s.lower() in lookup],
        matching_preferred=[s for s in job.preferred_skills if s.lower() in lookup],
        missing_required=[s for s in job.required_skills if s.lower() not in lookup],
    )

def compute_match_score(
    job: JobPosting, partition: SkillPartition, has_experience: bool,
    settings: MatchSettings = DEFAULT_MATCH_SETTINGS
) -> int:
    w = settings.weights
    if job.required_skills:
        required = w.required_weight * len(partition.matching_required) / len(job.required_skills)
    else:
        required = w.required_weight
    if job.preferred_skills:
        preferred = w.preferred_weight * len(partition.matching_preferred) / len(job.preferred_skills)
    else:
        preferred = w.preferred_weight
    experience = w.experience_present if has_experience else w.experience_absent
    return round_half_up(required + preferred + experience)

def tier_sentence(score: int, settings: MatchSettings = DEFAULT_MATCH_SETTINGS) -> str:
    tiers, templates = settings.tiers, settings.templates
    if score >= tiers.excellent_min:
        return templates.excellent
    if score >= tiers.good_min:
        return templates.good
    if score >= tiers.moderate_min:
        return templates.moderate
    return templates.low

def generate_recommendations(
    score: int,
    missing_skills: List[str],
    matching_skills: List[str],
    projects: Sequence[ProjectRecord],
    experience: Sequence[ExperienceRecord],
    settings: MatchSettings = DEFAULT_MATCH_SETTINGS,
) -> str:
    limits, templates = settings.limits, settings.templates
    out = [tier_sentence(score, settings)]

    if missing_skills:
        out.append(templates.missing_skills.format(
            skills=", ".join(missing_skills[:limits.missing_in_recommendation])))
    if projects:
        # caller's order is trusted, no re-sorting here
        names = [p.name for p in projects[:limits.projects_in_recommendation]]
        out.append(templates.projects.format(projects=", ".join(names)))
    if experience:
        out.append(templates.experience.format(company=experience[0].company))
    if matching_skills:
        out.append(templates.matching_skills.format(
            skills=", ".join(matching_skills[:limits.matching_in_recommendation])))

    return " ".join(out)

def mentions_skill(skills: List[str], texts: Sequence[Optional[str]]) -> bool:
    """True when any skill is a case-insensitive substring of any text.

    Substring, not token, semantics: "Go" matches "Golang" and "Java" matches
    "JavaScript".
    """
    lowered = [t.lower() for t in texts if t]
    for skill in skills:
        needle = skill.lower()
        if any(needle in t for t in lowered):
            return True
    return False

def select_projects(
    matching_skills: List[str], projects: Sequence[ProjectRecord], limit: int
) -> List[HighlightedProject]:
    relevant = [p for p in projects if mentions_skill(matching_skills, list(p.languages) + list(p.topics))]
    return [
        HighlightedProject(
            name=p.name, description=p.description, url=p.url,
            technologies=list(p.languages), stars=p.stars,
        )
        for p in relevant[:limit]
    ]

def select_experience(
    matching_skills: List[str], experience: Sequence[ExperienceRecord], limit: int,
    ongoing_label: str = "Present"
) -> List[HighlightedExperience]:
    relevant = [e for e in experience if mentions_skill(matching_skills, [e.position, e.description])]
    return [
        HighlightedExperience(
            company=e.company, position=e.position, description=e.description,
            duration=f"{e.start_date} - {e.end_date or ongoing_label}",
        )
        for e in relevant[:limit]
    ]

def generate_optimized_cv(
    job: JobPosting,
    matching_skills: List[str],
    projects: Sequence[ProjectRecord],
    experience: Sequence[ExperienceRecord],
    settings: MatchSettings = DEFAULT_MATCH_SETTINGS,
) -> OptimizedCV:
    limits, templates = settings.limits, settings.templates
    summary = templates.summary.format(
        skills=", ".join(matching_skills[:limits.summary_skills]),
        company=job.company,
    )
    return OptimizedCV(
        job_title=job.title,
        company=job.company,
        targeted_skills=list(matching_skills),
        highlighted_projects=select_projects(matching_skills, projects, limits.highlighted_projects),
        highlighted_experience=select_experience(
            matching_skills, experience, limits.highlighted_experience, templates.ongoing_end_date
        ),
        summary=summary,
    )


class MatchEngine:
    """Scores a job posting against a candidate inventory and builds a targeted CV.

    Stateless apart from its settings; ``compute`` performs no I/O and
    returns the same result for the same inputs.
    """

    def __init__(self, settings: Optional[MatchSettings] = None):
        self.settings = settings or DEFAULT_MATCH_SETTINGS

    def compute(
        self,
        job: JobPosting,
        skills: Sequence[SkillRecord],
        projects: Sequence[ProjectRecord],
        experience: Sequence[ExperienceRecord],
    ) -> MatchResult:
        partition = partition_skills(job, skill_lookup(skills))
        matching = partition.matching
        score = compute_match_score(job, partition, bool(experience), self.settings)

        logger.debug(
            f"Scored '{job.title}' at {job.company}: {score} "
            f"({len(partition.matching_required)}/{len(job.required_skills)} required, "
            f"{len(partition.matching_preferred)}/{len(job.preferred_skills)} preferred)"
        )

        return MatchResult(
            match_score=score,
            matching_skills=matching,
            missing_skills=partition.missing_required,
            recommendations=generate_recommendations(
                score, partition.missing_required, matching, projects, experience, self.settings
            ),
            optimized_cv=generate_optimized_cv(job, matching, projects, experience, self.settings),
        )
