import math
from typing import Dict, List, Sequence

from app.models.models import ProjectRecord, SkillRecord

KNOWN_LANGUAGES = {
    "JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Ruby", "Go",
    "Rust", "PHP", "Swift", "Kotlin", "Dart", "Scala", "HTML", "CSS",
}

def is_language(name: str) -> bool:
    return name in KNOWN_LANGUAGES

def proficiency_from_count(count: int) -> int:
    # two supporting projects per level, capped at 5
    return min(5, math.ceil(count / 2))

def derive_skills_from_projects(projects: Sequence[ProjectRecord], source: str = "github") -> List[SkillRecord]:
    """Turn project languages and topics into skill records.

    Each distinct language or topic becomes one skill whose evidence is the
    list of projects mentioning it. A project naming the same term as both a
    language and a topic counts twice, the way repository metadata reports it.
    Skills come out in order of first appearance.
    """
    evidence: Dict[str, List[str]] = {}
    for project in projects:
        for term in list(project.languages) + list(project.topics):
            evidence.setdefault(term, []).append(project.name)

    return [
        SkillRecord(
            name=name,
            category="programming" if is_language(name) else "framework",
            proficiency_level=proficiency_from_count(len(names)),
            source=source,
            evidence=names,
        )
        for name, names in evidence.items()
    ]
