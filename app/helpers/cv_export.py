import re
from typing import Any, Dict, List

# Plain-text rendering of a stored optimized CV (camelCase keys)


def _line(value) -> List[str]:
    return [str(value)] if value else []


def render_cv_text(cv: Dict[str, Any]) -> str:
    lines = [
        f"CV OPTIMIZED FOR: {cv.get('jobTitle', '')} at {cv.get('company', '')}",
        "",
        "PROFESSIONAL SUMMARY:",
        cv.get("summary", ""),
        "",
        "KEY SKILLS:",
        ", ".join(cv.get("targetedSkills") or []),
        "",
    ]

    experience = cv.get("highlightedExperience") or []
    if experience:
        lines.append("RELEVANT EXPERIENCE:")
        for exp in experience:
            lines += ["", f"{exp.get('position')} at {exp.get('company')}"]
            lines += _line(exp.get("duration"))
            lines += _line(exp.get("description"))
        lines.append("")

    projects = cv.get("highlightedProjects") or []
    if projects:
        lines.append("HIGHLIGHTED PROJECTS:")
        for proj in projects:
            lines += ["", f"{proj.get('name')} ({proj.get('stars', 0)} stars)"]
            lines += _line(proj.get("description"))
            lines.append(f"Technologies: {', '.join(proj.get('technologies') or [])}")
            lines += _line(proj.get("url") and f"URL: {proj['url']}")

    return "\n".join(lines) + "\n"


def cv_filename(cv: Dict[str, Any]) -> str:
    """CV_<company>_<title>.txt, whitespace runs as underscores, header-safe"""
    def clean(part: str) -> str:
        return re.sub(r"[^\w.-]+", "_", (part or "").strip(), flags=re.ASCII).strip("_")

    return f"CV_{clean(cv.get('company'))}_{clean(cv.get('jobTitle'))}.txt"
