from __future__ import annotations

import logging
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from career_data_api.db.repository import CareerStore, get_career_store

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

SECTION_DIVIDER = "\n\n---\n\n"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_PROFILE_LINKS = (
    ("phone", "Phone"),
    ("location", "Location"),
    ("linkedin", "LinkedIn"),
    ("github", "GitHub"),
    ("website", "Website"),
)

_PROJECT_NARRATIVE = (
    ("challenge", "Challenge"),
    ("approach", "Approach"),
    ("outcome", "Outcome"),
    ("impact", "Impact"),
)


@dataclass
class CareerContext:
    profile: Optional[Record] = None
    experiences: List[Record] = field(default_factory=list)
    skills: List[Record] = field(default_factory=list)
    projects: List[Record] = field(default_factory=list)
    educations: List[Record] = field(default_factory=list)


def build_context(store: CareerStore | None = None) -> CareerContext:
    """Fetch every record kind concurrently and return them as one composite.

    All five reads must succeed; the first failure is re-raised unchanged.
    """
    store = store or get_career_store()
    with ThreadPoolExecutor(max_workers=5, thread_name_prefix="career-context") as pool:
        profile = pool.submit(store.profile.get)
        experiences = pool.submit(store.experiences.list)
        skills = pool.submit(store.skills.list)
        projects = pool.submit(store.projects.list)
        educations = pool.submit(store.educations.list)
    # Leaving the executor waits for all five fetches before any result is read.
    context = CareerContext(
        profile=profile.result(),
        experiences=experiences.result(),
        skills=skills.result(),
        projects=projects.result(),
        educations=educations.result(),
    )
    logger.info(
        "Built career context: profile=%s experiences=%d skills=%d projects=%d educations=%d",
        context.profile is not None,
        len(context.experiences),
        len(context.skills),
        len(context.projects),
        len(context.educations),
    )
    return context


# -----------------------------
# Rendering
# -----------------------------
def format_month_year(value: date | datetime | None) -> str:
    if value is None:
        return "Present"
    return f"{_MONTHS[value.month - 1]} {value.year}"


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _bullets(items: List[str]) -> List[str]:
    return [f"- {item}" for item in items]


def _render_profile(profile: Optional[Record]) -> str:
    lines = ["## Profile"]
    if not profile:
        lines.append("No profile recorded.")
        return "\n".join(lines)

    personal: Mapping[str, Any] = profile.get("personalInfo") or {}
    positioning: Mapping[str, Any] = profile.get("positioning") or {}

    lines.append(f"Name: {personal.get('name', '')}")
    lines.append(f"Email: {personal.get('email', '')}")
    for key, label in _PROFILE_LINKS:
        if _has_text(personal.get(key)):
            lines.append(f"{label}: {personal[key]}")

    lines.append(f"Headline: {positioning.get('headline', '')}")
    lines.append(f"Summary: {positioning.get('summary', '')}")
    if positioning.get("targetRoles"):
        lines.append(f"Target Roles: {', '.join(positioning['targetRoles'])}")
    if positioning.get("targetIndustries"):
        lines.append(f"Target Industries: {', '.join(positioning['targetIndustries'])}")

    if profile.get("valuePropositions"):
        lines.append("Value Propositions:")
        lines.extend(_bullets(profile["valuePropositions"]))
    if _has_text(profile.get("professionalMission")):
        lines.append(f"Professional Mission: {profile['professionalMission']}")
    if profile.get("uniqueSellingPoints"):
        lines.append("Unique Selling Points:")
        lines.extend(_bullets(profile["uniqueSellingPoints"]))
    return "\n".join(lines)


def _render_achievement(achievement: Mapping[str, Any]) -> str:
    text = f"- {achievement.get('description', '')}"
    extras = []
    if _has_text(achievement.get("metrics")):
        extras.append(f"Metrics: {achievement['metrics']}")
    if _has_text(achievement.get("impact")):
        extras.append(f"Impact: {achievement['impact']}")
    if extras:
        text += f" ({'; '.join(extras)})"
    return text


def _render_experience(exp: Record) -> str:
    lines = [f"### {exp['title']} at {exp['company']}"]
    lines.append(f"Location: {exp['location']}")
    if _has_text(exp.get("industry")):
        lines.append(f"Industry: {exp['industry']}")
    lines.append(
        f"Dates: {format_month_year(exp['startDate'])} - {format_month_year(exp.get('endDate'))}"
    )
    if exp.get("roleTypes"):
        lines.append(f"Role Types: {', '.join(exp['roleTypes'])}")
    if exp.get("responsibilities"):
        lines.append("Responsibilities:")
        lines.extend(_bullets(exp["responsibilities"]))
    if exp.get("achievements"):
        lines.append("Achievements:")
        lines.extend(_render_achievement(a) for a in exp["achievements"])
    if exp.get("technologies"):
        lines.append(f"Technologies: {', '.join(exp['technologies'])}")
    return "\n".join(lines)


def _render_experiences(experiences: List[Record]) -> str:
    if not experiences:
        return "## Work Experience\nNo work experience recorded."
    return "\n\n".join(["## Work Experience", *(_render_experience(e) for e in experiences)])


def group_skills(skills: List[Record]) -> "OrderedDict[str, List[Record]]":
    """Group skills by role relevance in first-encountered order."""
    groups: "OrderedDict[str, List[Record]]" = OrderedDict()
    for skill in skills:
        groups.setdefault(skill["roleRelevance"], []).append(skill)
    return groups


def _number(value: Any) -> str:
    # Whole floats render without a trailing ".0".
    return f"{value:g}" if isinstance(value, float) else str(value)


def _render_skill(skill: Record) -> str:
    return (
        f"- {skill['name']} ({skill['level']}, rating {_number(skill['rating'])}, "
        f"{_number(skill['yearsOfExperience'])} years)"
    )


def _render_skills(skills: List[Record]) -> str:
    if not skills:
        return "## Skills\nNo skills recorded."
    blocks = ["## Skills"]
    for relevance, members in group_skills(skills).items():
        blocks.append("\n".join([f"### {relevance}", *(_render_skill(s) for s in members)]))
    return "\n\n".join(blocks)


def _render_project(project: Record) -> str:
    lines = [f"### {project['name']} ({project['type']})"]
    if project.get("date") is not None:
        lines.append(f"Date: {format_month_year(project['date'])}")
    lines.append(f"Overview: {project['overview']}")
    for key, label in _PROJECT_NARRATIVE:
        if _has_text(project.get(key)):
            lines.append(f"{label}: {project[key]}")
    if project.get("technologies"):
        lines.append(f"Technologies: {', '.join(project['technologies'])}")
    if project.get("keywords"):
        lines.append(f"Keywords: {', '.join(project['keywords'])}")
    return "\n".join(lines)


def _render_projects(projects: List[Record]) -> str:
    if not projects:
        return "## Projects\nNo projects recorded."
    return "\n\n".join(["## Projects", *(_render_project(p) for p in projects)])


def _render_education(edu: Record) -> str:
    lines = [f"### {edu['degree']} in {edu['field']}, {edu['institution']} ({edu['graduationYear']})"]
    if edu.get("relevantCoursework"):
        lines.append(f"Relevant Coursework: {', '.join(edu['relevantCoursework'])}")
    return "\n".join(lines)


def _render_educations(educations: List[Record]) -> str:
    if not educations:
        return "## Education\nNo education recorded."
    return "\n\n".join(["## Education", *(_render_education(e) for e in educations)])


def render_context(context: CareerContext) -> str:
    """Serialize the composite into the context document given to the model.

    Sections always appear in the same order and empty collections are stated
    explicitly, so identical records always render identical text.
    """
    sections = [
        _render_profile(context.profile),
        _render_experiences(context.experiences),
        _render_skills(context.skills),
        _render_projects(context.projects),
        _render_educations(context.educations),
    ]
    return SECTION_DIVIDER.join(sections)
