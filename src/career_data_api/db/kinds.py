from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import func

from career_data_api.db.models import Education, Experience, Project, Skill
from career_data_api.errors import ValidationError
from career_data_api.schemas import EducationInput, ExperienceInput, ProjectInput, SkillInput

TEXT = "text"
TAG = "tag"
FLAG = "flag"

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


@dataclass(frozen=True)
class FilterDef:
    """One supported list filter.

    ``text`` filters are case-insensitive substring matches, ``tag`` filters
    require exact membership in a list column, ``flag`` filters compare booleans.
    """

    name: str
    column: str
    mode: str


@dataclass(frozen=True)
class EntityKind:
    entity_name: str
    collection: str
    model: Type[Any]
    input_model: Type[BaseModel]
    required: Tuple[str, ...]
    filters: Tuple[FilterDef, ...]
    ordering: Callable[[Any], List[Any]]
    _filter_index: Dict[str, FilterDef] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_filter_index", {f.name: f for f in self.filters})

    def parse_filters(self, filters: Mapping[str, Any] | None) -> List[Tuple[FilterDef, Any]]:
        """Validate a filter mapping, dropping criteria that were not supplied."""
        if not filters:
            return []
        unknown = sorted(name for name in filters if name not in self._filter_index)
        if unknown:
            raise ValidationError(
                f"Unknown {self.entity_name.lower()} filter fields: {', '.join(unknown)}", unknown
            )
        parsed: List[Tuple[FilterDef, Any]] = []
        for name, value in filters.items():
            if value is None or value == "":
                continue
            definition = self._filter_index[name]
            if definition.mode == FLAG:
                value = _parse_flag(name, value)
            else:
                value = str(value)
            parsed.append((definition, value))
        return parsed


def _parse_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"Filter {name} must be a boolean", [name])


EXPERIENCES = EntityKind(
    entity_name="Experience",
    collection="experiences",
    model=Experience,
    input_model=ExperienceInput,
    required=("company", "location", "title", "startDate"),
    filters=(
        FilterDef("company", "company", TEXT),
        FilterDef("title", "title", TEXT),
        FilterDef("industry", "industry", TEXT),
        FilterDef("roleType", "role_types", TAG),
        FilterDef("technology", "technologies", TAG),
        FilterDef("featured", "featured", FLAG),
    ),
    ordering=lambda m: [m.start_date.desc(), m.created_at.desc(), m.id.asc()],
)

SKILLS = EntityKind(
    entity_name="Skill",
    collection="skills",
    model=Skill,
    input_model=SkillInput,
    required=("name", "roleRelevance", "level", "rating", "yearsOfExperience"),
    filters=(
        FilterDef("name", "name", TEXT),
        FilterDef("roleRelevance", "role_relevance", TEXT),
        FilterDef("level", "level", TEXT),
        FilterDef("tag", "tags", TAG),
        FilterDef("keyword", "keywords", TAG),
    ),
    ordering=lambda m: [func.lower(m.name).asc(), m.name.asc(), m.id.asc()],
)

PROJECTS = EntityKind(
    entity_name="Project",
    collection="projects",
    model=Project,
    input_model=ProjectInput,
    required=("name", "type", "overview"),
    filters=(
        FilterDef("name", "name", TEXT),
        FilterDef("type", "type", TEXT),
        FilterDef("technology", "technologies", TAG),
        FilterDef("keyword", "keywords", TAG),
        FilterDef("roleType", "role_types", TAG),
        FilterDef("featured", "featured", FLAG),
    ),
    ordering=lambda m: [m.date.desc().nulls_last(), m.created_at.desc(), m.id.asc()],
)

EDUCATIONS = EntityKind(
    entity_name="Education",
    collection="educations",
    model=Education,
    input_model=EducationInput,
    required=("institution", "degree", "field", "graduationYear"),
    filters=(
        FilterDef("institution", "institution", TEXT),
        FilterDef("degree", "degree", TEXT),
        FilterDef("field", "field", TEXT),
    ),
    ordering=lambda m: [m.graduation_year.desc(), m.created_at.desc(), m.id.asc()],
)

ENTITY_KINDS: Dict[str, EntityKind] = {
    kind.collection: kind for kind in (EXPERIENCES, SKILLS, PROJECTS, EDUCATIONS)
}

PROFILE_REQUIRED = (
    "personalInfo.name",
    "personalInfo.email",
    "positioning.headline",
    "positioning.summary",
    "positioning.targetRoles",
    "positioning.targetIndustries",
    "professionalMission",
)
