from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# -----------------------------
# Record inputs
# -----------------------------
# Every field is optional at the type level; required-field checks are done by
# the repository so that all missing names are reported together.


class PersonalInfoInput(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None


class PositioningInput(CamelModel):
    headline: Optional[str] = None
    summary: Optional[str] = None
    target_roles: Optional[List[str]] = None
    target_industries: Optional[List[str]] = None


class ProfileInput(CamelModel):
    personal_info: Optional[PersonalInfoInput] = None
    positioning: Optional[PositioningInput] = None
    value_propositions: List[str] = Field(default_factory=list)
    professional_mission: Optional[str] = None
    unique_selling_points: List[str] = Field(default_factory=list)


class AchievementInput(CamelModel):
    description: str = Field(min_length=1)
    metrics: Optional[str] = None
    impact: Optional[str] = None


class ExperienceInput(CamelModel):
    company: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    industry: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    role_types: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    achievements: List[AchievementInput] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    featured: bool = False


class SkillInput(CamelModel):
    name: Optional[str] = None
    role_relevance: Optional[str] = None
    level: Optional[str] = None
    rating: Optional[float] = None
    years_of_experience: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


class ProjectInput(CamelModel):
    name: Optional[str] = None
    type: Optional[str] = None
    date: Optional[dt.date] = None
    featured: bool = False
    overview: Optional[str] = None
    challenge: Optional[str] = None
    approach: Optional[str] = None
    outcome: Optional[str] = None
    impact: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    role_types: List[str] = Field(default_factory=list)


class EducationInput(CamelModel):
    institution: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    graduation_year: Optional[int] = None
    relevant_coursework: List[str] = Field(default_factory=list)


# -----------------------------
# Generation
# -----------------------------
class JobInfo(CamelModel):
    description: Optional[str] = None
    job_type: Optional[str] = None


class TokenUsage(CamelModel):
    input_tokens: int
    output_tokens: int
    cache_read_input_tokens: Optional[int] = None
    cache_creation_input_tokens: Optional[int] = None


class GenerationResult(CamelModel):
    content: str
    usage: TokenUsage

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class DeleteResult(CamelModel):
    success: bool
    id: str
