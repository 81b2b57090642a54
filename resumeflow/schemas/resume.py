from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _coerce_list(value: Any) -> Any:
    if value is None:
        return []
    return value


def _coerce_object(value: Any) -> Any:
    if value is None:
        return {}
    return value


Text = Annotated[str, BeforeValidator(_coerce_text)]
TextList = Annotated[list[Text], BeforeValidator(_coerce_list)]


class ResumeLink(BaseModel):
    label: Text = ""
    url: Text = ""


class PersonalInfo(BaseModel):
    full_name: Text = ""
    email: Text = ""
    phone: Text = ""
    location: Text = ""
    links: Annotated[list[ResumeLink], BeforeValidator(_coerce_list)] = Field(default_factory=list)


class SkillSet(BaseModel):
    technical: TextList = Field(default_factory=list)
    soft: TextList = Field(default_factory=list)
    tools: TextList = Field(default_factory=list)

    def flattened(self) -> list[str]:
        return [*self.technical, *self.soft, *self.tools]


class WorkExperience(BaseModel):
    role: Text = ""
    company: Text = ""
    duration: Text = ""
    bullet_points: TextList = Field(default_factory=list)


class Education(BaseModel):
    degree: Text = ""
    institution: Text = ""
    year: Text = ""


class Project(BaseModel):
    title: Text = ""
    description: Text = ""
    link: str | None = None

    @field_validator("link", mode="before")
    @classmethod
    def _blank_link_is_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class ParsedResume(BaseModel):
    personal_info: Annotated[PersonalInfo, BeforeValidator(_coerce_object)] = Field(default_factory=PersonalInfo)
    professional_summary: Text = ""
    skills: Annotated[SkillSet, BeforeValidator(_coerce_object)] = Field(default_factory=SkillSet)
    work_experience: Annotated[list[WorkExperience], BeforeValidator(_coerce_list)] = Field(default_factory=list)
    education: Annotated[list[Education], BeforeValidator(_coerce_list)] = Field(default_factory=list)
    certifications: TextList = Field(default_factory=list)
    projects: Annotated[list[Project], BeforeValidator(_coerce_list)] = Field(default_factory=list)


class ImprovementSuggestion(BaseModel):
    section: Text = ""
    suggestion: Text = ""
    rewritten_bullet: str | None = None


def _finite_number(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError("expected a number") from exc
    if not math.isfinite(number):
        raise ValueError("expected a finite number")
    return number


class ResumeAnalysis(BaseModel):
    ats_score: int = Field(default=0, ge=0, le=100)
    keyword_match_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    matched_keywords: TextList = Field(default_factory=list)
    missing_keywords: TextList = Field(default_factory=list)
    weak_placements: TextList = Field(default_factory=list)
    overused_keywords: TextList = Field(default_factory=list)
    improvement_suggestions: Annotated[list[ImprovementSuggestion], BeforeValidator(_coerce_list)] = Field(
        default_factory=list
    )

    @field_validator("ats_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if value is None:
            return 0
        return max(0, min(100, int(round(_finite_number(value)))))

    @field_validator("keyword_match_percentage", mode="before")
    @classmethod
    def _clamp_percentage(cls, value: Any) -> float:
        if value is None:
            return 0.0
        return max(0.0, min(100.0, _finite_number(value)))


class AnalysisResult(BaseModel):
    parsed_resume: ParsedResume
    analysis: ResumeAnalysis
