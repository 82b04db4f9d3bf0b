"""
Analysis Result Models

Skills report card and career recommendations produced by the analysis client.
Wire names are camelCase to match the provider JSON schema.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The five skill categories named in the analysis prompt, in display order
SKILL_CATEGORIES: tuple[str, ...] = (
    "Critical Thinking",
    "Creativity",
    "Communication",
    "Technical Proficiency",
    "Leadership",
)


def _clamp_score(value: float) -> int:
    return max(0, min(100, int(round(value))))


class SkillMetric(BaseModel):
    """One row of the skills report card."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    category: str
    score: int = Field(..., ge=0, le=100)
    reasoning: str

    @field_validator("score", mode="before")
    @classmethod
    def normalize_score(cls, v: float) -> int:
        """Round provider floats and clamp into 0-100."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("score must be a number")
        return _clamp_score(v)


class CareerPath(BaseModel):
    """One career recommendation card."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    match_score: int = Field(..., ge=0, le=100, alias="matchScore")
    description: str
    salary_range: str = Field(..., alias="salaryRange")
    education_required: str = Field(..., alias="educationRequired")
    roadmap: List[str] = Field(default_factory=list)

    @field_validator("match_score", mode="before")
    @classmethod
    def normalize_match_score(cls, v: float) -> int:
        """Round provider floats and clamp into 0-100."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("matchScore must be a number")
        return _clamp_score(v)


class AnalysisResult(BaseModel):
    """Full analysis: skills report, careers and a short summary."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    skills_report: List[SkillMetric] = Field(..., alias="skillsReport")
    careers: List[CareerPath]
    summary: str

    def top_career(self) -> Optional[CareerPath]:
        """Return the career with the highest match score."""
        if not self.careers:
            return None
        return max(self.careers, key=lambda career: career.match_score)

    def skill(self, category: str) -> Optional[SkillMetric]:
        """Look up a skill metric by category name."""
        for metric in self.skills_report:
            if metric.category == category:
                return metric
        return None
