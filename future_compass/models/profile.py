"""
Student Profile Data Models
"""

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

from future_compass.utils.errors import ValidationError

GradeLevel = Literal["9th Grade", "10th Grade", "11th Grade", "12th Grade"]

GRADE_LEVELS: tuple[str, ...] = get_args(GradeLevel)

# Fields that must be non-blank before an analysis is requested
REQUIRED_FIELDS = ("name", "hobbies")


class Profile(BaseModel):
    """Self-reported student profile submitted for analysis."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = ""
    grade_level: GradeLevel = Field(default="10th Grade", alias="gradeLevel")
    favorite_subjects: str = Field(default="", alias="favoriteSubjects")
    hobbies: str = ""
    skills: str = ""
    dream: str = ""

    def missing_fields(self) -> list[str]:
        """Return the required fields that are blank."""
        return [
            field_name
            for field_name in REQUIRED_FIELDS
            if not getattr(self, field_name).strip()
        ]

    def require_complete(self) -> None:
        """
        Check the profile can be analyzed.

        Raises:
            ValidationError: If name or hobbies is blank
        """
        missing = self.missing_fields()
        if missing:
            raise ValidationError(
                f"Profile is missing required fields: {', '.join(missing)}",
                missing_fields=missing,
            )
