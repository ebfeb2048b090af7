from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.validators import deduplicate_preserve_order


class FormFields(BaseModel):
    """Profile attributes accumulated by the join/edit wizard.

    Attributes:
        name: Full name.
        email: Contact email; locked while editing an existing profile.
        cohort_semester: ``"Fall"`` or ``"Spring"``.
        cohort_year: Two-digit cohort year such as ``"24"``.
        role: Job title, forced to the student sentinel while ``is_student``.
        company: Employer, forced to the student sentinel while ``is_student``.
        is_student: Whether the member is still enrolled.
        spheres: Industry tags in selection order.
        location: Free-text city/region.
        graduation_year: Four-digit graduation year as typed.
        linkedin: LinkedIn handle (the part after ``linkedin.com/in/``).
        raw_image: Pending picture bytes while the cropper is open. Never serialized.
        cropped_image: Saved crop as a data URI, or the hosted URL of an existing picture.
        major: Optional major.
        bio: Optional short bio.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    email: str = ""
    cohort_semester: str = ""
    cohort_year: str = ""
    role: str = ""
    company: str = ""
    is_student: bool = False
    spheres: list[str] = Field(default_factory=list)
    location: str = ""
    graduation_year: str = ""
    linkedin: str = ""
    raw_image: bytes | None = None
    cropped_image: str | None = None
    major: str = ""
    bio: str = ""

    @field_validator("spheres", mode="before")
    @classmethod
    def _normalise_spheres(cls, value: object) -> list[str]:
        return deduplicate_preserve_order(value)

    @field_validator(
        "name",
        "email",
        "cohort_semester",
        "cohort_year",
        "role",
        "company",
        "location",
        "graduation_year",
        "linkedin",
        "major",
        "bio",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def serializable(self) -> dict[str, Any]:
        """Return a JSON-safe dump without the transient raw image bytes."""

        return self.model_dump(mode="json", exclude={"raw_image"})


class ProfileRecord(BaseModel):
    """A directory entry as stored in the ``profiles`` table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    user_id: str = Field(..., min_length=1)
    name: str
    email: str
    pledge_class: str = Field("", alias="pledgeClass")
    role: str = ""
    company: str = ""
    sphere: list[str] = Field(default_factory=list)
    location: str = ""
    graduation_year: int | None = Field(None, alias="graduationYear")
    linkedin_url: str | None = Field(None, alias="linkedinUrl")
    profile_picture_url: str | None = None
    major: str | None = None
    bio: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("graduation_year", mode="before")
    @classmethod
    def _blank_year_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("sphere", mode="before")
    @classmethod
    def _normalise_sphere(cls, value: object) -> list[str]:
        return deduplicate_preserve_order(value)

    def to_row(self) -> dict[str, Any]:
        """Return the column mapping sent to the store.

        Server-managed columns are omitted while unset so the table defaults apply.
        """

        row = self.model_dump(by_alias=True)
        for column in ("id", "created_at"):
            if row.get(column) is None:
                row.pop(column, None)
        return row


__all__ = ["FormFields", "ProfileRecord"]
