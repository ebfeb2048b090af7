"""In-memory state of one wizard instance and the input handlers that mutate it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping

from constants.directory import STUDENT_COMPANY, STUDENT_ROLE
from constants.keys import FieldNames
from core.normalization import linkedin_handle_from_url, split_cohort
from core.validators import deduplicate_preserve_order
from models.profile import FormFields


class WizardMode(StrEnum):
    """Entry modes of the wizard."""

    JOIN = "join"
    EDIT = "edit"


@dataclass(frozen=True)
class CropArea:
    """Pixel rectangle inside the source image."""

    x: int
    y: int
    width: int
    height: int

    def as_box(self) -> tuple[int, int, int, int]:
        """Return the ``(left, upper, right, lower)`` box Pillow expects."""

        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass
class CropState:
    """Transient cropper controls."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom: float = 1.0
    area: CropArea | None = None
    is_open: bool = False
    saving: bool = False

    def reset(self) -> None:
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.zoom = 1.0
        self.area = None


@dataclass
class WizardState:
    """Everything one wizard instance knows about the in-progress entry."""

    step_index: int = 0
    fields: FormFields = field(default_factory=FormFields)
    crop: CropState = field(default_factory=CropState)
    errors: dict[str, str] = field(default_factory=dict)
    owner_id: str | None = None


def form_fields_from_profile(profile: Mapping[str, Any]) -> FormFields:
    """Map a stored profile row back onto editable form fields."""

    semester, year = split_cohort(profile.get("pledgeClass"))
    role = profile.get("role") or ""
    graduation_year = profile.get("graduationYear")
    return FormFields(
        name=profile.get("name") or "",
        email=profile.get("email") or "",
        cohort_semester=semester,
        cohort_year=year,
        role=role,
        company=profile.get("company") or "",
        is_student=role == STUDENT_ROLE,
        spheres=profile.get("sphere") or [],
        location=profile.get("location") or "",
        graduation_year="" if graduation_year is None else str(graduation_year),
        linkedin=linkedin_handle_from_url(profile.get("linkedinUrl")),
        cropped_image=profile.get("profile_picture_url") or None,
        major=profile.get("major") or "",
        bio=profile.get("bio") or "",
    )


def initial_state(mode: WizardMode, profile: Mapping[str, Any] | None = None) -> WizardState:
    """Return the starting state for ``mode``.

    Editing starts past the welcome step with fields taken from ``profile``.
    """

    if mode is WizardMode.EDIT and profile:
        return WizardState(step_index=1, fields=form_fields_from_profile(profile))
    return WizardState()


def set_student(fields: FormFields, is_student: bool) -> None:
    """Toggle student status, forcing or clearing the role/company sentinels."""

    fields.is_student = is_student
    if is_student:
        fields.role = STUDENT_ROLE
        fields.company = STUDENT_COMPANY
    else:
        fields.role = ""
        fields.company = ""


def toggle_sphere(fields: FormFields, sphere: str) -> None:
    """Add ``sphere`` when absent, remove it when selected."""

    current = list(fields.spheres)
    if sphere in current:
        current.remove(sphere)
    else:
        current.append(sphere)
    fields.spheres = deduplicate_preserve_order(current)


def apply_field_change(
    fields: FormFields,
    name: str,
    value: Any,
    *,
    email_locked: bool = False,
) -> bool:
    """Apply one widget change to ``fields``.

    Returns ``False`` when the change is refused: the email of an existing
    profile is locked, and role/company cannot be edited while the student
    sentinels are in force.
    """

    if name == FieldNames.EMAIL and email_locked:
        return False
    if name == FieldNames.IS_STUDENT:
        set_student(fields, bool(value))
        return True
    if name in {FieldNames.ROLE, FieldNames.COMPANY} and fields.is_student:
        return False
    if name not in FormFields.model_fields:
        raise KeyError(f"Unknown form field: {name}")
    setattr(fields, name, value)
    return True


__all__ = [
    "CropArea",
    "CropState",
    "WizardMode",
    "WizardState",
    "apply_field_change",
    "form_fields_from_profile",
    "initial_state",
    "set_student",
    "toggle_sphere",
]
