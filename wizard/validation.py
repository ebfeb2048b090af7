"""Per-step validation rules for the join/edit wizard.

Every rule is a pure function of the form fields, so the same check can run on
each keystroke and again when the user presses *Next*.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Final, Mapping

from constants.directory import COHORT_SEMESTERS
from core.validators import (
    is_blank,
    is_four_digit_year,
    is_linkedin_handle,
    is_two_digit_year,
    is_valid_email,
)
from models.profile import FormFields
from wizard.step_registry import required_step_keys


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one step."""

    valid: bool
    message: str | None = None


VALID: Final[ValidationResult] = ValidationResult(True)


def _invalid(message: str) -> ValidationResult:
    return ValidationResult(False, message)


def _check_identity(fields: FormFields) -> ValidationResult:
    if is_blank(fields.name):
        return _invalid("Name is required")
    if not is_valid_email(fields.email):
        return _invalid("Enter a valid email")
    return VALID


def _check_cohort(fields: FormFields) -> ValidationResult:
    if fields.cohort_semester not in COHORT_SEMESTERS:
        return _invalid("Cohort semester is required")
    if not is_two_digit_year(fields.cohort_year):
        return _invalid("Enter the two-digit cohort year, e.g. 24")
    return VALID


def _check_professional(fields: FormFields) -> ValidationResult:
    if fields.is_student:
        return VALID
    if is_blank(fields.role) or is_blank(fields.company):
        return _invalid("Role and company required, or select student")
    return VALID


def _check_sphere(fields: FormFields) -> ValidationResult:
    if not fields.spheres:
        return _invalid("Select at least one sphere")
    return VALID


def _check_location(fields: FormFields) -> ValidationResult:
    if is_blank(fields.location):
        return _invalid("Location required")
    return VALID


def _check_graduation_year(fields: FormFields) -> ValidationResult:
    if not is_four_digit_year(fields.graduation_year):
        return _invalid("Enter a valid year")
    return VALID


def _check_linkedin(fields: FormFields) -> ValidationResult:
    if is_blank(fields.linkedin) or is_linkedin_handle(fields.linkedin):
        return VALID
    return _invalid("Enter just your LinkedIn handle")


STEP_RULES: Final[Mapping[str, Callable[[FormFields], ValidationResult]]] = {
    "identity": _check_identity,
    "cohort": _check_cohort,
    "professional": _check_professional,
    "sphere": _check_sphere,
    "location": _check_location,
    "graduation_year": _check_graduation_year,
    "linkedin": _check_linkedin,
}


def validate_step(step_key: str, fields: FormFields) -> ValidationResult:
    """Validate ``fields`` against the rules of ``step_key``.

    Steps without rules (welcome, optional free-text steps, review) always pass.
    """

    rule = STEP_RULES.get(step_key)
    if rule is None:
        return VALID
    return rule(fields)


def validate_all(fields: FormFields) -> dict[str, str]:
    """Return ``{step_key: message}`` for every failing required step."""

    failures: dict[str, str] = {}
    for key in required_step_keys():
        result = validate_step(key, fields)
        if not result.valid and result.message:
            failures[key] = result.message
    return failures


__all__ = ["STEP_RULES", "VALID", "ValidationResult", "validate_all", "validate_step"]
