"""Registry for wizard steps, metadata, and canonical order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from constants.keys import FieldNames


@dataclass(frozen=True)
class StepDefinition:
    """Metadata for an individual wizard step."""

    key: str
    label: str
    prompt: str
    required: bool
    fields: tuple[str, ...] = ()


WELCOME_STEP: Final[str] = "welcome"
REVIEW_STEP: Final[str] = "review"

WIZARD_STEPS: Final[tuple[StepDefinition, ...]] = (
    StepDefinition(
        key=WELCOME_STEP,
        label="Welcome",
        prompt="Welcome! Let's get you into the directory.",
        required=False,
    ),
    StepDefinition(
        key="identity",
        label="Name & email",
        prompt="What's your full name and email?",
        required=True,
        fields=(FieldNames.NAME, FieldNames.EMAIL),
    ),
    StepDefinition(
        key="cohort",
        label="Cohort",
        prompt="Which DSP cohort were you part of?",
        required=True,
        fields=(FieldNames.COHORT_SEMESTER, FieldNames.COHORT_YEAR),
    ),
    StepDefinition(
        key="professional",
        label="Role & company",
        prompt="Where do you work, and what's your role? (Or select 'Current student')",
        required=True,
        fields=(FieldNames.IS_STUDENT, FieldNames.ROLE, FieldNames.COMPANY),
    ),
    StepDefinition(
        key="sphere",
        label="Spheres",
        prompt="What industries or spheres are you in? (Select all that apply)",
        required=True,
        fields=(FieldNames.SPHERES,),
    ),
    StepDefinition(
        key="location",
        label="Location",
        prompt="Where are you based now?",
        required=True,
        fields=(FieldNames.LOCATION,),
    ),
    StepDefinition(
        key="graduation_year",
        label="Graduation year",
        prompt="What year did you graduate?",
        required=True,
        fields=(FieldNames.GRADUATION_YEAR,),
    ),
    StepDefinition(
        key="linkedin",
        label="LinkedIn",
        prompt="What's your LinkedIn handle? (just the part after linkedin.com/in/)",
        required=False,
        fields=(FieldNames.LINKEDIN,),
    ),
    StepDefinition(
        key="profile_picture",
        label="Profile picture",
        prompt="Upload a profile picture (crop to fit)",
        required=False,
        fields=(FieldNames.CROPPED_IMAGE,),
    ),
    StepDefinition(
        key="major",
        label="Major",
        prompt="What was your major? (optional)",
        required=False,
        fields=(FieldNames.MAJOR,),
    ),
    StepDefinition(
        key="bio",
        label="Bio",
        prompt="Add a short bio (optional)",
        required=False,
        fields=(FieldNames.BIO,),
    ),
    StepDefinition(
        key=REVIEW_STEP,
        label="Review",
        prompt="Review your info and join the directory!",
        required=False,
    ),
)

def step_keys() -> tuple[str, ...]:
    """Return the canonical step order."""

    return tuple(step.key for step in WIZARD_STEPS)


def required_step_keys() -> tuple[str, ...]:
    return tuple(step.key for step in WIZARD_STEPS if step.required)


def step_for_field(field_name: str) -> StepDefinition | None:
    """Return the step that collects ``field_name``."""

    for step in WIZARD_STEPS:
        if field_name in step.fields:
            return step
    return None


__all__ = [
    "REVIEW_STEP",
    "StepDefinition",
    "WELCOME_STEP",
    "WIZARD_STEPS",
    "required_step_keys",
    "step_for_field",
    "step_keys",
]
