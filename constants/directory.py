"""Static option lists and sentinels shared by the wizard and directory views."""

from __future__ import annotations

from typing import Final

COHORT_SEMESTERS: Final[tuple[str, ...]] = ("Fall", "Spring")

SPHERE_OPTIONS: Final[tuple[str, ...]] = ("Finance", "Consulting", "Tech", "Other")

LOCATION_SUGGESTIONS: Final[tuple[str, ...]] = (
    "New York, NY",
    "San Francisco, CA",
    "Boston, MA",
    "Chicago, IL",
    "Los Angeles, CA",
    "Washington, DC",
    "Durham, NC",
    "Charlotte, NC",
    "Atlanta, GA",
    "Seattle, WA",
    "Austin, TX",
)

MAJOR_SUGGESTIONS: Final[tuple[str, ...]] = (
    "Computer Science",
    "Economics",
    "Public Policy",
    "Political Science",
    "Psychology",
    "Biology",
    "Mathematics",
    "Statistics",
    "Engineering",
    "Business",
)

# Values forced onto role/company while the member is a current student.
STUDENT_ROLE: Final[str] = "Student"
STUDENT_COMPANY: Final[str] = "Duke University"

LINKEDIN_PROFILE_BASE: Final[str] = "https://www.linkedin.com/in/"

BIO_MAX_LENGTH: Final[int] = 300

__all__ = [
    "BIO_MAX_LENGTH",
    "COHORT_SEMESTERS",
    "LINKEDIN_PROFILE_BASE",
    "LOCATION_SUGGESTIONS",
    "MAJOR_SUGGESTIONS",
    "SPHERE_OPTIONS",
    "STUDENT_COMPANY",
    "STUDENT_ROLE",
]
