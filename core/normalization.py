"""Normalization helpers for cohort labels and LinkedIn links."""

from __future__ import annotations

import re
from typing import Final

from constants.directory import LINKEDIN_PROFILE_BASE

__all__ = [
    "COHORT_SEPARATOR",
    "compose_cohort",
    "linkedin_handle_from_url",
    "linkedin_url_from_handle",
    "sanitize_optional_url_value",
    "split_cohort",
]

# "Fall '24": semester, a space, an apostrophe, then the two-digit year.
COHORT_SEPARATOR: Final[str] = " '"

_LINKEDIN_PREFIX: Final[re.Pattern[str]] = re.compile(
    r"^(?:https?://)?(?:[a-z]{2,3}\.)?(?:www\.)?linkedin\.com/in/",
    re.IGNORECASE,
)


def compose_cohort(semester: str, year: str) -> str:
    """Return the stored cohort label, e.g. ``compose_cohort("Fall", "24") == "Fall '24"``."""

    return f"{semester.strip()}{COHORT_SEPARATOR}{year.strip()}"


def split_cohort(label: str | None) -> tuple[str, str]:
    """Split a stored cohort label back into ``(semester, year)``.

    Missing halves come back as empty strings so the wizard can prompt for them.
    """

    if not label or not label.strip():
        return "", ""
    semester, _, year = label.strip().partition(COHORT_SEPARATOR)
    return semester.strip(), year.strip()


def sanitize_optional_url_value(value: object) -> str | None:
    """Return a trimmed URL string or ``None`` for blank inputs."""

    if value is None:
        return None
    if isinstance(value, str):
        candidate = value.strip()
    else:
        candidate = str(value).strip()
    return candidate or None


def linkedin_handle_from_url(value: str | None) -> str:
    """Reduce a LinkedIn profile URL (or bare handle) to its handle."""

    cleaned = sanitize_optional_url_value(value)
    if cleaned is None:
        return ""
    handle = _LINKEDIN_PREFIX.sub("", cleaned)
    return handle.strip("/")


def linkedin_url_from_handle(handle: str | None) -> str | None:
    """Return the canonical profile URL for ``handle`` or ``None`` when blank."""

    cleaned = linkedin_handle_from_url(handle)
    if not cleaned:
        return None
    return f"{LINKEDIN_PROFILE_BASE}{cleaned}"
