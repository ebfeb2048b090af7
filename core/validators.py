"""Helper validators shared across the wizard and profile models."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any, Final

EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TWO_DIGIT_YEAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d{2}$")
FOUR_DIGIT_YEAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d{4}$")
LINKEDIN_HANDLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9\-._]+$")


def is_blank(value: object | None) -> bool:
    """Return ``True`` when ``value`` is ``None`` or only whitespace."""

    if value is None:
        return True
    return not str(value).strip()


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(value.strip()))


def is_two_digit_year(value: str | None) -> bool:
    return bool(value) and bool(TWO_DIGIT_YEAR_PATTERN.match(value.strip()))


def is_four_digit_year(value: str | None) -> bool:
    return bool(value) and bool(FOUR_DIGIT_YEAR_PATTERN.match(value.strip()))


def is_linkedin_handle(value: str | None) -> bool:
    return bool(value) and bool(LINKEDIN_HANDLE_PATTERN.match(value.strip()))


def deduplicate_preserve_order(value: object) -> list[str]:
    """Return ``value`` as a list of unique strings, preserving the original order."""

    if value is None:
        return []
    if isinstance(value, str):
        candidate_iter: Iterable[Any] = [value]
    elif isinstance(value, Mapping):
        candidate_iter = list(value.values())
    elif isinstance(value, Iterable):
        candidate_iter = value  # type: ignore[assignment]
    else:
        return []

    seen: set[str] = set()
    result: list[str] = []
    for item in candidate_iter:
        if item is None:
            continue
        as_str = str(item).strip()
        if not as_str:
            continue
        marker = as_str.casefold()
        if marker in seen:
            continue
        seen.add(marker)
        result.append(as_str)
    return result


__all__ = [
    "EMAIL_PATTERN",
    "FOUR_DIGIT_YEAR_PATTERN",
    "LINKEDIN_HANDLE_PATTERN",
    "TWO_DIGIT_YEAR_PATTERN",
    "deduplicate_preserve_order",
    "is_blank",
    "is_four_digit_year",
    "is_linkedin_handle",
    "is_two_digit_year",
    "is_valid_email",
]
