"""Pydantic models for wizard form state and stored directory profiles."""

from .profile import FormFields, ProfileRecord

__all__ = [
    "FormFields",
    "ProfileRecord",
]
