"""Core package for directory models, validators and error types."""

from .normalization import compose_cohort, split_cohort

__all__ = ["compose_cohort", "split_cohort"]
