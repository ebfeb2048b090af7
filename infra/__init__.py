"""Infrastructure helpers for directory deployments."""

from __future__ import annotations

from .logging import configure_logging, log_event

__all__ = ["configure_logging", "log_event"]
