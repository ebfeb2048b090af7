"""Structured logging utilities for the alumni directory."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

import config

LOGGER = logging.getLogger("directory")

_REDACTED_KEYS = frozenset({"email", "raw_image", "cropped_image", "access_token"})


def _redact(value: str) -> str:
    """Redact the resolved configuration secrets from a string."""

    secrets = [config.SUPABASE_ANON_KEY, config.DIRECTORY_PASSWORD]
    for secret in secrets:
        if secret:
            value = value.replace(secret, "[redacted]")
    return value


def configure_logging(level: str | None = None) -> None:
    """Install a basic stream handler once, honouring ``LOG_LEVEL``."""

    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    LOGGER.setLevel(getattr(logging, resolved, logging.INFO))


def log_event(
    level: str,
    event: str,
    *,
    user_id: str | None = None,
    step: str | None = None,
    duration: float | None = None,
    payload: Dict[str, Any] | None = None,
) -> str:
    """Emit a structured log line and return it.

    Args:
        level: Logging level name (e.g., ``"info"``).
        event: Short event name such as ``"profile_submitted"``.
        user_id: Owner identity the event relates to.
        step: Wizard step key, when relevant.
        duration: Duration of the operation in seconds.
        payload: Extra properties. Personal fields are masked.

    Returns:
        The JSON line that was logged.
    """

    record: Dict[str, Any] = {
        "level": level.lower(),
        "event": event,
        "user_id": user_id,
        "step": step,
        "duration": round(duration, 4) if duration is not None else None,
    }
    if payload:
        record["payload"] = {
            key: "[redacted]" if key in _REDACTED_KEYS else value for key, value in payload.items()
        }
    safe_record = {k: v for k, v in record.items() if v is not None}
    line = _redact(json.dumps(safe_record, default=str, sort_keys=True))
    LOGGER.log(getattr(logging, level.upper(), logging.INFO), line)
    return line
