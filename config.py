"""Central configuration for the alumni directory.

Settings are read once at import time. Secrets are looked up in Streamlit
secrets first (top-level key, then the ``supabase`` section) and fall back to
environment variables, which may come from a local ``.env`` file.

Numeric crop settings accept strings from the environment; invalid values fall
back to their defaults with a ``RuntimeWarning``.
"""

import logging
import os
import tempfile
import warnings
from pathlib import Path
from typing import Mapping

import streamlit as st
from dotenv import load_dotenv

load_dotenv()


logger = logging.getLogger(__name__)

_TRUTHY_ENV_VALUES: tuple[str, ...] = ("1", "true", "yes", "on")


def _is_truthy_flag(value: str | None) -> bool:
    """Return ``True`` when ``value`` matches a truthy environment token."""

    if value is None:
        return False
    return value.strip().lower() in _TRUTHY_ENV_VALUES


def _coerce_secret_value(value: object) -> str:
    """Return ``value`` as a trimmed string without raising on unexpected types."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (bytes, bytearray)):
        try:
            return value.decode("utf-8").strip()
        except UnicodeDecodeError:
            return ""
    return str(value).strip()


def get_secret(*names: str, section: str | None = "supabase") -> str:
    """Return the first configured secret among ``names``.

    Lookup order per name: Streamlit secrets top-level key, Streamlit secrets
    ``section`` table, environment variable.
    """

    for name in names:
        try:
            direct_secret = st.secrets[name]
        except Exception:
            direct_secret = None
        value = _coerce_secret_value(direct_secret)
        if value:
            return value

        if section:
            try:
                section_table = st.secrets[section]
            except Exception:
                section_table = None
            if isinstance(section_table, Mapping):
                value = _coerce_secret_value(section_table.get(name))
                if value:
                    return value

        value = _coerce_secret_value(os.getenv(name))
        if value:
            return value
    return ""


def _parse_positive_int(value: object | None, *, env_var: str, default: int) -> int:
    """Return ``value`` as a positive integer or ``default``."""

    if value is None:
        return default
    candidate = str(value).strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        warnings.warn(
            "Unsupported %s '%s'; falling back to %d." % (env_var, candidate, default),
            RuntimeWarning,
        )
        return default
    if parsed <= 0:
        warnings.warn(
            "%s must be a positive integer; falling back to %d." % (env_var, default),
            RuntimeWarning,
        )
        return default
    return parsed


def _parse_positive_float(value: object | None, *, env_var: str, default: float) -> float:
    """Return ``value`` as a positive float or ``default``."""

    if value is None:
        return default
    candidate = str(value).strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        warnings.warn(
            "Unsupported %s '%s'; falling back to %.2f." % (env_var, candidate, default),
            RuntimeWarning,
        )
        return default
    if parsed <= 0:
        warnings.warn(
            "%s must be positive; falling back to %.2f." % (env_var, default),
            RuntimeWarning,
        )
        return default
    return parsed


APP_TITLE = os.getenv("APP_TITLE", "DSP Alumni Directory")

SUPABASE_URL = get_secret("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
SUPABASE_ANON_KEY = get_secret("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")
SUPABASE_ENABLED = bool(SUPABASE_URL and SUPABASE_ANON_KEY)
if not SUPABASE_ENABLED:
    logger.info("Supabase credentials not configured; using the in-memory directory backend.")

PROFILES_TABLE = os.getenv("PROFILES_TABLE", "profiles").strip() or "profiles"
PROFILE_PICTURE_BUCKET = os.getenv("PROFILE_PICTURE_BUCKET", "profile-pictures").strip() or "profile-pictures"

DIRECTORY_PASSWORD = get_secret("DIRECTORY_PASSWORD", section="auth")
AUTH_REDIRECT_URL = os.getenv("AUTH_REDIRECT_URL", "http://localhost:8501").strip()

CROP_OUTPUT_SIZE = _parse_positive_int(os.getenv("CROP_OUTPUT_SIZE"), env_var="CROP_OUTPUT_SIZE", default=400)
CROP_JPEG_QUALITY = min(
    _parse_positive_int(os.getenv("CROP_JPEG_QUALITY"), env_var="CROP_JPEG_QUALITY", default=90),
    95,
)
CROP_MIN_ZOOM = _parse_positive_float(os.getenv("CROP_MIN_ZOOM"), env_var="CROP_MIN_ZOOM", default=1.0)
CROP_MAX_ZOOM = _parse_positive_float(os.getenv("CROP_MAX_ZOOM"), env_var="CROP_MAX_ZOOM", default=3.0)
if CROP_MAX_ZOOM < CROP_MIN_ZOOM:
    warnings.warn(
        "CROP_MAX_ZOOM is below CROP_MIN_ZOOM; falling back to 1.0-3.0.",
        RuntimeWarning,
    )
    CROP_MIN_ZOOM, CROP_MAX_ZOOM = 1.0, 3.0

DRAFT_DIR = Path(os.getenv("DRAFT_DIR", "").strip() or Path(tempfile.gettempdir()) / "directory_drafts")
DRAFT_FILE_STORE_ENABLED = _is_truthy_flag(os.getenv("DRAFT_FILE_STORE"))
DRAFT_TTL_SECONDS = _parse_positive_int(
    os.getenv("DRAFT_TTL_SECONDS"), env_var="DRAFT_TTL_SECONDS", default=24 * 60 * 60
)

SHOW_ERROR_DETAILS = _is_truthy_flag(os.getenv("SHOW_ERROR_DETAILS"))
