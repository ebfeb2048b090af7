"""Utility helpers for rendering error messages in Streamlit."""

from __future__ import annotations

from typing import Final

import streamlit as st

import config
from core.errors import DirectoryError

_DETAILS_LABEL: Final[str] = "Details"
_GENERIC_MESSAGE: Final[str] = "Something went wrong. Please try again."


def resolve_message(error: BaseException | str) -> str:
    """Return the user-facing text for ``error``.

    Directory errors carry messages meant for members and are shown as they
    are; anything else is replaced by a generic sentence.
    """

    if isinstance(error, str):
        return error
    if isinstance(error, DirectoryError):
        return str(error) or _GENERIC_MESSAGE
    return _GENERIC_MESSAGE


def display_error(msg: BaseException | str, detail: str | None = None) -> None:
    """Render a user-facing error with optional debug details.

    Args:
        msg: Short error message or the exception to describe.
        detail: Optional technical detail shown when ``SHOW_ERROR_DETAILS`` is set.
    """

    st.error(resolve_message(msg))
    if detail and config.SHOW_ERROR_DETAILS:
        with st.expander(_DETAILS_LABEL):
            st.code(detail)
