"""Chip-style toggle buttons used for sphere selection."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

import streamlit as st

__all__ = [
    "CHIP_INLINE_VALUE_LIMIT",
    "compact_inline_label",
    "render_chip_button_grid",
    "render_toggle_chips",
]

CHIP_INLINE_VALUE_LIMIT = 20


def compact_inline_label(raw: str, *, limit: int = CHIP_INLINE_VALUE_LIMIT) -> tuple[str, bool]:
    """Return a single-line label truncated to ``limit`` characters when needed."""

    text = " ".join(str(raw).split())
    if len(text) <= limit:
        return text, False
    clipped = text[: max(0, limit - 1)].rstrip()
    return f"{clipped}…", True


def _slugify_label(label: str) -> str:
    cleaned = re.sub(r"[^0-9a-zA-Z]+", "_", label).strip("_").lower()
    return cleaned or "chip"


def render_chip_button_grid(
    options: Sequence[str],
    *,
    key_prefix: str,
    selected: Sequence[str] = (),
    columns: int = 4,
    disabled: bool = False,
    widget_factory: Callable[..., Any] | None = None,
) -> int | None:
    """Render a grid of buttons, highlighting ``selected``; return the clicked index."""

    if not options:
        return None

    per_row = max(1, min(columns, len(options)))
    grid_columns = st.columns(per_row)
    button_renderer: Callable[..., Any] = widget_factory or st.button
    clicked_index: int | None = None

    for idx, option in enumerate(options):
        display_text, was_truncated = compact_inline_label(option)
        if idx and idx % per_row == 0:
            per_row = max(1, min(columns, len(options) - idx))
            grid_columns = st.columns(per_row)
        with grid_columns[idx % per_row]:
            pressed = button_renderer(
                display_text,
                key=f"{key_prefix}.{_slugify_label(option)}",
                type="primary" if option in selected else "secondary",
                use_container_width=True,
                disabled=disabled,
                help=option if was_truncated else None,
            )
        if pressed and clicked_index is None:
            clicked_index = idx

    return clicked_index


def render_toggle_chips(
    label: str,
    options: Sequence[str],
    selected: Sequence[str],
    *,
    key_prefix: str,
    disabled: bool = False,
) -> str | None:
    """Render toggle chips and return the option the user clicked, if any."""

    st.markdown(f"**{label}**")
    clicked = render_chip_button_grid(options, key_prefix=key_prefix, selected=selected, disabled=disabled)
    if clicked is None:
        return None
    return options[clicked]
