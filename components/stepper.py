"""Progress indicator for the join/edit wizard."""

from __future__ import annotations

import html
from typing import Sequence

import streamlit as st


_STATUS_ICONS = {
    "done": "✔︎",
    "current": "➤",
    "upcoming": "•",
}


def _inject_stepper_styles() -> None:
    """Emit the step summary styling for the current script run."""

    st.markdown(
        """
        <style>
        .wizard-stepper__summary {
            display: flex;
            flex-wrap: wrap;
            gap: 0.35rem;
            font-size: 0.85rem;
            color: var(--text-color, #6b7280);
            margin: 0.25rem 0 0.75rem;
        }

        .wizard-stepper__summary span[data-state="current"] {
            font-weight: 600;
        }

        .wizard-stepper__summary span[data-state="upcoming"] {
            opacity: 0.6;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def step_status(index: int, current: int) -> str:
    if index < current:
        return "done"
    if index == current:
        return "current"
    return "upcoming"


def build_summary_segments(current: int, labels: Sequence[str]) -> list[str]:
    """Return HTML segments representing the wizard step summary."""

    segments: list[str] = []
    for idx, label in enumerate(labels):
        status = step_status(idx, current)
        text = f"{_STATUS_ICONS[status]} {label}"
        segments.append(f"<span data-state='{status}'>{html.escape(text)}</span>")
    return segments


def render_progress(current: int, labels: Sequence[str], *, progress: float) -> None:
    """Render the progress bar and the condensed step summary."""

    if not labels:
        return
    _inject_stepper_styles()
    st.progress(max(0.0, min(progress, 1.0)), text=f"Step {current + 1} of {len(labels)}")
    arrow = "<span aria-hidden='true'>→</span>"
    st.markdown(
        "<div class='wizard-stepper__summary'>" + arrow.join(build_summary_segments(current, labels)) + "</div>",
        unsafe_allow_html=True,
    )


__all__ = ["build_summary_segments", "render_progress", "step_status"]
