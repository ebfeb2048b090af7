"""Streamlit renderers for the join/edit wizard steps.

Widgets never own data: every run re-seeds widget keys from the wizard
state and every change goes back through the :class:`WizardShell`, so a
refused change (locked email, student sentinels) snaps the widget back.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Final

import streamlit as st

from components.chip_multiselect import render_toggle_chips
from components.stepper import render_progress
from components.unload_guard import render_unload_guard
from constants.directory import (
    BIO_MAX_LENGTH,
    COHORT_SEMESTERS,
    LOCATION_SUGGESTIONS,
    MAJOR_SUGGESTIONS,
    SPHERE_OPTIONS,
)
from constants.keys import FieldNames, UIKeys
from core.normalization import compose_cohort, linkedin_url_from_handle
from utils.errors import display_error
from wizard.crop import ImageUpload, image_size, is_data_uri, render_preview
from wizard.shell import PICTURE_ERROR_KEY, SUBMIT_ERROR_KEY, WizardShell
from wizard.state import WizardMode, WizardState
from wizard.step_registry import StepDefinition

logger = logging.getLogger(__name__)

_FIELD_KEY_PREFIX: Final[str] = "ui.wizard.field."
_LAST_UPLOAD_KEY: Final[str] = "ui.wizard.upload.last_id"
_SUGGESTION_KEY_PREFIX: Final[str] = "ui.wizard.suggestion."

StepRenderer = Callable[[WizardShell], None]


def field_key(name: str) -> str:
    return f"{_FIELD_KEY_PREFIX}{name}"


def clear_widget_state() -> None:
    """Drop all wizard widget keys so the next mount starts from its own state."""

    for key in [k for k in st.session_state.keys() if isinstance(k, str) and k.startswith("ui.wizard.")]:
        st.session_state.pop(key, None)


def _seed(name: str, value: Any) -> str:
    key = field_key(name)
    st.session_state[key] = value
    return key


def _on_field_change(shell: WizardShell, name: str) -> None:
    if not shell.mounted:
        return
    shell.set_field(name, st.session_state.get(field_key(name)))


def _text_input(shell: WizardShell, name: str, label: str, **kwargs: Any) -> None:
    value = getattr(shell.state.fields, name)
    key = _seed(name, value)
    st.text_input(label, key=key, on_change=_on_field_change, args=(shell, name), **kwargs)


def _suggestions(shell: WizardShell, name: str, options: tuple[str, ...], label: str) -> None:
    """Offer common values; picking one fills the free-text field."""

    key = f"{_SUGGESTION_KEY_PREFIX}{name}"

    def _apply() -> None:
        choice = st.session_state.get(key)
        if choice and shell.mounted:
            shell.set_field(name, choice)
        st.session_state[key] = None

    st.selectbox(label, options, index=None, key=key, on_change=_apply, placeholder="Choose a suggestion")


def _touched(state: WizardState, step: StepDefinition) -> bool:
    for name in step.fields:
        value = getattr(state.fields, name, None)
        if value not in (None, "", [], False):
            return True
    return False


# ----------------------------------------------------------------------
# step renderers


def _render_welcome(shell: WizardShell) -> None:
    st.write("It takes about two minutes. Only the first few questions are required.")


def _render_identity(shell: WizardShell) -> None:
    _text_input(shell, FieldNames.NAME, "Full name", placeholder="Jane Doe")
    _text_input(
        shell,
        FieldNames.EMAIL,
        "Email",
        placeholder="jane@example.com",
        disabled=shell.email_locked,
        help="Your email is tied to your sign-in and cannot be changed here." if shell.email_locked else None,
    )


def _render_cohort(shell: WizardShell) -> None:
    fields = shell.state.fields
    semester_col, year_col = st.columns(2)
    with semester_col:
        key = _seed(FieldNames.COHORT_SEMESTER, fields.cohort_semester or None)

        def _apply_semester() -> None:
            if shell.mounted:
                shell.set_field(FieldNames.COHORT_SEMESTER, st.session_state.get(key) or "")

        st.selectbox(
            "Semester",
            COHORT_SEMESTERS,
            index=None,
            key=key,
            placeholder="Fall or Spring",
            on_change=_apply_semester,
        )
    with year_col:
        _text_input(shell, FieldNames.COHORT_YEAR, "Year (two digits)", max_chars=2, placeholder="24")
    if fields.cohort_semester and fields.cohort_year:
        st.caption(f"Cohort: {compose_cohort(fields.cohort_semester, fields.cohort_year)}")


def _render_professional(shell: WizardShell) -> None:
    fields = shell.state.fields
    key = _seed(FieldNames.IS_STUDENT, fields.is_student)

    def _apply_student() -> None:
        if shell.mounted:
            shell.set_student(bool(st.session_state.get(key)))

    st.checkbox("Current student", key=key, on_change=_apply_student)
    _text_input(shell, FieldNames.ROLE, "Role", disabled=fields.is_student)
    _text_input(shell, FieldNames.COMPANY, "Company", disabled=fields.is_student)


def _render_sphere(shell: WizardShell) -> None:
    clicked = render_toggle_chips(
        "Spheres",
        SPHERE_OPTIONS,
        shell.state.fields.spheres,
        key_prefix="ui.wizard.sphere",
    )
    if clicked is not None:
        shell.toggle_sphere(clicked)
        st.rerun()
    if shell.state.fields.spheres:
        st.caption("Selected: " + ", ".join(shell.state.fields.spheres))


def _render_location(shell: WizardShell) -> None:
    _text_input(shell, FieldNames.LOCATION, "City", placeholder="New York, NY")
    _suggestions(shell, FieldNames.LOCATION, LOCATION_SUGGESTIONS, "Popular locations")


def _render_graduation_year(shell: WizardShell) -> None:
    _text_input(shell, FieldNames.GRADUATION_YEAR, "Graduation year", max_chars=4, placeholder="2024")


def _render_linkedin(shell: WizardShell) -> None:
    _text_input(shell, FieldNames.LINKEDIN, "LinkedIn handle", placeholder="jane-doe")
    url = linkedin_url_from_handle(shell.state.fields.linkedin)
    if url and shell.live_error() is None:
        st.caption(url)


def _render_cropper(shell: WizardShell) -> None:
    state = shell.state
    raw = state.fields.raw_image
    if raw is None or state.crop.area is None:
        return
    width, height = image_size(raw)
    pipeline = shell.crop_pipeline

    st.session_state[UIKeys.CROP_ZOOM] = state.crop.zoom
    st.session_state[UIKeys.CROP_OFFSET_X] = state.crop.offset_x
    st.session_state[UIKeys.CROP_OFFSET_Y] = state.crop.offset_y

    def _apply_controls() -> None:
        if not shell.mounted:
            return
        shell.update_crop(
            zoom=st.session_state.get(UIKeys.CROP_ZOOM),
            offset_x=st.session_state.get(UIKeys.CROP_OFFSET_X),
            offset_y=st.session_state.get(UIKeys.CROP_OFFSET_Y),
        )

    preview_col, controls_col = st.columns([1, 2])
    with preview_col:
        st.image(render_preview(raw, state.crop.area), caption="Preview")
    with controls_col:
        busy = state.crop.saving
        st.slider(
            "Zoom",
            min_value=float(pipeline.min_zoom),
            max_value=float(pipeline.max_zoom),
            step=0.05,
            key=UIKeys.CROP_ZOOM,
            on_change=_apply_controls,
            disabled=busy,
        )
        st.slider(
            "Horizontal position",
            min_value=-width / 2,
            max_value=width / 2,
            key=UIKeys.CROP_OFFSET_X,
            on_change=_apply_controls,
            disabled=busy,
        )
        st.slider(
            "Vertical position",
            min_value=-height / 2,
            max_value=height / 2,
            key=UIKeys.CROP_OFFSET_Y,
            on_change=_apply_controls,
            disabled=busy,
        )
        save_col, cancel_col = st.columns(2)
        with save_col:
            st.button(
                "Saving…" if busy else "Save crop",
                type="primary",
                disabled=busy,
                on_click=shell.save_crop,
                use_container_width=True,
            )
        with cancel_col:
            st.button("Cancel", disabled=busy, on_click=shell.cancel_crop, use_container_width=True)


def _render_profile_picture(shell: WizardShell) -> None:
    state = shell.state
    upload = st.file_uploader(
        "Choose an image",
        type=["jpg", "jpeg", "png", "webp", "gif", "heic", "heif"],
        key=UIKeys.WIZARD_UPLOAD,
        disabled=state.crop.saving,
    )
    if upload is not None and st.session_state.get(_LAST_UPLOAD_KEY) != upload.file_id:
        st.session_state[_LAST_UPLOAD_KEY] = upload.file_id
        shell.select_image(ImageUpload(filename=upload.name, content_type=upload.type, data=upload.getvalue()))

    if state.errors.get(PICTURE_ERROR_KEY):
        display_error(state.errors[PICTURE_ERROR_KEY])

    if state.crop.is_open:
        _render_cropper(shell)
        return

    current = state.fields.cropped_image
    if current:
        st.image(current, width=160, caption="Current picture" if not is_data_uri(current) else "New picture")
        st.button("Edit crop", on_click=shell.edit_crop)


def _render_major(shell: WizardShell) -> None:
    _text_input(shell, FieldNames.MAJOR, "Major", placeholder="Economics")
    _suggestions(shell, FieldNames.MAJOR, MAJOR_SUGGESTIONS, "Common majors")


def _render_bio(shell: WizardShell) -> None:
    key = _seed(FieldNames.BIO, shell.state.fields.bio)
    st.text_area(
        "Bio",
        key=key,
        max_chars=BIO_MAX_LENGTH,
        on_change=_on_field_change,
        args=(shell, FieldNames.BIO),
    )


def _render_review(shell: WizardShell) -> None:
    fields = shell.state.fields
    if fields.cropped_image:
        st.image(fields.cropped_image, width=120)
    rows = {
        "Name": fields.name,
        "Email": fields.email,
        "Cohort": compose_cohort(fields.cohort_semester, fields.cohort_year),
        "Role": fields.role,
        "Company": fields.company,
        "Spheres": ", ".join(fields.spheres),
        "Location": fields.location,
        "Graduation year": fields.graduation_year,
        "LinkedIn": linkedin_url_from_handle(fields.linkedin) or "",
        "Major": fields.major,
        "Bio": fields.bio,
    }
    for label, value in rows.items():
        if value:
            st.markdown(f"**{label}:** {value}")


STEP_RENDERERS: Final[dict[str, StepRenderer]] = {
    "welcome": _render_welcome,
    "identity": _render_identity,
    "cohort": _render_cohort,
    "professional": _render_professional,
    "sphere": _render_sphere,
    "location": _render_location,
    "graduation_year": _render_graduation_year,
    "linkedin": _render_linkedin,
    "profile_picture": _render_profile_picture,
    "major": _render_major,
    "bio": _render_bio,
    "review": _render_review,
}


# ----------------------------------------------------------------------
# shell


def _render_actions(shell: WizardShell) -> None:
    state = shell.state
    sequencer = shell.sequencer
    busy = shell.submitting or state.crop.saving
    back_col, close_col, forward_col = st.columns([1, 1, 2])
    with back_col:
        st.button("Back", on_click=shell.back, disabled=sequencer.is_first(state) or busy, use_container_width=True)
    with close_col:
        st.button("Close", on_click=shell.close, disabled=busy, use_container_width=True)
    with forward_col:
        if sequencer.is_terminal(state):
            label = "Save changes" if shell.mode is WizardMode.EDIT else "Join the directory"
            st.button(
                "Submitting…" if shell.submitting else label,
                type="primary",
                on_click=shell.submit,
                disabled=busy,
                use_container_width=True,
            )
        else:
            st.button("Next", type="primary", on_click=shell.next, disabled=busy, use_container_width=True)


def run_wizard(shell: WizardShell) -> None:
    """Render the mounted wizard for one Streamlit run."""

    state = shell.mount()
    if shell.restored_from_draft:
        st.toast("Restored your unfinished entry.")
        shell.restored_from_draft = False

    render_unload_guard(shell.guard_active())
    sequencer = shell.sequencer
    step = sequencer.current(state)
    render_progress(
        sequencer.clamp(state.step_index),
        [s.label for s in sequencer.steps],
        progress=sequencer.progress(state),
    )
    st.subheader(step.prompt)

    renderer = STEP_RENDERERS.get(step.key, _render_welcome)
    renderer(shell)
    if not shell.mounted:
        return

    recorded = state.errors.get(step.key)
    if recorded:
        display_error(recorded)
    elif _touched(state, step):
        live = shell.live_error()
        if live:
            st.caption(f":red[{live}]")

    if state.errors.get(SUBMIT_ERROR_KEY):
        display_error(state.errors[SUBMIT_ERROR_KEY])
    _render_actions(shell)

    # Streamlit cannot observe tab visibility; snapshot after every run instead.
    shell.hide()


__all__ = ["STEP_RENDERERS", "clear_widget_state", "field_key", "run_wizard"]
