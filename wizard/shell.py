"""Wizard shell: one join/edit session wired to its collaborators.

The shell owns the :class:`WizardState` between mount and teardown. Every
operation is a discrete input event coming from the view layer; failures are
recorded in ``state.errors`` and never raised to the host page.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from core.errors import DirectoryError, MediaError
from infra.logging import log_event
from integrations.analytics import capture_safely
from integrations.protocols import AnalyticsSink
from state.draft import DraftStore, SessionDraftStore
from wizard.crop import CropPipeline, ImageUpload
from wizard.sequencer import StepSequencer
from wizard.state import (
    CropArea,
    WizardMode,
    WizardState,
    apply_field_change,
    initial_state,
)
from wizard.state import set_student as _set_student
from wizard.state import toggle_sphere as _toggle_sphere
from wizard.step_registry import step_for_field
from wizard.submission import SubmissionCoordinator, SubmissionResult

logger = logging.getLogger(__name__)

PICTURE_ERROR_KEY = "profile_picture"
SUBMIT_ERROR_KEY = "submit"
NOT_AT_REVIEW_MESSAGE = "Review your entry before submitting."


class WizardShell:
    """Compose sequencer, crop pipeline, draft store and submission for one wizard."""

    def __init__(
        self,
        *,
        coordinator: SubmissionCoordinator,
        mode: WizardMode = WizardMode.JOIN,
        crop_pipeline: CropPipeline | None = None,
        draft_store: DraftStore | None = None,
        sequencer: StepSequencer | None = None,
        initial_profile: Mapping[str, Any] | None = None,
        owner_id: str | None = None,
        analytics: AnalyticsSink | None = None,
        on_complete: Callable[[SubmissionResult], None] | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        if mode is WizardMode.EDIT and not initial_profile:
            raise ValueError("Editing requires an existing profile")
        self.mode = mode
        self.coordinator = coordinator
        self.crop_pipeline = crop_pipeline or CropPipeline()
        self.draft_store: DraftStore = draft_store or SessionDraftStore()
        self.sequencer = sequencer or StepSequencer()
        self.initial_profile = dict(initial_profile or {})
        self.owner_id = owner_id
        self.analytics = analytics
        self._on_complete = on_complete
        self._on_close = on_close
        self._state: WizardState | None = None
        self.restored_from_draft = False

    # ------------------------------------------------------------------
    # lifecycle

    @property
    def mounted(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> WizardState:
        if self._state is None:
            raise RuntimeError("Wizard is not mounted")
        return self._state

    def mount(self) -> WizardState:
        """Start the wizard, consuming a saved draft when one exists.

        A draft saved for a different owner is discarded.
        """

        if self._state is not None:
            return self._state
        restored = self.draft_store.load()
        if restored is not None and restored.owner_id != self.owner_id:
            logger.warning("Discarding wizard draft that belongs to another user")
            restored = None
        if restored is not None:
            restored.step_index = self.sequencer.clamp(restored.step_index)
            restored.errors = {}
            self._state = restored
            self.restored_from_draft = True
            logger.info("Restored wizard draft at step %s", restored.step_index)
        else:
            self._state = initial_state(self.mode, self.initial_profile)
            self._state.owner_id = self.owner_id
            self.restored_from_draft = False
        return self._state

    def hide(self) -> None:
        """Snapshot the current state into the draft slot."""

        if self._state is None:
            return
        self.draft_store.save(self._state)

    def close(self) -> None:
        """Discard the in-progress entry without saving a draft."""

        self.draft_store.clear()
        self._teardown()
        if self._on_close is not None:
            self._on_close()

    def guard_active(self) -> bool:
        """Return whether leaving the page should ask for confirmation."""

        return self.mounted

    def _teardown(self) -> None:
        self._state = None
        self.restored_from_draft = False

    # ------------------------------------------------------------------
    # field input

    @property
    def email_locked(self) -> bool:
        return self.mode is WizardMode.EDIT

    def set_field(self, name: str, value: Any) -> bool:
        """Apply a widget change; returns ``False`` when the change is refused."""

        state = self.state
        applied = apply_field_change(state.fields, name, value, email_locked=self.email_locked)
        step = step_for_field(name)
        if applied and step is not None:
            self._clear_step_error(step.key)
        return applied

    def toggle_sphere(self, sphere: str) -> None:
        _toggle_sphere(self.state.fields, sphere)
        self._clear_step_error("sphere")

    def set_student(self, is_student: bool) -> None:
        _set_student(self.state.fields, is_student)
        self._clear_step_error("professional")

    def live_error(self) -> str | None:
        """Validate the current step on each keystroke.

        Returns the message to show under the inputs, or ``None``. Optional
        steps with a format rule (LinkedIn) are reported too.
        """

        result = self.sequencer.check(self.state)
        return None if result.valid else result.message

    def _clear_step_error(self, step_key: str | None) -> None:
        if step_key is not None and self._state is not None:
            self._state.errors.pop(step_key, None)

    # ------------------------------------------------------------------
    # navigation

    def next(self) -> bool:
        return self.sequencer.next(self.state)

    def back(self) -> None:
        self.sequencer.back(self.state)

    @property
    def at_review(self) -> bool:
        return self.mounted and self.sequencer.is_terminal(self.state)

    # ------------------------------------------------------------------
    # picture

    def select_image(self, upload: ImageUpload) -> bool:
        """Open the cropper on ``upload``; media errors are recorded, not raised."""

        state = self.state
        try:
            self.crop_pipeline.open(state, upload)
        except MediaError as exc:
            state.errors[PICTURE_ERROR_KEY] = str(exc)
            log_event("info", "picture_rejected", step=PICTURE_ERROR_KEY, payload={"reason": type(exc).__name__})
            return False
        return state.crop.is_open

    def update_crop(
        self,
        *,
        offset_x: float | None = None,
        offset_y: float | None = None,
        zoom: float | None = None,
    ) -> CropArea | None:
        return self.crop_pipeline.update(self.state, offset_x=offset_x, offset_y=offset_y, zoom=zoom)

    def save_crop(self) -> bool:
        state = self.state
        try:
            payload = self.crop_pipeline.save(state)
        except MediaError as exc:
            state.errors[PICTURE_ERROR_KEY] = str(exc)
            return False
        return payload is not None

    def cancel_crop(self) -> None:
        self.crop_pipeline.cancel(self.state)

    def edit_crop(self) -> bool:
        """Reopen the cropper on the saved picture."""

        state = self.state
        try:
            self.crop_pipeline.reopen(state)
        except MediaError as exc:
            state.errors[PICTURE_ERROR_KEY] = str(exc)
            return False
        return state.crop.is_open

    # ------------------------------------------------------------------
    # submission

    @property
    def submitting(self) -> bool:
        return self.coordinator.in_flight

    def submit(self) -> SubmissionResult | None:
        """Submit from the review step.

        On success the draft slot is cleared, the wizard tears down and
        ``on_complete`` runs. On failure the message is stored under
        ``state.errors["submit"]`` and the form stays as it was.
        """

        state = self.state
        if not self.sequencer.is_terminal(state):
            state.errors[SUBMIT_ERROR_KEY] = NOT_AT_REVIEW_MESSAGE
            return None
        state.errors.pop(SUBMIT_ERROR_KEY, None)
        try:
            result = self.coordinator.submit(state.fields)
        except DirectoryError as exc:
            state.errors[SUBMIT_ERROR_KEY] = str(exc)
            logger.warning("Profile submission failed: %s", exc)
            capture_safely(
                self.analytics,
                "profile_submit_failed",
                {"mode": str(self.mode), "error": type(exc).__name__},
            )
            return None

        capture_safely(
            self.analytics,
            "profile_submitted",
            {"mode": str(self.mode), "created": result.created},
        )
        self.draft_store.clear()
        self._teardown()
        if self._on_complete is not None:
            self._on_complete(result)
        return result


__all__ = ["NOT_AT_REVIEW_MESSAGE", "PICTURE_ERROR_KEY", "SUBMIT_ERROR_KEY", "WizardShell"]
