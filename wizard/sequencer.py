from __future__ import annotations

import logging
from typing import Callable, Sequence

from models.profile import FormFields
from wizard.state import WizardState
from wizard.step_registry import REVIEW_STEP, WIZARD_STEPS, StepDefinition
from wizard.validation import ValidationResult, validate_step

logger = logging.getLogger(__name__)

StepValidator = Callable[[str, FormFields], ValidationResult]


class StepSequencer:
    """Move a :class:`WizardState` through the ordered wizard steps.

    Only single steps forward or back are possible, so every required step is
    visited (and validated) before the review step becomes reachable.
    """

    def __init__(
        self,
        steps: Sequence[StepDefinition] = WIZARD_STEPS,
        *,
        validator: StepValidator = validate_step,
    ) -> None:
        if not steps:
            raise ValueError("StepSequencer requires at least one step")
        self._steps: tuple[StepDefinition, ...] = tuple(steps)
        self._validator = validator

    @property
    def steps(self) -> tuple[StepDefinition, ...]:
        return self._steps

    @property
    def last_index(self) -> int:
        return len(self._steps) - 1

    def clamp(self, index: int) -> int:
        return max(0, min(index, self.last_index))

    def current(self, state: WizardState) -> StepDefinition:
        return self._steps[self.clamp(state.step_index)]

    def is_first(self, state: WizardState) -> bool:
        return self.clamp(state.step_index) == 0

    def is_terminal(self, state: WizardState) -> bool:
        return self.current(state).key == REVIEW_STEP or self.clamp(state.step_index) == self.last_index

    def progress(self, state: WizardState) -> float:
        """Return the completion ratio shown by the progress bar."""

        if self.last_index == 0:
            return 1.0
        return self.clamp(state.step_index) / self.last_index

    def check(self, state: WizardState) -> ValidationResult:
        """Validate the current step without moving."""

        return self._validator(self.current(state).key, state.fields)

    def next(self, state: WizardState) -> bool:
        """Advance one step unless the current required step is invalid.

        A refusal records the validator's message under the step key.
        """

        step = self.current(state)
        if step.required:
            result = self._validator(step.key, state.fields)
            if not result.valid:
                state.errors = {step.key: result.message or "This step is incomplete"}
                logger.debug("Refused to leave step '%s': %s", step.key, result.message)
                return False
        state.errors = {}
        state.step_index = self.clamp(state.step_index + 1)
        return True

    def back(self, state: WizardState) -> None:
        """Go back one step; never validated."""

        state.errors = {}
        state.step_index = self.clamp(state.step_index - 1)


__all__ = ["StepSequencer", "StepValidator"]
