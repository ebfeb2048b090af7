"""Join/edit wizard package."""

from __future__ import annotations

import importlib
from typing import Any

from .state import WizardMode, WizardState
from .step_registry import WIZARD_STEPS

_LAZY_EXPORTS: dict[str, str] = {
    "WizardShell": "shell",
    "SubmissionCoordinator": "submission",
    "CropPipeline": "crop",
    "StepSequencer": "sequencer",
    "run_wizard": "views",
}

__all__ = ["WIZARD_STEPS", "WizardMode", "WizardState", *_LAZY_EXPORTS]


def __getattr__(name: str) -> Any:
    """Import heavier wizard modules on first attribute access."""

    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    module = importlib.import_module(f"{__name__}.{module_name}")
    value: Any = getattr(module, name)
    globals()[name] = value
    return value
