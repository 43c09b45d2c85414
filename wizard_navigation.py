from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from configuration_state import ConfigurationState
from debug_log import debug_log
from validation import StepValidation, WizardStep, step_is_valid

WIZARD_STEPS: Tuple[WizardStep, ...] = tuple(WizardStep)
FIRST_STEP = WIZARD_STEPS[0]
LAST_STEP = WIZARD_STEPS[-1]


@dataclass(frozen=True)
class StepTransition:
    step: WizardStep
    moved: bool
    validation: StepValidation = StepValidation(ok=True)


def go_next(step: WizardStep, state: ConfigurationState) -> StepTransition:
    """
    Advance one step if the current step validates.

    The summary step is terminal: it offers submit instead of a further transition.
    """
    if step == LAST_STEP:
        return StepTransition(step=step, moved=False)
    validation = step_is_valid(state, step)
    if not validation.ok:
        debug_log(
            location="wizard_navigation.py:go_next",
            message="Blocked navigation",
            data={"step": step.name, "reason": validation.reason},
        )
        return StepTransition(step=step, moved=False, validation=validation)
    return StepTransition(step=WizardStep(step + 1), moved=True, validation=validation)


def go_back(step: WizardStep) -> StepTransition:
    if step == FIRST_STEP:
        return StepTransition(step=step, moved=False)
    return StepTransition(step=WizardStep(step - 1), moved=True)
