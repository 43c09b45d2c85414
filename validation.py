from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Tuple

from configuration_state import ConfigurationState, Unit


class WizardStep(IntEnum):
    BASIC_INFO = 0
    UNIT_DETAILS = 1
    SUMMARY = 2

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    WizardStep.BASIC_INFO: "Basic Information",
    WizardStep.UNIT_DETAILS: "Room Details",
    WizardStep.SUMMARY: "Summary",
}

CONTACT_FIELDS: Tuple[str, ...] = ("name", "email", "phone")

_EMAIL_RE = re.compile(r"(?i)[A-Z0-9._%+-]+@[A-Z0-9-]+(?:\.[A-Z0-9-]+)*\.[A-Z]{2,}")
_PHONE_RE = re.compile(r"[0-9]{10}")


@dataclass(frozen=True)
class StepValidation:
    ok: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ContactFieldErrors:
    """One flag per contact field; True means the field must be fixed before submitting."""

    name: bool = False
    email: bool = False
    phone: bool = False

    @property
    def any(self) -> bool:
        return self.name or self.email or self.phone

    def as_dict(self) -> Dict[str, bool]:
        return {"name": self.name, "email": self.email, "phone": self.phone}


def _unit_problem(unit: Unit, index: int) -> Optional[str]:
    if not unit.display_name.strip():
        return f"Room {index + 1} needs a name."
    has_sensor = any(s.selected for s in unit.selectables)
    has_device = any(q.quantity > 0 for q in unit.quantities)
    if not (has_sensor or has_device):
        return f"Please configure at least one sensor or device for {unit.display_name.strip()}."
    return None


def step_is_valid(state: ConfigurationState, step: WizardStep) -> StepValidation:
    """
    Structural check that gates leaving `step`.

    The basic information step has no required fields; the summary step is only
    checked field by field on submit (see `validate_contact_fields`).
    """
    if step == WizardStep.UNIT_DETAILS:
        for index, unit in enumerate(state.units):
            problem = _unit_problem(unit, index)
            if problem is not None:
                return StepValidation(ok=False, reason=problem)
    return StepValidation(ok=True)


def email_is_valid(email: str) -> bool:
    return _EMAIL_RE.fullmatch((email or "").strip()) is not None


def phone_is_valid(phone: str) -> bool:
    return _PHONE_RE.fullmatch((phone or "").strip()) is not None


def validate_contact_fields(*, name: str, email: str, phone: str) -> ContactFieldErrors:
    return ContactFieldErrors(
        name=not (name or "").strip(),
        email=not email_is_valid(email),
        phone=not phone_is_valid(phone),
    )
