from __future__ import annotations

import unittest

import configuration_state as cs
from configuration_state import initial_state, reconcile_units
from validation import (
    ContactFieldErrors,
    WizardStep,
    email_is_valid,
    phone_is_valid,
    step_is_valid,
    validate_contact_fields,
)
from wizard_navigation import go_back, go_next


def _configured_state(count: int):
    state = reconcile_units(initial_state(), count)
    for unit in state.units:
        state = cs.toggle_selectable(state, unit.id, "motion", True)
    return state


class TestStepValidation(unittest.TestCase):
    def test_basic_info_is_always_valid(self) -> None:
        self.assertTrue(step_is_valid(initial_state(), WizardStep.BASIC_INFO).ok)

    def test_unit_details_requires_an_item_in_every_unit(self) -> None:
        state = reconcile_units(initial_state(), 2)
        result = step_is_valid(state, WizardStep.UNIT_DETAILS)
        self.assertFalse(result.ok)
        self.assertIn("Room 1", result.reason or "")

        state = cs.toggle_selectable(state, state.units[0].id, "motion", True)
        result = step_is_valid(state, WizardStep.UNIT_DETAILS)
        self.assertFalse(result.ok)
        self.assertIn("Room 2", result.reason or "")

        # A device quantity counts as configured too.
        state = cs.adjust_quantity(state, state.units[1].id, "led", 1)
        self.assertTrue(step_is_valid(state, WizardStep.UNIT_DETAILS).ok)

    def test_unit_details_requires_a_name(self) -> None:
        state = _configured_state(2)
        state = cs.set_unit_name(state, state.units[1].id, "   ")
        result = step_is_valid(state, WizardStep.UNIT_DETAILS)
        self.assertFalse(result.ok)
        self.assertIn("name", result.reason or "")

    def test_summary_is_structurally_valid(self) -> None:
        self.assertTrue(step_is_valid(reconcile_units(initial_state(), 3), WizardStep.SUMMARY).ok)


class TestContactValidation(unittest.TestCase):
    def test_all_fields_flagged(self) -> None:
        errors = validate_contact_fields(name="", email="abc", phone="12345")
        self.assertEqual(errors, ContactFieldErrors(name=True, email=True, phone=True))
        self.assertTrue(errors.any)

    def test_valid_contact(self) -> None:
        errors = validate_contact_fields(name="Asha", email="a@b.com", phone="9876543210")
        self.assertFalse(errors.any)
        self.assertEqual(errors.as_dict(), {"name": False, "email": False, "phone": False})

    def test_fields_are_flagged_independently(self) -> None:
        errors = validate_contact_fields(name="  ", email="asha@example.co.in", phone="9876543210")
        self.assertEqual(errors, ContactFieldErrors(name=True))

    def test_email_shape(self) -> None:
        for good in ("a@b.com", "first.last+tag@mail.example.org", " asha@example.in "):
            self.assertTrue(email_is_valid(good), good)
        for bad in ("", "abc", "a@b", "@b.com", "a@.com", "a b@c.com", "a@b.c"):
            self.assertFalse(email_is_valid(bad), bad)

    def test_phone_is_exactly_ten_ascii_digits(self) -> None:
        self.assertTrue(phone_is_valid("9876543210"))
        for bad in ("", "12345", "98765432101", "98765-43210", "+919876543210", "٩٨٧٦٥٤٣٢١٠"):
            self.assertFalse(phone_is_valid(bad), bad)


class TestWizardNavigation(unittest.TestCase):
    def test_next_from_basic_info(self) -> None:
        t = go_next(WizardStep.BASIC_INFO, initial_state())
        self.assertTrue(t.moved)
        self.assertEqual(t.step, WizardStep.UNIT_DETAILS)

    def test_next_blocked_on_invalid_unit_details(self) -> None:
        t = go_next(WizardStep.UNIT_DETAILS, initial_state())
        self.assertFalse(t.moved)
        self.assertEqual(t.step, WizardStep.UNIT_DETAILS)
        self.assertFalse(t.validation.ok)
        self.assertTrue(t.validation.reason)

    def test_next_allowed_once_units_are_configured(self) -> None:
        t = go_next(WizardStep.UNIT_DETAILS, _configured_state(3))
        self.assertTrue(t.moved)
        self.assertEqual(t.step, WizardStep.SUMMARY)

    def test_summary_is_terminal(self) -> None:
        t = go_next(WizardStep.SUMMARY, _configured_state(1))
        self.assertFalse(t.moved)
        self.assertEqual(t.step, WizardStep.SUMMARY)

    def test_back_ignores_validity(self) -> None:
        t = go_back(WizardStep.SUMMARY)
        self.assertTrue(t.moved)
        self.assertEqual(t.step, WizardStep.UNIT_DETAILS)
        self.assertEqual(go_back(WizardStep.UNIT_DETAILS).step, WizardStep.BASIC_INFO)

    def test_back_stops_at_first_step(self) -> None:
        t = go_back(WizardStep.BASIC_INFO)
        self.assertFalse(t.moved)
        self.assertEqual(t.step, WizardStep.BASIC_INFO)


if __name__ == "__main__":
    unittest.main()
