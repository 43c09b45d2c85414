from __future__ import annotations

import unittest
from datetime import datetime, timezone

from configuration_state import UnitCountError, UnknownContactFieldError
from configuration_wizard import ConfigurationWizard
from line_item_catalog import PropertyKind, UnitKind
from order_submission import Order
from validation import WizardStep


def _fill_contact(w: ConfigurationWizard, name: str = "Asha", email: str = "a@b.com", phone: str = "9876543210") -> None:
    w.update_contact_field("name", name)
    w.update_contact_field("email", email)
    w.update_contact_field("phone", phone)


class TestConfigurationWizard(unittest.TestCase):
    def setUp(self) -> None:
        self.orders: list[Order] = []
        self.wizard = ConfigurationWizard(
            on_order=self.orders.append,
            clock=lambda: datetime(2024, 5, 1, tzinfo=timezone.utc),
        )

    def _unit_id(self, index: int = 0) -> str:
        return self.wizard.view().units[index].unit.id

    def test_initial_view(self) -> None:
        view = self.wizard.view()
        self.assertEqual(view.step, WizardStep.BASIC_INFO)
        self.assertEqual(view.step_labels, ("Basic Information", "Room Details", "Summary"))
        self.assertFalse(view.can_go_back)
        self.assertTrue(view.can_go_next)
        self.assertFalse(view.can_submit)
        self.assertEqual(len(view.units), 1)
        self.assertEqual(view.totals.total, 0)
        self.assertIsNone(view.last_order)

    def test_basic_info_events(self) -> None:
        self.wizard.set_property_kind("new")
        self.wizard.set_unit_count(4)
        view = self.wizard.view()
        self.assertEqual(view.basic_info.property_kind, PropertyKind.NEW)
        self.assertEqual(view.basic_info.unit_count, 4)
        self.assertEqual(len(view.units), 4)

        self.wizard.set_unit_count(99)
        self.assertEqual(len(self.wizard.view().units), 10)

    def test_max_units_is_configurable(self) -> None:
        w = ConfigurationWizard(max_units=3)
        w.set_unit_count(8)
        self.assertEqual(len(w.view().units), 3)
        with self.assertRaises(UnitCountError):
            ConfigurationWizard(max_units=0)

    def test_unit_events_update_running_totals(self) -> None:
        unit_id = self._unit_id()
        self.wizard.set_unit_name(unit_id, "Study")
        self.wizard.set_unit_kind(unit_id, UnitKind.OFFICE)
        self.wizard.toggle_selectable(unit_id, "environment", True)
        self.wizard.adjust_quantity(unit_id, "led", 2)
        view = self.wizard.view()
        unit_view = view.units[0]
        self.assertEqual(unit_view.unit.display_name, "Study")
        self.assertEqual(unit_view.unit.kind, UnitKind.OFFICE)
        self.assertEqual(unit_view.subtotal, 1500 + 2 * 1800)
        self.assertEqual([li.code for li in unit_view.line_items], ["environment", "led"])
        self.assertEqual(view.totals.subtotal, 5100)
        self.assertEqual(view.totals.tax, 918)
        self.assertEqual(view.totals.total, 6018)

    def test_next_blocked_until_units_configured(self) -> None:
        self.assertTrue(self.wizard.go_next())
        self.assertFalse(self.wizard.go_next())
        view = self.wizard.view()
        self.assertEqual(view.step, WizardStep.UNIT_DETAILS)
        self.assertTrue(view.navigation_message)

        self.wizard.toggle_selectable(self._unit_id(), "motion", True)
        self.assertTrue(self.wizard.go_next())
        view = self.wizard.view()
        self.assertEqual(view.step, WizardStep.SUMMARY)
        self.assertIsNone(view.navigation_message)
        self.assertTrue(view.can_submit)
        self.assertFalse(view.can_go_next)

    def test_back_from_summary(self) -> None:
        self.wizard.toggle_selectable(self._unit_id(), "motion", True)
        self.wizard.go_next()
        self.wizard.go_next()
        self.assertTrue(self.wizard.go_back())
        self.assertEqual(self.wizard.step, WizardStep.UNIT_DETAILS)
        self.assertTrue(self.wizard.go_back())
        self.assertFalse(self.wizard.go_back())
        self.assertEqual(self.wizard.step, WizardStep.BASIC_INFO)

    def test_submit_outside_summary_is_ignored(self) -> None:
        self.assertIsNone(self.wizard.submit())
        self.assertEqual(self.orders, [])

    def test_failed_submit_flags_fields_and_keeps_state(self) -> None:
        self.wizard.set_unit_count(2)
        self.wizard.go_next()
        self.wizard.toggle_selectable(self._unit_id(0), "motion", True)
        self.wizard.toggle_selectable(self._unit_id(1), "air", True)
        self.wizard.go_next()
        _fill_contact(self.wizard, name="", email="abc", phone="12345")

        result = self.wizard.submit()
        assert result is not None
        self.assertFalse(result.ok)
        view = self.wizard.view()
        self.assertEqual(view.step, WizardStep.SUMMARY)
        self.assertEqual(view.field_errors.as_dict(), {"name": True, "email": True, "phone": True})
        self.assertEqual(len(view.units), 2)
        self.assertEqual(self.orders, [])

        # Editing a field clears only that field's flag.
        self.wizard.update_contact_field("email", "a@b.com")
        self.assertEqual(self.wizard.view().field_errors.as_dict(), {"name": True, "email": False, "phone": True})

    def test_successful_submit_emits_order_and_resets(self) -> None:
        self.wizard.set_unit_count(2)
        self.wizard.go_next()
        self.wizard.toggle_selectable(self._unit_id(0), "motion", True)
        self.wizard.adjust_quantity(self._unit_id(1), "switch", 1)
        self.wizard.go_next()
        _fill_contact(self.wizard)

        result = self.wizard.submit()
        assert result is not None
        self.assertTrue(result.ok)
        self.assertEqual(len(self.orders), 1)
        order = self.orders[0]
        self.assertEqual(order.total, (1200 + 2500) * 118 // 100)
        self.assertEqual(order.basic_info.contact_email, "a@b.com")

        view = self.wizard.view()
        self.assertEqual(view.step, WizardStep.BASIC_INFO)
        self.assertEqual(view.basic_info.unit_count, 1)
        self.assertEqual(view.contact.name, "")
        self.assertFalse(view.field_errors.any)
        self.assertIs(view.last_order, order)

    def test_consecutive_orders_never_reuse_unit_ids(self) -> None:
        for _ in range(2):
            self.wizard.go_next()
            self.wizard.toggle_selectable(self._unit_id(), "motion", True)
            self.wizard.go_next()
            _fill_contact(self.wizard)
            self.wizard.submit()
        self.assertEqual(len(self.orders), 2)
        first_ids = {u.id for u in self.orders[0].units}
        second_ids = {u.id for u in self.orders[1].units}
        self.assertTrue(first_ids.isdisjoint(second_ids))
        self.assertNotIn(self._unit_id(), first_ids | second_ids)

    def test_unknown_contact_field_raises(self) -> None:
        with self.assertRaises(UnknownContactFieldError):
            self.wizard.update_contact_field("address", "x")

    def test_reset(self) -> None:
        self.wizard.set_unit_count(3)
        used_ids = {u.unit.id for u in self.wizard.view().units}
        self.wizard.go_next()
        self.wizard.reset()
        view = self.wizard.view()
        self.assertEqual(view.step, WizardStep.BASIC_INFO)
        self.assertEqual(len(view.units), 1)
        self.assertNotIn(view.units[0].unit.id, used_ids)


if __name__ == "__main__":
    unittest.main()
