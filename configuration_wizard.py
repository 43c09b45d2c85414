from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Tuple, Union

import configuration_state as cs
from configuration_state import BasicInfo, ConfigurationState, Unit, UnknownContactFieldError
from line_item_catalog import PropertyKind, UnitKind
from order_submission import ContactDetails, Order, SubmissionResult, submit_order
from pricing_engine import GST_RATE, LineItem, TaxedTotal, price_state
from validation import CONTACT_FIELDS, ContactFieldErrors, WizardStep
from wizard_navigation import FIRST_STEP, LAST_STEP, WIZARD_STEPS, go_back, go_next

OrderCallback = Callable[[Order], None]


@dataclass(frozen=True)
class UnitView:
    unit: Unit
    line_items: Tuple[LineItem, ...]
    subtotal: int


@dataclass(frozen=True)
class WizardView:
    """Everything the presentation layer needs to draw the current screen."""

    step: WizardStep
    step_labels: Tuple[str, ...]
    can_go_back: bool
    can_go_next: bool
    can_submit: bool
    basic_info: BasicInfo
    units: Tuple[UnitView, ...]
    totals: TaxedTotal
    contact: ContactDetails
    field_errors: ContactFieldErrors
    navigation_message: Optional[str]
    last_order: Optional[Order]


class ConfigurationWizard:
    """
    One in-progress order configuration driven by discrete UI events.

    Each event method applies a single pure transition to the latest state. User
    mistakes never raise: a blocked step or a bad contact form is reported through
    `view()`. Unknown unit/item ids do raise, since the UI only renders ids it got from
    the view.
    """

    def __init__(
        self,
        *,
        max_units: int = cs.MAX_UNITS,
        tax_rate: Union[float, str, Decimal] = GST_RATE,
        on_order: Optional[OrderCallback] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if max_units < cs.MIN_UNITS:
            raise cs.UnitCountError(f"max_units must be at least {cs.MIN_UNITS} (got {max_units})")
        self.max_units = max_units
        self.tax_rate = tax_rate
        self.on_order = on_order
        self._clock = clock
        self.last_order: Optional[Order] = None
        self._restart()

    def _restart(self, state: Optional[ConfigurationState] = None) -> None:
        self.state = state if state is not None else cs.initial_state()
        self.step = FIRST_STEP
        self.contact = ContactDetails()
        self.field_errors = ContactFieldErrors()
        self.navigation_message: Optional[str] = None

    def set_property_kind(self, kind: Union[PropertyKind, str]) -> None:
        self.state = cs.set_property_kind(self.state, kind)

    def set_unit_count(self, count: Union[int, str, None]) -> None:
        self.state = cs.set_unit_count(self.state, count, max_units=self.max_units)

    def set_unit_name(self, unit_id: str, text: str) -> None:
        self.state = cs.set_unit_name(self.state, unit_id, text)

    def set_unit_kind(self, unit_id: str, kind: Union[UnitKind, str]) -> None:
        self.state = cs.set_unit_kind(self.state, unit_id, kind)

    def toggle_selectable(self, unit_id: str, item_id: str, selected: bool) -> None:
        self.state = cs.toggle_selectable(self.state, unit_id, item_id, selected)

    def adjust_quantity(self, unit_id: str, item_id: str, delta: int) -> None:
        self.state = cs.adjust_quantity(self.state, unit_id, item_id, delta)

    def go_next(self) -> bool:
        transition = go_next(self.step, self.state)
        self.step = transition.step
        self.navigation_message = transition.validation.reason
        return transition.moved

    def go_back(self) -> bool:
        transition = go_back(self.step)
        self.step = transition.step
        if transition.moved:
            self.navigation_message = None
        return transition.moved

    def update_contact_field(self, name: str, value: str) -> None:
        if name not in CONTACT_FIELDS:
            raise UnknownContactFieldError(f"unknown contact field: {name!r}")
        self.contact = replace(self.contact, **{name: str(value or "")})
        # Editing a flagged field clears its flag; it is checked again on the next submit.
        self.field_errors = replace(self.field_errors, **{name: False})

    def submit(self) -> Optional[SubmissionResult]:
        """
        Submit from the summary step.

        Returns None when called from any other step. On success the wizard starts
        over with a single default room and `on_order` receives the finished Order.
        """
        if self.step != LAST_STEP:
            return None
        now = self._clock() if self._clock is not None else None
        result = submit_order(self.state, self.contact, tax_rate=self.tax_rate, now=now)
        if not result.ok:
            self.field_errors = result.field_errors
            return result

        self.last_order = result.order
        self._restart(result.next_state)
        if self.on_order is not None and result.order is not None:
            self.on_order(result.order)
        return result

    def reset(self) -> None:
        self._restart(cs.initial_state(next_unit_seq=self.state.next_unit_seq))

    def view(self) -> WizardView:
        prices = price_state(self.state, self.tax_rate)
        units = tuple(
            UnitView(unit=unit, line_items=price.line_items, subtotal=price.subtotal)
            for unit, price in zip(self.state.units, prices.units)
        )
        return WizardView(
            step=self.step,
            step_labels=tuple(s.label for s in WIZARD_STEPS),
            can_go_back=self.step != FIRST_STEP,
            can_go_next=self.step != LAST_STEP,
            can_submit=self.step == LAST_STEP,
            basic_info=self.state.basic_info,
            units=units,
            totals=prices.totals,
            contact=self.contact,
            field_errors=self.field_errors,
            navigation_message=self.navigation_message,
            last_order=self.last_order,
        )
