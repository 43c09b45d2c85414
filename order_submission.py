from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple, Union

from configuration_state import BasicInfo, ConfigurationState, Unit, initial_state, with_contact
from debug_log import debug_log
from pricing_engine import GST_RATE, UnitPrice, price_state
from validation import ContactFieldErrors, validate_contact_fields


@dataclass(frozen=True)
class ContactDetails:
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class Order:
    """A priced, submitted configuration. Built once by `submit_order` and never changed."""

    order_id: str
    submitted_at: datetime
    basic_info: BasicInfo
    units: Tuple[Unit, ...]
    unit_prices: Tuple[UnitPrice, ...]
    tax_rate: str
    subtotal: int
    tax: int
    total: int


@dataclass(frozen=True)
class SubmissionResult:
    order: Optional[Order]
    field_errors: ContactFieldErrors
    # On success this is a fresh initial state; on failure it is the untouched input state.
    next_state: ConfigurationState

    @property
    def ok(self) -> bool:
        return self.order is not None


def _order_signature(state: ConfigurationState, submitted_at: datetime, total: int) -> str:
    base = {
        "submitted_at": submitted_at.isoformat(),
        "contact": [state.basic_info.contact_name, state.basic_info.contact_email, state.basic_info.contact_phone],
        "units": [
            {
                "id": u.id,
                "name": u.display_name,
                "kind": u.kind.value,
                "selected": [s.id for s in u.selectables if s.selected],
                "quantities": {q.id: q.quantity for q in u.quantities},
            }
            for u in state.units
        ],
        "total": total,
    }
    raw = json.dumps(base, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:12].upper()


def submit_order(
    state: ConfigurationState,
    contact: ContactDetails,
    *,
    tax_rate: Union[float, str, Decimal] = GST_RATE,
    now: Optional[datetime] = None,
) -> SubmissionResult:
    """
    Validate the contact form and, when it passes, freeze `state` into an Order.

    Nothing about `state` changes on failure, so the caller can keep the user on the
    summary step with the offending fields flagged.
    """
    errors = validate_contact_fields(name=contact.name, email=contact.email, phone=contact.phone)
    if errors.any:
        debug_log(
            location="order_submission.py:submit_order",
            message="Submission rejected",
            data={"field_errors": errors.as_dict()},
        )
        return SubmissionResult(order=None, field_errors=errors, next_state=state)

    final_state = with_contact(state, name=contact.name, email=contact.email, phone=contact.phone)
    prices = price_state(final_state, tax_rate)
    submitted_at = now or datetime.now(timezone.utc)
    order = Order(
        order_id=_order_signature(final_state, submitted_at, prices.totals.total),
        submitted_at=submitted_at,
        basic_info=final_state.basic_info,
        units=final_state.units,
        unit_prices=prices.units,
        tax_rate=str(tax_rate),
        subtotal=prices.totals.subtotal,
        tax=prices.totals.tax,
        total=prices.totals.total,
    )
    debug_log(
        location="order_submission.py:submit_order",
        message="Order submitted",
        data={"order_id": order.order_id, "unit_count": len(order.units), "total": order.total},
    )
    # The sequence carries over so unit ids stay unique across consecutive orders.
    next_state = initial_state(next_unit_seq=final_state.next_unit_seq)
    return SubmissionResult(order=order, field_errors=errors, next_state=next_state)
