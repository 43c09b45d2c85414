from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Tuple, Union

from configuration_state import ConfigurationState, Unit

# Goods and Services Tax applied to the whole order.
GST_RATE = 0.18


class PricingError(ValueError):
    pass


@dataclass(frozen=True)
class LineItem:
    code: str
    description: str
    quantity: int
    unit_price: int
    amount: int


@dataclass(frozen=True)
class TaxedTotal:
    subtotal: int
    tax: int
    total: int


@dataclass(frozen=True)
class UnitPrice:
    unit_id: str
    display_name: str
    line_items: Tuple[LineItem, ...]
    subtotal: int


@dataclass(frozen=True)
class PriceSummary:
    units: Tuple[UnitPrice, ...]
    totals: TaxedTotal

    @property
    def grand_subtotal(self) -> int:
        return self.totals.subtotal


def unit_subtotal(unit: Unit) -> int:
    selected = sum(s.unit_price for s in unit.selectables if s.selected)
    devices = sum(q.unit_price * q.quantity for q in unit.quantities)
    return selected + devices


def grand_subtotal(state: ConfigurationState) -> int:
    return sum(unit_subtotal(u) for u in state.units)


def _as_rate(rate: Union[float, str, Decimal]) -> Decimal:
    try:
        # str() first so 0.18 becomes Decimal("0.18") rather than its binary approximation.
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    except InvalidOperation as exc:
        raise PricingError(f"tax rate must be numeric (got {rate!r})") from exc
    if not value.is_finite() or value < 0 or value > 1:
        raise PricingError(f"tax rate must be between 0 and 1 (got {rate!r})")
    return value


def with_tax(subtotal: int, rate: Union[float, str, Decimal] = GST_RATE) -> TaxedTotal:
    """
    Apply tax to a whole-currency subtotal.

    Tax is truncated to whole currency units; amounts in this domain have no minor units.
    """
    if isinstance(subtotal, bool) or not isinstance(subtotal, int) or subtotal < 0:
        raise PricingError(f"subtotal must be a non-negative integer (got {subtotal!r})")
    tax = int((Decimal(subtotal) * _as_rate(rate)).to_integral_value(rounding=ROUND_DOWN))
    return TaxedTotal(subtotal=subtotal, tax=tax, total=subtotal + tax)


def unit_line_items(unit: Unit) -> Tuple[LineItem, ...]:
    """Priced rows for a unit: selected sensors first, then devices with a non-zero quantity."""
    out = []
    for s in unit.selectables:
        if s.selected:
            out.append(
                LineItem(code=s.id, description=s.label, quantity=1, unit_price=s.unit_price, amount=s.unit_price)
            )
    for q in unit.quantities:
        if q.quantity > 0:
            out.append(
                LineItem(
                    code=q.id,
                    description=q.label,
                    quantity=q.quantity,
                    unit_price=q.unit_price,
                    amount=q.unit_price * q.quantity,
                )
            )
    return tuple(out)


def price_state(state: ConfigurationState, rate: Union[float, str, Decimal] = GST_RATE) -> PriceSummary:
    units = tuple(
        UnitPrice(
            unit_id=u.id,
            display_name=u.display_name,
            line_items=unit_line_items(u),
            subtotal=unit_subtotal(u),
        )
        for u in state.units
    )
    return PriceSummary(units=units, totals=with_tax(sum(u.subtotal for u in units), rate))
