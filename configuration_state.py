from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from debug_log import debug_log
from line_item_catalog import (
    DEFAULT_UNIT_KIND,
    PropertyKind,
    QuantityItem,
    SelectableItem,
    UnitKind,
    default_quantities,
    default_selectables,
)

MIN_UNITS = 1
MAX_UNITS = 10


class ConfigurationError(ValueError):
    pass


class UnitCountError(ConfigurationError):
    pass


class UnknownUnitError(ConfigurationError):
    pass


class UnknownLineItemError(ConfigurationError):
    pass


class UnknownContactFieldError(ConfigurationError):
    pass


@dataclass(frozen=True)
class BasicInfo:
    property_kind: PropertyKind = PropertyKind.EXISTING
    unit_count: int = MIN_UNITS
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None


@dataclass(frozen=True)
class Unit:
    id: str
    display_name: str
    kind: UnitKind
    selectables: Tuple[SelectableItem, ...]
    quantities: Tuple[QuantityItem, ...]


@dataclass(frozen=True)
class ConfigurationState:
    basic_info: BasicInfo = field(default_factory=BasicInfo)
    units: Tuple[Unit, ...] = ()
    # Monotonic ID source for units; ids are never handed out twice within one configuration.
    next_unit_seq: int = 1


def positional_unit_name(index: int) -> str:
    return f"Room {index + 1}"


def _new_unit(seq: int, index: int) -> Unit:
    return Unit(
        id=f"unit-{seq}",
        display_name=positional_unit_name(index),
        kind=DEFAULT_UNIT_KIND,
        selectables=default_selectables(),
        quantities=default_quantities(),
    )


def _validate_unit_count(value: object, max_units: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnitCountError(f"unit count must be an integer (got {value!r})")
    if value < MIN_UNITS or value > max_units:
        raise UnitCountError(f"unit count must be between {MIN_UNITS} and {max_units} (got {value})")
    return value


def reconcile_units(state: ConfigurationState, new_unit_count: int, *, max_units: int = MAX_UNITS) -> ConfigurationState:
    """
    Align `state.units` with `new_unit_count` and return the new state.

    - Growth appends freshly catalog-initialized units named by position ("Room 3").
    - Shrink drops units from the tail; their selections are discarded for good.
    - When nothing changes the same state object is returned.

    Surviving units are carried over unchanged, so their ids and selections are preserved.
    """
    count = _validate_unit_count(new_unit_count, max_units)
    current = len(state.units)
    if count == current and state.basic_info.unit_count == count:
        return state

    units = state.units
    seq = state.next_unit_seq
    if count > current:
        added = []
        for index in range(current, count):
            added.append(_new_unit(seq, index))
            seq += 1
        units = units + tuple(added)
    elif count < current:
        units = units[:count]

    debug_log(
        location="configuration_state.py:reconcile_units",
        message="Reconciled unit list",
        data={
            "from_count": current,
            "to_count": count,
            "unit_ids": [u.id for u in units],
        },
    )
    return replace(
        state,
        basic_info=replace(state.basic_info, unit_count=count),
        units=units,
        next_unit_seq=seq,
    )


def initial_state(next_unit_seq: int = 1) -> ConfigurationState:
    """A fresh configuration with one default unit. Pass `next_unit_seq` to keep ids unique across resets."""
    return reconcile_units(ConfigurationState(next_unit_seq=next_unit_seq), MIN_UNITS)


def clamp_unit_count(raw: Union[int, str, None], *, current: int, max_units: int = MAX_UNITS) -> int:
    """
    Turn user input into a count `reconcile_units` accepts.

    Numbers are clamped into the allowed range; anything that does not parse as an
    integer keeps the current count.
    """
    if isinstance(raw, bool):
        return current
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw or "").strip()
        try:
            value = int(text)
        except ValueError:
            return current
    return max(MIN_UNITS, min(max_units, value))


def set_property_kind(state: ConfigurationState, kind: Union[PropertyKind, str]) -> ConfigurationState:
    try:
        property_kind = PropertyKind(kind)
    except ValueError as exc:
        raise ConfigurationError(f"unknown property kind: {kind!r}") from exc
    if property_kind == state.basic_info.property_kind:
        return state
    return replace(state, basic_info=replace(state.basic_info, property_kind=property_kind))


def set_unit_count(
    state: ConfigurationState, raw_count: Union[int, str, None], *, max_units: int = MAX_UNITS
) -> ConfigurationState:
    count = clamp_unit_count(raw_count, current=state.basic_info.unit_count, max_units=max_units)
    return reconcile_units(state, count, max_units=max_units)


def find_unit(state: ConfigurationState, unit_id: str) -> Unit:
    for unit in state.units:
        if unit.id == unit_id:
            return unit
    raise UnknownUnitError(f"no unit with id {unit_id!r}")


def _replace_unit(state: ConfigurationState, updated: Unit) -> ConfigurationState:
    return replace(state, units=tuple(updated if u.id == updated.id else u for u in state.units))


def set_unit_name(state: ConfigurationState, unit_id: str, text: str) -> ConfigurationState:
    unit = find_unit(state, unit_id)
    return _replace_unit(state, replace(unit, display_name=str(text or "")))


def set_unit_kind(state: ConfigurationState, unit_id: str, kind: Union[UnitKind, str]) -> ConfigurationState:
    unit = find_unit(state, unit_id)
    try:
        unit_kind = UnitKind(kind)
    except ValueError as exc:
        raise ConfigurationError(f"unknown unit kind: {kind!r}") from exc
    return _replace_unit(state, replace(unit, kind=unit_kind))


def toggle_selectable(state: ConfigurationState, unit_id: str, item_id: str, selected: bool) -> ConfigurationState:
    if not isinstance(selected, bool):
        raise ConfigurationError(f"selected must be a bool (got {selected!r})")
    unit = find_unit(state, unit_id)
    if item_id not in {s.id for s in unit.selectables}:
        raise UnknownLineItemError(f"unit {unit_id!r} has no selectable item {item_id!r}")
    selectables = tuple(
        replace(s, selected=selected) if s.id == item_id else s for s in unit.selectables
    )
    return _replace_unit(state, replace(unit, selectables=selectables))


def adjust_quantity(state: ConfigurationState, unit_id: str, item_id: str, delta: int) -> ConfigurationState:
    """Add `delta` (may be negative) to a quantity item; quantities never drop below zero."""
    unit = find_unit(state, unit_id)
    if item_id not in {q.id for q in unit.quantities}:
        raise UnknownLineItemError(f"unit {unit_id!r} has no quantity item {item_id!r}")
    quantities = tuple(
        replace(q, quantity=max(0, q.quantity + int(delta))) if q.id == item_id else q for q in unit.quantities
    )
    return _replace_unit(state, replace(unit, quantities=quantities))


def with_contact(state: ConfigurationState, *, name: str, email: str, phone: str) -> ConfigurationState:
    return replace(
        state,
        basic_info=replace(
            state.basic_info,
            contact_name=name.strip(),
            contact_email=email.strip(),
            contact_phone=phone.strip(),
        ),
    )
