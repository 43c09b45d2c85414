from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


class PropertyKind(str, Enum):
    EXISTING = "existing"
    NEW = "new"

    @property
    def label(self) -> str:
        return _PROPERTY_KIND_LABELS[self]


_PROPERTY_KIND_LABELS = {
    PropertyKind.EXISTING: "Existing Home",
    PropertyKind.NEW: "New Construction",
}


class UnitKind(str, Enum):
    LIVING = "living"
    BEDROOM = "bedroom"
    KITCHEN = "kitchen"
    BATHROOM = "bathroom"
    OFFICE = "office"
    DINING = "dining"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _UNIT_KIND_LABELS[self]


_UNIT_KIND_LABELS = {
    UnitKind.LIVING: "Living Room",
    UnitKind.BEDROOM: "Bedroom",
    UnitKind.KITCHEN: "Kitchen",
    UnitKind.BATHROOM: "Bathroom",
    UnitKind.OFFICE: "Home Office",
    UnitKind.DINING: "Dining Room",
    UnitKind.OTHER: "Other",
}

DEFAULT_UNIT_KIND = UnitKind.BEDROOM


@dataclass(frozen=True)
class SelectableItem:
    """A sensor that is either included in a room or not, at a fixed price."""

    id: str
    label: str
    description: str
    unit_price: int
    selected: bool = False

    def clone(self) -> "SelectableItem":
        return replace(self)


@dataclass(frozen=True)
class QuantityItem:
    """A device bought in whole units; its price scales linearly with quantity."""

    id: str
    label: str
    description: str
    unit_price: int
    quantity: int = 0

    def clone(self) -> "QuantityItem":
        return replace(self)


# Prices are whole rupees (INR); there are no fractional minor units in this catalog.
_SELECTABLES: Tuple[SelectableItem, ...] = (
    SelectableItem(
        id="motion",
        label="Motion Sensor",
        description="The PIR Motion Sensor Detector Module allows you to sense motion.",
        unit_price=1200,
    ),
    SelectableItem(
        id="human",
        label="Human Presence Detection",
        description="Want to detect if the room is occupied or if someone is moving in the room?",
        unit_price=2500,
    ),
    SelectableItem(
        id="light",
        label="Light Intensity",
        description="Want to detect if the room is dark or bright using a light intensity sensor.",
        unit_price=800,
    ),
    SelectableItem(
        id="environment",
        label="Air Pressure, Temperature, Humidity",
        description="Want to detect Air Pressure, Temperature, and Humidity in this Room?",
        unit_price=1500,
    ),
    SelectableItem(
        id="communication",
        label="Local Communication",
        description="Local Communication and auto-discoverable in home assistant via ESP-Now Protocol",
        unit_price=1000,
    ),
    SelectableItem(
        id="air",
        label="Air Quality Index",
        description="Air Quality Index for home",
        unit_price=2200,
    ),
)

_QUANTITIES: Tuple[QuantityItem, ...] = (
    QuantityItem(
        id="led",
        label="12 Watt LED COB Dimmer",
        description="Dimmable LED light controller for ambient lighting",
        unit_price=1800,
    ),
    QuantityItem(
        id="switch",
        label="4 Switch Module",
        description="Control up to 4 different electrical appliances or lights",
        unit_price=2500,
    ),
)


def _check_catalog() -> None:
    for group in (_SELECTABLES, _QUANTITIES):
        ids = [item.id for item in group]
        if len(set(ids)) != len(ids):
            raise ValueError(f"catalog ids must be unique (got {ids!r})")
        for item in group:
            if not isinstance(item.unit_price, int) or item.unit_price < 0:
                raise ValueError(f"catalog price for {item.id!r} must be a non-negative integer")


_check_catalog()


def default_selectables() -> Tuple[SelectableItem, ...]:
    return tuple(item.clone() for item in _SELECTABLES)


def default_quantities() -> Tuple[QuantityItem, ...]:
    return tuple(item.clone() for item in _QUANTITIES)


def catalog_selectable_ids() -> Tuple[str, ...]:
    return tuple(item.id for item in _SELECTABLES)


def catalog_quantity_ids() -> Tuple[str, ...]:
    return tuple(item.id for item in _QUANTITIES)
