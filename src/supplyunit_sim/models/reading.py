"""
Supply Reading Models
=====================

This module defines the roster entries and the synthetic readings published
for them.

Reading Contract (one entry per roster location, roster order):
    {
        "location_index": 2,
        "timestamp": 1707321234,
        "color_hint": 41213,
        "bar_type": "BT_BOX_VARCOLOR",
        "longitude": 136.970909,
        "latitude": 35.154811,
        "width": 300.0,
        "radius": 900.0,
        "categories": [
            {"value": 121.4, "label": "food", "color": 0xFF0000},
            {"value": 12.9, "label": "water", "color": 0x00FF00},
            {"value": 287.0, "label": "blanket", "color": 0x0000FF}
        ],
        "min_scale": 100.0,
        "max_scale": 1500.0,
        "label": "..."
    }

Design Rules:
    - Readings are immutable and live for a single publish call
    - Batch order equals roster order; consumers correlate by index
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Tuple

from pydantic import BaseModel, ConfigDict, Field


class BarType(IntEnum):
    """Display kind of a bar entry (wire enum values)."""

    BT_BOX_VARCOLOR = 0
    BT_BOX_FIXCOLOR = 1
    BT_CYLINDER_VARCOLOR = 2
    BT_CYLINDER_FIXCOLOR = 3


class NamedLocation(BaseModel):
    """
    Fixed geographic point that receives a reading every publish.

    Loaded once from the roster file and never mutated.

    Attributes:
        longitude: Longitude in decimal degrees
        latitude: Latitude in decimal degrees
        label: Display name of the location
    """

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(..., ge=-180.0, le=180.0, description="Longitude")
    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude")
    label: str = Field(..., min_length=1, description="Display name")


@dataclass(frozen=True, slots=True)
class Category:
    """One supply category of a reading."""

    value: float
    label: str
    color: int


@dataclass(frozen=True, slots=True)
class SupplyReading:
    """
    Synthetic supply levels for one location at one tick.

    Attributes:
        location_index: Position of the location in the roster
        timestamp: UNIX timestamp (seconds) of the tick
        color_hint: Random 16-bit color for the bar body
        bar_type: Display kind
        longitude: Copied from the location
        latitude: Copied from the location
        width: Bar width hint
        radius: Bar radius hint
        categories: food, water, blanket in that order
        min_scale: Scale floor hint
        max_scale: Scale ceiling hint
        label: Copied from the location
    """

    location_index: int
    timestamp: int
    color_hint: int
    bar_type: BarType
    longitude: float
    latitude: float
    width: float
    radius: float
    categories: Tuple[Category, ...]
    min_scale: float
    max_scale: float
    label: str


@dataclass(frozen=True, slots=True)
class ReadingBatch:
    """All readings produced in one tick, in roster order."""

    readings: Tuple[SupplyReading, ...]

    def __len__(self) -> int:
        return len(self.readings)

    def __iter__(self) -> Iterator[SupplyReading]:
        return iter(self.readings)

    def __getitem__(self, index: int) -> SupplyReading:
        return self.readings[index]

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(r.label for r in self.readings)
