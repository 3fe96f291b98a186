"""
Data Models
===========

Models for the supply-unit simulator.

Models:
    Geometry:
        - Point, BoundingBox: Planar primitives (lon, lat)
        - Polygon: Outer ring plus optional holes

    Readings:
        - NamedLocation: Roster entry
        - Category, SupplyReading: Per-location synthetic reading
        - ReadingBatch: One tick's readings in roster order
        - BarType: Wire display kind
"""

from supplyunit_sim.models.geometry import BoundingBox, Point, Polygon
from supplyunit_sim.models.reading import (
    BarType,
    Category,
    NamedLocation,
    ReadingBatch,
    SupplyReading,
)

__all__ = [
    # Geometry
    "Point",
    "BoundingBox",
    "Polygon",
    # Readings
    "BarType",
    "NamedLocation",
    "Category",
    "SupplyReading",
    "ReadingBatch",
]
