"""
Synthetic Reading Generator
===========================

Fabricates one bar-graph reading per roster location.

Each reading carries three categories in fixed order (food, water,
blanket) with values drawn uniformly from [0, 300), a random 16-bit body
color, and fixed display hints understood by the visualization layer.

Design Rules:
    - Output length and order always match the roster
    - No I/O; the only input besides arguments is the random source
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from supplyunit_sim.models.reading import (
    BarType,
    Category,
    NamedLocation,
    ReadingBatch,
    SupplyReading,
)


# (label, color) in publish order
CATEGORIES: Tuple[Tuple[str, int], ...] = (
    ("food", 0xFF0000),
    ("water", 0x00FF00),
    ("blanket", 0x0000FF),
)

CATEGORY_VALUE_MAX = 300.0
COLOR_HINT_MAX = 0xFFFF

BAR_WIDTH = 300.0
BAR_RADIUS = 900.0
SCALE_MIN = 100.0
SCALE_MAX = 1500.0


class SupplyReadingGenerator:
    """
    Generator of synthetic supply readings.

    Example:
        generator = SupplyReadingGenerator(np.random.default_rng())
        batch = generator.generate_batch(roster, int(time.time()))
    """

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

    def generate_reading(
        self,
        index: int,
        location: NamedLocation,
        timestamp: int,
    ) -> SupplyReading:
        """Build the reading for one roster entry."""
        categories = tuple(
            Category(
                value=float(self._rng.random() * CATEGORY_VALUE_MAX),
                label=label,
                color=color,
            )
            for label, color in CATEGORIES
        )

        return SupplyReading(
            location_index=index,
            timestamp=timestamp,
            color_hint=int(self._rng.integers(0, COLOR_HINT_MAX)),
            bar_type=BarType.BT_BOX_VARCOLOR,
            longitude=location.longitude,
            latitude=location.latitude,
            width=BAR_WIDTH,
            radius=BAR_RADIUS,
            categories=categories,
            min_scale=SCALE_MIN,
            max_scale=SCALE_MAX,
            label=location.label,
        )

    def generate_batch(
        self,
        locations: Sequence[NamedLocation],
        timestamp: int,
    ) -> ReadingBatch:
        """
        Generate one reading per location, in roster order.

        Args:
            locations: Non-empty roster
            timestamp: UNIX timestamp (seconds) of the tick

        Returns:
            ReadingBatch with ``len(locations)`` readings

        Raises:
            ValueError: If the roster is empty
        """
        if not locations:
            raise ValueError("Roster must contain at least one location")

        return ReadingBatch(
            readings=tuple(
                self.generate_reading(i, location, timestamp)
                for i, location in enumerate(locations)
            )
        )
