"""
Geometry Models
===============

This module defines the planar geometry used by the interior point sampler.

Coordinates are geographic (longitude, latitude) in decimal degrees, but all
computations treat them as planar. Polygons come from GeoJSON boundary files
and follow the GeoJSON ring layout:

    [
        [[lon, lat], [lon, lat], ...],   # outer ring
        [[lon, lat], ...],               # optional holes
    ]

Rings are implicitly closed. A repeated closing vertex (as GeoJSON requires)
is accepted and does not affect containment tests.

Containment and bounds are delegated to shapely; ``Polygon.shape`` is the
prepared shapely polygon built from the validated rings.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import shapely
from pydantic import BaseModel, Field, PrivateAttr, field_validator
from shapely.geometry import Polygon as ShapelyPolygon


Position = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class Point:
    """
    Planar point in (longitude, latitude) order.

    Attributes:
        lon: Longitude in decimal degrees
        lat: Latitude in decimal degrees
    """

    lon: float
    lat: float


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Axis-aligned rectangle enclosing a polygon.

    Taken from the shapely envelope of the outer ring.
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def is_degenerate(self) -> bool:
        """True if the box has zero width or zero height."""
        return self.width <= 0.0 or self.height <= 0.0

    def contains(self, point: Point) -> bool:
        return (
            self.min_lon <= point.lon <= self.max_lon
            and self.min_lat <= point.lat <= self.max_lat
        )


class Polygon(BaseModel):
    """
    Polygon with an outer ring and optional holes.

    Attributes:
        rings: Outer ring first, then holes. Each ring is a list of
            (lon, lat) positions with at least 3 entries.
    """

    rings: List[List[Position]] = Field(
        ...,
        min_length=1,
        description="Outer ring followed by optional holes",
    )

    _shape: Optional[ShapelyPolygon] = PrivateAttr(default=None)

    @field_validator("rings", mode="before")
    @classmethod
    def drop_altitude(cls, v):
        """Keep only (lon, lat) of positions that carry an altitude."""
        if isinstance(v, list):
            return [
                [p[:2] if isinstance(p, (list, tuple)) and len(p) > 2 else p for p in ring]
                if isinstance(ring, list) else ring
                for ring in v
            ]
        return v

    @field_validator("rings")
    @classmethod
    def validate_rings(cls, v: List[List[Position]]) -> List[List[Position]]:
        """Ensure every ring has at least 3 positions."""
        for i, ring in enumerate(v):
            if len(ring) < 3:
                raise ValueError(f"Ring {i} must have at least 3 positions")
        return v

    @property
    def exterior(self) -> List[Position]:
        return self.rings[0]

    @property
    def holes(self) -> List[List[Position]]:
        return self.rings[1:]

    @property
    def shape(self) -> ShapelyPolygon:
        """Prepared shapely polygon, built on first use."""
        if self._shape is None:
            self._shape = ShapelyPolygon(self.exterior, self.holes)
            shapely.prepare(self._shape)
        return self._shape

    def bounds(self) -> BoundingBox:
        """Compute the bounding box of the outer ring."""
        min_lon, min_lat, max_lon, max_lat = self.shape.bounds
        return BoundingBox(
            min_lon=min_lon,
            min_lat=min_lat,
            max_lon=max_lon,
            max_lat=max_lat,
        )
