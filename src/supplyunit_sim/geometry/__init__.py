"""
Geometry Module
===============

Boundary loading and interior point sampling.

The sampler is used ad hoc (see the ``sample`` CLI command); it is not part
of the publish loop.
"""

from supplyunit_sim.geometry.loader import (
    GeometryLoadError,
    load_polygons,
    parse_feature_collection,
)
from supplyunit_sim.geometry.sampler import (
    DegeneratePolygonError,
    InteriorPointSampler,
    polygon_contains,
)

__all__ = [
    "GeometryLoadError",
    "load_polygons",
    "parse_feature_collection",
    "DegeneratePolygonError",
    "InteriorPointSampler",
    "polygon_contains",
]
