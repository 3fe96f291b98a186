"""
Boundary Loader
===============

Loads polygons from a GeoJSON FeatureCollection.

Every polygon of every ``MultiPolygon`` feature is extracted, in file order.
Feature properties are discarded and other geometry types are skipped.

Example:
    from supplyunit_sim.geometry import load_polygons

    polygons = load_polygons("startPoints.geojson")
    print(f"{len(polygons)} start polygons")
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from supplyunit_sim.models.geometry import Polygon


logger = logging.getLogger(__name__)


class GeometryLoadError(Exception):
    """Boundary file could not be read or parsed."""


class _Geometry(BaseModel):
    type: str
    coordinates: Any = None


class _Feature(BaseModel):
    type: str = "Feature"
    geometry: Optional[_Geometry] = None
    properties: Optional[Dict[str, Any]] = None


class _FeatureCollection(BaseModel):
    type: str = Field(..., pattern="^FeatureCollection$")
    features: List[_Feature] = Field(default_factory=list)


def load_polygons(path: str) -> List[Polygon]:
    """
    Load all MultiPolygon members from a GeoJSON file.

    Args:
        path: Path to the GeoJSON FeatureCollection

    Returns:
        Polygons in file order

    Raises:
        GeometryLoadError: If the file is missing, not JSON, or not a
            valid FeatureCollection
    """
    file_path = Path(path)
    logger.info(f"Loading boundary geometry from: {path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise GeometryLoadError(f"Can't read file {path}: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise GeometryLoadError(f"Invalid JSON in {path}: {e}") from e

    return parse_feature_collection(data)


def parse_feature_collection(data: Dict[str, Any]) -> List[Polygon]:
    """Extract MultiPolygon members from an already-decoded document."""
    try:
        collection = _FeatureCollection.model_validate(data)
    except ValidationError as e:
        raise GeometryLoadError(f"Not a GeoJSON FeatureCollection: {e}") from e

    logger.info(f"Features: {len(collection.features)}")

    polygons: List[Polygon] = []
    for i, feature in enumerate(collection.features):
        geom = feature.geometry
        if geom is None or geom.type != "MultiPolygon":
            logger.debug(
                f"Skipping feature {i}: geometry "
                f"{geom.type if geom else None}"
            )
            continue

        try:
            members = [Polygon(rings=rings) for rings in geom.coordinates or []]
        except (ValidationError, TypeError) as e:
            raise GeometryLoadError(f"Invalid MultiPolygon in feature {i}: {e}") from e

        logger.debug(f"MultiPolygon {i}: {len(members)} polygons")
        polygons.extend(members)

    return polygons
