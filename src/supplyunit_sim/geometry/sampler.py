"""
Interior Point Sampler
======================

Rejection sampler producing random points inside arbitrary polygons.

Algorithm:
    1. Compute the polygon's bounding box
    2. Draw a candidate uniformly from the box
    3. Accept it if shapely places it inside the outer ring and outside
       every hole
    4. Otherwise retry, up to ``max_attempts`` candidates

Accepted points are uniform over the bounding box conditioned on polygon
membership. Thin or sliver polygons accept rarely, so the retry count is
bounded and exhaustion raises ``DegeneratePolygonError``.

Example:
    import numpy as np
    from supplyunit_sim.geometry import InteriorPointSampler

    sampler = InteriorPointSampler(rng=np.random.default_rng(7))
    point = sampler.sample(polygon)
"""

import logging
from typing import Iterator, List, Optional

import numpy as np
import shapely

from supplyunit_sim.models.geometry import Point, Polygon


logger = logging.getLogger(__name__)


class DegeneratePolygonError(ValueError):
    """
    No interior point could be produced.

    Raised when the bounding box has no area, or when ``attempts``
    candidates were rejected in a row.
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


def polygon_contains(polygon: Polygon, point: Point) -> bool:
    """True if the point is strictly inside the outer ring and outside every hole."""
    return bool(shapely.contains_xy(polygon.shape, point.lon, point.lat))


class InteriorPointSampler:
    """
    Bounded rejection sampler for polygon interiors.

    Attributes:
        max_attempts: Maximum candidates drawn per sample
        log_every: Emit a retry diagnostic every N rejected candidates
    """

    def __init__(
        self,
        max_attempts: int = 10000,
        log_every: int = 100,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if log_every < 1:
            raise ValueError("log_every must be >= 1")

        self.max_attempts = max_attempts
        self.log_every = log_every
        self._rng = rng if rng is not None else np.random.default_rng()

    def candidates(self, polygon: Polygon) -> Iterator[Point]:
        """
        Yield an endless stream of candidates from the bounding box.

        Raises:
            DegeneratePolygonError: If the bounding box has no area
        """
        box = polygon.bounds()
        if box.is_degenerate:
            raise DegeneratePolygonError(
                f"Polygon bounding box has no area: {box}"
            )

        while True:
            dx = box.width * self._rng.random()
            dy = box.height * self._rng.random()
            yield Point(lon=box.min_lon + dx, lat=box.min_lat + dy)

    def sample(self, polygon: Polygon) -> Point:
        """
        Draw one point guaranteed to lie inside the polygon.

        Args:
            polygon: Polygon with a non-degenerate bounding box

        Returns:
            Accepted interior point

        Raises:
            DegeneratePolygonError: If the box has no area or
                ``max_attempts`` candidates were all rejected
        """
        attempts = 0
        for candidate in self.candidates(polygon):
            attempts += 1
            if polygon_contains(polygon, candidate):
                return candidate

            if attempts >= self.max_attempts:
                break
            if attempts % self.log_every == 0:
                logger.debug(f"Check start point: {attempts} candidates rejected")

        logger.warning(
            f"Gave up sampling polygon after {attempts} attempts "
            f"(bounds={polygon.bounds()})"
        )
        raise DegeneratePolygonError(
            f"No interior point found in {attempts} attempts",
            attempts=attempts,
        )

    def sample_many(self, polygon: Polygon, count: int) -> List[Point]:
        """Draw ``count`` independent interior points."""
        return [self.sample(polygon) for _ in range(count)]
