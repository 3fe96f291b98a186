"""
Interior Point Sampler Tests
============================

Containment, bounding-box and bounded-retry behaviour of the sampler.
"""

import itertools
import logging

import numpy as np
import pytest

from supplyunit_sim.geometry import (
    DegeneratePolygonError,
    InteriorPointSampler,
    polygon_contains,
)
from supplyunit_sim.models.geometry import Point, Polygon


class TestContainment:
    """Tests for the point-in-polygon predicate."""

    def test_square_interior_and_exterior(self, square):
        """Points inside the square are accepted, outside rejected."""
        assert polygon_contains(square, Point(0.5, 0.5))
        assert polygon_contains(square, Point(0.01, 0.99))
        assert not polygon_contains(square, Point(1.5, 0.5))
        assert not polygon_contains(square, Point(-0.1, 0.5))
        assert not polygon_contains(square, Point(0.5, 1.2))

    def test_closing_vertex_is_optional(self):
        """Open and closed rings give the same answer."""
        open_ring = Polygon(rings=[[(0, 0), (2, 0), (2, 2), (0, 2)]])
        closed_ring = Polygon(rings=[[(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]])
        assert polygon_contains(open_ring, Point(1.0, 1.0))
        assert polygon_contains(closed_ring, Point(1.0, 1.0))
        assert not polygon_contains(open_ring, Point(3.0, 1.0))

    def test_shape_carries_holes(self, square_with_hole):
        """The shapely polygon keeps every hole and the outer extent."""
        shape = square_with_hole.shape
        assert len(shape.interiors) == 1
        assert shape.area == pytest.approx(12.0)
        assert shape.bounds == (0.0, 0.0, 4.0, 4.0)

    def test_bounds_from_outer_ring(self, square_with_hole):
        """The bounding box spans the outer ring."""
        box = square_with_hole.bounds()
        assert (box.min_lon, box.min_lat, box.max_lon, box.max_lat) == (0, 0, 4, 4)
        assert not box.is_degenerate

    def test_hole_is_excluded(self, square_with_hole):
        """Points inside a hole are not contained."""
        assert polygon_contains(square_with_hole, Point(0.5, 0.5))
        assert not polygon_contains(square_with_hole, Point(2.0, 2.0))

    def test_concave_polygon(self):
        """The notch of a U shape is outside."""
        u_shape = Polygon(rings=[[
            (0, 0), (3, 0), (3, 3), (2, 3), (2, 1), (1, 1), (1, 3), (0, 3),
        ]])
        assert polygon_contains(u_shape, Point(0.5, 2.5))
        assert polygon_contains(u_shape, Point(2.5, 2.5))
        assert not polygon_contains(u_shape, Point(1.5, 2.0))


class TestSampler:
    """Tests for InteriorPointSampler."""

    def test_samples_are_contained(self, triangle, rng):
        """Every returned point satisfies the membership predicate."""
        sampler = InteriorPointSampler(rng=rng)
        for point in sampler.sample_many(triangle, 200):
            assert polygon_contains(triangle, point)

    def test_samples_avoid_holes(self, square_with_hole, rng):
        """No sample lands in the hole."""
        sampler = InteriorPointSampler(rng=rng)
        for point in sampler.sample_many(square_with_hole, 200):
            assert not (1 < point.lon < 3 and 1 < point.lat < 3)

    def test_candidates_stay_in_bounding_box(self, square_with_hole, rng):
        """Every candidate, accepted or not, lies in the bounding box."""
        sampler = InteriorPointSampler(rng=rng)
        box = square_with_hole.bounds()
        for candidate in itertools.islice(sampler.candidates(square_with_hole), 1000):
            assert box.contains(candidate)
            assert candidate.lon < box.max_lon
            assert candidate.lat < box.max_lat

    def test_acceptance_rate_tracks_area_fraction(self, triangle, rng):
        """The triangle fills half its box, so about half the candidates pass."""
        sampler = InteriorPointSampler(rng=rng)
        candidates = list(itertools.islice(sampler.candidates(triangle), 4000))
        accepted = sum(polygon_contains(triangle, c) for c in candidates)
        assert 0.45 < accepted / len(candidates) < 0.55

    def test_terminates_within_bound(self, triangle, rng):
        """A half-filling polygon succeeds well within a small bound."""
        sampler = InteriorPointSampler(max_attempts=64, rng=rng)
        for _ in range(100):
            sampler.sample(triangle)

    def test_sliver_exhausts_attempts(self, sliver, rng):
        """A near-zero-area polygon raises instead of spinning."""
        sampler = InteriorPointSampler(max_attempts=500, rng=rng)
        with pytest.raises(DegeneratePolygonError) as exc_info:
            sampler.sample(sliver)
        assert exc_info.value.attempts == 500

    def test_zero_area_box_rejected_immediately(self, rng):
        """Collinear vertices give a flat box."""
        flat = Polygon(rings=[[(0, 0), (1, 0), (2, 0)]])
        sampler = InteriorPointSampler(rng=rng)
        with pytest.raises(DegeneratePolygonError):
            sampler.sample(flat)

    def test_retry_logging_is_throttled(self, sliver, rng, caplog):
        """Retry diagnostics appear once per log_every attempts."""
        sampler = InteriorPointSampler(max_attempts=1000, log_every=100, rng=rng)
        with caplog.at_level(logging.DEBUG, logger="supplyunit_sim.geometry.sampler"):
            with pytest.raises(DegeneratePolygonError):
                sampler.sample(sliver)

        retries = [r for r in caplog.records if "candidates rejected" in r.getMessage()]
        assert len(retries) == 9

    def test_seeded_sampling_is_reproducible(self, square):
        """Same seed, same points."""
        a = InteriorPointSampler(rng=np.random.default_rng(5)).sample_many(square, 5)
        b = InteriorPointSampler(rng=np.random.default_rng(5)).sample_many(square, 5)
        assert a == b

    def test_invalid_bounds(self):
        """Non-positive limits are rejected."""
        with pytest.raises(ValueError):
            InteriorPointSampler(max_attempts=0)
        with pytest.raises(ValueError):
            InteriorPointSampler(log_every=0)
