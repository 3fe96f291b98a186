"""
Test Configuration
==================

Pytest fixtures and in-memory broker fakes for the supply-unit simulator.
"""

import numpy as np
import pytest

from supplyunit_sim.broker import ChannelError
from supplyunit_sim.models.geometry import Polygon
from supplyunit_sim.models.reading import NamedLocation


class FakeChannel:
    """Supply channel that records payloads and can fail on demand."""

    def __init__(self, fail_calls=()):
        self.fail_calls = set(fail_calls)
        self.calls = 0
        self.sent = []
        self.closed = False

    async def notify_supply(self, name, content):
        call = self.calls
        self.calls += 1
        if call in self.fail_calls:
            raise ChannelError("connection not established")
        self.sent.append((name, content))

    async def close(self):
        self.closed = True


class FakeNode:
    """Node client that never touches the network."""

    def __init__(self, fail_status=False):
        self.node_id = None
        self.server_address = None
        self.fail_status = fail_status
        self.statuses = []
        self.unregistered = False
        self.closed = False

    @property
    def registered(self):
        return self.node_id is not None

    async def register(self):
        self.node_id = 7
        self.server_address = "127.0.0.1:10000"
        return self.server_address

    async def set_status(self, status, arg):
        if self.fail_status:
            raise ChannelError("node connection lost")
        self.statuses.append((status, arg))

    async def unregister(self):
        self.unregistered = True
        self.node_id = None

    async def close(self):
        self.closed = True


@pytest.fixture
def rng():
    """Seeded random source for reproducible tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def square():
    """Unit square with an explicit closing vertex."""
    return Polygon(rings=[[(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]])


@pytest.fixture
def square_with_hole():
    """4x4 square with a 2x2 hole in the middle."""
    return Polygon(rings=[
        [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)],
        [(1, 1), (3, 1), (3, 3), (1, 3), (1, 1)],
    ])


@pytest.fixture
def triangle():
    """Right triangle covering half of its bounding box."""
    return Polygon(rings=[[(0, 0), (2, 0), (0, 2)]])


@pytest.fixture
def sliver():
    """Diagonal sliver whose area is a vanishing fraction of its box."""
    return Polygon(rings=[[(0, 0), (1000, 1000), (1000, 1000.000001), (0, 0.000001)]])


@pytest.fixture
def roster():
    """Three-location roster."""
    return (
        NamedLocation(longitude=136.881161, latitude=35.168587, label="Station"),
        NamedLocation(longitude=136.898981, latitude=35.187595, label="Castle"),
        NamedLocation(longitude=136.970909, latitude=35.154811, label="University"),
    )


@pytest.fixture
def fake_channel():
    return FakeChannel()


@pytest.fixture
def fake_node():
    return FakeNode()


@pytest.fixture
def sample_feature_collection():
    """GeoJSON document with two MultiPolygon features and a Point."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": "a"},
                "geometry": {
                    "type": "MultiPolygon",
                    "coordinates": [
                        [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
                        [[[2, 2], [3, 2], [3, 3], [2, 3], [2, 2]]],
                    ],
                },
            },
            {
                "type": "Feature",
                "properties": {},
                "geometry": {"type": "Point", "coordinates": [5, 5]},
            },
            {
                "type": "Feature",
                "properties": None,
                "geometry": {
                    "type": "MultiPolygon",
                    "coordinates": [
                        [
                            [[0, 0, 10], [4, 0, 10], [4, 4, 10], [0, 4, 10], [0, 0, 10]],
                            [[1, 1], [3, 1], [3, 3], [1, 3], [1, 1]],
                        ],
                    ],
                },
            },
        ],
    }


@pytest.fixture
def make_channel():
    """Factory for supply channels failing on the given call indices."""
    return FakeChannel


@pytest.fixture
def make_node():
    """Factory for node clients."""
    return FakeNode
