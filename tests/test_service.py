"""
Service and HTTP Surface Tests
==============================
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from supplyunit_sim.broker import RegistrationError
from supplyunit_sim.config import Settings
from supplyunit_sim.main import create_app
from supplyunit_sim.service import SimulatorService
from supplyunit_sim.supply import decode_batch


@pytest.fixture
def fast_settings():
    """Settings with short periods so loops run several times quickly."""
    return Settings.model_validate({
        "simulation": {
            "tick_interval_seconds": 0.01,
            "heartbeat_interval_seconds": 0.01,
            "seed": 3,
        },
    })


def _service(settings, node, channel):
    return SimulatorService(
        settings,
        node=node,
        channel_factory=lambda server, n: channel,
    )


class TestSimulatorService:
    """Lifecycle tests with in-memory broker fakes."""

    def test_start_publish_stop(self, fast_settings, fake_node, fake_channel):
        """Starting registers and publishes; stopping deregisters and closes."""
        service = _service(fast_settings, fake_node, fake_channel)

        async def run():
            await service.start()
            assert service.running
            await asyncio.sleep(0.1)
            await service.stop()

        asyncio.run(run())

        assert fake_channel.sent
        name, content = fake_channel.sent[0]
        assert name == "BarGraphs"
        assert len(decode_batch(content)) == 7
        assert fake_node.statuses
        assert fake_node.unregistered
        assert fake_channel.closed
        assert not service.running

    def test_registration_failure_is_fatal(self, fast_settings, fake_channel):
        """A refused registration propagates out of start()."""
        class RefusingNode:
            node_id = None
            registered = False

            async def register(self):
                raise RegistrationError("refused")

        service = _service(fast_settings, RefusingNode(), fake_channel)
        with pytest.raises(RegistrationError):
            asyncio.run(service.start())

    def test_status_snapshot(self, fast_settings, fake_node, fake_channel):
        """status() reports counters before and after starting."""
        service = _service(fast_settings, fake_node, fake_channel)
        assert service.status()["registered"] is False

        async def run():
            await service.start()
            await asyncio.sleep(0.05)
            status = service.status()
            await service.stop()
            return status

        status = asyncio.run(run())
        assert status["registered"] is True
        assert status["locations"] == 7
        assert status["agent_count"] == 11
        assert status["publisher"]["publishes_attempted"] >= 1


class TestApp:
    """Tests for the FastAPI surface."""

    def test_endpoints(self, fast_settings, fake_node, fake_channel):
        """Health, info and metrics respond while the service runs."""
        service = _service(fast_settings, fake_node, fake_channel)

        with TestClient(create_app(fast_settings, service)) as client:
            assert client.get("/health").json()["status"] == "healthy"
            assert client.get("/").json()["name"] == "SU-Sim"
            metrics = client.get("/metrics").json()
            assert metrics["registered"] is True

        assert fake_node.unregistered
