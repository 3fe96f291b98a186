"""
SupplyUnit Simulator
====================

Synthetic supply-level reading publisher.

This package periodically fabricates food/water/blanket readings for a
fixed roster of named locations and publishes them to a coordination
broker as BarGraphs protobuf payloads. It also samples random interior
points of polygons read from GeoJSON boundary files.

Components:
    - geometry: GeoJSON loading and bounded rejection sampling
    - supply: Roster, reading generator and wire codec
    - scheduler: Ticker, publish scheduler and status heartbeat
    - broker: WebSocket clients for registration and publishing
    - service: Lifecycle wiring of the above

Example:
    from supplyunit_sim.config import load_config
    from supplyunit_sim.main import run

    run(load_config())
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
