"""
SupplyUnit Simulator Application
================================

FastAPI wrapper around the SimulatorService.

The lifespan starts the service (broker registration, publish scheduler,
status heartbeat) and stops it on shutdown. A failed registration aborts
startup, which makes uvicorn exit with a non-zero status.

Endpoints:
    GET  /          - Service information
    GET  /health    - Liveness probe
    GET  /metrics   - Publisher and heartbeat counters
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from supplyunit_sim import __version__
from supplyunit_sim.config import Settings
from supplyunit_sim.service import SimulatorService


logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    service: Optional[SimulatorService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Loaded configuration
        service: Pre-built service (tests inject fakes here)
    """
    service = service or SimulatorService(settings)
    startup_time = time.time()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.start()
        try:
            yield
        finally:
            await service.stop()

    app = FastAPI(
        title="SupplyUnit Simulator",
        description="Synthetic supply-level reading publisher",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service

    @app.get("/")
    async def root() -> JSONResponse:
        """Service information endpoint."""
        return JSONResponse({
            "service": "supplyunit-sim",
            "version": __version__,
            "name": settings.node.name,
            "status": "running" if service.running else "stopped",
        })

    @app.get("/health")
    async def health() -> JSONResponse:
        """Liveness probe - always 200 while the process is up."""
        return JSONResponse({
            "status": "healthy",
            "uptime_seconds": round(time.time() - startup_time, 1),
        })

    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        """Detailed counters for observability."""
        return JSONResponse(service.status())

    return app


def run(settings: Settings) -> None:
    """Serve the application until interrupted."""
    import uvicorn

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        log_config=None,
    )
