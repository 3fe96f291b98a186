"""
SupplyUnit Simulator Configuration
==================================

This module handles configuration loading for the supply-unit simulator.

Configuration Sources (in order of precedence):
    1. Command-line flags (applied by the CLI via ``apply_overrides``)
    2. Environment variables
    3. config.yaml file
    4. Default values (lowest priority)

Environment Variable Mapping:
    SUPPLYUNIT_NODESRV        -> node.server
    SUPPLYUNIT_PORT           -> server.port
    PORT                      -> server.port (container platforms)
    SUPPLYUNIT_NUM            -> simulation.agent_count
    SUPPLYUNIT_TICK_INTERVAL  -> simulation.tick_interval_seconds
    SUPPLYUNIT_SEED           -> simulation.seed
    SUPPLYUNIT_ROSTER_PATH    -> roster.path
    SUPPLYUNIT_GEOMETRY_PATH  -> geometry.start_points_path
    SUPPLYUNIT_LOG_LEVEL      -> logging.level

Example:
    from supplyunit_sim.config import load_config, setup_logging

    settings = load_config("config.yaml")
    setup_logging(settings)
    print(settings.node.server)
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class NodeConfig(BaseModel):
    """Broker registration configuration."""

    name: str = Field(default="SU-Sim", description="Node name announced to the broker")
    server: str = Field(
        default="127.0.0.1:9990",
        description="Address (host:port) of the node ID server",
    )
    status_label: str = Field(default="PC-Sim", description="Heartbeat status label")
    status_code: int = Field(default=0, description="Heartbeat status code")
    connect_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for broker connections and replies",
    )


class ServerConfig(BaseModel):
    """Health endpoint server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=1070, ge=1, le=65535, description="Listening port")


class SimulationConfig(BaseModel):
    """Publish loop and heartbeat timing."""

    agent_count: int = Field(
        default=11,
        ge=0,
        description="Number of agents (informational only)",
    )
    tick_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Period of the publish ticker",
    )
    publish_every: int = Field(
        default=1,
        ge=1,
        description="Publish on ticks where tick % publish_every == 0",
    )
    heartbeat_interval_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Period of the status heartbeat",
    )
    payload_name: str = Field(
        default="BarGraphs",
        description="Name attached to each published payload",
    )
    seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Random seed (None = OS entropy)",
    )


class SamplerConfig(BaseModel):
    """Interior point sampler bounds."""

    max_attempts: int = Field(
        default=10000,
        ge=1,
        description="Maximum rejected candidates before giving up",
    )
    log_every: int = Field(
        default=100,
        ge=1,
        description="Emit a retry diagnostic every N attempts",
    )


class GeometryConfig(BaseModel):
    """Boundary geometry configuration."""

    start_points_path: str = Field(
        default="startPoints.geojson",
        description="GeoJSON file with start polygons",
    )


class RosterConfig(BaseModel):
    """Location roster configuration."""

    path: Optional[str] = Field(
        default=None,
        description="YAML roster file (None = packaged roster)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the supply-unit simulator.

    Built once at startup and passed explicitly to every component.
    """

    node: NodeConfig = Field(default_factory=NodeConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    roster: RosterConfig = Field(default_factory=RosterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """
    Load configuration from YAML file, environment variables and overrides.

    Args:
        config_path: Path to config.yaml. If None, searches the working directory.
        overrides: Dotted-key overrides applied last (e.g. {"node.server": "..."}).

    Returns:
        Settings: Loaded configuration

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        pydantic.ValidationError: If the merged configuration is invalid
    """
    if config_path is not None and not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path is None:
        for path in (Path("config.yaml"), Path("config.yml")):
            if path.exists():
                config_path = str(path)
                break

    config_data: Dict[str, Any] = {}
    if config_path:
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)
    if overrides:
        apply_overrides(config_data, overrides)

    return Settings.model_validate(config_data)


def apply_overrides(config_data: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    """Apply dotted-key overrides, skipping None values."""
    for dotted, value in overrides.items():
        if value is None:
            continue
        section, _, key = dotted.partition(".")
        config_data.setdefault(section, {})[key] = value


def _apply_env_overrides(config_data: Dict[str, Any]) -> None:
    """Apply environment variable overrides to config data."""

    if env_srv := os.environ.get("SUPPLYUNIT_NODESRV"):
        config_data.setdefault("node", {})["server"] = env_srv

    # Platform PORT wins over the simulator-specific variable
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = env_port
    elif env_port := os.environ.get("SUPPLYUNIT_PORT"):
        config_data.setdefault("server", {})["port"] = env_port

    if env_num := os.environ.get("SUPPLYUNIT_NUM"):
        config_data.setdefault("simulation", {})["agent_count"] = env_num
    if env_tick := os.environ.get("SUPPLYUNIT_TICK_INTERVAL"):
        config_data.setdefault("simulation", {})["tick_interval_seconds"] = env_tick
    if env_seed := os.environ.get("SUPPLYUNIT_SEED"):
        config_data.setdefault("simulation", {})["seed"] = env_seed

    if env_roster := os.environ.get("SUPPLYUNIT_ROSTER_PATH"):
        config_data.setdefault("roster", {})["path"] = env_roster
    if env_geom := os.environ.get("SUPPLYUNIT_GEOMETRY_PATH"):
        config_data.setdefault("geometry", {})["start_points_path"] = env_geom

    if env_log := os.environ.get("SUPPLYUNIT_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=True,
    )
