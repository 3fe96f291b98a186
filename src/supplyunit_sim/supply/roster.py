"""
Location Roster
===============

Loads the fixed, ordered list of supply locations.

The packaged ``data/roster.yaml`` is used unless a path is configured.
The roster is returned as a tuple and never changes after startup.
"""

import logging
from importlib import resources
from typing import List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field

from supplyunit_sim.models.reading import NamedLocation


logger = logging.getLogger(__name__)


class _RosterFile(BaseModel):
    locations: List[NamedLocation] = Field(..., min_length=1)


def load_roster(path: Optional[str] = None) -> Tuple[NamedLocation, ...]:
    """
    Load the location roster.

    Args:
        path: YAML roster file. None loads the packaged roster.

    Returns:
        Locations in file order

    Raises:
        FileNotFoundError: If ``path`` does not exist
        pydantic.ValidationError: If the roster is empty or malformed
    """
    if path is None:
        text = (
            resources.files("supplyunit_sim")
            .joinpath("data/roster.yaml")
            .read_text(encoding="utf-8")
        )
        source = "packaged roster"
    else:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        source = path

    roster = _RosterFile.model_validate(yaml.safe_load(text) or {})
    logger.info(f"Loaded {len(roster.locations)} locations from {source}")
    return tuple(roster.locations)
