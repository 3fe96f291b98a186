"""
Supply Module
=============

Roster loading, synthetic reading generation and wire encoding.

Example:
    from supplyunit_sim.supply import SupplyReadingGenerator, encode_batch, load_roster

    roster = load_roster()
    batch = SupplyReadingGenerator().generate_batch(roster, int(time.time()))
    payload = encode_batch(batch)
"""

from supplyunit_sim.supply.codec import PayloadDecodeError, decode_batch, encode_batch
from supplyunit_sim.supply.generator import CATEGORIES, SupplyReadingGenerator
from supplyunit_sim.supply.roster import load_roster

__all__ = [
    "CATEGORIES",
    "SupplyReadingGenerator",
    "load_roster",
    "encode_batch",
    "decode_batch",
    "PayloadDecodeError",
]
