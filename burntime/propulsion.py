"""
Burn-Time Prediction - Propulsion Inventory

Keeps track of which parts on the active vessel carry engines and which carry
massive resources. The part scan is O(parts), so it only runs when the vessel
identity, its part list or its part count changes.
"""

import logging
from typing import List, Optional

from . import constants as C
from .vessel import Part, Vessel

logger = logging.getLogger(__name__)


def should_ignore_propellant(kind: str) -> bool:
    """True for propellant kinds treated as massless and inexhaustible."""
    return kind in C.IGNORABLE_PROPELLANTS


def has_engines(part: Part) -> bool:
    return len(part.engines) > 0


def has_massive_resources(part: Part) -> bool:
    """True if the part holds any resource of nonzero density."""
    return any(res.density > 0.0 for res in part.resources)


class PropulsionInventory:
    """Engine-bearing and tank-bearing parts of the current vessel."""

    def __init__(self):
        self.engines: List[Part] = []
        self.tanks: List[Part] = []
        self._vessel_id: Optional[str] = None
        self._part_count = -1
        self._parts: Optional[List[Part]] = None

    def needs_refresh(self, vessel: Vessel) -> bool:
        return (
            vessel.id != self._vessel_id
            or vessel.parts is not self._parts
            or vessel.part_count != self._part_count
        )

    def update(self, vessel: Optional[Vessel]) -> bool:
        """
        Rescan `vessel` if it changed structurally since the last scan.

        Returns:
            True if a rescan happened.
        """
        if vessel is None or not self.needs_refresh(vessel):
            return False
        self._vessel_id = vessel.id
        self._part_count = vessel.part_count
        self._parts = vessel.parts
        self.engines = [p for p in vessel.parts if has_engines(p)]
        self.tanks = [p for p in vessel.parts if has_massive_resources(p)]
        logger.debug(f"Propulsion inventory for {vessel.id}: "
                     f"{len(self.engines)} engine parts, {len(self.tanks)} tank parts")
        return True
