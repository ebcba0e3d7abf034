"""
Burn-Time Prediction - Vehicle State Snapshot

Holds state information about the vessel that is O(parts) to collate: total
mass, the engines that are currently able to fire, and the propellant mass
available per kind. A cached copy is kept and refreshed on a fixed interval,
or immediately when the vessel identity, its part list or its part count
changes.

Anything that must be responsive every frame does not belong here.
"""

import logging
import time
from typing import Callable, List, Optional

from . import constants as C
from .propulsion import PropulsionInventory, should_ignore_propellant
from .tally import Tally
from .vessel import EngineModule, Part, Vessel

logger = logging.getLogger(__name__)


def is_engine_active(engine: EngineModule, infinite_propellant: bool = False) -> bool:
    """
    True if the engine is operational and, unless propellant is infinite,
    not starved of any propellant that matters.
    """
    if not engine.is_operational:
        return False
    if infinite_propellant:
        return True
    for propellant in engine.propellants:
        if propellant.ignore_for_isp or should_ignore_propellant(propellant.name):
            continue
        if propellant.is_deprived:
            return False
    return True


class VehicleState:
    """
    Cached snapshot of the vessel's mass, active engines and available propellant.

    Args:
        inventory: Propulsion inventory to draw engine/tank parts from
        update_interval: Seconds between periodic refreshes
        clock: Monotonic clock in seconds (injectable for tests)
    """

    def __init__(self, inventory: PropulsionInventory = None,
                 update_interval: float = C.UPDATE_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        self.inventory = inventory or PropulsionInventory()
        self.update_interval = update_interval
        self._clock = clock
        self._last_update: Optional[float] = None
        self._vessel_id: Optional[str] = None
        self._part_count = 0
        self._parts: Optional[List[Part]] = None
        self.total_mass = 0.0
        self.active_engines: List[EngineModule] = []
        self.available_resources = Tally()
        self.refresh_count = 0

    def invalidate(self) -> None:
        """Force a refresh on the next call."""
        self._last_update = None

    def needs_update(self, vessel: Optional[Vessel]) -> bool:
        if self._last_update is None:
            return vessel is not None
        if self._clock() - self._last_update >= self.update_interval:
            return True
        if vessel is None:
            return False
        return (
            vessel.id != self._vessel_id
            or vessel.parts is not self._parts
            or vessel.part_count != self._part_count
        )

    def refresh(self, vessel: Optional[Vessel], infinite_propellant: bool = False) -> bool:
        """
        Refresh the snapshot if the refresh policy calls for it.

        Returns:
            True if the snapshot was recomputed.
        """
        if not self.needs_update(vessel):
            return False
        self._last_update = self._clock()
        if vessel is None:
            return False

        self._vessel_id = vessel.id
        self._part_count = vessel.part_count
        self._parts = vessel.parts
        self.inventory.update(vessel)
        self.total_mass = vessel.total_mass

        active = []
        for part in self.inventory.engines:
            for engine in part.engines:
                if is_engine_active(engine, infinite_propellant):
                    active.append(engine)
        self.active_engines = active

        available = Tally()
        for part in self.inventory.tanks:
            for resource in part.resources:
                if resource.density <= 0.0 or not resource.flow_state:
                    continue
                if should_ignore_propellant(resource.name):
                    continue
                available.add(resource.name, resource.mass)
        self.available_resources = available

        self.refresh_count += 1
        logger.debug(f"Vehicle state refreshed: m={self.total_mass:.3f}t, "
                     f"{len(active)} active engines, resources={available}")
        return True
