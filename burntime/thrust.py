"""
Burn-Time Prediction - Thrust & Consumption Aggregator

Adds up the thrust of every active engine on the vessel as 3D vectors (the
engines need not be parallel) and tallies how fast each propellant kind is
consumed at full throttle.

Mass flow per engine:
    mdot = F / (g0 * Isp_vac)     [kN / (m/s^2 * s) = t/s]
split across the non-ignorable propellants by mixture ratio.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from . import constants as C
from .propulsion import should_ignore_propellant
from .tally import Tally
from .vessel import EngineModule

logger = logging.getLogger(__name__)


@dataclass
class ThrustInfo:
    """Aggregated propulsive capability for one tick."""
    thrust: float = 0.0                                 # kN, magnitude of the vector sum
    consumption: Tally = field(default_factory=Tally)   # t/s per propellant kind
    engine_count: int = 0

    @property
    def can_accelerate(self) -> bool:
        return self.thrust >= C.ACCELERATION_EPSILON


def engine_mass_flow(engine: EngineModule, thrust: float) -> float:
    """Total propellant mass flow of an engine at `thrust` kN (t/s)."""
    if engine.vacuum_isp <= 0.0:
        return 0.0
    return thrust / (C.G0 * engine.vacuum_isp)


def split_consumption(engine: EngineModule, thrust: float, available: Tally):
    """
    Per-propellant consumption of one engine.

    Returns:
        Tally of t/s per kind, or None if the engine is starved of a
        non-ignorable propellant it needs.
    """
    ratio_sum = 0.0
    for propellant in engine.propellants:
        if should_ignore_propellant(propellant.name):
            continue
        if not available.has(propellant.name):
            return None
        ratio_sum += propellant.ratio

    consumed = Tally()
    if ratio_sum > 0.0:
        total_flow = engine_mass_flow(engine, thrust)
        for propellant in engine.propellants:
            if should_ignore_propellant(propellant.name):
                continue
            consumed.add(propellant.name, total_flow * propellant.ratio / ratio_sum)
    return consumed


class ThrustAggregator:
    """Sums thrust vectors and consumption; logs when the active engine count changes."""

    def __init__(self):
        self.last_engine_count = -1

    def aggregate(self, engines: Iterable[EngineModule], available: Tally,
                  infinite_propellant: bool = False) -> ThrustInfo:
        thrust_vector = np.zeros(3)
        consumption = Tally()
        engine_count = 0

        for engine in engines:
            if engine.thrust_percentage <= 0.0:
                continue
            thrust = engine.thrust_limit
            if thrust <= 0.0:
                continue
            if not infinite_propellant:
                consumed = split_consumption(engine, thrust, available)
                if consumed is None:
                    continue
                for kind, rate in consumed.items():
                    consumption.add(kind, rate)
            engine_count += 1
            thrust_vector += engine.forward * thrust

        if engine_count != self.last_engine_count:
            self.last_engine_count = engine_count
            logger.info(f"Active engines: {engine_count}")

        return ThrustInfo(
            thrust=float(np.linalg.norm(thrust_vector)),
            consumption=consumption,
            engine_count=engine_count,
        )
