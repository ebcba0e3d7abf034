"""
Burn-Time Prediction - Burn-Time Solver

Variable-mass burn duration from the rocket equation:
    ve        = F / mdot
    m_fuel    = m0 * (1 - exp(-dv / ve))
    t_needed  = m_fuel / mdot

When the scarcest propellant runs out first, the vessel burns for as long as
it can and the unmet dv is extrapolated at the post-burn (best) acceleration,
and the result is flagged as insufficient fuel.
"""

import logging
import math
from typing import Optional

from . import constants as C
from .propulsion import should_ignore_propellant
from .tally import Tally
from .types import BurnPrediction
from .vessel import Part

logger = logging.getLogger(__name__)


def compute_max_burn_time(available: Tally, consumed: Tally) -> float:
    """
    How long the engines can run at full throttle before something runs out.

    The scarcest consumed kind bounds the burn; a required kind with nothing
    left gives zero.
    """
    max_burn_time = math.inf
    for kind in consumed:
        if should_ignore_propellant(kind):
            continue
        rate = consumed[kind]
        if rate <= 0.0:
            continue
        if not available.has(kind):
            return 0.0
        max_burn_time = min(max_burn_time, available[kind] / rate)
    return max_burn_time


def constant_acceleration_burn_time(dv: float, mass: float, thrust: float) -> float:
    """Burn time ignoring mass loss: dv * m / F."""
    return dv * mass / thrust


def compute_burn_time(
    dv: float,
    mass: float,
    thrust: float,
    consumption: Tally,
    available: Tally,
    use_simple_acceleration: bool = False,
    infinite_propellant: bool = False,
) -> BurnPrediction:
    """
    Seconds of full-throttle burn needed for `dv`.

    Args:
        dv: Required velocity change (m/s), non-negative
        mass: Current total vessel mass (t)
        thrust: Net thrust (kN)
        consumption: Propellant consumption at full throttle (t/s per kind)
        available: Propellant available (t per kind)
        use_simple_acceleration: Force the constant-acceleration model
        infinite_propellant: Infinite-propellant cheat is on

    Returns:
        BurnPrediction; duration is inf when the vessel cannot accelerate
    """
    dv = max(0.0, float(dv))

    if thrust < C.ACCELERATION_EPSILON:
        return BurnPrediction(math.inf, False, dv)

    if infinite_propellant or use_simple_acceleration:
        return BurnPrediction(constant_acceleration_burn_time(dv, mass, thrust), False, dv)

    total_consumption = sum(rate for kind, rate in consumption.items()
                            if not should_ignore_propellant(kind))
    if total_consumption <= 0.0:
        # Engines burning only ignorable propellants never run dry
        return BurnPrediction(constant_acceleration_burn_time(dv, mass, thrust), False, dv)

    max_burn_time = compute_max_burn_time(available, consumption)

    exhaust_velocity = thrust / total_consumption
    fuel_needed = mass * -math.expm1(-dv / exhaust_velocity)
    burn_time_needed = fuel_needed / total_consumption
    if burn_time_needed <= max_burn_time:
        return BurnPrediction(burn_time_needed, False, dv)

    # Not enough propellant: burn everything, then coast the remainder at the
    # best acceleration the empty vessel could manage.
    fuel_burned = total_consumption * max_burn_time
    empty_mass = mass - fuel_burned
    if empty_mass <= 0.0:
        return BurnPrediction(math.inf, True, dv)

    achieved_dv = exhaust_velocity * math.log(mass / empty_mass)
    best_acceleration = thrust / empty_mass
    overflow_dv = max(0.0, dv - achieved_dv)
    duration = max_burn_time + overflow_dv / best_acceleration
    if not math.isfinite(duration):
        return BurnPrediction(math.inf, True, dv)
    return BurnPrediction(duration, True, dv)


def find_single_part_engine(part: Part):
    """
    Engine module and fuel of a part whose burn time can be predicted alone.

    Only locked-throttle, single-propellant engines whose propellant is stored
    non-flowably on the same part qualify (solid rocket boosters).

    Returns:
        (engine, resource) tuple, or None with the reason logged
    """
    if not part.engines:
        logger.warning(f"Part burn time unavailable for {part.name}: no engine on part")
        return None
    engine = part.engines[0]
    if not engine.throttle_locked:
        logger.warning(f"Part burn time unavailable for {part.name}: only locked-throttle engines are supported")
        return None
    if not engine.propellants or not part.resources:
        logger.warning(f"Part burn time unavailable for {part.name}: must have propellants and resources")
        return None
    if len(engine.propellants) > 1:
        logger.warning(f"Part burn time unavailable for {part.name}: multi-propellant engines are not supported")
        return None
    propellant = engine.propellants[0]
    resource = part.resource(propellant.name)
    if resource is None:
        logger.warning(f"Part burn time unavailable for {part.name}: missing {propellant.name}")
        return None
    if resource.flowable:
        logger.warning(f"Part burn time unavailable for {part.name}: {propellant.name} is flowable")
        return None
    return engine, resource


def compute_part_burn_time(part: Part) -> Optional[float]:
    """
    Full-throttle burn time of a solid-rocket style part on its own fuel.

    Returns:
        Seconds, inf if the thrust limiter is at zero, None if unsupported
    """
    found = find_single_part_engine(part)
    if found is None:
        return None
    engine, fuel = found
    if engine.thrust_percentage < C.THRUST_PERCENTAGE_EPSILON or engine.vacuum_isp <= 0.0:
        return math.inf
    fuel_rate = engine.thrust_limit / (C.G0 * engine.vacuum_isp)  # t/s
    if fuel_rate <= 0.0:
        return math.inf
    return fuel.mass / fuel_rate
