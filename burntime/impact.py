"""
Burn-Time Prediction - Impact-Time Predictor

Time until a falling vessel touches the ground (or water), assuming flat
terrain and constant net downward acceleration:

    a = mu / r^2 - v_lat^2 / r          (gravity minus centripetal)
    c = v t + a t^2 / 2                 (clearance covered)
    t = (-v + sqrt(v^2 + 2 a c)) / a

The vessel's own thrust is not included. The impact speed is the dV
needed to land.
"""

import logging
import math
import time
from typing import Callable, List, Optional, Tuple

import numpy as np

from . import constants as C
from .cache import TtlCache
from .config import PredictorConfig, create_default_config
from .types import ImpactPrediction, PredictionStatus
from .vessel import FlightContext, Part, Vessel

logger = logging.getLogger(__name__)

IMPACT_LABEL = "Impact"
SPLASH_LABEL = "Splash"
TOUCHDOWN_LABEL = "Touchdown"


def choose_parts(vessel: Vessel) -> List[Part]:
    """
    Parts examined for the lowest point.

    Small vessels use every part; large ones only the lowest few part
    centres (an approximation that keeps the cost bounded).
    """
    if vessel.part_count < C.LARGE_VESSEL_PART_COUNT:
        return vessel.parts
    candidates = [p for p in vessel.parts if p.collider_enabled]
    candidates.sort(key=lambda p: float(np.linalg.norm(vessel.position + p.offset)))
    return candidates[:C.LOWEST_PART_SAMPLE]


def compute_vessel_height(vessel: Vessel) -> Tuple[float, Optional[Part]]:
    """
    Distance from the vessel reference point down to its lowest collider.

    Returns:
        (height in m, lowest part); (0.0, None) when packed or without colliders
    """
    if vessel.packed:
        return 0.0, None
    min_distance = math.inf
    lowest_part = None
    for part in choose_parts(vessel):
        if not part.collider_enabled:
            continue
        distance = float(np.linalg.norm(vessel.position + part.offset)) - part.radius
        if distance < min_distance:
            min_distance = distance
            lowest_part = part
    if lowest_part is None:
        return 0.0, None
    return vessel.radius - min_distance, lowest_part


def downward_acceleration(vessel: Vessel) -> float:
    """Net downward acceleration from gravity less centripetal (m/s^2)."""
    r = vessel.radius
    lateral = vessel.lateral_speed
    return vessel.body.gravity_at(r) - lateral * lateral / r


def time_to_impact(clearance: float, fall_speed: float, acceleration: float) -> Optional[float]:
    """
    Seconds to fall `clearance` metres, or None if the vessel never gets there.

    Args:
        clearance: Height to fall (m), positive
        fall_speed: Current downward speed (m/s), positive
        acceleration: Net downward acceleration (m/s^2), may be negative
    """
    if clearance <= 0.0 or fall_speed <= 0.0:
        return None

    if abs(acceleration) < C.IMPACT_ACCELERATION_EPSILON:
        return clearance / fall_speed

    if acceleration < 0.0:
        # Net upward: check whether the fall stops before reaching the ground
        max_fall_distance = -(fall_speed * fall_speed) / (2.0 * acceleration)
        if max_fall_distance < clearance + C.IMPACT_REVERSAL_MARGIN:
            return None

    discriminant = fall_speed * fall_speed + 2.0 * acceleration * clearance
    if discriminant < 0.0:
        return None
    return (-fall_speed + math.sqrt(discriminant)) / acceleration


def impact_speed(fall_speed: float, acceleration: float, seconds: float,
                 horizontal_speed: float) -> float:
    """Speed at contact from the final vertical and the horizontal surface speed."""
    if abs(acceleration) < C.IMPACT_ACCELERATION_EPSILON:
        vertical = fall_speed
    else:
        vertical = fall_speed + seconds * acceleration
    return math.hypot(vertical, horizontal_speed)


class ImpactPredictor:
    """
    Predicts ground or water contact for the active vessel.

    The lowest-point offset is O(parts) to compute, so it is cached for one
    update interval per vessel/part count.
    """

    def __init__(self, config: PredictorConfig = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or create_default_config()
        self._height_cache: TtlCache = TtlCache(self.config.update_interval, clock)

    def reset(self) -> None:
        self._height_cache.invalidate()

    def vessel_height(self, vessel: Vessel) -> Tuple[float, Optional[Part]]:
        key = (vessel.id, vessel.part_count, vessel.packed)
        return self._height_cache.get_or_compute(lambda: compute_vessel_height(vessel), key)

    def predict(self, context: FlightContext) -> ImpactPrediction:
        try:
            return self._predict(context)
        except Exception:
            logger.exception("Impact prediction failed")
            self.reset()
            return ImpactPrediction.failed()

    def _is_applicable(self, vessel: Optional[Vessel]) -> bool:
        if not self.config.show_impact or vessel is None:
            return False
        if self.config.impact_skip_atmospheric_bodies and vessel.body.has_atmosphere:
            return False
        if vessel.landed_or_splashed:
            return False
        if -vessel.vertical_speed < self.config.min_fall_speed:
            return False
        # Orbits that stay above the lowest warp altitude never impact
        if vessel.orbit is not None:
            if vessel.orbit.periapsis_radius > vessel.body.radius + vessel.body.safe_altitude:
                return False
        return True

    def _predict(self, context: FlightContext) -> ImpactPrediction:
        vessel = context.vessel
        if not self._is_applicable(vessel):
            if vessel is None:
                self.reset()
            return ImpactPrediction.absent()

        body = vessel.body
        fall_speed = -vessel.vertical_speed
        height, lowest_part = self.vessel_height(vessel)

        clearance = vessel.altitude - vessel.terrain_altitude - height
        label = IMPACT_LABEL
        if body.ocean and vessel.terrain_altitude < 0.0:
            clearance = vessel.altitude - height
            label = SPLASH_LABEL
        if clearance <= 0.0:
            return ImpactPrediction.absent(label)

        acceleration = downward_acceleration(vessel)
        seconds = time_to_impact(clearance, fall_speed, acceleration)
        if seconds is None or not math.isfinite(seconds):
            return ImpactPrediction.absent(label)
        if seconds > self.config.impact_max_time_until:
            return ImpactPrediction.absent(label)

        speed = impact_speed(fall_speed, acceleration, seconds, vessel.horizontal_surface_speed)
        survivable = (
            label != SPLASH_LABEL
            and lowest_part is not None
            and speed < lowest_part.crash_tolerance
        )
        if survivable:
            label = TOUCHDOWN_LABEL

        return ImpactPrediction(
            status=PredictionStatus.SUCCESS,
            time_until=seconds,
            required_dv=speed,
            label=label,
            impact_speed=speed,
            survivable=survivable,
        )
