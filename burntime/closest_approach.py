"""
Burn-Time Prediction - Closest-Approach Predictor

Finds when the active vessel passes closest to its target by a bracketed
sampled search: drop a fixed number of sample times across one orbit of the
vessel, keep the closest, narrow the window to one sample width either side
of it and repeat a fixed number of times. The cost is bounded; a sharper
unsampled minimum on a very eccentric orbit can be missed.

The relative velocity at closest approach is the dV needed to match the
target there.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from . import constants as C
from .cache import TtlCache
from .config import PredictorConfig, create_default_config
from .orbit import Orbit
from .types import ApproachPrediction, PredictionStatus
from .vessel import FlightContext, Vessel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClosestApproach:
    """Result of one search."""
    ut: float                  # universal time of closest approach (s)
    distance: float            # separation then (m)
    relative_speed: float      # |v_vessel - v_target| then (m/s)


def tracking_interval(orbit: Orbit) -> float:
    """
    Search window length (s).

    One period for a closed orbit; for an open orbit, a fixed number of
    radians of mean anomaly.
    """
    if orbit.is_closed:
        return orbit.period
    return C.HYPERBOLIC_MEAN_MOTION_UNITS / orbit.mean_motion


def separation_at(source: Orbit, target: Orbit, ut: float) -> float:
    return float(np.linalg.norm(source.position_at(ut) - target.position_at(ut)))


def relative_speed_at(source: Orbit, target: Orbit, ut: float) -> float:
    return float(np.linalg.norm(source.velocity_at(ut) - target.velocity_at(ut)))


def find_closest_approach(
    source: Orbit,
    target: Orbit,
    ut: float,
    divisions: int = C.CLOSEST_APPROACH_DIVISIONS,
    iterations: int = C.CLOSEST_APPROACH_ITERATIONS,
) -> Tuple[float, float]:
    """
    Sampled search for the time of minimum separation after `ut`.

    Returns:
        (approach_ut, distance)
    """
    interval = tracking_interval(source)
    window_end = ut + interval
    start, end = ut, window_end

    best_time = ut
    best_distance = np.inf

    for _ in range(iterations):
        segment = (end - start) / divisions
        for index in range(divisions):
            sample_time = start + index * segment
            distance = separation_at(source, target, sample_time)
            if distance < best_distance:
                best_distance = distance
                best_time = sample_time
        start = float(np.clip(best_time - segment, ut, window_end))
        end = float(np.clip(best_time + segment, ut, window_end))

    return best_time, float(best_distance)


def is_too_close(vessel: Vessel, target: Vessel, min_target_distance: float) -> bool:
    """
    True when the target is so near, and so slow relative to us, that an
    approach prediction would be noise.
    """
    distance = float(np.linalg.norm(vessel.position - target.position))
    if distance >= 2.0 * min_target_distance:
        return False
    relative_speed = float(np.linalg.norm(vessel.velocity - target.velocity))
    if relative_speed < C.CLOSE_TARGET_MIN_SPEED:
        return True
    return distance < min_target_distance and relative_speed < C.VERY_CLOSE_TARGET_MIN_SPEED


def approach_label(distance: float) -> str:
    return f"Target@{distance / 1000.0:.1f}km"


class ClosestApproachPredictor:
    """
    Tracks the closest approach to the context's target.

    The search result (an absolute UT) is cached for one update interval per
    vessel/target pair; time-until is always taken against the current UT.
    """

    def __init__(self, config: PredictorConfig = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or create_default_config()
        self._cache: TtlCache = TtlCache(self.config.update_interval, clock)
        self._target_id: Optional[str] = None

    def reset(self) -> None:
        self._cache.invalidate()

    def predict(self, context: FlightContext) -> ApproachPrediction:
        try:
            return self._predict(context)
        except Exception:
            logger.exception("Closest-approach prediction failed")
            self.reset()
            return ApproachPrediction.failed()

    def _track_target(self, target: Optional[Vessel]) -> None:
        target_id = None if target is None else target.id
        if target_id != self._target_id:
            self._target_id = target_id
            self.reset()
            if target_id is None:
                logger.info("Closest-approach target cleared")
            else:
                logger.info(f"Closest-approach target: {target_id}")

    def _target_of(self, context: FlightContext) -> Optional[Vessel]:
        vessel, target = context.vessel, context.target
        if vessel is None or target is None:
            return None
        if vessel.landed or target.landed:
            return None
        if vessel.orbit is None or target.orbit is None:
            return None
        if target.body.name != vessel.body.name:
            return None
        return target

    def _predict(self, context: FlightContext) -> ApproachPrediction:
        if not self.config.show_closest_approach:
            return ApproachPrediction.absent()

        target = self._target_of(context)
        self._track_target(target)
        if target is None:
            return ApproachPrediction.absent()

        vessel = context.vessel
        if is_too_close(vessel, target, self.config.closest_approach_min_target_distance):
            self.reset()
            return ApproachPrediction.absent()

        def search() -> ClosestApproach:
            approach_ut, distance = find_closest_approach(vessel.orbit, target.orbit, context.ut)
            speed = relative_speed_at(vessel.orbit, target.orbit, approach_ut)
            logger.debug(f"Closest approach to {target.id}: {distance:.1f} m "
                         f"at UT {approach_ut:.1f}, dv {speed:.2f} m/s")
            return ClosestApproach(approach_ut, distance, speed)

        approach = self._cache.get_or_compute(search, (vessel.id, target.id))

        time_until = max(0.0, approach.ut - context.ut)
        within_range = (
            approach.distance < self.config.closest_approach_max_distance_km * 1000.0
            and time_until < self.config.closest_approach_max_time_until_encounter
        )
        return ApproachPrediction(
            status=PredictionStatus.SUCCESS,
            time_until=time_until,
            required_dv=approach.relative_speed if within_range else None,
            label=approach_label(approach.distance),
            distance=approach.distance,
        )
