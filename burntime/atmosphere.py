"""
Burn-Time Prediction - Atmosphere-Transition Predictor

Time until the vessel crosses the top of the atmosphere: exiting if it is
currently inside, re-entering if it is outside on an orbit that dips in.
Drag is ignored; the crossing is found on the Keplerian orbit by coarse
fixed steps followed by a fixed number of bisection rounds.
"""

import logging
import math
import time
from typing import Callable, Optional

from . import constants as C
from .cache import TtlCache
from .config import PredictorConfig, create_default_config
from .orbit import Orbit
from .types import EventPrediction, PredictionStatus
from .vessel import FlightContext, Vessel

logger = logging.getLogger(__name__)

EXIT_LABEL = "Exit atm"
ENTRY_LABEL = "Reentry"


def time_at_radius(
    orbit: Orbit,
    ut: float,
    target_radius: float,
    surface_radius: float,
    max_time_until: float,
    step: float = C.ATMOSPHERE_STEP,
    rounds: int = C.ATMOSPHERE_BISECTION_ROUNDS,
) -> float:
    """
    Universal time at which the orbit first crosses `target_radius`.

    Returns:
        UT of the crossing, or inf if the orbit hits the surface first or the
        crossing lies beyond the look-ahead window
    """
    time_limit = ut + max_time_until
    last_time = ut
    last_radius = orbit.radius_at(ut)
    initial_side = math.copysign(1.0, last_radius - target_radius)

    while True:
        current_time = last_time + step
        current_radius = orbit.radius_at(current_time)
        if current_radius < surface_radius:
            return math.inf  # lithobraking
        if math.copysign(1.0, current_radius - target_radius) != initial_side:
            break
        if current_time > time_limit:
            return math.inf
        last_time, last_radius = current_time, current_radius

    last_delta = abs(last_radius - target_radius)
    current_delta = abs(current_radius - target_radius)
    for _ in range(rounds):
        middle_time = 0.5 * (last_time + current_time)
        middle_delta = abs(orbit.radius_at(middle_time) - target_radius)
        # Replace whichever endpoint is further from the boundary
        if last_delta < current_delta:
            current_time, current_delta = middle_time, middle_delta
        else:
            last_time, last_delta = middle_time, middle_delta

    return current_time


class AtmospherePredictor:
    """Predicts atmosphere exit or re-entry for the active vessel."""

    def __init__(self, config: PredictorConfig = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or create_default_config()
        self._cache: TtlCache = TtlCache(self.config.update_interval, clock)

    def reset(self) -> None:
        self._cache.invalidate()

    def predict(self, context: FlightContext) -> EventPrediction:
        try:
            return self._predict(context)
        except Exception:
            logger.exception("Atmosphere-transition prediction failed")
            self.reset()
            return EventPrediction.failed()

    def exit_time(self, vessel: Vessel, ut: float) -> Optional[float]:
        """UT of atmosphere exit, or None if the vessel stays inside."""
        orbit = vessel.orbit
        body = vessel.body
        apoapsis_altitude = orbit.apoapsis_radius - body.radius if orbit.is_closed else math.inf
        if apoapsis_altitude < body.atmosphere_depth:
            return None
        if vessel.vertical_speed < 0.0 and orbit.periapsis_radius - body.radius <= 0.0:
            return None
        max_time = self.config.atmosphere_max_time_until_exit
        crossing = time_at_radius(orbit, ut, body.radius + body.atmosphere_depth, body.radius, max_time)
        return crossing if crossing < ut + max_time else None

    def entry_time(self, vessel: Vessel, ut: float) -> Optional[float]:
        """UT of atmosphere entry, or None if the orbit never dips in."""
        orbit = vessel.orbit
        body = vessel.body
        if orbit.periapsis_radius - body.radius > body.atmosphere_depth:
            return None
        if not orbit.is_closed and vessel.vertical_speed > 0.0:
            return None
        max_time = self.config.atmosphere_max_time_until_entry
        crossing = time_at_radius(orbit, ut, body.radius + body.atmosphere_depth, body.radius, max_time)
        return crossing if crossing < ut + max_time else None

    def _predict(self, context: FlightContext) -> EventPrediction:
        vessel = context.vessel
        if not self.config.show_atmosphere or vessel is None:
            self.reset()
            return EventPrediction.absent()
        if not vessel.body.has_atmosphere or vessel.landed_or_splashed or vessel.orbit is None:
            return EventPrediction.absent()

        inside = vessel.in_atmosphere
        label = EXIT_LABEL if inside else ENTRY_LABEL

        def search() -> Optional[float]:
            crossing = self.exit_time(vessel, context.ut) if inside else self.entry_time(vessel, context.ut)
            logger.debug(f"{label} crossing for {vessel.id}: {crossing}")
            return crossing

        crossing_ut = self._cache.get_or_compute(search, (vessel.id, inside))
        if crossing_ut is None:
            return EventPrediction.absent(label)

        return EventPrediction(
            status=PredictionStatus.SUCCESS,
            time_until=max(0.0, crossing_ut - context.ut),
            label=label,
        )
