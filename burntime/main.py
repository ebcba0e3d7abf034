"""
Burn-Time Prediction - Main Entry Point

This module implements the per-tick burn coordinator:
- Vehicle snapshot refresh and thrust aggregation
- Burn-time solving for the tick's required dV
- Event predictors (impact, closest approach, atmosphere, geosync)
- Choice of dV source: impact, else closest approach, else maneuver node

Every entry point catches unexpected failures, logs them and degrades to an
absent result so the host tick loop never sees an exception.
"""

import logging
import math
import time
from typing import Callable, Optional

from .atmosphere import AtmospherePredictor
from .burn import compute_burn_time, compute_part_burn_time
from .closest_approach import ClosestApproachPredictor
from .config import PredictorConfig, create_default_config
from .geosync import GeosyncPredictor
from .impact import ImpactPredictor
from .state import VehicleState
from .thrust import ThrustAggregator, ThrustInfo
from .types import (
    ApproachPrediction, BurnData, BurnPrediction, BurnType, EventPrediction,
    GeosyncPrediction, ImpactPrediction,
)
from .vessel import FlightContext, Part

# Configure module logger
logger = logging.getLogger(__name__)


class BurnTimeEngine:
    """
    Burn-time and event-time prediction for one flight.

    Args:
        config: PredictorConfig instance. If None a default is created.
        clock: Monotonic wall clock used for throttling (s)
    """

    def __init__(self, config: PredictorConfig = None, clock: Callable[[], float] = time.monotonic):
        if config is None:
            config = create_default_config()
        self.config = config
        self.state = VehicleState(update_interval=config.update_interval, clock=clock)
        self.thrust = ThrustAggregator()
        self.impact = ImpactPredictor(config, clock)
        self.closest_approach = ClosestApproachPredictor(config, clock)
        self.atmosphere = AtmospherePredictor(config, clock)
        self.geosync = GeosyncPredictor(config)
        self.last_thrust: Optional[ThrustInfo] = None
        self._was_infinite_propellant: Optional[bool] = None

        if config.use_simple_acceleration:
            logger.info("Using simple acceleration model")
        else:
            logger.info("Using complex acceleration model")

    def reset(self) -> None:
        """Drop every cached result."""
        self.state.invalidate()
        self.impact.reset()
        self.closest_approach.reset()
        self.atmosphere.reset()
        self.geosync.reset()
        self.last_thrust = None

    def _log_infinite_propellant(self, infinite_propellant: bool) -> None:
        if infinite_propellant == self._was_infinite_propellant:
            return
        first = self._was_infinite_propellant is None
        self._was_infinite_propellant = infinite_propellant
        if self.config.use_simple_acceleration or (first and not infinite_propellant):
            return
        if infinite_propellant:
            logger.info("Infinite propellant active, using simple acceleration model")
        else:
            logger.info("Infinite propellant deactivated, using complex acceleration model")

    # ── Burn time ───────────────────────────────────────────────────────

    def predict_burn(self, context: FlightContext, required_dv: float) -> BurnPrediction:
        """Seconds of full-throttle burn needed for `required_dv` (m/s)."""
        try:
            vessel = context.vessel
            if vessel is None:
                self.state.invalidate()
                return BurnPrediction(math.inf, False, required_dv)

            infinite = context.infinite_propellant
            self._log_infinite_propellant(infinite)
            self.state.refresh(vessel, infinite)
            info = self.thrust.aggregate(self.state.active_engines, self.state.available_resources, infinite)
            self.last_thrust = info
            if not info.can_accelerate:
                return BurnPrediction(math.inf, False, max(0.0, float(required_dv)))
            return compute_burn_time(
                required_dv,
                self.state.total_mass,
                info.thrust,
                info.consumption,
                self.state.available_resources,
                use_simple_acceleration=self.config.use_simple_acceleration,
                infinite_propellant=infinite,
            )
        except Exception:
            logger.exception("Burn-time prediction failed")
            self.state.invalidate()
            return BurnPrediction(math.inf, False, required_dv)

    def predict_part_burn_time(self, part: Part) -> Optional[float]:
        """Burn time of a solid-rocket style part on its own fuel (s)."""
        try:
            return compute_part_burn_time(part)
        except Exception:
            logger.exception(f"Part burn time failed for {part.name}")
            return None

    # ── Event predictors ────────────────────────────────────────────────

    def predict_impact(self, context: FlightContext) -> ImpactPrediction:
        return self.impact.predict(context)

    def predict_closest_approach(self, context: FlightContext) -> ApproachPrediction:
        return self.closest_approach.predict(context)

    def predict_atmosphere_transition(self, context: FlightContext) -> EventPrediction:
        return self.atmosphere.predict(context)

    def predict_geosync(self, context: FlightContext) -> GeosyncPrediction:
        return self.geosync.predict(context)

    # ── Coordinator ─────────────────────────────────────────────────────

    def update(self, context: FlightContext) -> BurnData:
        """
        Run one tick and publish the burn data for it.

        Returns:
            BurnData; BurnType.NONE when there is no dV to burn for
        """
        try:
            return self._update(context)
        except Exception:
            logger.exception("Burn coordinator update failed")
            self.reset()
            return BurnData()

    def _select_burn(self, context: FlightContext):
        """(burn type, dv, time until, label) for this tick, or None."""
        impact = self.predict_impact(context)
        if impact.required_dv is not None:
            return BurnType.IMPACT, impact.required_dv, impact.time_until, impact.label

        approach = self.predict_closest_approach(context)
        if approach.required_dv is not None:
            return BurnType.RENDEZVOUS, approach.required_dv, approach.time_until, approach.label

        node = context.maneuver_node
        if node is not None and math.isfinite(node.dv_remaining):
            time_until = node.ut - context.ut
            if time_until < 0.0:
                time_until = math.nan
            return BurnType.MANEUVER, node.dv_remaining, time_until, None

        return None

    def _update(self, context: FlightContext) -> BurnData:
        if context.vessel is None:
            self.reset()
            return BurnData()

        selected = self._select_burn(context)
        if selected is None:
            return BurnData()
        burn_type, dv, time_until, label = selected

        prediction = self.predict_burn(context, dv)
        burn_start = math.nan
        if math.isfinite(time_until) and prediction.is_possible:
            burn_start = time_until - prediction.duration / 2.0

        return BurnData(
            burn_type=burn_type,
            burn_time=prediction.duration,
            dv=dv,
            time_until=time_until,
            insufficient_fuel=prediction.insufficient_fuel,
            label=label,
            time_until_burn_start=burn_start,
        )
