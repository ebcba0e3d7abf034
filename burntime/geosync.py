"""
Burn-Time Prediction - Geosynchronous-Offset Predictor

Reports how far the vessel's orbital period is from the rotation period of
the body it orbits, when the two are within a configurable fraction of each
other. The geosynchronous radius follows from Kepler's third law:

    r_gs = (mu / omega^2)^(1/3)

Bodies that do not rotate, or whose geosynchronous radius lies outside their
sphere of influence, have no geosynchronous orbit.
"""

import logging
import math
from typing import Optional

from .config import PredictorConfig, create_default_config
from .types import GeosyncPrediction, PredictionStatus
from .utils import format_seconds
from .vessel import CelestialBody, FlightContext, Vessel

logger = logging.getLogger(__name__)


def geosync_radius(body: CelestialBody) -> Optional[float]:
    """Radius of the geosynchronous orbit (m), or None if there is none."""
    if not body.rotates:
        return None
    omega = 2.0 * math.pi / body.rotation_period
    radius = (body.mu / (omega * omega)) ** (1.0 / 3.0)
    if radius >= body.sphere_of_influence:
        return None
    return radius


def is_stable_orbit(vessel: Vessel) -> bool:
    """Closed orbit that clears both the surface and the atmosphere."""
    if vessel.landed_or_splashed or vessel.orbit is None or not vessel.orbit.is_closed:
        return False
    body = vessel.body
    return vessel.orbit.periapsis_radius > body.radius + body.atmosphere_depth


def _sign(value: float) -> str:
    return "-" if value < 0 else "+"


def offset_label(offset: float, label: str, seconds_transition: float) -> str:
    """e.g. "gsync +12s", or "gsync -350ms" when closer than the transition."""
    if abs(offset) < seconds_transition:
        milliseconds = int(1000.0 * offset)
        return f"{label} {_sign(milliseconds)}{abs(milliseconds)}ms"
    seconds = int(offset)
    return f"{label} {_sign(seconds)}{format_seconds(abs(seconds))}"


class GeosyncPredictor:
    """Tracks the geosynchronous offset of the active vessel."""

    def __init__(self, config: PredictorConfig = None):
        self.config = config or create_default_config()
        self._body_name: Optional[str] = None
        self._radius: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self.config.geosync_precision_limit > 0.0

    def reset(self) -> None:
        self._body_name = None
        self._radius = None

    def predict(self, context: FlightContext) -> GeosyncPrediction:
        try:
            return self._predict(context)
        except Exception:
            logger.exception("Geosync prediction failed")
            self.reset()
            return GeosyncPrediction.failed()

    def _update_body(self, body: CelestialBody) -> None:
        if body.name == self._body_name:
            return
        self._body_name = body.name
        self._radius = geosync_radius(body)
        logger.info(f"Current celestial body set to {body.name}")
        if not body.rotates:
            logger.info(f"{body.name} doesn't rotate, no geosynchronous orbit is possible")
        elif self._radius is None:
            logger.info(f"{body.name} geosync radius exceeds SoI size of "
                        f"{body.sphere_of_influence:.0f} m, no geosynchronous orbit is possible")
        else:
            logger.info(f"Geosync altitude: {(self._radius - body.radius) / 1000.0:.3f} km")

    def _predict(self, context: FlightContext) -> GeosyncPrediction:
        vessel = context.vessel
        if not self.enabled or vessel is None:
            return GeosyncPrediction.absent()

        body = vessel.body
        self._update_body(body)
        if self._radius is None or not is_stable_orbit(vessel):
            return GeosyncPrediction.absent()

        offset = vessel.orbit.period - body.rotation_period
        if abs(offset) / body.rotation_period > self.config.geosync_precision_limit:
            return GeosyncPrediction.absent()

        return GeosyncPrediction(
            status=PredictionStatus.SUCCESS,
            label=offset_label(offset, self.config.geosync_label, self.config.geosync_seconds_transition),
            offset=offset,
            geosync_altitude=self._radius - body.radius,
        )
