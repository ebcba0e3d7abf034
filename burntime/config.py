"""
Burn-Time Prediction - Configuration

This module provides a PredictorConfig dataclass for dependency injection,
so that callers can pass predictor settings explicitly instead of relying on
global state. The engine only ever reads it.

The infinite-propellant cheat is not part of the configuration: it is a
property of the running game and travels on the FlightContext.
"""

import math
from dataclasses import dataclass, fields

from . import constants as C


@dataclass(frozen=True)
class PredictorConfig:
    """
    Immutable configuration for the prediction engine.

    frozen=True keeps a config from being changed in place.
    Create new configs via dataclass replace() if needed.

    Section grouping:
      1. Burn model
      2. Impact tracker
      3. Closest-approach tracker
      4. Atmosphere tracker
      5. Geosync tracker
      6. Timing
    """

    # ── 1. Burn model ────────────────────────────────────────────────────
    # Force the constant-acceleration (instantaneous mass) model
    use_simple_acceleration: bool = False

    # ── 2. Impact tracker ────────────────────────────────────────────────
    show_impact: bool = True
    impact_max_time_until: float = C.IMPACT_MAX_TIME_UNTIL
    # Parachutes make in-atmosphere predictions noisy; optionally skip them
    impact_skip_atmospheric_bodies: bool = False
    min_fall_speed: float = C.MIN_FALL_SPEED

    # ── 3. Closest-approach tracker ──────────────────────────────────────
    show_closest_approach: bool = True
    closest_approach_max_time_until_encounter: float = C.CLOSEST_APPROACH_MAX_TIME_UNTIL
    closest_approach_max_distance_km: float = C.CLOSEST_APPROACH_MAX_DISTANCE_KM
    closest_approach_min_target_distance: float = C.CLOSEST_APPROACH_MIN_TARGET_DISTANCE

    # ── 4. Atmosphere tracker ────────────────────────────────────────────
    show_atmosphere: bool = True
    atmosphere_max_time_until_exit: float = C.ATMOSPHERE_MAX_TIME_UNTIL_EXIT
    atmosphere_max_time_until_entry: float = C.ATMOSPHERE_MAX_TIME_UNTIL_ENTRY

    # ── 5. Geosync tracker ───────────────────────────────────────────────
    # 0.0 disables the feature
    geosync_precision_limit: float = C.GEOSYNC_PRECISION_LIMIT
    geosync_seconds_transition: float = C.GEOSYNC_SECONDS_TRANSITION
    geosync_label: str = C.GEOSYNC_LABEL

    # ── 6. Timing ────────────────────────────────────────────────────────
    update_interval: float = C.UPDATE_INTERVAL

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if math.isnan(value) or value < 0.0:
                raise ValueError(f"{f.name} must be non-negative, got {value}")


def create_default_config() -> PredictorConfig:
    """Create a PredictorConfig with default values from constants."""
    return PredictorConfig()


def create_test_config(update_interval: float = 0.0, **overrides) -> PredictorConfig:
    """Create a config suitable for testing.

    The refresh interval defaults to zero so every call recomputes. Any keyword
    arg accepted by PredictorConfig can be passed as an override.
    """
    defaults = dict(update_interval=update_interval)
    defaults.update(overrides)
    return PredictorConfig(**defaults)
