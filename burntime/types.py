"""
Burn-Time Prediction - Result Types

Explicit result objects returned by the engine. An inapplicable scenario is a
normal outcome (status ABSENT), not an exception; FAILED marks a tick whose
computation raised and was logged.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class PredictionStatus(Enum):
    SUCCESS = auto()
    ABSENT = auto()
    FAILED = auto()


class BurnType(Enum):
    """Which event the published burn data refers to."""
    NONE = auto()
    MANEUVER = auto()
    RENDEZVOUS = auto()
    IMPACT = auto()


@dataclass(frozen=True)
class BurnPrediction:
    """Burn-time solver output."""
    duration: float               # s, inf when the burn is impossible
    insufficient_fuel: bool
    required_dv: float            # m/s

    @property
    def is_possible(self) -> bool:
        return math.isfinite(self.duration)


@dataclass(frozen=True)
class EventPrediction:
    """Time until an event and the velocity change it calls for."""
    status: PredictionStatus
    time_until: Optional[float] = None    # s
    required_dv: Optional[float] = None   # m/s
    label: str = ""

    @property
    def is_available(self) -> bool:
        return self.status is PredictionStatus.SUCCESS and self.time_until is not None

    @classmethod
    def absent(cls, label: str = "") -> 'EventPrediction':
        return cls(PredictionStatus.ABSENT, label=label)

    @classmethod
    def failed(cls) -> 'EventPrediction':
        return cls(PredictionStatus.FAILED)


@dataclass(frozen=True)
class ImpactPrediction(EventPrediction):
    """Impact event with its speed and survivability."""
    impact_speed: Optional[float] = None  # m/s
    survivable: bool = False


@dataclass(frozen=True)
class ApproachPrediction(EventPrediction):
    """Closest-approach event with the separation at that time."""
    distance: Optional[float] = None      # m


@dataclass(frozen=True)
class GeosyncPrediction(EventPrediction):
    """How far the orbital period is from the body's rotation period."""
    offset: Optional[float] = None           # s, orbital period minus rotation period
    geosync_altitude: Optional[float] = None  # m above the surface

    @property
    def is_available(self) -> bool:
        return self.status is PredictionStatus.SUCCESS and self.offset is not None


@dataclass(frozen=True)
class BurnData:
    """
    Per-tick publication of the burn coordinator.

    Values are NaN / False when burn_type is NONE.
    """
    burn_type: BurnType = BurnType.NONE
    burn_time: float = math.nan           # s, inf if impossible
    dv: float = math.nan                  # m/s
    time_until: float = math.nan          # s until the event
    insufficient_fuel: bool = False
    label: Optional[str] = None
    time_until_burn_start: float = math.nan  # s, event time minus half the burn

    @property
    def is_valid(self) -> bool:
        return self.burn_type is not BurnType.NONE
