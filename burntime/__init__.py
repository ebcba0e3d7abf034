"""
Burn-Time Prediction Package

Predicts, every simulation tick, how long a spacecraft needs to burn for a
required velocity change and when the event calling for that burn happens.

Modules:
    - constants: Physical constants and predictor parameters
    - config: Immutable predictor configuration
    - tally: Per-propellant quantity tally
    - vessel: Parts, engines, resources, vessels and flight context
    - orbit: Two-body Keplerian orbits
    - propulsion: Engine and tank part inventory
    - state: Cached vehicle state snapshot
    - thrust: Thrust and consumption aggregation
    - burn: Variable-mass burn-time solver
    - impact / closest_approach / atmosphere / geosync: Event predictors
    - main: Burn coordinator entry point
"""

from .config import PredictorConfig, create_default_config, create_test_config
from .main import BurnTimeEngine
from .orbit import Orbit
from .tally import Tally
from .types import (
    ApproachPrediction, BurnData, BurnPrediction, BurnType, EventPrediction,
    GeosyncPrediction, ImpactPrediction, PredictionStatus,
)
from .vessel import (
    CelestialBody, EngineModule, FlightContext, ManeuverNode, Part, PartResource,
    Propellant, Vessel,
)

__version__ = "1.0.0"

__all__ = [
    'BurnTimeEngine',
    'PredictorConfig',
    'create_default_config',
    'create_test_config',
    'Orbit',
    'Tally',
    'ApproachPrediction',
    'BurnData',
    'BurnPrediction',
    'BurnType',
    'EventPrediction',
    'GeosyncPrediction',
    'ImpactPrediction',
    'PredictionStatus',
    'CelestialBody',
    'EngineModule',
    'FlightContext',
    'ManeuverNode',
    'Part',
    'PartResource',
    'Propellant',
    'Vessel',
]
