"""
Burn-Time Prediction - Vehicle and World Data Model

Plain dataclasses describing what the engine reads from the host simulation:
parts with their engine modules and resources, the vessel, the celestial body
it orbits, an optional maneuver node, and the FlightContext that bundles them
for a single tick.

Coordinate Frames:
- Position/Velocity: body-centred inertial frame, body rotation axis +Z
- Part offsets: relative to the vessel reference point, same orientation
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from . import constants as C
from .orbit import Orbit


@dataclass
class Propellant:
    """One propellant drawn by an engine module."""
    name: str
    ratio: float = 1.0            # mixture ratio (relative units)
    is_deprived: bool = False     # engine could not draw this propellant last frame
    ignore_for_isp: bool = False  # drawn but irrelevant to performance


@dataclass
class EngineModule:
    """
    An engine module on a part.

    Attributes:
        max_thrust: Maximum vacuum thrust (kN)
        vacuum_isp: Vacuum specific impulse (s)
        propellants: Propellants drawn, with mixture ratios
        min_thrust: Minimum thrust at zero throttle (kN)
        thrust_percentage: Thrust limiter setting (0-100)
        forward: Unit thrust direction in the inertial frame
        is_operational: Engine is ignited and allowed to throttle
        throttle_locked: Solid-rocket style engine that cannot be throttled
    """
    max_thrust: float
    vacuum_isp: float
    propellants: List[Propellant] = field(default_factory=list)
    min_thrust: float = 0.0
    thrust_percentage: float = 100.0
    forward: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    is_operational: bool = True
    throttle_locked: bool = False

    def __post_init__(self):
        self.forward = np.asarray(self.forward, dtype=np.float64)
        norm = np.linalg.norm(self.forward)
        if norm > C.ZERO_TOLERANCE:
            self.forward = self.forward / norm

    @property
    def thrust_limit(self) -> float:
        """Thrust at full throttle with the limiter applied (kN)."""
        fraction = self.thrust_percentage * 0.01
        return self.min_thrust + (self.max_thrust - self.min_thrust) * fraction


@dataclass
class PartResource:
    """A resource stored on a part."""
    name: str
    amount: float                 # units
    density: float                # tons per unit
    flow_state: bool = True       # flow enabled by the player
    flowable: bool = True         # False for resources locked to their part (SRB fuel)

    @property
    def mass(self) -> float:
        return self.amount * self.density


@dataclass
class Part:
    """
    A vessel part.

    Attributes:
        name: Part name
        dry_mass: Mass without resources (t)
        offset: Centre position relative to the vessel reference point (m)
        radius: Bounding radius used for the lowest-point search (m)
        collider_enabled: Whether the part can touch the ground
        crash_tolerance: Impact speed the part survives (m/s)
    """
    name: str
    dry_mass: float = 0.0
    offset: np.ndarray = field(default_factory=lambda: np.zeros(3))
    radius: float = 0.5
    collider_enabled: bool = True
    crash_tolerance: float = 6.0
    engines: List[EngineModule] = field(default_factory=list)
    resources: List[PartResource] = field(default_factory=list)

    def __post_init__(self):
        self.offset = np.asarray(self.offset, dtype=np.float64)

    @property
    def mass(self) -> float:
        return self.dry_mass + sum(r.mass for r in self.resources)

    def resource(self, name: str) -> Optional[PartResource]:
        for res in self.resources:
            if res.name == name:
                return res
        return None


@dataclass
class CelestialBody:
    """A spherical celestial body."""
    name: str
    radius: float                          # m
    mu: float                              # m^3/s^2
    atmosphere_depth: float = 0.0          # m, 0 for airless bodies
    ocean: bool = False
    rotation_period: Optional[float] = None  # s, None if not rotating
    sphere_of_influence: float = math.inf  # m
    safe_altitude: float = 0.0             # m, lowest on-rails warp altitude

    @property
    def has_atmosphere(self) -> bool:
        return self.atmosphere_depth > 0.0

    @property
    def rotates(self) -> bool:
        return self.rotation_period is not None and self.rotation_period > 0.0

    @property
    def angular_velocity(self) -> np.ndarray:
        if not self.rotates:
            return np.zeros(3)
        return np.array([0.0, 0.0, 2.0 * math.pi / self.rotation_period])

    def gravity_at(self, radius: float) -> float:
        """Gravitational acceleration magnitude at a distance from the centre (m/s^2)."""
        return self.mu / (radius * radius)


@dataclass
class Vessel:
    """
    A vessel in flight.

    Attributes:
        id: Unique vessel identity
        body: Body whose sphere of influence the vessel is in
        parts: All parts on the vessel
        position: Body-centred position of the reference point (m) [3]
        velocity: Body-centred inertial velocity (m/s) [3]
        epoch: Universal time the state vector refers to (s)
        terrain_altitude: Terrain height above sea level below the vessel (m)
        landed / splashed: Resting on ground or water
        packed: On-rails (time warp); part geometry unavailable
        orbit: Orbit object; built from the state vector when omitted
    """
    id: str
    body: CelestialBody
    parts: List[Part] = field(default_factory=list)
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    epoch: float = 0.0
    terrain_altitude: float = 0.0
    landed: bool = False
    splashed: bool = False
    packed: bool = False
    orbit: Optional[Orbit] = None

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64)
        self.velocity = np.asarray(self.velocity, dtype=np.float64)
        if self.orbit is None and np.linalg.norm(np.cross(self.position, self.velocity)) > C.ZERO_TOLERANCE:
            self.orbit = Orbit(self.body.mu, self.position, self.velocity, self.epoch)

    @classmethod
    def on_orbit(cls, id: str, body: CelestialBody, orbit: Orbit, ut: float,
                 parts: List[Part] = None, **kwargs) -> 'Vessel':
        """Place a vessel on `orbit` at universal time `ut`."""
        return cls(
            id=id,
            body=body,
            parts=parts if parts is not None else [],
            position=orbit.position_at(ut),
            velocity=orbit.velocity_at(ut),
            epoch=ut,
            orbit=orbit,
            **kwargs,
        )

    @property
    def part_count(self) -> int:
        return len(self.parts)

    @property
    def total_mass(self) -> float:
        """Total vessel mass (t)."""
        return float(sum(p.mass for p in self.parts))

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def altitude(self) -> float:
        """Altitude above sea level (m)."""
        return self.radius - self.body.radius

    @property
    def up(self) -> np.ndarray:
        return self.position / max(self.radius, C.ZERO_TOLERANCE)

    @property
    def vertical_speed(self) -> float:
        """Radial speed, positive when climbing (m/s)."""
        return float(np.dot(self.velocity, self.up))

    @property
    def lateral_speed(self) -> float:
        """Inertial speed perpendicular to the local vertical (m/s)."""
        return float(np.linalg.norm(np.cross(self.up, self.velocity)))

    @property
    def surface_velocity(self) -> np.ndarray:
        """Velocity relative to the rotating surface (m/s)."""
        return self.velocity - np.cross(self.body.angular_velocity, self.position)

    @property
    def horizontal_surface_speed(self) -> float:
        v_srf = self.surface_velocity
        return float(np.linalg.norm(v_srf - np.dot(v_srf, self.up) * self.up))

    @property
    def landed_or_splashed(self) -> bool:
        return self.landed or self.splashed

    @property
    def in_atmosphere(self) -> bool:
        return self.body.has_atmosphere and self.altitude < self.body.atmosphere_depth

    def __str__(self) -> str:
        return (
            f"Vessel({self.id}, alt={self.altitude/1000:.2f}km, "
            f"vs={self.vertical_speed:.1f}m/s, parts={self.part_count}, "
            f"m={self.total_mass:.3f}t)"
        )


@dataclass
class ManeuverNode:
    """A planned maneuver."""
    ut: float             # universal time of the node (s)
    dv_remaining: float   # remaining velocity change (m/s)


@dataclass
class FlightContext:
    """
    Everything a predictor may look at during one tick.

    Attributes:
        vessel: The active vessel, or None if there is none
        ut: Current universal time (s)
        target: Targeted vessel, if any
        maneuver_node: Next maneuver node, if any
        infinite_propellant: Infinite-propellant cheat state
    """
    vessel: Optional[Vessel]
    ut: float = 0.0
    target: Optional[Vessel] = None
    maneuver_node: Optional[ManeuverNode] = None
    infinite_propellant: bool = False

    @property
    def body(self) -> Optional[CelestialBody]:
        return None if self.vessel is None else self.vessel.body
