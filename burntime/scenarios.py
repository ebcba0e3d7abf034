"""
Burn-Time Prediction - Synthetic Scenarios

Factories for reference bodies, parts and complete flight contexts. Used by
the demo CLI and by tests that need a realistic vessel without a host game.

Propellant densities follow the host game: 5 kg per unit of LiquidFuel and
Oxidizer, 7.5 kg per unit of SolidFuel, ElectricCharge massless.
"""

import math
from dataclasses import replace
from typing import Callable, Dict, List

from . import constants as C
from .orbit import Orbit
from .vessel import (
    CelestialBody, EngineModule, FlightContext, ManeuverNode, Part, PartResource,
    Propellant, Vessel,
)

LIQUID_FUEL_DENSITY = 0.005   # t/unit
OXIDIZER_DENSITY = 0.005      # t/unit
SOLID_FUEL_DENSITY = 0.0075   # t/unit


# =============================================================================
# BODIES
# =============================================================================

def kerbin() -> CelestialBody:
    """Home planet: atmosphere, ocean, rotating."""
    return CelestialBody(
        name="Kerbin",
        radius=C.KERBIN_RADIUS,
        mu=C.KERBIN_MU,
        atmosphere_depth=C.KERBIN_ATMOSPHERE_DEPTH,
        ocean=True,
        rotation_period=C.KERBIN_ROTATION_PERIOD,
        sphere_of_influence=C.KERBIN_SOI,
        safe_altitude=C.KERBIN_SAFE_ALTITUDE,
    )


def mun() -> CelestialBody:
    """Airless moon, no ocean."""
    return CelestialBody(
        name="Mun",
        radius=C.MUN_RADIUS,
        mu=C.MUN_MU,
        rotation_period=C.MUN_ROTATION_PERIOD,
        sphere_of_influence=C.MUN_SOI,
        safe_altitude=C.MUN_SAFE_ALTITUDE,
    )


# =============================================================================
# PARTS
# =============================================================================

def bipropellant_engine(max_thrust: float = 60.0, vacuum_isp: float = 345.0,
                        **kwargs) -> EngineModule:
    """LiquidFuel/Oxidizer engine with the stock 0.9 : 1.1 mixture."""
    return EngineModule(
        max_thrust=max_thrust,
        vacuum_isp=vacuum_isp,
        propellants=[
            Propellant("LiquidFuel", 0.9),
            Propellant("Oxidizer", 1.1),
        ],
        **kwargs,
    )


def engine_part(name: str = "LV-909", dry_mass: float = 0.5, offset=(0.0, 0.0, -1.5),
                engine: EngineModule = None, **kwargs) -> Part:
    return Part(
        name=name,
        dry_mass=dry_mass,
        offset=offset,
        radius=0.6,
        engines=[engine if engine is not None else bipropellant_engine()],
        **kwargs,
    )


def tank_part(name: str = "FL-T400", liquid_fuel: float = 180.0, oxidizer: float = 220.0,
              dry_mass: float = 0.25, offset=(0.0, 0.0, 0.0), **kwargs) -> Part:
    resources = []
    if liquid_fuel is not None:
        resources.append(PartResource("LiquidFuel", liquid_fuel, LIQUID_FUEL_DENSITY))
    if oxidizer is not None:
        resources.append(PartResource("Oxidizer", oxidizer, OXIDIZER_DENSITY))
    return Part(name=name, dry_mass=dry_mass, offset=offset, radius=0.625,
                resources=resources, **kwargs)


def command_part(name: str = "Mk1 Pod", dry_mass: float = 0.8, offset=(0.0, 0.0, 1.5)) -> Part:
    """Crew pod carrying massless electric charge."""
    return Part(
        name=name,
        dry_mass=dry_mass,
        offset=offset,
        radius=0.6,
        crash_tolerance=14.0,
        resources=[PartResource("ElectricCharge", 50.0, 0.0)],
    )


def solid_booster_part(name: str = "RT-10", solid_fuel: float = 375.0,
                       thrust_percentage: float = 100.0) -> Part:
    """Locked-throttle booster whose fuel cannot flow to other parts."""
    return Part(
        name=name,
        dry_mass=0.75,
        engines=[EngineModule(
            max_thrust=227.0,
            vacuum_isp=195.0,
            propellants=[Propellant("SolidFuel", 1.0)],
            thrust_percentage=thrust_percentage,
            throttle_locked=True,
        )],
        resources=[PartResource("SolidFuel", solid_fuel, SOLID_FUEL_DENSITY, flowable=False)],
    )


def lander_parts() -> List[Part]:
    """Pod, tank and engine stacked along +Z (engine lowest)."""
    return [command_part(), tank_part(), engine_part()]


# =============================================================================
# FLIGHT CONTEXTS
# =============================================================================

def maneuver_scenario(dv: float = 500.0, time_until_node: float = 300.0) -> FlightContext:
    """Lander in a 100 km Kerbin orbit with a planned node ahead."""
    body = kerbin()
    ut = 10000.0
    orbit = Orbit.circular(body.mu, body.radius + 100000.0, epoch=ut)
    vessel = Vessel.on_orbit("lander", body, orbit, ut, parts=lander_parts())
    return FlightContext(vessel=vessel, ut=ut,
                         maneuver_node=ManeuverNode(ut + time_until_node, dv))


def descent_scenario(altitude: float = 3000.0, fall_speed: float = 50.0,
                     lateral_speed: float = 20.0) -> FlightContext:
    """Lander dropping toward the Mun with its lowest part pointing down."""
    body = mun()
    ut = 5000.0
    r = body.radius + altitude
    # Radial "up" along +X: rotate the stack so the engine sits lowest
    parts = lander_parts()
    for part in parts:
        part.offset = part.offset[[2, 0, 1]]
    vessel = Vessel(
        id="lander",
        body=body,
        parts=parts,
        position=[r, 0.0, 0.0],
        velocity=[-fall_speed, lateral_speed, 0.0],
        epoch=ut,
    )
    return FlightContext(vessel=vessel, ut=ut)


def rendezvous_scenario(separation_phase: float = 0.004, radius_gap: float = 1000.0) -> FlightContext:
    """Lander trailing a station on a slightly higher circular orbit."""
    body = kerbin()
    ut = 20000.0
    r = body.radius + 100000.0
    vessel = Vessel.on_orbit("lander", body, Orbit.circular(body.mu, r, epoch=ut), ut,
                             parts=lander_parts())
    target = Vessel.on_orbit("station", body,
                             Orbit.circular(body.mu, r + radius_gap, phase=separation_phase, epoch=ut),
                             ut, parts=[command_part("Station Core")])
    return FlightContext(vessel=vessel, ut=ut, target=target)


def reentry_scenario() -> FlightContext:
    """Lander coasting down from a 100 km apoapsis toward a 30 km periapsis."""
    body = kerbin()
    ut = 30000.0
    r_ap = body.radius + 100000.0
    r_pe = body.radius + 30000.0
    a = 0.5 * (r_ap + r_pe)
    e = (r_ap - r_pe) / (r_ap + r_pe)
    # Just past apoapsis, descending
    orbit = Orbit.from_elements(body.mu, a, e, mean_anomaly=math.pi + 0.05, epoch=ut)
    vessel = Vessel.on_orbit("lander", body, orbit, ut, parts=lander_parts())
    return FlightContext(vessel=vessel, ut=ut)


def geosync_scenario(period_offset: float = 12.0) -> FlightContext:
    """Satellite on a circular Kerbin orbit `period_offset` seconds off geosynchronous."""
    body = kerbin()
    ut = 40000.0
    period = body.rotation_period + period_offset
    radius = (body.mu * (period / (2.0 * math.pi)) ** 2) ** (1.0 / 3.0)
    vessel = Vessel.on_orbit("satellite", body, Orbit.circular(body.mu, radius, epoch=ut), ut,
                             parts=lander_parts())
    return FlightContext(vessel=vessel, ut=ut)


def advance(context: FlightContext, dt: float) -> FlightContext:
    """Coast every vessel in `context` forward `dt` seconds along its orbit."""
    ut = context.ut + dt

    def coast(vessel: Vessel) -> Vessel:
        if vessel is None or vessel.orbit is None or vessel.landed_or_splashed:
            return vessel
        return replace(vessel, position=vessel.orbit.position_at(ut),
                       velocity=vessel.orbit.velocity_at(ut), epoch=ut)

    return replace(context, ut=ut, vessel=coast(context.vessel), target=coast(context.target))


SCENARIOS: Dict[str, Callable[[], FlightContext]] = {
    "maneuver": maneuver_scenario,
    "descent": descent_scenario,
    "rendezvous": rendezvous_scenario,
    "reentry": reentry_scenario,
    "geosync": geosync_scenario,
}
