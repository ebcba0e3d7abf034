import logging
import math
from dataclasses import replace

import pytest
from burntime import constants as C
from burntime import scenarios
from burntime.config import create_test_config
from burntime.main import BurnTimeEngine
from burntime.types import BurnType
from burntime.vessel import FlightContext, ManeuverNode

LANDER_MASS = 3.55           # t
LANDER_THRUST = 60.0         # kN
LANDER_ISP = 345.0           # s


@pytest.fixture
def engine():
    return BurnTimeEngine(create_test_config())


def lander_burn_time(dv):
    mdot = LANDER_THRUST / (C.G0 * LANDER_ISP)
    ve = LANDER_THRUST / mdot
    return LANDER_MASS * (1.0 - math.exp(-dv / ve)) / mdot


# ── Coordinator ─────────────────────────────────────────────────────────

def test_maneuver_node_burn(engine):
    data = engine.update(scenarios.maneuver_scenario(dv=500.0, time_until_node=300.0))
    assert data.is_valid
    assert data.burn_type is BurnType.MANEUVER
    assert data.dv == 500.0
    assert data.time_until == pytest.approx(300.0)
    assert data.burn_time == pytest.approx(lander_burn_time(500.0))
    assert not data.insufficient_fuel
    assert data.label is None
    assert data.time_until_burn_start == pytest.approx(300.0 - data.burn_time / 2.0)

def test_impact_takes_priority(engine):
    context = scenarios.descent_scenario()
    context = replace(context, maneuver_node=ManeuverNode(context.ut + 100.0, 250.0))
    data = engine.update(context)
    impact = engine.predict_impact(context)
    assert data.burn_type is BurnType.IMPACT
    assert data.label == "Impact"
    assert data.dv == pytest.approx(impact.required_dv)
    assert data.time_until == pytest.approx(impact.time_until)
    assert data.time_until_burn_start == pytest.approx(data.time_until - data.burn_time / 2.0)

def test_rendezvous_over_maneuver(engine):
    context = scenarios.rendezvous_scenario()
    context = replace(context, maneuver_node=ManeuverNode(context.ut + 100.0, 250.0))
    data = engine.update(context)
    assert data.burn_type is BurnType.RENDEZVOUS
    assert data.label == "Target@1.0km"
    assert data.dv < 5.0

def test_far_target_falls_back_to_node(engine):
    context = scenarios.rendezvous_scenario(separation_phase=1.0)
    context = replace(context, maneuver_node=ManeuverNode(context.ut + 100.0, 250.0))
    data = engine.update(context)
    assert data.burn_type is BurnType.MANEUVER
    assert data.dv == 250.0

def test_nothing_to_burn_for(engine):
    data = engine.update(replace(scenarios.maneuver_scenario(), maneuver_node=None))
    assert not data.is_valid
    assert math.isnan(data.burn_time)
    assert math.isnan(data.time_until_burn_start)

def test_no_vessel(engine):
    data = engine.update(FlightContext(vessel=None))
    assert data.burn_type is BurnType.NONE
    assert math.isinf(engine.predict_burn(FlightContext(vessel=None), 100.0).duration)

def test_node_in_the_past(engine):
    context = scenarios.maneuver_scenario()
    context = replace(context, ut=context.maneuver_node.ut + 5.0)
    data = engine.update(context)
    assert data.burn_type is BurnType.MANEUVER
    assert math.isnan(data.time_until)
    assert math.isnan(data.time_until_burn_start)
    assert math.isfinite(data.burn_time)

def test_insufficient_fuel_is_flagged(engine):
    data = engine.update(scenarios.maneuver_scenario(dv=5000.0))
    assert data.insufficient_fuel
    assert math.isfinite(data.burn_time)
    # Longer than burning all 2 t of propellant
    assert data.burn_time > 2.0 / (LANDER_THRUST / (C.G0 * LANDER_ISP))

def test_engines_off_is_infinite(engine):
    context = scenarios.maneuver_scenario()
    context.vessel.parts[2].engines[0].thrust_percentage = 0.0
    data = engine.update(context)
    assert math.isinf(data.burn_time)
    assert not data.insufficient_fuel
    assert math.isnan(data.time_until_burn_start)
    assert engine.last_thrust.engine_count == 0

def test_failed_update_degrades_to_none(engine, monkeypatch, caplog):
    def broken(context):
        raise RuntimeError("corrupt vessel")
    monkeypatch.setattr(engine, "_select_burn", broken)
    with caplog.at_level(logging.ERROR, logger="burntime.main"):
        data = engine.update(scenarios.maneuver_scenario())
    assert data.burn_type is BurnType.NONE
    assert "Burn coordinator update failed" in caplog.text


# ── Burn models ─────────────────────────────────────────────────────────

def test_simple_model(caplog):
    with caplog.at_level(logging.INFO, logger="burntime.main"):
        engine = BurnTimeEngine(create_test_config(use_simple_acceleration=True))
    assert "Using simple acceleration model" in caplog.text
    prediction = engine.predict_burn(scenarios.maneuver_scenario(), 500.0)
    assert prediction.duration == pytest.approx(500.0 * LANDER_MASS / LANDER_THRUST)

def test_infinite_propellant_toggle_is_logged(engine, caplog):
    context = scenarios.maneuver_scenario()
    with caplog.at_level(logging.INFO, logger="burntime.main"):
        engine.predict_burn(context, 500.0)
        cheat = engine.predict_burn(replace(context, infinite_propellant=True), 500.0)
        engine.predict_burn(replace(context, infinite_propellant=True), 500.0)
        engine.predict_burn(context, 500.0)
    assert cheat.duration == pytest.approx(500.0 * LANDER_MASS / LANDER_THRUST)
    messages = [r.getMessage() for r in caplog.records if r.name == "burntime.main"]
    assert messages == [
        "Infinite propellant active, using simple acceleration model",
        "Infinite propellant deactivated, using complex acceleration model",
    ]

def test_part_burn_time(engine):
    assert engine.predict_part_burn_time(scenarios.solid_booster_part()) == pytest.approx(
        375.0 * scenarios.SOLID_FUEL_DENSITY / (227.0 / (C.G0 * 195.0)))
    assert engine.predict_part_burn_time(scenarios.tank_part()) is None

def test_other_predictions_exposed(engine):
    assert engine.predict_atmosphere_transition(scenarios.reentry_scenario()).label == "Reentry"
    assert engine.predict_geosync(scenarios.geosync_scenario(period_offset=12.5)).label == "gsync +12s"
    assert engine.predict_closest_approach(scenarios.rendezvous_scenario()).is_available

def test_reset_forces_refresh():
    engine = BurnTimeEngine(create_test_config(update_interval=60.0))
    context = scenarios.maneuver_scenario()
    engine.predict_burn(context, 100.0)
    count = engine.state.refresh_count
    engine.predict_burn(context, 100.0)
    assert engine.state.refresh_count == count
    engine.reset()
    assert engine.last_thrust is None
    engine.predict_burn(context, 100.0)
    assert engine.state.refresh_count == count + 1

def test_same_vessel_with_new_parts_uses_new_fuel():
    engine = BurnTimeEngine(create_test_config(update_interval=0.25))
    context = scenarios.maneuver_scenario()
    assert not engine.predict_burn(context, 500.0).insufficient_fuel
    parts = [scenarios.command_part(), scenarios.tank_part(liquid_fuel=10.0, oxidizer=12.0),
             scenarios.engine_part()]
    nearly_dry = replace(context.vessel, parts=parts)
    second = engine.predict_burn(replace(context, vessel=nearly_dry), 500.0)
    assert second.insufficient_fuel

def test_no_thrust_skips_solver(engine, monkeypatch):
    import burntime.main as main_module

    def unreachable(*args, **kwargs):
        raise AssertionError("solver called without thrust")
    monkeypatch.setattr(main_module, "compute_burn_time", unreachable)
    context = scenarios.maneuver_scenario()
    context.vessel.parts[2].engines[0].thrust_percentage = 0.0
    prediction = engine.predict_burn(context, 500.0)
    assert math.isinf(prediction.duration)
    assert not prediction.insufficient_fuel
    assert prediction.required_dv == 500.0
    assert not engine.last_thrust.can_accelerate
