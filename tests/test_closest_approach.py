import logging
import math
from dataclasses import replace

import numpy as np
import pytest
from burntime import constants as C
from burntime import scenarios
from burntime.closest_approach import (
    ClosestApproachPredictor, approach_label, find_closest_approach, is_too_close,
    separation_at, tracking_interval,
)
from burntime.config import create_test_config
from burntime.orbit import Orbit
from burntime.types import PredictionStatus
from burntime.vessel import FlightContext, Part, Vessel

MU = C.KERBIN_MU
R = C.KERBIN_RADIUS


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


@pytest.fixture
def outer():
    return Orbit.circular(MU, R + 1000000.0)


@pytest.fixture
def inner():
    return Orbit.circular(MU, R + 100000.0, phase=2.0)


def test_tracking_interval(outer):
    assert tracking_interval(outer) == pytest.approx(outer.period)
    r = R + 200000.0
    escape = Orbit(MU, [r, 0.0, 0.0], [0.0, 1.5 * math.sqrt(2.0 * MU / r), 0.0])
    assert tracking_interval(escape) == pytest.approx(C.HYPERBOLIC_MEAN_MOTION_UNITS / escape.mean_motion)

def test_separation_at(outer, inner):
    d = separation_at(outer, inner, 0.0)
    assert d == pytest.approx(np.linalg.norm(outer.position_at(0.0) - inner.position_at(0.0)))
    assert d >= 900000.0 - 1e-6

@pytest.mark.parametrize("start", [0.0, 500.0, 1234.5, 3000.0, 9999.0])
def test_coplanar_circular_orbits_converge_to_radius_gap(outer, inner, start):
    ut, distance = find_closest_approach(outer, inner, start)
    assert distance == pytest.approx(900000.0, abs=1.0)
    assert start <= ut <= start + outer.period
    assert separation_at(outer, inner, ut) == pytest.approx(distance)

def test_escaping_source_searches_hyperbolic_window():
    r = R + 200000.0
    escape = Orbit(MU, [r, 0.0, 0.0], [0.0, 1.5 * math.sqrt(2.0 * MU / r), 0.0], epoch=100.0)
    station = Orbit.circular(MU, r, phase=0.5, epoch=100.0)
    window = C.HYPERBOLIC_MEAN_MOTION_UNITS / escape.mean_motion
    ut, distance = find_closest_approach(escape, station, 100.0)
    assert 100.0 <= ut <= 100.0 + window
    assert distance == pytest.approx(separation_at(escape, station, ut))
    assert distance <= separation_at(escape, station, 100.0)

def test_search_result_stays_within_window(outer, inner):
    ut, _ = find_closest_approach(outer, inner, 100.0, divisions=20, iterations=1)
    assert 100.0 <= ut < 100.0 + outer.period

def test_approach_label():
    assert approach_label(2345.0) == "Target@2.3km"
    assert approach_label(150.0) == "Target@0.1km"


# ── Too-close guard ─────────────────────────────────────────────────────

def pair(distance, relative_speed):
    body = scenarios.kerbin()
    r = R + 100000.0
    ship = Vessel("ship", body, position=[r, 0.0, 0.0], velocity=[0.0, 2200.0, 0.0])
    other = Vessel("other", body, position=[r, distance, 0.0], velocity=[0.0, 2200.0 + relative_speed, 0.0])
    return ship, other

def test_far_target_is_never_too_close():
    assert not is_too_close(*pair(500.0, 0.0), min_target_distance=200.0)

def test_slow_nearby_target_is_too_close():
    assert is_too_close(*pair(300.0, 0.5), min_target_distance=200.0)
    assert not is_too_close(*pair(300.0, 5.0), min_target_distance=200.0)

def test_very_close_target_needs_higher_speed():
    assert is_too_close(*pair(100.0, 5.0), min_target_distance=200.0)
    assert not is_too_close(*pair(100.0, 15.0), min_target_distance=200.0)


# ── Predictor ───────────────────────────────────────────────────────────

def test_rendezvous_scenario_reports_dv():
    predictor = ClosestApproachPredictor(create_test_config())
    context = scenarios.rendezvous_scenario()
    prediction = predictor.predict(context)
    assert prediction.status is PredictionStatus.SUCCESS
    assert prediction.distance == pytest.approx(1000.0, abs=5.0)
    assert 0.0 < prediction.time_until < C.CLOSEST_APPROACH_MAX_TIME_UNTIL
    approach_ut = context.ut + prediction.time_until
    expected = np.linalg.norm(context.vessel.orbit.velocity_at(approach_ut)
                              - context.target.orbit.velocity_at(approach_ut))
    assert prediction.required_dv == pytest.approx(expected)
    assert prediction.label == "Target@1.0km"

def test_far_approach_has_no_dv(outer, inner):
    body = scenarios.kerbin()
    vessel = Vessel.on_orbit("ship", body, outer, 0.0, parts=[Part("probe")])
    target = Vessel.on_orbit("station", body, inner, 0.0)
    prediction = ClosestApproachPredictor(create_test_config()).predict(
        FlightContext(vessel=vessel, target=target))
    assert prediction.status is PredictionStatus.SUCCESS
    assert prediction.distance == pytest.approx(900000.0, abs=1.0)
    assert prediction.required_dv is None
    assert prediction.label == "Target@900.0km"

def test_late_approach_has_no_dv():
    config = create_test_config(closest_approach_max_time_until_encounter=60.0)
    prediction = ClosestApproachPredictor(config).predict(scenarios.rendezvous_scenario())
    assert prediction.time_until > 60.0
    assert prediction.required_dv is None
    assert prediction.distance is not None

def test_time_until_tracks_ut_between_searches():
    clock = FakeClock()
    predictor = ClosestApproachPredictor(create_test_config(update_interval=0.25), clock)
    context = scenarios.rendezvous_scenario()
    first = predictor.predict(context)
    later = predictor.predict(replace(context, ut=context.ut + 10.0))
    assert later.time_until == pytest.approx(first.time_until - 10.0)
    assert later.distance == first.distance

@pytest.mark.parametrize("change", ["no_target", "vessel_landed", "target_landed", "disabled"])
def test_absent_cases(change):
    config = create_test_config(show_closest_approach=(change != "disabled"))
    context = scenarios.rendezvous_scenario()
    if change == "no_target":
        context = replace(context, target=None)
    elif change == "vessel_landed":
        context.vessel.landed = True
    elif change == "target_landed":
        context.target.landed = True
    prediction = ClosestApproachPredictor(config).predict(context)
    assert prediction.status is PredictionStatus.ABSENT
    assert prediction.required_dv is None

def test_target_change_is_logged(caplog):
    predictor = ClosestApproachPredictor(create_test_config())
    context = scenarios.rendezvous_scenario()
    with caplog.at_level(logging.INFO, logger="burntime.closest_approach"):
        predictor.predict(context)
        predictor.predict(context)
        predictor.predict(replace(context, target=None))
    messages = [r.getMessage() for r in caplog.records if r.name == "burntime.closest_approach"]
    assert messages == ["Closest-approach target: station", "Closest-approach target cleared"]

def test_failure_is_reported(monkeypatch):
    import burntime.closest_approach as ca

    def broken(*args, **kwargs):
        raise ZeroDivisionError("bad orbit")
    monkeypatch.setattr(ca, "find_closest_approach", broken)
    prediction = ClosestApproachPredictor(create_test_config()).predict(scenarios.rendezvous_scenario())
    assert prediction.status is PredictionStatus.FAILED
    assert prediction.time_until is None
