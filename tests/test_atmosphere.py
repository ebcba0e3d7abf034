import math
from dataclasses import replace

import pytest
from burntime import scenarios
from burntime.atmosphere import ENTRY_LABEL, EXIT_LABEL, AtmospherePredictor, time_at_radius
from burntime.config import create_test_config
from burntime.orbit import Orbit
from burntime.types import PredictionStatus
from burntime.vessel import FlightContext, Part, Vessel


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


@pytest.fixture
def kerbin():
    return scenarios.kerbin()


@pytest.fixture
def predictor():
    return AtmospherePredictor(create_test_config())


def boundary(body):
    return body.radius + body.atmosphere_depth


def climbing_vessel(body, altitude=50000.0, vertical=1000.0, lateral=1000.0):
    r = body.radius + altitude
    return Vessel("rocket", body, parts=[Part("probe")],
                  position=[r, 0.0, 0.0], velocity=[vertical, lateral, 0.0])


# ── Crossing search ─────────────────────────────────────────────────────

def test_time_at_radius_finds_descending_crossing(kerbin):
    context = scenarios.reentry_scenario()
    orbit = context.vessel.orbit
    crossing = time_at_radius(orbit, context.ut, boundary(kerbin), kerbin.radius, 3600.0)
    assert context.ut < crossing < context.ut + orbit.period / 2.0
    assert orbit.radius_at(crossing) == pytest.approx(boundary(kerbin), abs=50.0)

def test_time_at_radius_lithobraking_is_never(kerbin):
    r_pe = kerbin.radius - 100000.0
    r_ap = kerbin.radius + 100000.0
    orbit = Orbit.from_elements(kerbin.mu, 0.5 * (r_pe + r_ap), (r_ap - r_pe) / (r_ap + r_pe),
                                mean_anomaly=math.pi + 0.05)
    # Boundary below the surface: the ground is reached first
    assert math.isinf(time_at_radius(orbit, 0.0, kerbin.radius - 10000.0, kerbin.radius, 3600.0))

def test_time_at_radius_beyond_window_is_never(kerbin):
    orbit = Orbit.circular(kerbin.mu, kerbin.radius + 100000.0)
    assert math.isinf(time_at_radius(orbit, 0.0, boundary(kerbin), kerbin.radius, 900.0))


# ── Predictor ───────────────────────────────────────────────────────────

def test_reentry(predictor, kerbin):
    context = scenarios.reentry_scenario()
    prediction = predictor.predict(context)
    assert prediction.status is PredictionStatus.SUCCESS
    assert prediction.label == ENTRY_LABEL
    radius = context.vessel.orbit.radius_at(context.ut + prediction.time_until)
    assert radius == pytest.approx(boundary(kerbin), abs=50.0)

def test_exit_on_suborbital_climb(predictor, kerbin):
    vessel = climbing_vessel(kerbin)
    assert vessel.in_atmosphere
    prediction = predictor.predict(FlightContext(vessel=vessel))
    assert prediction.status is PredictionStatus.SUCCESS
    assert prediction.label == EXIT_LABEL
    assert 0.0 < prediction.time_until < 60.0
    assert vessel.orbit.radius_at(prediction.time_until) == pytest.approx(boundary(kerbin), abs=100.0)

def test_circular_orbit_inside_atmosphere_never_exits(predictor, kerbin):
    orbit = Orbit.circular(kerbin.mu, kerbin.radius + 50000.0)
    vessel = Vessel.on_orbit("low", kerbin, orbit, 0.0)
    prediction = predictor.predict(FlightContext(vessel=vessel))
    assert prediction.status is PredictionStatus.ABSENT
    assert prediction.label == EXIT_LABEL

def test_orbit_clear_of_atmosphere_never_enters(predictor, kerbin):
    context = scenarios.maneuver_scenario()
    prediction = predictor.predict(context)
    assert prediction.status is PredictionStatus.ABSENT
    assert prediction.label == ENTRY_LABEL

def test_escaping_climb_never_reenters(predictor, kerbin):
    vessel = Vessel("probe", kerbin, position=[kerbin.radius + 100000.0, 0.0, 0.0],
                    velocity=[5000.0, 100.0, 0.0])
    assert not vessel.orbit.is_closed
    assert vessel.orbit.periapsis_radius < boundary(kerbin)
    assert predictor.predict(FlightContext(vessel=vessel)).status is PredictionStatus.ABSENT

def test_airless_body_is_absent(predictor):
    context = scenarios.descent_scenario()
    assert predictor.predict(context).status is PredictionStatus.ABSENT

@pytest.mark.parametrize("field", ["landed", "splashed"])
def test_resting_vessel_is_absent(predictor, kerbin, field):
    vessel = climbing_vessel(kerbin)
    setattr(vessel, field, True)
    assert predictor.predict(FlightContext(vessel=vessel)).status is PredictionStatus.ABSENT

def test_disabled(kerbin):
    predictor = AtmospherePredictor(create_test_config(show_atmosphere=False))
    assert predictor.predict(scenarios.reentry_scenario()).status is PredictionStatus.ABSENT

def test_crossing_cached_against_current_ut():
    clock = FakeClock()
    predictor = AtmospherePredictor(create_test_config(update_interval=0.25), clock)
    context = scenarios.reentry_scenario()
    first = predictor.predict(context)
    later = predictor.predict(replace(context, ut=context.ut + 5.0))
    assert later.time_until == pytest.approx(first.time_until - 5.0)

def test_failure_is_reported(predictor, monkeypatch):
    import burntime.atmosphere as atmosphere

    def broken(*args, **kwargs):
        raise ValueError("kepler diverged")
    monkeypatch.setattr(atmosphere, "time_at_radius", broken)
    prediction = predictor.predict(scenarios.reentry_scenario())
    assert prediction.status is PredictionStatus.FAILED
