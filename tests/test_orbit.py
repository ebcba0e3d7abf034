import math

import numpy as np
import pytest
from burntime import constants as C
from burntime.orbit import Orbit, solve_kepler_elliptic, solve_kepler_hyperbolic

MU = C.KERBIN_MU
R = C.KERBIN_RADIUS


def specific_energy(orbit, ut):
    r = orbit.position_at(ut)
    v = orbit.velocity_at(ut)
    return 0.5 * np.dot(v, v) - orbit.mu / np.linalg.norm(r)


@pytest.fixture
def elliptic():
    return Orbit.from_elements(MU, R + 400000.0, 0.3, inclination=0.2, raan=0.5,
                               arg_periapsis=1.0, mean_anomaly=0.7, epoch=50.0)


def test_solve_kepler_elliptic_satisfies_equation():
    for e in (0.0, 0.1, 0.5, 0.95):
        for M in (-3.0, -0.5, 0.0, 0.3, 2.5):
            E = solve_kepler_elliptic(M, e)
            assert E - e * math.sin(E) == pytest.approx(M, abs=1e-10)

def test_solve_kepler_hyperbolic_satisfies_equation():
    for e in (1.1, 2.0, 5.0):
        for M in (-20.0, -1.0, 0.0, 0.5, 30.0):
            H = solve_kepler_hyperbolic(M, e)
            assert e * math.sinh(H) - H == pytest.approx(M, abs=1e-8)

def test_circular_orbit_radius_speed_and_period():
    r = R + 100000.0
    orbit = Orbit.circular(MU, r)
    assert orbit.eccentricity < 1e-9
    assert orbit.period == pytest.approx(2.0 * math.pi * math.sqrt(r ** 3 / MU))
    for ut in (0.0, 300.0, 1234.5, 5000.0):
        assert orbit.radius_at(ut) == pytest.approx(r)
        assert np.linalg.norm(orbit.position_at(ut)) == pytest.approx(r)
        assert np.linalg.norm(orbit.velocity_at(ut)) == pytest.approx(math.sqrt(MU / r))

def test_state_vector_reproduced_at_epoch():
    r0 = np.array([R + 80000.0, 1000.0, -500.0])
    v0 = np.array([150.0, 2300.0, 120.0])
    orbit = Orbit(MU, r0, v0, epoch=42.0)
    np.testing.assert_allclose(orbit.position_at(42.0), r0, rtol=1e-9, atol=1e-4)
    np.testing.assert_allclose(orbit.velocity_at(42.0), v0, rtol=1e-9, atol=1e-5)

def test_apsides(elliptic):
    a = R + 400000.0
    assert elliptic.periapsis_radius == pytest.approx(a * 0.7)
    assert elliptic.apoapsis_radius == pytest.approx(a * 1.3)
    assert elliptic.semi_major_axis == pytest.approx(a)
    assert elliptic.inclination == pytest.approx(0.2)

def test_energy_conserved_along_orbit(elliptic):
    e0 = specific_energy(elliptic, 50.0)
    assert e0 == pytest.approx(-MU / (2.0 * elliptic.semi_major_axis))
    for ut in np.linspace(0.0, 3.0 * elliptic.period, 17):
        assert specific_energy(elliptic, ut) == pytest.approx(e0, rel=1e-9)

def test_periodicity(elliptic):
    p0 = elliptic.position_at(123.0)
    p1 = elliptic.position_at(123.0 + elliptic.period)
    np.testing.assert_allclose(p1, p0, rtol=1e-8, atol=1e-3)

def test_radius_matches_position_norm(elliptic):
    for ut in (0.0, 777.0, 2222.0):
        assert elliptic.radius_at(ut) == pytest.approx(np.linalg.norm(elliptic.position_at(ut)))

def test_hyperbolic_orbit():
    r = R + 200000.0
    v_escape = math.sqrt(2.0 * MU / r)
    orbit = Orbit(MU, [r, 0.0, 0.0], [0.0, 1.2 * v_escape, 0.0])
    assert not orbit.is_closed
    assert orbit.eccentricity > 1.0
    assert orbit.semi_major_axis < 0.0
    assert math.isinf(orbit.period)
    assert math.isinf(orbit.apoapsis_radius)
    assert orbit.periapsis_radius == pytest.approx(r)
    radii = [orbit.radius_at(t) for t in (0.0, 600.0, 1200.0, 2400.0)]
    assert radii == sorted(radii)
    e0 = specific_energy(orbit, 0.0)
    assert specific_energy(orbit, 2400.0) == pytest.approx(e0, rel=1e-8)

def test_invalid_mu():
    with pytest.raises(ValueError):
        Orbit(0.0, [R, 0.0, 0.0], [0.0, 2000.0, 0.0])
    with pytest.raises(ValueError):
        Orbit(-MU, [R, 0.0, 0.0], [0.0, 2000.0, 0.0])

def test_degenerate_state_vectors():
    with pytest.raises(ValueError):
        Orbit(MU, [0.0, 0.0, 0.0], [0.0, 2000.0, 0.0])
    with pytest.raises(ValueError):
        Orbit(MU, [R, 0.0, 0.0], [-50.0, 0.0, 0.0])  # radial fall
    with pytest.raises(ValueError):
        Orbit(MU, [R, 0.0], [0.0, 2000.0])

def test_from_elements_rejects_mismatched_axis():
    with pytest.raises(ValueError):
        Orbit.from_elements(MU, -1.0e6, 0.5)
    with pytest.raises(ValueError):
        Orbit.from_elements(MU, 1.0e6, 1.5)
