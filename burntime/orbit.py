"""
Burn-Time Prediction - Two-Body Orbit Model

Keplerian conic propagation (elliptic and hyperbolic) around a point-mass
reference body. All vectors are body-centred inertial, in meters and m/s.

The orbit is anchored by a state vector at an epoch (universal time). The
perifocal basis (P toward periapsis, Q along the direction of motion at
periapsis, W along the angular momentum) is built once at construction, so
evaluating a position is a Kepler solve plus one basis combination.

For circular orbits periapsis is undefined; P is then taken along the epoch
position so the epoch true anomaly is zero.
"""

import math

import numpy as np

from . import constants as C


def solve_kepler_elliptic(mean_anomaly: float, e: float) -> float:
    """
    Solve M = E - e*sin(E) for the eccentric anomaly E (Newton-Raphson).

    The mean anomaly is wrapped to [-pi, pi) first; the result is relative to
    the wrapped value.
    """
    m = (mean_anomaly + math.pi) % (2.0 * math.pi) - math.pi
    if e < C.ZERO_TOLERANCE:
        return m
    E = m if e < 0.8 else math.copysign(math.pi, m)
    for _ in range(C.KEPLER_MAX_ITERATIONS):
        f = E - e * math.sin(E) - m
        fp = 1.0 - e * math.cos(E)
        dE = -f / max(fp, C.ZERO_TOLERANCE)
        E += dE
        if abs(dE) < C.KEPLER_TOLERANCE:
            break
    return E


def solve_kepler_hyperbolic(mean_anomaly: float, e: float) -> float:
    """Solve M = e*sinh(H) - H for the hyperbolic anomaly H (Newton-Raphson)."""
    m = mean_anomaly
    H = math.copysign(math.log(2.0 * abs(m) / e + 1.8), m) if m != 0.0 else 0.0
    for _ in range(C.KEPLER_MAX_ITERATIONS):
        f = e * math.sinh(H) - H - m
        fp = e * math.cosh(H) - 1.0
        dH = -f / max(fp, C.ZERO_TOLERANCE)
        H += dH
        if abs(dH) < C.KEPLER_TOLERANCE * max(1.0, abs(H)):
            break
    return H


class Orbit:
    """
    A Keplerian orbit around a body with gravitational parameter `mu`.

    Args:
        mu: Gravitational parameter of the reference body (m^3/s^2)
        position: Body-centred position at epoch (m) [3]
        velocity: Body-centred velocity at epoch (m/s) [3]
        epoch: Universal time of the state vector (s)

    Raises:
        ValueError: if mu is not positive, or the state vector has zero
            radius or zero angular momentum (radial trajectory).
    """

    def __init__(self, mu: float, position, velocity, epoch: float = 0.0):
        if not mu > 0.0:
            raise ValueError(f"Gravitational parameter must be positive, got {mu}")
        r0 = np.asarray(position, dtype=np.float64)
        v0 = np.asarray(velocity, dtype=np.float64)
        if r0.shape != (3,) or v0.shape != (3,):
            raise ValueError("Position and velocity must be 3-vectors")
        r0_norm = float(np.linalg.norm(r0))
        if r0_norm < C.ZERO_TOLERANCE:
            raise ValueError("Orbit position must be non-zero")
        h = np.cross(r0, v0)
        h_norm = float(np.linalg.norm(h))
        if h_norm < C.ZERO_TOLERANCE:
            raise ValueError("Orbit has no angular momentum (radial trajectory)")

        self.mu = float(mu)
        self.epoch = float(epoch)
        self._r0 = r0
        self._v0 = v0

        e_vec = ((np.dot(v0, v0) - mu / r0_norm) * r0 - np.dot(r0, v0) * v0) / mu
        e = float(np.linalg.norm(e_vec))
        self.semi_latus_rectum = h_norm * h_norm / mu

        w_hat = h / h_norm
        p_hat = e_vec / e if e > C.PARABOLIC_TOLERANCE else r0 / r0_norm
        if abs(e - 1.0) < C.PARABOLIC_TOLERANCE:
            e = 1.0 + C.PARABOLIC_TOLERANCE
        self.eccentricity = e
        self._p_hat = p_hat
        self._q_hat = np.cross(w_hat, p_hat)
        self._w_hat = w_hat

        p = self.semi_latus_rectum
        self.semi_major_axis = p / (1.0 - e * e)  # negative for hyperbolic
        self.mean_motion = math.sqrt(mu / abs(self.semi_major_axis) ** 3)

        nu0 = math.atan2(float(np.dot(r0, self._q_hat)), float(np.dot(r0, p_hat)))
        self.mean_anomaly_at_epoch = self._mean_anomaly_from_true(nu0)

    @classmethod
    def from_elements(cls, mu: float, semi_major_axis: float, eccentricity: float,
                      inclination: float = 0.0, raan: float = 0.0,
                      arg_periapsis: float = 0.0, mean_anomaly: float = 0.0,
                      epoch: float = 0.0) -> 'Orbit':
        """
        Build an orbit from classical elements (angles in radians).

        Hyperbolic orbits take a negative semi-major axis.
        """
        e = float(eccentricity)
        a = float(semi_major_axis)
        if e < 1.0 and a <= 0.0:
            raise ValueError("Elliptic orbit needs a positive semi-major axis")
        if e > 1.0 and a >= 0.0:
            raise ValueError("Hyperbolic orbit needs a negative semi-major axis")
        p = a * (1.0 - e * e)
        if e < 1.0:
            E = solve_kepler_elliptic(mean_anomaly, e)
            nu = math.atan2(math.sqrt(1.0 - e * e) * math.sin(E), math.cos(E) - e)
        else:
            H = solve_kepler_hyperbolic(mean_anomaly, e)
            nu = 2.0 * math.atan(math.sqrt((e + 1.0) / (e - 1.0)) * math.tanh(0.5 * H))

        r_mag = p / (1.0 + e * math.cos(nu))
        speed_scale = math.sqrt(mu / p)
        r_pqw = np.array([r_mag * math.cos(nu), r_mag * math.sin(nu), 0.0])
        v_pqw = np.array([-speed_scale * math.sin(nu), speed_scale * (e + math.cos(nu)), 0.0])
        rot = _rotation_z(raan) @ _rotation_x(inclination) @ _rotation_z(arg_periapsis)
        return cls(mu, rot @ r_pqw, rot @ v_pqw, epoch)

    @classmethod
    def circular(cls, mu: float, radius: float, phase: float = 0.0,
                 inclination: float = 0.0, epoch: float = 0.0) -> 'Orbit':
        """Circular orbit of the given radius; `phase` is the epoch angle (rad)."""
        return cls.from_elements(mu, radius, 0.0, inclination=inclination,
                                 mean_anomaly=phase, epoch=epoch)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        """True for elliptic (bound) orbits."""
        return self.eccentricity < 1.0

    @property
    def period(self) -> float:
        """Orbital period (s); infinite for open orbits."""
        if not self.is_closed:
            return math.inf
        return 2.0 * math.pi / self.mean_motion

    @property
    def periapsis_radius(self) -> float:
        return self.semi_latus_rectum / (1.0 + self.eccentricity)

    @property
    def apoapsis_radius(self) -> float:
        """Apoapsis radius (m); infinite for open orbits."""
        if not self.is_closed:
            return math.inf
        return self.semi_latus_rectum / (1.0 - self.eccentricity)

    @property
    def inclination(self) -> float:
        return math.acos(max(-1.0, min(1.0, float(self._w_hat[2]))))

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def _mean_anomaly_from_true(self, nu: float) -> float:
        e = self.eccentricity
        if e < 1.0:
            E = math.atan2(math.sqrt(1.0 - e * e) * math.sin(nu), e + math.cos(nu))
            return E - e * math.sin(E)
        H = 2.0 * math.atanh(math.sqrt((e - 1.0) / (e + 1.0)) * math.tan(0.5 * nu))
        return e * math.sinh(H) - H

    def _anomaly_at(self, ut: float) -> float:
        """Eccentric (elliptic) or hyperbolic anomaly at universal time."""
        m = self.mean_anomaly_at_epoch + self.mean_motion * (ut - self.epoch)
        if self.is_closed:
            return solve_kepler_elliptic(m, self.eccentricity)
        return solve_kepler_hyperbolic(m, self.eccentricity)

    def true_anomaly_at(self, ut: float) -> float:
        e = self.eccentricity
        anomaly = self._anomaly_at(ut)
        if self.is_closed:
            return math.atan2(math.sqrt(1.0 - e * e) * math.sin(anomaly), math.cos(anomaly) - e)
        return 2.0 * math.atan(math.sqrt((e + 1.0) / (e - 1.0)) * math.tanh(0.5 * anomaly))

    def radius_at(self, ut: float) -> float:
        """Distance from the body centre at universal time (m)."""
        anomaly = self._anomaly_at(ut)
        a = self.semi_major_axis
        if self.is_closed:
            return a * (1.0 - self.eccentricity * math.cos(anomaly))
        return a * (1.0 - self.eccentricity * math.cosh(anomaly))

    def position_at(self, ut: float) -> np.ndarray:
        """Body-centred position at universal time (m)."""
        nu = self.true_anomaly_at(ut)
        r = self.semi_latus_rectum / (1.0 + self.eccentricity * math.cos(nu))
        return r * (math.cos(nu) * self._p_hat + math.sin(nu) * self._q_hat)

    def velocity_at(self, ut: float) -> np.ndarray:
        """Body-centred velocity at universal time (m/s)."""
        nu = self.true_anomaly_at(ut)
        scale = math.sqrt(self.mu / self.semi_latus_rectum)
        return scale * (-math.sin(nu) * self._p_hat
                        + (self.eccentricity + math.cos(nu)) * self._q_hat)

    def __repr__(self) -> str:
        return (f"Orbit(a={self.semi_major_axis:.1f}m, e={self.eccentricity:.5f}, "
                f"pe={self.periapsis_radius:.1f}m, epoch={self.epoch:.1f}s)")


def _rotation_z(angle: float) -> np.ndarray:
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def _rotation_x(angle: float) -> np.ndarray:
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])
