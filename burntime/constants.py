"""
Burn-Time Prediction - Physical Constants and Predictor Parameters

This module defines the physical constants, numerical tolerances, search
parameters and reference celestial-body values used throughout the engine.

Units follow the host game's conventions:
    - mass in metric tons (t)
    - thrust in kilonewtons (kN), so thrust / mass is in m/s^2
    - mass flow in tons per second (t/s)
    - distances in meters, times in seconds
"""

# =============================================================================
# PHYSICAL CONSTANTS
# =============================================================================

# Standard gravity used to convert specific impulse into mass flow (m/s^2).
# The host game uses 9.81 rather than 9.80665 for Isp conversions.
G0 = 9.81

# Propellant kinds treated as massless and inexhaustible for prediction
IGNORABLE_PROPELLANTS = frozenset({"ElectricCharge"})

# =============================================================================
# NUMERICAL TOLERANCES
# =============================================================================

# Net thrust (kN) below this is treated as "cannot accelerate"
ACCELERATION_EPSILON = 1e-6

# Downward acceleration (m/s^2) below this uses the linear fall model
IMPACT_ACCELERATION_EPSILON = 0.01

# Margin (m) added to clearance when checking whether a rising ship reverses
IMPACT_REVERSAL_MARGIN = 1.0

# Thrust-limit percentage below which a single-part burn never ends
THRUST_PERCENTAGE_EPSILON = 0.01

# Generic zero tolerance for vector normalisation
ZERO_TOLERANCE = 1e-12

# Eccentricity band around 1.0 treated as parabolic and nudged hyperbolic
PARABOLIC_TOLERANCE = 1e-9

# Kepler solver
KEPLER_MAX_ITERATIONS = 50
KEPLER_TOLERANCE = 1e-12

# =============================================================================
# REFRESH / THROTTLING
# =============================================================================

# Default recomputation interval for snapshots and predictors (s)
UPDATE_INTERVAL = 0.25

# =============================================================================
# IMPACT PREDICTOR
# =============================================================================

MIN_FALL_SPEED = 2.0                # m/s, slower (or rising) is not tracked
IMPACT_MAX_TIME_UNTIL = 120.0       # s, impacts further out are not reported
LARGE_VESSEL_PART_COUNT = 50        # at or above this, sample the lowest parts
LOWEST_PART_SAMPLE = 30             # number of lowest parts examined

# =============================================================================
# CLOSEST-APPROACH PREDICTOR
# =============================================================================

CLOSEST_APPROACH_DIVISIONS = 20     # samples per search pass
CLOSEST_APPROACH_ITERATIONS = 8     # search passes
HYPERBOLIC_MEAN_MOTION_UNITS = 100.0  # window = units / mean motion
CLOSEST_APPROACH_MAX_TIME_UNTIL = 900.0   # s
CLOSEST_APPROACH_MAX_DISTANCE_KM = 10.0   # km
CLOSEST_APPROACH_MIN_TARGET_DISTANCE = 200.0  # m

# Relative speeds (m/s) under which a nearby target is not tracked
CLOSE_TARGET_MIN_SPEED = 1.0
VERY_CLOSE_TARGET_MIN_SPEED = 10.0

# =============================================================================
# ATMOSPHERE-TRANSITION PREDICTOR
# =============================================================================

ATMOSPHERE_STEP = 30.0              # s between coarse samples
ATMOSPHERE_BISECTION_ROUNDS = 10
ATMOSPHERE_MAX_TIME_UNTIL_EXIT = 900.0    # s
ATMOSPHERE_MAX_TIME_UNTIL_ENTRY = 3600.0  # s

# =============================================================================
# GEOSYNC PREDICTOR
# =============================================================================

GEOSYNC_PRECISION_LIMIT = 0.05      # fraction of rotation period
GEOSYNC_SECONDS_TRANSITION = 10.0   # s, below this the offset is shown in ms
GEOSYNC_LABEL = "gsync"

# =============================================================================
# REFERENCE BODIES
# =============================================================================

# Home planet (ocean, atmosphere, rotating)
KERBIN_RADIUS = 600000.0            # m
KERBIN_MU = 3.5316e12               # m^3/s^2
KERBIN_ATMOSPHERE_DEPTH = 70000.0   # m
KERBIN_ROTATION_PERIOD = 21549.425  # s
KERBIN_SOI = 84159286.0             # m
KERBIN_SAFE_ALTITUDE = 70000.0      # m, lowest altitude for on-rails warp

# Airless moon (no ocean, tidally locked)
MUN_RADIUS = 200000.0               # m
MUN_MU = 6.5138398e10               # m^3/s^2
MUN_ROTATION_PERIOD = 138984.38     # s
MUN_SOI = 2429559.1                 # m
MUN_SAFE_ALTITUDE = 5000.0          # m

# =============================================================================
# PARAMETER SUMMARY (for logging)
# =============================================================================

def get_parameter_summary() -> str:
    """Return a formatted summary of the key predictor parameters."""
    return (
        f"g0={G0} m/s^2, refresh={UPDATE_INTERVAL * 1000:.0f} ms, "
        f"closest approach {CLOSEST_APPROACH_DIVISIONS}x{CLOSEST_APPROACH_ITERATIONS}, "
        f"atmosphere step={ATMOSPHERE_STEP:.0f} s / {ATMOSPHERE_BISECTION_ROUNDS} rounds"
    )
