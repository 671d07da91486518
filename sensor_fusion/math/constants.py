"""
Fixed constants for radar/laser sensor fusion.
"""

import math

# Mathematical constants
PI = math.pi
TWO_PI = 2 * math.pi

# Timestamps are integer microseconds
MICROSECONDS_PER_SECOND = 1000000.0

# Laser measurement noise (variance of x and y, m²)
LASER_NOISE_VARIANCE = 0.0225

# Radar measurement noise
RADAR_RANGE_NOISE_VARIANCE = 0.09        # rho (m²)
RADAR_BEARING_NOISE_VARIANCE = 0.0009    # theta (rad²)
RADAR_RANGE_RATE_NOISE_VARIANCE = 0.09   # rho_dot (m²/s²)

# Process noise intensities (acceleration variance, m²/s⁴)
NOISE_AX = 9.0
NOISE_AY = 9.0

# Largest accepted gap between consecutive measurements before the filter resets
MAX_DT_S = 60.0

# px² + py² below this makes the radar Jacobian undefined
JACOBIAN_EPSILON = 1e-4

# Prior covariance used when the filter is seeded
INITIAL_POSITION_VARIANCE = 1.0
INITIAL_VELOCITY_VARIANCE = 1000.0

# State dimension [px, py, vx, vy]
STATE_DIM = 4
LASER_MEASUREMENT_DIM = 2
RADAR_MEASUREMENT_DIM = 3
