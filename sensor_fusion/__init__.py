"""
Radar and laser sensor fusion with an Extended Kalman Filter.

This package provides:
- Kalman filter core with linear and extended updates
- Radar measurement linearization
- Fusion controller sequencing asynchronous measurements
"""

__version__ = "1.0.0"

from .config import Config
from .ekf import KalmanFilter, TargetState
from .errors import (
    FusionError, SingularJacobianError, SingularInnovationCovarianceError,
    StaleTimestampError
)
from .fusion_ekf import FusionEKF, CycleOutcome
from .math import normalize_angle
from .sensors import SensorType, MeasurementPackage

__all__ = [
    "Config",
    "CycleOutcome",
    "FusionEKF",
    "FusionError",
    "KalmanFilter",
    "MeasurementPackage",
    "SensorType",
    "SingularInnovationCovarianceError",
    "SingularJacobianError",
    "StaleTimestampError",
    "TargetState",
    "normalize_angle"
]
