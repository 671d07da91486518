"""
Extended Kalman Filter implementation for radar/laser tracking.
"""

from .kalman_filter import KalmanFilter
from .state import TargetState
from .models import MotionModel, MeasurementModel

__all__ = ["KalmanFilter", "TargetState", "MotionModel", "MeasurementModel"]
