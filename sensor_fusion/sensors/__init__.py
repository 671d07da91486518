"""
Sensor measurement records.
"""

from .measurement import SensorType, MeasurementPackage

__all__ = ["SensorType", "MeasurementPackage"]
