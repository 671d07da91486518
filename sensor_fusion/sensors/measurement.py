"""
Measurement records delivered by radar and laser sensors.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union
from ..math.constants import LASER_MEASUREMENT_DIM, RADAR_MEASUREMENT_DIM

class SensorType(Enum):
    """Sensor that produced a measurement."""
    LASER = "L"
    RADAR = "R"

    @property
    def measurement_dim(self) -> int:
        """Number of raw values this sensor reports."""
        if self is SensorType.LASER:
            return LASER_MEASUREMENT_DIM
        return RADAR_MEASUREMENT_DIM

@dataclass(frozen=True, eq=False)
class MeasurementPackage:
    """
    One timestamped sensor measurement.
    
    Raw measurements:
    - LASER: [px, py] in meters
    - RADAR: [rho, theta, rho_dot] (range m, bearing rad, range rate m/s)
    
    Timestamp is an integer in microseconds.
    """
    
    sensor_type: SensorType
    raw_measurements: Union[np.ndarray, Sequence[float]]
    timestamp: int
    
    def __post_init__(self):
        if not isinstance(self.sensor_type, SensorType):
            raise ValueError(f"Unknown sensor type: {self.sensor_type!r}")
        
        values = np.array(self.raw_measurements, dtype=float).reshape(-1)
        expected = self.sensor_type.measurement_dim
        if len(values) != expected:
            raise ValueError(
                f"{self.sensor_type.name} measurement must have {expected} elements, "
                f"got {len(values)}"
            )
        values.setflags(write=False)
        
        object.__setattr__(self, "raw_measurements", values)
        object.__setattr__(self, "timestamp", int(self.timestamp))
    
    @classmethod
    def laser(cls, px: float, py: float, timestamp: int) -> 'MeasurementPackage':
        """Build a laser measurement."""
        return cls(SensorType.LASER, [px, py], timestamp)
    
    @classmethod
    def radar(cls, rho: float, theta: float, rho_dot: float, timestamp: int) -> 'MeasurementPackage':
        """Build a radar measurement."""
        return cls(SensorType.RADAR, [rho, theta, rho_dot], timestamp)
    
    @property
    def is_radar(self) -> bool:
        return self.sensor_type is SensorType.RADAR
    
    @property
    def is_laser(self) -> bool:
        return self.sensor_type is SensorType.LASER
