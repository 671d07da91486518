"""
Exceptions raised by the sensor fusion filter.
"""

import numpy as np


class FusionError(Exception):
    """Base class for sensor fusion errors."""


class SingularJacobianError(FusionError, ValueError):
    """
    Radar Jacobian is undefined because the state is too close to the origin.
    
    Recoverable: the radar update for the current cycle is skipped.
    """


class SingularInnovationCovarianceError(FusionError, np.linalg.LinAlgError):
    """
    Innovation covariance S could not be inverted.
    
    Fatal for the current cycle; the filter state is left untouched.
    """


class StaleTimestampError(FusionError):
    """
    Elapsed time between measurements is outside the accepted range.
    
    Recoverable: the filter is reset and reseeds on the next measurement.
    """

    def __init__(self, dt: float, max_dt: float):
        self.dt = dt
        self.max_dt = max_dt
        super().__init__(f"Elapsed time {dt:.6f}s outside [0, {max_dt:.1f}]s")
