"""
Kalman filter core: linear prediction with linear and extended updates.
"""

import logging
import numpy as np
from typing import Optional, Dict, Any
from .models import MeasurementModel
from ..errors import SingularInnovationCovarianceError
from ..math.constants import STATE_DIM
from ..math.utils import normalize_angle

logger = logging.getLogger(__name__)

class KalmanFilter:
    """
    Kalman filter over the state [px, py, vx, vy].
    
    The caller owns the per-cycle inputs: F and Q are refreshed before
    predict(), H and R are selected before each update.
    """
    
    def __init__(self, dim_x: int = STATE_DIM):
        """
        Initialize filter matrices.
        
        Args:
            dim_x: State dimension
        """
        self.dim_x = dim_x
        
        # State vector and covariance
        self.x = np.zeros(dim_x)
        self.P = np.eye(dim_x)
        
        # Transition and process noise
        self.F = np.eye(dim_x)
        self.Q = np.zeros((dim_x, dim_x))
        
        # Active measurement matrix and noise (set per cycle)
        self.H: Optional[np.ndarray] = None
        self.R: Optional[np.ndarray] = None
        
        self._I = np.eye(dim_x)
        
        # Statistics
        self.prediction_count = 0
        self.update_count = 0
        self.ekf_update_count = 0
    
    def initialize(self, x: np.ndarray, P: np.ndarray):
        """Seed state and covariance."""
        x = np.asarray(x, dtype=float).reshape(-1)
        P = np.asarray(P, dtype=float)
        if x.shape != (self.dim_x,):
            raise ValueError(f"State vector must have {self.dim_x} elements, got {x.shape}")
        if P.shape != (self.dim_x, self.dim_x):
            raise ValueError(f"Covariance must be {self.dim_x}x{self.dim_x}, got {P.shape}")
        
        self.x = x.copy()
        self.P = P.copy()
    
    def set_measurement_model(self, H: np.ndarray, R: np.ndarray):
        """Select the measurement matrix and noise for the next update."""
        H = np.asarray(H, dtype=float)
        R = np.asarray(R, dtype=float)
        if H.ndim != 2 or H.shape[1] != self.dim_x:
            raise ValueError(f"Measurement matrix must have {self.dim_x} columns, got {H.shape}")
        if R.shape != (H.shape[0], H.shape[0]):
            raise ValueError(f"Measurement noise must be {H.shape[0]}x{H.shape[0]}, got {R.shape}")
        
        self.H = H
        self.R = R
    
    def predict(self):
        """
        Prediction step under the linear motion model.
        
        x = F * x
        P = F * P * F^T + Q
        """
        self.x = self.F @ self.x
        self.P = self.F @ self.P @ self.F.T + self.Q
        
        self.prediction_count += 1
    
    def update(self, z: np.ndarray):
        """
        Linear update step (laser).
        
        Args:
            z: Measurement vector matching the rows of H
            
        Raises:
            SingularInnovationCovarianceError: If S cannot be inverted
        """
        self._check_measurement_model()
        
        z = np.asarray(z, dtype=float).reshape(-1)
        y = z - self.H @ self.x
        
        self._correct(y)
        self.update_count += 1
    
    def update_ekf(self, z: np.ndarray):
        """
        Extended update step (radar).
        
        The innovation uses the nonlinear measurement function h(x); H must
        hold the Jacobian evaluated at the current (pre-update) state.
        
        Args:
            z: Radar measurement [rho, theta, rho_dot]
            
        Raises:
            SingularInnovationCovarianceError: If S cannot be inverted
        """
        self._check_measurement_model()
        
        z = np.asarray(z, dtype=float).reshape(-1)
        y = z - MeasurementModel.radar_measurement(self.x)
        
        # Bearing residual must not wrap around
        y[1] = normalize_angle(y[1])
        
        self._correct(y)
        self.ekf_update_count += 1
    
    def _correct(self, y: np.ndarray):
        """Apply the Kalman gain to an innovation vector."""
        H, R = self.H, self.R
        PHt = self.P @ H.T
        
        # Innovation covariance
        S = H @ PHt + R
        S_inv = self._invert_innovation_covariance(S)
        
        # Kalman gain
        K = PHt @ S_inv
        
        # Update state and covariance
        self.x = self.x + K @ y
        self.P = (self._I - K @ H) @ self.P
        
        logger.debug(f"Update applied: innovation={np.linalg.norm(y):.4f}")
    
    @staticmethod
    def _invert_innovation_covariance(S: np.ndarray) -> np.ndarray:
        if not np.all(np.isfinite(S)):
            raise SingularInnovationCovarianceError("Innovation covariance contains NaN or infinite values")
        
        cond = np.linalg.cond(S)
        if not np.isfinite(cond) or cond > 1.0 / np.finfo(float).eps:
            raise SingularInnovationCovarianceError("Innovation covariance is singular")
        
        try:
            S_inv = np.linalg.inv(S)
        except np.linalg.LinAlgError as e:
            raise SingularInnovationCovarianceError(f"Innovation covariance is singular: {e}") from e
        
        if not np.all(np.isfinite(S_inv)):
            raise SingularInnovationCovarianceError("Innovation covariance inverse is not finite")
        
        return S_inv
    
    def _check_measurement_model(self):
        if self.H is None or self.R is None:
            raise ValueError("Measurement model not set; call set_measurement_model() first")
    
    def get_uncertainty(self) -> np.ndarray:
        """Get current state uncertainty (standard deviations)."""
        return np.sqrt(np.diag(self.P))
    
    def get_position_uncertainty(self) -> float:
        """Get position uncertainty (2D RMS error)."""
        pos_var = self.P[0, 0] + self.P[1, 1]
        return float(np.sqrt(pos_var))
    
    def get_statistics(self) -> Dict[str, Any]:
        """Get filter statistics."""
        return {
            'predictions': self.prediction_count,
            'laser_updates': self.update_count,
            'radar_updates': self.ekf_update_count,
            'position_uncertainty': self.get_position_uncertainty(),
            'state_uncertainty': self.get_uncertainty().tolist()
        }
