"""
Motion and measurement models for the Extended Kalman Filter.
"""

import numpy as np
from ..errors import SingularJacobianError
from ..math.constants import JACOBIAN_EPSILON, NOISE_AX, NOISE_AY
from ..math.utils import cartesian_to_polar

class MotionModel:
    """
    Constant velocity motion model.
    
    State: [px, py, vx, vy]
    Acceleration is treated as white process noise with per-axis intensity.
    """
    
    @staticmethod
    def transition_matrix(dt: float) -> np.ndarray:
        """
        Build the state transition matrix for a time step.
        
        Args:
            dt: Time step in seconds
            
        Returns:
            4x4 transition matrix F
        """
        F = np.eye(4)
        MotionModel.set_time_step(F, dt)
        return F
    
    @staticmethod
    def set_time_step(F: np.ndarray, dt: float) -> None:
        """Rewrite the position/velocity coupling terms of F in place."""
        F[0, 2] = dt  # dpx/dvx
        F[1, 3] = dt  # dpy/dvy
    
    @staticmethod
    def process_noise_matrix(dt: float, noise_ax: float = NOISE_AX,
                             noise_ay: float = NOISE_AY) -> np.ndarray:
        """
        Compute process noise covariance matrix.
        
        Args:
            dt: Time step in seconds
            noise_ax: Acceleration noise intensity along x
            noise_ay: Acceleration noise intensity along y
            
        Returns:
            4x4 process noise covariance matrix Q
        """
        dt_2 = dt * dt
        dt_3 = dt_2 * dt
        dt_4 = dt_3 * dt
        
        return np.array([
            [dt_4 / 4 * noise_ax, 0.0, dt_3 / 2 * noise_ax, 0.0],
            [0.0, dt_4 / 4 * noise_ay, 0.0, dt_3 / 2 * noise_ay],
            [dt_3 / 2 * noise_ax, 0.0, dt_2 * noise_ax, 0.0],
            [0.0, dt_3 / 2 * noise_ay, 0.0, dt_2 * noise_ay]
        ])

class MeasurementModel:
    """
    Measurement models for laser and radar sensors.
    """
    
    @staticmethod
    def laser_measurement(state: np.ndarray) -> np.ndarray:
        """Laser directly observes position [px, py]."""
        return np.array([state[0], state[1]])
    
    @staticmethod
    def laser_jacobian_H() -> np.ndarray:
        """
        Laser measurement matrix.
        
        Returns:
            2x4 matrix H projecting state onto position
        """
        H = np.zeros((2, 4))
        H[0, 0] = 1.0
        H[1, 1] = 1.0
        return H
    
    @staticmethod
    def radar_measurement(state: np.ndarray) -> np.ndarray:
        """
        Nonlinear radar measurement function h(x).
        
        Returns:
            Expected radar measurement [rho, theta, rho_dot]
        """
        return cartesian_to_polar(state)
    
    @staticmethod
    def radar_jacobian(state: np.ndarray, epsilon: float = JACOBIAN_EPSILON) -> np.ndarray:
        """
        Jacobian of the radar measurement function evaluated at a state.
        
        Args:
            state: State vector [px, py, vx, vy]
            epsilon: Smallest accepted px² + py²
            
        Returns:
            3x4 Jacobian matrix Hj
            
        Raises:
            SingularJacobianError: If the state is too close to the origin
        """
        px, py, vx, vy = (float(v) for v in state)
        
        c1 = px * px + py * py
        if c1 < epsilon:
            raise SingularJacobianError(
                f"Radar Jacobian undefined: px^2 + py^2 = {c1:.3e} < {epsilon:.1e}"
            )
        
        c2 = np.sqrt(c1)
        c3 = c1 * c2
        
        return np.array([
            [px / c2, py / c2, 0.0, 0.0],
            [-py / c1, px / c1, 0.0, 0.0],
            [py * (vx * py - vy * px) / c3, px * (vy * px - vx * py) / c3, px / c2, py / c2]
        ])
