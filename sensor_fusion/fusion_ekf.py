"""
Radar/laser fusion controller.

Owns the Kalman filter, seeds it from the first measurement, derives the
elapsed time from measurement timestamps and dispatches each measurement
to the linear (laser) or extended (radar) update.

Cycle:
    Uninitialized --first measurement--> Tracking (seed x and P, no predict/update)
    Tracking --dt in [0, max_dt]--> Tracking (refresh F and Q, predict, update)
    Tracking --dt out of range--> Uninitialized (measurement discarded)

Not reentrant. Callers sharing one instance across threads must serialize
calls to process_measurement().
"""

import logging
import numpy as np
from enum import Enum
from typing import Optional, Dict, Any
from .config import Config
from .ekf import KalmanFilter, TargetState, MotionModel, MeasurementModel
from .errors import SingularJacobianError, StaleTimestampError
from .math.constants import MICROSECONDS_PER_SECOND, STATE_DIM
from .math.utils import polar_to_cartesian
from .sensors import MeasurementPackage

logger = logging.getLogger(__name__)

class CycleOutcome(Enum):
    """What a call to FusionEKF.process_measurement() did."""
    INITIALIZED = "initialized"        # state seeded, no predict/update
    UPDATED = "updated"                # predict and update applied
    UPDATE_SKIPPED = "update_skipped"  # predict applied, radar update skipped
    RESET = "reset"                    # measurement discarded, filter uninitialized

class FusionEKF:
    """
    Sensor fusion of radar and laser measurements with an EKF.
    """
    
    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the fusion controller.
        
        Args:
            config: Optional configuration; defaults to the fixed constants
        """
        self.config = config or Config()
        
        self.is_initialized = False
        self.previous_timestamp = 0
        
        # Measurement matrices and noise
        self.H_laser = MeasurementModel.laser_jacobian_H()
        self.R_laser = np.diag(self.config.laser_noise)
        self.R_radar = np.diag(self.config.radar_noise)
        
        # Process noise intensities
        self.noise_ax = self.config.noise_ax
        self.noise_ay = self.config.noise_ay
        
        self.max_dt = self.config.max_dt_s
        self.jacobian_epsilon = self.config.jacobian_epsilon
        
        self.ekf = KalmanFilter(dim_x=STATE_DIM)
        self.ekf.P = self._initial_covariance()
        self.ekf.F = MotionModel.transition_matrix(1.0)
        
        # Statistics
        self.skipped_update_count = 0
        self.reset_count = 0
    
    def _initial_covariance(self) -> np.ndarray:
        """Prior covariance: tight on position, loose on velocity."""
        return np.diag([
            self.config.initial_position_variance,   # px variance
            self.config.initial_position_variance,   # py variance
            self.config.initial_velocity_variance,   # vx variance
            self.config.initial_velocity_variance    # vy variance
        ])
    
    def process_measurement(self, measurement_pack: MeasurementPackage) -> CycleOutcome:
        """
        Run one fusion cycle.
        
        Args:
            measurement_pack: Radar or laser measurement
            
        Returns:
            Outcome of the cycle
            
        Raises:
            SingularInnovationCovarianceError: If the update cannot invert S.
                The predicted state is kept and the timestamp is consumed.
        """
        if not self.is_initialized:
            self._initialize(measurement_pack)
            return CycleOutcome.INITIALIZED
        
        try:
            dt = self.elapsed_seconds(measurement_pack.timestamp)
        except StaleTimestampError as e:
            logger.warning(f"{e}, resetting filter")
            self.reset()
            return CycleOutcome.RESET
        
        self.previous_timestamp = measurement_pack.timestamp
        
        # Prediction
        MotionModel.set_time_step(self.ekf.F, dt)
        self.ekf.Q = MotionModel.process_noise_matrix(dt, self.noise_ax, self.noise_ay)
        self.ekf.predict()
        
        logger.debug(f"Prediction step completed, dt={dt:.3f}s")
        
        # Update
        if measurement_pack.is_radar:
            try:
                Hj = MeasurementModel.radar_jacobian(self.ekf.x, self.jacobian_epsilon)
            except SingularJacobianError as e:
                logger.warning(f"Invalid Jacobian, skipping update: {e}")
                self.skipped_update_count += 1
                return CycleOutcome.UPDATE_SKIPPED
            
            self.ekf.set_measurement_model(Hj, self.R_radar)
            self.ekf.update_ekf(measurement_pack.raw_measurements)
        else:
            self.ekf.set_measurement_model(self.H_laser, self.R_laser)
            self.ekf.update(measurement_pack.raw_measurements)
        
        return CycleOutcome.UPDATED
    
    def _initialize(self, measurement_pack: MeasurementPackage):
        """Seed the state from the first measurement."""
        z = measurement_pack.raw_measurements
        
        if measurement_pack.is_radar:
            # Range rate stands in for velocity along the bearing
            x = polar_to_cartesian(z[0], z[1], z[2])
        else:
            x = np.array([z[0], z[1], 0.0, 0.0])
        
        self.ekf.initialize(x, self._initial_covariance())
        self.previous_timestamp = measurement_pack.timestamp
        self.is_initialized = True
        
        logger.info(
            f"Filter initialized from {measurement_pack.sensor_type.name} "
            f"at t={measurement_pack.timestamp}: {self.get_current_state()}"
        )
    
    def elapsed_seconds(self, timestamp: int) -> float:
        """
        Time since the previous measurement in seconds.
        
        Raises:
            StaleTimestampError: If dt is negative or exceeds the sanity bound
        """
        dt = (timestamp - self.previous_timestamp) / MICROSECONDS_PER_SECOND
        
        if dt > self.max_dt or dt < 0.0:
            raise StaleTimestampError(dt, self.max_dt)
        
        return dt
    
    def reset(self):
        """Return to the uninitialized state; the next measurement reseeds."""
        self.is_initialized = False
        self.reset_count += 1
        
        logger.info("Fusion filter reset")
    
    @property
    def x(self) -> np.ndarray:
        """Current state vector [px, py, vx, vy]."""
        return self.ekf.x.copy()
    
    @property
    def P(self) -> np.ndarray:
        """Current state covariance."""
        return self.ekf.P.copy()
    
    def get_current_state(self) -> TargetState:
        """Get current estimated state."""
        return TargetState.from_vector(self.ekf.x, timestamp=self.previous_timestamp)
    
    def get_statistics(self) -> Dict[str, Any]:
        """Get filter statistics."""
        stats = self.ekf.get_statistics()
        stats.update({
            'initialized': self.is_initialized,
            'skipped_updates': self.skipped_update_count,
            'resets': self.reset_count
        })
        return stats
