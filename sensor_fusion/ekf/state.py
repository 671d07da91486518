"""
Target state representation for the EKF.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

@dataclass
class TargetState:
    """
    Represents the tracked object's estimated state.
    
    State vector: [px, py, vx, vy]
    - px, py: Position in meters (fixed Cartesian frame)
    - vx, vy: Velocity in m/s (fixed Cartesian frame)
    """
    
    # Position (meters)
    px: float = 0.0
    py: float = 0.0
    
    # Velocity (m/s)
    vx: float = 0.0
    vy: float = 0.0
    
    # Timestamp of the measurement that produced this estimate (microseconds)
    timestamp: Optional[int] = None
    
    @property
    def state_vector(self) -> np.ndarray:
        """Get state as numpy vector."""
        return np.array([self.px, self.py, self.vx, self.vy])
    
    @state_vector.setter
    def state_vector(self, vector: np.ndarray):
        """Set state from numpy vector."""
        if len(vector) != 4:
            raise ValueError("State vector must have 4 elements")
            
        self.px = float(vector[0])
        self.py = float(vector[1])
        self.vx = float(vector[2])
        self.vy = float(vector[3])
    
    @classmethod
    def from_vector(cls, vector: np.ndarray, timestamp: Optional[int] = None) -> 'TargetState':
        state = cls(timestamp=timestamp)
        state.state_vector = vector
        return state
    
    @property
    def position(self) -> np.ndarray:
        """Get position as [px, py] vector."""
        return np.array([self.px, self.py])
    
    @property
    def velocity(self) -> np.ndarray:
        """Get velocity as [vx, vy] vector."""
        return np.array([self.vx, self.vy])
    
    @property
    def speed(self) -> float:
        """Get target speed in m/s."""
        return float(np.hypot(self.vx, self.vy))
    
    def copy(self) -> 'TargetState':
        """Create a copy of the state."""
        return TargetState(
            px=self.px,
            py=self.py,
            vx=self.vx,
            vy=self.vy,
            timestamp=self.timestamp
        )
    
    def __str__(self) -> str:
        return (
            f"TargetState(pos=[{self.px:.3f}, {self.py:.3f}], "
            f"vel=[{self.vx:.3f}, {self.vy:.3f}])"
        )
