"""
Mathematical utility functions for polar/Cartesian sensor geometry.
"""

import numpy as np
import math
from .constants import PI, TWO_PI

def normalize_angle(angle):
    """
    Normalize angle to (-pi, pi] range.
    
    Args:
        angle (float): Angle in radians
        
    Returns:
        float: Normalized angle in (-pi, pi]
    """
    angle = math.remainder(angle, TWO_PI)
    
    # remainder() keeps -pi; the residual convention is (-pi, pi]
    if angle <= -PI:
        angle += TWO_PI
    return angle

def polar_to_cartesian(rho, theta, rho_dot):
    """
    Convert a radar measurement to a Cartesian state [px, py, vx, vy].
    
    The velocity is the range rate projected along the bearing. This is only
    exact for purely radial motion; the tangential component is unobserved.
    
    Args:
        rho (float): Range in meters
        theta (float): Bearing in radians
        rho_dot (float): Range rate in m/s
        
    Returns:
        np.ndarray: State vector [px, py, vx, vy]
    """
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    
    return np.array([
        rho * cos_t,
        rho * sin_t,
        rho_dot * cos_t,
        rho_dot * sin_t
    ])

def cartesian_to_polar(state):
    """
    Map a Cartesian state to radar measurement space.
    
    Args:
        state (np.ndarray): State vector [px, py, vx, vy]
        
    Returns:
        np.ndarray: Expected radar measurement [rho, theta, rho_dot]
    """
    px, py, vx, vy = state
    
    rho = math.sqrt(px * px + py * py)
    theta = math.atan2(py, px)
    
    # Range rate is undefined at the origin
    if rho == 0.0:
        rho_dot = 0.0
    else:
        rho_dot = (px * vx + py * vy) / rho
    
    return np.array([rho, theta, rho_dot])
