"""
Mathematical utilities for sensor fusion calculations.
"""

from .utils import normalize_angle, polar_to_cartesian, cartesian_to_polar
from .constants import *

__all__ = ["normalize_angle", "polar_to_cartesian", "cartesian_to_polar"]
