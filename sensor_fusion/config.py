"""
Configuration manager for the sensor fusion filter.
"""

import copy
import json
import logging
from typing import Dict, Any, List, Optional
from .math.constants import (
    LASER_NOISE_VARIANCE, RADAR_RANGE_NOISE_VARIANCE, RADAR_BEARING_NOISE_VARIANCE,
    RADAR_RANGE_RATE_NOISE_VARIANCE, NOISE_AX, NOISE_AY, MAX_DT_S, JACOBIAN_EPSILON,
    INITIAL_POSITION_VARIANCE, INITIAL_VELOCITY_VARIANCE
)

logger = logging.getLogger(__name__)

class Config:
    """Configuration manager for the fusion filter."""
    
    DEFAULT_CONFIG = {
        # Process noise intensities
        "process_noise": {
            "noise_ax": NOISE_AX,
            "noise_ay": NOISE_AY
        },
        
        # Measurement noise variances (diagonal of R)
        "measurement_noise": {
            "laser": [LASER_NOISE_VARIANCE, LASER_NOISE_VARIANCE],
            "radar": [
                RADAR_RANGE_NOISE_VARIANCE,
                RADAR_BEARING_NOISE_VARIANCE,
                RADAR_RANGE_RATE_NOISE_VARIANCE
            ]
        },
        
        # Prior covariance on (re)initialization
        "initial_covariance": {
            "position": INITIAL_POSITION_VARIANCE,
            "velocity": INITIAL_VELOCITY_VARIANCE
        },
        
        # Sanity bounds
        "max_dt_s": MAX_DT_S,
        "jacobian_epsilon": JACOBIAN_EPSILON,
        
        # Logging
        "log_level": "INFO"
    }
    
    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.
        
        Args:
            config_file: Optional path to a JSON file overriding the defaults
        """
        self.config_file = config_file
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        
        if config_file is not None:
            self.load_config()
    
    def load_config(self, config_file: Optional[str] = None):
        """
        Load configuration from file and merge it over the current values.
        
        Raises:
            FileNotFoundError: If the file does not exist
            json.JSONDecodeError: If the file is not valid JSON
            ValueError: If the file does not hold a JSON object
        """
        path = config_file or self.config_file
        if path is None:
            raise ValueError("No configuration file given")
        
        with open(path, 'r') as f:
            file_config = json.load(f)
        
        if not isinstance(file_config, dict):
            raise ValueError(f"Configuration in {path} must be a JSON object")
        
        # File config overrides defaults
        self._merge_config(self.config, file_config)
        self.config_file = path
        
        logger.info(f"Configuration loaded from {path}")
    
    def save_config(self, config_file: Optional[str] = None):
        """Save current configuration to file."""
        path = config_file or self.config_file
        if path is None:
            raise ValueError("No configuration file given")
        
        with open(path, 'w') as f:
            json.dump(self.config, f, indent=2)
        
        logger.info(f"Configuration saved to {path}")
    
    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]):
        """
        Merge override into base in place.
        
        Nested sections (e.g. "measurement_noise") are merged key by key, so a
        file may override "measurement_noise.radar" and keep the laser values.
        Lists such as the noise diagonals are replaced whole.
        """
        for key, value in override.items():
            section = base.get(key)
            if isinstance(section, dict) and isinstance(value, dict):
                self._merge_config(section, value)
            else:
                base[key] = value
    
    def get(self, key: str, default=None):
        """
        Look up a value by dotted key, e.g. "initial_covariance.position".
        
        Returns default when any part of the path is missing.
        """
        node = self.config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node
    
    def set(self, key: str, value: Any):
        """
        Set a value by dotted key, e.g. "process_noise.noise_ax".
        
        Missing sections are created.
        
        Raises:
            ValueError: If a section in the path already holds a plain value
        """
        *sections, leaf = key.split('.')
        node = self.config
        
        for part in sections:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ValueError(f"Cannot set {key!r}: {part!r} is not a section")
        
        node[leaf] = value
    
    @property
    def noise_ax(self) -> float:
        return float(self.config["process_noise"]["noise_ax"])
    
    @property
    def noise_ay(self) -> float:
        return float(self.config["process_noise"]["noise_ay"])
    
    @property
    def laser_noise(self) -> List[float]:
        return [float(v) for v in self.config["measurement_noise"]["laser"]]
    
    @property
    def radar_noise(self) -> List[float]:
        return [float(v) for v in self.config["measurement_noise"]["radar"]]
    
    @property
    def initial_position_variance(self) -> float:
        return float(self.config["initial_covariance"]["position"])
    
    @property
    def initial_velocity_variance(self) -> float:
        return float(self.config["initial_covariance"]["velocity"])
    
    @property
    def max_dt_s(self) -> float:
        return float(self.config["max_dt_s"])
    
    @property
    def jacobian_epsilon(self) -> float:
        return float(self.config["jacobian_epsilon"])
    
    @property
    def log_level(self) -> str:
        return self.config["log_level"]
