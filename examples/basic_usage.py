#!/usr/bin/env python3
"""
Basic usage example of the radar/laser fusion filter.

Simulates a target moving on a circle, feeds interleaved noisy laser and
radar measurements through the filter and logs the estimate.
"""

import sys
import os
import logging
import numpy as np

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sensor_fusion import Config, CycleOutcome, FusionEKF, MeasurementPackage, SensorType
from sensor_fusion.math import cartesian_to_polar

logger = logging.getLogger("basic_usage")

def simulate_target_motion(duration=30, dt=0.05, seed=0):
    """
    Simulate a target moving on a circle.
    
    Args:
        duration: Simulation duration in seconds
        dt: Time between measurements in seconds
        seed: Random seed for measurement noise
        
    Yields:
        (truth, measurement) tuples, truth being [px, py, vx, vy]
    """
    rng = np.random.default_rng(seed)
    
    # Target motion parameters
    speed = 5.0  # m/s
    radius = 20.0  # meters
    angular_velocity = speed / radius  # rad/s
    center = np.array([25.0, 5.0])
    
    # Sensor noise (standard deviations)
    laser_noise = 0.15
    radar_noise = np.array([0.3, 0.03, 0.3])
    
    steps = int(duration / dt)
    for k in range(steps):
        t = k * dt
        timestamp = int(round(t * 1e6))
        
        angle = angular_velocity * t
        truth = np.array([
            center[0] + radius * np.cos(angle),
            center[1] + radius * np.sin(angle),
            -speed * np.sin(angle),
            speed * np.cos(angle)
        ])
        
        # Alternate laser and radar
        if k % 2 == 0:
            z = truth[:2] + rng.normal(0, laser_noise, size=2)
            measurement = MeasurementPackage(SensorType.LASER, z, timestamp)
        else:
            z = cartesian_to_polar(truth) + rng.normal(0, 1, size=3) * radar_noise
            measurement = MeasurementPackage(SensorType.RADAR, z, timestamp)
        
        yield truth, measurement

def main():
    """Main example function."""
    config = Config(sys.argv[1]) if len(sys.argv) > 1 else Config()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    
    fusion = FusionEKF(config)
    
    logger.info("Starting simulation (circular motion, 30 seconds)...")
    
    last_log_time = 0
    log_interval = 5000000  # Log status every 5 seconds
    
    for truth, measurement in simulate_target_motion():
        outcome = fusion.process_measurement(measurement)
        
        if outcome is CycleOutcome.UPDATED and measurement.timestamp - last_log_time >= log_interval:
            log_status(fusion, truth)
            last_log_time = measurement.timestamp
    
    logger.info("Simulation completed")
    
    # Final statistics
    final_stats = fusion.get_statistics()
    logger.info(f"Predictions: {final_stats['predictions']}")
    logger.info(f"Laser updates: {final_stats['laser_updates']}")
    logger.info(f"Radar updates: {final_stats['radar_updates']}")
    logger.info(f"Skipped updates: {final_stats['skipped_updates']}")
    logger.info(f"Final position uncertainty: {final_stats['position_uncertainty']:.3f} m")

def log_status(fusion: FusionEKF, truth: np.ndarray):
    """Log current estimate next to the true state."""
    state = fusion.get_current_state()
    
    logger.info(f"Time: {state.timestamp / 1e6:.1f}s")
    logger.info(f"  Estimate: pos=[{state.px:6.2f}, {state.py:6.2f}] m  vel=[{state.vx:5.2f}, {state.vy:5.2f}] m/s")
    logger.info(f"  Truth:    pos=[{truth[0]:6.2f}, {truth[1]:6.2f}] m  vel=[{truth[2]:5.2f}, {truth[3]:5.2f}] m/s")
    logger.info(f"  Uncertainty: {fusion.ekf.get_position_uncertainty():5.3f} m")

if __name__ == "__main__":
    main()
