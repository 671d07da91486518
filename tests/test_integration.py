#!/usr/bin/env python3
"""
Integration tests for the radar/laser fusion controller.
"""

import unittest
import math
import numpy as np
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sensor_fusion import (
    Config, CycleOutcome, FusionEKF, MeasurementPackage, SensorType,
    SingularInnovationCovarianceError, TargetState
)
from sensor_fusion.ekf.models import MotionModel
from sensor_fusion.math.utils import cartesian_to_polar

PRIOR = np.diag([1.0, 1.0, 1000.0, 1000.0])

class TestFusionInitialization(unittest.TestCase):
    """Test seeding the filter from the first measurement."""
    
    def setUp(self):
        self.fusion = FusionEKF()
    
    def test_starts_uninitialized(self):
        self.assertFalse(self.fusion.is_initialized)
        self.assertEqual(self.fusion.previous_timestamp, 0)
    
    def test_first_laser_measurement(self):
        """Laser seeds position with zero velocity and the fixed prior."""
        outcome = self.fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 0))
        
        self.assertIs(outcome, CycleOutcome.INITIALIZED)
        self.assertTrue(self.fusion.is_initialized)
        np.testing.assert_array_equal(self.fusion.x, [1.0, 1.0, 0.0, 0.0])
        np.testing.assert_array_equal(self.fusion.P, PRIOR)
        self.assertEqual(self.fusion.previous_timestamp, 0)
        
        # No predict or update on the seeding cycle
        stats = self.fusion.get_statistics()
        self.assertEqual(stats['predictions'], 0)
        self.assertEqual(stats['laser_updates'], 0)
    
    def test_first_radar_measurement(self):
        """Radar seeds from the polar to Cartesian conversion."""
        outcome = self.fusion.process_measurement(MeasurementPackage.radar(5.0, 0.0, 0.0, 0))
        
        self.assertIs(outcome, CycleOutcome.INITIALIZED)
        np.testing.assert_array_equal(self.fusion.x, [5.0, 0.0, 0.0, 0.0])
        np.testing.assert_array_equal(self.fusion.P, PRIOR)
    
    def test_radar_seed_projects_range_rate_along_bearing(self):
        self.fusion.process_measurement(MeasurementPackage.radar(2.0, math.pi / 2, 3.0, 7))
        
        np.testing.assert_allclose(self.fusion.x, [0.0, 2.0, 0.0, 3.0], atol=1e-12)
        self.assertEqual(self.fusion.previous_timestamp, 7)

class TestFusionTracking(unittest.TestCase):
    """Test predict/update cycles."""
    
    def setUp(self):
        self.fusion = FusionEKF()
        self.fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 0))
    
    def test_second_laser_measurement_blends(self):
        """Estimate lies strictly between prediction and measurement."""
        outcome = self.fusion.process_measurement(MeasurementPackage.laser(1.1, 1.1, 100000))
        
        self.assertIs(outcome, CycleOutcome.UPDATED)
        self.assertEqual(self.fusion.previous_timestamp, 100000)
        
        F = self.fusion.ekf.F
        self.assertAlmostEqual(F[0, 2], 0.1)
        self.assertAlmostEqual(F[1, 3], 0.1)
        
        # Prediction with zero velocity stays at (1.0, 1.0)
        for i in range(2):
            self.assertGreater(self.fusion.x[i], 1.0)
            self.assertLess(self.fusion.x[i], 1.1)
        
        # Velocity picks up the motion
        self.assertGreater(self.fusion.x[2], 0.0)
        self.assertGreater(self.fusion.x[3], 0.0)
        
        np.testing.assert_allclose(self.fusion.P, self.fusion.P.T, atol=1e-9)
        
        stats = self.fusion.get_statistics()
        self.assertEqual(stats['predictions'], 1)
        self.assertEqual(stats['laser_updates'], 1)
    
    def test_radar_measurement_updates(self):
        rho, theta, rho_dot = cartesian_to_polar(np.array([1.05, 1.02, 0.5, 0.2]))
        outcome = self.fusion.process_measurement(
            MeasurementPackage.radar(rho, theta, rho_dot, 100000)
        )
        
        self.assertIs(outcome, CycleOutcome.UPDATED)
        self.assertEqual(self.fusion.get_statistics()['radar_updates'], 1)
        self.assertTrue(np.all(np.isfinite(self.fusion.x)))
    
    def test_stale_timestamp_resets(self):
        """A gap over 60 s discards the measurement and resets."""
        x_before = self.fusion.x
        P_before = self.fusion.P
        
        with self.assertLogs('sensor_fusion.fusion_ekf', level='WARNING'):
            outcome = self.fusion.process_measurement(MeasurementPackage.laser(9.0, 9.0, 120000000))
        
        self.assertIs(outcome, CycleOutcome.RESET)
        self.assertFalse(self.fusion.is_initialized)
        np.testing.assert_array_equal(self.fusion.x, x_before)
        np.testing.assert_array_equal(self.fusion.P, P_before)
        self.assertEqual(self.fusion.get_statistics()['predictions'], 0)
        
        # Next measurement reseeds
        outcome = self.fusion.process_measurement(MeasurementPackage.laser(5.0, 5.0, 120100000))
        
        self.assertIs(outcome, CycleOutcome.INITIALIZED)
        self.assertTrue(self.fusion.is_initialized)
        np.testing.assert_array_equal(self.fusion.x, [5.0, 5.0, 0.0, 0.0])
        self.assertEqual(self.fusion.previous_timestamp, 120100000)
        self.assertEqual(self.fusion.get_statistics()['resets'], 1)
    
    def test_radar_with_huge_bearing_completes(self):
        """A bearing many turns away is wrapped, not looped over."""
        for theta in (1e17, -1e17):
            with self.subTest(theta=theta):
                fusion = FusionEKF()
                fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 0))
                
                outcome = fusion.process_measurement(MeasurementPackage.radar(1.4, theta, 0.0, 100000))
                
                self.assertIs(outcome, CycleOutcome.UPDATED)
                self.assertTrue(np.all(np.isfinite(fusion.x)))
    
    def test_max_dt_accepted(self):
        outcome = self.fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 60000000))
        self.assertIs(outcome, CycleOutcome.UPDATED)
    
    def test_out_of_order_timestamp_resets(self):
        self.fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 1000000))
        outcome = self.fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 500000))
        
        self.assertIs(outcome, CycleOutcome.RESET)
        self.assertFalse(self.fusion.is_initialized)
    
    def test_radar_at_origin_skips_update(self):
        """Predicted state at the origin keeps the pure prediction."""
        fusion = FusionEKF()
        fusion.process_measurement(MeasurementPackage.laser(0.0, 0.0, 0))
        
        with self.assertLogs('sensor_fusion.fusion_ekf', level='WARNING'):
            outcome = fusion.process_measurement(MeasurementPackage.radar(1.0, 0.5, 0.1, 100000))
        
        self.assertIs(outcome, CycleOutcome.UPDATE_SKIPPED)
        self.assertTrue(fusion.is_initialized)
        
        F = MotionModel.transition_matrix(0.1)
        Q = MotionModel.process_noise_matrix(0.1)
        np.testing.assert_array_equal(fusion.x, np.zeros(4))
        np.testing.assert_allclose(fusion.P, F @ PRIOR @ F.T + Q)
        
        stats = fusion.get_statistics()
        self.assertEqual(stats['predictions'], 1)
        self.assertEqual(stats['radar_updates'], 0)
        self.assertEqual(stats['skipped_updates'], 1)
        
        # Tracking continues on the next cycle
        outcome = fusion.process_measurement(MeasurementPackage.laser(0.2, 0.1, 200000))
        self.assertIs(outcome, CycleOutcome.UPDATED)
    
    def test_singular_innovation_covariance_propagates(self):
        """Inversion failure is surfaced, not turned into NaN state."""
        config = Config()
        config.set("initial_covariance.position", 0.0)
        config.set("initial_covariance.velocity", 0.0)
        config.set("process_noise.noise_ax", 0.0)
        config.set("process_noise.noise_ay", 0.0)
        config.set("measurement_noise.laser", [0.0, 0.0])
        
        fusion = FusionEKF(config)
        fusion.process_measurement(MeasurementPackage.laser(1.0, 1.0, 0))
        
        with self.assertRaises(SingularInnovationCovarianceError):
            fusion.process_measurement(MeasurementPackage.laser(1.1, 1.1, 100000))
        
        np.testing.assert_array_equal(fusion.x, [1.0, 1.0, 0.0, 0.0])
        self.assertTrue(fusion.is_initialized)
        self.assertEqual(fusion.previous_timestamp, 100000)
    
    def test_explicit_reset(self):
        self.fusion.reset()
        
        self.assertFalse(self.fusion.is_initialized)
        
        outcome = self.fusion.process_measurement(MeasurementPackage.radar(5.0, 0.0, 0.0, 50))
        self.assertIs(outcome, CycleOutcome.INITIALIZED)
        np.testing.assert_array_equal(self.fusion.x, [5.0, 0.0, 0.0, 0.0])
    
    def test_state_accessors_return_copies(self):
        x = self.fusion.x
        x[0] = 100.0
        
        self.assertEqual(self.fusion.x[0], 1.0)
        
        state = self.fusion.get_current_state()
        self.assertIsInstance(state, TargetState)
        self.assertEqual(state.px, 1.0)
        self.assertEqual(state.timestamp, 0)

class TestFusionConvergence(unittest.TestCase):
    """Test tracking a constant velocity target with both sensors."""
    
    def test_interleaved_sensors_converge(self):
        fusion = FusionEKF()
        start = np.array([2.0, 1.0])
        velocity = np.array([1.0, 0.5])
        
        step_us = 50000
        for k in range(201):
            timestamp = k * step_us
            t = timestamp / 1e6
            position = start + velocity * t
            
            if k % 2 == 0:
                measurement = MeasurementPackage(SensorType.LASER, position, timestamp)
            else:
                truth = np.concatenate([position, velocity])
                measurement = MeasurementPackage(SensorType.RADAR, cartesian_to_polar(truth), timestamp)
            
            outcome = fusion.process_measurement(measurement)
            self.assertIn(outcome, (CycleOutcome.INITIALIZED, CycleOutcome.UPDATED))
        
        final_position = start + velocity * 10.0
        
        np.testing.assert_allclose(fusion.x[:2], final_position, atol=0.05)
        np.testing.assert_allclose(fusion.x[2:], velocity, atol=0.1)
        
        P = fusion.P
        np.testing.assert_allclose(P, P.T, atol=1e-9)
        self.assertTrue(np.all(np.linalg.eigvalsh(0.5 * (P + P.T)) > 0))
        
        stats = fusion.get_statistics()
        self.assertEqual(stats['predictions'], 200)
        self.assertEqual(stats['laser_updates'], 100)
        self.assertEqual(stats['radar_updates'], 100)

if __name__ == '__main__':
    unittest.main()
