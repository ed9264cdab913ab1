"""
Tests for impact-centered kinematics.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from swing_engine.models.motion import Attitude, MotionSample, Vector3
from swing_engine.models.session import SessionBuffer
from swing_engine.services.kinematics import (
    compute_tempo,
    estimate_kinematics,
    find_impact_index,
    window_mean_degrees,
)
from swing_engine.utils.sample_data import generate_swing_samples


def ramp_buffer(pitches: list[float], yaws: list[float], peak_index: int) -> SessionBuffer:
    """Buffer whose acceleration peaks at peak_index, with per-sample attitude in degrees."""
    samples = []
    for i, (pitch, yaw) in enumerate(zip(pitches, yaws)):
        accel = 8.0 if i == peak_index else 0.5
        samples.append(MotionSample(
            timestamp=i * 0.02,
            time_offset=i * 0.02,
            user_acceleration=Vector3(0.0, accel, 0.0),
            gravity=Vector3(0.0, 0.0, -1.0),
            rotation_rate=Vector3(0.0, 0.0, 0.0),
            attitude=Attitude(0.0, math.radians(pitch), math.radians(yaw)),
        ))
    return SessionBuffer.finalized(samples)


class TestImpact:
    """Tests for impact detection."""

    def test_impact_at_peak(self):
        buffer = SessionBuffer.finalized(generate_swing_samples(peak_index=30))
        assert find_impact_index(buffer) == 30

    def test_first_maximum_wins(self):
        pitches = [0.0] * 10
        buffer = ramp_buffer(pitches, pitches, peak_index=4)
        assert find_impact_index(buffer) == 4

    def test_peak_values(self):
        buffer = SessionBuffer.finalized(generate_swing_samples(peak_g=9.2, peak_index=30))
        snapshot = estimate_kinematics(buffer)

        assert snapshot.max_acceleration == pytest.approx(9.2)
        assert snapshot.club_head_swing_speed_proxy == snapshot.max_acceleration
        assert snapshot.impact_index == 30
        assert snapshot.impact_timestamp == pytest.approx(30 * 0.02)


class TestWindows:
    """Tests for the attack-angle and swing-path averaging windows."""

    def test_attack_angle_window_is_plus_minus_five(self):
        pitches = [float(i) for i in range(30)]
        buffer = ramp_buffer(pitches, [0.0] * 30, peak_index=15)
        snapshot = estimate_kinematics(buffer)

        # mean of 10..20
        assert_allclose(snapshot.attack_angle_deg, 15.0)

    def test_swing_path_window_is_plus_minus_three(self):
        yaws = [0.0] * 30
        yaws[12] = 70.0  # inside [15-3, 15+3]
        yaws[11] = 1000.0  # just outside
        buffer = ramp_buffer([0.0] * 30, yaws, peak_index=15)
        snapshot = estimate_kinematics(buffer)

        assert_allclose(snapshot.swing_path_deg, 10.0)

    def test_window_clamped_at_start(self):
        values = np.radians(np.array([10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0]))
        # [0 - 5, 0 + 5] clamps to indices 0..5
        assert_allclose(window_mean_degrees(values, 0, 5), 35.0)

    def test_window_clamped_at_end(self):
        values = np.radians(np.array([10.0, 20.0, 30.0, 40.0]))
        assert_allclose(window_mean_degrees(values, 3, 3), 25.0)

    def test_generated_pitch_and_yaw(self):
        buffer = SessionBuffer.finalized(generate_swing_samples(pitch_deg=-4.0, yaw_deg=2.5))
        snapshot = estimate_kinematics(buffer)

        assert_allclose(snapshot.attack_angle_deg, -4.0)
        assert_allclose(snapshot.swing_path_deg, 2.5)


class TestTempo:
    """Tests for tempo."""

    def test_tempo_from_duration(self):
        buffer = SessionBuffer.finalized(generate_swing_samples(n_samples=51, sample_rate_hz=50.0))
        # 50 steps of 0.02 s = 1 s
        assert_allclose(compute_tempo(buffer), 60.0)

    def test_single_sample_tempo_is_zero(self):
        buffer = SessionBuffer.finalized(generate_swing_samples(n_samples=1))
        assert compute_tempo(buffer) == 0.0

    def test_empty_buffer(self):
        snapshot = estimate_kinematics(SessionBuffer.finalized([]))
        assert snapshot.max_acceleration == 0.0
        assert snapshot.tempo_bpm == 0.0

    def test_recompute_is_identical(self):
        buffer = SessionBuffer.finalized(generate_swing_samples(noise_g=0.2, seed=5))
        assert estimate_kinematics(buffer) == estimate_kinematics(buffer)
