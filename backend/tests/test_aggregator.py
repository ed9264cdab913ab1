"""
Tests for feature aggregation.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from swing_engine.errors import InsufficientData
from swing_engine.models.equipment import Handedness
from swing_engine.models.results import (
    FEATURE_CHANNELS,
    FEATURE_SCHEMA_VERSION,
    FEATURE_STATS,
    AggregatedFeatureVector,
)
from swing_engine.models.session import SessionBuffer
from swing_engine.services.aggregator import aggregate_features, channel_statistics, sample_std
from swing_engine.utils.sample_data import generate_swing_samples


@pytest.fixture
def buffer():
    return SessionBuffer.finalized(generate_swing_samples(noise_g=0.2, seed=11, pitch_deg=3.0))


class TestSampleStd:
    """Tests for the n-1 standard deviation."""

    def test_empty_is_zero(self):
        assert sample_std([]) == 0.0

    def test_single_value_is_zero(self):
        assert sample_std([4.2]) == 0.0

    def test_matches_n_minus_one_formula(self):
        values = [1.0, 2.0, 4.0, 7.0]
        mean = sum(values) / len(values)
        expected = math.sqrt(sum((v - mean) ** 2 for v in values) / (len(values) - 1))
        assert_allclose(sample_std(values), expected)

    def test_channel_statistics(self):
        stats = channel_statistics([3.0, -1.0, 2.0])
        assert stats.mean == pytest.approx(4.0 / 3.0)
        assert stats.max == 3.0
        assert stats.min == -1.0
        assert stats.std == pytest.approx(2.0816659994661326)


class TestAggregateFeatures:
    """Tests for the fixed-schema feature vector."""

    def test_shape(self, buffer):
        features = aggregate_features(buffer, "driver", Handedness.RIGHT)

        assert len(features.values) == len(FEATURE_CHANNELS) * len(FEATURE_STATS) == 60
        assert features.schema_version == FEATURE_SCHEMA_VERSION
        assert features.equipment_id == "driver"
        assert features.handedness == "Right"
        assert features.sample_count == 60

    def test_field_order_is_channel_major(self):
        names = AggregatedFeatureVector.field_names()
        assert names[:5] == [
            "accelerometer_x_mean",
            "accelerometer_x_max",
            "accelerometer_x_min",
            "accelerometer_x_std",
            "accelerometer_y_mean",
        ]
        assert names[-1] == "attitude_yaw_std"

    def test_values_match_numpy(self, buffer):
        features = aggregate_features(buffer, "driver")
        pitch = np.array([s.attitude.pitch for s in buffer])
        rotation_z = np.array([s.rotation_rate.z for s in buffer])

        assert_allclose(features.get("attitude_pitch", "mean"), pitch.mean())
        assert_allclose(features.get("rotation_rate_z", "max"), rotation_z.max())
        assert_allclose(features.get("rotation_rate_z", "std"), rotation_z.std(ddof=1))

    def test_accelerometer_is_user_plus_gravity(self, buffer):
        """Combined accelerometer channel is an exact per-sample identity."""
        for axis in ("x", "y", "z"):
            combined = buffer.channel(f"accelerometer_{axis}")
            user = buffer.channel(f"user_acceleration_{axis}")
            gravity = buffer.channel(f"gravity_{axis}")
            assert np.array_equal(combined, user + gravity)

        for sample in buffer:
            accel = sample.accelerometer
            assert accel.x == sample.user_acceleration.x + sample.gravity.x
            assert accel.z == sample.user_acceleration.z + sample.gravity.z

    def test_insufficient_samples(self):
        short = SessionBuffer.finalized(generate_swing_samples(n_samples=49))
        with pytest.raises(InsufficientData):
            aggregate_features(short, "driver")

    def test_recompute_is_identical(self, buffer):
        first = aggregate_features(buffer, "driver")
        second = aggregate_features(buffer, "driver")
        assert first == second
        assert first.as_array().tobytes() == second.as_array().tobytes()

    def test_model_feature_keys(self, buffer):
        features = aggregate_features(buffer, "driver", "left").to_model_features()

        assert features["GolfClub"] == "driver"
        assert features["WatchHand"] == "Left"
        assert "AccelerometerXmean" in features
        assert "AttitudeYaw_std" in features
        assert len(features) == 62

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError):
            AggregatedFeatureVector(values=(0.0,) * 48, equipment_id="driver", handedness="Left", sample_count=50)
