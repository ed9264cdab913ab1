"""
Derived swing analysis values (v1).

All structures here are pure values computed once per finalized session
and handed to external collaborators (classifier, persistence).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from swing_engine.models.motion import MotionSample


FEATURE_SCHEMA_VERSION = "v1"

# Channel order is part of the schema; never reorder, only version.
FEATURE_CHANNELS: tuple[str, ...] = (
    "accelerometer_x",
    "accelerometer_y",
    "accelerometer_z",
    "user_acceleration_x",
    "user_acceleration_y",
    "user_acceleration_z",
    "gravity_x",
    "gravity_y",
    "gravity_z",
    "rotation_rate_x",
    "rotation_rate_y",
    "rotation_rate_z",
    "attitude_roll",
    "attitude_pitch",
    "attitude_yaw",
)

FEATURE_STATS: tuple[str, ...] = ("mean", "max", "min", "std")

# Key prefixes expected by the trained classifier
_MODEL_KEY_PREFIX = {
    "accelerometer_x": "AccelerometerX",
    "accelerometer_y": "AccelerometerY",
    "accelerometer_z": "AccelerometerZ",
    "user_acceleration_x": "UserAccelerationX",
    "user_acceleration_y": "UserAccelerationY",
    "user_acceleration_z": "UserAccelerationZ",
    "gravity_x": "GravityX",
    "gravity_y": "GravityY",
    "gravity_z": "GravityZ",
    "rotation_rate_x": "RotationRateX",
    "rotation_rate_y": "RotationRateY",
    "rotation_rate_z": "RotationRateZ",
    "attitude_roll": "AttitudeRoll",
    "attitude_pitch": "AttitudePitch",
    "attitude_yaw": "AttitudeYaw",
}

_MODEL_KEY_SUFFIX = {"mean": "mean", "max": "max", "min": "min", "std": "_std"}


@dataclass(frozen=True)
class ChannelStats:
    """Summary statistics for one channel."""

    mean: float
    max: float
    min: float
    std: float  # sample standard deviation (n-1), 0 for fewer than 2 samples


@dataclass(frozen=True)
class AggregatedFeatureVector:
    """
    Fixed-schema statistical summary of a session.

    Values are stored channel-major in FEATURE_CHANNELS order, four
    statistics per channel in FEATURE_STATS order.
    """

    values: tuple[float, ...]
    equipment_id: str
    handedness: str
    sample_count: int
    schema_version: str = FEATURE_SCHEMA_VERSION

    def __post_init__(self):
        expected = len(FEATURE_CHANNELS) * len(FEATURE_STATS)
        if len(self.values) != expected:
            raise ValueError(f"Feature vector needs {expected} values, got {len(self.values)}")

    @staticmethod
    def field_names() -> list[str]:
        return [f"{channel}_{stat}" for channel in FEATURE_CHANNELS for stat in FEATURE_STATS]

    def get(self, channel: str, stat: str) -> float:
        idx = FEATURE_CHANNELS.index(channel) * len(FEATURE_STATS) + FEATURE_STATS.index(stat)
        return self.values[idx]

    def stats(self, channel: str) -> ChannelStats:
        return ChannelStats(*(self.get(channel, stat) for stat in FEATURE_STATS))

    def as_array(self) -> NDArray[np.float64]:
        return np.array(self.values, dtype=np.float64)

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self.field_names(), self.values))

    def to_model_features(self) -> dict:
        """Feature payload in the key layout the trained model was built with."""
        features: dict = {
            "GolfClub": self.equipment_id,
            "WatchHand": self.handedness,
        }
        for channel in FEATURE_CHANNELS:
            for stat in FEATURE_STATS:
                key = _MODEL_KEY_PREFIX[channel] + _MODEL_KEY_SUFFIX[stat]
                features[key] = self.get(channel, stat)
        return features


@dataclass(frozen=True)
class KinematicsSnapshot:
    """Impact-centered swing metrics."""

    max_acceleration: float            # G
    club_head_swing_speed_proxy: float  # raw peak value before calibration
    attack_angle_deg: float
    swing_path_deg: float
    tempo_bpm: float
    impact_timestamp: float
    impact_index: int = 0


@dataclass(frozen=True)
class ClassifierOutput:
    """Rating returned by the classifier collaborator."""

    rating: str
    confidence: float
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None and bool(self.rating.strip())

    @property
    def confidence_percentage(self) -> int:
        return int(self.confidence * 100)


class CalculationMethod(Enum):
    PHYSICS = "physics"
    STATISTICAL = "statistical"
    HYBRID = "hybrid"
    ERROR = "error"


@dataclass(frozen=True)
class TrajectoryResult:
    """Simplified projectile flight (yards / seconds)."""

    carry_distance_yd: float
    total_distance_yd: float
    flight_time_s: float
    max_height_yd: float


@dataclass(frozen=True)
class DistanceEstimate:
    """Physics-based distance estimate for one swing."""

    estimated_distance_yd: float
    ball_speed_mph: float
    club_head_speed_mph: float
    launch_angle_deg: float
    spin_rate_rpm: float
    carry_distance_yd: float
    total_distance_yd: float
    confidence: float
    method: CalculationMethod = CalculationMethod.PHYSICS
    max_height_yd: float = 0.0
    flight_time_s: float = 0.0

    @classmethod
    def zero(cls) -> "DistanceEstimate":
        """Estimate returned when input validation fails."""
        return cls(
            estimated_distance_yd=0.0,
            ball_speed_mph=0.0,
            club_head_speed_mph=0.0,
            launch_angle_deg=0.0,
            spin_rate_rpm=0.0,
            carry_distance_yd=0.0,
            total_distance_yd=0.0,
            confidence=0.0,
        )

    @property
    def distance_range(self) -> tuple[float, float]:
        margin = self.estimated_distance_yd * (1.0 - self.confidence) * 0.2
        return (self.estimated_distance_yd - margin, self.estimated_distance_yd + margin)

    @property
    def confidence_percentage(self) -> int:
        return int(self.confidence * 100)


@dataclass(frozen=True)
class SwingResult:
    """Final composed result handed to persistence/sync collaborators."""

    session_id: str
    created_at: datetime
    equipment_id: str
    handedness: str
    classification: ClassifierOutput
    kinematics: KinematicsSnapshot
    distance: DistanceEstimate
    features: AggregatedFeatureVector
    samples: Optional[tuple[MotionSample, ...]] = field(default=None, repr=False)

    @property
    def swing_duration_s(self) -> float:
        tempo = self.kinematics.tempo_bpm
        return 60.0 / tempo if tempo > 0 else 0.0

    @property
    def summary_text(self) -> str:
        return f"{self.classification.rating} swing - {self.distance.estimated_distance_yd:.0f} yards"


@dataclass
class SessionSummary:
    """Stored session summary for listing."""

    session_id: str
    created_at: datetime
    equipment_id: str
    handedness: str
    rating: str
    classifier_confidence: float
    estimated_distance_yd: float
    confidence: float
    swing_duration_s: float
    sample_count: int
    has_samples: bool = False

    @classmethod
    def from_result(cls, result: SwingResult, has_samples: bool = False) -> "SessionSummary":
        return cls(
            session_id=result.session_id,
            created_at=result.created_at,
            equipment_id=result.equipment_id,
            handedness=result.handedness,
            rating=result.classification.rating,
            classifier_confidence=result.classification.confidence,
            estimated_distance_yd=result.distance.estimated_distance_yd,
            confidence=result.distance.confidence,
            swing_duration_s=result.swing_duration_s,
            sample_count=result.features.sample_count,
            has_samples=has_samples,
        )


@dataclass
class SwingStatistics:
    """Aggregate figures over stored sessions."""

    total_swings: int = 0
    excellent_count: int = 0
    good_count: int = 0
    average_count: int = 0
    average_distance_yd: float = 0.0
    max_distance_yd: float = 0.0
    last_swing_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        if self.total_swings == 0:
            return 0.0
        return (self.excellent_count + self.good_count) / self.total_swings * 100.0
