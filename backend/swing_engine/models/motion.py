"""
Motion sample model and swing phase definitions.

A MotionSample is one device-motion reading from the wrist sensor:
- user acceleration and gravity in G (device frame)
- rotation rate in rad/s
- attitude (roll, pitch, yaw) in radians
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Vector3:
    """Three-axis sensor reading."""

    x: float
    y: float
    z: float

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)


@dataclass(frozen=True)
class Attitude:
    """Device orientation (radians)."""

    roll: float
    pitch: float
    yaw: float


@dataclass(frozen=True)
class MotionSample:
    """Single immutable motion reading."""

    timestamp: float      # seconds (epoch or monotonic, strictly increasing)
    time_offset: float    # seconds since session start
    user_acceleration: Vector3
    gravity: Vector3
    rotation_rate: Vector3
    attitude: Attitude

    @property
    def accelerometer(self) -> Vector3:
        """Raw accelerometer reading (user acceleration + gravity)."""
        return self.user_acceleration + self.gravity

    @property
    def total_acceleration(self) -> float:
        return self.user_acceleration.magnitude

    @property
    def total_rotation(self) -> float:
        return self.rotation_rate.magnitude


class SwingPhase(Enum):
    """
    Swing lifecycle phases, in their fixed forward order.

    Within a session the detector only ever moves forward through
    this ordering; only an explicit reset returns to IDLE.
    """

    IDLE = "idle"
    ADDRESS = "address"
    BACKSWING = "backswing"
    TRANSITION = "transition"
    DOWNSWING = "downswing"
    IMPACT = "impact"
    FOLLOW_THROUGH = "followThrough"
    FINISH = "finish"

    @property
    def order(self) -> int:
        return _PHASE_ORDER.index(self)

    @property
    def progress(self) -> float:
        return _PHASE_PROGRESS[self]

    def __lt__(self, other: "SwingPhase") -> bool:
        if not isinstance(other, SwingPhase):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: "SwingPhase") -> bool:
        if not isinstance(other, SwingPhase):
            return NotImplemented
        return self.order <= other.order


_PHASE_ORDER = list(SwingPhase)

_PHASE_PROGRESS = {
    SwingPhase.IDLE: 0.0,
    SwingPhase.ADDRESS: 0.1,
    SwingPhase.BACKSWING: 0.3,
    SwingPhase.TRANSITION: 0.5,
    SwingPhase.DOWNSWING: 0.7,
    SwingPhase.IMPACT: 0.8,
    SwingPhase.FOLLOW_THROUGH: 0.9,
    SwingPhase.FINISH: 1.0,
}


@dataclass(frozen=True)
class PhaseError:
    """Terminal error state of a session."""

    reason: str


class RecordingStatus(Enum):
    """Ingestion lifecycle status."""

    IDLE = "idle"
    WAITING = "waiting"        # Waiting for swing to start
    RECORDING = "recording"    # Swing detected, capturing
    PROCESSING = "processing"  # Settling / finalizing buffer
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (RecordingStatus.COMPLETED, RecordingStatus.ERROR)


@dataclass(frozen=True)
class PhaseEvent:
    """Change notification emitted by the detector and recorder."""

    phase: SwingPhase
    status: RecordingStatus
    timestamp: Optional[float] = None
    error: Optional[PhaseError] = None
