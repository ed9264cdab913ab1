"""
Session buffer - the ordered sample sequence for one swing attempt.

Samples are appended in strictly increasing timestamp order while the
session is open. Once closed, the buffer is immutable and every channel
is exposed as a float64 array for the aggregation and kinematics passes.
"""

from typing import Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from swing_engine.models.motion import MotionSample


class SessionBuffer:
    """Append-only sample buffer for the active session."""

    def __init__(self, samples: Optional[Iterable[MotionSample]] = None):
        self._samples: list[MotionSample] = []
        self._closed = False
        self._arrays: dict[str, NDArray[np.float64]] = {}

        if samples is not None:
            for sample in samples:
                self.append(sample)

    @classmethod
    def finalized(cls, samples: Iterable[MotionSample]) -> "SessionBuffer":
        """Build an already-closed buffer from a sample sequence."""
        buffer = cls(samples)
        buffer.close()
        return buffer

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def __getitem__(self, idx):
        return self._samples[idx]

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def samples(self) -> tuple[MotionSample, ...]:
        return tuple(self._samples)

    def append(self, sample: MotionSample) -> None:
        if self._closed:
            raise ValueError("Cannot append to a finalized session buffer")
        if self._samples and sample.timestamp <= self._samples[-1].timestamp:
            raise ValueError(
                f"Sample timestamp {sample.timestamp} is not after "
                f"{self._samples[-1].timestamp}"
            )
        self._samples.append(sample)

    def close(self) -> None:
        self._closed = True

    # ── Channel arrays ────────────────────────────────────────────────────────

    def channel(self, name: str) -> NDArray[np.float64]:
        """
        Get a per-sample channel as a float64 array.

        Channel names: timestamp, time_offset, user_acceleration_{x,y,z},
        gravity_{x,y,z}, accelerometer_{x,y,z}, rotation_rate_{x,y,z},
        attitude_{roll,pitch,yaw}, total_acceleration, total_rotation.
        Arrays are cached only once the buffer is closed.
        """
        if name in self._arrays:
            return self._arrays[name]

        extractor = _CHANNEL_EXTRACTORS.get(name)
        if extractor is None:
            raise KeyError(f"Unknown channel: {name}")

        values = np.array([extractor(s) for s in self._samples], dtype=np.float64)
        if self._closed:
            self._arrays[name] = values
        return values

    @property
    def timestamps(self) -> NDArray[np.float64]:
        return self.channel("timestamp")

    @property
    def total_acceleration(self) -> NDArray[np.float64]:
        return self.channel("total_acceleration")

    @property
    def total_rotation(self) -> NDArray[np.float64]:
        return self.channel("total_rotation")

    @property
    def max_acceleration(self) -> float:
        if not self._samples:
            return 0.0
        return float(np.max(self.total_acceleration))

    @property
    def max_rotation(self) -> float:
        if not self._samples:
            return 0.0
        return float(np.max(self.total_rotation))

    @property
    def duration_s(self) -> float:
        if len(self._samples) < 2:
            return 0.0
        return float(self._samples[-1].timestamp - self._samples[0].timestamp)


_CHANNEL_EXTRACTORS = {
    "timestamp": lambda s: s.timestamp,
    "time_offset": lambda s: s.time_offset,
    "user_acceleration_x": lambda s: s.user_acceleration.x,
    "user_acceleration_y": lambda s: s.user_acceleration.y,
    "user_acceleration_z": lambda s: s.user_acceleration.z,
    "gravity_x": lambda s: s.gravity.x,
    "gravity_y": lambda s: s.gravity.y,
    "gravity_z": lambda s: s.gravity.z,
    "accelerometer_x": lambda s: s.user_acceleration.x + s.gravity.x,
    "accelerometer_y": lambda s: s.user_acceleration.y + s.gravity.y,
    "accelerometer_z": lambda s: s.user_acceleration.z + s.gravity.z,
    "rotation_rate_x": lambda s: s.rotation_rate.x,
    "rotation_rate_y": lambda s: s.rotation_rate.y,
    "rotation_rate_z": lambda s: s.rotation_rate.z,
    "attitude_roll": lambda s: s.attitude.roll,
    "attitude_pitch": lambda s: s.attitude.pitch,
    "attitude_yaw": lambda s: s.attitude.yaw,
    "total_acceleration": lambda s: s.total_acceleration,
    "total_rotation": lambda s: s.total_rotation,
}
