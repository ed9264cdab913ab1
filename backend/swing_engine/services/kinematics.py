"""
Kinematics estimation around the impact sample.

Impact is the sample with the largest user-acceleration magnitude. Attack
angle and swing path are mean attitude pitch / yaw (degrees) over small
windows centered on impact, clamped to the buffer bounds.
"""

import numpy as np

from swing_engine.models.results import KinematicsSnapshot
from swing_engine.models.session import SessionBuffer


ATTACK_ANGLE_HALF_WINDOW = 5
SWING_PATH_HALF_WINDOW = 3


def find_impact_index(buffer: SessionBuffer) -> int:
    """Index of the first maximum of total acceleration."""
    if len(buffer) == 0:
        return 0
    return int(np.argmax(buffer.total_acceleration))


def window_mean_degrees(values: np.ndarray, center: int, half_width: int) -> float:
    """Mean of radian values over [center - half_width, center + half_width], in degrees."""
    if values.size == 0:
        return 0.0
    start = max(0, center - half_width)
    end = min(values.size, center + half_width + 1)
    return float(np.mean(np.degrees(values[start:end])))


def compute_tempo(buffer: SessionBuffer) -> float:
    """Swing tempo in beats per minute: 60 / session duration, 0 for no duration."""
    duration = buffer.duration_s
    return 60.0 / duration if duration > 0 else 0.0


def estimate_kinematics(buffer: SessionBuffer) -> KinematicsSnapshot:
    """Derive impact-centered swing metrics from a finalized buffer."""
    if len(buffer) == 0:
        return KinematicsSnapshot(
            max_acceleration=0.0,
            club_head_swing_speed_proxy=0.0,
            attack_angle_deg=0.0,
            swing_path_deg=0.0,
            tempo_bpm=0.0,
            impact_timestamp=0.0,
            impact_index=0,
        )

    accel = buffer.total_acceleration
    impact_idx = find_impact_index(buffer)
    peak = float(accel[impact_idx])

    return KinematicsSnapshot(
        max_acceleration=peak,
        club_head_swing_speed_proxy=peak,
        attack_angle_deg=window_mean_degrees(
            buffer.channel("attitude_pitch"), impact_idx, ATTACK_ANGLE_HALF_WINDOW
        ),
        swing_path_deg=window_mean_degrees(
            buffer.channel("attitude_yaw"), impact_idx, SWING_PATH_HALF_WINDOW
        ),
        tempo_bpm=compute_tempo(buffer),
        impact_timestamp=float(buffer[impact_idx].timestamp),
        impact_index=impact_idx,
    )
