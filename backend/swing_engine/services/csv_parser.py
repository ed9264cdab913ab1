"""
Motion sample CSV adapter.

Reads device-motion exports (one row per sample) into MotionSample lists
and writes stored sessions back out in the canonical column layout.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from swing_engine.models.motion import Attitude, MotionSample, Vector3


logger = logging.getLogger(__name__)


# Column name mappings - exporters disagree on naming
COLUMN_MAPPINGS = {
    "time": ["timestamp", "Timestamp", "time", "Time", "TIME", "time_ms", "timestamp_ms", "loggingTime"],
    "time_offset": ["time_offset", "timeOffset", "TimeOffset", "elapsed", "Elapsed"],
    "user_acceleration_x": ["user_acceleration_x", "userAccelerationX", "UserAccelerationX", "user_accel_x"],
    "user_acceleration_y": ["user_acceleration_y", "userAccelerationY", "UserAccelerationY", "user_accel_y"],
    "user_acceleration_z": ["user_acceleration_z", "userAccelerationZ", "UserAccelerationZ", "user_accel_z"],
    "gravity_x": ["gravity_x", "gravityX", "GravityX"],
    "gravity_y": ["gravity_y", "gravityY", "GravityY"],
    "gravity_z": ["gravity_z", "gravityZ", "GravityZ"],
    "accelerometer_x": ["accelerometer_x", "accelerometerX", "AccelerometerX", "accel_x", "ax"],
    "accelerometer_y": ["accelerometer_y", "accelerometerY", "AccelerometerY", "accel_y", "ay"],
    "accelerometer_z": ["accelerometer_z", "accelerometerZ", "AccelerometerZ", "accel_z", "az"],
    "rotation_rate_x": ["rotation_rate_x", "rotationRateX", "RotationRateX", "gyro_x", "gx"],
    "rotation_rate_y": ["rotation_rate_y", "rotationRateY", "RotationRateY", "gyro_y", "gy"],
    "rotation_rate_z": ["rotation_rate_z", "rotationRateZ", "RotationRateZ", "gyro_z", "gz"],
    "attitude_roll": ["attitude_roll", "roll", "Roll", "AttitudeRoll"],
    "attitude_pitch": ["attitude_pitch", "pitch", "Pitch", "AttitudePitch"],
    "attitude_yaw": ["attitude_yaw", "yaw", "Yaw", "AttitudeYaw"],
}

AXES = ("x", "y", "z")

CSV_COLUMNS = (
    ["sequence_number", "timestamp", "time_offset"]
    + [f"accelerometer_{a}" for a in AXES]
    + [f"user_acceleration_{a}" for a in AXES]
    + [f"gravity_{a}" for a in AXES]
    + [f"rotation_rate_{a}" for a in AXES]
    + ["attitude_roll", "attitude_pitch", "attitude_yaw"]
)


class MotionCsvParser:
    """Parser for per-sample motion CSV exports."""

    def parse_file(self, filepath: Path) -> list[MotionSample]:
        df = pd.read_csv(filepath, float_precision="round_trip")
        df.columns = df.columns.str.strip()
        samples = self.parse_dataframe(df)
        logger.info(f"Parsed {len(samples)} motion samples from {Path(filepath).name}")
        return samples

    def parse_dataframe(self, df: pd.DataFrame) -> list[MotionSample]:
        if df.empty:
            return []

        col_map = self._map_columns(df.columns.tolist())
        timestamps = self._parse_time_column(df, col_map)
        n_samples = len(timestamps)

        user_accel = self._extract_user_acceleration(df, col_map, n_samples)
        gravity = self._extract_axes(df, col_map, "gravity", n_samples, required=False)
        rotation = self._extract_axes(df, col_map, "rotation_rate", n_samples, required=True)
        attitude = np.column_stack([
            self._extract_column(df, col_map, f"attitude_{name}", n_samples, default=0.0)
            for name in ("roll", "pitch", "yaw")
        ])

        offsets = self._extract_column(df, col_map, "time_offset", n_samples)
        if np.all(np.isnan(offsets)):
            offsets = timestamps - timestamps[0]

        # Drop rows with unusable values rather than failing the whole file
        valid = ~(
            np.isnan(timestamps)
            | np.isnan(user_accel).any(axis=1)
            | np.isnan(rotation).any(axis=1)
        )
        dropped = int(n_samples - np.count_nonzero(valid))
        if dropped:
            logger.warning(f"Dropped {dropped} rows with missing motion values")

        samples = []
        for i in np.flatnonzero(valid):
            samples.append(MotionSample(
                timestamp=float(timestamps[i]),
                time_offset=float(offsets[i]),
                user_acceleration=Vector3(*(float(v) for v in user_accel[i])),
                gravity=Vector3(*(float(v) for v in np.nan_to_num(gravity[i]))),
                rotation_rate=Vector3(*(float(v) for v in rotation[i])),
                attitude=Attitude(*(float(v) for v in np.nan_to_num(attitude[i]))),
            ))
        return samples

    def _map_columns(self, columns: list[str]) -> dict[str, Optional[str]]:
        col_map: dict[str, Optional[str]] = {}
        for std_name, variants in COLUMN_MAPPINGS.items():
            col_map[std_name] = None
            for variant in variants:
                if variant in columns:
                    col_map[std_name] = variant
                    break
        return col_map

    def _parse_time_column(
        self,
        df: pd.DataFrame,
        col_map: dict[str, Optional[str]],
    ) -> NDArray[np.float64]:
        time_col = col_map.get("time")
        if time_col is None or time_col not in df.columns:
            raise ValueError("No time column found in CSV")

        times = pd.to_numeric(df[time_col], errors="coerce").values.astype(np.float64)

        # ~50 Hz data steps 0.02 s; a step above 1 means milliseconds
        is_ms = time_col.lower().endswith("_ms")
        if not is_ms and len(times) > 1:
            steps = np.diff(times[~np.isnan(times)])
            is_ms = steps.size > 0 and float(np.median(steps)) > 1.0
        if is_ms:
            times = times / 1000.0
        return times

    def _extract_user_acceleration(
        self,
        df: pd.DataFrame,
        col_map: dict[str, Optional[str]],
        n_samples: int,
    ) -> NDArray[np.float64]:
        if all(col_map.get(f"user_acceleration_{a}") for a in AXES):
            return self._extract_axes(df, col_map, "user_acceleration", n_samples, required=True)

        # Raw accelerometer exports: user acceleration = accelerometer - gravity
        has_raw = all(col_map.get(f"accelerometer_{a}") for a in AXES)
        has_gravity = all(col_map.get(f"gravity_{a}") for a in AXES)
        if has_raw and has_gravity:
            raw = self._extract_axes(df, col_map, "accelerometer", n_samples, required=True)
            gravity = self._extract_axes(df, col_map, "gravity", n_samples, required=True)
            return raw - gravity

        raise ValueError("No user acceleration columns found in CSV")

    def _extract_axes(
        self,
        df: pd.DataFrame,
        col_map: dict[str, Optional[str]],
        prefix: str,
        n_samples: int,
        required: bool,
    ) -> NDArray[np.float64]:
        missing = [a for a in AXES if col_map.get(f"{prefix}_{a}") is None]
        if missing and required:
            raise ValueError(f"Missing {prefix} columns in CSV: {', '.join(missing)}")
        return np.column_stack([
            self._extract_column(df, col_map, f"{prefix}_{a}", n_samples, default=0.0)
            for a in AXES
        ])

    def _extract_column(
        self,
        df: pd.DataFrame,
        col_map: dict[str, Optional[str]],
        std_name: str,
        n_samples: int,
        default: float = np.nan,
    ) -> NDArray[np.float64]:
        col = col_map.get(std_name)
        if col is None or col not in df.columns:
            return np.full(n_samples, default, dtype=np.float64)
        return pd.to_numeric(df[col], errors="coerce").values.astype(np.float64)


def samples_to_dataframe(samples: Sequence[MotionSample]) -> pd.DataFrame:
    rows = []
    for i, s in enumerate(samples):
        accel = s.accelerometer
        rows.append([
            i, s.timestamp, s.time_offset,
            accel.x, accel.y, accel.z,
            s.user_acceleration.x, s.user_acceleration.y, s.user_acceleration.z,
            s.gravity.x, s.gravity.y, s.gravity.z,
            s.rotation_rate.x, s.rotation_rate.y, s.rotation_rate.z,
            s.attitude.roll, s.attitude.pitch, s.attitude.yaw,
        ])
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def write_samples_csv(samples: Sequence[MotionSample], output_path: Path) -> Path:
    """Write samples in the canonical column layout, one row per sample."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # repr precision so a written session parses back to identical floats
    samples_to_dataframe(samples).to_csv(output_path, index=False, float_format="%.17g")
    return output_path


def parse_motion_file(filepath: Path) -> list[MotionSample]:
    return MotionCsvParser().parse_file(Path(filepath))
