"""
Sample data generator for testing.

Generates a deterministic single-swing motion stream: quiet address,
a bell-shaped acceleration burst, then a quiet finish. With the default
shape the stream walks the phase detector through every phase from
idle to finish.
"""

import math
from pathlib import Path
from typing import Optional

import numpy as np

from swing_engine.models.motion import Attitude, MotionSample, Vector3
from swing_engine.services.csv_parser import write_samples_csv


def generate_swing_samples(
    n_samples: int = 60,
    sample_rate_hz: float = 50.0,
    peak_g: float = 9.2,
    peak_index: int = 30,
    width_samples: float = 3.0,
    baseline_g: float = 0.1,
    pitch_deg: float = 0.0,
    yaw_deg: float = 0.0,
    start_time: float = 0.0,
    noise_g: float = 0.0,
    seed: Optional[int] = None,
) -> list[MotionSample]:
    """
    Generate one synthetic swing.

    User acceleration lies on the x axis only, so total acceleration
    equals the magnitude profile exactly and peaks at peak_g at
    peak_index (with noise_g=0). Rotation rate tracks half the
    acceleration magnitude on the z axis.
    """
    idx = np.arange(n_samples, dtype=np.float64)
    burst = np.exp(-0.5 * ((idx - peak_index) / width_samples) ** 2)
    if 0 <= peak_index < n_samples:
        burst[peak_index] = 1.0
    magnitude = baseline_g + (peak_g - baseline_g) * burst

    if noise_g > 0:
        rng = np.random.default_rng(seed)
        magnitude = np.abs(magnitude + rng.normal(0, noise_g, n_samples))

    # Slight wrist sway keeps gravity from being perfectly constant
    sway = 0.02 * np.sin(2 * np.pi * idx / max(n_samples, 1))
    pitch = math.radians(pitch_deg)
    yaw = math.radians(yaw_deg)
    dt = 1.0 / sample_rate_hz

    samples = []
    for i in range(n_samples):
        m = float(magnitude[i])
        samples.append(MotionSample(
            timestamp=start_time + i * dt,
            time_offset=i * dt,
            user_acceleration=Vector3(m, 0.0, 0.0),
            gravity=Vector3(float(sway[i]), 0.0, -1.0),
            rotation_rate=Vector3(0.0, 0.0, 0.5 * m),
            attitude=Attitude(roll=0.0, pitch=pitch, yaw=yaw),
        ))
    return samples


def generate_swing_csv(output_path: Path, **kwargs) -> Path:
    """Generate a synthetic swing and write it as a motion CSV."""
    return write_samples_csv(generate_swing_samples(**kwargs), Path(output_path))


def generate_test_data_set(output_folder: Path) -> list[Path]:
    """Generate a small set of swings with different intensities."""
    output_folder.mkdir(parents=True, exist_ok=True)
    return [
        generate_swing_csv(output_folder / "swing_001_full.csv", peak_g=9.2),
        generate_swing_csv(output_folder / "swing_002_moderate.csv", peak_g=5.0, pitch_deg=-4.0),
        generate_swing_csv(output_folder / "swing_003_long.csv", n_samples=120, peak_index=60, noise_g=0.05, seed=3),
    ]


if __name__ == "__main__":
    output = Path("./data/samples")
    files = generate_test_data_set(output)
    print(f"Generated {len(files)} sample files in {output}")
    for f in files:
        print(f"  - {f.name}")
