"""
Engine configuration.

Defaults reproduce the detector and pipeline constants. Every field can be
overridden with a SWING_<FIELD_NAME> environment variable, e.g.
SWING_SETTLE_DELAY_S=0.5.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional


DATA_FOLDER_ENV = "SWING_DATA_FOLDER"
DEFAULT_DATA_FOLDER = "./data/sessions"
EQUIPMENT_FILE = os.getenv("SWING_EQUIPMENT_FILE", "")


@dataclass(frozen=True)
class EngineConfig:
    """Tunable constants for ingestion, phase detection and validation."""

    # Phase detector
    acceleration_threshold_g: float = 2.0
    rotation_threshold_rad_s: float = 3.0
    history_size: int = 20

    # Ingestion / timing
    sample_rate_hz: float = 50.0
    max_recording_s: float = 10.0
    settle_delay_s: float = 1.0
    poll_interval_s: float = 0.5

    # Validation gates
    min_samples: int = 50
    min_classifier_confidence: float = 0.3
    min_peak_acceleration_g: float = 1.0

    @classmethod
    def from_env(cls) -> "EngineConfig":
        overrides = {}
        for f in fields(cls):
            raw = os.getenv(f"SWING_{f.name.upper()}")
            if raw is None or raw == "":
                continue
            overrides[f.name] = int(raw) if f.type in (int, "int") else float(raw)
        return cls(**overrides)


_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the cached engine configuration."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config
