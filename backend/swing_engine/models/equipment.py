"""
Equipment profile table.

Static per-club physical and calibration constants. Adding a club only
requires a new row in DEFAULT_PROFILES (or in the JSON file named by
SWING_EQUIPMENT_FILE).
"""

import json
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class Handedness(Enum):
    """Wrist the watch is worn on."""

    LEFT = "Left"
    RIGHT = "Right"

    @classmethod
    def parse(cls, value) -> "Handedness":
        if isinstance(value, Handedness):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown handedness: {value}")


@dataclass(frozen=True)
class LaunchAngleBounds:
    """Realistic launch angle window (degrees)."""

    min: float
    max: float

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))


@dataclass(frozen=True)
class EquipmentProfile:
    """Physical constants for one club."""

    id: str
    display_name: str
    loft_angle_deg: float
    length_m: float
    weight_kg: float
    coefficient_of_restitution: float
    average_distance_yd: float
    speed_calibration_factor: float
    optimal_smash_factor: float
    launch_angle_bounds_deg: LaunchAngleBounds
    base_spin_rpm: float

    @property
    def club_head_speed_bounds_mph(self) -> tuple[float, float]:
        """Plausible club-head speed window derived from average distance."""
        return (
            self.average_distance_yd * 0.4 / 2.5,
            self.average_distance_yd * 1.6 / 2.5,
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "EquipmentProfile":
        bounds = data["launch_angle_bounds_deg"]
        if not isinstance(bounds, LaunchAngleBounds):
            bounds = LaunchAngleBounds(min=float(bounds["min"]), max=float(bounds["max"]))
        return cls(
            id=str(data["id"]),
            display_name=str(data.get("display_name", data["id"])),
            loft_angle_deg=float(data["loft_angle_deg"]),
            length_m=float(data["length_m"]),
            weight_kg=float(data["weight_kg"]),
            coefficient_of_restitution=float(data["coefficient_of_restitution"]),
            average_distance_yd=float(data["average_distance_yd"]),
            speed_calibration_factor=float(data["speed_calibration_factor"]),
            optimal_smash_factor=float(data["optimal_smash_factor"]),
            launch_angle_bounds_deg=bounds,
            base_spin_rpm=float(data["base_spin_rpm"]),
        )


DEFAULT_PROFILES: tuple[EquipmentProfile, ...] = (
    EquipmentProfile(
        id="driver",
        display_name="Driver",
        loft_angle_deg=10.5,
        length_m=1.168,  # 46 inches
        weight_kg=0.31,
        coefficient_of_restitution=0.83,
        average_distance_yd=240.0,
        speed_calibration_factor=0.85,
        optimal_smash_factor=1.48,
        launch_angle_bounds_deg=LaunchAngleBounds(min=8.0, max=18.0),
        base_spin_rpm=2500.0,
    ),
    EquipmentProfile(
        id="steel_7",
        display_name="Steel 7",
        loft_angle_deg=34.0,
        length_m=0.952,  # 37.5 inches
        weight_kg=0.41,
        coefficient_of_restitution=0.78,
        average_distance_yd=150.0,
        speed_calibration_factor=0.75,
        optimal_smash_factor=1.35,
        launch_angle_bounds_deg=LaunchAngleBounds(min=20.0, max=35.0),
        base_spin_rpm=6000.0,
    ),
    EquipmentProfile(
        id="steel_9",
        display_name="Steel 9",
        loft_angle_deg=42.0,
        length_m=0.914,  # 36 inches
        weight_kg=0.43,
        coefficient_of_restitution=0.75,
        average_distance_yd=130.0,
        speed_calibration_factor=0.70,
        optimal_smash_factor=1.28,
        launch_angle_bounds_deg=LaunchAngleBounds(min=28.0, max=45.0),
        base_spin_rpm=8000.0,
    ),
)


class EquipmentTable:
    """Enumerable lookup over equipment profiles."""

    def __init__(self, profiles: tuple[EquipmentProfile, ...] = DEFAULT_PROFILES):
        self._profiles: dict[str, EquipmentProfile] = {}
        for profile in profiles:
            self.add(profile)

    def add(self, profile: EquipmentProfile) -> None:
        self._profiles[profile.id] = profile

    def get(self, key: str) -> EquipmentProfile:
        """Look up by id or display name (case-insensitive)."""
        if key in self._profiles:
            return self._profiles[key]
        wanted = key.strip().lower()
        for profile in self._profiles.values():
            if profile.id.lower() == wanted or profile.display_name.lower() == wanted:
                return profile
        raise KeyError(f"Unknown equipment: {key}")

    def __contains__(self, key: str) -> bool:
        try:
            self.get(key)
        except KeyError:
            return False
        return True

    def __iter__(self):
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def load_file(self, path: Path) -> int:
        """
        Merge extra rows from a JSON file (a list of profile objects).

        Returns:
            Number of profiles loaded
        """
        with open(path, "r", encoding="utf-8") as f:
            rows = json.load(f)
        for row in rows:
            self.add(EquipmentProfile.from_dict(row))
        logger.info(f"Loaded {len(rows)} equipment profiles from {path}")
        return len(rows)


_table: Optional[EquipmentTable] = None


def get_equipment_table() -> EquipmentTable:
    """Get the global equipment table (defaults plus SWING_EQUIPMENT_FILE rows)."""
    global _table
    if _table is None:
        from swing_engine.config import EQUIPMENT_FILE

        _table = EquipmentTable()
        if EQUIPMENT_FILE:
            path = Path(EQUIPMENT_FILE)
            if path.exists():
                _table.load_file(path)
            else:
                logger.warning(f"Equipment file not found: {path}")
    return _table


def get_profile(key: str) -> EquipmentProfile:
    return get_equipment_table().get(key)
