"""
Physics-based distance model.

Pipeline: club-head speed -> smash factor -> ball speed -> launch
conditions -> simplified projectile flight. Drag and Magnus lift are
folded into fixed multiplicative factors rather than integrated.
"""

import logging
import math
from typing import Optional

from swing_engine.config import EngineConfig, get_config
from swing_engine.models.equipment import EquipmentProfile
from swing_engine.models.results import (
    CalculationMethod,
    ClassifierOutput,
    DistanceEstimate,
    KinematicsSnapshot,
    TrajectoryResult,
)
from swing_engine.services.confidence import score_confidence
from swing_engine.utils.units import GRAVITY_MS2, deg_to_rad, meters_to_yards, mph_to_ms


logger = logging.getLogger(__name__)

DRAG_FACTOR = 0.85
MAGNUS_FACTOR = 1.05
ROLL_FACTOR = 0.15

SMASH_QUALITY_GAIN = 0.15
LAUNCH_ATTACK_GAIN = 0.7

IMPACT_QUALITY = {
    "excellent": 0.95,
    "good": 0.85,
    "average": 0.70,
}
UNKNOWN_RATING_QUALITY = 0.60
NO_CLASSIFIER_QUALITY = 0.70


def estimate_club_head_speed(kinematics: KinematicsSnapshot, profile: EquipmentProfile) -> float:
    """
    Calibrated club-head speed (mph), clamped to the club's plausible window.

    Angular velocity is accel / length and linear speed is angular velocity
    * length, so the club length cancels out.
    """
    angular_velocity = kinematics.max_acceleration / profile.length_m
    linear_speed = angular_velocity * profile.length_m
    estimated = linear_speed * profile.speed_calibration_factor

    min_speed, max_speed = profile.club_head_speed_bounds_mph
    return max(min_speed, min(max_speed, estimated))


def impact_quality(classification: Optional[ClassifierOutput]) -> float:
    if classification is None:
        return NO_CLASSIFIER_QUALITY
    return IMPACT_QUALITY.get(classification.rating.strip().lower(), UNKNOWN_RATING_QUALITY)


def smash_factor(profile: EquipmentProfile, quality: float) -> float:
    return profile.optimal_smash_factor + SMASH_QUALITY_GAIN * (quality - 0.5)


def estimate_launch_angle(profile: EquipmentProfile, attack_angle_deg: float) -> float:
    base = profile.loft_angle_deg + attack_angle_deg * LAUNCH_ATTACK_GAIN
    return profile.launch_angle_bounds_deg.clamp(base)


def estimate_spin_rate(profile: EquipmentProfile, ball_speed_mph: float, launch_angle_deg: float) -> float:
    speed_factor = ball_speed_mph / 100.0   # normalized around 100 mph
    angle_factor = launch_angle_deg / 15.0  # normalized around 15 degrees
    return profile.base_spin_rpm * speed_factor * (1 + angle_factor * 0.1)


def simulate_trajectory(ball_speed_mph: float, launch_angle_deg: float) -> TrajectoryResult:
    launch_rad = deg_to_rad(launch_angle_deg)
    speed_ms = mph_to_ms(ball_speed_mph)

    vx0 = speed_ms * math.cos(launch_rad)
    vy0 = speed_ms * math.sin(launch_rad)

    flight_time = 2 * vy0 / GRAVITY_MS2 * MAGNUS_FACTOR
    carry_m = vx0 * flight_time * DRAG_FACTOR
    roll_m = carry_m * ROLL_FACTOR
    total_m = carry_m + roll_m

    return TrajectoryResult(
        carry_distance_yd=meters_to_yards(carry_m),
        total_distance_yd=meters_to_yards(total_m),
        flight_time_s=flight_time,
        max_height_yd=meters_to_yards(vy0 * vy0 / (2 * GRAVITY_MS2)),
    )


def passes_validation(
    sample_count: int,
    classification: Optional[ClassifierOutput],
    config: Optional[EngineConfig] = None,
) -> bool:
    config = config or get_config()
    return (
        sample_count >= config.min_samples
        and classification is not None
        and classification.confidence > config.min_classifier_confidence
    )


def calculate_distance(
    kinematics: KinematicsSnapshot,
    profile: EquipmentProfile,
    classification: Optional[ClassifierOutput],
    sample_count: int,
    config: Optional[EngineConfig] = None,
) -> DistanceEstimate:
    """
    Estimate shot distance from swing kinematics.

    Returns a zero-valued estimate (confidence 0) when the sample count or
    classifier confidence fails validation.
    """
    if not passes_validation(sample_count, classification, config):
        logger.warning(
            f"Invalid data for distance calculation: samples={sample_count}, "
            f"classifier confidence={classification.confidence if classification else None}"
        )
        return DistanceEstimate.zero()

    club_head_speed = estimate_club_head_speed(kinematics, profile)
    ball_speed = club_head_speed * smash_factor(profile, impact_quality(classification))
    launch_angle = estimate_launch_angle(profile, kinematics.attack_angle_deg)
    spin_rate = estimate_spin_rate(profile, ball_speed, launch_angle)
    trajectory = simulate_trajectory(ball_speed, launch_angle)

    return DistanceEstimate(
        estimated_distance_yd=trajectory.total_distance_yd,
        ball_speed_mph=ball_speed,
        club_head_speed_mph=club_head_speed,
        launch_angle_deg=launch_angle,
        spin_rate_rpm=spin_rate,
        carry_distance_yd=trajectory.carry_distance_yd,
        total_distance_yd=trajectory.total_distance_yd,
        confidence=score_confidence(sample_count, kinematics, classification),
        method=CalculationMethod.PHYSICS,
        max_height_yd=trajectory.max_height_yd,
        flight_time_s=trajectory.flight_time_s,
    )
