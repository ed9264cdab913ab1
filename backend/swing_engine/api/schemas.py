"""
API schemas (Pydantic models) for request/response validation.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ============================================================================
# Sample Schemas
# ============================================================================

class Vector3Schema(BaseModel):
    x: float
    y: float
    z: float


class AttitudeSchema(BaseModel):
    """Device orientation in radians."""
    roll: float
    pitch: float
    yaw: float


class MotionSampleSchema(BaseModel):
    """Single device-motion reading."""
    timestamp: float
    time_offset: Optional[float] = None  # derived from the first sample when omitted
    user_acceleration: Vector3Schema
    gravity: Vector3Schema
    rotation_rate: Vector3Schema
    attitude: AttitudeSchema


# ============================================================================
# Analysis Schemas
# ============================================================================

class AnalyzeRequest(BaseModel):
    """Request to analyze an already-recorded swing."""
    equipment_id: str
    handedness: str = "Left"
    samples: list[MotionSampleSchema]
    save: bool = True
    include_samples: bool = False


class ClassificationResponse(BaseModel):
    rating: str
    confidence: float
    confidence_percentage: int


class KinematicsResponse(BaseModel):
    max_acceleration: float
    club_head_swing_speed_proxy: float
    attack_angle_deg: float
    swing_path_deg: float
    tempo_bpm: float
    impact_timestamp: float
    impact_index: int


class DistanceResponse(BaseModel):
    estimated_distance_yd: float
    ball_speed_mph: float
    club_head_speed_mph: float
    launch_angle_deg: float
    spin_rate_rpm: float
    carry_distance_yd: float
    total_distance_yd: float
    max_height_yd: float
    flight_time_s: float
    confidence: float
    confidence_percentage: int
    method: str
    distance_range: tuple[float, float]  # (low, high) yards


class SwingResultResponse(BaseModel):
    """Full composed result for one swing."""
    session_id: str
    created_at: str
    equipment_id: str
    handedness: str
    summary: str
    swing_duration_s: float
    classification: ClassificationResponse
    kinematics: KinematicsResponse
    distance: DistanceResponse
    features: dict[str, float]
    feature_schema_version: str
    sample_count: int
    samples: Optional[list[MotionSampleSchema]] = None


class SessionSummaryResponse(BaseModel):
    """Summary of a stored session for listing."""
    session_id: str
    created_at: str
    equipment_id: str
    handedness: str
    rating: str
    classifier_confidence: float
    estimated_distance_yd: float
    confidence: float
    swing_duration_s: float
    sample_count: int
    has_samples: bool


class SwingStatisticsResponse(BaseModel):
    total_swings: int
    excellent_count: int
    good_count: int
    average_count: int
    average_distance_yd: float
    max_distance_yd: float
    success_rate: float
    last_swing_at: Optional[str] = None


# ============================================================================
# Recording Schemas
# ============================================================================

class StartRecordingRequest(BaseModel):
    equipment_id: Optional[str] = None


class IngestSamplesRequest(BaseModel):
    samples: list[MotionSampleSchema] = Field(default_factory=list)


class RecordingAnalyzeRequest(BaseModel):
    equipment_id: Optional[str] = None  # defaults to the club given at /recording/start
    handedness: str = "Left"
    save: bool = True
    include_samples: bool = True


class RecordingStatusResponse(BaseModel):
    """Current recorder state."""
    status: str
    phase: str
    progress: float
    sample_count: int
    is_active: bool
    error: Optional[str] = None


# ============================================================================
# Equipment Schemas
# ============================================================================

class EquipmentResponse(BaseModel):
    id: str
    display_name: str
    loft_angle_deg: float
    length_m: float
    weight_kg: float
    coefficient_of_restitution: float
    average_distance_yd: float
    speed_calibration_factor: float
    optimal_smash_factor: float
    launch_angle_min_deg: float
    launch_angle_max_deg: float
    base_spin_rpm: float
    club_head_speed_bounds_mph: tuple[float, float]


# ============================================================================
# Error Schemas
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    code: Optional[str] = None
