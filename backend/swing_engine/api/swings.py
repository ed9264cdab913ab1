"""
API routes for swing analysis and stored sessions.
"""

from typing import Optional, Sequence, Union

from fastapi import APIRouter, HTTPException, Query

from swing_engine.api.schemas import (
    AnalyzeRequest,
    AttitudeSchema,
    ClassificationResponse,
    DistanceResponse,
    KinematicsResponse,
    MotionSampleSchema,
    SessionSummaryResponse,
    SwingResultResponse,
    SwingStatisticsResponse,
    Vector3Schema,
)
from swing_engine.models.motion import Attitude, MotionSample, Vector3
from swing_engine.models.results import SwingResult
from swing_engine.models.session import SessionBuffer
from swing_engine.services.analyzer import get_analyzer
from swing_engine.services.repository import get_repository


router = APIRouter(prefix="/swings", tags=["swings"])


def samples_from_schema(
    items: Sequence[MotionSampleSchema],
    session_start: Optional[float] = None,
) -> list[MotionSample]:
    """
    Convert request samples.

    A missing time_offset is measured from session_start, or from the
    first sample when the batch opens the session.
    """
    if not items:
        return []
    start = session_start if session_start is not None else items[0].timestamp
    return [
        MotionSample(
            timestamp=s.timestamp,
            time_offset=s.time_offset if s.time_offset is not None else s.timestamp - start,
            user_acceleration=Vector3(s.user_acceleration.x, s.user_acceleration.y, s.user_acceleration.z),
            gravity=Vector3(s.gravity.x, s.gravity.y, s.gravity.z),
            rotation_rate=Vector3(s.rotation_rate.x, s.rotation_rate.y, s.rotation_rate.z),
            attitude=Attitude(s.attitude.roll, s.attitude.pitch, s.attitude.yaw),
        )
        for s in items
    ]


def _sample_to_schema(s: MotionSample) -> MotionSampleSchema:
    return MotionSampleSchema(
        timestamp=s.timestamp,
        time_offset=s.time_offset,
        user_acceleration=Vector3Schema(x=s.user_acceleration.x, y=s.user_acceleration.y, z=s.user_acceleration.z),
        gravity=Vector3Schema(x=s.gravity.x, y=s.gravity.y, z=s.gravity.z),
        rotation_rate=Vector3Schema(x=s.rotation_rate.x, y=s.rotation_rate.y, z=s.rotation_rate.z),
        attitude=AttitudeSchema(roll=s.attitude.roll, pitch=s.attitude.pitch, yaw=s.attitude.yaw),
    )


def build_result_response(result: SwingResult) -> SwingResultResponse:
    """Build the API response from a composed result."""
    distance = result.distance
    kinematics = result.kinematics
    return SwingResultResponse(
        session_id=result.session_id,
        created_at=result.created_at.isoformat(),
        equipment_id=result.equipment_id,
        handedness=result.handedness,
        summary=result.summary_text,
        swing_duration_s=result.swing_duration_s,
        classification=ClassificationResponse(
            rating=result.classification.rating,
            confidence=result.classification.confidence,
            confidence_percentage=result.classification.confidence_percentage,
        ),
        kinematics=KinematicsResponse(
            max_acceleration=kinematics.max_acceleration,
            club_head_swing_speed_proxy=kinematics.club_head_swing_speed_proxy,
            attack_angle_deg=kinematics.attack_angle_deg,
            swing_path_deg=kinematics.swing_path_deg,
            tempo_bpm=kinematics.tempo_bpm,
            impact_timestamp=kinematics.impact_timestamp,
            impact_index=kinematics.impact_index,
        ),
        distance=DistanceResponse(
            estimated_distance_yd=distance.estimated_distance_yd,
            ball_speed_mph=distance.ball_speed_mph,
            club_head_speed_mph=distance.club_head_speed_mph,
            launch_angle_deg=distance.launch_angle_deg,
            spin_rate_rpm=distance.spin_rate_rpm,
            carry_distance_yd=distance.carry_distance_yd,
            total_distance_yd=distance.total_distance_yd,
            max_height_yd=distance.max_height_yd,
            flight_time_s=distance.flight_time_s,
            confidence=distance.confidence,
            confidence_percentage=distance.confidence_percentage,
            method=distance.method.value,
            distance_range=distance.distance_range,
        ),
        features=result.features.as_dict(),
        feature_schema_version=result.features.schema_version,
        sample_count=result.features.sample_count,
        samples=[_sample_to_schema(s) for s in result.samples] if result.samples is not None else None,
    )


def analyze_and_store(
    samples: Union[SessionBuffer, Sequence[MotionSample]],
    equipment_id: str,
    handedness: str,
    save: bool,
    include_samples: bool,
) -> SwingResult:
    """
    Run the analyzer and optionally persist; typed engine errors propagate
    to the application error handler.
    """
    try:
        result = get_analyzer().analyze(samples, equipment_id, handedness, include_samples=include_samples or save)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown equipment: {equipment_id}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if save:
        get_repository().save(result)
    return result


@router.post("/analyze", response_model=SwingResultResponse)
async def analyze_swing(request: AnalyzeRequest):
    """
    Analyze a complete recorded swing.

    The sample list must be in strictly increasing timestamp order.
    """
    result = analyze_and_store(
        samples_from_schema(request.samples),
        request.equipment_id,
        request.handedness,
        save=request.save,
        include_samples=request.include_samples,
    )
    response = build_result_response(result)
    if not request.include_samples:
        response.samples = None
    return response


@router.get("", response_model=list[SessionSummaryResponse])
async def list_swings():
    """
    List stored swing sessions, newest first.
    """
    return [
        SessionSummaryResponse(
            session_id=s.session_id,
            created_at=s.created_at.isoformat(),
            equipment_id=s.equipment_id,
            handedness=s.handedness,
            rating=s.rating,
            classifier_confidence=s.classifier_confidence,
            estimated_distance_yd=s.estimated_distance_yd,
            confidence=s.confidence,
            swing_duration_s=s.swing_duration_s,
            sample_count=s.sample_count,
            has_samples=s.has_samples,
        )
        for s in get_repository().list_sessions()
    ]


@router.get("/stats", response_model=SwingStatisticsResponse)
async def get_statistics():
    stats = get_repository().statistics()
    return SwingStatisticsResponse(
        total_swings=stats.total_swings,
        excellent_count=stats.excellent_count,
        good_count=stats.good_count,
        average_count=stats.average_count,
        average_distance_yd=stats.average_distance_yd,
        max_distance_yd=stats.max_distance_yd,
        success_rate=stats.success_rate,
        last_swing_at=stats.last_swing_at.isoformat() if stats.last_swing_at else None,
    )


@router.get("/{session_id}", response_model=SwingResultResponse)
async def get_swing(
    session_id: str,
    include_samples: bool = Query(False, description="Include the raw motion samples"),
):
    """
    Get a stored swing session.
    """
    result: Optional[SwingResult] = get_repository().get_session(session_id, include_samples=include_samples)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")

    response = build_result_response(result)
    if not include_samples:
        response.samples = None
    return response


@router.delete("/{session_id}")
async def delete_swing(session_id: str):
    if not get_repository().delete_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"deleted": session_id}
