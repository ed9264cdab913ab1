"""
API routes for live recording.

Sensor clients push batches of samples as they arrive; the single
process-wide recorder advances its phase detector per sample.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException

from swing_engine.api.schemas import (
    IngestSamplesRequest,
    RecordingAnalyzeRequest,
    RecordingStatusResponse,
    StartRecordingRequest,
    SwingResultResponse,
)
from swing_engine.api.swings import analyze_and_store, build_result_response, samples_from_schema
from swing_engine.models.equipment import Handedness, get_equipment_table
from swing_engine.models.motion import RecordingStatus
from swing_engine.services.recorder import SwingRecorder, get_recorder


router = APIRouter(prefix="/recording", tags=["recording"])


def _status_response(recorder: SwingRecorder) -> RecordingStatusResponse:
    return RecordingStatusResponse(
        status=recorder.status.value,
        phase=recorder.phase.value,
        progress=recorder.phase.progress,
        sample_count=recorder.sample_count,
        is_active=recorder.is_active,
        error=recorder.error.reason if recorder.error else None,
    )


@router.post("/start", response_model=RecordingStatusResponse)
async def start_recording(request: Optional[StartRecordingRequest] = None):
    """
    Start a new recording session.

    Only one session may be active at a time.
    """
    equipment_id = request.equipment_id if request is not None else None
    if equipment_id is not None and equipment_id not in get_equipment_table():
        raise HTTPException(status_code=400, detail=f"Unknown equipment: {equipment_id}")

    recorder = get_recorder()
    if not recorder.start(equipment_id):
        raise HTTPException(status_code=409, detail="Recording already active")
    return _status_response(recorder)


@router.post("/samples", response_model=RecordingStatusResponse)
async def ingest_samples(request: IngestSamplesRequest):
    """
    Push a batch of samples; omitted time offsets count from the session's first sample.
    """
    recorder = get_recorder()
    if not recorder.is_active:
        raise HTTPException(status_code=409, detail="No active recording")

    for sample in samples_from_schema(request.samples, session_start=recorder.first_timestamp):
        recorder.ingest(sample)
    recorder.poll()
    return _status_response(recorder)


@router.get("/status", response_model=RecordingStatusResponse)
async def get_status():
    recorder = get_recorder()
    recorder.poll()
    return _status_response(recorder)


@router.post("/stop", response_model=RecordingStatusResponse)
async def stop_recording():
    """
    Stop ingesting and finalize whatever has been captured.
    """
    recorder = get_recorder()
    if not recorder.is_active:
        raise HTTPException(status_code=409, detail="No active recording")
    recorder.stop()
    return _status_response(recorder)


@router.post("/reset", response_model=RecordingStatusResponse)
async def reset_recording():
    """
    Discard the current session without producing a result.
    """
    recorder = get_recorder()
    recorder.reset()
    return _status_response(recorder)


@router.post("/analyze", response_model=SwingResultResponse)
async def analyze_recording(request: RecordingAnalyzeRequest):
    """
    Analyze the completed recording and hand the recorder back to idle.
    """
    recorder = get_recorder()
    recorder.poll()
    if recorder.status not in (RecordingStatus.COMPLETED, RecordingStatus.ERROR):
        raise HTTPException(
            status_code=409,
            detail=f"No completed recording (status={recorder.status.value})",
        )

    if recorder.status is RecordingStatus.ERROR:
        recorder.collect()  # raises the session error and returns to idle

    # Validate before collect() so a bad request keeps the recording
    equipment_id = request.equipment_id or recorder.equipment_id
    if equipment_id is None:
        raise HTTPException(status_code=400, detail="No equipment selected for this recording")
    if equipment_id not in get_equipment_table():
        raise HTTPException(status_code=400, detail=f"Unknown equipment: {equipment_id}")
    try:
        Handedness.parse(request.handedness)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    buffer = recorder.collect()
    result = analyze_and_store(
        buffer,
        equipment_id,
        request.handedness,
        save=request.save,
        include_samples=request.include_samples,
    )
    response = build_result_response(result)
    if not request.include_samples:
        response.samples = None
    return response
