"""
Result composition.

Assembles already-computed values into a SwingResult; performs no
further computation beyond stamping an id and creation time.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from swing_engine.models.motion import MotionSample
from swing_engine.models.results import (
    AggregatedFeatureVector,
    ClassifierOutput,
    DistanceEstimate,
    KinematicsSnapshot,
    SwingResult,
)


def new_session_id() -> str:
    return uuid.uuid4().hex


def compose_result(
    equipment_id: str,
    handedness: str,
    classification: ClassifierOutput,
    kinematics: KinematicsSnapshot,
    distance: DistanceEstimate,
    features: AggregatedFeatureVector,
    samples: Optional[Sequence[MotionSample]] = None,
    session_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> SwingResult:
    return SwingResult(
        session_id=session_id or new_session_id(),
        created_at=created_at or datetime.now(timezone.utc),
        equipment_id=equipment_id,
        handedness=handedness,
        classification=classification,
        kinematics=kinematics,
        distance=distance,
        features=features,
        samples=tuple(samples) if samples is not None else None,
    )
