"""
Confidence scoring from data-quality signals.
"""

import math
from typing import Optional

from swing_engine.models.results import ClassifierOutput, KinematicsSnapshot


BASE_CONFIDENCE = 0.5
SAMPLE_COUNT_BONUS = 0.2
ACCELERATION_BONUS = 0.1
CLASSIFIER_BONUS = 0.2

SAMPLE_COUNT_THRESHOLD = 50
ACCELERATION_THRESHOLD_G = 2.0
CLASSIFIER_CONFIDENCE_THRESHOLD = 0.8


def score_confidence(
    sample_count: int,
    kinematics: KinematicsSnapshot,
    classification: Optional[ClassifierOutput],
) -> float:
    """Combine data-quality signals into a score in [0, 1]."""
    parts = [BASE_CONFIDENCE]
    if sample_count > SAMPLE_COUNT_THRESHOLD:
        parts.append(SAMPLE_COUNT_BONUS)
    if kinematics.max_acceleration > ACCELERATION_THRESHOLD_G:
        parts.append(ACCELERATION_BONUS)
    if classification is not None and classification.confidence > CLASSIFIER_CONFIDENCE_THRESHOLD:
        parts.append(CLASSIFIER_BONUS)

    # fsum keeps 0.5 + 0.2 + 0.1 + 0.2 exactly 1.0
    return max(0.0, min(1.0, math.fsum(parts)))
