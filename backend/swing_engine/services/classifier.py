"""
Classifier adapters.

The engine only depends on the SwingClassifier protocol. Two
implementations ship:
- ModelClassifierAdapter wraps a trained model exposing predict(dict) -> dict
- HeuristicSwingClassifier rates swings from threshold rules when no
  trained model is deployed
"""

import logging
from typing import Any, Optional, Protocol

from swing_engine.models.results import AggregatedFeatureVector, ClassifierOutput


logger = logging.getLogger(__name__)

DEFAULT_MODEL_CONFIDENCE = 0.8

RATING_KEYS = ("Rating", "target")
CONFIDENCE_KEYS = ("Rating_confidence", "targetProbability")


class SwingClassifier(Protocol):
    """Classifier collaborator interface."""

    def classify(self, features: AggregatedFeatureVector) -> ClassifierOutput:
        ...


class PredictiveModel(Protocol):
    def predict(self, features: dict) -> dict:
        ...


def _read_confidence(value: Any) -> Optional[float]:
    """Model confidences arrive either as a number or a {label: probability} map."""
    if isinstance(value, dict):
        probabilities = [float(v) for v in value.values()]
        return max(probabilities) if probabilities else None
    if value is None:
        return None
    return float(value)


class ModelClassifierAdapter:
    """Adapter for a trained tabular model using the legacy feature key layout."""

    name = "model"

    def __init__(self, model: PredictiveModel):
        self._model = model

    def classify(self, features: AggregatedFeatureVector) -> ClassifierOutput:
        try:
            prediction = self._model.predict(features.to_model_features())
        except Exception as e:
            logger.error(f"Classifier prediction failed: {e}")
            return ClassifierOutput(rating="Error", confidence=0.0, error=str(e))

        rating = next(
            (str(prediction[key]) for key in RATING_KEYS if prediction.get(key) is not None),
            "Unknown",
        )

        confidences = [
            c for c in (_read_confidence(prediction.get(key)) for key in CONFIDENCE_KEYS)
            if c is not None
        ]
        confidence = max(confidences) if confidences else DEFAULT_MODEL_CONFIDENCE

        logger.info(f"Classifier prediction: {rating} ({confidence:.2f})")
        return ClassifierOutput(rating=rating, confidence=confidence)


# Rules are checked in priority order; the first match wins.
HEURISTIC_RULES = [
    {"rating": "Excellent", "peak_min": 6.0, "rotation_min": 3.0, "confidence": 0.9},
    {"rating": "Good", "peak_min": 4.0, "rotation_min": 1.5, "confidence": 0.85},
    {"rating": "Average", "peak_min": 2.0, "rotation_min": 0.0, "confidence": 0.75},
    {"rating": "Poor", "peak_min": 1.0, "rotation_min": 0.0, "confidence": 0.6},
]

_USER_ACCEL_CHANNELS = ("user_acceleration_x", "user_acceleration_y", "user_acceleration_z")
_ROTATION_CHANNELS = ("rotation_rate_x", "rotation_rate_y", "rotation_rate_z")


def _peak_abs(features: AggregatedFeatureVector, channels: tuple[str, ...]) -> float:
    return max(
        max(abs(features.get(channel, "max")), abs(features.get(channel, "min")))
        for channel in channels
    )


class HeuristicSwingClassifier:
    """
    Threshold classifier over the aggregated feature vector.

    Rates by the largest single-axis user acceleration and rotation rate
    peaks. Below the weakest rule the swing is "Unknown" with zero
    confidence, which callers treat as no usable classification.
    """

    name = "heuristic"

    def __init__(self, rules: Optional[list[dict]] = None):
        self.rules = rules or HEURISTIC_RULES

    def classify(self, features: AggregatedFeatureVector) -> ClassifierOutput:
        peak = _peak_abs(features, _USER_ACCEL_CHANNELS)
        rotation = _peak_abs(features, _ROTATION_CHANNELS)

        for rule in self.rules:
            if peak >= rule["peak_min"] and rotation >= rule["rotation_min"]:
                return ClassifierOutput(rating=rule["rating"], confidence=rule["confidence"])

        logger.debug(f"No heuristic rule matched (peak={peak:.2f}, rotation={rotation:.2f})")
        return ClassifierOutput(rating="Unknown", confidence=0.0)
