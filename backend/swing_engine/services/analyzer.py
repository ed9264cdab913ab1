"""
Swing analysis pipeline.

Runs once per finalized session:
    aggregate features -> estimate kinematics -> classify ->
    calculate distance -> compose result

Every stage is a pure function of the finalized buffer, so analyzing
the same buffer twice yields identical values.
"""

import logging
from typing import Optional, Sequence, Union

from swing_engine.config import EngineConfig, get_config
from swing_engine.errors import InsufficientData, MLModelUnavailable
from swing_engine.models.equipment import EquipmentTable, Handedness, get_equipment_table
from swing_engine.models.motion import MotionSample
from swing_engine.models.results import SwingResult
from swing_engine.models.session import SessionBuffer
from swing_engine.services.aggregator import aggregate_features
from swing_engine.services.classifier import HeuristicSwingClassifier, SwingClassifier
from swing_engine.services.composer import compose_result
from swing_engine.services.kinematics import estimate_kinematics
from swing_engine.services.trajectory import calculate_distance


logger = logging.getLogger(__name__)


class SwingAnalyzer:
    """
    Turns a finalized session buffer into a SwingResult.

    A missing classifier is allowed at construction so deployments can
    still record; analysis then fails with MLModelUnavailable.
    """

    def __init__(
        self,
        classifier: Optional[SwingClassifier] = None,
        config: Optional[EngineConfig] = None,
        equipment: Optional[EquipmentTable] = None,
    ):
        self.classifier = classifier
        self._config = config or get_config()
        self._equipment = equipment

    @property
    def equipment(self) -> EquipmentTable:
        return self._equipment if self._equipment is not None else get_equipment_table()

    def analyze(
        self,
        samples: Union[SessionBuffer, Sequence[MotionSample]],
        equipment_id: str,
        handedness: Union[str, Handedness] = Handedness.LEFT,
        include_samples: bool = False,
    ) -> SwingResult:
        """
        Analyze one completed swing.

        Raises:
            KeyError: unknown equipment id
            ValueError: samples out of timestamp order
            InsufficientData: too few samples, zero distance, or peak
                acceleration too low
            MLModelUnavailable: classifier absent, failed or not confident
        """
        config = self._config
        if len(samples) < config.min_samples:
            raise InsufficientData(
                f"{len(samples)} samples collected, {config.min_samples} required"
            )

        profile = self.equipment.get(equipment_id)
        hand = Handedness.parse(handedness)
        buffer = samples if isinstance(samples, SessionBuffer) else SessionBuffer.finalized(samples)
        if not buffer.is_closed:
            raise ValueError("Session buffer must be finalized before analysis")

        features = aggregate_features(buffer, profile.id, hand, config)
        kinematics = estimate_kinematics(buffer)

        if self.classifier is None:
            raise MLModelUnavailable("no classifier configured")
        classification = self.classifier.classify(features)
        # An unrecognized rating still gets a distance, at the lowest impact quality
        if not classification.is_valid:
            raise MLModelUnavailable(classification.error or "classifier returned no rating")
        if classification.confidence <= config.min_classifier_confidence:
            raise MLModelUnavailable(
                f"classifier confidence {classification.confidence:.2f} <= "
                f"{config.min_classifier_confidence:.2f}"
            )

        distance = calculate_distance(kinematics, profile, classification, len(buffer), config)
        if distance.estimated_distance_yd <= 0:
            raise InsufficientData("distance calculation produced no estimate")
        if kinematics.max_acceleration <= config.min_peak_acceleration_g:
            raise InsufficientData(
                f"peak acceleration {kinematics.max_acceleration:.2f}g too low"
            )

        result = compose_result(
            equipment_id=profile.id,
            handedness=hand.value,
            classification=classification,
            kinematics=kinematics,
            distance=distance,
            features=features,
            samples=buffer.samples if include_samples else None,
        )
        logger.info(
            f"Swing analyzed: {profile.display_name}, {classification.rating} "
            f"({classification.confidence_percentage}%), "
            f"{distance.estimated_distance_yd:.1f} yd, confidence {distance.confidence:.2f}"
        )
        return result


_analyzer: Optional[SwingAnalyzer] = None


def get_analyzer() -> SwingAnalyzer:
    """Get the global analyzer (heuristic classifier unless one was installed)."""
    global _analyzer
    if _analyzer is None:
        _analyzer = SwingAnalyzer(HeuristicSwingClassifier())
    return _analyzer


def init_analyzer(
    classifier: Optional[SwingClassifier],
    config: Optional[EngineConfig] = None,
) -> SwingAnalyzer:
    global _analyzer
    _analyzer = SwingAnalyzer(classifier, config)
    return _analyzer
