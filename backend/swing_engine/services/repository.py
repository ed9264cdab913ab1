"""
Session Repository - stores composed swing results.

Each session is a JSON document (<session_id>.json) plus, when raw samples
were kept, a motion CSV (<session_id>_samples.csv) in the data folder.
This abstraction layer can be swapped for a real database later without
touching the API.
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from swing_engine.errors import SaveFailed
from swing_engine.models.motion import MotionSample
from swing_engine.models.results import (
    AggregatedFeatureVector,
    CalculationMethod,
    ClassifierOutput,
    DistanceEstimate,
    KinematicsSnapshot,
    SessionSummary,
    SwingResult,
    SwingStatistics,
)
from swing_engine.services.csv_parser import parse_motion_file, write_samples_csv


logger = logging.getLogger(__name__)

SAMPLES_SUFFIX = "_samples.csv"


def result_to_dict(result: SwingResult) -> dict:
    distance = asdict(result.distance)
    distance["method"] = result.distance.method.value
    return {
        "session_id": result.session_id,
        "created_at": result.created_at.isoformat(),
        "equipment_id": result.equipment_id,
        "handedness": result.handedness,
        "classification": asdict(result.classification),
        "kinematics": asdict(result.kinematics),
        "distance": distance,
        "features": {
            "schema_version": result.features.schema_version,
            "equipment_id": result.features.equipment_id,
            "handedness": result.features.handedness,
            "sample_count": result.features.sample_count,
            "values": result.features.as_dict(),
        },
    }


def result_from_dict(data: dict, samples: Optional[list[MotionSample]] = None) -> SwingResult:
    features = data["features"]
    distance = dict(data["distance"])
    distance["method"] = CalculationMethod(distance["method"])
    return SwingResult(
        session_id=data["session_id"],
        created_at=datetime.fromisoformat(data["created_at"]),
        equipment_id=data["equipment_id"],
        handedness=data["handedness"],
        classification=ClassifierOutput(**data["classification"]),
        kinematics=KinematicsSnapshot(**data["kinematics"]),
        distance=DistanceEstimate(**distance),
        features=AggregatedFeatureVector(
            values=tuple(features["values"][name] for name in AggregatedFeatureVector.field_names()),
            equipment_id=features["equipment_id"],
            handedness=features["handedness"],
            sample_count=features["sample_count"],
            schema_version=features["schema_version"],
        ),
        samples=tuple(samples) if samples is not None else None,
    )


class SessionRepository:
    """
    Repository for stored swing sessions.

    Reads and writes files in a folder; parsed results are cached in memory.
    """

    def __init__(self, data_folder: Optional[Path] = None):
        self._data_folder: Optional[Path] = data_folder
        self._cache: dict[str, SwingResult] = {}
        self._index: dict[str, Path] = {}  # id -> json path

        if data_folder is not None:
            self.scan_folder(data_folder)

    @property
    def data_folder(self) -> Optional[Path]:
        return self._data_folder

    @property
    def session_count(self) -> int:
        return len(self._index)

    def scan_folder(self, folder: Path) -> int:
        """
        Index the session documents in a folder.

        Returns:
            Number of sessions found
        """
        if not folder.is_dir():
            logger.info(f"Data folder does not exist yet: {folder}")
            return 0

        count = 0
        for json_file in folder.glob("*.json"):
            if json_file.is_file():
                self._index[json_file.stem] = json_file
                count += 1
        logger.info(f"Scanned {count} stored sessions in {folder}")
        return count

    def save(self, result: SwingResult) -> Path:
        """
        Store a composed result.

        Writes are all-or-nothing: if either file fails, neither is kept.

        Raises:
            SaveFailed: no data folder configured, or the write failed
        """
        if self._data_folder is None:
            raise SaveFailed("no data folder configured")

        json_path = self._data_folder / f"{result.session_id}.json"
        samples_path = self._samples_path(result.session_id)
        try:
            self._data_folder.mkdir(parents=True, exist_ok=True)
            if result.samples:
                write_samples_csv(result.samples, samples_path)
            with open(json_path, "w", encoding="utf-8") as f:
                json.dump(result_to_dict(result), f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            for path in (json_path, samples_path):
                if path.exists():
                    path.unlink()
            logger.error(f"Failed to save session {result.session_id}: {e}")
            raise SaveFailed(str(e)) from e

        self._index[result.session_id] = json_path
        self._cache[result.session_id] = result
        logger.info(f"Saved session {result.session_id} ({result.summary_text})")
        return json_path

    def list_sessions(self) -> list[SessionSummary]:
        """List stored sessions, newest first."""
        summaries = []
        for session_id in list(self._index):
            result = self.get_session(session_id, include_samples=False)
            if result is not None:
                summaries.append(
                    SessionSummary.from_result(result, has_samples=self._samples_path(session_id).exists())
                )

        summaries.sort(key=lambda s: s.created_at, reverse=True)
        return summaries

    def get_session(self, session_id: str, include_samples: bool = True) -> Optional[SwingResult]:
        """
        Get a stored session by id.

        Returns:
            SwingResult if found and readable, None otherwise
        """
        if session_id not in self._index:
            return None

        result = self._cache.get(session_id)
        if result is None:
            try:
                with open(self._index[session_id], "r", encoding="utf-8") as f:
                    result = result_from_dict(json.load(f))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"Unreadable stored session {session_id}: {e}")
                return None
            self._cache[session_id] = result

        if include_samples and result.samples is None:
            samples_path = self._samples_path(session_id)
            if samples_path.exists():
                samples = parse_motion_file(samples_path)
                result = result_from_dict(result_to_dict(result), samples)
        return result

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a stored session and its samples.

        Returns:
            False if the session does not exist
        """
        json_path = self._index.pop(session_id, None)
        if json_path is None:
            return False
        self._cache.pop(session_id, None)
        json_path.unlink(missing_ok=True)
        self._samples_path(session_id).unlink(missing_ok=True)
        logger.info(f"Deleted session {session_id}")
        return True

    def statistics(self) -> SwingStatistics:
        summaries = self.list_sessions()
        distances = [s.estimated_distance_yd for s in summaries if s.estimated_distance_yd > 0]
        return SwingStatistics(
            total_swings=len(summaries),
            excellent_count=sum(1 for s in summaries if s.rating == "Excellent"),
            good_count=sum(1 for s in summaries if s.rating == "Good"),
            average_count=sum(1 for s in summaries if s.rating == "Average"),
            average_distance_yd=sum(distances) / len(distances) if distances else 0.0,
            max_distance_yd=max(distances) if distances else 0.0,
            last_swing_at=summaries[0].created_at if summaries else None,
        )

    def clear_cache(self) -> None:
        self._cache.clear()

    def _samples_path(self, session_id: str) -> Path:
        folder = self._data_folder if self._data_folder is not None else Path(".")
        return folder / f"{session_id}{SAMPLES_SUFFIX}"


# Global repository instance (set up by app initialization)
_repository: Optional[SessionRepository] = None


def get_repository() -> SessionRepository:
    """Get the global repository instance."""
    global _repository
    if _repository is None:
        _repository = SessionRepository()
    return _repository


def init_repository(data_folder: Path) -> SessionRepository:
    """Initialize the global repository with a data folder."""
    global _repository
    _repository = SessionRepository(data_folder)
    return _repository
