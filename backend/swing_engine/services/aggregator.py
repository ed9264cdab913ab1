"""
Feature aggregation.

Computes mean / max / min / sample standard deviation for every channel
of a finalized session buffer. The combined accelerometer channel is
built per sample (user acceleration + gravity) before aggregation.
"""

from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from swing_engine.config import EngineConfig, get_config
from swing_engine.errors import InsufficientData
from swing_engine.models.equipment import Handedness
from swing_engine.models.results import (
    AggregatedFeatureVector,
    ChannelStats,
    FEATURE_CHANNELS,
)
from swing_engine.models.session import SessionBuffer


def sample_std(values: Union[Sequence[float], NDArray[np.float64]]) -> float:
    """Sample standard deviation (n-1 denominator); 0 for fewer than 2 values."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size < 2:
        return 0.0
    return float(np.std(arr, ddof=1))


def channel_statistics(values: Union[Sequence[float], NDArray[np.float64]]) -> ChannelStats:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return ChannelStats(mean=0.0, max=0.0, min=0.0, std=0.0)
    return ChannelStats(
        mean=float(np.mean(arr)),
        max=float(np.max(arr)),
        min=float(np.min(arr)),
        std=sample_std(arr),
    )


def aggregate_features(
    buffer: SessionBuffer,
    equipment_id: str,
    handedness: Union[str, Handedness] = Handedness.LEFT,
    config: Optional[EngineConfig] = None,
) -> AggregatedFeatureVector:
    """
    Build the fixed-schema feature vector for a finalized buffer.

    Raises:
        InsufficientData: buffer has fewer than config.min_samples samples
    """
    config = config or get_config()
    if len(buffer) < config.min_samples:
        raise InsufficientData(
            f"{len(buffer)} samples collected, {config.min_samples} required"
        )

    values: list[float] = []
    for channel in FEATURE_CHANNELS:
        stats = channel_statistics(buffer.channel(channel))
        values.extend((stats.mean, stats.max, stats.min, stats.std))

    return AggregatedFeatureVector(
        values=tuple(values),
        equipment_id=equipment_id,
        handedness=Handedness.parse(handedness).value,
        sample_count=len(buffer),
    )
