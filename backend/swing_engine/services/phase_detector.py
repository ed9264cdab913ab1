"""
Swing phase detector.

Drives the swing state machine one motion sample at a time. Thresholds
are expressed relative to the acceleration threshold A (G) and rotation
threshold R (rad/s):

    idle/address  -> backswing       accel > 0.5A or rotation > 0.3R
    backswing     -> transition      accel > A
    transition    -> downswing       accel > 1.5A
    downswing     -> impact          accel > 2A
    impact        -> followThrough   accel < A
    followThrough -> finish          accel < 0.3A and rotation < 0.3R
    finish        terminal

Transitions only move forward; reset() is the only way back to idle.
"""

import logging
from collections import deque
from typing import Callable, Deque, Optional

from swing_engine.config import EngineConfig, get_config
from swing_engine.models.motion import MotionSample, SwingPhase


logger = logging.getLogger(__name__)

PhaseListener = Callable[[SwingPhase, MotionSample], None]


class PhaseDetector:
    """Instantaneous threshold state machine with a bounded motion history."""

    def __init__(self, config: Optional[EngineConfig] = None):
        config = config or get_config()
        self.acceleration_threshold = config.acceleration_threshold_g
        self.rotation_threshold = config.rotation_threshold_rad_s

        self._phase = SwingPhase.IDLE
        self._swing_start_time: Optional[float] = None
        self._acceleration_history: Deque[float] = deque(maxlen=config.history_size)
        self._rotation_history: Deque[float] = deque(maxlen=config.history_size)
        self._listeners: list[PhaseListener] = []

    @property
    def phase(self) -> SwingPhase:
        return self._phase

    @property
    def progress(self) -> float:
        return self._phase.progress

    @property
    def swing_start_time(self) -> Optional[float]:
        return self._swing_start_time

    @property
    def acceleration_history(self) -> list[float]:
        return list(self._acceleration_history)

    @property
    def rotation_history(self) -> list[float]:
        return list(self._rotation_history)

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        """
        Register a phase-change listener.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        self._phase = SwingPhase.IDLE
        self._swing_start_time = None
        self._acceleration_history.clear()
        self._rotation_history.clear()

    def update(self, sample: MotionSample) -> SwingPhase:
        """Feed one sample and return the (possibly unchanged) phase."""
        accel = sample.total_acceleration
        rotation = sample.total_rotation

        self._acceleration_history.append(accel)
        self._rotation_history.append(rotation)

        next_phase = self._next_phase(accel, rotation)
        if next_phase is not self._phase:
            self._enter(next_phase, sample)
        return self._phase

    def _next_phase(self, accel: float, rotation: float) -> SwingPhase:
        a = self.acceleration_threshold
        r = self.rotation_threshold
        phase = self._phase

        if phase in (SwingPhase.IDLE, SwingPhase.ADDRESS):
            if accel > a * 0.5 or rotation > r * 0.3:
                return SwingPhase.BACKSWING
        elif phase is SwingPhase.BACKSWING:
            if accel > a:
                return SwingPhase.TRANSITION
        elif phase is SwingPhase.TRANSITION:
            if accel > a * 1.5:
                return SwingPhase.DOWNSWING
        elif phase is SwingPhase.DOWNSWING:
            if accel > a * 2.0:
                return SwingPhase.IMPACT
        elif phase is SwingPhase.IMPACT:
            if accel < a:
                return SwingPhase.FOLLOW_THROUGH
        elif phase is SwingPhase.FOLLOW_THROUGH:
            if accel < a * 0.3 and rotation < r * 0.3:
                return SwingPhase.FINISH
        return phase

    def _enter(self, phase: SwingPhase, sample: MotionSample) -> None:
        previous = self._phase
        self._phase = phase

        if phase is SwingPhase.BACKSWING and self._swing_start_time is None:
            self._swing_start_time = sample.timestamp
            logger.info(f"Swing detected at t={sample.time_offset:.2f}s")
        elif phase is SwingPhase.IMPACT:
            logger.info(f"Impact detected at t={sample.time_offset:.2f}s")
        elif phase is SwingPhase.FINISH:
            logger.info(f"Swing finished at t={sample.time_offset:.2f}s")
        logger.debug(f"Phase {previous.value} -> {phase.value}")

        for listener in list(self._listeners):
            listener(phase, sample)
