"""
Swing session coordinator.

Owns one recording attempt end to end: start the recorder, wait for the
session to complete, analyze it, save it. Waiting is a single await over
a queue of recorder events with a bounded poll interval, so the settle
and idle-timeout timers still advance when no samples arrive.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional, Union

from swing_engine.config import EngineConfig
from swing_engine.errors import AnalysisTimeout, SwingAnalysisError
from swing_engine.models.equipment import Handedness
from swing_engine.models.motion import PhaseEvent, RecordingStatus
from swing_engine.models.results import SwingResult
from swing_engine.services.analyzer import SwingAnalyzer
from swing_engine.services.recorder import SwingRecorder
from swing_engine.services.repository import SessionRepository


logger = logging.getLogger(__name__)


class CoordinatorState(Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    WAITING_FOR_SWING = "waiting_for_swing"
    RECORDING = "recording"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in _ACTIVE_STATES


_ACTIVE_STATES = {
    CoordinatorState.PREPARING,
    CoordinatorState.WAITING_FOR_SWING,
    CoordinatorState.RECORDING,
    CoordinatorState.ANALYZING,
}

_STATE_PROGRESS = {
    CoordinatorState.IDLE: 0.0,
    CoordinatorState.PREPARING: 0.2,
    CoordinatorState.WAITING_FOR_SWING: 0.3,
    CoordinatorState.RECORDING: 0.6,
    CoordinatorState.ANALYZING: 0.8,
    CoordinatorState.COMPLETED: 1.0,
    CoordinatorState.ERROR: 0.0,
}

StateListener = Callable[[CoordinatorState], None]


class SwingCoordinator:
    """
    Async owner of a single swing session.

    The sensor producer feeds recorder.ingest() independently (from its
    own thread or task); the coordinator only observes.
    """

    def __init__(
        self,
        recorder: SwingRecorder,
        analyzer: SwingAnalyzer,
        repository: Optional[SessionRepository] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.recorder = recorder
        self.analyzer = analyzer
        self.repository = repository
        self._config = config or recorder.config
        self._state = CoordinatorState.IDLE
        self._cancelled = False
        self._listeners: list[StateListener] = []
        self.last_result: Optional[SwingResult] = None
        self.last_error: Optional[SwingAnalysisError] = None

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def progress_percentage(self) -> float:
        return _STATE_PROGRESS[self._state]

    @property
    def deadline_s(self) -> float:
        """Overall bound on one attempt: idle window, swing window, settle delay."""
        return 2 * self._config.max_recording_s + self._config.settle_delay_s

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def run(
        self,
        equipment_id: str,
        handedness: Union[str, Handedness] = Handedness.LEFT,
        include_samples: bool = True,
    ) -> Optional[SwingResult]:
        """
        Record, analyze and save one swing.

        Returns:
            The saved result, or None if cancel() was called meanwhile

        Raises:
            RuntimeError: a session is already in progress
            KeyError: unknown equipment id
            SwingAnalysisError: any typed engine or persistence failure
        """
        if self._state.is_active:
            raise RuntimeError("Swing session already in progress")

        self._cancelled = False
        self.last_error = None
        self._set_state(CoordinatorState.PREPARING)

        loop = asyncio.get_running_loop()
        events: asyncio.Queue = asyncio.Queue()
        unsubscribe = self.recorder.subscribe(
            lambda event: loop.call_soon_threadsafe(events.put_nowait, event)
        )

        started = False
        try:
            self.analyzer.equipment.get(equipment_id)
            if not self.recorder.start():
                raise RuntimeError("Recorder already has an active session")
            started = True
            self._set_state(CoordinatorState.WAITING_FOR_SWING)

            await self._wait_for_completion(events, loop.time() + self.deadline_s)
            if self._cancelled:
                return None

            buffer = self.recorder.collect()
            self._set_state(CoordinatorState.ANALYZING)
            result = self.analyzer.analyze(buffer, equipment_id, handedness, include_samples)
            if self.repository is not None:
                self.repository.save(result)

            self.last_result = result
            self._set_state(CoordinatorState.COMPLETED)
            return result

        except SwingAnalysisError as e:
            logger.error(f"Swing session failed: {e}")
            self.last_error = e
            if started:
                self.recorder.reset()
            self._set_state(CoordinatorState.ERROR)
            raise
        except (asyncio.CancelledError, KeyError, RuntimeError, ValueError):
            if started:
                self.recorder.reset()
            self._set_state(CoordinatorState.IDLE)
            raise
        finally:
            unsubscribe()

    def cancel(self) -> None:
        """Discard the active session without producing a result."""
        if not self._state.is_active:
            return
        logger.info("Swing session cancelled")
        self._cancelled = True
        self.recorder.reset()
        self._set_state(CoordinatorState.IDLE)

    async def _wait_for_completion(self, events: asyncio.Queue, deadline: float) -> None:
        loop = asyncio.get_running_loop()
        while not self._cancelled and not self.recorder.status.is_terminal:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise AnalysisTimeout("session did not complete before the deadline")

            try:
                event: PhaseEvent = await asyncio.wait_for(
                    events.get(), timeout=min(self._config.poll_interval_s, remaining)
                )
            except asyncio.TimeoutError:
                self.recorder.poll()
                continue

            if event.status in (RecordingStatus.RECORDING, RecordingStatus.PROCESSING):
                if self._state is CoordinatorState.WAITING_FOR_SWING:
                    self._set_state(CoordinatorState.RECORDING)

    def _set_state(self, state: CoordinatorState) -> None:
        if state is self._state:
            return
        logger.debug(f"Coordinator state: {self._state.value} -> {state.value}")
        self._state = state
        for listener in list(self._listeners):
            listener(state)
