"""
Sample ingestion and session lifecycle.

The recorder owns the active session buffer and the phase detector.
Samples arrive from a fixed-rate producer (~50 Hz) and are processed in
order under a lock, so the producer may call ingest() from its own
thread. Wall-time rules are evaluated against an injectable monotonic
clock:

- after FINISH, ingestion continues for the settle delay, then the
  buffer is finalized
- if the detector never leaves IDLE within the recording window, the
  session aborts with AnalysisTimeout and the buffer is discarded
"""

import logging
import threading
import time
from typing import Callable, Optional

from swing_engine.config import EngineConfig, get_config
from swing_engine.errors import AnalysisTimeout, InsufficientData
from swing_engine.models.motion import (
    MotionSample,
    PhaseError,
    PhaseEvent,
    RecordingStatus,
    SwingPhase,
)
from swing_engine.models.session import SessionBuffer
from swing_engine.services.phase_detector import PhaseDetector


logger = logging.getLogger(__name__)

TIMEOUT_REASON = "AnalysisTimeout"
NO_DATA_REASON = "No data collected"

EventListener = Callable[[PhaseEvent], None]


class SwingRecorder:
    """
    Single-session recorder.

    Usage:
        recorder = SwingRecorder()
        recorder.start()
        for sample in sensor_stream:
            recorder.ingest(sample)
        if recorder.status is RecordingStatus.COMPLETED:
            buffer = recorder.collect()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config or get_config()
        self._clock = clock
        self._lock = threading.RLock()

        self.detector = PhaseDetector(self._config)
        self._buffer: Optional[SessionBuffer] = None
        self._finalized: Optional[SessionBuffer] = None
        self._status = RecordingStatus.IDLE
        self._error: Optional[PhaseError] = None
        self._started_at: Optional[float] = None
        self._finish_at: Optional[float] = None
        self._equipment_id: Optional[str] = None
        self._listeners: list[EventListener] = []

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def status(self) -> RecordingStatus:
        return self._status

    @property
    def phase(self) -> SwingPhase:
        return self.detector.phase

    @property
    def error(self) -> Optional[PhaseError]:
        return self._error

    @property
    def is_active(self) -> bool:
        return self._status in (
            RecordingStatus.WAITING,
            RecordingStatus.RECORDING,
            RecordingStatus.PROCESSING,
        )

    @property
    def sample_count(self) -> int:
        with self._lock:
            if self._buffer is not None:
                return len(self._buffer)
            if self._finalized is not None:
                return len(self._finalized)
            return 0

    @property
    def equipment_id(self) -> Optional[str]:
        """Club selected when the session was started, if any."""
        return self._equipment_id

    @property
    def first_timestamp(self) -> Optional[float]:
        """Timestamp of the first sample in the open session."""
        with self._lock:
            if self._buffer is not None and len(self._buffer) > 0:
                return self._buffer[0].timestamp
            return None

    @property
    def finalized_buffer(self) -> Optional[SessionBuffer]:
        return self._finalized

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a state-change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self, equipment_id: Optional[str] = None) -> bool:
        """
        Begin a new session, optionally tagged with the selected club.

        Returns:
            False (no-op) if a session is already active
        """
        with self._lock:
            if self.is_active:
                logger.warning("Recording already active - ignoring start request")
                return False

            self.detector.reset()
            self._buffer = SessionBuffer()
            self._finalized = None
            self._error = None
            self._started_at = self._clock()
            self._finish_at = None
            self._equipment_id = equipment_id
            self._set_status(RecordingStatus.WAITING)

        logger.info("Started motion recording - waiting for swing")
        return True

    def ingest(self, sample: MotionSample) -> SwingPhase:
        """Append one sample and advance the phase detector."""
        with self._lock:
            if not self.is_active or self._buffer is None:
                return self.detector.phase

            try:
                self._buffer.append(sample)
            except ValueError as e:
                logger.warning(f"Dropping out-of-order sample: {e}")
                return self.detector.phase

            previous = self.detector.phase
            phase = self.detector.update(sample)

            if previous is SwingPhase.IDLE and phase is not SwingPhase.IDLE:
                self._status = RecordingStatus.RECORDING
            if phase is SwingPhase.FINISH and self._finish_at is None:
                self._finish_at = self._clock()
                self._status = RecordingStatus.PROCESSING

            if phase is not previous:
                self._emit(sample.timestamp)

            self._check_timers()
            return self.detector.phase

    def poll(self) -> RecordingStatus:
        """Evaluate settle and timeout timers without a new sample."""
        with self._lock:
            self._check_timers()
            return self._status

    def stop(self) -> Optional[SessionBuffer]:
        """
        Close ingestion early and finalize whatever has been captured.

        Returns:
            The finalized buffer, or None if nothing was recording
        """
        with self._lock:
            if not self.is_active or self._buffer is None:
                return None
            if len(self._buffer) == 0:
                self._fail(NO_DATA_REASON)
                return None
            self._finalize()
            return self._finalized

    def reset(self) -> None:
        """Discard the session and return to idle without producing a result."""
        with self._lock:
            discarded = self.sample_count
            self.detector.reset()
            self._buffer = None
            self._finalized = None
            self._error = None
            self._started_at = None
            self._finish_at = None
            self._equipment_id = None
            self._set_status(RecordingStatus.IDLE)
        logger.info(f"Recording reset - discarded {discarded} samples")

    def collect(self) -> SessionBuffer:
        """
        Hand over the finalized buffer and return to idle.

        Raises:
            AnalysisTimeout: the session timed out waiting for a swing
            InsufficientData: the session ended without usable data
        """
        with self._lock:
            if self._status is RecordingStatus.ERROR:
                reason = self._error.reason if self._error else ""
                self.reset()
                if reason == TIMEOUT_REASON:
                    raise AnalysisTimeout("no swing detected within the recording window")
                raise InsufficientData(reason)

            if self._status is not RecordingStatus.COMPLETED or self._finalized is None:
                raise RuntimeError(f"No completed session to collect (status={self._status.value})")

            buffer = self._finalized
            self._finalized = None
            self._equipment_id = None
            self.detector.reset()
            self._status = RecordingStatus.IDLE
            return buffer

    # ── Internals ─────────────────────────────────────────────────────────────

    def _check_timers(self) -> None:
        now = self._clock()

        if self._status is RecordingStatus.PROCESSING and self._finish_at is not None:
            if now - self._finish_at >= self._config.settle_delay_s:
                self._finalize()
            return

        if (
            self._status is RecordingStatus.WAITING
            and self.detector.phase is SwingPhase.IDLE
            and self._started_at is not None
            and now - self._started_at >= self._config.max_recording_s
        ):
            logger.info("Recording timeout - no swing detected")
            self._fail(TIMEOUT_REASON)

    def _finalize(self) -> None:
        buffer = self._buffer
        if buffer is None:
            return
        buffer.close()
        self._finalized = buffer
        self._buffer = None
        logger.info(f"Stopped motion recording. Collected {len(buffer)} samples")
        self._set_status(RecordingStatus.COMPLETED)

    def _fail(self, reason: str) -> None:
        self._buffer = None
        self._finalized = None
        self._error = PhaseError(reason)
        self._set_status(RecordingStatus.ERROR)

    def _set_status(self, status: RecordingStatus) -> None:
        self._status = status
        self._emit()

    def _emit(self, timestamp: Optional[float] = None) -> None:
        event = PhaseEvent(
            phase=self.detector.phase,
            status=self._status,
            timestamp=timestamp,
            error=self._error,
        )
        for listener in list(self._listeners):
            listener(event)


# Global recorder instance (one active session per process)
_recorder: Optional[SwingRecorder] = None


def get_recorder() -> SwingRecorder:
    """Get the global recorder instance."""
    global _recorder
    if _recorder is None:
        _recorder = SwingRecorder()
    return _recorder


def init_recorder(config: Optional[EngineConfig] = None) -> SwingRecorder:
    """Replace the global recorder, discarding any active session."""
    global _recorder
    _recorder = SwingRecorder(config)
    return _recorder
