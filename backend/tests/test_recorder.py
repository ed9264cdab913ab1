"""
Tests for the swing recorder lifecycle.
"""

import threading

import pytest

from swing_engine.config import EngineConfig
from swing_engine.errors import AnalysisTimeout, InsufficientData
from swing_engine.models.motion import RecordingStatus, SwingPhase
from swing_engine.services.recorder import NO_DATA_REASON, TIMEOUT_REASON, SwingRecorder
from swing_engine.utils.sample_data import generate_swing_samples


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder(clock):
    return SwingRecorder(EngineConfig(), clock=clock)


def feed_with_clock(recorder, clock, samples, step: float = 0.02):
    for sample in samples:
        recorder.ingest(sample)
        clock.advance(step)


class TestStart:
    """Tests for session start."""

    def test_start_waits_for_swing(self, recorder):
        assert recorder.start() is True
        assert recorder.status is RecordingStatus.WAITING
        assert recorder.is_active

    def test_start_while_active_is_noop(self, recorder):
        recorder.start()
        recorder.ingest(generate_swing_samples()[0])

        assert recorder.start() is False
        assert recorder.sample_count == 1

    def test_session_context(self, recorder, clock):
        assert recorder.first_timestamp is None
        recorder.start("steel_7")
        assert recorder.equipment_id == "steel_7"
        assert recorder.first_timestamp is None

        samples = generate_swing_samples(start_time=3.0)
        feed_with_clock(recorder, clock, samples[:5])
        assert recorder.first_timestamp == samples[0].timestamp

        recorder.reset()
        assert recorder.equipment_id is None
        assert recorder.first_timestamp is None

    def test_ingest_without_session_is_ignored(self, recorder):
        recorder.ingest(generate_swing_samples()[0])
        assert recorder.sample_count == 0
        assert recorder.status is RecordingStatus.IDLE


class TestCompletion:
    """Tests for finish, settle delay and finalization."""

    def test_swing_moves_to_recording(self, recorder, clock):
        recorder.start()
        feed_with_clock(recorder, clock, generate_swing_samples()[:26])
        assert recorder.status is RecordingStatus.RECORDING

    def test_finish_waits_for_settle_delay(self, recorder, clock):
        recorder.start()
        feed_with_clock(recorder, clock, generate_swing_samples())

        # finish at sample 38; 21 further samples cover only 0.42 s
        assert recorder.phase is SwingPhase.FINISH
        assert recorder.status is RecordingStatus.PROCESSING

        clock.advance(1.0)
        assert recorder.poll() is RecordingStatus.COMPLETED

    def test_trailing_samples_are_kept(self, recorder, clock):
        samples = generate_swing_samples(n_samples=100, peak_index=30)
        recorder.start()
        feed_with_clock(recorder, clock, samples[:39])
        feed_with_clock(recorder, clock, samples[39:], step=0.0)
        clock.advance(1.0)
        recorder.poll()

        assert len(recorder.collect()) == 100

    def test_collect_hands_over_closed_buffer(self, recorder, clock):
        recorder.start()
        feed_with_clock(recorder, clock, generate_swing_samples())
        clock.advance(1.0)
        recorder.poll()

        buffer = recorder.collect()

        assert buffer.is_closed
        assert len(buffer) == 60
        assert recorder.status is RecordingStatus.IDLE
        assert recorder.phase is SwingPhase.IDLE

    def test_collect_before_completion_fails(self, recorder):
        recorder.start()
        with pytest.raises(RuntimeError):
            recorder.collect()

    def test_stop_finalizes_early(self, recorder):
        recorder.start()
        for sample in generate_swing_samples()[:10]:
            recorder.ingest(sample)

        buffer = recorder.stop()

        assert buffer is not None and len(buffer) == 10
        assert recorder.status is RecordingStatus.COMPLETED

    def test_stop_without_samples_fails(self, recorder):
        recorder.start()
        assert recorder.stop() is None
        assert recorder.status is RecordingStatus.ERROR
        assert recorder.error.reason == NO_DATA_REASON
        with pytest.raises(InsufficientData):
            recorder.collect()


class TestTimeoutAndReset:
    """Tests for the idle timeout and explicit reset."""

    def test_idle_timeout(self, recorder, clock):
        recorder.start()
        clock.advance(10.0)

        assert recorder.poll() is RecordingStatus.ERROR
        assert recorder.error.reason == TIMEOUT_REASON
        assert recorder.sample_count == 0
        with pytest.raises(AnalysisTimeout):
            recorder.collect()
        assert recorder.status is RecordingStatus.IDLE

    def test_no_timeout_once_swing_started(self, recorder, clock):
        recorder.start()
        feed_with_clock(recorder, clock, generate_swing_samples()[:26])
        clock.advance(20.0)

        assert recorder.poll() is RecordingStatus.RECORDING

    def test_quiet_samples_do_not_prevent_timeout(self, recorder, clock):
        recorder.start()
        quiet = generate_swing_samples(n_samples=20, peak_g=0.1)
        feed_with_clock(recorder, clock, quiet, step=0.6)

        assert recorder.status is RecordingStatus.ERROR

    def test_reset_discards_session(self, recorder, clock):
        recorder.start()
        feed_with_clock(recorder, clock, generate_swing_samples()[:30])

        recorder.reset()

        assert recorder.status is RecordingStatus.IDLE
        assert recorder.phase is SwingPhase.IDLE
        assert recorder.sample_count == 0
        assert recorder.finalized_buffer is None


class TestOrderingAndEvents:
    """Tests for ordered ingestion and change events."""

    def test_out_of_order_sample_dropped(self, recorder):
        samples = generate_swing_samples()
        recorder.start()
        recorder.ingest(samples[1])
        recorder.ingest(samples[0])
        recorder.ingest(samples[1])

        assert recorder.sample_count == 1

    def test_events_follow_lifecycle(self, recorder, clock):
        events = []
        recorder.subscribe(events.append)

        recorder.start()
        feed_with_clock(recorder, clock, generate_swing_samples())
        clock.advance(1.0)
        recorder.poll()

        statuses = [e.status for e in events]
        phases = [e.phase for e in events]
        assert statuses[0] is RecordingStatus.WAITING
        assert statuses[-1] is RecordingStatus.COMPLETED
        assert SwingPhase.IMPACT in phases
        assert all(a <= b for a, b in zip(phases, phases[1:]))

    def test_concurrent_producer_keeps_order(self, clock):
        """Samples ingested from another thread land in order."""
        recorder = SwingRecorder(EngineConfig(), clock=clock)
        recorder.start()
        samples = generate_swing_samples(n_samples=40, peak_g=0.1)

        producer = threading.Thread(target=lambda: [recorder.ingest(s) for s in samples])
        producer.start()
        producer.join()

        buffer = recorder.stop()
        timestamps = [s.timestamp for s in buffer]
        assert timestamps == sorted(timestamps)
        assert len(buffer) == 40
