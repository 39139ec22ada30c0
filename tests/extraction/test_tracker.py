"""Tests for the progress tracker and efficiency score."""

import pytest

from figmabridge.extraction.models import PerformanceMetrics, ProgressEvent
from figmabridge.extraction.tracker import ProgressTracker, default_message, efficiency_score


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


class TestEfficiencyScore:
    """efficiency_score tests."""

    def test_given_twenty_second_run_with_timeout_when_scored_then_75(self) -> None:
        """5 points for 5s over target and 20 for the timeout."""
        # Given
        metrics = PerformanceMetrics(total_duration=20000, timeout_occurred=True)

        # When / Then
        assert efficiency_score(metrics) == 75

    @pytest.mark.parametrize(
        ("metrics", "expected"),
        [
            (PerformanceMetrics(total_duration=5000), 100),
            (PerformanceMetrics(total_duration=90000), 70),
            (PerformanceMetrics(total_duration=5000, retry_attempts=2), 90),
            (PerformanceMetrics(total_duration=5000, cache_hits=3), 100),
            (PerformanceMetrics(total_duration=16000, cache_hits=1), 100),
            (PerformanceMetrics(total_duration=90000, timeout_occurred=True, retry_attempts=20), 0),
        ],
    )
    def test_given_metrics_when_scored_then_clamped(self, metrics: PerformanceMetrics, expected: float) -> None:
        """Penalties and bonuses are applied then clamped to 0..100."""
        assert efficiency_score(metrics) == expected


class TestProgressTracker:
    """ProgressTracker stage timing."""

    def test_given_stage_transitions_when_metrics_then_durations_frozen(self) -> None:
        """A stage's duration is frozen when the next stage begins."""
        # Given
        clock = FakeClock()
        tracker = ProgressTracker(clock=clock)

        # When
        tracker.update_stage("variables", 0)
        clock.advance_ms(1200)
        tracker.update_stage("components", 0)
        clock.advance_ms(800)
        tracker.update_stage("components", 100)
        clock.advance_ms(500)
        metrics = tracker.get_metrics()

        # Then
        assert metrics.variables_duration == 1200
        assert metrics.components_duration == 800
        assert metrics.code_duration == 0
        assert metrics.total_duration == 2500

    def test_given_completed_stage_when_reentered_then_duration_kept(self) -> None:
        """Durations are recorded once; later passes do not overwrite them."""
        # Given
        clock = FakeClock()
        tracker = ProgressTracker(clock=clock)
        tracker.update_stage("variables", 0)
        clock.advance_ms(300)
        tracker.update_stage("variables", 100)

        # When
        tracker.update_stage("variables", 0, "Fast variables extraction...")
        clock.advance_ms(5000)
        tracker.update_stage("variables", 100)

        # Then
        assert tracker.timing_breakdown() == {"variables": 300}

    def test_given_update_when_emitted_then_event_fields(self) -> None:
        """Events carry the clamped percentage and elapsed time."""
        # Given
        clock = FakeClock()
        tracker = ProgressTracker(clock=clock)
        clock.advance_ms(250)

        # When
        event = tracker.update_stage("code", 140)

        # Then
        assert event == ProgressEvent(
            stage="code",
            percentage=100.0,
            message="Code generation completed",
            duration_ms=250,
        )
        assert event.is_milestone is True

    def test_given_running_stage_when_estimated_then_capped_at_90(self) -> None:
        """Estimates grow with elapsed time but never claim completion."""
        # Given
        clock = FakeClock()
        tracker = ProgressTracker(clock=clock)
        tracker.update_stage("variables", 0)

        # When
        clock.advance_ms(2500)
        halfway = tracker.estimated_percentage()
        clock.advance_ms(60000)
        late = tracker.estimated_percentage()

        # Then
        assert halfway == 50
        assert late == 90

    def test_given_current_stage_when_update_message_then_estimated_percentage(self) -> None:
        """Message updates re-announce the current stage."""
        # Given
        clock = FakeClock()
        tracker = ProgressTracker(clock=clock)
        tracker.update_stage("components", 0)
        clock.advance_ms(1000)

        # When
        event = tracker.update_message("Still waiting for mappings")

        # Then
        assert event.stage == "components"
        assert event.percentage == 10
        assert event.message == "Still waiting for mappings"

    def test_given_counters_when_recorded_then_in_metrics_and_summary(self) -> None:
        """Timeouts, cache hits and retries are counted."""
        # Given
        tracker = ProgressTracker(clock=FakeClock())

        # When
        tracker.record_timeout("code")
        tracker.record_cache_hit()
        tracker.record_retry()
        tracker.record_retry()
        metrics = tracker.get_metrics()

        # Then
        assert metrics.timeout_occurred is True
        assert metrics.timeout_stage == "code"
        assert metrics.cache_hits == 1
        assert metrics.retry_attempts == 2
        assert tracker.get_efficiency_score() == 72
        summary = tracker.summary()
        assert "Timeout in code" in summary
        assert "Retries: 2" in summary
        assert "Efficiency: 72/100" in summary

    def test_given_started_again_when_start_then_state_reset(self) -> None:
        """start() clears everything for a new extraction."""
        # Given
        tracker = ProgressTracker(clock=FakeClock())
        tracker.update_stage("variables", 100)
        tracker.record_timeout("variables")

        # When
        tracker.start()

        # Then
        assert tracker.current_stage is None
        assert tracker.get_metrics().timeout_occurred is False
        assert tracker.timing_breakdown() == {}


class TestDefaultMessage:
    """default_message tests."""

    def test_running_stage_message_includes_percentage(self) -> None:
        assert default_message("variables", 40) == "Extracting design variables... (40%)"

    def test_unknown_stage_falls_back(self) -> None:
        assert default_message("other", 100) == "other completed"


def test_timeout_messages_are_milestones() -> None:
    """Any timeout notice is kept in the history summary."""
    event = ProgressEvent(stage="code", percentage=50, message="Code generation timed out gracefully", duration_ms=1)

    assert event.is_milestone is False

    timeout = ProgressEvent(stage="code", percentage=50, message="Timeout waiting for code", duration_ms=1)

    assert timeout.is_milestone is True
