"""Stage timing, progress estimates and the efficiency score."""

from __future__ import annotations

import time
from collections.abc import Callable

from figmabridge.config.constants import (
    EXPECTED_STAGE_DURATION_MS,
    IN_PROGRESS_PERCENT_CAP,
    TARGET_TOTAL_DURATION_MS,
)
from figmabridge.extraction.models import PerformanceMetrics, ProgressEvent, Stage

_DONE_MESSAGES: dict[str, str] = {
    "variables": "Variables extraction completed",
    "components": "Components analysis completed",
    "code": "Code generation completed",
    "complete": "Extraction completed successfully",
}

_RUNNING_MESSAGES: dict[str, str] = {
    "variables": "Extracting design variables... ({pct}%)",
    "components": "Analyzing components... ({pct}%)",
    "code": "Generating React code... ({pct}%)",
    "complete": "Finalizing extraction...",
}


def default_message(stage: str, percentage: float) -> str:
    pct = f"{percentage:g}"
    if percentage >= 100:
        return _DONE_MESSAGES.get(stage, f"{stage} completed")
    return _RUNNING_MESSAGES.get(stage, "Processing {stage}... ({pct}%)").format(stage=stage, pct=pct)


def efficiency_score(metrics: PerformanceMetrics) -> float:
    """Score a run out of 100.

    -1 per second past the 15s target (at most -30), -20 if any stage timed
    out, -5 per retry, +2 per cache hit. Clamped to [0, 100].
    """
    score = 100.0
    if metrics.total_duration > TARGET_TOTAL_DURATION_MS:
        score -= min(30.0, (metrics.total_duration - TARGET_TOTAL_DURATION_MS) / 1000)
    if metrics.timeout_occurred:
        score -= 20
    score -= metrics.retry_attempts * 5
    score += metrics.cache_hits * 2
    return max(0.0, min(100.0, score))


class ProgressTracker:
    """Records stage transitions for one extraction.

    A stage's start is taken on the first update naming it; its duration is
    frozen when it reaches 100% or when another stage begins.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.start()

    def _now_ms(self) -> int:
        return round(self._clock() * 1000)

    def start(self) -> None:
        self._start_ms = self._now_ms()
        self._stage_starts: dict[str, int] = {}
        self._durations: dict[str, int] = {}
        self._current: Stage | None = None
        self._timeout_stage: str | None = None
        self._timeout_occurred = False
        self._cache_hits = 0
        self._retries = 0

    @property
    def current_stage(self) -> Stage | None:
        return self._current

    def update_stage(self, stage: Stage, percentage: float, message: str | None = None) -> ProgressEvent:
        now = self._now_ms()
        percentage = max(0.0, min(100.0, percentage))

        if stage != self._current:
            if self._current is not None and self._current not in self._durations:
                self._durations[self._current] = now - self._stage_starts.get(self._current, now)
            self._current = stage
            self._stage_starts[stage] = now

        if percentage >= 100 and stage not in self._durations:
            self._durations[stage] = now - self._stage_starts.get(stage, now)

        return ProgressEvent(
            stage=stage,
            percentage=percentage,
            message=message or default_message(stage, percentage),
            duration_ms=now - self._start_ms,
        )

    def update_message(self, message: str) -> ProgressEvent:
        """Re-announce the current stage with a new message and an estimated percentage."""
        stage = self._current or "variables"
        return self.update_stage(stage, self.estimated_percentage(), message)

    def estimated_percentage(self) -> float:
        """Guess how far the current stage is, from typical durations.

        A UX heuristic, not a measurement: elapsed time over the expected
        duration, capped at 90% until the stage reports completion.
        """
        stage = self._current
        if stage is None:
            return 0.0
        if stage in self._durations:
            return 100.0
        if stage == "complete":
            return 0.0
        expected = EXPECTED_STAGE_DURATION_MS.get(stage, EXPECTED_STAGE_DURATION_MS["variables"])
        elapsed = self._now_ms() - self._stage_starts.get(stage, self._now_ms())
        return float(int(min(IN_PROGRESS_PERCENT_CAP, elapsed / expected * 100)))

    def record_timeout(self, stage: str) -> None:
        self._timeout_occurred = True
        self._timeout_stage = stage

    def record_cache_hit(self) -> None:
        self._cache_hits += 1

    def record_retry(self) -> None:
        self._retries += 1

    def get_metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics(
            total_duration=self._now_ms() - self._start_ms,
            variables_duration=self._durations.get("variables", 0),
            components_duration=self._durations.get("components", 0),
            code_duration=self._durations.get("code", 0),
            timeout_occurred=self._timeout_occurred,
            timeout_stage=self._timeout_stage,
            cache_hits=self._cache_hits,
            retry_attempts=self._retries,
        )

    def get_efficiency_score(self) -> float:
        return efficiency_score(self.get_metrics())

    def timing_breakdown(self) -> dict[str, int]:
        return dict(self._durations)

    def summary(self) -> str:
        """One-line summary for logs."""
        metrics = self.get_metrics()
        parts = [
            f"Total: {metrics.total_duration}ms",
            f"Variables: {metrics.variables_duration}ms",
            f"Components: {metrics.components_duration}ms",
            f"Code: {metrics.code_duration}ms",
            f"Efficiency: {efficiency_score(metrics):g}/100",
        ]
        if metrics.timeout_occurred:
            parts.append(f"Timeout in {metrics.timeout_stage}")
        if metrics.cache_hits:
            parts.append(f"Cache hits: {metrics.cache_hits}")
        if metrics.retry_attempts:
            parts.append(f"Retries: {metrics.retry_attempts}")
        return " | ".join(parts)
