"""Progressive-fallback extraction pipeline."""

from figmabridge.extraction.extractor import ProgressCallback, ProgressiveFallbackExtractor
from figmabridge.extraction.models import (
    ExtractionOptions,
    ExtractionOutcome,
    ExtractionRequest,
    FigmaData,
    PerformanceMetrics,
    ProgressEvent,
)
from figmabridge.extraction.report import render_failure, render_report
from figmabridge.extraction.timeouts import detect_complex_layout, plan_optimal_timeouts
from figmabridge.extraction.tracker import ProgressTracker, efficiency_score

__all__ = [
    "ProgressCallback",
    "ProgressiveFallbackExtractor",
    "ExtractionOptions",
    "ExtractionOutcome",
    "ExtractionRequest",
    "FigmaData",
    "PerformanceMetrics",
    "ProgressEvent",
    "render_failure",
    "render_report",
    "detect_complex_layout",
    "plan_optimal_timeouts",
    "ProgressTracker",
    "efficiency_score",
]
