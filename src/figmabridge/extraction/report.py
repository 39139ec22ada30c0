"""Human-readable rendering of an extraction outcome."""

from __future__ import annotations

import json
from collections.abc import Sequence

from figmabridge.extraction.extractor import COMPLEX_LAYOUT_WARNING
from figmabridge.extraction.models import ExtractionOutcome, ProgressEvent
from figmabridge.extraction.tracker import efficiency_score

FAILURE_MARKER = "❌"

_SLOW_THRESHOLD_MS = 15000
_FAST_THRESHOLD_MS = 10000


def _bullets(items: Sequence[str]) -> list[str]:
    return [f"- {item}" for item in items]


def _milestones(events: Sequence[ProgressEvent]) -> list[str]:
    return [
        f"{e.stage}: {e.percentage:g}% ({e.duration_ms}ms) - {e.message}"
        for e in events
        if e.is_milestone
    ]


def render_report(
    outcome: ExtractionOutcome,
    events: Sequence[ProgressEvent] | None = None,
    *,
    include_progress: bool = True,
) -> str:
    """Render headline, metrics, counts, warnings, milestones, tips and raw data."""
    perf = outcome.performance
    data = outcome.figma_data
    events = outcome.progress_history if events is None else events

    if outcome.success:
        lines = ["✅ Figma context extracted with streaming optimization", ""]
    else:
        lines = ["⚠️ Figma context extracted with partial results", ""]

    lines.append("🚀 **Performance Summary:**")
    lines.append(f"- Total Time: {perf.total_duration}ms")
    lines.append(f"- Variables: {perf.variables_duration}ms")
    lines.append(f"- Components: {perf.components_duration}ms")
    lines.append(f"- Code Generation: {perf.code_duration}ms")
    if perf.timeout_occurred:
        lines.append(f"- Timeout: {perf.timeout_stage} stage")
    if perf.cache_hits:
        lines.append(f"- Cache Hits: {perf.cache_hits}")
    if perf.retry_attempts:
        lines.append(f"- Retries: {perf.retry_attempts}")
    lines.append(f"- Efficiency: {efficiency_score(perf):g}/100")
    if outcome.fallback_level is not None:
        lines.append(f"- Fallback Level: {outcome.fallback_level}")
    lines.append("")

    lines.append("📊 **Extracted Data:**")
    lines.append(f"- Variables: {len(data.variables)}")
    lines.append(f"- Components: {len(data.components)}")
    lines.append(f"- Code Mappings: {len(data.code_connect_map)}")
    lines.append(f"- Generated Code: {'Yes' if data.code else 'No'}")
    lines.append("")

    if outcome.warnings:
        lines += ["⚠️ **Warnings:**", *_bullets(outcome.warnings), ""]
    if outcome.errors:
        lines += [f"{FAILURE_MARKER} **Errors:**", *_bullets(outcome.errors), ""]

    milestones = _milestones(events)
    if include_progress and milestones:
        lines += ["📈 **Progress History:**", *milestones, ""]

    if perf.timeout_occurred and perf.timeout_stage == "code":
        lines.append("⚡ **Complex Layout Detected:** Code generation timed out.")
        lines.append('💡 **Quick Fix:** Use {"includeCode": false} to get variables and components in ~3 seconds.')
        lines.append("🎯 **Alternative:** Use smaller frame selections for faster code generation.")
        lines.append("")
    elif perf.total_duration > _SLOW_THRESHOLD_MS:
        lines.append('💡 **Performance Tip:** Consider using {"includeCode": false} for faster variable extraction only.')
        lines.append("")
    elif perf.total_duration < _FAST_THRESHOLD_MS:
        lines.append("🎉 **Performance Goal Met:** Extraction completed in <10 seconds!")
        lines.append("")

    if COMPLEX_LAYOUT_WARNING in outcome.warnings:
        lines.append("🏗️  **Complex Layout Tips:**")
        lines.append('- Use {"includeCode": false} for instant variable/component extraction')
        lines.append("- Select smaller components instead of entire pages")
        lines.append("- Variables and design tokens are still fully available")
        lines.append("")

    raw = json.dumps(data.to_wire(), indent=2, ensure_ascii=False)
    lines.append(f"**Raw Data:** {raw}")
    return "\n".join(lines)


def render_failure(error: Exception, url: str | None = None) -> str:
    """Text for a request that could not be extracted at all."""
    text = f"{FAILURE_MARKER} Failed to extract Figma context: {getattr(error, 'message', str(error))}"
    if url:
        text += f"\n\nURL: {url}"
    return text
