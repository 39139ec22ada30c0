"""Stage timeout planning and the layout complexity heuristic."""

from __future__ import annotations

import re
from dataclasses import dataclass

from figmabridge.config.constants import (
    BALANCED_TIMEOUTS_MS,
    COMPLEX_STAGE_TIMEOUTS_MS,
    COMPLEX_TIMEOUT_FACTOR,
    DEFAULT_STAGE_TIMEOUTS_MS,
    MINIMAL_TIMEOUTS_MS,
)
from figmabridge.figma.urls import raw_node_id

_LONG_DIGIT_RUN_RE = re.compile(r"\d{4,}")
_COMPLEX_RANGE_RE = re.compile(r"^(13\d\d|1[4-9]\d\d|[2-9]\d\d\d)")


@dataclass(frozen=True, slots=True)
class StageTimeouts:
    """Per-stage ceilings in milliseconds. ``None`` means the stage is not run."""

    variables: float
    components: float | None = None
    code: float | None = None


def is_complex_node_id(node_id: str) -> bool:
    """Deeply nested frames tend to have long or many-part node ids.

    Complex when the id has a run of 4+ digits, two or more hyphens, or a
    leading number in the 1300-9999 range.
    """
    return (
        _LONG_DIGIT_RUN_RE.search(node_id) is not None
        or node_id.count("-") >= 2
        or _COMPLEX_RANGE_RE.match(node_id) is not None
    )


def detect_complex_layout(url: str | None) -> bool:
    if not url:
        return False
    node_id = raw_node_id(url)
    return node_id is not None and is_complex_node_id(node_id)


def plan_optimal_timeouts(max_wait_ms: float, complex_layout: bool) -> StageTimeouts:
    """Level 1 budgets: fixed ceilings, scaled down for short ``max_wait_ms``."""
    if complex_layout:
        ceilings = COMPLEX_STAGE_TIMEOUTS_MS
        shares = (0.2, 0.3, 0.5)
    else:
        ceilings = DEFAULT_STAGE_TIMEOUTS_MS
        shares = (0.3, 0.6, 1.0)
    return StageTimeouts(
        variables=min(ceilings["variables"], max_wait_ms * shares[0]),
        components=min(ceilings["components"], max_wait_ms * shares[1]),
        code=min(ceilings["code"], max_wait_ms * shares[2]),
    )


def plan_balanced_timeouts(complex_layout: bool) -> StageTimeouts:
    factor = COMPLEX_TIMEOUT_FACTOR if complex_layout else 1.0
    return StageTimeouts(
        variables=BALANCED_TIMEOUTS_MS["variables"] * factor,
        components=BALANCED_TIMEOUTS_MS["components"] * factor,
    )


def plan_minimal_timeouts(complex_layout: bool) -> StageTimeouts:
    factor = COMPLEX_TIMEOUT_FACTOR if complex_layout else 1.0
    return StageTimeouts(variables=MINIMAL_TIMEOUTS_MS["variables"] * factor)
