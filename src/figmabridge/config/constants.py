"""Configuration constants.

Values here are protocol constraints and tuned heuristics that should NOT be
user-configurable. For configurable values, see models.py.
"""

# =============================================================================
# Transport
# =============================================================================

BACKOFF_BASE_MS = 1000
"""Delay before the second attempt; doubles per attempt."""

BACKOFF_CAP_MS = 5000
"""Upper bound on any single backoff delay."""

SSE_ACCEPT_HEADER = "text/event-stream"

ACCEPTED_BODY = "Accepted"
"""Literal body the desktop server sends with 202 responses."""

CONNECTION_PROBE_METHOD = "tools/list"

# =============================================================================
# Extraction stage timeouts (ms)
# =============================================================================
# Level 1 timeouts are planned from maxWaitTime (see extraction/timeouts.py);
# levels 2 and 3 use these fixed budgets.

DEFAULT_STAGE_TIMEOUTS_MS = {"variables": 5000, "components": 10000, "code": 15000}
"""Level 1 ceilings for simple layouts."""

COMPLEX_STAGE_TIMEOUTS_MS = {"variables": 3000, "components": 5000, "code": 8000}
"""Level 1 ceilings for layouts flagged complex."""

BALANCED_TIMEOUTS_MS = {"variables": 3000, "components": 5000}
MINIMAL_TIMEOUTS_MS = {"variables": 2000}

COMPLEX_TIMEOUT_FACTOR = 0.6
"""Applied to level 2 and 3 budgets when the layout is flagged complex."""

# =============================================================================
# Progress tracking
# =============================================================================

EXPECTED_STAGE_DURATION_MS = {"variables": 5000, "components": 10000, "code": 15000}
"""Typical stage durations used only to estimate in-flight percentages."""

IN_PROGRESS_PERCENT_CAP = 90
"""Estimated percentage never claims a running stage is done."""

TARGET_TOTAL_DURATION_MS = 15000
"""Efficiency score starts losing points past this total duration."""

# =============================================================================
# Request validation
# =============================================================================

MAX_WAIT_MIN_MS = 5000
MAX_WAIT_MAX_MS = 60000
