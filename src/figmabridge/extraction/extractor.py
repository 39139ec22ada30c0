"""Progressive-fallback extraction of Figma design context.

Four levels are tried in order until one succeeds:

1. Optimal: variables, component mappings and generated code
2. Balanced: variables and component mappings
3. Minimal: variables only
4. Emergency: no network, file/node ids parsed from the URL

Levels 1-3 succeed when variables succeed; component and code failures
only add warnings. Level 4 always succeeds, so a well-formed request always
ends with usable data. Each remote call runs under ``asyncio.wait_for``; a
call that loses its race is cancelled, which closes its HTTP stream.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

import structlog

from figmabridge.config.models import ExtractionConfig
from figmabridge.core.errors import DomainError, FigmaBridgeError, TransportError
from figmabridge.extraction.models import (
    ExtractionOutcome,
    ExtractionRequest,
    FigmaData,
    ProgressEvent,
    Stage,
)
from figmabridge.extraction.timeouts import (
    StageTimeouts,
    detect_complex_layout,
    plan_balanced_timeouts,
    plan_minimal_timeouts,
    plan_optimal_timeouts,
)
from figmabridge.extraction.tracker import ProgressTracker
from figmabridge.figma.client import FigmaClient
from figmabridge.figma.urls import parse_figma_url

log = structlog.get_logger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[ProgressEvent], None]

RECOMMENDED_APPROACH = "Consider using IDE integration with Figma MCP for better results"

FALLBACK_BALANCED = "Falling back to essential data extraction (variables + components only)"
FALLBACK_MINIMAL = "Falling back to minimal extraction (variables only)"
FALLBACK_EMERGENCY = "Using emergency fallback - providing basic file information"
COMPLEX_LAYOUT_WARNING = "Complex layout detected. Code generation may timeout gracefully."
EMERGENCY_WARNINGS = (
    "Emergency fallback active - Figma MCP server may be overloaded or design is extremely complex",
    "Basic file information extracted from URL",
    "For better results: 1) Try smaller frame selections, 2) Use IDE integration, 3) Retry later",
)


@dataclass(slots=True)
class StageResult(Generic[T]):
    """Outcome of one raced remote call."""

    value: T | None = None
    timed_out: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failure_verb(self) -> str:
        return "timed out" if self.timed_out else "failed"


@dataclass
class _Run:
    """Mutable state of a single extraction."""

    tracker: ProgressTracker
    on_progress: ProgressCallback | None
    url: str
    node_id: str | None
    complex_layout: bool
    max_wait_ms: int
    include_code: bool
    data: FigmaData
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    events: list[ProgressEvent] = field(default_factory=list)

    def emit(self, stage: Stage, percentage: float, message: str | None = None) -> None:
        event = self.tracker.update_stage(stage, percentage, message)
        self.events.append(event)
        log.debug("progress", stage=event.stage, percentage=event.percentage, msg=event.message)
        if self.on_progress is not None:
            self.on_progress(event)


class ProgressiveFallbackExtractor:
    """Runs the fallback ladder against a ``FigmaClient``."""

    def __init__(
        self,
        client: FigmaClient,
        config: ExtractionConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        utcnow: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.client = client
        self.config = config or ExtractionConfig()
        self._clock = clock
        self._utcnow = utcnow

    async def extract(
        self,
        request: ExtractionRequest,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractionOutcome:
        """Extract design context for a URL, or pass pre-extracted data through.

        Raises:
            DomainError: Neither url nor figma data was given, or the URL is
                not a Figma file/design URL.
            TransportError: The server could not be reached at all
                (``SERVER_UNAVAILABLE``); no fallback level can run.
        """
        tracker = ProgressTracker(clock=self._clock)
        callback = on_progress if request.options.progress_updates else None

        if request.is_pass_through:
            return self._pass_through(request, tracker, callback)
        if not request.url:
            raise DomainError.missing_input()

        if not await self.client.test_connection():
            log.warning("extraction_preflight_failed", url=request.url)
            raise TransportError.server_unavailable("connection check failed")

        location = parse_figma_url(request.url)
        run = _Run(
            tracker=tracker,
            on_progress=callback,
            url=request.url,
            node_id=location.node_id,
            complex_layout=detect_complex_layout(request.url),
            max_wait_ms=request.options.max_wait_time or self.config.max_wait_ms,
            include_code=request.options.include_code,
            data=FigmaData(file_id=location.file_id, node_id=location.node_id, url=request.url),
        )
        log.info(
            "extraction_started",
            file_id=location.file_id,
            node_id=location.node_id,
            complex_layout=run.complex_layout,
            strategy=request.options.timeout_strategy,
        )

        with self._observing(tracker):
            level, success = await self._run_ladder(run, request.options.timeout_strategy)

        if success:
            run.emit("complete", 100, "Extraction completed")
        else:
            run.emit("complete", 100, "Extraction stopped: optimal extraction failed")

        metrics = tracker.get_metrics()
        log.info(
            "extraction_finished",
            fallback_level=level,
            success=success,
            summary=tracker.summary(),
        )
        return ExtractionOutcome(
            success=success,
            figma_data=run.data,
            performance=metrics,
            warnings=run.warnings,
            errors=run.errors,
            fallback_level=level,
            progress_history=run.events,
        )

    # =========================================================================
    # Entry modes
    # =========================================================================

    def _pass_through(
        self,
        request: ExtractionRequest,
        tracker: ProgressTracker,
        on_progress: ProgressCallback | None,
    ) -> ExtractionOutcome:
        assert request.figma_data is not None
        payload: dict[str, Any] = dict(request.figma_data)
        payload["url"] = payload.get("url") or request.url or ""
        data = FigmaData.model_validate(payload)

        event = tracker.update_stage("complete", 100, "Using pre-extracted data")
        if on_progress is not None:
            on_progress(event)
        log.info("extraction_pass_through", file_id=data.file_id)

        return ExtractionOutcome(
            success=True,
            figma_data=data,
            performance=tracker.get_metrics(),
            progress_history=[event],
        )

    def _observing(self, tracker: ProgressTracker) -> _ObserverScope:
        return _ObserverScope(self.client, tracker)

    async def _run_ladder(self, run: _Run, strategy: str) -> tuple[int, bool]:
        if await self._try_optimal(run):
            return 1, True

        if strategy == "fail":
            run.data = FigmaData(file_id=run.data.file_id, node_id=run.node_id, url=run.url)
            return 1, False

        if strategy == "graceful":
            run.warnings.append(FALLBACK_BALANCED)
            log.info("fallback_level", level=2)
            if await self._try_balanced(run):
                return 2, True

            run.warnings.append(FALLBACK_MINIMAL)
            log.info("fallback_level", level=3)
            if await self._try_minimal(run):
                return 3, True

        run.warnings.append(FALLBACK_EMERGENCY)
        log.warning("fallback_level", level=4)
        self._emergency(run)
        return 4, True

    # =========================================================================
    # Levels
    # =========================================================================

    async def _try_optimal(self, run: _Run) -> bool:
        timeouts = plan_optimal_timeouts(run.max_wait_ms, run.complex_layout)

        run.emit("variables", 0, "Extracting design variables...")
        if not await self._variables_stage(run, timeouts, level_name="Optimal"):
            return False

        run.emit("components", 0, "Analyzing components...")
        await self._components_stage(run, timeouts)

        if not (run.include_code and run.node_id):
            run.emit("code", 100, "Code generation skipped")
            return True

        if run.complex_layout:
            run.emit("code", 0, "Complex layout - attempting code generation with aggressive timeout")
            run.warnings.append(COMPLEX_LAYOUT_WARNING)
        else:
            run.emit("code", 0, "Generating React code...")

        assert timeouts.code is not None
        code = await self._race(run, "code", self.client.get_code(run.url, run.node_id), timeouts.code)
        if code.ok and code.value is not None:
            run.data.code = code.value.code or None
            run.data.components = code.value.components
            run.emit("code", 100, "Code generation completed")
        else:
            run.warnings.append(f"Code generation {code.failure_verb} - design data still fully available")
            run.emit("code", 50, f"Code generation {code.failure_verb} gracefully")
        return True

    async def _try_balanced(self, run: _Run) -> bool:
        timeouts = plan_balanced_timeouts(run.complex_layout)

        run.emit("variables", 0, "Fast variables extraction...")
        if not await self._variables_stage(run, timeouts, level_name="Balanced"):
            return False

        run.emit("components", 0, "Fast components extraction...")
        await self._components_stage(run, timeouts)
        run.emit("code", 100, "Code generation skipped for performance")
        return True

    async def _try_minimal(self, run: _Run) -> bool:
        timeouts = plan_minimal_timeouts(run.complex_layout)

        run.emit("variables", 0, "Minimal variables extraction...")
        if not await self._variables_stage(run, timeouts, level_name="Minimal"):
            return False

        run.emit("components", 100, "Components skipped for performance")
        run.emit("code", 100, "Code generation skipped for performance")
        return True

    def _emergency(self, run: _Run) -> None:
        run.data = FigmaData(
            file_id=run.data.file_id,
            node_id=run.node_id,
            url=run.url,
            metadata={
                "extractionMethod": "emergency_fallback",
                "figmaFileId": run.data.file_id,
                "figmaNodeId": run.node_id,
                "extractedAt": self._utcnow().isoformat(),
                "complexityDetected": run.complex_layout,
                "recommendedApproach": RECOMMENDED_APPROACH,
            },
        )
        run.warnings.extend(EMERGENCY_WARNINGS)
        run.emit("variables", 100, "Emergency fallback: Basic info extracted")
        run.emit("components", 100, "Emergency fallback: File metadata available")
        run.emit("code", 100, "Emergency fallback: URL data parsed")

    # =========================================================================
    # Stages
    # =========================================================================

    async def _variables_stage(self, run: _Run, timeouts: StageTimeouts, *, level_name: str) -> bool:
        result = await self._race(
            run,
            "variables",
            self.client.get_variable_defs(run.url, run.node_id),
            timeouts.variables,
        )
        if not result.ok or result.value is None:
            run.errors.append(f"{level_name} extraction failed: variables {result.failure_verb} ({result.error})")
            return False
        run.data.variables = result.value.variables
        run.emit("variables", 100, f"Variables: {len(run.data.variables)} found")
        return True

    async def _components_stage(self, run: _Run, timeouts: StageTimeouts) -> None:
        assert timeouts.components is not None
        result = await self._race(
            run,
            "components",
            self.client.get_code_connect_map(run.url, run.node_id),
            timeouts.components,
        )
        if result.ok and result.value is not None:
            run.data.code_connect_map = result.value.mappings
            run.emit("components", 100, f"Components: {len(run.data.code_connect_map)} mappings")
        else:
            run.warnings.append(f"Component mapping {result.failure_verb}, but variables are available")

    async def _race(self, run: _Run, stage: Stage, call: Awaitable[T], timeout_ms: float) -> StageResult[T]:
        """Await ``call`` for at most ``timeout_ms``. Never raises for remote failures."""
        try:
            value = await asyncio.wait_for(call, timeout_ms / 1000)
        except TimeoutError:
            log.info("stage_timeout", stage=stage, timeout_ms=timeout_ms)
            run.tracker.record_timeout(stage)
            return StageResult(timed_out=True, error=f"no answer within {timeout_ms:g}ms")
        except TransportError as e:
            log.info("stage_failed", stage=stage, error=e.error_name)
            if e.is_timeout:
                run.tracker.record_timeout(stage)
            return StageResult(timed_out=e.is_timeout, error=e.message)
        except FigmaBridgeError as e:
            log.info("stage_failed", stage=stage, error=e.error_name)
            return StageResult(error=e.message)
        except Exception as e:  # noqa: BLE001
            log.warning("stage_error", stage=stage, error=str(e), exc_info=True)
            return StageResult(error=str(e) or type(e).__name__)
        return StageResult(value=value)


class _ObserverScope:
    """Routes cache hits and transport retries into a tracker for one extraction."""

    def __init__(self, client: FigmaClient, tracker: ProgressTracker) -> None:
        self._client = client
        self._tracker = tracker

    def __enter__(self) -> None:
        self._saved = (self._client.cache_hit_observer, self._client.transport.retry_observer)
        self._client.cache_hit_observer = lambda _tool: self._tracker.record_cache_hit()
        self._client.transport.retry_observer = lambda _attempt, _err: self._tracker.record_retry()

    def __exit__(self, *exc_info: object) -> None:
        self._client.cache_hit_observer, self._client.transport.retry_observer = self._saved
