"""FastMCP server exposing ``extract_figma_context``.

The tool validates its arguments, runs the fallback extractor and returns the
rendered report. Failures come back as report text starting with the failure
marker; nothing is raised to the MCP framework.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from figmabridge.core.errors import FigmaBridgeError
from figmabridge.extraction.models import ExtractionRequest, ProgressEvent
from figmabridge.extraction.report import FAILURE_MARKER, render_failure, render_report

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from figmabridge.config.models import FigmaBridgeConfig
    from figmabridge.mcp.context import AppContext

log = structlog.get_logger(__name__)

TOOL_NAME = "extract_figma_context"
TOOL_DESCRIPTION = (
    "Extract design context (variables, component mappings and generated code) from a "
    "Figma URL through the Figma desktop MCP server, falling back to smaller extractions "
    "when the server is slow. Pass figma_data instead of url to reuse data you already have."
)


def _log_params(url: str | None, figma_data: dict[str, Any] | None, options: dict[str, Any] | None) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if url:
        params["url"] = url if len(url) <= 80 else url[:80] + "..."
    if figma_data:
        params["figma_data_keys"] = sorted(figma_data)[:5]
    if options:
        params["options"] = options
    return params


async def handle_extract_figma_context(
    context: AppContext,
    url: str | None = None,
    figma_data: dict[str, Any] | None = None,
    options: dict[str, Any] | None = None,
) -> str:
    """Run one extraction and render it as text."""
    start_time = time.perf_counter()
    log.info("tool_start", tool=TOOL_NAME, **_log_params(url, figma_data, options))

    try:
        request = ExtractionRequest.model_validate({"url": url, "figmaData": figma_data, "options": options or {}})
    except ValidationError as e:
        message = e.errors()[0]["msg"] if e.errors() else str(e)
        log.warning("tool_validation_error", tool=TOOL_NAME, error=message)
        return f"{FAILURE_MARKER} Invalid arguments: {message}"

    history: list[ProgressEvent] = []
    try:
        outcome = await context.extractor.extract(request, history.append)
    except FigmaBridgeError as e:
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        log.warning("tool_error", tool=TOOL_NAME, error_code=e.code.value, error=e.message, elapsed_ms=elapsed_ms)
        return render_failure(e, url)
    except Exception as e:
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        log.error("tool_internal_error", tool=TOOL_NAME, error=str(e), elapsed_ms=elapsed_ms)
        log.debug("tool_internal_error_traceback", tool=TOOL_NAME, exc_info=True)
        return render_failure(e, url)

    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    log.info(
        "tool_complete",
        tool=TOOL_NAME,
        elapsed_ms=elapsed_ms,
        success=outcome.success,
        fallback_level=outcome.fallback_level,
        warnings=len(outcome.warnings),
    )
    return render_report(outcome, include_progress=request.options.progress_updates)


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with the extraction tool wired to context."""
    from fastmcp import FastMCP

    mcp = FastMCP(
        "figma-bridge",
        instructions="Bridge to the Figma desktop MCP server with progressive fallback extraction.",
    )

    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
    async def extract_figma_context(
        url: str | None = None,
        figma_data: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> str:
        return await handle_extract_figma_context(context, url=url, figma_data=figma_data, options=options)

    log.info("mcp_server_created", tool=TOOL_NAME, base_url=context.config.server.base_url)
    return mcp


def run_server(config: FigmaBridgeConfig) -> None:
    """Create and run the MCP server over stdio."""
    from figmabridge.config.models import LogOutputConfig
    from figmabridge.core.logging import configure_logging
    from figmabridge.mcp.context import AppContext

    # stdout carries the MCP protocol; logs must stay on stderr or in files
    outputs = [o for o in config.logging.outputs if o.destination != "stdout"]
    configure_logging(config=config.logging.model_copy(update={"outputs": outputs or [LogOutputConfig()]}))

    context = AppContext.create(config)
    mcp = create_mcp_server(context)

    log.info("mcp_server_running", base_url=config.server.base_url)
    mcp.run()
