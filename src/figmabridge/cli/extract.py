"""figmabridge extract command - run the fallback pipeline once."""

import asyncio
import json
from pathlib import Path
from typing import Any

import click

from figmabridge.config.models import FigmaBridgeConfig
from figmabridge.core.errors import FigmaBridgeError
from figmabridge.core.logging import clear_request_id, set_request_id
from figmabridge.core.progress import status
from figmabridge.extraction.models import ExtractionOptions, ExtractionOutcome, ExtractionRequest, ProgressEvent
from figmabridge.extraction.report import render_report
from figmabridge.mcp.context import AppContext


def _print_progress(event: ProgressEvent) -> None:
    style = "success" if event.percentage >= 100 else "info"
    status(f"[dim]{event.stage:<10}[/dim] {event.percentage:>3g}%  {event.message}", style=style)


def _load_figma_data(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--figma-data") from e
    if not isinstance(data, dict):
        raise click.BadParameter("must contain a JSON object", param_hint="--figma-data")
    return data


async def _extract(config: FigmaBridgeConfig, request: ExtractionRequest) -> ExtractionOutcome:
    context = AppContext.create(config)
    set_request_id()
    try:
        return await context.extractor.extract(request, _print_progress)
    finally:
        clear_request_id()
        await context.aclose()


@click.command()
@click.argument("url", required=False)
@click.option("--no-code", is_flag=True, help="Skip code generation (variables and mappings only)")
@click.option(
    "--max-wait",
    type=click.IntRange(5000, 60000),
    default=None,
    help="Overall wait budget in ms used to plan stage timeouts",
)
@click.option(
    "--strategy",
    type=click.Choice(["graceful", "partial", "fail"]),
    default="graceful",
    show_default=True,
    help="What to do when full extraction fails",
)
@click.option(
    "--figma-data",
    "figma_data_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with pre-extracted data (skips the server)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def extract_command(
    ctx: click.Context,
    url: str | None,
    no_code: bool,
    max_wait: int | None,
    strategy: str,
    figma_data_path: Path | None,
    as_json: bool,
) -> None:
    """Extract design context for a Figma URL.

    URL is a figma.com/file or figma.com/design link, ideally with a node-id.
    Progress goes to stderr; the report (or JSON) goes to stdout.
    """
    if url is None and figma_data_path is None:
        raise click.UsageError("Provide a URL or --figma-data")

    config: FigmaBridgeConfig = ctx.obj["config"]
    request = ExtractionRequest(
        url=url,
        figma_data=_load_figma_data(figma_data_path) if figma_data_path else None,
        options=ExtractionOptions(
            include_code=not no_code,
            timeout_strategy=strategy,
            max_wait_time=max_wait,
        ),
    )

    try:
        outcome = asyncio.run(_extract(config, request))
    except FigmaBridgeError as e:
        status(e.message, style="error")
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(outcome.to_wire(), indent=2, ensure_ascii=False))
    else:
        click.echo(render_report(outcome))

    if not outcome.success:
        ctx.exit(1)
