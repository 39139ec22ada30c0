"""figmabridge ping command - check the Figma desktop MCP server."""

import asyncio

import click

from figmabridge.config.models import FigmaBridgeConfig
from figmabridge.core.progress import spinner, status
from figmabridge.mcp.context import AppContext


async def _probe(config: FigmaBridgeConfig) -> bool:
    context = AppContext.create(config)
    try:
        return await context.transport.test_connection()
    finally:
        await context.aclose()


@click.command()
@click.pass_context
def ping_command(ctx: click.Context) -> None:
    """Negotiate a session and check the server accepts a request."""
    config: FigmaBridgeConfig = ctx.obj["config"]
    base_url = config.server.base_url

    with spinner(f"Connecting to {base_url}"):
        reachable = asyncio.run(_probe(config))

    if reachable:
        status(f"Figma MCP server reachable at {base_url}", style="success")
        return

    status(f"Figma MCP server not reachable at {base_url}", style="error")
    status("Make sure the Figma desktop app is running with the Dev Mode MCP server enabled.")
    ctx.exit(1)
