"""figmabridge serve command - run the MCP server over stdio."""

import click

from figmabridge.config.models import FigmaBridgeConfig


@click.command()
@click.pass_context
def serve_command(ctx: click.Context) -> None:
    """Serve the extract_figma_context tool over MCP stdio."""
    from figmabridge.mcp.server import run_server

    config: FigmaBridgeConfig = ctx.obj["config"]
    run_server(config)
