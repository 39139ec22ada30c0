"""figma-bridge CLI - figmabridge command."""

import click

from figmabridge.cli.extract import extract_command
from figmabridge.cli.ping import ping_command
from figmabridge.cli.serve import serve_command
from figmabridge.config.loader import load_config
from figmabridge.core.errors import ConfigError
from figmabridge.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="figmabridge")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """figma-bridge - resilient design context extraction from the Figma desktop MCP server."""
    ctx.ensure_object(dict)
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if verbose:
        config.logging.level = "DEBUG"
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    configure_logging(config=config.logging)


cli.add_command(extract_command, name="extract")
cli.add_command(ping_command, name="ping")
cli.add_command(serve_command, name="serve")


if __name__ == "__main__":
    cli()
