"""riven-tui command line.

Loads configuration, checks that the service answers, then hands the
terminal to the Textual app.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from riven_tui import APP_NAME, __version__
from riven_tui.api.client import RivenClient
from riven_tui.api.errors import RivenError
from riven_tui.config.settings import ConfigError, ConfigService, Settings
from riven_tui.utils.logging import configure_cli_logging, configure_from_settings, get_logger

logger = get_logger(__name__)

app = typer.Typer(
    name="riven-tui",
    help="Terminal client for the Riven media server.",
    add_completion=False,
    no_args_is_help=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{APP_NAME} v{__version__}")
        raise typer.Exit()


async def check_connectivity(settings: Settings) -> None:
    """Call ``/health`` once.

    Raises:
        RivenError: If the service cannot be reached or answers with an error.
    """
    async with RivenClient.from_settings(settings) as client:
        await client.health()
    logger.info("connectivity_ok", endpoint=settings.api.endpoint)


def launch(settings: Settings) -> None:
    from riven_tui.tui.app import RivenApp

    RivenApp(settings).run()


@app.command()
def main(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to config YAML"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Browse and manage a Riven media library from the terminal."""
    configure_cli_logging()

    service = ConfigService()
    try:
        settings = service.load(config)
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(1)
    for warning in service.warnings:
        typer.echo(f"Warning: {warning}", err=True)

    try:
        asyncio.run(check_connectivity(settings))
    except RivenError as exc:
        typer.echo(f"Failed to connect to Riven at {settings.api.endpoint}: {exc}", err=True)
        raise typer.Exit(1)

    log_path = configure_from_settings(settings.logging)
    logger.info("starting", endpoint=settings.api.endpoint, config=str(service.source), log_file=str(log_path))
    launch(settings)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
