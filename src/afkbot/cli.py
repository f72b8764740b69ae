# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from afkbot.config import BotConfig, load_config
from afkbot.errors import ConfigError
from afkbot.logging import configure_logging
from afkbot.settings import Settings


def _load_or_exit(path: Path) -> BotConfig:
    try:
        return load_config(path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """afkbot command line interface."""


@cli.command("run")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to settings.json (default: ./settings.json, then the user config dir).",
)
@click.option("--port", type=int, default=None, help="Health check port (default: $AFKBOT_PORT, $PORT or 8000).")
@click.option("--http/--no-http", default=True, show_default=True, help="Serve the health check endpoint.")
def run_cmd(config_path: Path | None, port: int | None, http: bool) -> None:
    """Connect the bot and keep it online."""
    settings = Settings()
    if port is not None:
        settings = settings.model_copy(update={"port": port})
    configure_logging(settings)
    config = _load_or_exit(config_path or settings.config_path)

    from afkbot.app import run

    try:
        asyncio.run(run(config, settings, serve_http=http))
    except KeyboardInterrupt:
        click.echo("Interrupted.", err=True)


@cli.command("check-config")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to settings.json.",
)
def check_config(config_path: Path | None) -> None:
    """Validate the configuration file and print a summary."""
    settings = Settings()
    path = config_path or settings.config_path
    config = _load_or_exit(path)
    features = config.enabled_features()
    click.echo(f"{path}: ok")
    click.echo(f"account: {config.account.username} ({config.account.type})")
    click.echo(f"server: {config.server.ip}:{config.server.port} version={config.server.version or 'auto'}")
    click.echo(f"features: {', '.join(features) if features else 'none'}")


def main() -> None:
    cli.main()


if __name__ == "__main__":
    main()
