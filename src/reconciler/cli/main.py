#!/usr/bin/env python3
"""
Main CLI Entry Point for the Order Reconciler

Provides the unified command-line interface: match runs and record store
management.
"""

import logging
import os

import click

from ..core.config import get_config, reload_config
from ..core.errors import ConfigurationError


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Order Reconciler - Fuzzy Order/Transaction Matching

    Matches noisy payment and refund records to the orders they settle.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["RECONCILER_ENV"] = config_env
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    try:
        config = reload_config() if (config_env or debug) else get_config()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("reconciler").setLevel(logging.DEBUG)

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config

    if verbose:
        click.echo(f"Environment: {config.environment.value}")
        click.echo(f"Data directory: {config.data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
def version() -> None:
    """Show version information."""
    from reconciler import __author__, __version__

    click.echo(f"Order Reconciler v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]
    matching = config_obj.matching

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Records File: {config_obj.storage.records_file}")
    click.echo(f"  Match Profile: {matching.profile}")
    click.echo(f"  Match Threshold: {matching.threshold}")
    click.echo(f"  Date Window (days): {matching.date_window_days}")
    click.echo(f"  Scoring Workers: {matching.max_workers}")
    click.echo(f"  Candidate Min Similarity: {matching.candidate_min_similarity}")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


from .data import data  # noqa: E402
from .match import match  # noqa: E402

main.add_command(match)
main.add_command(data)


if __name__ == "__main__":
    main()
