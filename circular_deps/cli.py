"""Click CLI with check and approve subcommands."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from circular_deps import __version__
from circular_deps.config import ConfigError, load_config
from circular_deps.runner import run


def _common_options(func):
    func = click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")(func)
    func = click.option("--warnings", "print_warnings", is_flag=True, help="Prints all warnings.")(func)
    return click.option(
        "--config", "config_path", required=True,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to the configuration file.",
    )(func)


@click.group()
@click.version_option(version=__version__)
def cli():
    """circular-deps: Fail builds on new circular imports, tolerate approved ones."""


@cli.command()
@_common_options
@click.pass_context
def check(ctx: click.Context, config_path: Path, print_warnings: bool, verbose: bool):
    """Checks if the circular dependencies have changed."""
    ctx.exit(_run(config_path, approve=False, print_warnings=print_warnings, verbose=verbose))


@cli.command()
@_common_options
@click.pass_context
def approve(ctx: click.Context, config_path: Path, print_warnings: bool, verbose: bool):
    """Approves the current circular dependencies."""
    ctx.exit(_run(config_path, approve=True, print_warnings=print_warnings, verbose=verbose))


def _run(config_path: Path, approve: bool, print_warnings: bool, verbose: bool) -> int:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(config_path)
        return run(config, approve=approve, print_warnings=print_warnings)
    except ConfigError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
