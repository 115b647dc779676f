"""Command line entry point."""

from __future__ import annotations

from datetime import datetime

import click
from rich.console import Console

from release_engine import __version__
from release_engine.cli.commands.update import run_update
from release_engine.log import configure_logging

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(__version__, prog_name="release-engine")
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """Propose releases from conventional commits."""
    configure_logging(verbose, err_console)


@cli.command()
@click.argument("path", required=False, type=click.Path(exists=True, file_okay=False))
@click.option("--execute", is_flag=True, help="Write the changes instead of previewing them.")
@click.option("--version-override", "version_override", help="Release this exact version.")
@click.option("--prerelease", help="Pre-release identifier, e.g. alpha, beta, rc.")
@click.option(
    "--release-date",
    "release_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Date for the changelog heading (YYYY-MM-DD). Defaults to today.",
)
def update(
    path: str | None,
    execute: bool,
    version_override: str | None,
    prerelease: str | None,
    release_date: datetime | None,
) -> None:
    """Compute the next release and update version files and changelog."""
    run_update(
        path,
        execute,
        version_override,
        prerelease,
        console,
        err_console,
        release_date=release_date.date() if release_date else None,
    )


if __name__ == "__main__":
    cli()
