"""Implementation of the 'update' command.

The update command proposes the next release of the local repository and,
with ``--execute``, writes the changed files into the working tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from release_engine.config import load_config
from release_engine.exceptions import ConfigError, ReleaseEngineError
from release_engine.orchestrator import ReleaseOrchestrator, RunState
from release_engine.scm import GitProvider, LocalPatchSubmitter

if TYPE_CHECKING:
    from datetime import date

    from rich.console import Console

    from release_engine.config import ReleaseEngineConfig
    from release_engine.orchestrator import RunResult


def _with_prerelease(config: ReleaseEngineConfig, prerelease: str | None) -> ReleaseEngineConfig:
    if not prerelease:
        return config
    version = config.version.model_copy(update={"pre_release": prerelease})
    return config.model_copy(update={"version": version})


def run_update(
    path: str | None,
    execute: bool,
    version_override: str | None,
    prerelease: str | None,
    console: Console,
    err_console: Console,
    *,
    release_date: date | None = None,
) -> None:
    """Run the update command.

    Args:
        path: Optional path to the repository root
        execute: Whether to actually write the changes
        version_override: Manual version override (e.g., "2.0.0")
        prerelease: Pre-release identifier (e.g., "alpha", "beta", "rc")
        console: Console for standard output
        err_console: Console for error output
        release_date: Date for the changelog heading, today when not given
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = _with_prerelease(load_config(project_path), prerelease)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    try:
        orchestrator = ReleaseOrchestrator(
            config,
            GitProvider(project_path),
            release_date=release_date,
            version_override=version_override,
        )
        if execute:
            result = orchestrator.release(LocalPatchSubmitter(project_path))
        else:
            result = orchestrator.run()
    except ReleaseEngineError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if result.state is RunState.NO_RELEASE:
        console.print(
            "[yellow]No releasable changes found (only non-release commit types).[/]\n"
            "[dim]Use [cyan]--version-override[/] to force a specific version.[/]"
        )
        return

    _print_result(result, config, execute, console)


def _print_result(result: RunResult, config: ReleaseEngineConfig, execute: bool, console: Console) -> None:
    candidate = result.candidate
    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    if candidate.is_initial:
        console.print(f"\n{mode_str} - First release! Setting version to [green]{candidate.version}[/]\n")
    else:
        console.print(
            f"\n{mode_str} - Updating from [cyan]{candidate.previous_tag}[/] to [green]{candidate.version}[/]\n"
        )

    files = "\n".join(f"  • [cyan]{file_path}[/]" for file_path in result.changes)
    if not execute:
        console.print(
            Panel(
                f"[bold]Would update the following files:[/]\n\n{files}",
                title="[yellow]Dry Run Preview[/]",
                border_style="yellow",
            )
        )
        console.print(result.changelog_entry, markup=False, highlight=False)
        console.print("[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    tag = f"{config.effective_tag_prefix}{candidate.version}"
    console.print(
        Panel(
            f"[green]Successfully updated to version {candidate.version}![/]\n\n"
            f"{files}\n\n"
            "Next steps:\n"
            "  1. Review the changes\n"
            f"  2. Commit: [cyan]git commit -am 'chore(release): {tag}'[/]\n"
            f"  3. Tag: [cyan]git tag {tag}[/]",
            title="[green]Update Complete[/]",
            border_style="green",
        )
    )
