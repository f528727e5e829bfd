"""uptix update command - resolve declarations and write the lock file."""

import click

from uptix.cli.utils import CliState, collect_dependencies, load_lockfile, pass_state
from uptix.context import ResolveContext
from uptix.core.errors import UsageError
from uptix.core.progress import echo, pluralize, spinner, status
from uptix.discovery import discover_nix_files
from uptix.lock.update import Resolution, full_update, select_for_update, selective_update


def _report(resolution: Resolution) -> None:
    if resolution.entry is not None:
        meta = resolution.entry.metadata
        version = meta.friendly_version or resolution.dependency.friendly_version(meta.resolved_version or "")
        status(f"{resolution.key}: {version}", style="success", indent=2)
    else:
        status(f"{resolution.key}: {resolution.error}", style="error", indent=2)


@click.command()
@click.option(
    "-d",
    "--dependency",
    "pattern",
    default=None,
    help="Only update dependencies matching PATTERN (e.g. 'postgres' or 'owner/repo').",
)
@pass_state
def update_command(state: CliState, pattern: str | None) -> None:
    """Resolve every uptix declaration and write the lock file.

    With --dependency, only matching dependencies are refreshed and every
    other lock entry is kept as it is.
    """
    files = discover_nix_files(state.root)
    status(f"Found {pluralize(len(files), 'nix file')}")
    deps = collect_dependencies(files)
    status(f"Found {pluralize(len(deps), 'dependency', 'dependencies')}")

    ctx = ResolveContext.from_config(state.config)
    max_workers = state.config.resolve.max_workers

    if pattern is None:
        with spinner(f"Resolving {pluralize(len(deps), 'dependency', 'dependencies')}"):
            result = full_update(deps, state.lock_path, ctx, max_workers=max_workers, on_result=_report)
        if not result.written:
            failed = result.failed[0]
            status(f"Error updating {failed.key}: {failed.error}", style="error")
            status(f"{state.lock_display} was not written", style="error")
            raise SystemExit(1)
        status(f"Wrote {state.lock_display} successfully", style="success")
        return

    store = load_lockfile(state)
    try:
        selected = select_for_update(deps, store, pattern)
    except UsageError as e:
        click.echo(e.message, err=True)
        return

    echo(f"Found {pluralize(len(selected), 'dependency', 'dependencies')} matching '{pattern}'")
    with spinner(f"Resolving {pluralize(len(selected), 'dependency', 'dependencies')}"):
        result = selective_update(selected, store, ctx, max_workers=max_workers, on_result=_report)

    if result.failed:
        status(f"{pluralize(len(result.failed), 'dependency', 'dependencies')} could not be updated", style="warning")
    if result.written:
        status(f"Wrote {state.lock_display} successfully", style="success")
