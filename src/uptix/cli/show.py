"""uptix show command - print the lock entries matching a pattern."""

import json

import click

from uptix.cli.utils import CliState, display_version, load_lockfile, pass_state
from uptix.core.errors import UsageError
from uptix.core.progress import echo
from uptix.deps import dependency_from_lock_entry, match_lock_entries


@click.command()
@click.argument("pattern")
@pass_state
def show_command(state: CliState, pattern: str) -> None:
    """Show the locked details of dependencies matching PATTERN."""
    if not state.lock_path.exists():
        click.echo(UsageError.lockfile_missing(state.lock_display).message, err=True)
        return

    store = load_lockfile(state)
    matches = match_lock_entries(store.entries, pattern)
    if not matches:
        click.echo(UsageError.not_found(pattern, state.lock_display).message, err=True)
        return

    for i, (key, entry) in enumerate(matches):
        if i:
            echo()
        meta = entry.metadata
        dep = dependency_from_lock_entry(entry)
        echo(f"Dependency: {key}")
        echo(f"Type: {dep.type_display() if dep else meta.dep_type}")
        if meta.selected_version:
            echo(f"Selected version: {meta.selected_version}")
        echo(f"Locked version: {display_version(dep, meta)}")
        if meta.resolved_version:
            echo(f"Resolved: {meta.resolved_version}")
        if meta.timestamp:
            echo(f"Timestamp: {meta.timestamp}")
        if meta.description:
            echo(f"Description: {meta.description}")
        echo(f"Lock: {json.dumps(entry.lock, indent=2, sort_keys=True)}")
