"""uptix list command - show dependencies and their locked versions."""

import click

from uptix.cli.utils import CliState, collect_dependencies, display_version, load_lockfile, pass_state
from uptix.core.errors import UsageError
from uptix.core.progress import echo
from uptix.deps import dependency_from_lock_entry
from uptix.discovery import discover_nix_files


@click.command()
@pass_state
def list_command(state: CliState) -> None:
    """List declared dependencies with their locked versions.

    When no declarations are found under the project root, the entries of the
    lock file are listed instead.
    """
    if not state.lock_path.exists():
        click.echo(UsageError.lockfile_missing(state.lock_display).message, err=True)
        return

    store = load_lockfile(state)
    deps = collect_dependencies(discover_nix_files(state.root))

    if deps:
        for dep in dict.fromkeys(deps):
            entry = store.get(dep.key())
            version = display_version(dep, entry.metadata) if entry else "not locked"
            echo(f"{dep.key()} ({dep.type_display()}): {version}")
        return

    if not len(store):
        echo("No dependencies found")
        return

    for key, entry in store.items():
        dep = dependency_from_lock_entry(entry)
        kind = dep.type_display() if dep else entry.metadata.dep_type
        echo(f"{key} ({kind}): {display_version(dep, entry.metadata)}")
