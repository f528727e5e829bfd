"""uptix init command - create an empty lock file."""

import click

from uptix.cli.utils import CliState, fail, pass_state
from uptix.core.errors import LockfileError
from uptix.core.progress import status
from uptix.lock import LockFile


@click.command()
@pass_state
def init_command(state: CliState) -> None:
    """Create an empty lock file. An existing one is never overwritten."""
    try:
        created = LockFile.init(state.lock_path)
    except LockfileError as e:
        fail(e)

    if created:
        status(f"Created {state.lock_display}", style="success")
    else:
        status(f"{state.lock_display} already exists", style="warning")
