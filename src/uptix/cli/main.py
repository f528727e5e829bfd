"""uptix CLI - pin Docker images and GitHub sources declared in Nix files."""

from pathlib import Path

import click

from uptix import __version__
from uptix.cli.init import init_command
from uptix.cli.list import list_command
from uptix.cli.show import show_command
from uptix.cli.update import update_command
from uptix.cli.utils import CliState, fail
from uptix.config import load_config
from uptix.core.errors import ConfigError
from uptix.core.logging import configure_logging, set_run_id


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="uptix")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--lock-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Lock file to read and write (default: uptix.lock in the project root).",
)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Directory searched for .nix files.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, lock_file: Path | None, root: Path) -> None:
    """uptix - lock external dependencies of Nix configurations.

    Without a command, runs `update`.
    """
    root = root.resolve()
    try:
        config = load_config(root)
    except ConfigError as e:
        fail(e)

    configure_logging(config=config.logging, level="DEBUG" if verbose else None)
    set_run_id()

    if lock_file is not None:
        lock_path, lock_display = lock_file, str(lock_file)
    else:
        lock_path, lock_display = root / config.lockfile.path, config.lockfile.path

    ctx.obj = CliState(config=config, root=root, lock_path=lock_path, lock_display=lock_display)

    if ctx.invoked_subcommand is None:
        ctx.invoke(update_command)


cli.add_command(update_command, name="update")
cli.add_command(list_command, name="list")
cli.add_command(show_command, name="show")
cli.add_command(init_command, name="init")


if __name__ == "__main__":
    cli()
