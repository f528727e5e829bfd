"""CLI utilities."""

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click

from uptix.config.models import UptixConfig
from uptix.core.errors import DeclarationError, LockfileError, UptixError
from uptix.core.progress import status
from uptix.deps import Dependency, collect_file_dependencies
from uptix.lock import DependencyMetadata, LockFile
from uptix.nix import NixParser, ParsingContext, render_error


@dataclass
class CliState:
    """Options shared by every subcommand, stored on ``click.Context.obj``."""

    config: UptixConfig
    root: Path
    lock_path: Path
    lock_display: str  # the path as the user spelled it, for messages


pass_state = click.make_pass_decorator(CliState)


def collect_dependencies(files: list[Path]) -> list[Dependency]:
    """Extract declarations from every file, in file order.

    A malformed declaration is rendered against its source and ends the
    process with exit status 1.
    """
    parser = NixParser()
    deps: list[Dependency] = []
    for path in files:
        try:
            deps.extend(collect_file_dependencies(path, parser))
        except DeclarationError as e:
            context = ParsingContext(str(path), path.read_text(encoding="utf-8"))
            click.echo(render_error(e, context), err=True)
            raise SystemExit(1) from e
    return deps


def load_lockfile(state: CliState) -> LockFile:
    """Load the lock file or exit 1 if it is corrupt."""
    try:
        return LockFile.load(state.lock_path)
    except LockfileError as e:
        fail(e)


def fail(error: UptixError) -> NoReturn:
    status(error.message, style="error")
    raise SystemExit(1) from error


def display_version(dep: Dependency | None, metadata: DependencyMetadata) -> str:
    """Friendly version if recorded, else the resolved one formatted for humans."""
    if metadata.friendly_version:
        return metadata.friendly_version
    if metadata.resolved_version is None:
        return "unknown"
    if dep is None:
        return metadata.resolved_version
    return dep.friendly_version(metadata.resolved_version)
