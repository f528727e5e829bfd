"""Discovery of ``uptix.*`` declarations in Nix syntax trees."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from uptix.deps.base import NAMESPACE_PREFIX, Declaration
from uptix.deps.docker import DockerImage
from uptix.deps.github import GitHubBranch, GitHubRelease
from uptix.deps.variants import Dependency
from uptix.nix.parser import APPLY, COMMENT, SELECT, NixParser, ParsingContext, node_text

log = structlog.get_logger(__name__)


def dependency_from_declaration(declaration: Declaration) -> Dependency | None:
    """Build the variant named by the call-site, or None for other ``uptix.*`` members."""
    match declaration.function:
        case DockerImage.FUNCTION:
            return DockerImage.from_declaration(declaration)
        case GitHubBranch.FUNCTION:
            return GitHubBranch.from_declaration(declaration)
        case GitHubRelease.FUNCTION:
            return GitHubRelease.from_declaration(declaration)
        case _:
            return None


def _argument_of(function: Any) -> Any | None:
    sibling = function.next_named_sibling
    while sibling is not None and sibling.type == COMMENT:
        sibling = sibling.next_named_sibling
    return sibling


def collect_ast_dependencies(context: ParsingContext, node: Any) -> list[Dependency]:
    """Dependencies declared at or below ``node``, in source order.

    Raises:
        DeclarationError: A recognised function was given an argument of the
            wrong shape. Extraction stops at the first one.
    """
    if node.type == APPLY:
        function = node.child_by_field_name("function")
        if function is not None and function.type == SELECT:
            name = node_text(function)
            if name.startswith(NAMESPACE_PREFIX):
                argument = _argument_of(function)
                if argument is None:
                    return []
                dep = dependency_from_declaration(Declaration(name, argument, context))
                if dep is not None:
                    return [dep]
                log.debug("extract.unknown_member", function=name, file=context.file_path)

    deps: list[Dependency] = []
    for child in node.children:
        deps.extend(collect_ast_dependencies(context, child))
    return deps


def collect_file_dependencies(path: Path, parser: NixParser | None = None) -> list[Dependency]:
    """Parse a Nix file and extract its declarations."""
    parser = parser or NixParser()
    result = parser.parse(path)
    if result.error_count:
        # tree-sitter recovers; declarations outside the broken region still count
        log.warning("extract.syntax_errors", file=str(path), errors=result.error_count)
    deps = collect_ast_dependencies(result.context, result.root_node)
    log.debug("extract.file_done", file=str(path), dependencies=len(deps))
    return deps
