"""Dependency variants, declaration extraction and selection.

A dependency is one of three variants. The union is closed: dispatch by
function name (extraction) and by ``dep_type`` (reconstruction from the lock
file) both go through ``match`` statements listing every variant.
"""

from uptix.deps.base import NAMESPACE_PREFIX, Declaration, Lockable
from uptix.deps.docker import DockerImage
from uptix.deps.extract import (
    collect_ast_dependencies,
    collect_file_dependencies,
    dependency_from_declaration,
)
from uptix.deps.github import GitHubBranch, GitHubLock, GitHubRelease
from uptix.deps.selector import (
    dependency_from_lock_entry,
    match_lock_entries,
    select_dependencies,
    select_lock_entries,
)
from uptix.deps.variants import Dependency

__all__ = [
    "NAMESPACE_PREFIX",
    "Declaration",
    "Dependency",
    "DockerImage",
    "GitHubBranch",
    "GitHubLock",
    "GitHubRelease",
    "Lockable",
    "collect_ast_dependencies",
    "collect_file_dependencies",
    "dependency_from_declaration",
    "dependency_from_lock_entry",
    "match_lock_entries",
    "select_dependencies",
    "select_lock_entries",
]
