"""Pattern selection over declared dependencies and lock entries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from uptix.deps.docker import DockerImage
from uptix.deps.github import GitHubBranch, GitHubRelease
from uptix.deps.variants import Dependency
from uptix.lock.models import LockEntry

log = structlog.get_logger(__name__)


def dependency_from_lock_entry(entry: LockEntry) -> Dependency | None:
    """Rebuild a dependency from its stored entry, without touching the network.

    Returns None when ``dep_type`` is unknown or the payload is unusable.
    """
    match entry.metadata.dep_type:
        case DockerImage.DEP_TYPE:
            return DockerImage.from_lock_entry(entry)
        case GitHubBranch.DEP_TYPE:
            return GitHubBranch.from_lock_entry(entry)
        case GitHubRelease.DEP_TYPE:
            return GitHubRelease.from_lock_entry(entry)
        case other:
            log.warning("selector.unknown_dep_type", dep_type=other, name=entry.metadata.name)
            return None


def select_dependencies(deps: Iterable[Dependency], pattern: str) -> list[Dependency]:
    """Declared dependencies matching ``pattern``; several matches are all kept."""
    return [dep for dep in deps if dep.matches(pattern)]


def match_lock_entries(entries: Mapping[str, LockEntry], pattern: str) -> list[tuple[str, LockEntry]]:
    """Lock entries whose key equals ``pattern`` or whose rebuilt dependency matches it."""
    matched: list[tuple[str, LockEntry]] = []
    for key, entry in entries.items():
        if key == pattern:
            matched.append((key, entry))
            continue
        dep = dependency_from_lock_entry(entry)
        if dep is not None and dep.matches(pattern):
            matched.append((key, entry))
    return matched


def select_lock_entries(entries: Mapping[str, LockEntry], pattern: str) -> list[Dependency]:
    """Dependencies rebuilt from the lock entries matching ``pattern``."""
    deps: list[Dependency] = []
    for key, entry in match_lock_entries(entries, pattern):
        dep = dependency_from_lock_entry(entry)
        if dep is None:
            log.warning("selector.unrebuildable_entry", key=key)
            continue
        deps.append(dep)
    return deps
