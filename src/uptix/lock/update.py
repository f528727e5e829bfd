"""Lock file update strategies.

Two strategies share one resolution step:

- full rebuild: resolve every declaration into a fresh store; the first
  failure aborts the run and nothing is written.
- selective update: resolve only what matches a pattern and merge it into the
  existing store; a failure costs only that dependency its refresh.
"""

from __future__ import annotations

import contextvars
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from uptix.context import ResolveContext
from uptix.core.errors import InternalError, UptixError, UsageError
from uptix.deps.selector import select_dependencies, select_lock_entries
from uptix.deps.variants import Dependency
from uptix.lock.models import LockEntry
from uptix.lock.store import LockFile

log = structlog.get_logger(__name__)


@dataclass
class Resolution:
    """Outcome of resolving one dependency: an entry or the error that stopped it."""

    dependency: Dependency
    entry: LockEntry | None = None
    error: UptixError | None = None

    @property
    def key(self) -> str:
        return self.dependency.key()

    @property
    def ok(self) -> bool:
        return self.entry is not None


@dataclass
class UpdateResult:
    lockfile: LockFile
    resolutions: list[Resolution] = field(default_factory=list)
    written: bool = False

    @property
    def succeeded(self) -> list[Resolution]:
        return [r for r in self.resolutions if r.ok]

    @property
    def failed(self) -> list[Resolution]:
        return [r for r in self.resolutions if not r.ok]


def resolve_one(dep: Dependency, ctx: ResolveContext) -> Resolution:
    log.debug("update.resolve", key=dep.key())
    try:
        entry = dep.lock_with_metadata(ctx)
    except UptixError as e:
        log.warning("update.resolve_failed", key=dep.key(), error=e.error_name, message=e.message)
        return Resolution(dep, error=e)
    except Exception as e:
        # One broken resolver must not take down a worker pool or the rest of a selective update
        log.error("update.resolve_crashed", key=dep.key(), error=str(e), exc_info=True)
        return Resolution(dep, error=InternalError.unexpected(str(e), key=dep.key()))
    return Resolution(dep, entry=entry)


def resolve_all(
    deps: Sequence[Dependency],
    ctx: ResolveContext,
    *,
    max_workers: int = 1,
    stop_on_error: bool = False,
    on_result: Callable[[Resolution], None] | None = None,
) -> list[Resolution]:
    """Resolve ``deps`` and return their outcomes in input order.

    With ``max_workers > 1`` resolutions run on a thread pool; results are
    still reported and returned in input order, on the calling thread. With
    ``stop_on_error`` the first failure (in input order) ends the run and
    later dependencies are left out of the result.
    """
    results: list[Resolution] = []

    def report(result: Resolution) -> bool:
        results.append(result)
        if on_result is not None:
            on_result(result)
        return stop_on_error and not result.ok

    if max_workers <= 1 or len(deps) <= 1:
        for dep in deps:
            if report(resolve_one(dep, ctx)):
                break
        return results

    with ThreadPoolExecutor(max_workers=min(max_workers, len(deps))) as pool:
        # Each worker runs in a copy of the caller context so log fields such as run_id carry over
        futures = [pool.submit(contextvars.copy_context().run, resolve_one, dep, ctx) for dep in deps]
        for i, future in enumerate(futures):
            if report(future.result()):
                for pending in futures[i + 1 :]:
                    pending.cancel()
                break
    return results


def _unique(deps: Sequence[Dependency]) -> list[Dependency]:
    # The same declaration in several files resolves once
    return list(dict.fromkeys(deps))


def full_update(
    deps: Sequence[Dependency],
    lock_path: Path,
    ctx: ResolveContext,
    *,
    max_workers: int = 1,
    on_result: Callable[[Resolution], None] | None = None,
) -> UpdateResult:
    """Rebuild the lock file from scratch. Writes nothing if any dependency fails."""
    resolutions = resolve_all(
        _unique(deps), ctx, max_workers=max_workers, stop_on_error=True, on_result=on_result
    )
    store = LockFile(lock_path)
    result = UpdateResult(store, resolutions)
    if result.failed:
        log.error("update.aborted", key=result.failed[0].key, path=str(lock_path))
        return result

    for resolution in resolutions:
        assert resolution.entry is not None
        store.merge(resolution.key, resolution.entry)
    store.save()
    result.written = True
    return result


def select_for_update(deps: Sequence[Dependency], store: LockFile, pattern: str) -> list[Dependency]:
    """Dependencies a selective update should refresh.

    Declarations are searched first. When none match, entries already in the
    lock file are rebuilt and searched instead, so a pattern still works for a
    dependency whose declaration is not part of this scan.

    Raises:
        UsageError: Nothing matches ``pattern``.
    """
    selected = select_dependencies(deps, pattern)
    if not selected:
        selected = select_lock_entries(store.entries, pattern)
        if selected:
            log.debug("update.matched_lock_entries", pattern=pattern, count=len(selected))
    if not selected:
        raise UsageError.no_match(pattern)
    return _unique(selected)


def selective_update(
    selected: Sequence[Dependency],
    store: LockFile,
    ctx: ResolveContext,
    *,
    max_workers: int = 1,
    on_result: Callable[[Resolution], None] | None = None,
) -> UpdateResult:
    """Refresh ``selected`` in ``store``; every other entry is left as loaded."""
    resolutions = resolve_all(selected, ctx, max_workers=max_workers, on_result=on_result)
    result = UpdateResult(store, resolutions)
    for resolution in result.succeeded:
        assert resolution.entry is not None
        store.merge(resolution.key, resolution.entry)
    if result.succeeded:
        store.save()
        result.written = True
    return result
