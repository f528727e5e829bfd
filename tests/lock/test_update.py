"""Tests for full and selective lock updates."""

import threading
from pathlib import Path

import httpx
import pytest

from uptix.core.errors import ErrorCode, InternalError, UsageError
from uptix.deps import DockerImage, GitHubRelease
from uptix.lock import LockFile
from uptix.lock.update import full_update, resolve_all, select_for_update, selective_update


def _digest(name: str) -> str:
    return "sha256:" + name.ljust(64, "0")[:64]


def _registry(missing: frozenset[str] = frozenset()):
    """Answers HEAD for any repository with a digest derived from its name."""
    seen: list[str] = []
    lock = threading.Lock()

    def handler(request: httpx.Request) -> httpx.Response:
        repo = request.url.path.split("/")[3]
        if request.method == "HEAD":
            with lock:
                seen.append(repo)
        if repo in missing:
            return httpx.Response(404)
        if request.method == "HEAD":
            return httpx.Response(200, headers={"Docker-Content-Digest": _digest(repo)})
        return httpx.Response(404)

    return seen, handler


def _deps(*names: str) -> list[DockerImage]:
    return [DockerImage.parse(name) for name in names]


class TestFullUpdate:
    def test_given_all_resolve_when_updated_then_every_key_written(self, tmp_path: Path, make_ctx) -> None:
        # Given
        _, handler = _registry()
        path = tmp_path / "uptix.lock"

        # When
        result = full_update(_deps("redis", "postgres:15"), path, make_ctx(handler))

        # Then
        assert result.written
        store = LockFile.load(path)
        assert list(store) == ["postgres:15", "redis"]
        assert store.get("redis").lock == _digest("redis")

    def test_given_failure_when_updated_then_nothing_written(self, tmp_path: Path, make_ctx) -> None:
        """A full rebuild is all-or-nothing; the old file survives a failure."""
        # Given
        path = tmp_path / "uptix.lock"
        path.write_text("{}\n")
        seen, handler = _registry(missing=frozenset({"postgres"}))

        # When
        result = full_update(_deps("redis", "postgres:15", "nginx"), path, make_ctx(handler))

        # Then
        assert not result.written
        assert [r.key for r in result.failed] == ["postgres:15"]
        assert result.failed[0].error.error_name == "DIGEST_NOT_FOUND"
        assert path.read_text() == "{}\n"
        assert "nginx" not in seen

    def test_stale_entries_are_dropped(self, tmp_path: Path, make_ctx) -> None:
        path = tmp_path / "uptix.lock"
        _, handler = _registry()
        full_update(_deps("redis", "nginx"), path, make_ctx(handler))

        full_update(_deps("redis"), path, make_ctx(handler))

        assert list(LockFile.load(path)) == ["redis"]

    def test_duplicate_declarations_resolve_once(self, tmp_path: Path, make_ctx) -> None:
        seen, handler = _registry()

        result = full_update(_deps("redis", "redis"), tmp_path / "uptix.lock", make_ctx(handler))

        assert len(result.resolutions) == 1
        assert seen.count("redis") == 1

    def test_progress_callback_sees_each_result(self, tmp_path: Path, make_ctx) -> None:
        _, handler = _registry()
        reported: list[str] = []

        full_update(
            _deps("redis", "nginx"), tmp_path / "uptix.lock", make_ctx(handler), on_result=lambda r: reported.append(r.key)
        )

        assert reported == ["redis", "nginx"]


class TestResolveAll:
    def test_given_workers_when_resolved_then_input_order_kept(self, make_ctx) -> None:
        _, handler = _registry()
        deps = _deps("a1", "b2", "c3", "d4", "e5")

        results = resolve_all(deps, make_ctx(handler), max_workers=4)

        assert [r.key for r in results] == ["a1", "b2", "c3", "d4", "e5"]
        assert all(r.ok for r in results)

    def test_given_workers_and_failure_when_stopping_then_later_results_dropped(self, make_ctx) -> None:
        _, handler = _registry(missing=frozenset({"b2"}))

        results = resolve_all(_deps("a1", "b2", "c3"), make_ctx(handler), max_workers=3, stop_on_error=True)

        assert [(r.key, r.ok) for r in results] == [("a1", True), ("b2", False)]

    def test_without_stop_every_result_reported(self, make_ctx) -> None:
        _, handler = _registry(missing=frozenset({"a1"}))

        results = resolve_all(_deps("a1", "b2"), make_ctx(handler))

        assert [r.ok for r in results] == [False, True]

    def test_given_unexpected_exception_when_resolved_then_internal_error(self, make_ctx) -> None:
        """A crash inside one resolver becomes that dependency's failure."""
        # Given
        _, healthy = _registry()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.startswith("/v2/library/a1/"):
                raise RuntimeError("boom")
            return healthy(request)

        # When
        results = resolve_all(_deps("a1", "b2"), make_ctx(handler), max_workers=2)

        # Then
        assert [(r.key, r.ok) for r in results] == [("a1", False), ("b2", True)]
        error = results[0].error
        assert isinstance(error, InternalError)
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert "boom" in error.message


class TestSelectForUpdate:
    def test_given_declaration_match_then_declarations_used(self, tmp_path: Path) -> None:
        store = LockFile(tmp_path / "uptix.lock")
        deps = _deps("postgres:15", "redis")

        assert select_for_update(deps, store, "postgres") == [DockerImage.parse("postgres:15")]

    def test_given_only_lock_entry_matches_then_rebuilt_from_lock(self, tmp_path: Path, make_ctx) -> None:
        # Given
        _, handler = _registry()
        path = tmp_path / "uptix.lock"
        full_update(_deps("nginx:1.25"), path, make_ctx(handler))
        store = LockFile.load(path)

        # When
        selected = select_for_update(_deps("redis"), store, "nginx")

        # Then
        assert selected == [DockerImage.parse("nginx:1.25")]

    def test_given_nothing_matches_then_usage_error(self, tmp_path: Path) -> None:
        store = LockFile(tmp_path / "uptix.lock")

        with pytest.raises(UsageError, match="Dependency 'missing' not found"):
            select_for_update(_deps("redis"), store, "missing")

    def test_release_selected_by_repository_name(self, tmp_path: Path) -> None:
        deps = [GitHubRelease(owner="o", repo="r"), GitHubRelease(owner="o", repo="other")]

        assert select_for_update(deps, LockFile(tmp_path / "uptix.lock"), "o/r") == [deps[0]]


class TestSelectiveUpdate:
    def _seed(self, tmp_path: Path, make_ctx) -> Path:
        _, handler = _registry()
        path = tmp_path / "uptix.lock"
        full_update(_deps("redis", "postgres:15", "nginx"), path, make_ctx(handler))
        return path

    def test_given_selection_when_updated_then_other_entries_byte_identical(self, tmp_path: Path, make_ctx) -> None:
        # Given
        path = self._seed(tmp_path, make_ctx)
        raw = path.read_text()
        # Hand-edit an unselected entry so any rewrite of it would show
        edited = raw.replace(_digest("redis"), "sha256:hand-edited")
        path.write_text(edited)
        store = LockFile.load(path)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Docker-Content-Digest": "sha256:fresh"})

        # When
        result = selective_update(_deps("postgres:15"), store, make_ctx(handler))

        # Then
        assert result.written
        reloaded = LockFile.load(path)
        assert reloaded.get("postgres:15").lock == "sha256:fresh"
        assert reloaded.get("redis").lock == "sha256:hand-edited"
        assert reloaded.get("nginx").lock == _digest("nginx")

    def test_given_all_selected_fail_when_updated_then_file_untouched(self, tmp_path: Path, make_ctx) -> None:
        # Given
        path = self._seed(tmp_path, make_ctx)
        before = path.read_bytes()
        store = LockFile.load(path)
        _, handler = _registry(missing=frozenset({"postgres"}))

        # When
        result = selective_update(_deps("postgres:15"), store, make_ctx(handler))

        # Then
        assert not result.written
        assert len(result.failed) == 1
        assert path.read_bytes() == before

    def test_given_partial_failure_when_updated_then_successes_saved(self, tmp_path: Path, make_ctx) -> None:
        path = self._seed(tmp_path, make_ctx)
        store = LockFile.load(path)
        _, handler = _registry(missing=frozenset({"nginx"}))

        result = selective_update(_deps("nginx", "redis"), store, make_ctx(handler))

        assert result.written
        assert [r.key for r in result.succeeded] == ["redis"]
        assert [r.key for r in result.failed] == ["nginx"]
