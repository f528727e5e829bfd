"""Tests for pattern selection and lock-entry reconstruction."""

from uptix.deps import (
    DockerImage,
    GitHubBranch,
    GitHubRelease,
    dependency_from_lock_entry,
    match_lock_entries,
    select_dependencies,
    select_lock_entries,
)
from uptix.lock.models import DependencyMetadata, LockEntry

DIGEST = "sha256:" + "ab" * 32


def _docker_entry(name: str, selected: str | None) -> LockEntry:
    return LockEntry(
        metadata=DependencyMetadata(
            name=name, selected_version=selected, resolved_version=DIGEST, dep_type="docker"
        ),
        lock=DIGEST,
    )


def _release_entry(owner: str, repo: str) -> LockEntry:
    return LockEntry(
        metadata=DependencyMetadata(
            name=f"{owner}/{repo}", selected_version="latest", resolved_version="v1", dep_type="github-release"
        ),
        lock={"owner": owner, "repo": repo, "rev": "v1", "hash": "sha256-x"},
    )


class TestSelectDependencies:
    def test_given_several_matches_then_all_kept(self) -> None:
        """One pattern may select more than one declaration."""
        deps = [DockerImage.parse("postgres"), DockerImage.parse("postgres:15"), DockerImage.parse("redis")]

        selected = select_dependencies(deps, "postgres")

        assert [d.key() for d in selected] == ["postgres", "postgres:15"]

    def test_given_no_match_then_empty(self) -> None:
        assert select_dependencies([GitHubRelease(owner="o", repo="r")], "o") == []


class TestDependencyFromLockEntry:
    def test_docker(self) -> None:
        assert dependency_from_lock_entry(_docker_entry("postgres", "15")) == DockerImage.parse("postgres:15")

    def test_docker_without_explicit_tag(self) -> None:
        assert dependency_from_lock_entry(_docker_entry("postgres", None)) == DockerImage.parse("postgres")

    def test_branch(self) -> None:
        entry = LockEntry(
            metadata=DependencyMetadata(name="o/r", selected_version="main", dep_type="github-branch"),
            lock={"owner": "o", "repo": "r", "rev": "abc", "hash": "sha256-x", "deepClone": True},
        )

        assert dependency_from_lock_entry(entry) == GitHubBranch(owner="o", repo="r", branch="main", deep_clone=True)

    def test_given_unknown_dep_type_then_none(self) -> None:
        entry = LockEntry(metadata=DependencyMetadata(name="x", dep_type="tarball"), lock="x")

        assert dependency_from_lock_entry(entry) is None


class TestLockEntrySelection:
    def test_given_key_pattern_then_entry_matched(self) -> None:
        entries = {"postgres:15": _docker_entry("postgres", "15"), "redis": _docker_entry("redis", None)}

        matched = match_lock_entries(entries, "postgres:15")

        assert [key for key, _ in matched] == ["postgres:15"]

    def test_given_name_pattern_then_rebuilt_dependency_matches(self) -> None:
        # Given
        entries = {
            "$GITHUB_RELEASE$:o/r$": _release_entry("o", "r"),
            "postgres:15": _docker_entry("postgres", "15"),
        }

        # When
        deps = select_lock_entries(entries, "o/r")

        # Then
        assert deps == [GitHubRelease(owner="o", repo="r")]

    def test_given_unknown_entries_then_skipped(self) -> None:
        entries = {"weird": LockEntry(metadata=DependencyMetadata(name="weird", dep_type="tarball"), lock=None)}

        assert select_lock_entries(entries, "other") == []
