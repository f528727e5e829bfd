"""``uptix.githubRelease { owner = ...; repo = ...; }``: latest release of a repository."""

from __future__ import annotations

from typing import ClassVar, Self

from uptix.context import ResolveContext
from uptix.core.errors import PayloadError
from uptix.deps.github.common import GitHubSource
from uptix.lock.models import DependencyMetadata, LockEntry

SELECTED_VERSION = "latest"


class GitHubRelease(GitHubSource):
    FUNCTION: ClassVar[str] = "uptix.githubRelease"
    DEP_TYPE: ClassVar[str] = "github-release"
    HELP: ClassVar[str] = """here is an example of valid usage:

  uptix.githubRelease {
    owner = "luizribeiro";
    repo = "uptix";
  }"""

    def key(self) -> str:
        return f"$GITHUB_RELEASE$:{self.full_name}${self.flags}"

    def matches(self, pattern: str) -> bool:
        if pattern == self.key():
            return True
        if ":" in pattern:
            return False
        return pattern == self.full_name

    def type_display(self) -> str:
        # "latest" is the only selector for releases, so it is left out
        return self.DEP_TYPE

    def latest_tag(self, ctx: ResolveContext) -> str:
        url_path = "releases/latest"
        data = self.api_request(ctx, url_path)
        tag = data.get("tag_name")
        if not isinstance(tag, str) or not tag:
            raise PayloadError.invalid_json(self.api_url(ctx, url_path), "response has no tag_name")
        return tag

    def lock_with_metadata(self, ctx: ResolveContext | None = None) -> LockEntry:
        ctx = ctx or ResolveContext()
        rev = self.latest_tag(ctx)
        lock = self.build_lock(rev, self.content_hash(ctx, rev))
        metadata = DependencyMetadata(
            name=self.full_name,
            selected_version=SELECTED_VERSION,
            resolved_version=rev,
            friendly_version=self.friendly_version(rev),
            dep_type=self.DEP_TYPE,
            description=f"GitHub release from {self.full_name}",
        )
        return LockEntry(metadata=metadata, lock=lock.to_json())

    @classmethod
    def from_lock_entry(cls, entry: LockEntry) -> Self | None:
        lock = cls.lock_from_entry(entry)
        if lock is None:
            return None
        return cls(
            owner=lock.owner,
            repo=lock.repo,
            fetch_submodules=lock.fetch_submodules,
            deep_clone=lock.deep_clone,
            leave_dot_git=lock.leave_dot_git,
        )
