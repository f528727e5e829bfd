"""``uptix.githubBranch { owner = ...; repo = ...; branch = ...; }``: head of a branch."""

from __future__ import annotations

from typing import ClassVar, Self

from uptix.context import ResolveContext
from uptix.core.errors import PayloadError
from uptix.deps.github.common import GitHubSource
from uptix.lock.models import DependencyMetadata, LockEntry

SHORT_SHA_LENGTH = 7


class GitHubBranch(GitHubSource):
    FUNCTION: ClassVar[str] = "uptix.githubBranch"
    DEP_TYPE: ClassVar[str] = "github-branch"
    HELP: ClassVar[str] = """here is an example of valid usage:

  uptix.githubBranch {
    owner = "luizribeiro";
    repo = "uptix";
    branch = "main";
  }"""

    branch: str

    def key(self) -> str:
        return f"$GITHUB_BRANCH$:{self.full_name}:{self.branch}${self.flags}"

    def matches(self, pattern: str) -> bool:
        return pattern == self.key()

    def type_display(self) -> str:
        return f"{self.DEP_TYPE} ({self.branch})"

    def friendly_version(self, resolved_version: str) -> str:
        return resolved_version[:SHORT_SHA_LENGTH]

    def head_commit(self, ctx: ResolveContext) -> str:
        url_path = f"branches/{self.branch}"
        data = self.api_request(ctx, url_path)
        commit = data.get("commit")
        sha = commit.get("sha") if isinstance(commit, dict) else None
        if not isinstance(sha, str) or not sha:
            raise PayloadError.invalid_json(self.api_url(ctx, url_path), "response has no commit.sha")
        return sha

    def lock_with_metadata(self, ctx: ResolveContext | None = None) -> LockEntry:
        ctx = ctx or ResolveContext()
        rev = self.head_commit(ctx)
        lock = self.build_lock(rev, self.content_hash(ctx, rev))
        metadata = DependencyMetadata(
            name=self.full_name,
            selected_version=self.branch,
            resolved_version=rev,
            friendly_version=self.friendly_version(rev),
            dep_type=self.DEP_TYPE,
            description=f"GitHub branch {self.branch} from {self.full_name}",
        )
        return LockEntry(metadata=metadata, lock=lock.to_json())

    @classmethod
    def from_lock_entry(cls, entry: LockEntry) -> Self | None:
        lock = cls.lock_from_entry(entry)
        if lock is None or not entry.metadata.selected_version:
            return None
        return cls(
            owner=lock.owner,
            repo=lock.repo,
            branch=entry.metadata.selected_version,
            fetch_submodules=lock.fetch_submodules,
            deep_clone=lock.deep_clone,
            leave_dot_git=lock.leave_dot_git,
        )
