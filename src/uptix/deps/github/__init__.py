"""GitHub-hosted source dependencies."""

from uptix.deps.github.branch import GitHubBranch
from uptix.deps.github.common import GitHubLock, GitHubSource, flags
from uptix.deps.github.release import GitHubRelease

__all__ = ["GitHubBranch", "GitHubLock", "GitHubRelease", "GitHubSource", "flags"]
