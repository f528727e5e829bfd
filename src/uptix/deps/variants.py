"""The closed set of dependency variants."""

from typing import TypeAlias

from uptix.deps.docker import DockerImage
from uptix.deps.github import GitHubBranch, GitHubRelease

Dependency: TypeAlias = DockerImage | GitHubBranch | GitHubRelease

