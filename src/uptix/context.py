"""Shared settings for resolving dependencies against remote services."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from uptix import __version__
from uptix.config.models import UptixConfig
from uptix.prefetch import NixPrefetchGit, Prefetcher

USER_AGENT = f"uptix/{__version__}"


def _github_token_from_env() -> str | None:
    return os.environ.get("GITHUB_TOKEN") or None


@dataclass(frozen=True)
class ResolveContext:
    """Network and tooling knobs passed to every ``lock_with_metadata`` call.

    Tests swap ``transport`` for an ``httpx.MockTransport`` and ``prefetcher``
    for a stub, which keeps resolution free of real network and subprocesses.
    """

    transport: httpx.BaseTransport | None = None
    user_agent: str = USER_AGENT
    registry_timeout: float = 30.0
    github_scheme: str = "https"
    github_domain: str = "api.github.com"
    github_timeout: float = 30.0
    github_token: str | None = field(default_factory=_github_token_from_env)
    prefetcher: Prefetcher = field(default_factory=NixPrefetchGit)

    @classmethod
    def from_config(cls, config: UptixConfig, env: Mapping[str, str] | None = None) -> ResolveContext:
        env = os.environ if env is None else env
        return cls(
            registry_timeout=config.registry.timeout_sec,
            github_scheme=config.github.scheme,
            github_domain=config.github.api_domain,
            github_timeout=config.github.timeout_sec,
            github_token=env.get(config.github.token_env) or None,
            prefetcher=NixPrefetchGit(
                command=config.prefetch.command,
                timeout_sec=config.prefetch.timeout_sec,
            ),
        )

    def github_client(self) -> httpx.Client:
        headers = {"User-Agent": self.user_agent, "Accept": "application/vnd.github+json"}
        if self.github_token:
            headers["Authorization"] = f"Bearer {self.github_token}"
        return httpx.Client(transport=self.transport, timeout=self.github_timeout, headers=headers)
