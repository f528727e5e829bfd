"""Content hashing of git repositories via nix-prefetch-git."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from typing import Protocol

import structlog

from uptix.core.errors import PayloadError

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FetchOptions:
    """Fetcher flags that change the content being hashed."""

    fetch_submodules: bool = False
    deep_clone: bool = False
    leave_dot_git: bool = False


class Prefetcher(Protocol):
    """Computes the Nix content hash of a repository at a revision."""

    def prefetch(self, url: str, rev: str, options: FetchOptions) -> str: ...


@dataclass(frozen=True)
class NixPrefetchGit:
    """Runs ``nix-prefetch-git`` and reads the hash from its JSON output."""

    command: str = "nix-prefetch-git"
    timeout_sec: float = 600.0

    def build_args(self, url: str, rev: str, options: FetchOptions) -> list[str]:
        args = [self.command, "--deepClone" if options.deep_clone else "--no-deepClone"]
        if options.fetch_submodules:
            args.append("--fetch-submodules")
        # A deep clone always keeps .git
        if options.leave_dot_git or options.deep_clone:
            args.append("--leave-dotGit")
        args.extend(["--quiet", "--rev", rev, url])
        return args

    def prefetch(self, url: str, rev: str, options: FetchOptions) -> str:
        args = self.build_args(url, rev, options)
        log.info("prefetch.start", url=url, rev=rev)
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout_sec,
                check=False,
            )
        except FileNotFoundError as e:
            raise PayloadError.prefetch_failed(url, rev, f"{self.command} not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            raise PayloadError.prefetch_failed(url, rev, f"timed out after {self.timeout_sec}s") from e

        if result.returncode != 0:
            raise PayloadError.prefetch_failed(
                url, rev, f"exit status {result.returncode}: {result.stderr.strip()}"
            )
        return parse_prefetch_output(result.stdout, source=self.command)


def parse_prefetch_output(stdout: str, *, source: str = "nix-prefetch-git") -> str:
    """Pull the hash out of nix-prefetch-git's JSON; prefers ``hash`` over ``sha256``."""
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise PayloadError.invalid_json(source, str(e)) from e
    if not isinstance(data, dict):
        raise PayloadError.invalid_json(source, "expected a JSON object")
    value = data.get("hash") or data.get("sha256")
    if not value:
        raise PayloadError.invalid_json(source, "output has neither 'hash' nor 'sha256'")
    return str(value)
