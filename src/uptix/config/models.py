"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (UPTIX__SECTION__KEY)
3. Project YAML (uptix.yaml next to the lock file)
4. Global YAML (~/.config/uptix/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    UPTIX__<SECTION>__<KEY>=<VALUE>

Examples:
    UPTIX__LOGGING__LEVEL=DEBUG
    UPTIX__LOCKFILE__PATH=nix/uptix.lock
    UPTIX__REGISTRY__TIMEOUT_SEC=10
    UPTIX__RESOLVE__MAX_WORKERS=4
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_REGISTRY = "registry-1.docker.io"
DEFAULT_LOCKFILE = "uptix.lock"


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        UPTIX__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Console output is meant for humans, keep it quiet.",
    )


class LockfileConfig(BaseModel):
    """Lock file location.

    Env vars:
        UPTIX__LOCKFILE__PATH: Lock file path, relative to the working directory
    """

    path: str = Field(
        default=DEFAULT_LOCKFILE,
        description="Lock file read at the start of an update and rewritten at the end.",
    )


class RegistryConfig(BaseModel):
    """Container registry client configuration.

    Env vars:
        UPTIX__REGISTRY__TIMEOUT_SEC: Per-request timeout
    """

    timeout_sec: float = Field(
        default=30.0,
        description="Per-request timeout. Must be finite so one dead registry cannot hang a run.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class GitHubConfig(BaseModel):
    """GitHub REST API configuration.

    Env vars:
        UPTIX__GITHUB__API_DOMAIN: API host (GitHub Enterprise or a test server)
        UPTIX__GITHUB__TOKEN_ENV: Name of the env var holding the bearer token
    """

    scheme: Literal["http", "https"] = "https"
    api_domain: str = Field(default="api.github.com")
    token_env: str = Field(
        default="GITHUB_TOKEN",
        description="Environment variable read for an optional bearer token.",
    )
    timeout_sec: float = Field(default=30.0)


class PrefetchConfig(BaseModel):
    """Content hashing tool configuration.

    Env vars:
        UPTIX__PREFETCH__COMMAND: Executable used to hash repositories
        UPTIX__PREFETCH__TIMEOUT_SEC: Max seconds per invocation
    """

    command: str = Field(default="nix-prefetch-git")
    timeout_sec: float = Field(
        default=600.0,
        description="Deep clones with submodules can be slow; still bounded.",
    )


class ResolveConfig(BaseModel):
    """Resolution scheduling.

    Env vars:
        UPTIX__RESOLVE__MAX_WORKERS: Concurrent resolutions (1 = sequential)
    """

    max_workers: int = Field(
        default=1,
        description="Concurrent resolutions. Keep low to respect registry rate limits.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class UptixConfig(BaseModel):
    """Root configuration for uptix."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    lockfile: LockfileConfig = Field(default_factory=LockfileConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    prefetch: PrefetchConfig = Field(default_factory=PrefetchConfig)
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)
