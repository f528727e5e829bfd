"""Config module exports."""

from uptix.config.loader import load_config
from uptix.config.models import (
    GitHubConfig,
    LockfileConfig,
    LoggingConfig,
    PrefetchConfig,
    RegistryConfig,
    ResolveConfig,
    UptixConfig,
)

__all__ = [
    "load_config",
    "UptixConfig",
    "LoggingConfig",
    "LockfileConfig",
    "RegistryConfig",
    "GitHubConfig",
    "PrefetchConfig",
    "ResolveConfig",
]
