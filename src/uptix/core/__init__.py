"""Core module exports."""

from uptix.core.errors import (
    ConfigError,
    DeclarationError,
    ErrorCode,
    ErrorKind,
    InternalError,
    LockfileError,
    PayloadError,
    ProtocolError,
    UptixError,
    UsageError,
)
from uptix.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    set_run_id,
)
from uptix.core.progress import echo, spinner, status

__all__ = [
    # Errors
    "UptixError",
    "ErrorCode",
    "ErrorKind",
    "ConfigError",
    "DeclarationError",
    "InternalError",
    "LockfileError",
    "PayloadError",
    "ProtocolError",
    "UsageError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "set_run_id",
    # Progress
    "echo",
    "spinner",
    "status",
]
