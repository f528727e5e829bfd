"""uptix error types with typed error codes.

Error code ranges:
- 1xxx: Declaration (malformed uptix.* call-sites in Nix sources)
- 2xxx: Config
- 3xxx: Protocol (registry / GitHub API / network)
- 4xxx: Payload (malformed JSON from an API or external tool)
- 5xxx: Usage (patterns that match nothing, missing lock file)
- 6xxx: Lockfile (unreadable, unwritable or corrupt lock file)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Coarse classification derived from the error code range."""

    DECLARATION = "declaration"
    CONFIG = "config"
    PROTOCOL = "protocol"
    PAYLOAD = "payload"
    USAGE = "usage"
    LOCKFILE = "lockfile"
    INTERNAL = "internal"


_KIND_BY_RANGE = {
    1: ErrorKind.DECLARATION,
    2: ErrorKind.CONFIG,
    3: ErrorKind.PROTOCOL,
    4: ErrorKind.PAYLOAD,
    5: ErrorKind.USAGE,
    6: ErrorKind.LOCKFILE,
}


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Declaration (1xxx)
    UNEXPECTED_ARGUMENT = 1001
    INVALID_DECLARATION_VALUE = 1002
    NIX_PARSE_ERROR = 1003

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Protocol (3xxx)
    REGISTRY_ERROR = 3001
    DIGEST_NOT_FOUND = 3002
    API_REQUEST_FAILED = 3003
    NETWORK_ERROR = 3004

    # Payload (4xxx)
    INVALID_JSON = 4001
    PREFETCH_FAILED = 4002

    # Usage (5xxx)
    NO_MATCH = 5001
    NOT_FOUND = 5002
    LOCKFILE_MISSING = 5003

    # Lockfile (6xxx)
    LOCKFILE_PARSE_ERROR = 6001
    LOCKFILE_IO_ERROR = 6002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(eq=False)
class UptixError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'DIGEST_NOT_FOUND')."""
        return self.code.name

    @property
    def kind(self) -> ErrorKind:
        return _KIND_BY_RANGE.get(self.code.value // 1000, ErrorKind.INTERNAL)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class DeclarationError(UptixError):
    """A uptix.* call-site in a Nix file is structurally wrong."""

    @classmethod
    def unexpected_argument(
        cls,
        function: str,
        file: str,
        argument_pos: tuple[int, int],
        expected_type: str,
        help: str,
    ) -> "DeclarationError":
        return cls(
            code=ErrorCode.UNEXPECTED_ARGUMENT,
            message=f"Unexpected argument for {function}, expected {expected_type}",
            details={
                "function": function,
                "file": file,
                "argument_pos": argument_pos,
                "expected_type": expected_type,
                "help": help,
            },
        )

    @classmethod
    def invalid_value(
        cls,
        function: str,
        file: str,
        argument_pos: tuple[int, int],
        reason: str,
        help: str = "",
    ) -> "DeclarationError":
        return cls(
            code=ErrorCode.INVALID_DECLARATION_VALUE,
            message=f"Invalid argument for {function}: {reason}",
            details={
                "function": function,
                "file": file,
                "argument_pos": argument_pos,
                "reason": reason,
                "help": help,
            },
        )

    @classmethod
    def nix_parse(cls, file: str, argument_pos: tuple[int, int], reason: str) -> "DeclarationError":
        return cls(
            code=ErrorCode.NIX_PARSE_ERROR,
            message=f"Nix parsing error: {reason}",
            details={"file": file, "argument_pos": argument_pos, "reason": reason},
        )

    @property
    def function(self) -> str | None:
        return self.details.get("function")

    @property
    def file(self) -> str | None:
        return self.details.get("file")

    @property
    def argument_pos(self) -> tuple[int, int] | None:
        return self.details.get("argument_pos")

    @property
    def expected_type(self) -> str | None:
        return self.details.get("expected_type")

    @property
    def help(self) -> str:
        return self.details.get("help", "")


class ConfigError(UptixError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ProtocolError(UptixError):
    """Registry, GitHub API or transport failures."""

    @classmethod
    def registry(cls, registry: str, image: str, reason: str) -> "ProtocolError":
        return cls(
            code=ErrorCode.REGISTRY_ERROR,
            message=f"Error while fetching digest for {image} from {registry}: {reason}",
            retryable=True,
            details={"registry": registry, "image": image, "reason": reason},
        )

    @classmethod
    def digest_not_found(cls, registry: str, image: str, tag: str) -> "ProtocolError":
        return cls(
            code=ErrorCode.DIGEST_NOT_FOUND,
            message=f"Could not find digest for {image}:{tag} on {registry}",
            details={"registry": registry, "image": image, "tag": tag},
        )

    @classmethod
    def api_request_failed(cls, url: str, status: int, body: str) -> "ProtocolError":
        return cls(
            code=ErrorCode.API_REQUEST_FAILED,
            message=f"GitHub API request failed with status {status}: {body}",
            retryable=status >= 500 or status == 429,
            details={"url": url, "status": status, "body": body},
        )

    @classmethod
    def network(cls, url: str, reason: str) -> "ProtocolError":
        return cls(
            code=ErrorCode.NETWORK_ERROR,
            message=f"Request to {url} failed: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )


class PayloadError(UptixError):
    """An API or external tool returned something we cannot interpret."""

    @classmethod
    def invalid_json(cls, source: str, reason: str) -> "PayloadError":
        return cls(
            code=ErrorCode.INVALID_JSON,
            message=f"Invalid JSON from {source}: {reason}",
            details={"source": source, "reason": reason},
        )

    @classmethod
    def prefetch_failed(cls, url: str, rev: str, reason: str) -> "PayloadError":
        return cls(
            code=ErrorCode.PREFETCH_FAILED,
            message=f"Failed to compute content hash of {url} at {rev}: {reason}",
            details={"url": url, "rev": rev, "reason": reason},
        )


class UsageError(UptixError):
    """User-facing, non-fatal conditions."""

    @classmethod
    def no_match(cls, pattern: str) -> "UsageError":
        return cls(
            code=ErrorCode.NO_MATCH,
            message=f"Dependency '{pattern}' not found",
            details={"pattern": pattern},
        )

    @classmethod
    def not_found(cls, pattern: str, path: str) -> "UsageError":
        return cls(
            code=ErrorCode.NOT_FOUND,
            message=f"Dependency '{pattern}' not found in {path}",
            details={"pattern": pattern, "path": path},
        )

    @classmethod
    def lockfile_missing(cls, path: str) -> "UsageError":
        return cls(
            code=ErrorCode.LOCKFILE_MISSING,
            message=f"No {path} file found",
            details={"path": path},
        )


class LockfileError(UptixError):
    """Lock file cannot be read, parsed or written."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "LockfileError":
        return cls(
            code=ErrorCode.LOCKFILE_PARSE_ERROR,
            message=f"Failed to parse lock file at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def io_error(cls, path: str, reason: str) -> "LockfileError":
        return cls(
            code=ErrorCode.LOCKFILE_IO_ERROR,
            message=f"Failed to access lock file at {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(UptixError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
