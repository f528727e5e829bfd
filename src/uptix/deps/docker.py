"""Container image dependencies (``uptix.dockerImage "postgres:15"``)."""

from __future__ import annotations

import re
from typing import ClassVar, Self

import structlog
from pydantic import BaseModel, ConfigDict

from uptix.config.models import DEFAULT_REGISTRY
from uptix.context import ResolveContext
from uptix.core.errors import DeclarationError
from uptix.deps.base import Declaration
from uptix.lock.models import DependencyMetadata, LockEntry
from uptix.nix.parser import STRING
from uptix.nix.values import assert_kind, string_from_nix
from uptix.registry.client import RegistryClient

log = structlog.get_logger(__name__)

DEFAULT_TAG = "latest"
DIGEST_PREFIX = "sha256:"
SHORT_DIGEST_LENGTH = 12

# A first segment counts as a registry host only if it contains a dot.
# Dot-less hosts (e.g. "localhost") are read as a namespace.
_REFERENCE = re.compile(
    r"^(?:(?P<registry>[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+(?::[0-9]+)?)/)?"
    r"(?P<image>[a-z0-9._-]+(?:/[a-z0-9._-]+)*)"
    r"(?::(?P<tag>[A-Za-z0-9_][A-Za-z0-9_.-]*))?$"
)

HELP = """here is an example of valid usage:

  uptix.dockerImage "homeassistant/home-assistant:stable\""""


class DockerImage(BaseModel):
    """A container image reference, locked to its manifest digest."""

    model_config = ConfigDict(frozen=True)

    FUNCTION: ClassVar[str] = "uptix.dockerImage"
    DEP_TYPE: ClassVar[str] = "docker"

    name: str
    registry: str
    image: str
    tag: str
    use_https: bool = True

    @classmethod
    def parse(cls, name: str, *, use_https: bool = True) -> DockerImage:
        """Split a reference into registry, image and tag.

        Examples:
            "postgres" -> registry-1.docker.io, postgres, latest
            "ns/repo:1.0" -> registry-1.docker.io, ns/repo, 1.0
            "ghcr.io/org/app:v2" -> ghcr.io, org/app, v2

        Raises:
            ValueError: The reference does not follow the image reference grammar.
        """
        m = _REFERENCE.match(name)
        if m is None:
            raise ValueError(f"{name!r} is not a valid image reference")
        return cls(
            name=name,
            registry=m.group("registry") or DEFAULT_REGISTRY,
            image=m.group("image"),
            tag=m.group("tag") or DEFAULT_TAG,
            use_https=use_https,
        )

    @classmethod
    def from_declaration(cls, declaration: Declaration) -> Self:
        node = assert_kind(declaration.context, cls.FUNCTION, declaration.argument, STRING, HELP)
        name = string_from_nix(declaration.context, node)
        try:
            return cls.parse(name)
        except ValueError as e:
            raise DeclarationError.invalid_value(
                cls.FUNCTION, declaration.file, declaration.span.as_tuple(), str(e), HELP
            ) from e

    @classmethod
    def from_lock_entry(cls, entry: LockEntry) -> Self | None:
        if entry.metadata.dep_type != cls.DEP_TYPE:
            return None
        name = entry.metadata.name
        if entry.metadata.selected_version:
            name = f"{name}:{entry.metadata.selected_version}"
        try:
            return cls.parse(name)
        except ValueError:
            return None

    @property
    def has_explicit_tag(self) -> bool:
        return ":" in self.name.rpartition("/")[2]

    @property
    def repository(self) -> str:
        """The reference as written, minus any explicit tag."""
        if self.has_explicit_tag:
            return self.name.rpartition(":")[0]
        return self.name

    @property
    def is_default_registry(self) -> bool:
        return self.registry == DEFAULT_REGISTRY

    @property
    def request_path(self) -> str:
        """Repository path sent to the registry; official images live under library/."""
        if self.is_default_registry and "/" not in self.image:
            return f"library/{self.image}"
        return self.image

    def key(self) -> str:
        return self.name

    def matches(self, pattern: str) -> bool:
        if pattern == self.name:
            return True
        if pattern == f"{self.repository}:{self.tag}":
            return True
        return self.is_default_registry and ":" not in pattern and pattern == self.repository

    def type_display(self) -> str:
        return "docker"

    def friendly_version(self, resolved_version: str) -> str:
        if resolved_version.startswith(DIGEST_PREFIX):
            return resolved_version[: len(DIGEST_PREFIX) + SHORT_DIGEST_LENGTH]
        return resolved_version

    def lock_with_metadata(self, ctx: ResolveContext | None = None) -> LockEntry:
        ctx = ctx or ResolveContext()
        with RegistryClient(
            self.registry,
            use_https=self.use_https,
            transport=ctx.transport,
            timeout=ctx.registry_timeout,
            user_agent=ctx.user_agent,
        ) as client:
            digest = client.manifest_digest(self.request_path, self.tag)
            info = client.image_info(self.request_path, digest)

        metadata = DependencyMetadata(
            name=self.repository,
            selected_version=self.tag if self.has_explicit_tag else None,
            resolved_version=digest,
            friendly_version=info.friendly_version,
            timestamp=info.created,
            dep_type=self.DEP_TYPE,
            description=f"Docker image {self.name}",
        )
        return LockEntry(metadata=metadata, lock=digest)
