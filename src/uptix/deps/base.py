"""Shared pieces of the dependency variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Self

from uptix.context import ResolveContext
from uptix.lock.models import LockEntry
from uptix.nix.parser import ParsingContext, SourceSpan

NAMESPACE_PREFIX = "uptix."


@dataclass(frozen=True, slots=True)
class Declaration:
    """One ``uptix.<function> <argument>`` call-site.

    Lives only long enough to build a dependency from it.
    """

    function: str
    argument: Any  # tree-sitter node
    context: ParsingContext

    @property
    def span(self) -> SourceSpan:
        return SourceSpan.of(self.argument)

    @property
    def file(self) -> str:
        return self.context.file_path


class Lockable(Protocol):
    """Capabilities every dependency variant provides."""

    def key(self) -> str: ...

    def matches(self, pattern: str) -> bool: ...

    def lock_with_metadata(self, ctx: ResolveContext | None = None) -> LockEntry: ...

    def type_display(self) -> str: ...

    def friendly_version(self, resolved_version: str) -> str: ...

    @classmethod
    def from_declaration(cls, declaration: Declaration) -> Self: ...

    @classmethod
    def from_lock_entry(cls, entry: LockEntry) -> Self | None: ...
