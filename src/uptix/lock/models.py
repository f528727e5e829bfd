"""Lock file entry models."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class DependencyMetadata(BaseModel):
    """Kind-agnostic description of a locked dependency.

    ``dep_type`` selects which variant knows how to rebuild itself from the
    accompanying ``lock`` payload. Unknown fields written by other versions
    are kept so a rewrite does not drop them.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    selected_version: str | None = None
    resolved_version: str | None = None
    friendly_version: str | None = None
    timestamp: str | None = None
    dep_type: str
    description: str = ""


class LockEntry(BaseModel):
    """One resolved dependency: metadata plus an opaque, kind-specific payload."""

    metadata: DependencyMetadata
    lock: Any

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
