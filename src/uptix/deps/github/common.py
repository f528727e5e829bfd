"""Pieces shared by the GitHub branch and release dependencies."""

from __future__ import annotations

from typing import Any, ClassVar, Self

import httpx
import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from uptix.context import ResolveContext
from uptix.core.errors import DeclarationError, PayloadError, ProtocolError
from uptix.deps.base import Declaration
from uptix.lock.models import LockEntry
from uptix.nix.parser import ATTRSET
from uptix.nix.values import assert_kind, value_from_nix
from uptix.prefetch import FetchOptions

log = structlog.get_logger(__name__)


def flags(fetch_submodules: bool, deep_clone: bool, leave_dot_git: bool) -> str:
    """Compact key suffix: one letter per enabled flag, always in f/d/l order."""
    return (
        ("f" if fetch_submodules else "")
        + ("d" if deep_clone else "")
        + ("l" if leave_dot_git else "")
    )


class GitHubLock(BaseModel):
    """Lock payload written for both branches and releases.

    Older lock files call the content hash ``sha256``; both names are read,
    only ``hash`` is written.
    """

    model_config = ConfigDict(populate_by_name=True)

    owner: str
    repo: str
    rev: str
    hash: str = Field(validation_alias=AliasChoices("hash", "sha256"))
    fetch_submodules: bool = Field(default=False, alias="fetchSubmodules")
    deep_clone: bool = Field(default=False, alias="deepClone")
    leave_dot_git: bool = Field(default=False, alias="leaveDotGit")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class GitHubSource(BaseModel):
    """A GitHub repository plus the fetcher flags that shape its content hash."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    FUNCTION: ClassVar[str]
    DEP_TYPE: ClassVar[str]
    HELP: ClassVar[str]

    owner: str
    repo: str
    fetch_submodules: bool = Field(default=False, alias="fetchSubmodules")
    deep_clone: bool = Field(default=False, alias="deepClone")
    leave_dot_git: bool = Field(default=False, alias="leaveDotGit")
    # Test hooks: point at another API host, or skip hashing entirely
    override_scheme: str | None = None
    override_domain: str | None = None
    override_hash: str | None = Field(
        default=None,
        validation_alias=AliasChoices("override_hash", "override_nix_sha256"),
    )

    @classmethod
    def from_declaration(cls, declaration: Declaration) -> Self:
        node = assert_kind(declaration.context, cls.FUNCTION, declaration.argument, ATTRSET, cls.HELP)
        attrs = value_from_nix(declaration.context, node)
        try:
            return cls.model_validate(attrs)
        except ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(loc) for loc in err["loc"])
            raise DeclarationError.invalid_value(
                cls.FUNCTION,
                declaration.file,
                declaration.span.as_tuple(),
                f"{field}: {err['msg']}",
                cls.HELP,
            ) from e

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def flags(self) -> str:
        return flags(self.fetch_submodules, self.deep_clone, self.leave_dot_git)

    @property
    def fetch_options(self) -> FetchOptions:
        return FetchOptions(
            fetch_submodules=self.fetch_submodules,
            deep_clone=self.deep_clone,
            leave_dot_git=self.leave_dot_git,
        )

    @property
    def clone_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/"

    def api_url(self, ctx: ResolveContext, path: str) -> str:
        scheme = self.override_scheme or ctx.github_scheme
        domain = self.override_domain or ctx.github_domain
        return f"{scheme}://{domain}/repos/{self.owner}/{self.repo}/{path}"

    def api_request(self, ctx: ResolveContext, path: str) -> dict[str, Any]:
        """GET a repository endpoint and return its JSON object.

        Raises:
            ProtocolError: Transport failure or a non-2xx status (body included).
            PayloadError: The response body is not a JSON object.
        """
        url = self.api_url(ctx, path)
        log.debug("github.request", url=url, authenticated=bool(ctx.github_token))
        try:
            with ctx.github_client() as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise ProtocolError.network(url, str(e)) from e

        if not response.is_success:
            raise ProtocolError.api_request_failed(url, response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as e:
            raise PayloadError.invalid_json(url, str(e)) from e
        if not isinstance(data, dict):
            raise PayloadError.invalid_json(url, "expected a JSON object")
        return data

    def content_hash(self, ctx: ResolveContext, rev: str) -> str:
        if self.override_hash is not None:
            log.debug("github.hash_overridden", repo=self.full_name, rev=rev)
            return self.override_hash
        return ctx.prefetcher.prefetch(self.clone_url, rev, self.fetch_options)

    def build_lock(self, rev: str, content_hash: str) -> GitHubLock:
        return GitHubLock(
            owner=self.owner,
            repo=self.repo,
            rev=rev,
            hash=content_hash,
            fetch_submodules=self.fetch_submodules,
            deep_clone=self.deep_clone,
            leave_dot_git=self.leave_dot_git,
        )

    @classmethod
    def lock_from_entry(cls, entry: LockEntry) -> GitHubLock | None:
        if entry.metadata.dep_type != cls.DEP_TYPE:
            return None
        try:
            return GitHubLock.model_validate(entry.lock)
        except ValidationError:
            return None

    def friendly_version(self, resolved_version: str) -> str:
        return resolved_version
