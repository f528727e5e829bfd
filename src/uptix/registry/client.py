"""Docker Registry v2 HTTP client.

Resolves a tag to its content digest, authenticating on demand with the
challenge the registry hands back, and best-effort fetches the image config
blob for a human-friendly version and creation timestamp.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx
import structlog

from uptix.config.models import DEFAULT_REGISTRY
from uptix.core.errors import ProtocolError, UptixError
from uptix.registry.auth import Challenge, find_credentials, parse_challenge

log = structlog.get_logger(__name__)

MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
MANIFEST_V1_SIGNED = "application/vnd.docker.distribution.manifest.v1+prettyjws"
MANIFEST_LIST_V2 = "application/vnd.docker.distribution.manifest.list.v2+json"
OCI_INDEX = "application/vnd.oci.image.index.v1+json"
OCI_MANIFEST = "application/vnd.oci.image.manifest.v1+json"

# Single-platform manifests first; lists are accepted for multi-arch-only tags
DIGEST_ACCEPT = ", ".join(
    (
        MANIFEST_V2,
        f"{MANIFEST_V1_SIGNED};q=0.9",
        f"{MANIFEST_LIST_V2};q=0.8",
        f"{OCI_INDEX};q=0.7",
    )
)
SINGLE_PLATFORM_ACCEPT = f"{MANIFEST_V2}, {OCI_MANIFEST};q=0.9"

DIGEST_HEADER = "Docker-Content-Digest"

VERSION_LABELS = ("org.opencontainers.image.version", "version")


@dataclass(frozen=True, slots=True)
class ImageInfo:
    """Optional metadata read from an image's config blob."""

    version: str | None = None
    created: str | None = None

    @property
    def friendly_version(self) -> str | None:
        """Version label if present, else the creation date."""
        if self.version:
            return self.version
        if self.created:
            return self.created[:10]
        return None


class RegistryClient:
    """Client for one registry host.

    Holds the authorization obtained for the last repository so a digest
    lookup and its follow-up metadata requests share one token.
    """

    def __init__(
        self,
        registry: str,
        *,
        use_https: bool = True,
        default_registry: str = DEFAULT_REGISTRY,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.registry = registry
        self.is_default_registry = registry == default_registry
        scheme = "https" if use_https else "http"
        headers = {"User-Agent": user_agent} if user_agent else {}
        self._client = httpx.Client(
            base_url=f"{scheme}://{registry}",
            transport=transport,
            timeout=timeout,
            headers=headers,
            follow_redirects=True,
        )
        self._auth: dict[str, str] = {}

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def manifest_digest(self, repository: str, tag: str) -> str:
        """Resolve ``repository:tag`` to a ``sha256:`` digest.

        Raises:
            ProtocolError: Registry unreachable, authentication failed, or the
                manifest does not exist.
        """
        path = f"/v2/{repository}/manifests/{tag}"
        try:
            response = self._request("HEAD", path, accept=DIGEST_ACCEPT)
            if response.status_code in (401, 403):
                log.debug("registry.auth_required", registry=self.registry, status=response.status_code)
                self._authenticate(repository, response)
                response = self._request("HEAD", path, accept=DIGEST_ACCEPT)

            if response.status_code == 404:
                raise ProtocolError.digest_not_found(self.registry, repository, tag)
            if not response.is_success:
                raise ProtocolError.registry(self.registry, repository, f"HTTP {response.status_code}")

            digest = response.headers.get(DIGEST_HEADER)
            if not digest:
                # Some registries omit the header on HEAD; hash the manifest body instead
                response = self._request("GET", path, accept=DIGEST_ACCEPT)
                if not response.is_success:
                    raise ProtocolError.registry(self.registry, repository, f"HTTP {response.status_code}")
                digest = response.headers.get(DIGEST_HEADER) or _sha256(response.content)
        except httpx.HTTPError as e:
            raise ProtocolError.registry(self.registry, repository, str(e)) from e

        log.info("registry.digest_resolved", registry=self.registry, image=repository, tag=tag, digest=digest)
        return digest

    def image_info(self, repository: str, digest: str) -> ImageInfo:
        """Best-effort version label and creation time. Never raises."""
        try:
            return self._image_info(repository, digest)
        except (UptixError, httpx.HTTPError, ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            log.debug("registry.metadata_unavailable", registry=self.registry, image=repository, error=str(e))
            return ImageInfo()

    def _image_info(self, repository: str, digest: str) -> ImageInfo:
        manifest = self._get_json(f"/v2/{repository}/manifests/{digest}", accept=SINGLE_PLATFORM_ACCEPT)
        if "manifests" in manifest:
            # Multi-platform list; the first platform entry stands in for all of them
            first = manifest["manifests"][0]["digest"]
            manifest = self._get_json(f"/v2/{repository}/manifests/{first}", accept=SINGLE_PLATFORM_ACCEPT)

        config_digest = manifest["config"]["digest"]
        blob = self._get_json(f"/v2/{repository}/blobs/{config_digest}", accept="application/json")

        labels = _mapping(_mapping(blob.get("config")).get("Labels"))
        version = next((v for name in VERSION_LABELS if isinstance(v := labels.get(name), str) and v), None)
        created = blob.get("created")
        return ImageInfo(version=version, created=created if isinstance(created, str) else None)

    def _get_json(self, path: str, *, accept: str) -> dict[str, Any]:
        response = self._request("GET", path, accept=accept)
        if not response.is_success:
            raise ProtocolError.registry(self.registry, path, f"HTTP {response.status_code}")
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object from {path}")
        return data

    def _request(self, method: str, path: str, *, accept: str) -> httpx.Response:
        headers = {"Accept": accept, **self._auth}
        return self._client.request(method, path, headers=headers)

    def _authenticate(self, repository: str, failed: httpx.Response) -> None:
        challenge = parse_challenge(failed.headers.get("WWW-Authenticate"))
        if challenge is None:
            base = self._client.get("/v2/")
            challenge = parse_challenge(base.headers.get("WWW-Authenticate"))
        if challenge is None:
            raise ProtocolError.registry(
                self.registry, repository, f"HTTP {failed.status_code} and no authentication challenge"
            )

        creds = find_credentials(self.registry, is_default_registry=self.is_default_registry)

        if challenge.scheme == "basic":
            if creds is None:
                raise ProtocolError.registry(self.registry, repository, "registry requires credentials")
            self._auth = {"Authorization": creds.as_basic_header()}
            return

        if challenge.scheme != "bearer":
            raise ProtocolError.registry(
                self.registry, repository, f"unsupported authentication scheme {challenge.scheme!r}"
            )
        token = self._fetch_token(repository, challenge, auth=(creds.username, creds.password) if creds else None)
        self._auth = {"Authorization": f"Bearer {token}"}

    def _fetch_token(
        self,
        repository: str,
        challenge: Challenge,
        *,
        auth: tuple[str, str] | None,
    ) -> str:
        if not challenge.realm:
            raise ProtocolError.registry(self.registry, repository, "bearer challenge without realm")
        params = {"scope": f"repository:{repository}:pull"}
        if challenge.service:
            params["service"] = challenge.service

        log.debug("registry.token_request", realm=challenge.realm, scope=params["scope"], authenticated=bool(auth))
        response = self._client.get(challenge.realm, params=params, auth=auth)
        if not response.is_success:
            raise ProtocolError.registry(
                self.registry, repository, f"token request failed with HTTP {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError.registry(self.registry, repository, f"invalid token response: {e}") from e
        if not isinstance(data, dict):
            raise ProtocolError.registry(self.registry, repository, "token response is not an object")
        token = data.get("token") or data.get("access_token")
        if not token:
            raise ProtocolError.registry(self.registry, repository, "token response has no token")
        return str(token)


def _sha256(content: bytes) -> str:
    return "sha256:" + hashlib.sha256(content).hexdigest()


def _mapping(value: Any) -> dict[str, Any]:
    # Config blobs are free-form; anything that is not an object counts as absent
    return value if isinstance(value, dict) else {}
