"""Registry credentials and authentication challenges."""

from __future__ import annotations

import base64
import binascii
import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)

# Names under which Docker Hub credentials show up in ~/.docker/config.json
DEFAULT_REGISTRY_ALIASES = (
    "https://index.docker.io/v1/",
    "index.docker.io",
    "docker.io",
    "registry-1.docker.io",
)

USERNAME_ENV = "DOCKER_USERNAME"
PASSWORD_ENV = "DOCKER_PASSWORD"

_CHALLENGE_PARAM = re.compile(r'(\w+)\s*=\s*(?:"([^"]*)"|([^\s,]+))')


@dataclass(frozen=True, slots=True)
class Credentials:
    username: str
    password: str = field(repr=False)

    def as_basic_header(self) -> str:
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
        return f"Basic {token}"


@dataclass(frozen=True, slots=True)
class Challenge:
    """Parsed ``WWW-Authenticate`` header."""

    scheme: str  # lowercased: "bearer" or "basic"
    params: dict[str, str] = field(default_factory=dict)

    @property
    def realm(self) -> str | None:
        return self.params.get("realm")

    @property
    def service(self) -> str | None:
        return self.params.get("service")


def parse_challenge(header: str | None) -> Challenge | None:
    """Parse ``Bearer realm="...",service="..."`` style challenges.

    Examples:
        'Bearer realm="https://auth.docker.io/token",service="registry.docker.io"'
            -> Challenge("bearer", {"realm": ..., "service": ...})
        'Basic realm="Registry"' -> Challenge("basic", {"realm": "Registry"})
        None -> None
    """
    if not header:
        return None
    scheme, _, rest = header.strip().partition(" ")
    if not scheme:
        return None
    params = {m.group(1).lower(): m.group(2) if m.group(2) is not None else m.group(3)
              for m in _CHALLENGE_PARAM.finditer(rest)}
    return Challenge(scheme=scheme.lower(), params=params)


def credentials_from_env(env: Mapping[str, str] | None = None) -> Credentials | None:
    env = os.environ if env is None else env
    username = env.get(USERNAME_ENV)
    password = env.get(PASSWORD_ENV)
    if username and password:
        return Credentials(username, password)
    return None


def docker_config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    config_dir = env.get("DOCKER_CONFIG")
    if config_dir:
        return Path(config_dir) / "config.json"
    return Path.home() / ".docker" / "config.json"


def _decode_auth_entry(entry: object) -> Credentials | None:
    if not isinstance(entry, dict):
        return None
    if entry.get("username") and entry.get("password"):
        return Credentials(str(entry["username"]), str(entry["password"]))
    auth = entry.get("auth")
    if not auth:
        return None
    try:
        decoded = base64.b64decode(str(auth)).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep or not username:
        return None
    return Credentials(username, password)


def credentials_from_docker_config(names: tuple[str, ...], path: Path) -> Credentials | None:
    """Look up the first of ``names`` in the ``auths`` section of a docker config."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        log.warning("registry.docker_config_unreadable", path=str(path), error=str(e))
        return None
    auths = data.get("auths") if isinstance(data, dict) else None
    if not isinstance(auths, dict):
        return None
    for name in names:
        creds = _decode_auth_entry(auths.get(name))
        if creds is not None:
            log.debug("registry.credentials_found", source="docker_config", name=name)
            return creds
    return None


def find_credentials(
    registry: str,
    *,
    is_default_registry: bool,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> Credentials | None:
    """Credentials for ``registry``, or None to authenticate anonymously.

    The default registry checks the environment first, then the docker config
    under its well-known aliases. Other registries only check the docker
    config under their host name.
    """
    config_path = config_path or docker_config_path(env)
    if is_default_registry:
        creds = credentials_from_env(env)
        if creds is not None:
            log.debug("registry.credentials_found", source="env")
            return creds
        return credentials_from_docker_config(DEFAULT_REGISTRY_ALIASES, config_path)
    return credentials_from_docker_config((registry, f"https://{registry}"), config_path)
