"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable
from pathlib import Path

# Insert local src directory at the beginning of sys.path
# This ensures that the local uptix package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of uptix modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("uptix"):
        del sys.modules[module_name]

import httpx  # noqa: E402
import pytest  # noqa: E402

from uptix.context import ResolveContext  # noqa: E402
from uptix.prefetch import FetchOptions  # noqa: E402

Handler = Callable[[httpx.Request], httpx.Response]


class StubPrefetcher:
    """Records prefetch calls and returns a fixed hash."""

    def __init__(self, result: str = "sha256-stubbed") -> None:
        self.result = result
        self.calls: list[tuple[str, str, FetchOptions]] = []

    def prefetch(self, url: str, rev: str, options: FetchOptions) -> str:
        self.calls.append((url, rev, options))
        return self.result


@pytest.fixture(autouse=True)
def isolated_credentials(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the developer's tokens and ~/.docker out of every test."""
    docker_dir = tmp_path_factory.mktemp("docker-config")
    monkeypatch.setenv("DOCKER_CONFIG", str(docker_dir))
    for name in ("DOCKER_USERNAME", "DOCKER_PASSWORD", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    return docker_dir


@pytest.fixture
def stub_prefetcher() -> StubPrefetcher:
    return StubPrefetcher()


@pytest.fixture
def make_ctx(stub_prefetcher: StubPrefetcher) -> Callable[..., ResolveContext]:
    """Build a ResolveContext whose HTTP traffic goes to ``handler``."""

    def _make(handler: Handler, **kwargs: object) -> ResolveContext:
        kwargs.setdefault("prefetcher", stub_prefetcher)
        kwargs.setdefault("github_token", None)
        return ResolveContext(transport=httpx.MockTransport(handler), **kwargs)  # type: ignore[arg-type]

    return _make
