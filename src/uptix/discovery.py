"""Nix source discovery."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)

NIX_SUFFIX = ".nix"


def discover_nix_files(root: Path) -> list[Path]:
    """All ``*.nix`` files below ``root``, sorted.

    Hidden entries are skipped: dot-directories (``.git``, ``.direnv``) are
    not descended into and dot-files such as ``.draft.nix`` are ignored.
    ``root`` itself is always searched even if its name starts with a dot.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        found.extend(
            Path(dirpath) / name for name in filenames if name.endswith(NIX_SUFFIX) and not name.startswith(".")
        )
    found.sort()
    log.debug("discovery.done", root=str(root), files=len(found))
    return found
