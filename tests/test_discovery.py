"""Tests for Nix file discovery."""

from pathlib import Path

from uptix.discovery import discover_nix_files


def test_finds_nested_files_sorted(tmp_path: Path) -> None:
    for rel in ["b.nix", "a/default.nix", "a/z/deep.nix", "notes.txt", "a/x.nix.bak"]:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{ }")

    found = discover_nix_files(tmp_path)

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["a/default.nix", "a/z/deep.nix", "b.nix"]


def test_hidden_directories_skipped(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "hook.nix").write_text("{ }")
    (tmp_path / "flake.nix").write_text("{ }")

    assert discover_nix_files(tmp_path) == [tmp_path / "flake.nix"]


def test_empty_tree(tmp_path: Path) -> None:
    assert discover_nix_files(tmp_path) == []


def test_hidden_files_skipped(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / ".draft.nix").write_text("{ }")
    (tmp_path / "sub" / ".scratch.nix").write_text("{ }")
    (tmp_path / "sub" / "host.nix").write_text("{ }")

    assert discover_nix_files(tmp_path) == [tmp_path / "sub" / "host.nix"]


def test_hidden_root_still_searched(tmp_path: Path) -> None:
    root = tmp_path / ".config"
    root.mkdir()
    (root / "home.nix").write_text("{ }")

    assert discover_nix_files(root) == [root / "home.nix"]
