"""Tree-sitter parsing of Nix sources.

Binds the declaration extractor to a concrete syntax tree: the
``tree-sitter-nix`` grammar loaded into the ``tree_sitter`` runtime. The
extractor only relies on node kind, children, rendered text, next sibling and
byte span, so nothing outside this package touches tree-sitter directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tree_sitter
import tree_sitter_nix

# Node kinds of the tree-sitter-nix grammar the extractor cares about
APPLY = "apply_expression"
SELECT = "select_expression"
STRING = "string_expression"
INTEGER = "integer_expression"
FLOAT = "float_expression"
VARIABLE = "variable_expression"
ATTRSET = "attrset_expression"
BINDING_SET = "binding_set"
BINDING = "binding"
INTERPOLATION = "interpolation"
COMMENT = "comment"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Byte offset and length of a node, used only for diagnostics."""

    offset: int
    length: int

    @classmethod
    def of(cls, node: Any) -> SourceSpan:
        return cls(node.start_byte, node.end_byte - node.start_byte)

    def as_tuple(self) -> tuple[int, int]:
        return (self.offset, self.length)


@dataclass(frozen=True, slots=True)
class ParsingContext:
    """Source file being walked, kept around to render diagnostics."""

    file_path: str
    file_contents: str

    def line_col(self, offset: int) -> tuple[int, int]:
        """1-based line and column of a byte offset."""
        prefix = self.file_contents.encode("utf-8")[:offset].decode("utf-8", errors="replace")
        line = prefix.count("\n") + 1
        col = len(prefix) - (prefix.rfind("\n") + 1) + 1
        return line, col


@dataclass
class ParseResult:
    """Result of parsing a Nix file."""

    tree: Any  # Tree-sitter Tree (not serializable)
    root_node: Any  # Tree-sitter Node
    context: ParsingContext
    error_count: int = 0


def node_text(node: Any) -> str:
    return node.text.decode("utf-8") if node.text else ""


@dataclass
class NixParser:
    """Tree-sitter parser for Nix sources.

    Usage::

        parser = NixParser()
        result = parser.parse(Path("configuration.nix"))
        deps = collect_ast_dependencies(result.context, result.root_node)
    """

    _parser: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser(tree_sitter.Language(tree_sitter_nix.language()))

    def parse(self, path: Path, content: bytes | None = None) -> ParseResult:
        """Parse a Nix file. Reads from ``path`` when ``content`` is None."""
        if content is None:
            content = path.read_bytes()
        return self.parse_source(content.decode("utf-8"), file_path=str(path))

    def parse_source(self, source: str, *, file_path: str = "<string>") -> ParseResult:
        tree = self._parser.parse(source.encode("utf-8"))

        error_count = 0

        def count_errors(node: Any) -> None:
            nonlocal error_count
            if node.type == "ERROR" or node.is_missing:
                error_count += 1
            for child in node.children:
                count_errors(child)

        count_errors(tree.root_node)

        return ParseResult(
            tree=tree,
            root_node=tree.root_node,
            context=ParsingContext(file_path=file_path, file_contents=source),
            error_count=error_count,
        )
