"""Nix front end: tree-sitter parsing and literal value decoding."""

from uptix.nix.diagnostics import render_error
from uptix.nix.parser import NixParser, ParseResult, ParsingContext, SourceSpan
from uptix.nix.values import assert_kind, value_from_nix

__all__ = [
    "NixParser",
    "ParseResult",
    "ParsingContext",
    "SourceSpan",
    "assert_kind",
    "render_error",
    "value_from_nix",
]
