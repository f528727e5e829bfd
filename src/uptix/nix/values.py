"""Decoding of literal Nix values found in uptix.* call arguments."""

from __future__ import annotations

from typing import Any

from uptix.core.errors import DeclarationError
from uptix.nix.parser import (
    ATTRSET,
    BINDING,
    BINDING_SET,
    COMMENT,
    FLOAT,
    INTEGER,
    INTERPOLATION,
    STRING,
    VARIABLE,
    ParsingContext,
    SourceSpan,
    node_text,
)

_ESCAPES = {"\\n": "\n", "\\r": "\r", "\\t": "\t", '\\"': '"', "\\\\": "\\", "\\$": "$"}


def assert_kind(
    context: ParsingContext,
    function: str,
    node: Any,
    expected_type: str,
    help: str,
) -> Any:
    """Return ``node`` if it has the expected kind, else raise UnexpectedArgument."""
    if node.type != expected_type:
        raise DeclarationError.unexpected_argument(
            function=function,
            file=context.file_path,
            argument_pos=SourceSpan.of(node).as_tuple(),
            expected_type=expected_type,
            help=help,
        )
    return node


def string_from_nix(context: ParsingContext, node: Any) -> str:
    """Decode a double-quoted string literal; interpolation is rejected."""
    parts: list[str] = []
    for child in node.named_children:
        if child.type == INTERPOLATION:
            raise DeclarationError.nix_parse(
                context.file_path,
                SourceSpan.of(child).as_tuple(),
                "string interpolation is not supported in uptix declarations",
            )
        text = node_text(child)
        if child.type == "escape_sequence":
            parts.append(_ESCAPES.get(text, text[1:]))
        else:
            parts.append(text)
    if not node.named_children:
        # Grammars that do not expose fragments as children
        return node_text(node)[1:-1]
    return "".join(parts)


def value_from_nix(context: ParsingContext, node: Any) -> Any:
    """Convert a literal Nix expression into the equivalent Python value.

    Supports strings, integers, floats, booleans and (nested) attribute sets,
    which is everything a uptix declaration is allowed to contain.
    """
    kind = node.type

    if kind == STRING:
        return string_from_nix(context, node)

    if kind == INTEGER:
        return int(node_text(node))

    if kind == FLOAT:
        return float(node_text(node))

    if kind == VARIABLE:
        identifier = node_text(node)
        if identifier == "true":
            return True
        if identifier == "false":
            return False
        raise DeclarationError.nix_parse(
            context.file_path, SourceSpan.of(node).as_tuple(), f"Unexpected identifier {identifier}"
        )

    if kind != ATTRSET:
        raise DeclarationError.nix_parse(
            context.file_path, SourceSpan.of(node).as_tuple(), f"Expected attr set, found {kind}"
        )

    attrs: dict[str, Any] = {}
    for binding_set in node.named_children:
        if binding_set.type != BINDING_SET:
            continue
        for binding in binding_set.named_children:
            if binding.type == COMMENT:
                continue
            if binding.type != BINDING:
                raise DeclarationError.nix_parse(
                    context.file_path,
                    SourceSpan.of(binding).as_tuple(),
                    f"Expected key/value pair, got {binding.type}",
                )
            key = binding.child_by_field_name("attrpath")
            value = binding.child_by_field_name("expression")
            if key is None or value is None:
                raise DeclarationError.nix_parse(
                    context.file_path, SourceSpan.of(binding).as_tuple(), "Incomplete binding"
                )
            attrs[node_text(key)] = value_from_nix(context, value)
    return attrs
