"""Source-anchored rendering of declaration errors."""

from __future__ import annotations

from uptix.core.errors import UptixError
from uptix.nix.parser import ParsingContext


def render_error(error: UptixError, context: ParsingContext | None = None) -> str:
    """Render an error for the terminal.

    Declaration errors with a known span show the offending line with a caret
    underline and the help text; everything else renders as its message.
    """
    pos = error.details.get("argument_pos")
    if context is None or pos is None:
        return str(error)

    offset, length = pos
    line_no, col = context.line_col(offset)
    lines = context.file_contents.splitlines() or [""]
    source_line = lines[line_no - 1] if line_no - 1 < len(lines) else ""
    underline = " " * (col - 1) + "^" * max(length, 1)
    gutter = " " * len(str(line_no))

    out = [
        f"error: {error.message}",
        f"{gutter}--> {context.file_path}:{line_no}:{col}",
        f"{gutter} |",
        f"{line_no} | {source_line}",
        f"{gutter} | {underline}",
    ]
    help_text = error.details.get("help")
    if help_text:
        out.append(f"{gutter} = help: {help_text}")
    return "\n".join(out)
