"""Indented tree dump of a syntax tree, for debugging unsupported input."""

from __future__ import annotations

from typing import Any, List

from .literals import UnrenderableValue, ruby_inspect
from .nodes import SyntaxNode

INDENT = "  "


def dump_tree(root: Any, level: int = 0) -> str:
    """Return one line per node, sequence bracket and scalar, indented by depth."""
    lines: List[str] = []
    _dump(root, level, lines)
    return "\n".join(lines)


def _dump(value: Any, level: int, lines: List[str]) -> None:
    pad = INDENT * level
    if isinstance(value, SyntaxNode):
        lineno = "?" if value.lineno is None else value.lineno
        lines.append(f"{pad}{value.type} ({lineno})")
        for child in value.children:
            _dump(child, level + 1, lines)
    elif isinstance(value, (list, tuple)):
        lines.append(f"{pad}[")
        for child in value:
            _dump(child, level + 1, lines)
        lines.append(f"{pad}]")
    else:
        try:
            text = ruby_inspect(value)
        except UnrenderableValue:
            text = repr(value)
        lines.append(f"{pad}{text}")


__all__ = ["dump_tree"]
