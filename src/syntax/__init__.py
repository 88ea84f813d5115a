"""Ruby syntax-tree node model, literal rendering and tree dumping."""

from .dump import dump_tree
from .literals import (
    UnrenderableValue,
    escape_string_body,
    quote_string,
    ruby_inspect,
    symbol_literal,
)
from .nodes import (
    SYNTHETIC_TYPES,
    NodeType,
    Symbol,
    SyntaxNode,
    SyntheticNode,
    node,
    sym,
)

__all__ = [
    "NodeType",
    "SYNTHETIC_TYPES",
    "Symbol",
    "SyntaxNode",
    "SyntheticNode",
    "UnrenderableValue",
    "dump_tree",
    "escape_string_body",
    "node",
    "quote_string",
    "ruby_inspect",
    "sym",
    "symbol_literal",
]
