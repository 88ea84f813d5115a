"""
Node model for Ruby syntax trees as emitted by `RubyVM::AbstractSyntaxTree`.

Real nodes come from the host parser (via the loader). Synthetic nodes are
built by the converter to reuse rendering logic for sub-shapes such as
call-argument lists and block bodies; they never come from a parser and never
leave the converter. Both are immutable: children are stored as tuples.

A child slot holds one of:
    - a `SyntaxNode` (or `SyntheticNode`)
    - a tuple of child slots
    - a scalar: `str`, `Symbol`, `int`, `float`, `bool`
    - `None` (absent)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple


class NodeType(str, Enum):
    """Closed set of node tags the converter knows how to render."""

    SCOPE = "SCOPE"
    BLOCK = "BLOCK"
    ITER = "ITER"
    CONST = "CONST"
    COLON2 = "COLON2"
    CALL = "CALL"
    FCALL = "FCALL"
    VCALL = "VCALL"
    OPCALL = "OPCALL"
    DVAR = "DVAR"
    LVAR = "LVAR"
    IVAR = "IVAR"
    DASGN_CURR = "DASGN_CURR"
    DASGN = "DASGN"
    LASGN = "LASGN"
    IASGN = "IASGN"
    IF = "IF"
    UNLESS = "UNLESS"
    WHILE = "WHILE"
    LIT = "LIT"
    STR = "STR"
    NIL = "NIL"
    TRUE = "TRUE"
    FALSE = "FALSE"
    DSTR = "DSTR"
    EVSTR = "EVSTR"
    AND = "AND"
    OR = "OR"
    LIST = "LIST"
    HASH = "HASH"
    ATTRASGN = "ATTRASGN"
    RESCUE = "RESCUE"
    BEGIN = "BEGIN"

    # synthetic, converter-internal
    LIST_EMBEDDED = "LIST_EMBEDDED"
    ITER_SCOPE = "ITER_SCOPE"


SYNTHETIC_TYPES = frozenset({NodeType.LIST_EMBEDDED, NodeType.ITER_SCOPE})


@dataclass(frozen=True)
class Symbol:
    """A Ruby symbol scalar. `str()` yields the bare name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class SyntaxNode:
    """A tagged syntax-tree node with positional children.

    `type` is kept as the raw tag string so that tags outside `NodeType` can
    still be represented; the converter rejects them at dispatch time.
    """

    type: str
    children: Tuple[Any, ...] = ()
    lineno: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", _freeze(self.children))

    @property
    def synthetic(self) -> bool:
        return False


@dataclass(frozen=True)
class SyntheticNode(SyntaxNode):
    """A node fabricated by the converter. No validation at construction."""

    @property
    def synthetic(self) -> bool:
        return True

    @classmethod
    def list(cls, children: Iterable[Any]) -> "SyntheticNode":
        """Embedded list: elements rendered comma-separated without brackets."""
        return cls(NodeType.LIST_EMBEDDED.value, tuple(children))

    @classmethod
    def iter_scope(cls, params: Any, arg_spec: Any, body: Any) -> "SyntheticNode":
        """Pair a block's parameter table and argument spec with its body."""
        return cls(NodeType.ITER_SCOPE.value, (params, arg_spec, body))


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def node(type_tag: str, *children: Any, lineno: Optional[int] = None) -> SyntaxNode:
    """Shorthand constructor for real nodes, mainly for building trees in code."""
    if isinstance(type_tag, NodeType):
        type_tag = type_tag.value
    return SyntaxNode(type_tag, tuple(children), lineno)


def sym(name: str) -> Symbol:
    return Symbol(name)


__all__ = [
    "NodeType",
    "SYNTHETIC_TYPES",
    "Symbol",
    "SyntaxNode",
    "SyntheticNode",
    "node",
    "sym",
]
