"""
Loading of serialized Ruby syntax trees into the `syntax` node model.

Obtaining an AST from a live Ruby callable happens on the Ruby side (for
example by walking `RubyVM::AbstractSyntaxTree.of(proc)` and writing it out as
JSON). This module reads that JSON document:

    {"type": "SCOPE", "lineno": 1, "children": [[{"sym": "a"}], null, {...}]}

An object with a `"type"` key is a node, an object holding only `"sym"` is a
symbol, arrays are child sequences and every other JSON value is a scalar.
Node tags are not validated here; the converter reports unsupported ones.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, List, Optional

from syntax import Symbol, SyntaxNode


class AstLoadError(ValueError):
    """Raised in strict mode when the document is not a valid AST dump."""

    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{message} (at {path})")
        self.path = path


@dataclass(frozen=True)
class LoadIssue:
    """A problem found while loading in tolerant mode."""

    description: str
    path: Optional[str]


@dataclass(frozen=True)
class LoadResult:
    """The loaded tree plus metadata about the load run."""

    ast: Optional[SyntaxNode]
    issues: List[LoadIssue]
    source_hash: str
    source_name: str

    def to_json(self) -> str:
        """Serialise the load result to JSON for debugging or caching."""
        payload = {
            "ast": None if self.ast is None else node_to_data(self.ast),
            "issues": [issue.__dict__ for issue in self.issues],
            "source_hash": self.source_hash,
            "source_name": self.source_name,
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)


def _hash_source(source: str) -> str:
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


def value_from_data(data: Any, path: str = "$") -> Any:
    """Convert one decoded JSON value into a node, symbol, tuple or scalar."""
    if isinstance(data, dict):
        if "type" in data:
            return node_from_data(data, path)
        if set(data) == {"sym"} and isinstance(data["sym"], str):
            return Symbol(data["sym"])
        raise AstLoadError("Object is neither a node nor a symbol", path)
    if isinstance(data, list):
        return tuple(
            value_from_data(item, f"{path}[{index}]") for index, item in enumerate(data)
        )
    if data is None or isinstance(data, (str, int, float, bool)):
        return data
    raise AstLoadError(f"Unsupported JSON value {data!r}", path)


def node_from_data(data: Any, path: str = "$") -> SyntaxNode:
    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise AstLoadError("Expected a node object with a string 'type'", path)
    children = data.get("children", [])
    if not isinstance(children, list):
        raise AstLoadError("Node 'children' must be an array", path)
    lineno = data.get("lineno")
    if lineno is not None and (isinstance(lineno, bool) or not isinstance(lineno, int)):
        raise AstLoadError("Node 'lineno' must be an integer", path)
    return SyntaxNode(
        type=data["type"],
        children=tuple(
            value_from_data(child, f"{path}.children[{index}]")
            for index, child in enumerate(children)
        ),
        lineno=lineno,
    )


def value_to_data(value: Any) -> Any:
    if isinstance(value, SyntaxNode):
        return node_to_data(value)
    if isinstance(value, Symbol):
        return {"sym": value.name}
    if isinstance(value, (list, tuple)):
        return [value_to_data(item) for item in value]
    return value


def node_to_data(node: SyntaxNode) -> dict:
    data = {"type": node.type, "children": [value_to_data(c) for c in node.children]}
    if node.lineno is not None:
        data["lineno"] = node.lineno
    return data


def load_ast(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
) -> LoadResult:
    """
    Load a JSON AST dump.

    Args:
        source: JSON text of the dump.
        source_name: Label used for diagnostics (defaults to `<input>`).
        tolerant: When True, problems are reported as `LoadIssue`s and the
            result carries no AST instead of raising.

    Returns:
        LoadResult containing the root node (or None) and any issues.

    Raises:
        AstLoadError: If the document is invalid and `tolerant` is False.
    """
    source_hash = _hash_source(source)
    try:
        data = json.loads(source)
    except json.JSONDecodeError as exc:
        if not tolerant:
            raise AstLoadError(f"Invalid JSON: {exc.msg} at line {exc.lineno}") from exc
        issue = LoadIssue(description=f"Invalid JSON: {exc.msg} at line {exc.lineno}", path=None)
        return LoadResult(ast=None, issues=[issue], source_hash=source_hash, source_name=source_name)

    try:
        root = node_from_data(data)
    except AstLoadError as exc:
        if not tolerant:
            raise
        issue = LoadIssue(description=str(exc), path=exc.path)
        return LoadResult(ast=None, issues=[issue], source_hash=source_hash, source_name=source_name)

    return LoadResult(ast=root, issues=[], source_hash=source_hash, source_name=source_name)


__all__ = [
    "AstLoadError",
    "LoadIssue",
    "LoadResult",
    "load_ast",
    "node_from_data",
    "node_to_data",
    "value_from_data",
]
