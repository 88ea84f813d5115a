"""Interfaces for loading serialized Ruby syntax trees."""

from .ast_loader import (
    AstLoadError,
    LoadIssue,
    LoadResult,
    load_ast,
    node_from_data,
    node_to_data,
    value_from_data,
)

__all__ = [
    "AstLoadError",
    "LoadIssue",
    "LoadResult",
    "load_ast",
    "node_from_data",
    "node_to_data",
    "value_from_data",
]
