"""Ruby syntax tree to Ruby source regeneration."""

from .core import (
    ConversionError,
    Converter,
    InvalidFragment,
    RenderContext,
    UnexpectedSegment,
    UnsupportedNodeType,
    UnsupportedOperator,
    to_source,
)

__all__ = [
    "ConversionError",
    "Converter",
    "InvalidFragment",
    "RenderContext",
    "UnexpectedSegment",
    "UnsupportedNodeType",
    "UnsupportedOperator",
    "to_source",
]
