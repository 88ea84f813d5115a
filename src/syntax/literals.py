"""
Rendering of scalar values as Ruby literal syntax.

The output of `ruby_inspect` parses back to an equal value; it follows the
shape of Ruby's own `#inspect` for the common cases but does not try to be
byte-identical for every input.
"""

from __future__ import annotations

import math
import re
from typing import Any

from .nodes import Symbol

_NAMED_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\f": "\\f",
    "\v": "\\v",
    "\a": "\\a",
    "\b": "\\b",
    "\x1b": "\\e",
}

_PLAIN_SYMBOL = re.compile(
    r"""
    \A(?:
        [A-Za-z_][A-Za-z0-9_]*[?!=]?
      | @@?[A-Za-z_][A-Za-z0-9_]*
      | \$[A-Za-z_][A-Za-z0-9_]*
      | \[\]=?
      | \*\*|<=>|===?|=~|!=|!~|<=|>=|<<|>>|[+\-]@|~@?|!@?
      | [+\-*/%<>^&|]
    )\Z
    """,
    re.VERBOSE,
)


class UnrenderableValue(ValueError):
    """Raised when a scalar has no Ruby literal form."""

    def __init__(self, value: Any):
        super().__init__(f"No Ruby literal form for {value!r}")
        self.value = value


def escape_string_body(text: str) -> str:
    """Escape `text` for use between double quotes, without the quotes."""
    out = []
    length = len(text)
    for index, char in enumerate(text):
        escaped = _NAMED_ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif char == "#" and index + 1 < length and text[index + 1] in "{$@":
            out.append("\\#")
        elif char == "\x7f":
            out.append("\\x7F")
        elif not char.isprintable():
            code = ord(char)
            if code <= 0xFFFF:
                out.append(f"\\u{code:04X}")
            else:
                out.append(f"\\u{{{code:X}}}")
        else:
            out.append(char)
    return "".join(out)


def quote_string(text: str) -> str:
    return f'"{escape_string_body(text)}"'


def symbol_literal(symbol: Symbol) -> str:
    if _PLAIN_SYMBOL.match(symbol.name):
        return f":{symbol.name}"
    return f":{quote_string(symbol.name)}"


def float_literal(value: float) -> str:
    if math.isnan(value):
        return "Float::NAN"
    if math.isinf(value):
        return "Float::INFINITY" if value > 0 else "-Float::INFINITY"
    text = repr(value)
    if "e" in text and "." not in text.split("e")[0]:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}.0e{exponent}"
    return text


def ruby_inspect(value: Any) -> str:
    """Render a scalar as a Ruby literal."""
    # bool before int: bool is an int subclass
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, Symbol):
        return symbol_literal(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return float_literal(value)
    raise UnrenderableValue(value)


__all__ = [
    "UnrenderableValue",
    "escape_string_body",
    "float_literal",
    "quote_string",
    "ruby_inspect",
    "symbol_literal",
]
