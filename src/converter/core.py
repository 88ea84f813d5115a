"""
Regeneration of Ruby source text from `RubyVM::AbstractSyntaxTree` nodes.

The converter walks a tree produced by parsing a closure (or method) body and
appends text fragments to a `RenderContext` buffer. Every handler goes through
`Converter.emit`, which understands four fragment shapes:

    SyntaxNode      converted recursively, in place
    list / tuple    rendered as a scope: newline, each member, newline
    str             appended verbatim
    None            ignored

Output uses a single canonical style: no indentation, `\\n` line separators,
`do ... end` blocks and explicit parentheses on every call. Unsupported nodes
raise `UnsupportedNodeType`; there is no partial output.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from syntax import (
    SYNTHETIC_TYPES,
    NodeType,
    SyntaxNode,
    SyntheticNode,
    UnrenderableValue,
    escape_string_body,
    ruby_inspect,
)


class ConversionError(RuntimeError):
    """Base class for failures while converting a tree to source."""

    def __init__(self, message: str, node: Any = None):
        loc = ""
        if isinstance(node, SyntaxNode) and node.lineno is not None:
            loc = f" (line {node.lineno})"
        super().__init__(f"{message}{loc}")
        self.node = node


class UnsupportedNodeType(ConversionError):
    """No handler exists for the node's type tag."""

    def __init__(self, tag: str, node: Any = None):
        super().__init__(f"Could not convert {tag} node to ruby", node)
        self.tag = tag


class InvalidFragment(ConversionError):
    """A value reached `emit` (or a literal slot) that cannot be rendered."""

    def __init__(self, value: Any, node: Any = None):
        super().__init__(f"Invalid fragment {value!r}", node)
        self.value = value


class UnexpectedSegment(ConversionError):
    """An interpolated string segment was neither literal text nor a splice."""

    def __init__(self, tag: str, node: Any = None):
        super().__init__(f"Unexpected node {tag} encountered in DSTR", node)
        self.tag = tag


class UnsupportedOperator(ConversionError):
    """An attribute assignment used an operator other than `[]=`."""

    def __init__(self, op: str, node: Any = None):
        super().__init__(f"Unsupported ATTRASGN op {op}", node)
        self.op = op


@dataclass
class RenderContext:
    """Mutable state owned by a single top-level conversion."""

    buffer: io.StringIO = field(default_factory=io.StringIO)
    # scope nesting depth; tracked but not used for output
    indent: int = 0

    def write(self, text: str) -> None:
        self.buffer.write(text)

    def getvalue(self) -> str:
        return self.buffer.getvalue()


def _unpack(node: SyntaxNode, count: int) -> List[Any]:
    """Return exactly `count` children, padding missing slots with None."""
    children = list(node.children[:count])
    children.extend([None] * (count - len(children)))
    return children


def _without_sentinel(items: Sequence[Any]) -> Sequence[Any]:
    """Drop the trailing None the parser appends to LIST children."""
    if items and items[-1] is None:
        return items[:-1]
    return items


class Converter:
    """Dispatches on node type and emits Ruby source for each construct."""

    _HANDLERS: Dict[NodeType, str] = {
        NodeType.SCOPE: "_on_scope",
        NodeType.BLOCK: "_on_block",
        NodeType.ITER: "_on_iter",
        NodeType.ITER_SCOPE: "_on_iter_scope",
        NodeType.CONST: "_on_const",
        NodeType.COLON2: "_on_colon2",
        NodeType.CALL: "_on_call",
        NodeType.FCALL: "_on_fcall",
        NodeType.VCALL: "_on_vcall",
        NodeType.OPCALL: "_on_opcall",
        NodeType.DVAR: "_on_variable",
        NodeType.LVAR: "_on_variable",
        NodeType.IVAR: "_on_variable",
        NodeType.DASGN_CURR: "_on_assignment",
        NodeType.DASGN: "_on_assignment",
        NodeType.LASGN: "_on_assignment",
        NodeType.IASGN: "_on_assignment",
        NodeType.IF: "_on_conditional",
        NodeType.UNLESS: "_on_conditional",
        NodeType.WHILE: "_on_while",
        NodeType.LIT: "_on_lit",
        NodeType.STR: "_on_str",
        NodeType.NIL: "_on_nil",
        NodeType.TRUE: "_on_true",
        NodeType.FALSE: "_on_false",
        NodeType.DSTR: "_on_dstr",
        NodeType.EVSTR: "_on_evstr",
        NodeType.AND: "_on_and",
        NodeType.OR: "_on_or",
        NodeType.LIST: "_on_list",
        NodeType.LIST_EMBEDDED: "_on_list_embedded",
        NodeType.HASH: "_on_hash",
        NodeType.ATTRASGN: "_on_attrasgn",
        NodeType.RESCUE: "_on_rescue",
        NodeType.BEGIN: "_on_begin",
    }

    def __init__(self) -> None:
        self._dispatch: Dict[NodeType, Callable[[RenderContext, SyntaxNode], None]] = {
            node_type: getattr(self, name) for node_type, name in self._HANDLERS.items()
        }

    # ----------------------------------------------------------------- core

    def convert(self, node: SyntaxNode, ctx: Optional[RenderContext] = None) -> str:
        """Convert `node` into `ctx` (a fresh context if omitted); return the buffer."""
        if ctx is None:
            ctx = RenderContext()
        self._convert(ctx, node)
        return ctx.getvalue()

    def _convert(self, ctx: RenderContext, node: Any) -> None:
        if not isinstance(node, SyntaxNode):
            raise InvalidFragment(node)
        self._handler_for(node)(ctx, node)

    def _handler_for(self, node: SyntaxNode) -> Callable[[RenderContext, SyntaxNode], None]:
        try:
            node_type = NodeType(node.type)
        except ValueError:
            raise UnsupportedNodeType(node.type, node) from None
        # synthetic tags are only honoured on converter-built nodes, and vice versa
        if (node_type in SYNTHETIC_TYPES) != node.synthetic:
            raise UnsupportedNodeType(node.type, node)
        return self._dispatch[node_type]

    def emit(self, ctx: RenderContext, *fragments: Any) -> None:
        """Append fragments left to right; see the module docstring for shapes."""
        for fragment in fragments:
            if isinstance(fragment, SyntaxNode):
                self._convert(ctx, fragment)
            elif isinstance(fragment, (list, tuple)):
                ctx.write("\n")
                ctx.indent += 1
                for member in fragment:
                    if member is not None:
                        self._convert(ctx, member)
                ctx.indent -= 1
                ctx.write("\n")
            elif isinstance(fragment, str):
                ctx.write(fragment)
            elif fragment is None:
                continue
            else:
                raise InvalidFragment(fragment)

    # -------------------------------------------------------------- helpers

    def _literal(self, value: Any, node: SyntaxNode) -> str:
        try:
            return ruby_inspect(value)
        except UnrenderableValue:
            raise InvalidFragment(value, node) from None

    @staticmethod
    def _arguments(args: Any) -> Optional[SyntheticNode]:
        """Linearise a call's argument node; None means no argument list at all."""
        if args is None:
            return None
        if isinstance(args, SyntaxNode) and args.type == NodeType.LIST.value:
            return SyntheticNode.list(args.children)
        # splats, block-passes and friends fail at dispatch
        return SyntheticNode.list([args])

    @staticmethod
    def _block_params(params: Any, arg_spec: Any) -> List[str]:
        # no argument spec: the table holds block locals only
        if arg_spec is None:
            return []
        names = [str(param) for param in params or ()]
        # plain leading parameters only: the rest of the table are block locals
        if isinstance(arg_spec, SyntaxNode) and arg_spec.type == "ARGS" and arg_spec.children:
            pre_num, *rest = arg_spec.children
            if (
                isinstance(pre_num, int)
                and not isinstance(pre_num, bool)
                and all(item is None or item == 0 for item in rest)
            ):
                names = names[:pre_num]
        return names

    # ------------------------------------------------------- structure nodes

    def _on_scope(self, ctx: RenderContext, node: SyntaxNode) -> None:
        body = node.children[-1] if node.children else None
        self.emit(ctx, "proc do", [body], "end")

    def _on_block(self, ctx: RenderContext, node: SyntaxNode) -> None:
        last_idx = len(node.children) - 1
        for idx, statement in enumerate(node.children):
            self.emit(ctx, statement)
            if idx < last_idx:
                self.emit(ctx, "\n")

    def _on_iter(self, ctx: RenderContext, node: SyntaxNode) -> None:
        call, scope = _unpack(node, 2)
        params, arg_spec, body = _unpack(scope, 3)
        self.emit(ctx, call)
        self.emit(ctx, SyntheticNode.iter_scope(params, arg_spec, body))

    def _on_iter_scope(self, ctx: RenderContext, node: SyntaxNode) -> None:
        params, arg_spec, body = _unpack(node, 3)
        names = self._block_params(params, arg_spec)
        self.emit(ctx, " do")
        if names:
            self.emit(ctx, " |", ", ".join(names), "|")
        self.emit(ctx, "\n", body, "\nend")

    def _on_conditional(self, ctx: RenderContext, node: SyntaxNode) -> None:
        keyword = "if" if node.type == NodeType.IF.value else "unless"
        cond, branch1, branch2 = _unpack(node, 3)
        if branch2 is not None:
            self.emit(ctx, f"{keyword} ", cond, "\n", branch1, "\nelse\n", branch2, "\nend")
        else:
            self.emit(ctx, f"{keyword} ", cond, "\n", branch1, "\nend")

    def _on_while(self, ctx: RenderContext, node: SyntaxNode) -> None:
        cond, body, pre_test = _unpack(node, 3)
        if pre_test is False:
            # `begin ... end while cond`: body runs before the first test
            self.emit(ctx, "begin\n", body, "\nend while ", cond)
        else:
            self.emit(ctx, "while ", cond, "\n", body, "\nend")

    def _on_begin(self, ctx: RenderContext, node: SyntaxNode) -> None:
        # parenthesised expressions and empty bodies; an absent child renders nothing
        self.emit(ctx, node.children[0] if node.children else None)

    def _on_rescue(self, ctx: RenderContext, node: SyntaxNode) -> None:
        code, rescue_body = _unpack(node, 2)
        # RESBODY: (exception list, body, next clause)
        _, recovery, _ = _unpack(rescue_body, 3)
        self.emit(ctx, code, " rescue ", recovery)

    # ----------------------------------------------------------- call nodes

    def _on_const(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, str(node.children[0]))

    def _on_colon2(self, ctx: RenderContext, node: SyntaxNode) -> None:
        left, right = _unpack(node, 2)
        self.emit(ctx, left, "::", str(right))

    def _on_call(self, ctx: RenderContext, node: SyntaxNode) -> None:
        receiver, method, args = _unpack(node, 3)
        arguments = self._arguments(args)
        if str(method) == "[]":
            self.emit(ctx, receiver, "[", arguments, "]")
        elif arguments is not None:
            self.emit(ctx, receiver, ".", f"{method}(", arguments, ")")
        else:
            self.emit(ctx, receiver, ".", f"{method}()")

    def _on_fcall(self, ctx: RenderContext, node: SyntaxNode) -> None:
        method, args = _unpack(node, 2)
        self.emit(ctx, f"{method}(", self._arguments(args), ")")

    def _on_vcall(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, str(node.children[0]), "()")

    def _on_opcall(self, ctx: RenderContext, node: SyntaxNode) -> None:
        left, op, right = _unpack(node, 3)
        op = str(op)
        if op == "!":
            self.emit(ctx, "!(", left, ")")
        elif right is None:
            # unary minus/plus/complement: `-@` etc.
            self.emit(ctx, f"{op.rstrip('@')}(", left, ")")
        else:
            self.emit(ctx, left, f" {op} ", right.children[0])

    def _on_attrasgn(self, ctx: RenderContext, node: SyntaxNode) -> None:
        left, op, args = _unpack(node, 3)
        if str(op) != "[]=":
            raise UnsupportedOperator(str(op), node)
        args_list = _without_sentinel(args.children)
        subscript = SyntheticNode.list(args_list[:-1])
        right = args_list[-1]
        self.emit(ctx, left, "[", subscript, "] = ", right)

    # ------------------------------------------------- variable nodes

    def _on_variable(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, str(node.children[0]))

    def _on_assignment(self, ctx: RenderContext, node: SyntaxNode) -> None:
        name, value = _unpack(node, 2)
        self.emit(ctx, str(name), " = ", value)

    def _on_and(self, ctx: RenderContext, node: SyntaxNode) -> None:
        left, right = _unpack(node, 2)
        self.emit(ctx, left, " && ", right)

    def _on_or(self, ctx: RenderContext, node: SyntaxNode) -> None:
        left, right = _unpack(node, 2)
        self.emit(ctx, left, " || ", right)

    # --------------------------------------------------------- literal nodes

    def _on_lit(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, self._literal(node.children[0], node))

    def _on_str(self, ctx: RenderContext, node: SyntaxNode) -> None:
        value = node.children[0]
        if not isinstance(value, str):
            raise InvalidFragment(value, node)
        self.emit(ctx, self._literal(value, node))

    def _on_nil(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, "nil")

    def _on_true(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, "true")

    def _on_false(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, "false")

    def _on_dstr(self, ctx: RenderContext, node: SyntaxNode) -> None:
        prefix, first_splice, rest = _unpack(node, 3)
        self.emit(ctx, '"', escape_string_body(prefix or ""))
        self._emit_segment(ctx, first_splice)
        if rest is not None:
            for segment in rest.children:
                self._emit_segment(ctx, segment)
        self.emit(ctx, '"')

    def _emit_segment(self, ctx: RenderContext, segment: Any) -> None:
        if segment is None:
            return
        if not isinstance(segment, SyntaxNode):
            raise UnexpectedSegment(type(segment).__name__)
        if segment.type == NodeType.STR.value:
            text = segment.children[0] if segment.children else None
            if not isinstance(text, str):
                raise InvalidFragment(text, segment)
            self.emit(ctx, escape_string_body(text))
        elif segment.type == NodeType.EVSTR.value:
            self.emit(ctx, segment)
        else:
            raise UnexpectedSegment(segment.type, segment)

    def _on_evstr(self, ctx: RenderContext, node: SyntaxNode) -> None:
        self.emit(ctx, "#{", node.children[0], "}")

    def _on_list(self, ctx: RenderContext, node: SyntaxNode) -> None:
        items = SyntheticNode.list(_without_sentinel(node.children))
        self.emit(ctx, "[", items, "]")

    def _on_list_embedded(self, ctx: RenderContext, node: SyntaxNode) -> None:
        items = [item for item in node.children if item is not None]
        last_idx = len(items) - 1
        for idx, item in enumerate(items):
            self.emit(ctx, item)
            if idx < last_idx:
                self.emit(ctx, ", ")

    def _on_hash(self, ctx: RenderContext, node: SyntaxNode) -> None:
        pairs = node.children[0] if node.children else None
        items = pairs.children if pairs is not None else ()
        self.emit(ctx, "{")
        idx = 0
        while idx < len(items):
            key = items[idx]
            value = items[idx + 1] if idx + 1 < len(items) else None
            # sentinel, or the absent key of a `**opts` double splat
            if key is None:
                break
            if idx > 0:
                self.emit(ctx, ", ")
            self.emit(ctx, key, " => ", value)
            idx += 2
        self.emit(ctx, "}")


def to_source(root: SyntaxNode) -> str:
    """
    Convert a root node (usually SCOPE) to Ruby source.

    Raises:
        ConversionError: for any node, fragment, segment or operator the
            converter does not support. No partial output is returned.
    """
    return Converter().convert(root)


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
