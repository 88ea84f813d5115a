from converter import Converter, RenderContext, to_source
from syntax import NodeType, SyntheticNode, node, sym


def _scope(body):
    return node("SCOPE", (), None, body)


def _list(*items):
    return node("LIST", *items, None)


def _lit(value):
    return node("LIT", value)


def _str(value):
    return node("STR", value)


def _vcall(name):
    return node("VCALL", sym(name))


def _fcall(name, *args):
    return node("FCALL", sym(name), _list(*args) if args else None)


def _dvar(name):
    return node("DVAR", sym(name))


def _proc(*lines):
    return "proc do\n" + "\n".join(lines) + "\nend"


def test_scope_with_binary_operator():
    tree = _scope(node("OPCALL", _dvar("a"), sym("*"), _list(_dvar("b"))))
    assert to_source(tree) == "proc do\na * b\nend"


def test_empty_scope():
    assert to_source(_scope(None)) == "proc do\n\nend"


def test_block_separates_statements_with_newlines():
    tree = _scope(node("BLOCK", _vcall("foo"), _vcall("bar")))
    assert to_source(tree) == _proc("foo()", "bar()")


def test_constants():
    assert to_source(_scope(_fcall("foo", node("CONST", sym("A"))))) == _proc("foo(A)")

    path = node("COLON2", node("COLON2", node("CONST", sym("A")), sym("B")), sym("C"))
    assert to_source(_scope(_fcall("foo", path))) == _proc("foo(A::B::C)")

    call = node("CALL", path, sym("d"), None)
    assert to_source(_scope(_fcall("foo", call))) == _proc("foo(A::B::C.d())")


def test_fcall_arguments():
    assert to_source(_scope(_fcall("p", _lit(1)))) == _proc("p(1)")
    tree = _scope(_fcall("foo", _lit(sym("a")), _lit(sym("b")), _lit(sym("c"))))
    assert to_source(tree) == _proc("foo(:a, :b, :c)")


def test_call_without_argument_list_gets_empty_parens():
    assert Converter().convert(_vcall("foo")) == "foo()"
    assert Converter().convert(_fcall("foo")) == "foo()"
    assert Converter().convert(_fcall("foo", _lit(1))) == "foo(1)"


def test_call_with_receiver():
    receiver = _dvar("a")
    assert to_source(_scope(node("CALL", receiver, sym("foo"), None))) == _proc("a.foo()")
    tree = _scope(node("CALL", receiver, sym("foo"), _list(_lit(1), _str("a"))))
    assert to_source(tree) == _proc('a.foo(1, "a")')
    tree = _scope(node("CALL", receiver, sym("foo"), _list(_lit(1), _list(_vcall("bar")))))
    assert to_source(tree) == _proc("a.foo(1, [bar()])")


def test_index_call():
    tree = _scope(_fcall("foo", node("CALL", _dvar("a"), sym("[]"), _list(_lit(sym("bar"))))))
    assert to_source(tree) == _proc("foo(a[:bar])")


def test_hash_argument():
    pairs = _list(_lit(sym("a")), _lit(1), _lit(sym("b")), _lit(2))
    tree = _scope(_fcall("foo", _str("bar"), node("HASH", pairs)))
    assert to_source(tree) == _proc('foo("bar", {:a => 1, :b => 2})')


def test_hash_stops_at_first_missing_key():
    pairs = _list(_lit(sym("a")), _lit(1), None, _dvar("opts"))
    assert Converter().convert(node("HASH", pairs)) == "{:a => 1}"


def test_empty_hash_and_list():
    assert Converter().convert(node("HASH", None)) == "{}"
    assert Converter().convert(_list()) == "[]"


def test_iteration_with_parameters():
    args = node("ARGS", 1, None, None, None, 0, None, None, None, None, None)
    body = node("OPCALL", _dvar("x"), sym("+"), _list(_lit(1)))
    pairs = node("HASH", _list(_lit(sym("a")), _lit(1), _lit(sym("b")), _lit(2)))
    call = _fcall("foo", _str("bar"), pairs)
    tree = _scope(node("ITER", call, node("SCOPE", (sym("x"),), args, body)))
    assert to_source(tree) == _proc('foo("bar", {:a => 1, :b => 2}) do |x|', "x + 1", "end")


def test_nested_iterations():
    inner = node("ITER", _fcall("bar"), node("SCOPE", (), None, _fcall("baz", _str("a"))))
    outer = node("ITER", _fcall("foo"), node("SCOPE", (), None, inner))
    assert to_source(_scope(outer)) == _proc("foo() do", "bar() do", 'baz("a")', "end", "end")


def test_block_locals_are_not_rendered_as_parameters():
    args = node("ARGS", 1, None, None, None, 0, None, None, None, None, None)
    body = node("DASGN_CURR", sym("y"), _dvar("x"))
    tree = node("ITER", _fcall("each"), node("SCOPE", (sym("x"), sym("y")), args, body))
    assert Converter().convert(tree) == "each() do |x|\ny = x\nend"


def test_iteration_without_argument_spec_has_no_parameters():
    body = node("DASGN_CURR", sym("y"), _dvar("x"))
    tree = node("ITER", _fcall("each"), node("SCOPE", (sym("y"),), None, body))
    assert Converter().convert(tree) == "each() do\ny = x\nend"

    assignment = node("DASGN", sym("x"), _lit(1))
    tree = _scope(node("ITER", _fcall("lambda"), node("SCOPE", (sym("x"),), None, assignment)))
    assert to_source(tree) == _proc("lambda() do", "x = 1", "end")


def test_iteration_with_other_parameter_kinds_uses_whole_table():
    # optional parameter present: the table prefix cannot be narrowed
    args = node("ARGS", 1, None, node("OPT_ARG", None), None, 0, None, None, None, None, None)
    scope = SyntheticNode.iter_scope((sym("a"), sym("b")), args, _dvar("a"))
    assert Converter().convert(scope) == " do |a, b|\na\nend"


def test_assignments_and_references():
    tree = _scope(node("BLOCK", node("DASGN_CURR", sym("a"), _lit(1)), _fcall("p", _dvar("a"))))
    assert to_source(tree) == _proc("a = 1", "p(a)")

    tree = _scope(node("DASGN_CURR", sym("a"), node("OPCALL", _lit(2), sym("+"), _list(_lit(2)))))
    assert to_source(tree) == _proc("a = 2 + 2")

    assert to_source(_scope(_fcall("foo", node("IVAR", sym("@bar"))))) == _proc("foo(@bar)")
    tree = _scope(node("IASGN", sym("@bar"), _vcall("foo")))
    assert to_source(tree) == _proc("@bar = foo()")

    assert Converter().convert(node("LASGN", sym("x"), node("LVAR", sym("y")))) == "x = y"


def test_if_two_branches():
    tree = _scope(node("IF", _vcall("foo"), _vcall("bar"), _vcall("baz")))
    assert to_source(tree) == _proc("if foo()", "bar()", "else", "baz()", "end")


def test_if_single_branch():
    tree = _scope(node("IF", _vcall("baz"), _vcall("foo"), None))
    assert to_source(tree) == _proc("if baz()", "foo()", "end")


def test_unless_else():
    tree = _scope(node("UNLESS", _lit(1), _vcall("foo"), _vcall("bar")))
    assert to_source(tree) == _proc("unless 1", "foo()", "else", "bar()", "end")

    tree = _scope(node("UNLESS", _lit(1), _fcall("foo", _lit(sym("bar"))), None))
    assert to_source(tree) == _proc("unless 1", "foo(:bar)", "end")


def test_logical_operators():
    cond = node("AND", _vcall("foo"), _vcall("bar"))
    assert to_source(_scope(node("IF", cond, _vcall("baz"), None))) == _proc(
        "if foo() && bar()", "baz()", "end"
    )
    cond = node("OR", _vcall("foo"), _vcall("bar"))
    assert to_source(_scope(node("IF", cond, _vcall("baz"), None))) == _proc(
        "if foo() || bar()", "baz()", "end"
    )


def test_negation_and_comparison():
    tree = _scope(node("DASGN_CURR", sym("a"), node("OPCALL", _vcall("b"), sym("!"), None)))
    assert to_source(tree) == _proc("a = !(b())")

    cond = node("OPCALL", _vcall("bar"), sym("=="), _list(_vcall("baz")))
    tree = _scope(node("IF", cond, _vcall("foo"), None))
    assert to_source(tree) == _proc("if bar() == baz()", "foo()", "end")


def test_unary_minus():
    assert Converter().convert(node("OPCALL", _dvar("a"), sym("-@"), None)) == "-(a)"


def test_while_loop():
    tree = _scope(node("WHILE", node("AND", _lit(1), _lit(2)), _vcall("foo"), True))
    assert to_source(tree) == _proc("while 1 && 2", "foo()", "end")


def test_do_while_loop_keeps_body_first():
    tree = _scope(node("WHILE", _vcall("bar"), _vcall("foo"), False))
    assert to_source(tree) == _proc("begin", "foo()", "end while bar()")


def test_begin_is_transparent():
    assert Converter().convert(node("BEGIN", _vcall("foo"))) == "foo()"
    assert Converter().convert(node("BEGIN", None)) == ""


# Trees below are what the parser returns for this converter's own output;
# converting them again must give the same text back.


def test_reparsed_negation_is_stable():
    first = to_source(_scope(node("IASGN", sym("@a"), node("OPCALL", _vcall("b"), sym("!"), None))))
    reparsed = _scope(
        node("IASGN", sym("@a"), node("OPCALL", node("BEGIN", _fcall("b")), sym("!"), None))
    )
    assert first == _proc("@a = !(b())")
    assert to_source(reparsed) == first


def test_reparsed_unary_minus_is_stable():
    first = Converter().convert(node("OPCALL", _dvar("a"), sym("-@"), None))
    reparsed = node("OPCALL", node("BEGIN", _dvar("a")), sym("-@"), None)
    assert Converter().convert(reparsed) == first == "-(a)"


def test_reparsed_unless_else_is_stable():
    first = to_source(_scope(node("UNLESS", _lit(1), _vcall("foo"), _vcall("bar"))))
    reparsed = _scope(node("UNLESS", _lit(1), _fcall("foo"), _fcall("bar")))
    assert to_source(reparsed) == first
    empty_branch = _scope(node("UNLESS", _lit(1), node("BEGIN", None), _fcall("bar")))
    assert to_source(empty_branch) == _proc("unless 1", "", "else", "bar()", "end")


def test_reparsed_do_while_is_stable():
    first = to_source(_scope(node("WHILE", _vcall("bar"), _vcall("foo"), False)))
    reparsed = _scope(node("WHILE", _fcall("bar"), _fcall("foo"), False))
    assert to_source(reparsed) == first


def test_keyword_literals():
    for tag, text in (("NIL", "nil"), ("TRUE", "true"), ("FALSE", "false")):
        assert to_source(_scope(_fcall("foo", node(tag)))) == _proc(f"foo({text})")


def test_string_literals_are_escaped():
    assert to_source(_scope(_str("a"))) == _proc('"a"')
    assert to_source(_scope(_str("a\nb"))) == _proc('"a\\nb"')


def test_array_literal():
    tree = _scope(
        node(
            "BLOCK",
            node("DASGN_CURR", sym("a"), _list(_lit(1), _lit(2), _lit(3))),
            _fcall("foo", _dvar("a")),
        )
    )
    assert to_source(tree) == _proc("a = [1, 2, 3]", "foo(a)")


def test_hash_literal_with_string_key():
    pairs = _list(_lit(sym("a")), _lit(1), _str("blah"), _lit(2))
    tree = _scope(node("DASGN_CURR", sym("a"), node("HASH", pairs)))
    assert to_source(tree) == _proc('a = {:a => 1, "blah" => 2}')


def test_indexed_assignment():
    tree = _scope(node("ATTRASGN", _dvar("a"), sym("[]="), _list(_lit(1), _vcall("b"))))
    assert to_source(tree) == _proc("a[1] = b()")

    args = _list(_lit(sym("x")), _str("y"), _vcall("b"))
    tree = _scope(node("ATTRASGN", _dvar("a"), sym("[]="), args))
    assert to_source(tree) == _proc('a[:x, "y"] = b()')


def test_inline_rescue():
    call = node("CALL", _dvar("a"), sym("render"), None)
    rescue = node("RESCUE", call, node("RESBODY", None, _str("?"), None), None)
    assert Converter().convert(rescue) == 'a.render() rescue "?"'


def test_embedded_list_skips_absent_elements():
    items = SyntheticNode.list([_lit(1), None, _lit(2), None])
    assert Converter().convert(items) == "1, 2"


def test_convert_appends_to_given_context():
    ctx = RenderContext()
    converter = Converter()
    converter.convert(_vcall("foo"), ctx)
    assert converter.convert(_vcall("bar"), ctx) == "foo()bar()"
    assert ctx.indent == 0


def test_every_node_type_has_a_handler():
    assert set(Converter._HANDLERS) == set(NodeType)
