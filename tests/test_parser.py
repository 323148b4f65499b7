"""Parser tests."""

from lox.ast_nodes import Block, Class, Expression, Print, Var, Variable, While
from lox.lexer import scan
from lox.parser import parse
from lox.printer import AstPrinter


def parse_source(source):
    tokens, scan_errors = scan(source)
    assert scan_errors == []
    return parse(tokens)


def render(source):
    statements, errors = parse_source(source)
    assert errors == []
    assert isinstance(statements[0], Expression)
    return AstPrinter().print(statements[0].expression)


def test_factor_binds_tighter_than_term():
    assert render("1 + 2 * 3;") == "(+ 1 (* 2 3))"


def test_binary_operators_are_left_associative():
    assert render("1 - 2 - 3;") == "(- (- 1 2) 3)"


def test_assignment_is_right_associative():
    assert render("a = b = c;") == "(= a (= b c))"


def test_unary_and_grouping():
    assert render("-a - -b;") == "(- (- a) (- b))"
    assert render("!(1);") == "(! (group 1))"


def test_logical_precedence():
    assert render("x or y and z;") == "(or x (and y z))"
    assert render("a == b < c;") == "(== a (< b c))"


def test_calls_chain():
    assert render("f(1)(2, 3);") == "(call (call f 1) 2 3)"
    assert render("f();") == "(call f)"


def test_property_get_and_set():
    assert render("a.b.c;") == "(. (. a b) c)"
    assert render("a.b.c = 1;") == "(= (. (. a b) c) 1)"
    assert render("a.m().n;") == "(. (call (. a m)) n)"


def test_this_and_super():
    assert render("this.x;") == "(. this x)"
    assert render("super.m(1);") == "(call (super m) 1)"


def test_for_desugars_into_while():
    statements, errors = parse_source("for (var i = 0; i < 3; i = i + 1) print i;")
    assert errors == []
    outer = statements[0]
    assert isinstance(outer, Block)
    init, loop = outer.statements
    assert isinstance(init, Var)
    assert isinstance(loop, While)
    body, increment = loop.body.statements
    assert isinstance(body, Print)
    assert isinstance(increment, Expression)


def test_class_declaration():
    statements, errors = parse_source("class B < A { init() {} m(x, y) { return x; } }")
    assert errors == []
    klass = statements[0]
    assert isinstance(klass, Class)
    assert klass.name.lexeme == "B"
    assert isinstance(klass.superclass, Variable)
    assert klass.superclass.name.lexeme == "A"
    assert [m.name.lexeme for m in klass.methods] == ["init", "m"]
    assert [p.lexeme for p in klass.methods[1].params] == ["x", "y"]


def test_invalid_assignment_target_names_the_equals_token():
    statements, errors = parse_source("1 = 2;")
    assert len(errors) == 1
    assert errors[0].message == "Invalid assignment target."
    assert errors[0].token.lexeme == "="
    assert len(statements) == 1


def test_recovery_reports_each_bad_statement():
    statements, errors = parse_source("var = 1;\nprint 2;\nvar x = ;\nprint 4;")
    assert [(e.line, e.message) for e in errors] == [
        (1, "Expect variable name."),
        (3, "Expect expression."),
    ]
    assert [type(s) for s in statements] == [Print, Print]


def test_recovery_stops_at_statement_keyword():
    statements, errors = parse_source("print 1 2 3 print 4;")
    assert len(errors) == 1
    assert errors[0].message == "Expect ';' after value."
    assert len(statements) == 1


def test_argument_cap_reports_but_keeps_parsing():
    args = ", ".join(["1"] * 256)
    statements, errors = parse_source(f"f({args});\nprint 2;")
    assert [e.message for e in errors] == ["Can't have more than 255 arguments."]
    assert len(statements) == 2


def test_parameter_cap():
    params = ", ".join(f"p{i}" for i in range(256))
    _, errors = parse_source(f"fun f({params}) {{}}")
    assert [e.message for e in errors] == ["Can't have more than 255 parameters."]


def test_nodes_have_distinct_ids():
    statements, _ = parse_source("a; a;")
    first, second = (s.expression for s in statements)
    assert first.node_id != second.node_id
