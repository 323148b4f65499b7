"""Interpreter and runtime object model tests."""

import io
import math

import pytest

from lox import Lox, LoxRuntimeError
from lox.environment import Environment
from lox.interpreter import is_equal, is_truthy, stringify
from lox.lexer import Token


def name(text):
    return Token("IDENTIFIER", text, None, 1)


@pytest.mark.parametrize("value, text", [
    (None, "nil"),
    (True, "true"),
    (False, "false"),
    (3.0, "3"),
    (-2.0, "-2"),
    (2.5, "2.5"),
    (0.1 + 0.2, "0.30000000000000004"),
    (-0.0, "-0"),
    (1e20, "100000000000000000000"),
    (1e21, "1e+21"),
    (1e33, "1e+33"),
    (1.5e300, "1.5e+300"),
    (-2.5e-8, "-2.5e-8"),
    (1e-7, "1e-7"),
    (1e-6, "0.000001"),
    (123.456, "123.456"),
    (math.inf, "Infinity"),
    (-math.inf, "-Infinity"),
    (math.nan, "NaN"),
    ("text", "text"),
])
def test_stringify(value, text):
    assert stringify(value) == text


def test_truthiness():
    assert not is_truthy(None)
    assert not is_truthy(False)
    assert is_truthy(0.0)
    assert is_truthy("")
    assert is_truthy(True)


def test_equality_does_not_coerce():
    assert is_equal(None, None)
    assert is_equal(1.0, 1.0)
    assert not is_equal(True, 1.0)
    assert not is_equal("1", 1.0)
    assert not is_equal(None, False)


def test_environment_chain():
    outer = Environment()
    outer.define("a", 1.0)
    inner = Environment(outer)
    inner.define("b", 2.0)

    assert inner.get(name("a")) == 1.0
    inner.assign(name("a"), 5.0)
    assert outer.get(name("a")) == 5.0
    assert inner.get_at(1, "a") == 5.0

    inner.assign_at(0, name("b"), 3.0)
    assert inner.values == {"b": 3.0}


def test_environment_define_shadows():
    env = Environment()
    env.define("a", 1.0)
    env.define("a", 2.0)
    assert env.get(name("a")) == 2.0


def test_environment_undefined():
    env = Environment(Environment())
    with pytest.raises(LoxRuntimeError) as info:
        env.get(name("missing"))
    assert info.value.message == "Undefined variable 'missing'."
    with pytest.raises(LoxRuntimeError):
        env.assign(name("missing"), 1.0)


def test_session_keeps_globals_between_runs(lox):
    lox.run("var a = 1;")
    lox.run("fun twice() { return a * 2; }")
    lox.run("print twice();")
    assert lox.stdout_lines == ["2"]


def test_runtime_error_does_not_poison_session(lox):
    diag = lox.run("print nope;")
    assert diag.runtime_error is not None
    assert lox.session.had_runtime_error
    diag = lox.run("print 1;")
    assert diag.ok
    assert not lox.session.had_runtime_error
    assert lox.stdout_lines == ["1"]


def test_failed_global_initializer_leaves_name_undefined(lox):
    diag = lox.run('var x = -"s";')
    assert diag.runtime_error.message == "Operand of '-' must be a number."
    diag = lox.run("print x;")
    assert diag.runtime_error.message == "Undefined variable 'x'."
    assert lox.stdout_lines == []


def test_failed_initializer_keeps_existing_global(lox):
    lox.run("var x = 1;")
    lox.run('var x = -"s";')
    lox.run("print x;")
    assert lox.stdout_lines == ["1"]


def test_stack_overflow_is_a_runtime_error(lox):
    diag = lox.run("fun forever() { forever(); } forever();")
    assert str(diag.runtime_error) == "Runtime error: Stack overflow. @ 1"
    assert lox.session.interpreter.call_depth == 0
    diag = lox.run("fun count(n) { if (n > 0) count(n - 1); } count(1000); print \"done\";")
    assert diag.ok
    assert lox.stdout_lines == ["done"]


def test_runtime_error_restores_global_scope(lox):
    lox.run("fun f() { var local = 1; { print nope; } }")
    lox.run("f();")
    lox.run("var after = 2; print after;")
    assert lox.stdout_lines == ["2"]
    assert lox.session.interpreter.environment is lox.session.interpreter.globals


def test_static_errors_are_returned(lox):
    diag = lox.run("print ;")
    assert lox.session.had_error
    assert [str(e) for e in diag.static_errors] == ["Parse error: Expect expression. @ 1"]
    assert diag.runtime_error is None


def test_wrong_arity_names_both_counts(lox):
    diag = lox.run("fun f(a) { print a; } f(1, 2);")
    assert diag.runtime_error.message == "Expected 1 arguments but got 2."
    assert lox.stdout_lines == []


def test_print_goes_to_injected_stream():
    out = io.StringIO()
    Lox(out=out, err=io.StringIO()).run('print "hello";')
    assert out.getvalue() == "hello\n"
