from __future__ import annotations
import math
import sys
from typing import Any, Dict, List, Optional

from .ast_nodes import *
from .environment import Environment
from .errors import LoxRuntimeError
from .lexer import Token
from .runtime import (
    INITIALIZER, NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, ReturnSignal,
)

MAX_CALL_DEPTH = 1200
# Each Lox call costs several Python frames.
RECURSION_LIMIT = 16000


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    # No coercion: true == 1 must be false even though Python says otherwise.
    if type(a) is not type(b):
        return False
    return a == b


def stringify(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def format_number(value: float) -> str:
    """Shortest round-trip rendering, laid out like JavaScript's Number#toString."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign = "-" if value < 0 else ""
    mantissa, _, exp = repr(abs(value)).partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = int_part + frac_part
    # value == 0.<digits> * 10**point
    point = len(int_part) + (int(exp) if exp else 0)
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    k = len(digits)

    if k <= point <= 21:
        return sign + digits + "0" * (point - k)
    if 0 < point <= 21:
        return sign + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return sign + "0." + "0" * -point + digits

    e = point - 1
    exponent = ("+" if e >= 0 else "-") + str(abs(e))
    if k == 1:
        return f"{sign}{digits}e{exponent}"
    return f"{sign}{digits[0]}.{digits[1:]}e{exponent}"


class Interpreter:
    def __init__(self, out=None):
        self.out = out
        self.globals = Environment()
        self.environment = self.globals
        # node_id -> scope distance, filled in by the resolver
        self.locals: Dict[int, int] = {}
        self.call_depth = 0

        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

        for native in NATIVES:
            self.globals.define(native.name, native)

    def resolve(self, expr: Expr, depth: int):
        self.locals[expr.node_id] = depth

    def interpret(self, statements: List[Stmt]) -> Optional[LoxRuntimeError]:
        """Run top-level statements; the first runtime error stops the run and is returned."""
        try:
            for st in statements:
                self.execute(st)
        except LoxRuntimeError as e:
            return e
        except RecursionError:
            # Deeply nested expressions can exhaust the stack without a call.
            return LoxRuntimeError(None, "Stack overflow.")
        finally:
            self.environment = self.globals
            self.call_depth = 0
        return None

    # ---------- Statements ----------
    def execute(self, st: Stmt) -> Optional[ReturnSignal]:
        if isinstance(st, Expression):
            self.evaluate(st.expression)
        elif isinstance(st, Print):
            value = self.evaluate(st.expression)
            print(stringify(value), file=self.out if self.out is not None else sys.stdout)
        elif isinstance(st, Var):
            self._visit_var(st)
        elif isinstance(st, Block):
            return self.execute_block(st.statements, Environment(self.environment))
        elif isinstance(st, If):
            if is_truthy(self.evaluate(st.condition)):
                return self.execute(st.then_branch)
            if st.else_branch is not None:
                return self.execute(st.else_branch)
        elif isinstance(st, While):
            while is_truthy(self.evaluate(st.condition)):
                result = self.execute(st.body)
                if result is not None:
                    return result
        elif isinstance(st, Function):
            fn = LoxFunction(st, self.environment)
            self.environment.define(st.name.lexeme, fn)
        elif isinstance(st, Return):
            value = None
            if st.value is not None:
                value = self.evaluate(st.value)
            return ReturnSignal(value)
        elif isinstance(st, Class):
            self._visit_class(st)
        else:
            raise TypeError(f"Unknown statement node {type(st).__name__}")
        return None

    def execute_block(self, statements: List[Stmt], env: Environment) -> Optional[ReturnSignal]:
        previous = self.environment
        try:
            self.environment = env
            for st in statements:
                result = self.execute(st)
                if result is not None:
                    return result
            return None
        finally:
            self.environment = previous

    def _visit_var(self, st: Var):
        name = st.name.lexeme
        predefined = self.environment is self.globals and name not in self.globals.values
        if predefined:
            # A global's own initializer sees it as nil.
            self.globals.define(name, None)
        value = None
        if st.initializer is not None:
            try:
                value = self.evaluate(st.initializer)
            except LoxRuntimeError:
                if predefined:
                    del self.globals.values[name]
                raise
        self.environment.define(name, value)

    def _visit_class(self, st: Class):
        superclass = None
        if st.superclass is not None:
            superclass = self.evaluate(st.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(st.superclass.name, "Superclass must be a class.")

        self.environment.define(st.name.lexeme, None)

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods: Dict[str, LoxFunction] = {}
        for method in st.methods:
            methods[method.name.lexeme] = LoxFunction(
                method, self.environment, method.name.lexeme == INITIALIZER
            )
        klass = LoxClass(st.name.lexeme, superclass, methods)

        self.environment = enclosing
        self.environment.assign(st.name, klass)

    # ---------- Expressions ----------
    def evaluate(self, e: Expr) -> Any:
        if isinstance(e, Literal):
            return e.value
        if isinstance(e, Grouping):
            return self.evaluate(e.expression)
        if isinstance(e, Unary):
            return self._visit_unary(e)
        if isinstance(e, Binary):
            return self._visit_binary(e)
        if isinstance(e, Logical):
            left = self.evaluate(e.left)
            if e.operator.type == "OR":
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(e.right)
        if isinstance(e, Variable):
            return self._look_up_variable(e.name, e)
        if isinstance(e, Assign):
            value = self.evaluate(e.value)
            distance = self.locals.get(e.node_id)
            if distance is not None:
                self.environment.assign_at(distance, e.name, value)
            else:
                self.globals.assign(e.name, value)
            return value
        if isinstance(e, Call):
            return self._visit_call(e)
        if isinstance(e, Get):
            obj = self.evaluate(e.object)
            if isinstance(obj, LoxInstance):
                return obj.get(e.name)
            raise LoxRuntimeError(e.name, "Only instances have properties.")
        if isinstance(e, Set):
            obj = self.evaluate(e.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(e.name, "Only instances have fields.")
            value = self.evaluate(e.value)
            obj.set(e.name, value)
            return value
        if isinstance(e, This):
            return self._look_up_variable(e.keyword, e)
        if isinstance(e, Super):
            return self._visit_super(e)
        raise TypeError(f"Unknown expression node {type(e).__name__}")

    def _look_up_variable(self, name: Token, e: Expr) -> Any:
        distance = self.locals.get(e.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _visit_unary(self, e: Unary) -> Any:
        right = self.evaluate(e.right)
        if e.operator.type == "BANG":
            return not is_truthy(right)
        if e.operator.type == "MINUS":
            self._check_number_operand(e.operator, right)
            return -right
        raise LoxRuntimeError(e.operator, f"Unknown unary operator '{e.operator.lexeme}'.")

    def _visit_binary(self, e: Binary) -> Any:
        left = self.evaluate(e.left)
        right = self.evaluate(e.right)
        op = e.operator.type

        if op == "PLUS":
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(e.operator, "Operands of '+' must be two numbers or two strings.")
        if op == "EQUAL_EQUAL":
            return is_equal(left, right)
        if op == "BANG_EQUAL":
            return not is_equal(left, right)

        self._check_number_operands(e.operator, left, right)
        if op == "MINUS":
            return left - right
        if op == "STAR":
            return left * right
        if op == "SLASH":
            return _divide(left, right)
        if op == "GREATER":
            return left > right
        if op == "GREATER_EQUAL":
            return left >= right
        if op == "LESS":
            return left < right
        if op == "LESS_EQUAL":
            return left <= right
        raise LoxRuntimeError(e.operator, f"Unknown binary operator '{e.operator.lexeme}'.")

    def _visit_call(self, e: Call) -> Any:
        callee = self.evaluate(e.callee)
        arguments = [self.evaluate(arg) for arg in e.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(e.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                e.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}."
            )
        if self.call_depth >= MAX_CALL_DEPTH:
            raise LoxRuntimeError(e.paren, "Stack overflow.")
        self.call_depth += 1
        try:
            return callee.call(self, arguments)
        finally:
            self.call_depth -= 1

    def _visit_super(self, e: Super) -> Any:
        distance = self.locals[e.node_id]
        superclass = self.environment.get_at(distance, "super")
        # "this" lives in the frame just inside the one holding "super".
        obj = self.environment.get_at(distance - 1, "this")
        method = superclass.find_method(e.method.lexeme)
        if method is None:
            raise LoxRuntimeError(e.method, f"Undefined property '{e.method.lexeme}'.")
        return method.bind(obj)

    def _check_number_operand(self, operator: Token, operand: Any):
        if isinstance(operand, float):
            return
        raise LoxRuntimeError(operator, f"Operand of '{operator.lexeme}' must be a number.")

    def _check_number_operands(self, operator: Token, left: Any, right: Any):
        if isinstance(left, float) and isinstance(right, float):
            return
        raise LoxRuntimeError(operator, f"Operands of '{operator.lexeme}' must be numbers.")


def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right
