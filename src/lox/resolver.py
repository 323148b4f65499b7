from __future__ import annotations
from enum import Enum
from typing import Dict, List, Set as SetType, TYPE_CHECKING

from .ast_nodes import *
from .errors import ResolveError
from .lexer import Token
from .runtime import INITIALIZER

if TYPE_CHECKING:
    from .interpreter import Interpreter


class FunctionType(Enum):
    NONE = "none"
    FUNCTION = "function"
    INITIALIZER = "initializer"
    METHOD = "method"


class ClassType(Enum):
    NONE = "none"
    CLASS = "class"
    SUBCLASS = "subclass"


class Resolver:
    """Static scope analysis.

    Records, for every local variable reference, how many frames separate it
    from its declaration. Globals get no entry and are looked up by name at
    runtime. Each scope maps a name to whether its initializer has finished
    (declared names start out not ready).
    """

    def __init__(self, interpreter: "Interpreter"):
        self.interpreter = interpreter
        self.errors: List[ResolveError] = []
        self.scopes: List[Dict[str, bool]] = []
        # Global names seen so far; kept across calls so a prompt session remembers them.
        self.global_names: SetType[str] = set(interpreter.globals.values)
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def error(self, token: Token, msg: str):
        self.errors.append(ResolveError(token, msg))

    def resolve(self, statements: List[Stmt]) -> List[ResolveError]:
        self.errors = []
        for st in statements:
            self._resolve_stmt(st)
        return self.errors

    def _push_scope(self):
        self.scopes.append({})

    def _pop_scope(self):
        self.scopes.pop()

    def _declare(self, name: Token):
        if not self.scopes:
            self.global_names.add(name.lexeme)
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, expr: Expr, name: Token) -> bool:
        # Names still inside their own initializer are skipped.
        for depth, scope in enumerate(reversed(self.scopes)):
            if scope.get(name.lexeme):
                self.interpreter.resolve(expr, depth)
                return True
        return False

    def _resolve_function(self, fn: Function, kind: FunctionType):
        enclosing = self.current_function
        self.current_function = kind

        self._push_scope()
        for param in fn.params:
            self._declare(param)
            self._define(param)
        for st in fn.body:
            self._resolve_stmt(st)
        self._pop_scope()

        self.current_function = enclosing

    # ---------- Statements ----------
    def _resolve_stmt(self, st: Stmt):
        if isinstance(st, Block):
            self._push_scope()
            for inner in st.statements:
                self._resolve_stmt(inner)
            self._pop_scope()
        elif isinstance(st, Var):
            self._declare(st.name)
            if st.initializer is not None:
                self._resolve_expr(st.initializer)
            self._define(st.name)
        elif isinstance(st, Function):
            # Defined before the body so the function can call itself.
            self._declare(st.name)
            self._define(st.name)
            self._resolve_function(st, FunctionType.FUNCTION)
        elif isinstance(st, Class):
            self._visit_class(st)
        elif isinstance(st, Expression):
            self._resolve_expr(st.expression)
        elif isinstance(st, Print):
            self._resolve_expr(st.expression)
        elif isinstance(st, If):
            self._resolve_expr(st.condition)
            self._resolve_stmt(st.then_branch)
            if st.else_branch is not None:
                self._resolve_stmt(st.else_branch)
        elif isinstance(st, While):
            self._resolve_expr(st.condition)
            self._resolve_stmt(st.body)
        elif isinstance(st, Return):
            self._visit_return(st)
        else:
            raise TypeError(f"Unknown statement node {type(st).__name__}")

    def _visit_class(self, st: Class):
        enclosing = self.current_class
        self.current_class = ClassType.CLASS

        self._declare(st.name)
        self._define(st.name)

        if st.superclass is not None:
            if st.superclass.name.lexeme == st.name.lexeme:
                self.error(st.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self._resolve_expr(st.superclass)
            self._push_scope()
            self.scopes[-1]["super"] = True

        self._push_scope()
        self.scopes[-1]["this"] = True
        for method in st.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == INITIALIZER:
                kind = FunctionType.INITIALIZER
            self._resolve_function(method, kind)
        self._pop_scope()

        # The "super" scope only exists when there is a superclass.
        if st.superclass is not None:
            self._pop_scope()

        self.current_class = enclosing

    def _visit_return(self, st: Return):
        if self.current_function == FunctionType.NONE:
            self.error(st.keyword, "Can't return from top-level code.")
        if st.value is not None:
            if self.current_function == FunctionType.INITIALIZER:
                self.error(st.keyword, "Can't return a value from an initializer.")
            self._resolve_expr(st.value)

    # ---------- Expressions ----------
    def _resolve_expr(self, e: Expr):
        if isinstance(e, Variable):
            if not self._resolve_local(e, e.name):
                name = e.name.lexeme
                if self.scopes and self.scopes[-1].get(name) is False and name not in self.global_names:
                    self.error(e.name, "Can't read local variable in its own initializer.")
        elif isinstance(e, Assign):
            self._resolve_expr(e.value)
            self._resolve_local(e, e.name)
        elif isinstance(e, (Binary, Logical)):
            self._resolve_expr(e.left)
            self._resolve_expr(e.right)
        elif isinstance(e, Unary):
            self._resolve_expr(e.right)
        elif isinstance(e, Grouping):
            self._resolve_expr(e.expression)
        elif isinstance(e, Literal):
            pass
        elif isinstance(e, Call):
            self._resolve_expr(e.callee)
            for arg in e.arguments:
                self._resolve_expr(arg)
        elif isinstance(e, Get):
            self._resolve_expr(e.object)
        elif isinstance(e, Set):
            self._resolve_expr(e.value)
            self._resolve_expr(e.object)
        elif isinstance(e, This):
            if self.current_class == ClassType.NONE:
                self.error(e.keyword, "Can't use 'this' outside of a class.")
                return
            self._resolve_local(e, e.keyword)
        elif isinstance(e, Super):
            if self.current_class == ClassType.NONE:
                self.error(e.keyword, "Can't use 'super' outside of a class.")
                return
            if self.current_class != ClassType.SUBCLASS:
                self.error(e.keyword, "Can't use 'super' in a class with no superclass.")
                return
            self._resolve_local(e, e.keyword)
        else:
            raise TypeError(f"Unknown expression node {type(e).__name__}")
