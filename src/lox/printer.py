from __future__ import annotations

from .ast_nodes import *
from .interpreter import stringify


class AstPrinter:
    """Fully parenthesized prefix rendering of an expression, for debugging."""

    def print(self, e: Expr) -> str:
        if isinstance(e, Literal):
            return stringify(e.value)
        if isinstance(e, Grouping):
            return self.parenthesize("group", e.expression)
        if isinstance(e, Unary):
            return self.parenthesize(e.operator.lexeme, e.right)
        if isinstance(e, (Binary, Logical)):
            return self.parenthesize(e.operator.lexeme, e.left, e.right)
        if isinstance(e, Variable):
            return e.name.lexeme
        if isinstance(e, Assign):
            return f"(= {e.name.lexeme} {self.print(e.value)})"
        if isinstance(e, Call):
            return self.parenthesize("call", e.callee, *e.arguments)
        if isinstance(e, Get):
            return f"(. {self.print(e.object)} {e.name.lexeme})"
        if isinstance(e, Set):
            return f"(= (. {self.print(e.object)} {e.name.lexeme}) {self.print(e.value)})"
        if isinstance(e, This):
            return "this"
        if isinstance(e, Super):
            return f"(super {e.method.lexeme})"
        raise TypeError(f"Unknown expression node {type(e).__name__}")

    def parenthesize(self, name: str, *exprs: Expr) -> str:
        parts = [name] + [self.print(e) for e in exprs]
        return "(" + " ".join(parts) + ")"
