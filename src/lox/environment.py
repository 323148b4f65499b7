from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import LoxRuntimeError
from .lexer import Token


@dataclass(eq=False)
class Environment:
    enclosing: Optional["Environment"] = None
    values: Dict[str, Any] = field(default_factory=dict)

    def define(self, name: str, value: Any):
        self.values[name] = value

    def get(self, name: Token) -> Any:
        cur = self
        while cur:
            if name.lexeme in cur.values:
                return cur.values[name.lexeme]
            cur = cur.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any):
        cur = self
        while cur:
            if name.lexeme in cur.values:
                cur.values[name.lexeme] = value
                return
            cur = cur.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> "Environment":
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Any:
        return self.ancestor(distance).values.get(name)

    def assign_at(self, distance: int, name: Token, value: Any):
        self.ancestor(distance).values[name.lexeme] = value
