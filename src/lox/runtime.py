"""Runtime object model: callables, user functions, classes and instances."""
from __future__ import annotations
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from .ast_nodes import Function
from .environment import Environment
from .errors import LoxRuntimeError
from .lexer import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter

INITIALIZER = "init"


@dataclass
class ReturnSignal:
    """Early exit out of a function body, carrying the returned value."""
    value: Any = None


class LoxCallable(ABC):
    @abstractmethod
    def arity(self) -> int: ...

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any: ...


class NativeFunction(LoxCallable):
    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments):
        return self.fn(*arguments)

    def __str__(self) -> str:
        return "<native fn>"


def clock() -> float:
    return time.time()


NATIVES = [
    NativeFunction("clock", 0, clock),
]


class LoxFunction(LoxCallable):
    def __init__(self, declaration: Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance: "LoxInstance") -> "LoxFunction":
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)

        result = interpreter.execute_block(self.declaration.body, env)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if result is not None:
            return result.value
        return None

    def __str__(self) -> str:
        return f"<function {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    def __init__(self, name: str, superclass: Optional["LoxClass"], methods: Dict[str, LoxFunction]):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        klass = self
        while klass:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method(INITIALIZER)
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method(INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any):
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.klass.name} instance"
