"""A tree-walking interpreter for the Lox scripting language."""
from .errors import LoxError, LoxRuntimeError, ParseError, ResolveError, ScanError
from .interpreter import Interpreter
from .main import Diagnostics, Lox

__all__ = [
    "Diagnostics",
    "Interpreter",
    "Lox",
    "LoxError",
    "LoxRuntimeError",
    "ParseError",
    "ResolveError",
    "ScanError",
]
