from __future__ import annotations
from typing import Optional


class LoxError(Exception):
    label = "Error"

    def __init__(self, message: str, line: int):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        return f"{self.label}: {self.message} @ {self.line}"


class ScanError(LoxError):
    label = "Scanner error"


class ParseError(LoxError):
    label = "Parse error"

    def __init__(self, token, message: str):
        super().__init__(message, token.line)
        self.token = token


class ResolveError(LoxError):
    label = "Resolve error"

    def __init__(self, token, message: str):
        super().__init__(message, token.line)
        self.token = token


class LoxRuntimeError(LoxError):
    label = "Runtime error"

    def __init__(self, token, message: str):
        super().__init__(message, token.line if token is not None else 0)
        self.token: Optional[object] = token
