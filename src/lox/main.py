import sys
from dataclasses import dataclass, field
from typing import List, Optional

from .ast_nodes import Expression
from .errors import LoxError, LoxRuntimeError
from .interpreter import Interpreter
from .lexer import LoxLexer, print_tokens
from .parser import Parser
from .printer import AstPrinter
from .resolver import Resolver

EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

MODES = ("lex", "ast", "check", "run")


@dataclass
class Diagnostics:
    static_errors: List[LoxError] = field(default_factory=list)
    runtime_error: Optional[LoxRuntimeError] = None

    @property
    def ok(self) -> bool:
        return not self.static_errors and self.runtime_error is None


class Lox:
    """One interpreter session; globals persist across ``run`` calls."""

    def __init__(self, out=None, err=None):
        self.err = err
        self.lexer = LoxLexer()
        self.interpreter = Interpreter(out=out)
        self.resolver = Resolver(self.interpreter)
        self.had_error = False
        self.had_runtime_error = False

    def report(self, error: LoxError):
        print(str(error), file=self.err if self.err is not None else sys.stderr)

    def check(self, source: str):
        """Run the static passes, returning ``(statements, errors)``."""
        tokens = self.lexer.tokenize(source)
        parser = Parser(tokens)
        statements = parser.parse()
        errors: List[LoxError] = list(self.lexer.errors) + list(parser.errors)
        if errors:
            return statements, errors
        errors.extend(self.resolver.resolve(statements))
        return statements, errors

    def run(self, source: str) -> Diagnostics:
        self.had_error = False
        self.had_runtime_error = False
        diag = Diagnostics()

        statements, diag.static_errors = self.check(source)
        for er in diag.static_errors:
            self.report(er)
        if diag.static_errors:
            self.had_error = True
            return diag

        diag.runtime_error = self.interpreter.interpret(statements)
        if diag.runtime_error is not None:
            self.had_runtime_error = True
            self.report(diag.runtime_error)
        return diag


def read_input(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def usage():
    print("Usage:", file=sys.stderr)
    print("  lox                 start an interactive prompt", file=sys.stderr)
    print("  lox script.lox      run a script", file=sys.stderr)
    print("  lox lex [file]      dump tokens", file=sys.stderr)
    print("  lox ast [file]      print expression statements as trees", file=sys.stderr)
    print("  lox check [file]    run the static passes only", file=sys.stderr)
    print("  lox run [file]      run a script (stdin when no file)", file=sys.stderr)


def repl(session: Lox):
    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            break
        line = line.strip()
        if line == "exit":
            break
        if line:
            session.run(line)


def run_mode(mode: str, source: str) -> int:
    session = Lox()

    if mode == "lex":
        tokens = session.lexer.tokenize(source)
        print_tokens(tokens)
        for er in session.lexer.errors:
            session.report(er)
        return EX_DATAERR if session.lexer.errors else EX_OK

    if mode == "ast":
        tokens = session.lexer.tokenize(source)
        parser = Parser(tokens)
        statements = parser.parse()
        errors = list(session.lexer.errors) + list(parser.errors)
        if errors:
            for er in errors:
                session.report(er)
            return EX_DATAERR
        printer = AstPrinter()
        for st in statements:
            if isinstance(st, Expression):
                print(printer.print(st.expression))
            else:
                print(f"<{type(st).__name__.lower()}>")
        return EX_OK

    if mode == "check":
        _, errors = session.check(source)
        if not errors:
            print("OK: no syntax/semantic errors found.")
            return EX_OK
        for er in errors:
            session.report(er)
        return EX_DATAERR

    session.run(source)
    if session.had_error:
        return EX_DATAERR
    if session.had_runtime_error:
        return EX_SOFTWARE
    return EX_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv

    if not args:
        repl(Lox())
        return EX_OK

    if args[0] in MODES:
        if len(args) > 2:
            usage()
            return EX_USAGE
        mode, path = args[0], (args[1] if len(args) == 2 else None)
    elif len(args) == 1:
        mode, path = "run", args[0]
    else:
        usage()
        return EX_USAGE

    try:
        source = read_input(path)
    except OSError as e:
        print(f"Error: cannot read '{path}': {e.strerror}", file=sys.stderr)
        return EX_NOINPUT

    return run_mode(mode, source)


if __name__ == "__main__":
    sys.exit(main())
