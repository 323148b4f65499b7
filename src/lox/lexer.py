from __future__ import annotations
import sys
from dataclasses import dataclass
from typing import List, Optional, Union

import ply.lex as lex

from .errors import ScanError

Literal = Union[float, str, bool, None]


@dataclass(frozen=True)
class Token:
    type: str
    lexeme: str
    literal: Literal
    line: int
    column: int = 0

    def __str__(self) -> str:
        return f"{self.type} {self.lexeme} {self.literal}"


class LoxLexer:

    tokens = (
        # Keywords
        'AND', 'CLASS', 'ELSE', 'FALSE', 'FUN', 'FOR', 'IF', 'NIL', 'OR',
        'PRINT', 'RETURN', 'SUPER', 'THIS', 'TRUE', 'VAR', 'WHILE',

        # Identifiers and values
        'IDENTIFIER', 'NUMBER', 'STRING',

        # Two-character operators
        'BANG_EQUAL', 'EQUAL_EQUAL', 'LESS_EQUAL', 'GREATER_EQUAL',

        # Single-character operators
        'PLUS', 'MINUS', 'STAR', 'SLASH',
        'BANG', 'EQUAL', 'LESS', 'GREATER',

        # Parentheses and braces
        'LEFT_PAREN', 'RIGHT_PAREN',
        'LEFT_BRACE', 'RIGHT_BRACE',

        # Punctuation
        'SEMICOLON', 'COMMA', 'DOT',
    )

    reserved = {
        'and': 'AND',
        'class': 'CLASS',
        'else': 'ELSE',
        'false': 'FALSE',
        'fun': 'FUN',
        'for': 'FOR',
        'if': 'IF',
        'nil': 'NIL',
        'or': 'OR',
        'print': 'PRINT',
        'return': 'RETURN',
        'super': 'SUPER',
        'this': 'THIS',
        'true': 'TRUE',
        'var': 'VAR',
        'while': 'WHILE',
    }

    # Ignored characters
    t_ignore = ' \t\r'

    # ply sorts string rules by decreasing regex length, so '!=' wins over '!'
    t_BANG_EQUAL = r'!='
    t_EQUAL_EQUAL = r'=='
    t_LESS_EQUAL = r'<='
    t_GREATER_EQUAL = r'>='

    # Single-character operators
    t_PLUS = r'\+'
    t_MINUS = r'-'
    t_STAR = r'\*'
    t_SLASH = r'/'
    t_BANG = r'!'
    t_EQUAL = r'='
    t_LESS = r'<'
    t_GREATER = r'>'

    # Parentheses and braces
    t_LEFT_PAREN = r'\('
    t_RIGHT_PAREN = r'\)'
    t_LEFT_BRACE = r'\{'
    t_RIGHT_BRACE = r'\}'

    # Punctuation
    t_SEMICOLON = r';'
    t_COMMA = r','
    t_DOT = r'\.'

    def __init__(self):
        self.lexer = None
        self.errors: List[ScanError] = []

    # Function rules are tried in definition order, ahead of the string rules.
    def t_COMMENT(self, t):
        r'//[^\n]*'
        pass

    # A string runs to the next quote or to end of input; the second case is an error.
    def t_STRING(self, t):
        r'"[^"]*"?'
        t.lexer.lineno += t.value.count('\n')
        if len(t.value) < 2 or not t.value.endswith('"'):
            self.errors.append(ScanError("Unterminated string.", t.lexer.lineno))
            return None
        t.value = (t.value, t.value[1:-1])
        return t

    # The fraction needs a digit after the dot; "1." scans as NUMBER DOT.
    def t_NUMBER(self, t):
        r'\d+(?:\.\d+)?'
        t.value = (t.value, float(t.value))
        return t

    def t_IDENTIFIER(self, t):
        r'[a-zA-Z_][a-zA-Z_0-9]*'
        t.type = self.reserved.get(t.value, 'IDENTIFIER')
        return t

    #  line number tracking
    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += len(t.value)

    def t_error(self, t):
        self.errors.append(ScanError(f"Unexpected character '{t.value[0]}'.", t.lexer.lineno))
        t.lexer.skip(1)

    def build(self, **kwargs):
        """Build the lexer"""
        self.lexer = lex.lex(module=self, **kwargs)
        return self.lexer

    def tokenize(self, data: str) -> List[Token]:
        if not self.lexer:
            self.build()

        self.errors = []
        self.lexer.lineno = 1
        self.lexer.input(data)
        tokens: List[Token] = []

        while True:
            tok = self.lexer.token()
            if not tok:
                break

            line_start = data.rfind('\n', 0, tok.lexpos) + 1
            column = tok.lexpos - line_start + 1

            if isinstance(tok.value, tuple):
                lexeme, literal = tok.value
            elif tok.type == 'TRUE':
                lexeme, literal = tok.value, True
            elif tok.type == 'FALSE':
                lexeme, literal = tok.value, False
            else:
                lexeme, literal = tok.value, None

            tokens.append(Token(tok.type, lexeme, literal, tok.lineno, column))

        tokens.append(Token('EOF', '', None, self.lexer.lineno))
        return tokens


def scan(source: str, lexer: Optional[LoxLexer] = None):
    """Scan *source*, returning ``(tokens, errors)``."""
    lexer = lexer or LoxLexer()
    tokens = lexer.tokenize(source)
    return tokens, list(lexer.errors)


def print_tokens(tokens: List[Token], file=None):
    file = file or sys.stdout
    if not tokens:
        print("No tokens found!", file=file)
        return

    print(f"{'Line':<6}| {'Column':<7}| {'Token':<15}| Lexeme", file=file)
    print("-" * 60, file=file)

    for tok in tokens:
        lexeme = tok.lexeme
        if len(lexeme) > 30:
            lexeme = lexeme[:27] + "..."
        # Display escape characters
        lexeme = repr(lexeme)[1:-1] if '\n' in lexeme or '\t' in lexeme else lexeme

        print(f"{tok.line:<6}| {tok.column:<7}| {tok.type:<15}| {lexeme}", file=file)
