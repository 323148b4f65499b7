from __future__ import annotations
from typing import List, Optional

from .ast_nodes import *
from .errors import ParseError
from .lexer import Token

MAX_ARGS = 255

# Token types that begin a declaration or statement; recovery stops in front of them.
STATEMENT_STARTS = ("CLASS", "FUN", "VAR", "FOR", "IF", "WHILE", "PRINT", "RETURN")


class TokenStream:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.i = 0

    def peek(self, k: int = 0) -> Token:
        j = min(self.i + k, len(self.tokens) - 1)
        return self.tokens[j]

    def previous(self) -> Token:
        return self.tokens[self.i - 1]

    def at_end(self) -> bool:
        return self.peek().type == "EOF"

    def check(self, ttype: str) -> bool:
        return not self.at_end() and self.peek().type == ttype

    def advance(self) -> Token:
        if not self.at_end():
            self.i += 1
        return self.previous()

    def match(self, *types: str) -> Optional[Token]:
        for ttype in types:
            if self.check(ttype):
                return self.advance()
        return None

    def expect(self, ttype: str, message: str) -> Token:
        if self.check(ttype):
            return self.advance()
        raise ParseError(self.peek(), message)


class Parser:
    def __init__(self, tokens: List[Token]):
        self.ts = TokenStream(tokens)
        self.errors: List[ParseError] = []

    def parse(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.ts.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def error(self, token: Token, message: str) -> ParseError:
        err = ParseError(token, message)
        self.errors.append(err)
        return err

    def synchronize(self):
        self.ts.advance()
        while not self.ts.at_end():
            if self.ts.previous().type == "SEMICOLON":
                return
            if self.ts.peek().type in STATEMENT_STARTS:
                return
            self.ts.advance()

    # ---------------- DECLARATIONS ----------------
    def parse_declaration(self) -> Optional[Stmt]:
        try:
            if self.ts.match("CLASS"):
                return self.parse_class()
            if self.ts.match("FUN"):
                return self.parse_function("function")
            if self.ts.match("VAR"):
                return self.parse_var()
            return self.parse_stmt()
        except ParseError as e:
            self.errors.append(e)
            self.synchronize()
            return None

    def parse_class(self) -> Class:
        name = self.ts.expect("IDENTIFIER", "Expect class name.")
        superclass = None
        if self.ts.match("LESS"):
            self.ts.expect("IDENTIFIER", "Expect superclass name.")
            superclass = Variable(self.ts.previous())
        self.ts.expect("LEFT_BRACE", "Expect '{' before class body.")

        methods: List[Function] = []
        while not self.ts.check("RIGHT_BRACE") and not self.ts.at_end():
            methods.append(self.parse_function("method"))
        self.ts.expect("RIGHT_BRACE", "Expect '}' after class body.")
        return Class(name, superclass, methods)

    def parse_function(self, kind: str) -> Function:
        name = self.ts.expect("IDENTIFIER", f"Expect {kind} name.")
        self.ts.expect("LEFT_PAREN", f"Expect '(' after {kind} name.")
        params: List[Token] = []
        if not self.ts.check("RIGHT_PAREN"):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.ts.peek(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.ts.expect("IDENTIFIER", "Expect parameter name."))
                if self.ts.match("COMMA") is None:
                    break
        self.ts.expect("RIGHT_PAREN", "Expect ')' after parameters.")
        self.ts.expect("LEFT_BRACE", f"Expect '{{' before {kind} body.")
        body = self.parse_block_body()
        return Function(name, params, body)

    def parse_var(self) -> Var:
        name = self.ts.expect("IDENTIFIER", "Expect variable name.")
        initializer = None
        if self.ts.match("EQUAL"):
            initializer = self.parse_expr()
        self.ts.expect("SEMICOLON", "Expect ';' after variable declaration.")
        return Var(name, initializer)

    # ---------------- STATEMENTS ----------------
    def parse_stmt(self) -> Stmt:
        if self.ts.match("FOR"):
            return self.parse_for()
        if self.ts.match("IF"):
            return self.parse_if()
        if self.ts.match("PRINT"):
            return self.parse_print()
        if self.ts.match("RETURN"):
            return self.parse_return()
        if self.ts.match("WHILE"):
            return self.parse_while()
        if self.ts.match("LEFT_BRACE"):
            return Block(self.parse_block_body())

        # Otherwise: expression statement
        expr = self.parse_expr()
        self.ts.expect("SEMICOLON", "Expect ';' after expression.")
        return Expression(expr)

    def parse_block_body(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.ts.check("RIGHT_BRACE") and not self.ts.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self.ts.expect("RIGHT_BRACE", "Expect '}' after block.")
        return statements

    def parse_print(self) -> Print:
        value = self.parse_expr()
        self.ts.expect("SEMICOLON", "Expect ';' after value.")
        return Print(value)

    def parse_return(self) -> Return:
        keyword = self.ts.previous()
        value = None
        if not self.ts.check("SEMICOLON"):
            value = self.parse_expr()
        self.ts.expect("SEMICOLON", "Expect ';' after return value.")
        return Return(keyword, value)

    def parse_if(self) -> If:
        self.ts.expect("LEFT_PAREN", "Expect '(' after 'if'.")
        condition = self.parse_expr()
        self.ts.expect("RIGHT_PAREN", "Expect ')' after if condition.")
        then_branch = self.parse_stmt()
        else_branch = None
        if self.ts.match("ELSE"):
            else_branch = self.parse_stmt()
        return If(condition, then_branch, else_branch)

    def parse_while(self) -> While:
        self.ts.expect("LEFT_PAREN", "Expect '(' after 'while'.")
        condition = self.parse_expr()
        self.ts.expect("RIGHT_PAREN", "Expect ')' after condition.")
        body = self.parse_stmt()
        return While(condition, body)

    def parse_for(self) -> Stmt:
        """Desugar ``for (init; cond; incr) body`` into blocks and a while loop."""
        self.ts.expect("LEFT_PAREN", "Expect '(' after 'for'.")
        if self.ts.match("SEMICOLON"):
            initializer = None
        elif self.ts.match("VAR"):
            initializer = self.parse_var()
        else:
            expr = self.parse_expr()
            self.ts.expect("SEMICOLON", "Expect ';' after expression.")
            initializer = Expression(expr)

        condition = None
        if not self.ts.check("SEMICOLON"):
            condition = self.parse_expr()
        self.ts.expect("SEMICOLON", "Expect ';' after loop condition.")

        increment = None
        if not self.ts.check("RIGHT_PAREN"):
            increment = self.parse_expr()
        self.ts.expect("RIGHT_PAREN", "Expect ')' after for clauses.")

        body = self.parse_stmt()
        if increment is not None:
            body = Block([body, Expression(increment)])
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block([initializer, body])
        return body

    # ---------------- EXPRESSIONS (precedence) ----------------
    def parse_expr(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        expr = self.parse_or()
        if self.ts.match("EQUAL"):
            equals = self.ts.previous()
            value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            # Reported, not raised: the parser is not confused about where it is.
            self.error(equals, "Invalid assignment target.")
        return expr

    def parse_or(self) -> Expr:
        expr = self.parse_and()
        while self.ts.match("OR"):
            op_tok = self.ts.previous()
            rhs = self.parse_and()
            expr = Logical(expr, op_tok, rhs)
        return expr

    def parse_and(self) -> Expr:
        expr = self.parse_equality()
        while self.ts.match("AND"):
            op_tok = self.ts.previous()
            rhs = self.parse_equality()
            expr = Logical(expr, op_tok, rhs)
        return expr

    def parse_equality(self) -> Expr:
        expr = self.parse_comparison()
        while self.ts.match("BANG_EQUAL", "EQUAL_EQUAL"):
            op_tok = self.ts.previous()
            rhs = self.parse_comparison()
            expr = Binary(expr, op_tok, rhs)
        return expr

    def parse_comparison(self) -> Expr:
        expr = self.parse_term()
        while self.ts.match("GREATER", "GREATER_EQUAL", "LESS", "LESS_EQUAL"):
            op_tok = self.ts.previous()
            rhs = self.parse_term()
            expr = Binary(expr, op_tok, rhs)
        return expr

    def parse_term(self) -> Expr:
        expr = self.parse_factor()
        while self.ts.match("MINUS", "PLUS"):
            op_tok = self.ts.previous()
            rhs = self.parse_factor()
            expr = Binary(expr, op_tok, rhs)
        return expr

    def parse_factor(self) -> Expr:
        expr = self.parse_unary()
        while self.ts.match("SLASH", "STAR"):
            op_tok = self.ts.previous()
            rhs = self.parse_unary()
            expr = Binary(expr, op_tok, rhs)
        return expr

    def parse_unary(self) -> Expr:
        if self.ts.match("BANG", "MINUS"):
            op_tok = self.ts.previous()
            operand = self.parse_unary()
            return Unary(op_tok, operand)
        return self.parse_call()

    def parse_call(self) -> Expr:
        expr = self.parse_primary()
        while True:
            if self.ts.match("LEFT_PAREN"):
                expr = self.finish_call(expr)
            elif self.ts.match("DOT"):
                name = self.ts.expect("IDENTIFIER", "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        args: List[Expr] = []
        if not self.ts.check("RIGHT_PAREN"):
            while True:
                if len(args) >= MAX_ARGS:
                    self.error(self.ts.peek(), f"Can't have more than {MAX_ARGS} arguments.")
                args.append(self.parse_expr())
                if self.ts.match("COMMA") is None:
                    break
        paren = self.ts.expect("RIGHT_PAREN", "Expect ')' after arguments.")
        return Call(callee, paren, args)

    def parse_primary(self) -> Expr:
        if self.ts.match("FALSE"):
            return Literal(False)
        if self.ts.match("TRUE"):
            return Literal(True)
        if self.ts.match("NIL"):
            return Literal(None)

        if self.ts.match("NUMBER", "STRING"):
            return Literal(self.ts.previous().literal)

        if self.ts.match("SUPER"):
            keyword = self.ts.previous()
            self.ts.expect("DOT", "Expect '.' after 'super'.")
            method = self.ts.expect("IDENTIFIER", "Expect superclass method name.")
            return Super(keyword, method)

        if self.ts.match("THIS"):
            return This(self.ts.previous())

        if self.ts.match("IDENTIFIER"):
            return Variable(self.ts.previous())

        if self.ts.match("LEFT_PAREN"):
            expr = self.parse_expr()
            self.ts.expect("RIGHT_PAREN", "Expect ')' after expression.")
            return Grouping(expr)

        raise ParseError(self.ts.peek(), "Expect expression.")


def parse(tokens: List[Token]):
    """Parse *tokens*, returning ``(statements, errors)``."""
    parser = Parser(tokens)
    statements = parser.parse()
    return statements, list(parser.errors)
