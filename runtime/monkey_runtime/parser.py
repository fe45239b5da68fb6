"""
Monkey Runtime - Parser

Statements are parsed by recursive descent with a straight dispatch on the
leading token. Expressions use Pratt parsing: every token type that can start
an expression has a prefix rule, every token type that can continue one has a
binding precedence and an infix rule. Adding an operator means adding table
entries, not touching parse_expression.

The parser never stops at the first error. Each error is recorded with the
offending token's position, the failing rule yields None, and parsing resumes
at the next statement boundary.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from .ast_nodes import (
    ArrayLiteral, AssignmentExpression, BlockStatement, BooleanLiteral,
    CallExpression, Expression, ExpressionStatement, FunctionLiteral,
    HashLiteral, Identifier, IfExpression, IndexExpression, InfixExpression,
    IntegerLiteral, LetStatement, NullLiteral, PrefixExpression, Program,
    RangeExpression, ReturnStatement, Statement, StringLiteral, WhileStatement,
)
from .errors import MonkeyParseError, ParseError
from .lexer import Lexer
from .objects import INT_MAX
from .tokens import Token, TokenType


logger = logging.getLogger(__name__)


# ============================================================================
# Precedence
# ============================================================================

LOWEST = 1
ASSIGN = 2
EQUALS = 3
LESSGREATER = 4
SUM = 5
PRODUCT = 6
PREFIX = 7
CALL = 8

PRECEDENCES = {
    TokenType.ASSIGN: ASSIGN,
    TokenType.EQ: EQUALS,
    TokenType.NOT_EQ: EQUALS,
    TokenType.LT: LESSGREATER,
    TokenType.GT: LESSGREATER,
    TokenType.PLUS: SUM,
    TokenType.MINUS: SUM,
    TokenType.ASTERISK: PRODUCT,
    TokenType.SLASH: PRODUCT,
    TokenType.LPAREN: CALL,
    TokenType.LBRACKET: CALL,
}

# Tokens that begin a new statement; used to resynchronize after an error
STATEMENT_STARTS = {TokenType.LET, TokenType.RETURN, TokenType.WHILE}


class Parser:
    """Parse Monkey tokens into an AST"""

    def __init__(self, lexer: Lexer):
        self._tokens: Iterator[Token] = iter(lexer)
        self.errors: List[ParseError] = []
        self._trace_depth = 0

        eof = Token(TokenType.EOF, "")
        self.current_token = eof
        self.peek_token = eof

        self.prefix_parse_fns: Dict[str, Callable[[], Optional[Expression]]] = {
            TokenType.IDENT: self._parse_identifier,
            TokenType.INT: self._parse_integer_literal,
            TokenType.STRING: self._parse_string_literal,
            TokenType.TRUE: self._parse_boolean,
            TokenType.FALSE: self._parse_boolean,
            TokenType.NULL: self._parse_null,
            TokenType.BANG: self._parse_prefix_expression,
            TokenType.MINUS: self._parse_prefix_expression,
            TokenType.LPAREN: self._parse_grouped_expression,
            TokenType.IF: self._parse_if_expression,
            TokenType.FUNCTION: self._parse_function_literal,
            TokenType.LBRACKET: self._parse_array_literal,
            TokenType.LBRACE: self._parse_hash_literal,
            TokenType.ILLEGAL: self._parse_illegal,
        }

        self.infix_parse_fns: Dict[str, Callable[[Optional[Expression]], Optional[Expression]]] = {
            TokenType.PLUS: self._parse_infix_expression,
            TokenType.MINUS: self._parse_infix_expression,
            TokenType.ASTERISK: self._parse_infix_expression,
            TokenType.SLASH: self._parse_infix_expression,
            TokenType.EQ: self._parse_infix_expression,
            TokenType.NOT_EQ: self._parse_infix_expression,
            TokenType.LT: self._parse_infix_expression,
            TokenType.GT: self._parse_infix_expression,
            TokenType.ASSIGN: self._parse_assignment_expression,
            TokenType.LPAREN: self._parse_call_expression,
            TokenType.LBRACKET: self._parse_index_expression,
        }

        # Read two tokens, so current_token and peek_token are both set
        self._next_token()
        self._next_token()

    # ------------------------------------------------------------------
    # Program and statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """
        Parse the whole token stream

        Returns:
            Program node. Check self.errors before evaluating it.
        """
        program = Program(token=self.current_token)

        while not self._current_token_is(TokenType.EOF):
            stmt = self._parse_statement_recovering()
            if stmt is not None:
                program.statements.append(stmt)
            self._next_token()

        if self.errors:
            logger.debug("Parsed program with %d error(s)", len(self.errors))
        return program

    def _parse_statement_recovering(self) -> Optional[Statement]:
        errors_before = len(self.errors)
        stmt = self._parse_statement()
        if len(self.errors) > errors_before:
            self._synchronize()
            return None
        return stmt

    def _synchronize(self):
        """Skip ahead to the last token of the broken statement"""
        while not self._current_token_is(TokenType.SEMICOLON) \
                and not self._current_token_is(TokenType.EOF) \
                and not self._current_token_is(TokenType.RBRACE) \
                and not self._peek_token_is(TokenType.EOF) \
                and not self._peek_token_is(TokenType.RBRACE) \
                and self.peek_token.type not in STATEMENT_STARTS:
            self._next_token()

    def _parse_statement(self) -> Optional[Statement]:
        token_type = self.current_token.type
        if token_type == TokenType.LET:
            return self._parse_let_statement()
        if token_type == TokenType.RETURN:
            return self._parse_return_statement()
        if token_type == TokenType.WHILE:
            return self._parse_while_statement()
        return self._parse_expression_statement()

    def _parse_let_statement(self) -> Optional[LetStatement]:
        with self._trace("parseLetStatement"):
            token = self.current_token

            if not self._expect_peek(TokenType.IDENT):
                return None
            name = Identifier(self.current_token, self.current_token.literal)

            if not self._expect_peek(TokenType.ASSIGN):
                return None

            self._next_token()
            value = self.parse_expression(LOWEST)

            if self._peek_token_is(TokenType.SEMICOLON):
                self._next_token()

            return LetStatement(token, name, value)

    def _parse_return_statement(self) -> ReturnStatement:
        with self._trace("parseReturnStatement"):
            token = self.current_token

            # A bare 'return;' returns null
            if self._peek_token_is(TokenType.SEMICOLON) or self._peek_token_is(TokenType.RBRACE):
                if self._peek_token_is(TokenType.SEMICOLON):
                    self._next_token()
                return ReturnStatement(token, NullLiteral(token))

            self._next_token()
            return_value = self.parse_expression(LOWEST)

            if self._peek_token_is(TokenType.SEMICOLON):
                self._next_token()

            return ReturnStatement(token, return_value)

    def _parse_while_statement(self) -> Optional[WhileStatement]:
        with self._trace("parseWhileStatement"):
            token = self.current_token

            if not self._expect_peek(TokenType.LPAREN):
                return None
            self._next_token()
            condition = self.parse_expression(LOWEST)

            if not self._expect_peek(TokenType.RPAREN):
                return None
            if not self._expect_peek(TokenType.LBRACE):
                return None

            body = self._parse_block_statement()

            if self._peek_token_is(TokenType.SEMICOLON):
                self._next_token()

            return WhileStatement(token, condition, body)

    def _parse_expression_statement(self) -> ExpressionStatement:
        with self._trace("parseExpressionStatement"):
            token = self.current_token
            expression = self.parse_expression(LOWEST)

            if self._peek_token_is(TokenType.SEMICOLON):
                self._next_token()

            return ExpressionStatement(token, expression)

    def _parse_block_statement(self) -> BlockStatement:
        """Parse statements up to the matching '}'. current_token is '{' on entry."""
        with self._trace("parseBlockStatement"):
            block = BlockStatement(self.current_token)
            self._next_token()

            while not self._current_token_is(TokenType.RBRACE) \
                    and not self._current_token_is(TokenType.EOF):
                stmt = self._parse_statement_recovering()
                if stmt is not None:
                    block.statements.append(stmt)
                self._next_token()

            if self._current_token_is(TokenType.EOF):
                self._error("expected '}' to close block, got EOF instead", self.current_token)

            return block

    # ------------------------------------------------------------------
    # Expressions (Pratt)
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: int) -> Optional[Expression]:
        """Parse an expression whose operators bind tighter than precedence"""
        with self._trace("parseExpression"):
            prefix = self.prefix_parse_fns.get(self.current_token.type)
            if prefix is None:
                self._error(f"no prefix parse function for {self.current_token} found",
                            self.current_token)
                return None

            left = prefix()

            while not self._peek_token_is(TokenType.SEMICOLON) \
                    and precedence < self._peek_precedence():
                infix = self.infix_parse_fns.get(self.peek_token.type)
                if infix is None:
                    return left

                self._next_token()
                left = infix(left)

            return left

    def _parse_identifier(self) -> Identifier:
        return Identifier(self.current_token, self.current_token.literal)

    def _parse_integer_literal(self) -> Optional[IntegerLiteral]:
        with self._trace("parseIntegerLiteral"):
            value = int(self.current_token.literal)
            if value > INT_MAX:
                self._error(f"could not parse {self.current_token.literal} as integer",
                            self.current_token)
                return None
            return IntegerLiteral(self.current_token, value)

    def _parse_string_literal(self) -> StringLiteral:
        return StringLiteral(self.current_token, self.current_token.literal)

    def _parse_boolean(self) -> BooleanLiteral:
        return BooleanLiteral(self.current_token, self._current_token_is(TokenType.TRUE))

    def _parse_null(self) -> NullLiteral:
        return NullLiteral(self.current_token)

    def _parse_illegal(self) -> None:
        token = self.current_token
        if token.literal.startswith('"'):
            self._error("unterminated string literal", token)
        else:
            self._error(f"illegal token {token.literal!r}", token)
        return None

    def _parse_prefix_expression(self) -> PrefixExpression:
        with self._trace("parsePrefixExpression"):
            token = self.current_token
            self._next_token()
            right = self.parse_expression(PREFIX)
            return PrefixExpression(token, token.literal, right)

    def _parse_infix_expression(self, left: Optional[Expression]) -> InfixExpression:
        with self._trace(f"parseInfixExpression {self.current_token.literal}"):
            token = self.current_token
            precedence = self._current_precedence()
            self._next_token()
            right = self.parse_expression(precedence)
            return InfixExpression(token, left, token.literal, right)

    def _parse_assignment_expression(self, left: Optional[Expression]) -> Optional[AssignmentExpression]:
        with self._trace("parseAssignmentExpression"):
            token = self.current_token
            if not isinstance(left, Identifier):
                target = f": {left}" if left is not None else ""
                self._error(f"invalid assignment target{target}", token)
                return None

            self._next_token()
            # One below ASSIGN so that a = b = c groups as a = (b = c)
            value = self.parse_expression(ASSIGN - 1)
            return AssignmentExpression(token, left, value)

    def _parse_grouped_expression(self) -> Optional[Expression]:
        with self._trace("parseGroupedExpression"):
            self._next_token()
            expr = self.parse_expression(LOWEST)
            if not self._expect_peek(TokenType.RPAREN):
                return None
            return expr

    def _parse_if_expression(self) -> Optional[IfExpression]:
        with self._trace("parseIfExpression"):
            token = self.current_token

            if not self._expect_peek(TokenType.LPAREN):
                return None
            self._next_token()
            condition = self.parse_expression(LOWEST)

            if not self._expect_peek(TokenType.RPAREN):
                return None
            if not self._expect_peek(TokenType.LBRACE):
                return None
            consequence = self._parse_block_statement()

            alternative = None
            if self._peek_token_is(TokenType.ELSE):
                self._next_token()
                if not self._expect_peek(TokenType.LBRACE):
                    return None
                alternative = self._parse_block_statement()

            return IfExpression(token, condition, consequence, alternative)

    def _parse_function_literal(self) -> Optional[FunctionLiteral]:
        with self._trace("parseFunctionLiteral"):
            token = self.current_token

            if not self._expect_peek(TokenType.LPAREN):
                return None
            parameters = self._parse_function_parameters()
            if parameters is None:
                return None
            if not self._expect_peek(TokenType.LBRACE):
                return None

            body = self._parse_block_statement()
            return FunctionLiteral(token, parameters, body)

    def _parse_function_parameters(self) -> Optional[List[Identifier]]:
        """Parse 'a, b, c)'. current_token is '(' on entry and ')' on exit."""
        parameters: List[Identifier] = []

        if self._peek_token_is(TokenType.RPAREN):
            self._next_token()
            return parameters

        if not self._expect_peek(TokenType.IDENT):
            return None
        parameters.append(Identifier(self.current_token, self.current_token.literal))

        while self._peek_token_is(TokenType.COMMA):
            self._next_token()
            if not self._expect_peek(TokenType.IDENT):
                return None
            parameters.append(Identifier(self.current_token, self.current_token.literal))

        if not self._expect_peek(TokenType.RPAREN):
            return None
        return parameters

    def _parse_call_expression(self, function: Optional[Expression]) -> Optional[CallExpression]:
        with self._trace("parseCallExpression"):
            token = self.current_token
            arguments = self._parse_expression_list(TokenType.RPAREN)
            if arguments is None:
                return None
            return CallExpression(token, function, arguments)

    def _parse_array_literal(self) -> Optional[ArrayLiteral]:
        with self._trace("parseArrayLiteral"):
            token = self.current_token
            elements = self._parse_expression_list(TokenType.RBRACKET)
            if elements is None:
                return None
            return ArrayLiteral(token, elements)

    def _parse_expression_list(self, end: str) -> Optional[List[Expression]]:
        """Parse comma separated expressions up to end; current_token is end on exit"""
        items: List[Expression] = []

        if self._peek_token_is(end):
            self._next_token()
            return items

        self._next_token()
        items.append(self.parse_expression(LOWEST))

        while self._peek_token_is(TokenType.COMMA):
            self._next_token()
            self._next_token()
            items.append(self.parse_expression(LOWEST))

        if not self._expect_peek(end):
            return None
        return items

    def _parse_hash_literal(self) -> Optional[HashLiteral]:
        with self._trace("parseHashLiteral"):
            hash_literal = HashLiteral(self.current_token)

            while not self._peek_token_is(TokenType.RBRACE):
                self._next_token()
                key = self.parse_expression(LOWEST)

                if not self._expect_peek(TokenType.COLON):
                    return None

                self._next_token()
                value = self.parse_expression(LOWEST)
                hash_literal.pairs.append((key, value))

                if not self._peek_token_is(TokenType.RBRACE) \
                        and not self._expect_peek(TokenType.COMMA):
                    return None

            if not self._expect_peek(TokenType.RBRACE):
                return None
            return hash_literal

    def _parse_index_expression(self, left: Optional[Expression]) -> Optional[Expression]:
        with self._trace("parseIndexExpression"):
            token = self.current_token
            self._next_token()
            index = self.parse_expression(LOWEST)

            if self._peek_token_is(TokenType.COLON):
                self._next_token()
                self._next_token()
                end = self.parse_expression(LOWEST)
                if not self._expect_peek(TokenType.RBRACKET):
                    return None
                return RangeExpression(token, left, index, end)

            if not self._expect_peek(TokenType.RBRACKET):
                return None
            return IndexExpression(token, left, index)

    # ------------------------------------------------------------------
    # Parser utilities
    # ------------------------------------------------------------------

    def _next_token(self):
        """Shift peek_token into current_token and pull the next token"""
        self.current_token = self.peek_token
        self.peek_token = next(self._tokens, self.peek_token)

    def _current_token_is(self, token_type: str) -> bool:
        return self.current_token.type == token_type

    def _peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def _expect_peek(self, token_type: str) -> bool:
        """Advance if peek_token has token_type, otherwise record an error"""
        if self._peek_token_is(token_type):
            self._next_token()
            return True
        self._peek_error(token_type)
        return False

    def _peek_error(self, token_type: str):
        self._error(f"expected next token to be {token_type}, got {self.peek_token} instead",
                    self.peek_token)

    def _peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek_token.type, LOWEST)

    def _current_precedence(self) -> int:
        return PRECEDENCES.get(self.current_token.type, LOWEST)

    def _error(self, message: str, token: Token):
        self.errors.append(ParseError(message, token.line, token.column))

    @contextmanager
    def _trace(self, rule: str):
        """Log BEGIN/END lines around a parse rule when DEBUG logging is on"""
        if not logger.isEnabledFor(logging.DEBUG):
            yield
            return
        indent = "\t" * self._trace_depth
        self._trace_depth += 1
        logger.debug("%sBEGIN %s", indent, rule)
        try:
            yield
        finally:
            logger.debug("%sEND %s", indent, rule)
            self._trace_depth -= 1


def parse(source: str) -> Program:
    """
    Parse source into a Program (convenience function)

    Raises:
        MonkeyParseError: If the source has syntax errors
    """
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    if parser.errors:
        raise MonkeyParseError(parser.errors)
    return program
