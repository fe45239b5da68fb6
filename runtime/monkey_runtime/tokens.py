"""
Monkey Runtime - Token Model

The vocabulary of lexical units produced by the lexer. Tokens are immutable.
"""

from dataclasses import dataclass


class TokenType:
    """Token type constants"""
    # Special
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"
    TRUE = "TRUE"
    FALSE = "FALSE"
    NULL = "NULL"
    WHILE = "WHILE"


KEYWORDS = {
    'fn': TokenType.FUNCTION,
    'let': TokenType.LET,
    'if': TokenType.IF,
    'else': TokenType.ELSE,
    'return': TokenType.RETURN,
    'true': TokenType.TRUE,
    'false': TokenType.FALSE,
    'null': TokenType.NULL,
    'while': TokenType.WHILE,
}

# Operators and delimiters that are always a single character
SINGLE_CHAR_TOKENS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.ASTERISK,
    '/': TokenType.SLASH,
    '<': TokenType.LT,
    '>': TokenType.GT,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    ':': TokenType.COLON,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
}


@dataclass(frozen=True)
class Token:
    """Token from Monkey source"""
    type: str
    literal: str
    line: int = 1
    column: int = 1

    def __str__(self):
        if self.type in (TokenType.IDENT, TokenType.INT, TokenType.STRING, TokenType.ILLEGAL):
            return f"{self.type}({self.literal!r})"
        return self.type


def lookup_identifier(ident: str) -> str:
    """Return the keyword token type for ident, or IDENT"""
    return KEYWORDS.get(ident, TokenType.IDENT)
