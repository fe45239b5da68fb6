"""
Monkey Runtime - Lexer

Turns source text into tokens. Scanning is lazy: iterating a Lexer yields one
token at a time and every iteration restarts from the beginning of the source,
so re-lexing always reproduces the same sequence. Unknown characters become
ILLEGAL tokens instead of aborting the pass.
"""

from typing import Iterator, List

from .tokens import SINGLE_CHAR_TOKENS, Token, TokenType, lookup_identifier


ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '"': '"',
    '\\': '\\',
}


class Lexer:
    """Tokenize Monkey source code"""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens from the start of the source, ending with EOF"""
        scanner = Lexer(self.source)
        while True:
            token = scanner.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def tokenize(self) -> List[Token]:
        """Tokenize entire source"""
        return list(self)

    def next_token(self) -> Token:
        """Scan and return the next token, advancing the cursor"""
        self._skip_whitespace_and_comments()

        if self.pos >= len(self.source):
            return self._make_token(TokenType.EOF, "", self.pos)

        start = self.pos
        ch = self.source[self.pos]

        if ch == '=':
            if self._peek_char() == '=':
                self.pos += 2
                return self._make_token(TokenType.EQ, '==', start)
            self.pos += 1
            return self._make_token(TokenType.ASSIGN, ch, start)

        if ch == '!':
            if self._peek_char() == '=':
                self.pos += 2
                return self._make_token(TokenType.NOT_EQ, '!=', start)
            self.pos += 1
            return self._make_token(TokenType.BANG, ch, start)

        if ch in SINGLE_CHAR_TOKENS:
            self.pos += 1
            return self._make_token(SINGLE_CHAR_TOKENS[ch], ch, start)

        if ch == '"':
            return self._read_string()

        if ch.isascii() and ch.isdigit():
            return self._read_number()

        if _is_letter(ch):
            return self._read_identifier()

        self.pos += 1
        return self._make_token(TokenType.ILLEGAL, ch, start)

    def _skip_whitespace_and_comments(self):
        """Skip whitespace, '#' comments and '//' comments"""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == '\n':
                self.pos += 1
                self.line += 1
                self.line_start = self.pos
            elif ch in ' \t\r':
                self.pos += 1
            elif ch == '#' or (ch == '/' and self._peek_char() == '/'):
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self.pos += 1
            else:
                break

    def _read_number(self) -> Token:
        """Read integer literal"""
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos].isascii() \
                and self.source[self.pos].isdigit():
            self.pos += 1
        return self._make_token(TokenType.INT, self.source[start:self.pos], start)

    def _read_string(self) -> Token:
        """Read string literal, processing escape sequences"""
        start = self.pos
        start_line, start_line_start = self.line, self.line_start
        self.pos += 1  # Skip opening quote
        chars = []

        while self.pos < len(self.source) and self.source[self.pos] != '"':
            ch = self.source[self.pos]
            if ch == '\\' and self.pos + 1 < len(self.source):
                escaped = self.source[self.pos + 1]
                chars.append(ESCAPES.get(escaped, escaped))
                self.pos += 2
                continue
            if ch == '\n':
                self.line += 1
                self.line_start = self.pos + 1
            chars.append(ch)
            self.pos += 1

        if self.pos >= len(self.source):
            return Token(TokenType.ILLEGAL, self.source[start:],
                         start_line, start - start_line_start + 1)

        self.pos += 1  # Skip closing quote
        return Token(TokenType.STRING, ''.join(chars),
                     start_line, start - start_line_start + 1)

    def _read_identifier(self) -> Token:
        """Read identifier or keyword"""
        start = self.pos
        while self.pos < len(self.source) and _is_letter_or_digit(self.source[self.pos]):
            self.pos += 1
        text = self.source[start:self.pos]
        return self._make_token(lookup_identifier(text), text, start)

    def _peek_char(self) -> str:
        if self.pos + 1 < len(self.source):
            return self.source[self.pos + 1]
        return ''

    def _make_token(self, type: str, literal: str, start: int) -> Token:
        return Token(type, literal, self.line, start - self.line_start + 1)


def _is_letter(ch: str) -> bool:
    return ch == '_' or (ch.isascii() and ch.isalpha())


def _is_letter_or_digit(ch: str) -> bool:
    return _is_letter(ch) or (ch.isascii() and ch.isdigit())


def tokenize(source: str) -> List[Token]:
    """Tokenize source (convenience function)"""
    return Lexer(source).tokenize()
