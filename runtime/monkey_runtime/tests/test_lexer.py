"""
Test suite for the Monkey lexer
Verifies token kinds, literals, positions and restartability
"""

import pytest
import sys
import os

# Add runtime directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from monkey_runtime.lexer import Lexer, tokenize
from monkey_runtime.tokens import Token, TokenType, lookup_identifier


def types_of(source):
    return [t.type for t in tokenize(source)]


class TestLexerTokens:
    """Test token kinds and literals"""

    def test_operators_and_delimiters(self):
        source = '=+-!*/<>==!=,;:(){}[]'
        expected = [
            TokenType.ASSIGN, TokenType.PLUS, TokenType.MINUS, TokenType.BANG,
            TokenType.ASTERISK, TokenType.SLASH, TokenType.LT, TokenType.GT,
            TokenType.EQ, TokenType.NOT_EQ, TokenType.COMMA, TokenType.SEMICOLON,
            TokenType.COLON, TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACE,
            TokenType.RBRACE, TokenType.LBRACKET, TokenType.RBRACKET, TokenType.EOF,
        ]
        assert types_of(source) == expected

    def test_keywords(self):
        tokens = tokenize('fn let if else return true false null while')
        assert [t.type for t in tokens[:-1]] == [
            TokenType.FUNCTION, TokenType.LET, TokenType.IF, TokenType.ELSE,
            TokenType.RETURN, TokenType.TRUE, TokenType.FALSE, TokenType.NULL,
            TokenType.WHILE,
        ]

    def test_let_statement(self):
        tokens = tokenize('let five = 5;')
        assert [(t.type, t.literal) for t in tokens] == [
            (TokenType.LET, 'let'),
            (TokenType.IDENT, 'five'),
            (TokenType.ASSIGN, '='),
            (TokenType.INT, '5'),
            (TokenType.SEMICOLON, ';'),
            (TokenType.EOF, ''),
        ]

    def test_identifiers_allow_underscores_and_digits(self):
        tokens = tokenize('_tmp is_null x2')
        assert [(t.type, t.literal) for t in tokens[:-1]] == [
            (TokenType.IDENT, '_tmp'),
            (TokenType.IDENT, 'is_null'),
            (TokenType.IDENT, 'x2'),
        ]

    def test_keyword_prefix_is_identifier(self):
        assert lookup_identifier('letter') == TokenType.IDENT
        assert lookup_identifier('fn') == TokenType.FUNCTION

    def test_integer(self):
        tokens = tokenize('12345')
        assert tokens[0] == Token(TokenType.INT, '12345', 1, 1)

    def test_string_with_escapes(self):
        tokens = tokenize(r'"a\tb\n\"q\"\\"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].literal == 'a\tb\n"q"\\'

    def test_unknown_escape_keeps_character(self):
        assert tokenize(r'"\q"')[0].literal == 'q'

    def test_unterminated_string_is_illegal(self):
        tokens = tokenize('"abc')
        assert tokens[0].type == TokenType.ILLEGAL
        assert tokens[0].literal == '"abc'
        assert tokens[-1].type == TokenType.EOF

    def test_unknown_character_is_illegal(self):
        tokens = tokenize('let x = 5 @ 3;')
        illegal = [t for t in tokens if t.type == TokenType.ILLEGAL]
        assert len(illegal) == 1
        assert illegal[0].literal == '@'
        # Lexing carries on past the bad character
        assert tokens[-2].type == TokenType.SEMICOLON

    def test_comments_are_skipped(self):
        source = '# hash comment\nlet x = 1; // slash comment\nx'
        assert types_of(source) == [
            TokenType.LET, TokenType.IDENT, TokenType.ASSIGN, TokenType.INT,
            TokenType.SEMICOLON, TokenType.IDENT, TokenType.EOF,
        ]

    def test_single_slash_is_division(self):
        assert types_of('a / b') == [TokenType.IDENT, TokenType.SLASH, TokenType.IDENT, TokenType.EOF]

    def test_empty_source(self):
        tokens = tokenize('')
        assert tokens == [Token(TokenType.EOF, '', 1, 1)]

    def test_token_str(self):
        assert str(Token(TokenType.IDENT, 'x')) == "IDENT('x')"
        assert str(Token(TokenType.SEMICOLON, ';')) == ';'


class TestLexerPositions:
    """Test line and column tracking"""

    def test_columns_on_one_line(self):
        tokens = tokenize('let x = 10;')
        assert [(t.line, t.column) for t in tokens[:-1]] == [
            (1, 1), (1, 5), (1, 7), (1, 9), (1, 11),
        ]

    def test_lines(self):
        tokens = tokenize('let a = 1;\n  a + 2')
        plus = [t for t in tokens if t.type == TokenType.PLUS][0]
        assert (plus.line, plus.column) == (2, 5)

    def test_position_after_multiline_string(self):
        tokens = tokenize('"a\nb" x')
        assert tokens[0].line == 1
        assert (tokens[1].line, tokens[1].column) == (2, 4)


class TestLexerIteration:
    """Test lazy, restartable iteration"""

    def test_iteration_is_lazy(self):
        stream = iter(Lexer('let x = 1;'))
        first = next(stream)
        assert first.type == TokenType.LET

    def test_restart_reproduces_sequence(self):
        lexer = Lexer('let add = fn(a, b) { a + b };')
        assert list(lexer) == list(lexer)
        assert lexer.tokenize() == list(lexer)

    def test_stops_after_eof(self):
        tokens = list(Lexer('x'))
        assert tokens[-1].type == TokenType.EOF
        assert len(tokens) == 2


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
