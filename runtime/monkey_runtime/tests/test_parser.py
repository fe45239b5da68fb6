"""
Test suite for the Monkey parser
Verifies statement parsing, operator precedence and error recovery
"""

import logging

import pytest
import sys
import os

# Add runtime directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from monkey_runtime.ast_nodes import (
    AssignmentExpression, CallExpression, ExpressionStatement, FunctionLiteral,
    HashLiteral, Identifier, IfExpression, IntegerLiteral, LetStatement,
    NullLiteral, RangeExpression, ReturnStatement, StringLiteral, WhileStatement,
)
from monkey_runtime.errors import MonkeyParseError
from monkey_runtime.lexer import Lexer
from monkey_runtime.parser import Parser, parse


def parse_with_errors(source):
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors


def error_messages(source):
    _, errors = parse_with_errors(source)
    return [e.message for e in errors]


class TestParserStatements:
    """Test statement parsing"""

    def test_let_statements(self):
        program = parse('let x = 5; let y = true; let foobar = y;')
        assert len(program.statements) == 3
        names = [stmt.name.value for stmt in program.statements]
        assert names == ['x', 'y', 'foobar']
        assert all(isinstance(stmt, LetStatement) for stmt in program.statements)

    def test_let_value(self):
        stmt = parse('let x = 5;').statements[0]
        assert isinstance(stmt.value, IntegerLiteral)
        assert stmt.value.value == 5

    def test_return_statement(self):
        stmt = parse('return 10;').statements[0]
        assert isinstance(stmt, ReturnStatement)
        assert stmt.return_value.value == 10

    def test_bare_return_returns_null(self):
        stmt = parse('return;').statements[0]
        assert isinstance(stmt.return_value, NullLiteral)

    def test_semicolons_are_optional(self):
        program = parse('let x = 1\nx')
        assert len(program.statements) == 2

    def test_while_statement(self):
        stmt = parse('while (i < 3) { i = i + 1; }').statements[0]
        assert isinstance(stmt, WhileStatement)
        assert str(stmt.condition) == '(i < 3)'
        assert len(stmt.body.statements) == 1

    def test_empty_program(self):
        assert parse('').statements == []


class TestParserExpressions:
    """Test expression nodes"""

    def test_identifier(self):
        expr = parse('foobar;').statements[0].expression
        assert isinstance(expr, Identifier)
        assert expr.value == 'foobar'
        assert expr.token_literal() == 'foobar'

    def test_string_literal(self):
        expr = parse('"hello world";').statements[0].expression
        assert isinstance(expr, StringLiteral)
        assert expr.value == 'hello world'

    def test_if_else(self):
        expr = parse('if (x < y) { x } else { y }').statements[0].expression
        assert isinstance(expr, IfExpression)
        assert str(expr.condition) == '(x < y)'
        assert str(expr.consequence) == '{ x }'
        assert str(expr.alternative) == '{ y }'

    def test_if_without_else(self):
        expr = parse('if (x) { x }').statements[0].expression
        assert expr.alternative is None

    def test_function_literal(self):
        expr = parse('fn(x, y) { x + y; }').statements[0].expression
        assert isinstance(expr, FunctionLiteral)
        assert [p.value for p in expr.parameters] == ['x', 'y']
        assert str(expr.body) == '{ (x + y) }'

    @pytest.mark.parametrize("source,params", [
        ('fn() {};', []),
        ('fn(x) {};', ['x']),
        ('fn(x, y, z) {};', ['x', 'y', 'z']),
    ])
    def test_function_parameters(self, source, params):
        expr = parse(source).statements[0].expression
        assert [p.value for p in expr.parameters] == params

    def test_call_expression(self):
        expr = parse('add(1, 2 * 3, 4 + 5);').statements[0].expression
        assert isinstance(expr, CallExpression)
        assert str(expr.function) == 'add'
        assert [str(a) for a in expr.arguments] == ['1', '(2 * 3)', '(4 + 5)']

    def test_hash_literal_keeps_order(self):
        expr = parse('{"one": 1, "two": 2, true: 3}').statements[0].expression
        assert isinstance(expr, HashLiteral)
        assert [str(k) for k, _ in expr.pairs] == ['"one"', '"two"', 'true']

    def test_empty_hash_and_array(self):
        assert str(parse('{}').statements[0].expression) == '{}'
        assert str(parse('[]').statements[0].expression) == '[]'

    def test_range_expression(self):
        expr = parse('arr[1:3]').statements[0].expression
        assert isinstance(expr, RangeExpression)
        assert str(expr) == '(arr[1:3])'

    def test_assignment(self):
        expr = parse('x = 1 + 2').statements[0].expression
        assert isinstance(expr, AssignmentExpression)
        assert expr.name.value == 'x'
        assert str(expr.value) == '(1 + 2)'

    def test_assignment_is_right_associative(self):
        expr = parse('a = b = 1').statements[0].expression
        assert isinstance(expr.value, AssignmentExpression)
        assert expr.value.name.value == 'b'


class TestParserPrecedence:
    """Test operator precedence through the canonical rendering"""

    @pytest.mark.parametrize("source,expected", [
        ('-a * b', '((-a) * b)'),
        ('!-a', '(!(-a))'),
        ('a + b + c', '((a + b) + c)'),
        ('a + b - c', '((a + b) - c)'),
        ('a * b / c', '((a * b) / c)'),
        ('a + b * c + d / e - f', '(((a + (b * c)) + (d / e)) - f)'),
        ('5 > 4 == 3 < 4', '((5 > 4) == (3 < 4))'),
        ('3 + 4 * 5 == 3 * 1 + 4 * 5', '((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))'),
        ('true != false', '(true != false)'),
        ('1 + (2 + 3) + 4', '((1 + (2 + 3)) + 4)'),
        ('-(5 + 5)', '(-(5 + 5))'),
        ('!(true == true)', '(!(true == true))'),
        ('a + add(b * c) + d', '((a + add((b * c))) + d)'),
        ('add(a, b, 1, 2 * 3, add(6, 7 * 8))', 'add(a, b, 1, (2 * 3), add(6, (7 * 8)))'),
        ('a * [1, 2, 3, 4][b * c] * d', '((a * ([1, 2, 3, 4][(b * c)])) * d)'),
        ('add(a * b[2], b[1], 2 * [1, 2][1])', 'add((a * (b[2])), (b[1]), (2 * ([1, 2][1])))'),
        ('x = y == 1', 'x = (y == 1)'),
        ('f(1)(2)', 'f(1)(2)'),
    ])
    def test_rendering(self, source, expected):
        assert str(parse(source)) == expected

    def test_statement_rendering(self):
        program = parse('let x = 1 + 2; return x;')
        assert str(program) == 'let x = (1 + 2); return x;'

    def test_parsing_is_idempotent(self):
        source = 'let f = fn(a) { if (a > 1) { return a * f(a - 1); } 1 }; f(5);'
        assert parse(source) == parse(source)


class TestParserErrors:
    """Test error collection and recovery"""

    def test_missing_identifier(self):
        _, errors = parse_with_errors('let = 5;')
        assert errors[0].message == 'expected next token to be IDENT, got = instead'
        assert (errors[0].line, errors[0].column) == (1, 5)

    def test_missing_assign(self):
        assert error_messages('let x 5;') == ["expected next token to be =, got INT('5') instead"]

    def test_no_prefix_function(self):
        assert error_messages('5 + ;') == ['no prefix parse function for ; found']

    def test_illegal_character(self):
        assert error_messages('let x = @;') == ["illegal token '@'"]

    def test_unterminated_string(self):
        assert error_messages('let s = "abc') == ['unterminated string literal']

    def test_integer_out_of_range(self):
        assert error_messages('99999999999999999999') == [
            'could not parse 99999999999999999999 as integer'
        ]

    def test_invalid_assignment_target(self):
        assert error_messages('1 = 2') == ['invalid assignment target: 1']

    def test_unclosed_block(self):
        assert error_messages('if (x) { x') == ["expected '}' to close block, got EOF instead"]

    def test_collects_every_error_and_recovers(self):
        program, errors = parse_with_errors('let = 1; let y 2; let z = 3;')
        assert len(errors) == 2
        assert len(program.statements) == 1
        assert program.statements[0].name.value == 'z'

    def test_errors_in_source_order(self):
        _, errors = parse_with_errors('let = 1;\nlet y 2;')
        assert [e.line for e in errors] == [1, 2]

    def test_parse_raises_with_all_errors(self):
        with pytest.raises(MonkeyParseError) as exc_info:
            parse('let = 1; let y 2;')
        assert len(exc_info.value.errors) == 2
        assert exc_info.value.code == 'E_PARSE_ERROR'

    def test_error_str(self):
        _, errors = parse_with_errors('let = 5;')
        assert str(errors[0]) == 'line 1, column 5: expected next token to be IDENT, got = instead'


class TestParserTracing:
    """Test BEGIN/END tracing through logging"""

    def test_trace_is_logged_at_debug(self, caplog):
        caplog.set_level(logging.DEBUG, logger='monkey_runtime.parser')
        parse('let x = 1;')
        assert 'BEGIN parseLetStatement' in caplog.messages
        assert '\tBEGIN parseExpression' in caplog.messages
        assert 'END parseLetStatement' in caplog.messages

    def test_trace_is_silent_by_default(self, caplog):
        caplog.set_level(logging.INFO, logger='monkey_runtime.parser')
        parse('let x = 1;')
        assert not [m for m in caplog.messages if 'BEGIN' in m]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
