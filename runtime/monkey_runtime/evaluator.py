"""
Monkey Runtime - Evaluator

Tree-walking evaluation of a parsed Program against an Environment.

Runtime failures are Error values, not exceptions: every rule checks the
values it evaluates and hands an Error straight back to its caller, so the
first failure short-circuits the rest of the program. A ReturnValue travels
the same way up to the nearest function call (or the program itself), where
it is unwrapped.

Only host-level problems raise: an AST node the evaluator does not know is an
internal error, and running out of Python stack is turned into an Error value.
"""

import logging
import sys
from typing import List, Mapping, Optional, TextIO

from .ast_nodes import (
    ArrayLiteral, AssignmentExpression, BlockStatement, BooleanLiteral,
    CallExpression, ExpressionStatement, FunctionLiteral, HashLiteral,
    Identifier, IfExpression, IndexExpression, InfixExpression,
    IntegerLiteral, LetStatement, Node, NullLiteral, PrefixExpression, Program,
    RangeExpression, ReturnStatement, StringLiteral, WhileStatement,
)
from .builtin_functions import BUILTINS
from .environment import Environment
from .errors import E_INTERNAL_ERROR, MonkeyError
from .objects import (
    INT_MAX, INT_MIN, NULL, Array, Boolean, Builtin, Error, Function, Hash,
    Integer, Null, Object, ReturnValue, String, hash_key, is_error,
    is_truthy, native_bool, recursion_headroom,
)


logger = logging.getLogger(__name__)


class Evaluator:
    """Evaluate Monkey AST nodes"""

    def __init__(self, output: Optional[TextIO] = None,
                 builtins: Mapping[str, Builtin] = BUILTINS):
        self._output = output
        self.builtins = builtins

    @property
    def output(self) -> TextIO:
        """Stream written by print/puts; sys.stdout unless one was given"""
        return self._output if self._output is not None else sys.stdout

    def eval_program(self, program: Program, env: Environment) -> Object:
        """
        Evaluate a whole program

        Args:
            program: Parsed program (must have no parse errors)
            env: Global environment; bindings persist in it afterwards

        Returns:
            Value of the last statement, the value of a top-level return,
            or the first Error raised by the program
        """
        try:
            with recursion_headroom():
                return self._eval_program(program, env)
        except RecursionError:
            logger.debug("Host recursion limit reached during evaluation")
            return Error("maximum recursion depth exceeded")

    def _eval_program(self, program: Program, env: Environment) -> Object:
        result: Object = NULL
        for stmt in program.statements:
            result = self.evaluate(stmt, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, Error):
                return result
        return result

    def evaluate(self, node: Node, env: Environment) -> Object:
        """Evaluate a single AST node"""
        # Statements
        if isinstance(node, ExpressionStatement):
            return self.evaluate(node.expression, env)

        elif isinstance(node, LetStatement):
            value = self.evaluate(node.value, env)
            if is_error(value):
                return value
            return env.define(node.name.value, value)

        elif isinstance(node, ReturnStatement):
            value = self.evaluate(node.return_value, env)
            if is_error(value):
                return value
            return ReturnValue(value)

        elif isinstance(node, BlockStatement):
            return self._eval_block(node, env)

        elif isinstance(node, WhileStatement):
            return self._eval_while(node, env)

        # Literals
        elif isinstance(node, IntegerLiteral):
            return Integer(node.value)

        elif isinstance(node, StringLiteral):
            return String(node.value)

        elif isinstance(node, BooleanLiteral):
            return native_bool(node.value)

        elif isinstance(node, NullLiteral):
            return NULL

        elif isinstance(node, ArrayLiteral):
            elements = self._eval_expressions(node.elements, env)
            if len(elements) == 1 and is_error(elements[0]):
                return elements[0]
            return Array(elements)

        elif isinstance(node, HashLiteral):
            return self._eval_hash_literal(node, env)

        elif isinstance(node, FunctionLiteral):
            return Function([p.value for p in node.parameters], node.body, env)

        # Expressions
        elif isinstance(node, Identifier):
            return self._eval_identifier(node, env)

        elif isinstance(node, PrefixExpression):
            right = self.evaluate(node.right, env)
            if is_error(right):
                return right
            return self._eval_prefix(node.operator, right)

        elif isinstance(node, InfixExpression):
            left = self.evaluate(node.left, env)
            if is_error(left):
                return left
            right = self.evaluate(node.right, env)
            if is_error(right):
                return right
            return self._eval_infix(node.operator, left, right)

        elif isinstance(node, AssignmentExpression):
            value = self.evaluate(node.value, env)
            if is_error(value):
                return value
            if not env.assign(node.name.value, value):
                return Error(f"identifier not found: {node.name.value}")
            return value

        elif isinstance(node, IfExpression):
            condition = self.evaluate(node.condition, env)
            if is_error(condition):
                return condition
            if is_truthy(condition):
                return self._eval_block(node.consequence, env.enclosed())
            if node.alternative is not None:
                return self._eval_block(node.alternative, env.enclosed())
            return NULL

        elif isinstance(node, CallExpression):
            function = self.evaluate(node.function, env)
            if is_error(function):
                return function
            args = self._eval_expressions(node.arguments, env)
            if len(args) == 1 and is_error(args[0]):
                return args[0]
            return self.apply_function(function, args)

        elif isinstance(node, IndexExpression):
            left = self.evaluate(node.left, env)
            if is_error(left):
                return left
            index = self.evaluate(node.index, env)
            if is_error(index):
                return index
            return self._eval_index(left, index)

        elif isinstance(node, RangeExpression):
            left = self.evaluate(node.left, env)
            if is_error(left):
                return left
            start = self.evaluate(node.start, env)
            if is_error(start):
                return start
            end = self.evaluate(node.end, env)
            if is_error(end):
                return end
            return self._eval_range(left, start, end)

        else:
            raise MonkeyError(E_INTERNAL_ERROR, f"Unknown AST node type: {type(node).__name__}")

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _eval_block(self, block: BlockStatement, env: Environment) -> Object:
        """Evaluate statements in order, stopping at a return or an error"""
        result: Object = NULL
        for stmt in block.statements:
            result = self.evaluate(stmt, env)
            if isinstance(result, (ReturnValue, Error)):
                return result
        return result

    def _eval_while(self, node: WhileStatement, env: Environment) -> Object:
        while True:
            condition = self.evaluate(node.condition, env)
            if is_error(condition):
                return condition
            if not is_truthy(condition):
                return NULL

            # Each iteration gets a fresh scope for its own let bindings
            result = self._eval_block(node.body, env.enclosed())
            if isinstance(result, (ReturnValue, Error)):
                return result

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _eval_expressions(self, exprs, env: Environment) -> List[Object]:
        """Evaluate left to right; on the first Error return just [error]"""
        values = []
        for expr in exprs:
            value = self.evaluate(expr, env)
            if is_error(value):
                return [value]
            values.append(value)
        return values

    def _eval_identifier(self, node: Identifier, env: Environment) -> Object:
        value = env.get(node.value)
        if value is not None:
            return value
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        return Error(f"identifier not found: {node.value}")

    def _eval_hash_literal(self, node: HashLiteral, env: Environment) -> Object:
        result = Hash()
        for key_node, value_node in node.pairs:
            key = self.evaluate(key_node, env)
            if is_error(key):
                return key
            if hash_key(key) is None:
                return Error(f"unusable as hash key: {key.type_name}")

            value = self.evaluate(value_node, env)
            if is_error(value):
                return value
            result.set(key, value)
        return result

    def _eval_prefix(self, operator: str, right: Object) -> Object:
        if operator == '!':
            return native_bool(not is_truthy(right))
        if operator == '-' and isinstance(right, Integer):
            return _checked_integer(-right.value)
        return Error(f"unknown operator: {operator}{right.type_name}")

    def _eval_infix(self, operator: str, left: Object, right: Object) -> Object:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return _eval_integer_infix(operator, left.value, right.value)
        if operator == '==':
            return native_bool(_values_equal(left, right))
        if operator == '!=':
            return native_bool(not _values_equal(left, right))
        if left.type_name != right.type_name:
            return Error(f"type mismatch: {left.type_name} {operator} {right.type_name}")
        if isinstance(left, String) and isinstance(right, String):
            return _eval_string_infix(operator, left.value, right.value)
        return Error(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def _eval_index(self, left: Object, index: Object) -> Object:
        if isinstance(left, Hash):
            if hash_key(index) is None:
                return Error(f"unusable as hash key: {index.type_name}")
            value = left.get(index)
            return value if value is not None else NULL

        if isinstance(left, (Array, String)):
            if not isinstance(index, Integer):
                return Error(f"index must be INTEGER, got {index.type_name}")
            items = left.elements if isinstance(left, Array) else left.value
            i = index.value
            if i < 0 or i >= len(items):
                return Error(f"index out of range: {i}")
            return items[i] if isinstance(left, Array) else String(items[i])

        return Error(f"index operator not supported: {left.type_name}")

    def _eval_range(self, left: Object, start: Object, end: Object) -> Object:
        """Slice an array or string; both bounds are clamped to [0, len]"""
        if not isinstance(left, (Array, String)):
            return Error(f"index operator not supported: {left.type_name}")
        for bound in (start, end):
            if not isinstance(bound, Integer):
                return Error(f"range bounds must be INTEGER, got {bound.type_name}")

        items = left.elements if isinstance(left, Array) else left.value
        lo = min(max(start.value, 0), len(items))
        hi = min(max(end.value, 0), len(items))
        if lo > hi:
            lo = hi

        if isinstance(left, Array):
            return Array(items[lo:hi])
        return String(items[lo:hi])

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def apply_function(self, function: Object, args: List[Object]) -> Object:
        """
        Call a user function or a built-in with evaluated arguments

        Args:
            function: Callee value
            args: Argument values, left to right

        Returns:
            The call's result (a returned value is unwrapped) or an Error
        """
        if isinstance(function, Function):
            if len(args) != len(function.parameters):
                return Error(f"wrong number of arguments: expected "
                             f"{len(function.parameters)}, got {len(args)}")

            logger.debug("Calling fn(%s) with %d argument(s)", ", ".join(function.parameters), len(args))
            call_env = function.env.enclosed()
            for name, value in zip(function.parameters, args):
                call_env.define(name, value)

            result = self._eval_block(function.body, call_env)
            if isinstance(result, ReturnValue):
                return result.value
            return result

        if isinstance(function, Builtin):
            logger.debug("Calling builtin %s with %d argument(s)", function.name, len(args))
            return function.fn(args, self.output)

        return Error(f"not a function: {function.type_name}")


# ============================================================================
# Operator Helpers
# ============================================================================

def _checked_integer(value: int) -> Object:
    if value < INT_MIN or value > INT_MAX:
        return Error("integer overflow")
    return Integer(value)


def _eval_integer_infix(operator: str, left: int, right: int) -> Object:
    if operator == '+':
        return _checked_integer(left + right)
    elif operator == '-':
        return _checked_integer(left - right)
    elif operator == '*':
        return _checked_integer(left * right)
    elif operator == '/':
        if right == 0:
            return Error("division by zero")
        # Truncate toward zero
        quotient = abs(left) // abs(right)
        if (left < 0) != (right < 0):
            quotient = -quotient
        return _checked_integer(quotient)
    elif operator == '<':
        return native_bool(left < right)
    elif operator == '>':
        return native_bool(left > right)
    elif operator == '==':
        return native_bool(left == right)
    elif operator == '!=':
        return native_bool(left != right)
    else:
        return Error(f"unknown operator: INTEGER {operator} INTEGER")


def _eval_string_infix(operator: str, left: str, right: str) -> Object:
    if operator == '+':
        return String(left + right)
    elif operator == '<':
        return native_bool(left < right)
    elif operator == '>':
        return native_bool(left > right)
    else:
        return Error(f"unknown operator: STRING {operator} STRING")


def _values_equal(left: Object, right: Object) -> bool:
    """Scalars compare by value, containers and functions by identity"""
    if left.type_name != right.type_name:
        return False
    if isinstance(left, (Integer, String, Boolean)):
        return left.value == right.value
    if isinstance(left, Null):
        return True
    return left is right
