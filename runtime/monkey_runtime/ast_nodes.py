"""
Monkey Runtime - AST Nodes

Statements and expressions produced by the parser and consumed by the
evaluator. Each node keeps the token that introduced it and renders back to
canonical source through str(); infix and prefix expressions are fully
parenthesised so the parsed precedence is visible.

A child that failed to parse is left as None; such trees are only produced
alongside parse errors and are never evaluated.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .tokens import Token


def _render(node) -> str:
    return "" if node is None else str(node)


# ============================================================================
# Base Nodes
# ============================================================================

@dataclass
class Node:
    """Base AST node"""
    token: Token

    def token_literal(self) -> str:
        return self.token.literal


@dataclass
class Statement(Node):
    """Base class for statements"""


@dataclass
class Expression(Node):
    """Base class for expressions"""


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class Identifier(Expression):
    """Variable reference"""
    value: str

    def __str__(self):
        return self.value


@dataclass
class IntegerLiteral(Expression):
    value: int

    def __str__(self):
        return str(self.value)


@dataclass
class StringLiteral(Expression):
    value: str

    def __str__(self):
        escaped = self.value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'


@dataclass
class BooleanLiteral(Expression):
    value: bool

    def __str__(self):
        return "true" if self.value else "false"


@dataclass
class NullLiteral(Expression):

    def __str__(self):
        return "null"


@dataclass
class PrefixExpression(Expression):
    """Unary operation: -x, !x"""
    operator: str
    right: Optional[Expression] = None

    def __str__(self):
        return f"({self.operator}{_render(self.right)})"


@dataclass
class InfixExpression(Expression):
    """Binary operation"""
    left: Optional[Expression]
    operator: str
    right: Optional[Expression] = None

    def __str__(self):
        return f"({_render(self.left)} {self.operator} {_render(self.right)})"


@dataclass
class AssignmentExpression(Expression):
    """Rebinding of an existing name: x = value"""
    name: Identifier
    value: Optional[Expression] = None

    def __str__(self):
        return f"{self.name} = {_render(self.value)}"


@dataclass
class IfExpression(Expression):
    condition: Optional[Expression]
    consequence: "BlockStatement"
    alternative: Optional["BlockStatement"] = None

    def __str__(self):
        out = f"if ({_render(self.condition)}) {self.consequence}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


@dataclass
class FunctionLiteral(Expression):
    """Function literal. The body is shared by every closure created from it."""
    parameters: List[Identifier]
    body: "BlockStatement"

    def __str__(self):
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"


@dataclass
class CallExpression(Expression):
    function: Optional[Expression]
    arguments: List[Expression] = field(default_factory=list)

    def __str__(self):
        args = ", ".join(_render(a) for a in self.arguments)
        return f"{_render(self.function)}({args})"


@dataclass
class ArrayLiteral(Expression):
    elements: List[Expression] = field(default_factory=list)

    def __str__(self):
        return "[" + ", ".join(_render(e) for e in self.elements) + "]"


@dataclass
class HashLiteral(Expression):
    """Hash literal. Pairs keep source order."""
    pairs: List[Tuple[Expression, Expression]] = field(default_factory=list)

    def __str__(self):
        return "{" + ", ".join(f"{_render(k)}: {_render(v)}" for k, v in self.pairs) + "}"


@dataclass
class IndexExpression(Expression):
    left: Optional[Expression]
    index: Optional[Expression] = None

    def __str__(self):
        return f"({_render(self.left)}[{_render(self.index)}])"


@dataclass
class RangeExpression(Expression):
    """Range index: left[start:end]"""
    left: Optional[Expression]
    start: Optional[Expression] = None
    end: Optional[Expression] = None

    def __str__(self):
        return f"({_render(self.left)}[{_render(self.start)}:{_render(self.end)}])"


# ============================================================================
# Statements
# ============================================================================

@dataclass
class LetStatement(Statement):
    """Variable binding"""
    name: Identifier
    value: Optional[Expression] = None

    def __str__(self):
        return f"let {self.name} = {_render(self.value)};"


@dataclass
class ReturnStatement(Statement):
    return_value: Optional[Expression] = None

    def __str__(self):
        return f"return {_render(self.return_value)};"


@dataclass
class ExpressionStatement(Statement):
    expression: Optional[Expression] = None

    def __str__(self):
        return _render(self.expression)


@dataclass
class BlockStatement(Statement):
    """Block of statements"""
    statements: List[Statement] = field(default_factory=list)

    def __str__(self):
        if not self.statements:
            return "{ }"
        return "{ " + " ".join(str(s) for s in self.statements) + " }"


@dataclass
class WhileStatement(Statement):
    condition: Optional[Expression]
    body: BlockStatement

    def __str__(self):
        return f"while ({_render(self.condition)}) {self.body}"


@dataclass
class Program(Node):
    """Root node of every parsed source"""
    statements: List[Statement] = field(default_factory=list)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self):
        return " ".join(str(s) for s in self.statements)
