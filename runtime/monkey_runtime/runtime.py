"""
Monkey Runtime - Execution Interface

Ties the pipeline together: source text is lexed, parsed and evaluated against
one global environment that persists across execute() calls, so a runtime can
be fed a program piece by piece.

Syntax Examples:
    let x = 42;
    let add = fn(a, b) { a + b };
    let items = [1, 2, 3];
    let data = {"name": "Alice", "age": 30};
    print(add(x, len(items)));
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Tuple

from .ast_nodes import Program
from .environment import Environment
from .errors import E_INVALID_INPUT, MonkeyError, MonkeyParseError, ParseError
from .evaluator import Evaluator
from .lexer import Lexer
from .objects import Object, from_python
from .parser import Parser


logger = logging.getLogger(__name__)


class MonkeyRuntime:
    """Main Monkey runtime interface"""

    def __init__(self, output: Optional[TextIO] = None):
        self.evaluator = Evaluator(output=output)
        self.env = Environment()

    def parse(self, source: str) -> Tuple[Program, List[ParseError]]:
        """
        Parse source without evaluating it

        Returns:
            The program and the list of parse errors (empty on success)
        """
        parser = Parser(Lexer(source))
        program = parser.parse_program()
        return program, parser.errors

    def execute(self, source: str) -> Object:
        """
        Execute Monkey source code

        Args:
            source: Monkey source code

        Returns:
            Final value of the program. Runtime failures come back as an
            Error value, not as an exception.

        Raises:
            MonkeyParseError: If the source has syntax errors
        """
        program, errors = self.parse(source)
        if errors:
            logger.debug("Rejecting source with %d parse error(s)", len(errors))
            raise MonkeyParseError(errors)

        logger.debug("Evaluating %d statement(s)", len(program.statements))
        return self.evaluator.eval_program(program, self.env)

    def execute_file(self, path: str) -> Object:
        """Execute a Monkey source file"""
        file_path = Path(path)
        if not file_path.is_file():
            raise MonkeyError(E_INVALID_INPUT, f"Source file not found: {path}")
        return self.execute(file_path.read_text(encoding='utf-8'))

    def set_var(self, name: str, value: Any):
        """Set variable in the global environment (host values are converted)"""
        self.env.define(name, from_python(value))

    def get_var(self, name: str) -> Object:
        """Get variable from the global environment"""
        if not self.env.contains(name):
            raise MonkeyError(E_INVALID_INPUT, f"identifier not found: {name}")
        return self.env.get(name)

    def get_env(self) -> Dict[str, Object]:
        """Get a copy of the global bindings"""
        return {name: self.env.get(name) for name in self.env.names()}

    def clear_env(self):
        """Drop every global binding (built-ins stay available)"""
        self.env = Environment()


# ============================================================================
# Convenience Function
# ============================================================================

def execute_monkey(source: str, output: Optional[TextIO] = None) -> Object:
    """
    Execute Monkey source code (convenience function)

    Args:
        source: Monkey source code
        output: Stream for print/puts, defaults to sys.stdout

    Returns:
        Result of evaluation

    Example:
        >>> execute_monkey('1 + 2 * 3').inspect()
        '7'
        >>> execute_monkey('let f = fn(x) { x * x }; f(5)').to_python()
        25
    """
    runtime = MonkeyRuntime(output=output)
    return runtime.execute(source)


if __name__ == "__main__":
    demo = MonkeyRuntime()
    print(demo.execute('let mk = fn(n) { fn(m) { n + m } }; mk(5)(3)').inspect())
    print(demo.execute('let arr = [1, 2, 3]; push(arr, 4); arr[1:3]').inspect())
    print(demo.execute('{"a": 1}["b"]').inspect())
