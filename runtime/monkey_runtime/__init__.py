"""
Monkey Runtime - Interpreter for the Monkey language

**Front End:**
- Lexer: Source text to tokens (lazy, restartable)
- Parser: Pratt parser producing an AST, collecting every syntax error

**Back End:**
- Evaluator: Tree walker over a chain of Environments
- Built-ins: len, print, puts, push, pop, insert, delete, keys, is_null, type, sleep

**Tooling:**
- Diagnostics: Coloured error rendering with source carets

Version: 1.0.0
"""

import logging

__version__ = '1.0.0'

# The library logs at DEBUG only; output is up to the host application
logging.getLogger(__name__).addHandler(logging.NullHandler())

# ============================================================================
# Errors
# ============================================================================

from .errors import (
    E_PARSE_ERROR, E_INTERNAL_ERROR, E_INVALID_INPUT,
    MonkeyError, MonkeyParseError, ParseError,
)

# ============================================================================
# Front End
# ============================================================================

from .tokens import Token, TokenType, KEYWORDS
from .lexer import Lexer, tokenize
from .parser import Parser, parse
from .ast_nodes import Program

# ============================================================================
# Values and Evaluation
# ============================================================================

from .objects import (
    Object, Integer, String, Boolean, Null, Array, Hash, Function, Builtin,
    ReturnValue, Error, TRUE, FALSE, NULL, INT_MIN, INT_MAX,
    from_python,
)
from .environment import Environment
from .builtin_functions import BUILTINS
from .evaluator import Evaluator
from .runtime import MonkeyRuntime, execute_monkey

# ============================================================================
# Diagnostics
# ============================================================================

from .diagnostics import format_parse_errors, format_runtime_error


# ============================================================================
# Exports
# ============================================================================

__all__ = [
    # Errors
    'E_PARSE_ERROR', 'E_INTERNAL_ERROR', 'E_INVALID_INPUT',
    'MonkeyError', 'MonkeyParseError', 'ParseError',
    # Front end
    'Token', 'TokenType', 'KEYWORDS', 'Lexer', 'tokenize', 'Parser', 'parse', 'Program',
    # Values
    'Object', 'Integer', 'String', 'Boolean', 'Null', 'Array', 'Hash',
    'Function', 'Builtin', 'ReturnValue', 'Error', 'TRUE', 'FALSE', 'NULL',
    'INT_MIN', 'INT_MAX', 'from_python',
    # Evaluation
    'Environment', 'BUILTINS', 'Evaluator', 'MonkeyRuntime', 'execute_monkey',
    # Diagnostics
    'format_parse_errors', 'format_runtime_error',
]
