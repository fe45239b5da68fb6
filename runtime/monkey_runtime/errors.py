"""
Monkey Runtime - Error Definitions

Host-side errors only. Runtime failures inside a Monkey program are values
(see objects.Error) and never surface as Python exceptions.
"""

from dataclasses import dataclass
from typing import List


# ============================================================================
# Error Codes
# ============================================================================

E_PARSE_ERROR = "E_PARSE_ERROR"
E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
E_INVALID_INPUT = "E_INVALID_INPUT"


class MonkeyError(Exception):
    """Base exception for Monkey runtime errors"""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


# ============================================================================
# Parse Errors
# ============================================================================

@dataclass(frozen=True)
class ParseError:
    """A single syntax error collected by the parser"""
    message: str
    line: int
    column: int

    def __str__(self):
        return f"line {self.line}, column {self.column}: {self.message}"


class MonkeyParseError(MonkeyError):
    """Raised by the runtime facade when a source text has syntax errors"""

    def __init__(self, errors: List[ParseError]):
        self.errors = list(errors)
        summary = "; ".join(str(err) for err in self.errors)
        super().__init__(E_PARSE_ERROR, f"{len(self.errors)} parse error(s): {summary}")
