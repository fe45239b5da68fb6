"""Human-readable rendering of parse and runtime errors.

Parse errors are shown with the offending source line and a caret under the
reported column. Colours come from termcolor and can be switched off with
color=False (termcolor also honours NO_COLOR and non-tty output on its own).
"""

from typing import Iterable, List

from termcolor import colored

from .errors import MonkeyParseError, ParseError
from .objects import Error


ERROR = "red"


def _paint(text, color, enabled, bold=True):
    if not enabled:
        return text
    return colored(text, color, attrs=["bold"] if bold else None)


def _source_line(source: str, line: int) -> str:
    lines = source.splitlines()
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""


def diagnose(source: str, error: ParseError, color=True) -> str:
    """Returns the offending line with a caret under error.column."""
    text = _source_line(source, error.line)
    caret_at = max(error.column - 1, 0)
    # Keep tabs in the padding so the caret lines up under tabbed source
    padding = "".join(ch if ch == "\t" else " " for ch in text[:caret_at])
    padding += " " * (caret_at - len(text[:caret_at]))
    return "  " + text + "\n" + "  " + padding + _paint("^", ERROR, color)


def format_parse_error(source: str, error: ParseError, path="<input>", color=True) -> str:
    """Formats one parse error as 'path:line:col: error: message' plus diagnosis."""
    location = _paint(f"{path}:{error.line}:{error.column}: ", None, color)
    header = location + _paint("error: ", ERROR, color) + error.message
    return header + "\n" + diagnose(source, error, color)


def format_parse_errors(source: str, errors: Iterable[ParseError], path="<input>", color=True) -> str:
    rendered: List[str] = [format_parse_error(source, err, path, color) for err in errors]
    return "\n".join(rendered)


def format_exception(exc: MonkeyParseError, source: str, path="<input>", color=True) -> str:
    """Formats every error carried by a MonkeyParseError."""
    return format_parse_errors(source, exc.errors, path, color)


def format_runtime_error(error: Error, path="<input>", color=True) -> str:
    """Runtime errors carry no position, only the message."""
    return _paint(f"{path}: ", None, color) + _paint("error: ", ERROR, color) + error.message
