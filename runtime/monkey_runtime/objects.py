"""
Monkey Runtime - Value Model

Runtime values produced and consumed by the evaluator.

Integer, String, Boolean and Null compare by value. Array, Hash, Function and
Builtin compare by identity: arrays and hashes are mutated in place and shared
between every binding that aliases them.

ReturnValue and Error are control-flow carriers. The evaluator propagates them
straight up and never stores them in arrays, hashes or bindings.
"""

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TextIO, Tuple

from .errors import E_INVALID_INPUT, MonkeyError

if TYPE_CHECKING:
    from .ast_nodes import BlockStatement
    from .environment import Environment


# Integers are signed 64-bit
INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1

# Host stack depth allowed while evaluating or walking nested values. A Monkey
# call costs roughly ten Python frames.
RECURSION_LIMIT = 10_000


@contextmanager
def recursion_headroom(limit: int = RECURSION_LIMIT):
    """Raise the interpreter recursion limit to at least limit, restoring it on exit"""
    previous = sys.getrecursionlimit()
    if previous < limit:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class ObjectType:
    """Object type names, as shown in error messages"""
    INTEGER = "INTEGER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    ARRAY = "ARRAY"
    HASH = "HASH"
    FUNCTION = "FUNCTION"
    BUILTIN = "BUILTIN"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"


HashKey = Tuple[str, Any]


class Object:
    """Base class for runtime values"""
    type_name = ""

    def inspect(self) -> str:
        raise NotImplementedError

    def to_python(self) -> Any:
        """Convert to the closest host value"""
        return self

    def __str__(self):
        return self.inspect()


# ============================================================================
# Scalars
# ============================================================================

@dataclass(frozen=True)
class Integer(Object):
    value: int
    type_name = ObjectType.INTEGER

    def inspect(self) -> str:
        return str(self.value)

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class String(Object):
    value: str
    type_name = ObjectType.STRING

    def inspect(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class Boolean(Object):
    value: bool
    type_name = ObjectType.BOOLEAN

    def inspect(self) -> str:
        return "true" if self.value else "false"

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class Null(Object):
    type_name = ObjectType.NULL

    def inspect(self) -> str:
        return "null"

    def to_python(self) -> None:
        return None


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


# ============================================================================
# Containers
# ============================================================================

def _nested_inspect(obj: Object, seen: set) -> str:
    """Inspect a value inside a container: strings quoted, cycles elided"""
    if isinstance(obj, String):
        escaped = obj.value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(obj, (Array, Hash)):
        if id(obj) in seen:
            return "[...]" if isinstance(obj, Array) else "{...}"
        return obj._inspect(seen | {id(obj)})
    return obj.inspect()


@dataclass(eq=False)
class Array(Object):
    elements: List[Object] = field(default_factory=list)
    type_name = ObjectType.ARRAY

    def inspect(self) -> str:
        with recursion_headroom():
            return self._inspect({id(self)})

    def _inspect(self, seen: set) -> str:
        return "[" + ", ".join(_nested_inspect(e, seen) for e in self.elements) + "]"

    def to_python(self) -> list:
        with recursion_headroom():
            return [e.to_python() for e in self.elements]


@dataclass(eq=False)
class Hash(Object):
    """Mapping from hash key to (key object, value object)"""
    pairs: Dict[HashKey, Tuple[Object, Object]] = field(default_factory=dict)
    type_name = ObjectType.HASH

    def get(self, key: Object) -> Optional[Object]:
        pair = self.pairs.get(hash_key(key))
        return pair[1] if pair is not None else None

    def set(self, key: Object, value: Object):
        self.pairs[hash_key(key)] = (key, value)

    def delete(self, key: Object) -> Optional[Object]:
        pair = self.pairs.pop(hash_key(key), None)
        return pair[1] if pair is not None else None

    def keys(self) -> List[Object]:
        return [key for key, _ in self.pairs.values()]

    def inspect(self) -> str:
        with recursion_headroom():
            return self._inspect({id(self)})

    def _inspect(self, seen: set) -> str:
        items = (f"{_nested_inspect(k, seen)}: {_nested_inspect(v, seen)}"
                 for k, v in self.pairs.values())
        return "{" + ", ".join(items) + "}"

    def to_python(self) -> dict:
        with recursion_headroom():
            return {k.to_python(): v.to_python() for k, v in self.pairs.values()}


# ============================================================================
# Callables
# ============================================================================

@dataclass(eq=False)
class Function(Object):
    """User-defined function: parameters, shared body, captured environment"""
    parameters: List[str]
    body: "BlockStatement"
    env: "Environment"
    type_name = ObjectType.FUNCTION

    def inspect(self) -> str:
        return f"fn({', '.join(self.parameters)}) {self.body}"


BuiltinFn = Callable[[List[Object], TextIO], Object]


@dataclass(eq=False)
class Builtin(Object):
    """Native function. Called with the evaluated arguments and the output stream."""
    name: str
    fn: BuiltinFn
    type_name = ObjectType.BUILTIN

    def inspect(self) -> str:
        return f"builtin function {self.name}"


# ============================================================================
# Control-flow carriers
# ============================================================================

@dataclass(eq=False)
class ReturnValue(Object):
    value: Object
    type_name = ObjectType.RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(eq=False)
class Error(Object):
    message: str
    type_name = ObjectType.ERROR

    def inspect(self) -> str:
        return f"ERROR: {self.message}"


# ============================================================================
# Helpers
# ============================================================================

def hash_key(obj: Object) -> Optional[HashKey]:
    """Return the hash key for obj, or None if obj cannot be a hash key"""
    if isinstance(obj, (Integer, String, Boolean)):
        return (obj.type_name, obj.value)
    return None


def is_hashable(obj: Object) -> bool:
    return hash_key(obj) is not None


def is_error(obj: Optional[Object]) -> bool:
    return isinstance(obj, Error)


def is_truthy(obj: Object) -> bool:
    """Everything except false and null is truthy"""
    if isinstance(obj, Boolean):
        return obj.value
    return not isinstance(obj, Null)


def native_bool(value: bool) -> Boolean:
    return TRUE if value else FALSE


def from_python(value: Any) -> Object:
    """
    Convert a host value into a runtime value

    Args:
        value: None, bool, int, str, list/tuple, dict, or an Object

    Returns:
        The equivalent Object

    Raises:
        MonkeyError: If the value has no runtime equivalent
    """
    if isinstance(value, Object):
        return value
    if value is None:
        return NULL
    if isinstance(value, bool):
        return native_bool(value)
    if isinstance(value, int):
        if not INT_MIN <= value <= INT_MAX:
            raise MonkeyError(E_INVALID_INPUT, f"integer {value} does not fit in 64 bits")
        return Integer(value)
    if isinstance(value, str):
        return String(value)
    if isinstance(value, (list, tuple)):
        return Array([from_python(v) for v in value])
    if isinstance(value, dict):
        result = Hash()
        for k, v in value.items():
            key = from_python(k)
            if not is_hashable(key):
                raise MonkeyError(E_INVALID_INPUT, f"unusable as hash key: {key.type_name}")
            result.set(key, from_python(v))
        return result
    raise MonkeyError(E_INVALID_INPUT, f"cannot convert {type(value).__name__} to a Monkey value")
