"""
Monkey Runtime - Built-in Functions

Native functions available to every program. The registry is built once at
import time and exposed read-only; the evaluator consults it after the
environment chain, so a user binding of the same name shadows a built-in.

Every built-in is called as fn(args, output) with already-evaluated arguments
and the runtime's output stream, and reports misuse by returning an Error value.
"""

import time
from types import MappingProxyType
from typing import List, Mapping, Optional, TextIO

from .objects import (
    NULL, Array, Builtin, Error, Hash, Integer, Null, Object, ObjectType,
    String, hash_key, native_bool,
)


def _check_arity(args: List[Object], want: int) -> Optional[Error]:
    if len(args) != want:
        return Error(f"wrong number of arguments. got={len(args)}, want={want}")
    return None


def _expect_type(name: str, position: str, arg: Object, expected: str) -> Optional[Error]:
    if arg.type_name != expected:
        return Error(f"{position} argument to `{name}` must be {expected}, got {arg.type_name}")
    return None


# ============================================================================
# Built-in Implementations
# ============================================================================

def _len(args: List[Object], output: TextIO) -> Object:
    """Length of a string, array or hash"""
    err = _check_arity(args, 1)
    if err:
        return err
    arg = args[0]
    if isinstance(arg, String):
        return Integer(len(arg.value))
    if isinstance(arg, Array):
        return Integer(len(arg.elements))
    if isinstance(arg, Hash):
        return Integer(len(arg.pairs))
    return Error(f"argument to `len` not supported, got {arg.type_name}")


def _print(args: List[Object], output: TextIO) -> Object:
    """Write arguments separated by spaces, without a trailing newline"""
    output.write(" ".join(arg.inspect() for arg in args))
    return NULL


def _puts(args: List[Object], output: TextIO) -> Object:
    """Write each argument on its own line"""
    for arg in args:
        output.write(arg.inspect() + "\n")
    return NULL


def _push(args: List[Object], output: TextIO) -> Object:
    """Append to an array in place and return the same array"""
    err = _check_arity(args, 2) or _expect_type("push", "first", args[0], ObjectType.ARRAY)
    if err:
        return err
    array = args[0]
    array.elements.append(args[1])
    return array


def _pop(args: List[Object], output: TextIO) -> Object:
    """Remove and return the last element, or null for an empty array"""
    err = _check_arity(args, 1) or _expect_type("pop", "first", args[0], ObjectType.ARRAY)
    if err:
        return err
    array = args[0]
    if not array.elements:
        return NULL
    return array.elements.pop()


def _insert(args: List[Object], output: TextIO) -> Object:
    """Set a key in place and return the same hash"""
    err = _check_arity(args, 3) or _expect_type("insert", "first", args[0], ObjectType.HASH)
    if err:
        return err
    hash_obj, key, value = args
    if hash_key(key) is None:
        return Error(f"unusable as hash key: {key.type_name}")
    hash_obj.set(key, value)
    return hash_obj


def _delete(args: List[Object], output: TextIO) -> Object:
    """Remove a key and return its value, or null if it was absent"""
    err = _check_arity(args, 2) or _expect_type("delete", "first", args[0], ObjectType.HASH)
    if err:
        return err
    hash_obj, key = args
    if hash_key(key) is None:
        return Error(f"unusable as hash key: {key.type_name}")
    removed = hash_obj.delete(key)
    return removed if removed is not None else NULL


def _keys(args: List[Object], output: TextIO) -> Object:
    err = _check_arity(args, 1) or _expect_type("keys", "first", args[0], ObjectType.HASH)
    if err:
        return err
    return Array(args[0].keys())


def _is_null(args: List[Object], output: TextIO) -> Object:
    err = _check_arity(args, 1)
    if err:
        return err
    return native_bool(isinstance(args[0], Null))


def _type(args: List[Object], output: TextIO) -> Object:
    err = _check_arity(args, 1)
    if err:
        return err
    return String(args[0].type_name)


def _sleep(args: List[Object], output: TextIO) -> Object:
    """Block the thread for the given number of milliseconds"""
    err = _check_arity(args, 1)
    if err:
        return err
    arg = args[0]
    if not isinstance(arg, Integer):
        return Error(f"argument to `sleep` must be INTEGER, got {arg.type_name}")
    if arg.value < 0:
        return Error(f"argument to `sleep` must be non-negative, got {arg.value}")
    time.sleep(arg.value / 1000)
    return NULL


# ============================================================================
# Registry
# ============================================================================

def _build_registry() -> Mapping[str, Builtin]:
    functions = {
        'len': _len,
        'print': _print,
        'puts': _puts,
        'push': _push,
        'pop': _pop,
        'insert': _insert,
        'delete': _delete,
        'keys': _keys,
        'is_null': _is_null,
        'type': _type,
        'sleep': _sleep,
    }
    return MappingProxyType({name: Builtin(name, fn) for name, fn in functions.items()})


BUILTINS: Mapping[str, Builtin] = _build_registry()
