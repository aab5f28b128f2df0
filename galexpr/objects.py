"""Access to the properties and methods of user-provided objects."""

from __future__ import annotations

import inspect
import re
from decimal import Decimal
from itertools import chain, repeat
from typing import Any, Callable, Iterator

from galexpr.values import Undefined, Value, _python_to_value

FunctionalValue = Callable[..., Value]

_PLAIN_TYPES = (
    bool,
    int,
    float,
    complex,
    Decimal,
    str,
    bytes,
    bytearray,
    list,
    tuple,
    dict,
    set,
    frozenset,
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ObjectValue(Value):
    """Wraps a non-Value object so that member access can continue on it.

    Arithmetic, comparison and logic on it behave as for an undefined value.
    """

    def __init__(self, obj: Any) -> None:
        self.obj = obj

    def __str__(self) -> str:
        return f"ObjectValue({type(self.obj).__name__})"

    def __repr__(self) -> str:
        return f"ObjectValue({self.obj!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectValue):
            return NotImplemented
        return self.obj is other.obj or self.obj == other.obj

    __hash__ = None  # type: ignore[assignment]


def python_to_value(value: Any) -> Value:
    """Map a plain Python value to a Value; raise TypeError when impossible."""
    return _python_to_value(value)


def _type_name(obj: Any) -> str:
    return type(obj).__name__


def _is_object_like(value: Any) -> bool:
    return value is not None and not isinstance(value, _PLAIN_TYPES) and not inspect.isroutine(value)


def _member_names(name: str) -> Iterator[str]:
    yield name
    snake = _CAMEL_BOUNDARY.sub("_", name).lower()
    if snake != name:
        yield snake


_MISSING = object()


def _lookup(obj: Any, name: str, accept: Callable[[Any], bool]) -> Any:
    for candidate in _member_names(name):
        if candidate.startswith("_"):
            continue
        attr = getattr(obj, candidate, _MISSING)
        if attr is not _MISSING and accept(attr):
            return attr
    return _MISSING


def _wrap_result(value: Any, owner: str, name: str) -> Value:
    try:
        return python_to_value(value)
    except (TypeError, ValueError) as exc:
        if _is_object_like(value):
            return ObjectValue(value)
        return Undefined(f"object::{owner}:{name} - {exc}")


def object_get_property(obj: Any, name: str) -> Value:
    """Return the value of the property ``name`` of ``obj``."""
    owner = _type_name(obj)
    if obj is None:
        return Undefined(f"object is nil for type '{owner}'")
    if not _is_object_like(obj):
        return Undefined(f"object is '{owner}' but only objects with attributes are currently supported")

    attr = _lookup(obj, name, lambda a: not inspect.isroutine(a))
    if attr is _MISSING:
        return Undefined(f"property '{owner}:{name}' does not exist on object")
    return _wrap_result(attr, owner, name)


def _failing(reason: str) -> FunctionalValue:
    def call(*args: Value) -> Value:
        return Undefined(reason)

    return call


def _annotations(method: Any) -> dict[str, Any]:
    func = getattr(method, "__func__", method)
    hints = dict(getattr(func, "__annotations__", None) or {})
    hints.pop("return", None)
    return hints


def _expected_arity(method: Any) -> tuple[int | None, list[str]]:
    func = getattr(method, "__func__", method)
    code = getattr(func, "__code__", None)
    if code is None:
        return None, []
    positional = list(code.co_varnames[: code.co_argcount])
    if func is not method and getattr(method, "__self__", None) is not None and positional:
        positional = positional[1:]
    if code.co_flags & inspect.CO_VARARGS:
        return None, positional
    return len(positional), positional


def _as_number(item: Any, target: str) -> Any:
    as_number = getattr(item, "as_number", None)
    if not callable(as_number):
        raise TypeError(f"cannot use {_type_name(item)} as type {target}")
    return as_number()


def _convert(item: Any, ann: Any) -> Any:
    if ann is None:
        return item
    if ann in (int, "int"):
        return _as_number(item, "int").to_int()
    if ann in (float, "float"):
        return _as_number(item, "float").to_float()
    if ann in (Decimal, "Decimal"):
        return _as_number(item, "Decimal").value
    if ann in (str, "str"):
        if not isinstance(item, Value):
            raise TypeError(f"cannot use {_type_name(item)} as type str")
        return item.as_string().raw_string()
    if ann in (bool, "bool"):
        as_bool = getattr(item, "as_bool", None)
        if not callable(as_bool):
            raise TypeError(f"cannot use {_type_name(item)} as type bool")
        return as_bool().value
    if isinstance(ann, type) and ann is not object and not isinstance(item, ann):
        raise TypeError(f"cannot use {_type_name(item)} as type {ann.__name__}")
    return item


def object_get_method(obj: Any, name: str) -> tuple[FunctionalValue, bool]:
    """Return a callable for the method ``name`` of ``obj`` and whether it exists.

    When the method cannot be found, the callable returned yields an Undefined
    explaining why.
    """
    owner = _type_name(obj)
    if obj is None:
        return _failing(f"object is nil for type '{owner}'"), False

    method = _lookup(obj, name, inspect.isroutine)
    if method is _MISSING:
        return _failing(f"error: object type '{owner}' does not have a method '{name}'"), False

    expected, param_names = _expected_arity(method)
    hints = _annotations(method)
    param_anns = [hints.get(p) for p in param_names]
    prefix = f"invalid function call - object::{owner}:{name}"

    def call(*args: Value) -> Value:
        if expected is not None and len(args) != expected:
            return Undefined(f"{prefix} - wants {expected} args, received {len(args)} instead")
        try:
            call_args = [_convert(a, ann) for a, ann in zip(args, chain(param_anns, repeat(None)))]
            result = method(*call_args)
        except Exception as exc:
            return Undefined(f"{prefix} - invalid argument type passed to function - {exc}")

        if result is None:
            return Undefined(f"{prefix} - must return 1 value, returned 0 instead")
        if isinstance(result, tuple):
            if len(result) != 1:
                return Undefined(f"{prefix} - must return 1 value, returned {len(result)} instead")
            result = result[0]
        return _wrap_result(result, owner, name)

    return call, True