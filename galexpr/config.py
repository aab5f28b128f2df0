"""User-supplied variables, functions and objects used while evaluating a tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from galexpr.objects import object_get_method, object_get_property
from galexpr.values import Undefined, Value

FunctionalValue = Callable[..., Value]

_MISSING = object()


def _failing(reason: str) -> FunctionalValue:
    def call(*args: Value) -> Value:
        return Undefined(reason)

    return call


def _get(mapping: Mapping[str, Any] | None, name: str) -> Any:
    if mapping is None or name not in mapping:
        return _MISSING
    return mapping[name]


@dataclass
class TreeConfig:
    """Variables, functions and objects supplied for one evaluation."""

    variables: Mapping[str, Value] | None = None
    functions: Mapping[str, FunctionalValue] | None = None
    objects: Mapping[str, Any] | None = None

    def variable(self, name: str) -> Value:
        """Return the value of the variable ``name``."""
        val = _get(self.variables, name)
        if val is _MISSING:
            return Undefined(f"error: unknown user-defined variable '{name}'")
        return val

    def object_property(self, obj_prop: Any) -> Value:
        """Return the property named by ``obj_prop`` on the object it refers to."""
        obj = _get(self.objects, obj_prop.object_name)
        if obj is _MISSING:
            return Undefined(
                f"error: object property '{obj_prop.object_name}.{obj_prop.property_name}': "
                "unknown object"
            )
        return object_get_property(obj, obj_prop.property_name)

    def function(self, name: str) -> FunctionalValue:
        """Return the body of a user-defined function or of an ``object.method`` reference."""
        parts = name.split(".")
        if len(parts) == 2:
            obj = _get(self.objects, parts[0])
            if obj is not _MISSING:
                fn, _ = object_get_method(obj, parts[1])
                return fn
            return _failing(
                f"error: object reference '{name}' is not valid: unknown object or unknown method"
            )
        if len(parts) > 2:
            return _failing(
                f"syntax error: object reference '{name}' is not valid: "
                "too many dot accessors: max 1 permitted"
            )

        fn = _get(self.functions, name)
        if fn is _MISSING:
            return _failing(f"error: unknown user-defined function '{name}'")
        return fn

    def object_method(self, obj_method: Any) -> FunctionalValue:
        """Return the body of the method named by ``obj_method``."""
        return self._object_method(obj_method.object_name, obj_method.method_name)

    def _object_method(self, object_name: str, method_name: str) -> FunctionalValue:
        obj = _get(self.objects, object_name)
        if obj is _MISSING:
            return _failing(f"error: object '{object_name}' method '{method_name}': unknown object")
        fn, ok = object_get_method(obj, method_name)
        if ok:
            return fn
        return _failing(
            f"error: object '{object_name}' method '{method_name}': unknown or non-callable member "
            "(check if it has a pointer receiver)"
        )