"""Terms of an expression tree that are resolved when the tree is evaluated."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping

from galexpr.config import TreeConfig
from galexpr.objects import ObjectValue, object_get_method, object_get_property
from galexpr.operators import Operator, calculate
from galexpr.values import Undefined, Value

if TYPE_CHECKING:
    from galexpr.tree import Tree

FunctionalValue = Callable[..., Value]


def _combine(val: Any, op: Operator, rhs: Value) -> Value:
    """Apply ``op`` between the pending left-hand value and ``rhs``."""
    if isinstance(rhs, Undefined) or val is None:
        return rhs
    return calculate(val, op, rhs)


def _type_name(value: Any) -> str:
    return type(value).__name__


@dataclass
class Function:
    """A call to a built-in or user-defined function, with its argument trees."""

    name: str
    body_fn: FunctionalValue | None = None
    args: list[Tree] = field(default_factory=list)
    receiver: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        self.args = list(self.args)

    def calculate(self, val: Any, op: Operator, cfg: TreeConfig) -> Value:
        """Evaluate the call and combine it with the pending left-hand value."""
        fn = self if self.body_fn is not None else replace(self, body_fn=cfg.function(self.name))
        return _combine(val, op, fn.eval(cfg.variables, cfg.functions, cfg.objects))

    def eval(
        self,
        variables: Mapping[str, Value] | None = None,
        functions: Mapping[str, FunctionalValue] | None = None,
        objects: Mapping[str, Any] | None = None,
    ) -> Value:
        """Evaluate the arguments and call the function body with them."""
        body = self.body_fn
        if self.receiver is not None:
            body, ok = object_get_method(self.receiver, self.name)
            if not ok:
                return Undefined(
                    f"unknown method '{self.name}' for receiver '{_type_name(self.receiver)}'"
                )

        args = [arg.eval(variables, functions, objects) for arg in self.args]

        if body is None:
            return Undefined(f"unknown function '{self.name}'")
        return body(*args)

    def __str__(self) -> str:
        args = ", ".join(str(arg).rstrip("\n") for arg in self.args)
        return f"{self.name}({args})"


@dataclass
class DotFunction:
    """A method call on the value produced by the preceding term."""

    function: Function

    @property
    def name(self) -> str:
        return self.function.name

    def calculate(self, val: Any, cfg: TreeConfig) -> Value:
        """Call the method on ``val`` and return the outcome."""
        fn = self.function
        if fn.body_fn is not None:
            return Undefined(
                f"internal error: DotFunction for '{fn.name}': BodyFn is not empty: this indicates "
                "the object's method was confused for a build-in function"
            )
        if not isinstance(val, Value):
            return Undefined(
                f"syntax error: DotFunction called on non-object: [object: '{_type_name(val)}'] "
                f"[member: '{fn.name}'] (check if the receiver is nil)"
            )

        receiver = val.obj if isinstance(val, ObjectValue) else val
        body, ok = object_get_method(receiver, fn.name)
        if not ok:
            return body()
        return replace(fn, body_fn=body).eval(cfg.variables, cfg.functions, cfg.objects)

    def __str__(self) -> str:
        return str(self.function)


@dataclass
class Variable:
    """A reference to a user-defined variable, such as ``:name:``."""

    name: str

    def calculate(self, val: Any, op: Operator, cfg: TreeConfig) -> Value:
        """Look up the variable and combine it with the pending left-hand value."""
        return _combine(val, op, cfg.variable(self.name))

    def __str__(self) -> str:
        return self.name


@dataclass
class DotVariable:
    """A property access on the value produced by the preceding term."""

    variable: Variable

    @property
    def name(self) -> str:
        return self.variable.name

    def calculate(self, val: Any) -> Value:
        """Return the property of ``val``."""
        if not isinstance(val, Value):
            return Undefined(
                f"syntax error: DotVariable called on non-object: [object: '{_type_name(val)}'] "
                f"[member: '{self.name}'] (check if the receiver is nil)"
            )
        receiver = val.obj if isinstance(val, ObjectValue) else val
        return object_get_property(receiver, self.name)

    def __str__(self) -> str:
        return str(self.variable)


@dataclass
class ObjectProperty:
    """A property of a user-provided object, such as ``car.Speed``."""

    object_name: str
    property_name: str

    def calculate(self, val: Any, op: Operator, cfg: TreeConfig) -> Value:
        """Read the property and combine it with the pending left-hand value."""
        return _combine(val, op, cfg.object_property(self))

    def __str__(self) -> str:
        return f"{self.object_name}.{self.property_name}"


@dataclass
class ObjectMethod:
    """A method call on a user-provided object, such as ``car.Speed()``."""

    object_name: str
    method_name: str
    args: list[Tree] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.args = list(self.args)

    def calculate(self, val: Any, op: Operator, cfg: TreeConfig) -> Value:
        """Call the method and combine its outcome with the pending left-hand value."""
        fn = Function(self.method_name, cfg.object_method(self), self.args)
        return _combine(val, op, fn.eval(cfg.variables, cfg.functions, cfg.objects))

    def __str__(self) -> str:
        return f"{self.object_name}.{self.method_name}"