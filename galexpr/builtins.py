"""Functions available in every expression without being supplied by the user."""

from __future__ import annotations

import math
from typing import Any, Callable

from galexpr.values import Number, Undefined, Value

FunctionalValue = Callable[..., Value]


def _number_of(value: Any) -> Number | None:
    as_number = getattr(value, "as_number", None)
    return as_number() if callable(as_number) else None


def _type_name(value: Any) -> str:
    return type(value).__name__


def _format_args(args: tuple[Value, ...]) -> str:
    return "[" + " ".join(str(a) for a in args) + "]"


def pi(*args: Value) -> Value:
    """Return the value of pi."""
    if args:
        return Undefined(f"pi() requires no argument, got {len(args)}")
    return Number.from_float(math.pi)


def factorial(*args: Value) -> Value:
    """Return the factorial of the single argument."""
    if len(args) != 1:
        return Undefined(f"factorial() requires 1 argument, got {len(args)}")
    n = _number_of(args[0])
    if n is None:
        return Undefined(f"factorial(): invalid argument type '{args[0]}'")
    return n.factorial()


def cos(*args: Value) -> Value:
    """Return the cosine of the single argument."""
    if len(args) != 1:
        return Undefined(f"cos() requires 1 argument, got {len(args)}")
    n = _number_of(args[0])
    if n is None:
        return Undefined(f"cos(): invalid argument type '{args[0]}'")
    return n.cos()


def sin(*args: Value) -> Value:
    """Return the sine of the single argument."""
    if len(args) != 1:
        return Undefined(f"sin() requires 1 argument, got {len(args)}")
    n = _number_of(args[0])
    if n is None:
        return Undefined(f"sin(): invalid argument type '{args[0]}'")
    return n.sin()


def tan(*args: Value) -> Value:
    """Return the tangent of the single argument."""
    if len(args) != 1:
        return Undefined(f"tan() requires 1 argument, got {len(args)}")
    n = _number_of(args[0])
    if n is None:
        return Undefined(f"tan(): invalid argument type '{args[0]}'")
    return n.tan()


def ln(*args: Value) -> Value:
    """Return the natural logarithm of the first argument to the precision given second."""
    if len(args) != 2:
        return Undefined(f"ln() requires 2 arguments, got {len(args)}")
    n = _number_of(args[0])
    p = _number_of(args[1])
    if n is not None and p is not None:
        return n.ln(p.to_int())
    return Undefined(f"ln(): invalid argument type '{args[0]}'")


def log(*args: Value) -> Value:
    """Return the base 10 logarithm of the first argument to the precision given second."""
    if len(args) != 2:
        return Undefined(f"log() requires 2 arguments, got {len(args)}")
    n = _number_of(args[0])
    p = _number_of(args[1])
    if n is not None and p is not None:
        return n.log(p.to_int())
    return Undefined(f"log(): invalid argument type '{args[0]}'")


def sqrt(*args: Value) -> Value:
    """Return the square root of the single argument."""
    if len(args) != 1:
        return Undefined(f"sqrt() requires 1 argument, got {len(args)}")
    n = _number_of(args[0])
    if n is None:
        return Undefined(f"sqrt(): invalid argument type '{_type_name(args[0])}'")
    return n.sqrt()


def floor(*args: Value) -> Value:
    """Return the floor of the single argument."""
    if len(args) != 1:
        return Undefined(f"floor() requires 1 argument, got {len(args)}")
    n = _number_of(args[0])
    if n is None:
        return Undefined(f"floor(): invalid argument type '{_type_name(args[0])}'")
    return n.floor()


def trunc(*args: Value) -> Value:
    """Truncate the first argument to the number of decimal places given second."""
    if len(args) != 2:
        return Undefined(f"trunc() requires 2 arguments, got {len(args)}: '{_format_args(args)}'")
    value, precision_arg = args
    precision = _number_of(precision_arg)
    if precision is None:
        return Undefined(
            f"trunc() requires precision (argument #2) to be a number, got {precision_arg}"
        )
    n = _number_of(value)
    if n is None:
        return Undefined(f"trunc(): invalid argument #1 '{value}'")
    return n.trunc(precision.to_int())


def evaluate(*args: Value) -> Value:
    """Evaluate the single argument when it can be evaluated, else return it unchanged."""
    if len(args) != 1:
        return Undefined(f"eval() requires 1 argument1, got {len(args)}: '{_format_args(args)}'")
    arg = args[0]
    evaluator = getattr(arg, "eval", None)
    if callable(evaluator):
        return evaluator()
    return arg


_BUILTINS: dict[str, FunctionalValue] = {
    "pi": pi,
    "factorial": factorial,
    "cos": cos,
    "sin": sin,
    "tan": tan,
    "sqrt": sqrt,
    "floor": floor,
    "trunc": trunc,
    "ln": ln,
    "log": log,
    "eval": evaluate,
}


def builtin_function(name: str) -> FunctionalValue | None:
    """Return the built-in function called ``name`` (case-insensitive), or None."""
    return _BUILTINS.get(name.lower())