"""Expression operators, their precedence groups and how they combine values."""

from __future__ import annotations

from enum import Enum

from galexpr.values import Undefined, Value


class Operator(str, Enum):
    """An operator that may appear between two terms of an expression."""

    INVALID = "invalid"
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULUS = "%"
    POWER = "**"
    LSHIFT = "<<"
    RSHIFT = ">>"
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    EQUAL_TO = "=="
    NOT_EQUAL_TO = "!="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    AND = "And"
    AND2 = "&&"
    OR = "Or"
    OR2 = "||"

    def __str__(self) -> str:
        return self.value


def operator_from_string(s: str) -> Operator:
    """Return the operator spelled by ``s``; raise ValueError if there is none."""
    try:
        op = Operator(s)
    except ValueError:
        raise ValueError(f"unknown operator: '{s}'") from None
    if op is Operator.INVALID:
        raise ValueError(f"unknown operator: '{s}'")
    return op


def is_power_operator(op: Operator) -> bool:
    return op is Operator.POWER


def is_multiplicative_operator(op: Operator) -> bool:
    return op in (Operator.MULTIPLY, Operator.DIVIDE, Operator.MODULUS)


def is_additive_operator(op: Operator) -> bool:
    return op in (Operator.PLUS, Operator.MINUS)


def is_bitwise_shift_operator(op: Operator) -> bool:
    return op in (Operator.LSHIFT, Operator.RSHIFT)


def is_comparative_operator(op: Operator) -> bool:
    return op in (
        Operator.GREATER_THAN,
        Operator.GREATER_THAN_OR_EQUAL,
        Operator.LESS_THAN,
        Operator.LESS_THAN_OR_EQUAL,
        Operator.EQUAL_TO,
        Operator.NOT_EQUAL_TO,
    )


def is_logical_operator(op: Operator) -> bool:
    return op in (Operator.AND, Operator.AND2, Operator.OR, Operator.OR2)


_METHODS = {
    Operator.PLUS: "add",
    Operator.MINUS: "sub",
    Operator.MULTIPLY: "multiply",
    Operator.DIVIDE: "divide",
    Operator.POWER: "power_of",
    Operator.MODULUS: "mod",
    Operator.LSHIFT: "lshift",
    Operator.RSHIFT: "rshift",
    Operator.LESS_THAN: "less_than",
    Operator.LESS_THAN_OR_EQUAL: "less_than_or_equal",
    Operator.EQUAL_TO: "equal_to",
    Operator.NOT_EQUAL_TO: "not_equal_to",
    Operator.GREATER_THAN: "greater_than",
    Operator.GREATER_THAN_OR_EQUAL: "greater_than_or_equal",
    Operator.AND: "and_",
    Operator.AND2: "and_",
    Operator.OR: "or_",
    Operator.OR2: "or_",
}


def calculate(lhs: Value, op: Operator, rhs: Value) -> Value:
    """Apply ``op`` to ``lhs`` and ``rhs``."""
    method = _METHODS.get(op)
    if method is None:
        return Undefined(f"unimplemented operator: '{op}'")
    return getattr(lhs, method)(rhs)