"""Value types manipulated by expressions: numbers, strings, booleans and more."""

from __future__ import annotations

import decimal
import math
from decimal import ROUND_DOWN, ROUND_FLOOR, ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Any

_EXACT = decimal.Context(
    prec=decimal.MAX_PREC,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero],
)

DIVISION_PRECISION = 16


def _round_fraction(q: Fraction, places: int) -> Decimal:
    """Round a fraction half away from zero to the given number of decimal places."""
    scaled = q * 10**places
    sign = -1 if scaled < 0 else 1
    magnitude = abs(scaled)
    whole, rem = divmod(magnitude.numerator, magnitude.denominator)
    if 2 * rem >= magnitude.denominator:
        whole += 1
    return Decimal(sign * whole).scaleb(-places, _EXACT)


def _format_decimal(d: Decimal) -> str:
    if d == 0:
        return "0"
    text = format(d, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _is_integer(d: Decimal) -> bool:
    return d == d.to_integral_value()


def _numberer(value: Any) -> Number | None:
    as_number = getattr(value, "as_number", None)
    return as_number() if callable(as_number) else None


def _booler(value: Any) -> Bool | None:
    as_bool = getattr(value, "as_bool", None)
    return as_bool() if callable(as_bool) else None


class Value:
    """Base of all values; unsupported operations yield an undefined outcome."""

    _reason: str = ""

    @property
    def undefined(self) -> Undefined:
        return Undefined(self._reason)

    def add(self, other: Value) -> Value:
        return self.undefined

    def sub(self, other: Value) -> Value:
        return self.undefined

    def multiply(self, other: Value) -> Value:
        return self.undefined

    def divide(self, other: Value) -> Value:
        return self.undefined

    def power_of(self, other: Value) -> Value:
        return self.undefined

    def mod(self, other: Value) -> Value:
        return self.undefined

    def lshift(self, other: Value) -> Value:
        return self.undefined

    def rshift(self, other: Value) -> Value:
        return self.undefined

    def less_than(self, other: Value) -> Bool:
        return FALSE

    def less_than_or_equal(self, other: Value) -> Bool:
        return FALSE

    def equal_to(self, other: Value) -> Bool:
        return FALSE

    def not_equal_to(self, other: Value) -> Bool:
        return TRUE

    def greater_than(self, other: Value) -> Bool:
        return FALSE

    def greater_than_or_equal(self, other: Value) -> Bool:
        return FALSE

    def and_(self, other: Value) -> Bool:
        return Bool(
            False,
            reason=f"error: '{type(other).__name__}':'{other}' cannot use And with Undefined",
        )

    def or_(self, other: Value) -> Bool:
        return Bool(
            False,
            reason=f"error: '{type(other).__name__}':'{other}' cannot use Or with Undefined",
        )

    def as_string(self) -> String:
        return String(str(self))

    def is_undefined(self) -> bool:
        return self._reason == ""

    def __str__(self) -> str:
        return str(self.undefined)


class Undefined(Value):
    """An undefined evaluation outcome, optionally carrying a reason."""

    def __init__(self, reason: str = "") -> None:
        self._reason = reason

    @property
    def reason(self) -> str:
        return self._reason

    @property
    def undefined(self) -> Undefined:
        return self

    def __str__(self) -> str:
        return f"undefined: {self._reason}" if self._reason else "undefined"

    def __repr__(self) -> str:
        return f"Undefined({self._reason!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not Undefined:
            return NotImplemented
        return self._reason == other._reason

    def __hash__(self) -> int:
        return hash(("Undefined", self._reason))


class Bool(Value):
    """A boolean value."""

    def __init__(self, value: bool, reason: str = "") -> None:
        self.value = bool(value)
        self._reason = reason

    @classmethod
    def from_string(cls, s: str) -> Bool:
        if s == "True":
            return TRUE
        if s == "False":
            return FALSE
        raise ValueError(f"'{s}' cannot be converted to a Bool")

    def equal_to(self, other: Value) -> Bool:
        b = _booler(other)
        if b is None:
            return FALSE
        return Bool(self.value == b.value)

    def not_equal_to(self, other: Value) -> Bool:
        return self.equal_to(other).not_()

    def not_(self) -> Bool:
        return Bool(not self.value)

    def and_(self, other: Value) -> Bool:
        b = _booler(other)
        if b is None:
            return FALSE
        return Bool(self.value and b.value)

    def or_(self, other: Value) -> Bool:
        b = _booler(other)
        if b is None:
            return FALSE
        return Bool(self.value or b.value)

    def as_bool(self) -> Bool:
        return self

    def as_number(self) -> Number:
        return Number(1 if self.value else 0)

    def __str__(self) -> str:
        return "True" if self.value else "False"

    def __repr__(self) -> str:
        return f"Bool({self.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bool):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(("Bool", self.value))


TRUE = Bool(True)
FALSE = Bool(False)


class Number(Value):
    """An arbitrary precision decimal number."""

    def __init__(self, value: Decimal | int | str = 0, reason: str = "") -> None:
        self.value = value if isinstance(value, Decimal) else Decimal(value)
        self._reason = reason

    @classmethod
    def from_int(cls, i: int) -> Number:
        return cls(Decimal(int(i)))

    @classmethod
    def from_float(cls, f: float) -> Number:
        if math.isnan(f) or math.isinf(f):
            raise ValueError(f"cannot create a Number from {f!r}")
        return cls(Decimal(repr(float(f))))

    @classmethod
    def from_string(cls, s: str) -> Number:
        if s != s.strip() or "_" in s:
            raise ValueError(f"can't convert {s} to decimal")
        try:
            d = Decimal(s)
        except decimal.InvalidOperation as exc:
            raise ValueError(f"can't convert {s} to decimal") from exc
        if not d.is_finite():
            raise ValueError(f"can't convert {s} to decimal")
        return cls(d)

    def _nan(self, other: Value) -> Undefined:
        return Undefined(f"NaN: {other}")

    def add(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        return Number(_EXACT.add(self.value, v.value))

    def sub(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        return Number(_EXACT.subtract(self.value, v.value))

    def multiply(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        return Number(_EXACT.multiply(self.value, v.value))

    def divide(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        if v.value == 0:
            return Undefined("division by zero")
        q = Fraction(self.value) / Fraction(v.value)
        return Number(_round_fraction(q, DIVISION_PRECISION))

    def power_of(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        exponent = v.value
        if _is_integer(exponent):
            e = int(exponent)
            if e >= 0:
                return Number(_EXACT.power(self.value, e))
            if self.value == 0:
                return Undefined("division by zero")
            denominator = Fraction(_EXACT.power(self.value, -e))
            return Number(_round_fraction(1 / denominator, DIVISION_PRECISION))
        if self.value < 0 or (self.value == 0 and exponent < 0):
            return Undefined(f"cannot raise {self} to the power of {v}")
        ctx = decimal.Context(prec=60)
        result = ctx.power(self.value, exponent)
        return Number(_round_fraction(Fraction(result), DIVISION_PRECISION))

    def mod(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None or v.value == 0:
            return self._nan(other)
        return Number(_EXACT.remainder(self.value, v.value))

    def int_part(self) -> Value:
        return Number(self.value.to_integral_value(rounding=ROUND_DOWN))

    def lshift(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        if v.value < 0:
            return Undefined("invalid negative left shift")
        if not _is_integer(v.value):
            return Undefined("invalid non-integer left shift")
        shifted = _EXACT.multiply(self.value, Decimal(2 ** int(v.value)))
        return Number(shifted.to_integral_value(rounding=ROUND_FLOOR))

    def rshift(self, other: Value) -> Value:
        v = _numberer(other)
        if v is None:
            return self._nan(other)
        if v.value < 0:
            return Undefined("invalid negative right shift")
        if not _is_integer(v.value):
            return Undefined("invalid non-integer right shift")
        q = _round_fraction(Fraction(self.value) / 2 ** int(v.value), DIVISION_PRECISION)
        return Number(q.to_integral_value(rounding=ROUND_FLOOR))

    def neg(self) -> Number:
        return Number(-self.value)

    def sin(self) -> Number:
        return Number.from_float(math.sin(float(self.value)))

    def cos(self) -> Number:
        return Number.from_float(math.cos(float(self.value)))

    def tan(self) -> Number:
        return Number.from_float(math.tan(float(self.value)))

    def sqrt(self) -> Value:
        if self.value < 0:
            return Undefined(f"square root of negative number: {self}")
        root = decimal.Context(prec=60).sqrt(self.value)
        try:
            return Number.from_string(format(root, ".10g"))
        except ValueError as exc:
            return Undefined(f"Sqrt:{exc}")

    def _ln(self, precision: int) -> Decimal:
        if self.value < 0:
            raise ValueError("cannot calculate natural logarithm for negative decimals")
        if self.value == 0:
            raise ValueError("cannot represent natural logarithm of 0, result: -infinity")
        ctx = decimal.Context(prec=max(60, precision + 40))
        result = ctx.ln(self.value)
        return result.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP, context=_EXACT)

    def ln(self, precision: int) -> Value:
        try:
            return Number(self._ln(precision))
        except ValueError as exc:
            return Undefined(f"Ln:{exc}")

    def log(self, precision: int) -> Value:
        try:
            res = self._ln(precision + 1)
            res10 = Number(10)._ln(precision + 1)
        except ValueError as exc:
            return Undefined(f"Log:{exc}")
        quotient = Number(_round_fraction(Fraction(res) / Fraction(res10), DIVISION_PRECISION))
        return quotient.trunc(precision)

    def floor(self) -> Number:
        return Number(self.value.to_integral_value(rounding=ROUND_FLOOR))

    def trunc(self, precision: int) -> Number:
        exponent = self.value.as_tuple().exponent
        if precision >= 0 and isinstance(exponent, int) and exponent < -precision:
            return Number(
                self.value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_DOWN, context=_EXACT)
            )
        return Number(self.value)

    def factorial(self) -> Value:
        if not _is_integer(self.value) or self.value < 0:
            return Undefined(f"Factorial: requires a positive integer, cannot accept {self}")
        return Number(math.factorial(int(self.value)))

    def less_than(self, other: Value) -> Bool:
        v = _numberer(other)
        return FALSE if v is None else Bool(self.value < v.value)

    def less_than_or_equal(self, other: Value) -> Bool:
        v = _numberer(other)
        return FALSE if v is None else Bool(self.value <= v.value)

    def equal_to(self, other: Value) -> Bool:
        v = _numberer(other)
        return FALSE if v is None else Bool(self.value == v.value)

    def not_equal_to(self, other: Value) -> Bool:
        return self.equal_to(other).not_()

    def greater_than(self, other: Value) -> Bool:
        v = _numberer(other)
        return FALSE if v is None else Bool(self.value > v.value)

    def greater_than_or_equal(self, other: Value) -> Bool:
        v = _numberer(other)
        return FALSE if v is None else Bool(self.value >= v.value)

    def as_number(self) -> Number:
        return self

    def as_bool(self) -> Bool:
        return FALSE if self.value == 0 else TRUE

    def to_float(self) -> float:
        return float(self.value)

    def to_int(self) -> int:
        return int(self.value)

    def __str__(self) -> str:
        return _format_decimal(self.value)

    def __repr__(self) -> str:
        return f"Number({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(("Number", self.value))


class String(Value):
    """A text value."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        self._reason = reason

    def raw_string(self) -> str:
        return self.value

    def as_string(self) -> String:
        return self

    def add(self, other: Value) -> Value:
        if isinstance(other, Undefined):
            return other
        return String(self.value + other.as_string().raw_string())

    def equal_to(self, other: Value) -> Bool:
        if isinstance(other, String):
            return Bool(self.value == other.value)
        return FALSE

    def not_equal_to(self, other: Value) -> Bool:
        return self.equal_to(other).not_()

    def less_than(self, other: Value) -> Bool:
        return Bool(self.value < other.value) if isinstance(other, String) else FALSE

    def less_than_or_equal(self, other: Value) -> Bool:
        return Bool(self.value <= other.value) if isinstance(other, String) else FALSE

    def greater_than(self, other: Value) -> Bool:
        return Bool(self.value > other.value) if isinstance(other, String) else FALSE

    def greater_than_or_equal(self, other: Value) -> Bool:
        return Bool(self.value >= other.value) if isinstance(other, String) else FALSE

    def as_number(self) -> Number:
        try:
            return Number.from_string(self.value)
        except ValueError as exc:
            return Number(0, reason=f"String '{self.value}' - cannot convert to Number: {exc}")

    def as_bool(self) -> Bool:
        try:
            return Bool.from_string(self.value)
        except ValueError as exc:
            return Bool(False, reason=str(exc))

    def __str__(self) -> str:
        return f'"{self.value}"'

    def __repr__(self) -> str:
        return f"String({self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, String):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(("String", self.value))


class MultiValue(Value):
    """A container of zero or more values, typically used with functions."""

    def __init__(self, *values: Value) -> None:
        self.values = list(values)

    def get(self, i: int) -> Value:
        if i >= len(self.values):
            return Undefined(
                f"out of bounds: trying to get arg #{i} on MultiValue that has {len(self.values)} arguments"
            )
        return self.values[i]

    def size(self) -> int:
        return len(self.values)

    def __str__(self) -> str:
        return ",".join(str(v) for v in self.values)

    def __repr__(self) -> str:
        return f"MultiValue({', '.join(repr(v) for v in self.values)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiValue):
            return NotImplemented
        if self.size() != other.size():
            return False
        return all(a.equal_to(b) != FALSE for a, b in zip(self.values, other.values))

    __hash__ = None  # type: ignore[assignment]


def _python_to_value(value: Any) -> Value:
    """Map a plain Python value to a Value, raising TypeError when impossible."""
    if isinstance(value, Value):
        return value
    if isinstance(value, bool):
        return Bool(value)
    if isinstance(value, int):
        return Number(value)
    if isinstance(value, float):
        return Number.from_float(value)
    if isinstance(value, Decimal):
        return Number(value)
    if isinstance(value, str):
        return String(value)
    raise TypeError(f"type '{type(value).__name__}' cannot be mapped to gal.Value")


def to_value(value: Any) -> Value:
    try:
        return _python_to_value(value)
    except (TypeError, ValueError) as exc:
        return Undefined(f"value type {type(value).__name__} - {exc}")


def to_number(val: Value) -> Number:
    n = _numberer(val)
    if n is None:
        return Number(0, reason=f"value type {type(val).__name__} - cannot convert to Number")
    return n


def to_string(val: Value) -> String:
    return val.as_string()


def to_bool(val: Value) -> Bool:
    b = _booler(val)
    if b is None:
        return Bool(False, reason=f"value type {type(val).__name__} - cannot convert to Bool")
    return b