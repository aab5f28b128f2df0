"""Turning expression text into evaluable trees."""

from __future__ import annotations

import re
from enum import Enum, auto

from galexpr.builtins import builtin_function
from galexpr.entries import (
    DotFunction,
    DotVariable,
    Function,
    ObjectMethod,
    ObjectProperty,
    Variable,
)
from galexpr.operators import Operator, operator_from_string
from galexpr.tree import Tree
from galexpr.values import Bool, Number, String, Undefined

_BLANKS = " \t\n"
_DIGITS = "0123456789"
_LETTERS = re.compile(r"[A-Za-z]*")

# Longest spellings first so that "**" is not read as "*", "<=" as "<", and so on.
_OPERATOR_SPELLINGS = (
    ("And",),
    ("**", "<<", ">>", "==", "!=", ">=", "<=", "&&", "Or", "||"),
    ("+", "-", "/", "*", "%", ">", "<"),
)


class ExpressionError(ValueError):
    """Raised when an expression cannot be parsed."""


class PartType(Enum):
    """The kind of a part read from an expression."""

    UNKNOWN = auto()
    BLANK = auto()
    NUMERICAL = auto()
    OPERATOR = auto()
    STRING = auto()
    BOOL = auto()
    VARIABLE = auto()
    FUNCTION = auto()
    OBJECT_PROPERTY = auto()
    OBJECT_METHOD = auto()
    OBJECT_ACCESSOR_BY_PROPERTY = auto()
    OBJECT_ACCESSOR_BY_METHOD = auto()


def _is_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _read_operator(s: str) -> str:
    for spellings in _OPERATOR_SPELLINGS:
        for spelling in spellings:
            if s.startswith(spelling):
                return spelling
    return ""


def _read_string(expr: str) -> tuple[str, int]:
    """Read a double-quoted string; return its content and the length consumed."""
    to = 1
    escapes = 0
    for prev, ch in zip(expr, expr[1:]):
        to += 1
        if prev == "\\":
            escapes += 1
            continue
        if ch == '"' and escapes % 2 == 0:
            break
        escapes = 0

    if expr[to - 1] != '"':
        raise ExpressionError(f"syntax error: non-terminated string '{expr[:to]}'")
    return expr[1 : to - 1], to


def _read_variable(expr: str) -> str:
    for to, ch in enumerate(expr[1:], start=2):
        if ch == ":":
            return expr[:to]
        if ch in _BLANKS:
            raise ExpressionError(
                f"syntax error: invalid character '{ch}' for variable name '{expr[:to]}'"
            )
    if expr[-1] == ":" and len(expr) == 1:
        return expr
    raise ExpressionError(f"syntax error: missing ':' to end variable '{expr}'")


def _read_constant(expr: str) -> str | None:
    word = _LETTERS.match(expr).group()
    rest = expr[len(word) :]
    if rest and rest[0] not in _BLANKS:
        return None
    return word if word in ("True", "False") else None


def _read_named(expr: str) -> tuple[str, int, bool]:
    """Read a name; report whether an opening parenthesis ends it.

    At most one dot is read past: a second dot ends the name.
    """
    dots = 0
    for to, ch in enumerate(expr):
        if ch == "(":
            return expr[:to], to, True
        if ch == ".":
            dots += 1
            if dots == 2:
                return expr[:to], to, False
        if ch in _BLANKS:
            return expr[:to], to, False
    return expr, len(expr), False


def _read_function_arguments(expr: str) -> str:
    """Read a parenthesised argument list, including both parentheses."""
    depth = 1
    i = 1
    while i < len(expr):
        ch = expr[i]
        if ch == '"':
            _, length = _read_string(expr[i:])
            i += length
            continue
        i += 1
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return expr[:i]
    raise ExpressionError(f"syntax error: missing ')' for function arguments '{expr[:i]}'")


def _read_number(expr: str) -> str:
    is_float = False
    for to, ch in enumerate(expr):
        if ch in _BLANKS or _read_operator(expr[to:]):
            return expr[:to]
        if ch == "." and not is_float:
            is_float = True
        elif ch not in _DIGITS:
            raise ExpressionError(
                f"syntax error: invalid character '{ch}' for number '{expr[: to + 1]}'"
            )
    return expr


def _squash_plus_minus_chain(expr: str) -> tuple[str, int]:
    """Collapse a run of '+', '-' and blanks into the single sign it amounts to."""
    sign = 1
    count = 0
    for ch in expr:
        if ch not in "+-" and ch not in _BLANKS:
            break
        if ch == "-":
            sign = -sign
        count += 1
    return ("+" if sign == 1 else "-"), count


def extract_part(expr: str) -> tuple[str, PartType, int]:
    """Read the next part of ``expr``.

    Return the part, its kind and the position just after it.
    """
    pos = len(expr) - len(expr.lstrip(_BLANKS))
    if pos == len(expr):
        return "", PartType.BLANK, pos

    rest = expr[pos:]
    head = rest[0]

    if head == '"':
        text, length = _read_string(rest)
        return text, PartType.STRING, pos + length

    constant = _read_constant(rest)
    if constant is not None:
        return constant, PartType.BOOL, pos + len(constant)

    if head == ":":
        name = _read_variable(rest)
        return name, PartType.VARIABLE, pos + len(name)

    if head == "(" or _is_letter(head):
        name, length, has_parens = _read_named(rest)
        if has_parens:
            args = _read_function_arguments(rest[length:])
            kind = PartType.OBJECT_METHOD if "." in name else PartType.FUNCTION
            return name + args, kind, pos + length + len(args)
        if "." in name:
            return name, PartType.OBJECT_PROPERTY, pos + length
        # otherwise fall through: the name may be an operator such as "And" or "Or"

    if head == ".":
        name, length, has_parens = _read_named(rest)
        if not has_parens:
            return name, PartType.OBJECT_ACCESSOR_BY_PROPERTY, pos + length
        args = _read_function_arguments(rest[length:])
        return name + args, PartType.OBJECT_ACCESSOR_BY_METHOD, pos + length + len(args)

    op = _read_operator(rest)
    if op:
        length = len(op)
        if op in ("+", "-"):
            op, length = _squash_plus_minus_chain(rest)
        return op, PartType.OPERATOR, pos + length

    number = _read_number(rest)
    return number, PartType.NUMERICAL, pos + len(number)


def _call_parts(part: str) -> tuple[str, Tree]:
    name, length, _ = _read_named(part)
    return name, build_tree(part[length + 1 : -1])


def build_tree(expr: str) -> Tree:
    """Parse ``expr`` into a Tree; raise ExpressionError on a syntax error."""
    tree = Tree()
    idx = 0
    while idx < len(expr):
        part, kind, length = extract_part(expr[idx:])

        if kind is PartType.BLANK:
            return tree

        if kind is PartType.NUMERICAL:
            try:
                tree.append(Number.from_string(part))
            except ValueError as exc:
                raise ExpressionError(str(exc)) from exc

        elif kind is PartType.STRING:
            tree.append(String(part))

        elif kind is PartType.BOOL:
            try:
                tree.append(Bool.from_string(part))
            except ValueError as exc:
                raise ExpressionError(str(exc)) from exc

        elif kind is PartType.OPERATOR:
            try:
                tree.append(operator_from_string(part))
            except ValueError as exc:
                raise ExpressionError(str(exc)) from exc

        elif kind is PartType.FUNCTION:
            name, args = _call_parts(part)
            if name == "":
                # parenthesis grouping
                tree.append(args)
            else:
                tree.append(Function(name, builtin_function(name), args.split()))

        elif kind is PartType.OBJECT_METHOD:
            name, args = _call_parts(part)
            object_name, method_name = name.split(".", 1)
            tree.append(ObjectMethod(object_name, method_name, args.split()))

        elif kind is PartType.VARIABLE:
            tree.append(Variable(part))

        elif kind is PartType.OBJECT_PROPERTY:
            object_name, property_name = part.split(".", 1)
            tree.append(ObjectProperty(object_name, property_name))

        elif kind is PartType.OBJECT_ACCESSOR_BY_PROPERTY:
            tree.append(DotVariable(Variable(part[1:])))

        elif kind is PartType.OBJECT_ACCESSOR_BY_METHOD:
            inner = build_tree(part[1:])
            if len(inner) != 1 or not isinstance(inner[0], Function):
                raise ExpressionError(f"syntax error: invalid object accessor function: '{part}'")
            function = inner[0]
            if function.body_fn is not None:
                raise ExpressionError(
                    f"internal error: invalid object accessor function: '{part}' - BodyFn is not "
                    "empty: this indicates the object's method was confused for a build-in function"
                )
            tree.append(DotFunction(function))

        else:
            raise ExpressionError(f"internal error: unknown expression part type '{kind}'")

        idx += length

    if len(tree) >= 2:
        if tree[0] is Operator.PLUS:
            return Tree(tree[1:])
        if tree[0] is Operator.MINUS:
            return Tree([Number(-1), Operator.MULTIPLY, *tree[1:]])
    return tree


def parse(expr: str) -> Tree:
    """Parse ``expr``; a syntax error yields a tree holding a single Undefined."""
    try:
        return build_tree(expr)
    except ExpressionError as exc:
        return Tree([Undefined(str(exc))])