"""Expression trees and their evaluation by operator precedence."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from galexpr.config import TreeConfig
from galexpr.entries import (
    DotFunction,
    DotVariable,
    Function,
    ObjectMethod,
    ObjectProperty,
    Variable,
)
from galexpr.operators import (
    Operator,
    calculate,
    is_additive_operator,
    is_bitwise_shift_operator,
    is_comparative_operator,
    is_logical_operator,
    is_multiplicative_operator,
    is_power_operator,
)
from galexpr.values import Bool, MultiValue, Number, String, Undefined, Value

_PRECEDENCE = (
    is_power_operator,
    is_multiplicative_operator,
    is_additive_operator,
    is_bitwise_shift_operator,
    is_comparative_operator,
    is_logical_operator,
)

_CALCULATED = (Function, ObjectMethod, Variable, ObjectProperty)


def _missing_lhs(op: Operator) -> Undefined:
    return Undefined(f"syntax error: missing left hand side value for operator '{op}'")


def _value_entry(val: Any, op: Operator, e: Value) -> Value:
    if val is None and op is Operator.INVALID:
        return e
    if val is None:
        return _missing_lhs(op)
    return calculate(val, op, e)


class Tree(list):
    """A sequence of values, operators, sub-trees and deferred terms."""

    def trunk_len(self) -> int:
        """Return the number of entries at the top level."""
        return len(self)

    def full_len(self) -> int:
        """Return the number of entries that are not trees, at every depth."""
        return len(self) + sum(e.full_len() - 1 for e in self if isinstance(e, Tree))

    def eval(
        self,
        variables: Mapping[str, Value] | None = None,
        functions: Mapping[str, Callable[..., Value]] | None = None,
        objects: Mapping[str, Any] | None = None,
    ) -> Value:
        """Evaluate the tree with the given user-defined entities."""
        cfg = TreeConfig(variables=variables, functions=functions, objects=objects)
        working = self.clean_up()
        for in_group in _PRECEDENCE:
            working = working.calc(in_group, cfg)

        if not working:
            return Undefined("syntax error: empty expression")
        first = working[0]
        if not isinstance(first, Value):
            return Undefined(f"syntax error: unexpected entry '{first}'")
        return first

    def split(self) -> list[Tree]:
        """Split the trunk wherever two consecutive entries have no operator between them."""
        if not self:
            return []
        forest: list[Tree] = []
        start = 0
        for i, (prev, cur) in enumerate(zip(self, self[1:]), start=1):
            if not isinstance(prev, Operator) and not isinstance(cur, Operator):
                forest.append(Tree(self[start:i]))
                start = i
        forest.append(Tree(self[start:]))
        return forest

    def calc(self, in_group: Callable[[Operator], bool], cfg: TreeConfig) -> Tree:
        """Reduce the operations whose operator belongs to ``in_group``."""
        out = Tree()
        val: Any = None
        op = Operator.INVALID

        for i, e in enumerate(self):
            if isinstance(val, Undefined):
                return Tree([val])

            if e is None:
                return Tree(
                    [Undefined(f"syntax error: nil value at tree entry #{i} - tree: {list(self)}")]
                )

            if isinstance(e, Operator):
                op = e
                if in_group(op):
                    continue
                if val is not None:
                    out.append(val)
                out.append(op)
                val = None
                op = Operator.INVALID
            elif isinstance(e, Tree):
                val = e.calculate(val, op, cfg)
            elif isinstance(e, (Bool, MultiValue, Number, String)):
                val = _value_entry(val, op, e)
            elif isinstance(e, _CALCULATED):
                val = e.calculate(val, op, cfg)
            elif isinstance(e, DotFunction):
                val = e.calculate(val, cfg)
            elif isinstance(e, DotVariable):
                val = e.calculate(val)
            elif isinstance(e, Undefined):
                return Tree([e])
            else:
                val = Undefined(f"internal error: unknown entry type: '{type(e).__name__}'")

        if val is not None:
            out.append(val)
        return out

    def calculate(self, val: Any, op: Operator, cfg: TreeConfig) -> Value:
        """Evaluate this sub-tree and combine it with the pending left-hand value."""
        if val is None and op is not Operator.INVALID:
            return _missing_lhs(op)

        rhs = self.eval(cfg.variables, cfg.functions, cfg.objects)
        if isinstance(rhs, Undefined) or val is None:
            return rhs
        return calculate(val, op, rhs)

    def clean_up(self) -> Tree:
        """Return a copy with a leading plus dropped or a leading minus turned into ``-1 *``."""
        out = Tree(self)
        if len(out) < 2 or not isinstance(out[0], Operator):
            return out
        if out[0] is Operator.PLUS:
            return Tree(out[1:])
        if out[0] is Operator.MINUS:
            return Tree([Number(-1), Operator.MULTIPLY, *out[1:]])
        return out

    def _render(self, indent: str = "") -> str:
        lines = []
        for e in self:
            if isinstance(e, Undefined):
                lines.append(f"{indent}unknownEntryKind {type(e).__name__}\n")
            elif isinstance(e, Value):
                lines.append(f"{indent}Value {type(e).__name__} {e}\n")
            elif isinstance(e, Operator):
                lines.append(f"{indent}Operator {e}\n")
            elif isinstance(e, Tree):
                lines.append(f"{indent}Tree {{\n{e._render('   ')}}}\n")
            elif isinstance(e, Function):
                lines.append(f"{indent}Function {e}\n")
            elif isinstance(e, Variable):
                lines.append(f"{indent}Variable {e.name}\n")
            elif isinstance(e, ObjectProperty):
                lines.append(f"{indent}ObjectProperty {e}\n")
            elif isinstance(e, ObjectMethod):
                lines.append(f"{indent}ObjectMethod {e}\n")
            elif isinstance(e, DotFunction):
                lines.append(f"{indent}DotFunction {e}\n")
            elif isinstance(e, DotVariable):
                lines.append(f"{indent}DotVariable {e}\n")
            else:
                lines.append(f"{indent}unsupported - {type(e).__name__}\n")
        return "".join(lines).rstrip("\n")

    def __str__(self) -> str:
        return self._render()

    def __repr__(self) -> str:
        return f"Tree({list.__repr__(self)})"