from dataclasses import dataclass, replace
from typing import Iterator, Mapping, Union

from .base import TNormBase
from .variable import Variable
from ..core.errors import FuzzyConfigurationError


class _ConditionOps:
    """Operator sugar shared by every condition node: ``a & b``, ``a | b``."""

    def __and__(self, other: "Condition") -> "And":
        return And(self, other)

    def __or__(self, other: "Condition") -> "Or":
        return Or(self, other)


@dataclass(frozen=True)
class SubCondition(_ConditionOps):
    """``<variable> IS [NOT] <term>``, with the term given by its index."""

    variable: str
    term_index: int
    negated: bool = False

    def __neg__(self) -> "SubCondition":
        return replace(self, negated=not self.negated)


class _Binary(_ConditionOps):
    left: "Condition"
    right: "Condition"

    def __eq__(self, other) -> bool:
        # Commutative: (a, b) matches (b, a)
        if type(other) is not type(self):
            return NotImplemented
        return (self.left == other.left and self.right == other.right) or (
            self.left == other.right and self.right == other.left
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, frozenset((self.left, self.right))))


@dataclass(frozen=True, eq=False)
class And(_Binary):
    left: "Condition"
    right: "Condition"


@dataclass(frozen=True, eq=False)
class Or(_Binary):
    left: "Condition"
    right: "Condition"


Condition = Union[SubCondition, And, Or]


def aggregate(
    condition: Condition, variables: Mapping[str, Variable], norm: TNormBase
) -> float:
    """Firing strength of ``condition`` from the DOMs cached by the last fuzzify."""
    if isinstance(condition, SubCondition):
        variable = variables.get(condition.variable)
        if variable is None:
            raise FuzzyConfigurationError(
                f"Condition refers to unknown variable {condition.variable!r}"
            )
        dom = variable.get_term(condition.term_index).dom
        return float(norm.negate(dom)) if condition.negated else float(dom)
    if isinstance(condition, And):
        return float(
            norm.norm(
                aggregate(condition.left, variables, norm),
                aggregate(condition.right, variables, norm),
            )
        )
    if isinstance(condition, Or):
        return float(
            norm.conorm(
                aggregate(condition.left, variables, norm),
                aggregate(condition.right, variables, norm),
            )
        )
    raise TypeError(f"Not a condition: {condition!r}")


def iter_subconditions(condition: Condition) -> Iterator[SubCondition]:
    """Leaves of the tree, left to right."""
    if isinstance(condition, SubCondition):
        yield condition
    elif isinstance(condition, (And, Or)):
        yield from iter_subconditions(condition.left)
        yield from iter_subconditions(condition.right)
    else:
        raise TypeError(f"Not a condition: {condition!r}")
