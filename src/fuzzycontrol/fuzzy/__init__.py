from fuzzycontrol.fuzzy.base import (
    TNormBase,
    MinMaxNorm,
    ProbabilityNorm,
    LukasiewiczNorm,
    norm_for_and_operator,
    norm_for_or_operator,
)
from fuzzycontrol.fuzzy.membership import (
    DataPoint,
    MembershipFunction,
    triangle,
    trapezoid,
    left_shoulder,
    right_shoulder,
    create_uniform_triangle_memberships,
    create_triangle_memberships,
)
from fuzzycontrol.fuzzy.variable import Variable, OutputVariable
from fuzzycontrol.fuzzy.condition import (
    Condition,
    SubCondition,
    And,
    Or,
    aggregate,
    iter_subconditions,
)
from fuzzycontrol.fuzzy.rule import Conclusion, Rule
from fuzzycontrol.fuzzy.rulebase import RuleBase

__all__ = [
    "TNormBase",
    "MinMaxNorm",
    "ProbabilityNorm",
    "LukasiewiczNorm",
    "norm_for_and_operator",
    "norm_for_or_operator",
    "DataPoint",
    "MembershipFunction",
    "triangle",
    "trapezoid",
    "left_shoulder",
    "right_shoulder",
    "create_uniform_triangle_memberships",
    "create_triangle_memberships",
    "Variable",
    "OutputVariable",
    "Condition",
    "SubCondition",
    "And",
    "Or",
    "aggregate",
    "iter_subconditions",
    "Conclusion",
    "Rule",
    "RuleBase",
]
