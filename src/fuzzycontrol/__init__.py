from fuzzycontrol.core.base import RuleBaseConfig, create_from_dict
from fuzzycontrol.core.errors import (
    FuzzyError,
    FuzzyConfigurationError,
    FCLParseError,
    FCLIOError,
)
from fuzzycontrol.fuzzy import (
    DataPoint,
    MembershipFunction,
    Variable,
    OutputVariable,
    SubCondition,
    And,
    Or,
    Conclusion,
    Rule,
    RuleBase,
)
from fuzzycontrol.io.fcl import read_fcl, write_fcl, parse_fcl, format_fcl
from fuzzycontrol.surface import evaluate_batch, control_surface

__all__ = [
    "RuleBaseConfig",
    "create_from_dict",
    "FuzzyError",
    "FuzzyConfigurationError",
    "FCLParseError",
    "FCLIOError",
    "DataPoint",
    "MembershipFunction",
    "Variable",
    "OutputVariable",
    "SubCondition",
    "And",
    "Or",
    "Conclusion",
    "Rule",
    "RuleBase",
    "read_fcl",
    "write_fcl",
    "parse_fcl",
    "format_fcl",
    "evaluate_batch",
    "control_surface",
]
