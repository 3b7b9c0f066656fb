import logging
import os
from typing import Iterable, Mapping, Optional, Union

from .base import TNormBase, norm_for_and_operator, norm_for_or_operator
from .condition import iter_subconditions
from .rule import Rule
from .variable import OutputVariable, Variable
from ..core.base import (
    AccumulationMethod,
    ActivationMethod,
    AndOperator,
    OrOperator,
    RuleBaseConfig,
    ensure_literal_choice,
)
from ..core.errors import FuzzyConfigurationError
from ..core.types import F
from ..io import fcl

PathLike = Union[str, os.PathLike]


class RuleBase:
    """Owns the variables and rules of a fuzzy controller and runs the inference cycle.

    One evaluation is ``fuzzify_variable`` for every input followed by
    ``evaluate_rules``; the crisp results are then read with ``get_crisp_output``.
    ``evaluate`` does all three. Variables and rules keep their insertion order,
    so evaluation and FCL output are reproducible.

    A rule base is mutable state (cached DOMs, output grids): evaluate it from
    one thread at a time and give every worker its own copy.
    """

    def __init__(self, config: Optional[RuleBaseConfig] = None, name: str = ""):
        self.config: RuleBaseConfig = config or RuleBaseConfig()
        self.name = name
        self.input_variables: dict[str, Variable] = {}
        self.output_variables: dict[str, OutputVariable] = {}
        self._rules: dict[Rule, None] = {}
        self.norm: TNormBase = norm_for_and_operator(self.config.and_operator)
        self.activation_method: ActivationMethod = "MIN"
        self.accumulation_method: AccumulationMethod = "MAX"
        self.set_activation_method(self.config.activation_method)
        self.set_accumulation_method(self.config.accumulation_method)

    def __str__(self) -> str:
        return (
            f"RuleBase:{self.name}: inputs={list(self.input_variables)}, "
            f"outputs={list(self.output_variables)}, rules={len(self._rules)}"
        )

    def __call__(self, inputs: Mapping[str, F]) -> dict[str, float]:
        return self.evaluate(inputs)

    # Settings

    @property
    def and_operator(self) -> AndOperator:
        return self.norm.and_name

    @property
    def or_operator(self) -> OrOperator:
        return self.norm.or_name

    def set_and_operator(self, and_operator: AndOperator) -> None:
        """Select the fuzzy AND; the OR follows (MIN/MAX, PROD/ASUM, BDIF/BSUM)."""
        self.norm = norm_for_and_operator(and_operator)

    def set_or_operator(self, or_operator: OrOperator) -> None:
        """Select the fuzzy OR; the AND follows."""
        self.norm = norm_for_or_operator(or_operator)

    def set_activation_method(self, activation_method: ActivationMethod) -> None:
        ensure_literal_choice("activation_method", activation_method, ActivationMethod)
        self.activation_method = activation_method

    def set_accumulation_method(self, accumulation_method: AccumulationMethod) -> None:
        ensure_literal_choice(
            "accumulation_method", accumulation_method, AccumulationMethod
        )
        self.accumulation_method = accumulation_method

    # Variables

    def _check_new_name(self, name: str) -> None:
        if name in self.input_variables or name in self.output_variables:
            raise FuzzyConfigurationError(f"Duplicate variable name {name!r}")

    def add_input_variable(self, variable: Variable) -> None:
        self._check_new_name(variable.name)
        self.input_variables[variable.name] = variable

    def add_output_variable(self, variable: OutputVariable) -> None:
        self._check_new_name(variable.name)
        self.output_variables[variable.name] = variable

    def get_input_variable(self, name: str) -> Optional[Variable]:
        return self.input_variables.get(name)

    def get_output_variable(self, name: str) -> Optional[OutputVariable]:
        return self.output_variables.get(name)

    def discretize(self) -> None:
        for ovar in self.output_variables.values():
            ovar.discretize()

    # Rules

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def _validate_rule(self, rule: Rule) -> None:
        for sub in iter_subconditions(rule.condition):
            ivar = self.input_variables.get(sub.variable)
            if ivar is None:
                raise FuzzyConfigurationError(
                    f"Rule condition refers to unknown input variable {sub.variable!r}"
                )
            ivar.get_term(sub.term_index)
        ovar = self.output_variables.get(rule.conclusion.variable)
        if ovar is None:
            raise FuzzyConfigurationError(
                f"Rule conclusion refers to unknown output variable {rule.conclusion.variable!r}"
            )
        ovar.get_term(rule.conclusion.term_index)

    def add_rule(self, rule: Rule) -> None:
        self._validate_rule(rule)
        if rule in self._rules:
            logging.warning(f"Duplicate rule ignored: {rule}")
            return
        self._rules[rule] = None

    def clear_rules(self) -> None:
        self._rules.clear()

    def set_rules(self, rules: Iterable[Rule]) -> None:
        """Replace the whole rule set, e.g. after decoding a genome."""
        rules = list(rules)
        for rule in rules:
            self._validate_rule(rule)
        self._rules = dict.fromkeys(rules)

    # Inference

    def fuzzify_variable(self, variable: Union[str, Variable], value: F) -> None:
        if isinstance(variable, str):
            name = variable
            variable = self.input_variables.get(name)
            if variable is None:
                raise FuzzyConfigurationError(f"No input variable named {name!r}")
        variable.fuzzify(value)

    def evaluate_rules(self) -> None:
        for ovar in self.output_variables.values():
            if not ovar.is_discretized:
                raise FuzzyConfigurationError(
                    f"Output variable {ovar.name!r} must be discretized before evaluation"
                )
            ovar.reset_discretes()

        for rule in self._rules:
            rule.infer(
                self.input_variables,
                self.output_variables[rule.conclusion.variable],
                self.norm,
                self.activation_method,
                self.accumulation_method,
            )

        crisp = {name: ovar.defuzzify() for name, ovar in self.output_variables.items()}
        logging.debug(f"Evaluated {len(self._rules)} rules: {crisp}")

    def get_crisp_output(self, variable: Union[str, OutputVariable]) -> float:
        if isinstance(variable, str):
            name = variable
            variable = self.output_variables.get(name)
            if variable is None:
                raise FuzzyConfigurationError(f"No output variable named {name!r}")
        return variable.get_crisp_output()

    def evaluate(self, inputs: Mapping[str, F]) -> dict[str, float]:
        """Fuzzify every given input, run the rules and return every crisp output."""
        for name, value in inputs.items():
            self.fuzzify_variable(name, value)
        self.evaluate_rules()
        return {name: ovar.crisp_value for name, ovar in self.output_variables.items()}

    # FCL

    def read_fcl(self, path: PathLike) -> None:
        """Add the variables, rules and settings of an FCL file to this rule base."""
        fcl.read_fcl(path, self)

    def write_fcl(self, path: PathLike) -> None:
        fcl.write_fcl(self, path)

    def to_fcl(self) -> str:
        return fcl.format_fcl(self)

    @classmethod
    def from_fcl(
        cls, path: PathLike, config: Optional[RuleBaseConfig] = None
    ) -> "RuleBase":
        rule_base = cls(config)
        rule_base.read_fcl(path)
        return rule_base

    @classmethod
    def from_fcl_string(
        cls, text: str, config: Optional[RuleBaseConfig] = None
    ) -> "RuleBase":
        rule_base = cls(config)
        fcl.parse_fcl(text, rule_base)
        return rule_base
