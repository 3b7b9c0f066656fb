from dataclasses import dataclass, field
from typing import Mapping

import numpy as np

from .base import TNormBase
from .condition import Condition, aggregate
from .variable import OutputVariable, Variable
from ..core.base import ActivationMethod, AccumulationMethod
from ..core.types import AF


@dataclass
class Conclusion:
    """``<variable> IS <term> [WITH <weight>]`` on the THEN side of a rule."""

    variable: str
    term_index: int
    weight: float = 1.0
    activation_level: float = field(default=0.0, compare=False, repr=False)

    def __hash__(self) -> int:
        return hash((self.variable, self.term_index, self.weight))

    def set_activation_level(self, level: float) -> None:
        self.activation_level = level * self.weight

    def get_start_x(self, output: OutputVariable) -> int:
        term = output.get_term(self.term_index)
        return output.get_discrete_index(term.points[0].x)

    def get_end_x(self, output: OutputVariable) -> int:
        term = output.get_term(self.term_index)
        return output.get_discrete_index(term.points[-1].x)

    def activated_values(self, dom: AF, activation_method: ActivationMethod) -> AF:
        if activation_method == "PROD":
            return self.activation_level * dom
        return np.minimum(self.activation_level, dom)


@dataclass(frozen=True)
class Rule:
    condition: Condition
    conclusion: Conclusion

    def __str__(self) -> str:
        return f"IF {self.condition} THEN {self.conclusion}"

    def infer(
        self,
        inputs: Mapping[str, Variable],
        output: OutputVariable,
        norm: TNormBase,
        activation_method: ActivationMethod,
        accumulation_method: AccumulationMethod,
    ) -> None:
        """Aggregate the condition, activate the conclusion term and accumulate it into ``output``."""
        conclusion = self.conclusion
        conclusion.set_activation_level(aggregate(self.condition, inputs, norm))

        last = output.num_discretes - 1
        start = min(max(conclusion.get_start_x(output), 0), last)
        end = min(max(conclusion.get_end_x(output), 0), last)
        sl = slice(start, end + 1)

        term = output.get_term(conclusion.term_index)
        activated = conclusion.activated_values(term.discrete_y[sl], activation_method)
        existing = output.discrete_y[sl]
        if accumulation_method == "BSUM":
            output.discrete_y[sl] = np.minimum(1.0, activated + existing)
        else:
            output.discrete_y[sl] = np.maximum(activated, existing)
