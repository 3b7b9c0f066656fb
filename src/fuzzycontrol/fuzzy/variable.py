import logging
from typing import Iterable, Optional

import numpy as np

from .membership import DataPoint, MembershipFunction
from ..core.base import DefuzzificationMethod, ensure_literal_choice
from ..core.errors import FuzzyConfigurationError
from ..core.types import AF, F


class Variable:
    """A linguistic variable: an ordered list of terms (membership functions).

    A term's position in the list is its index, which is how conditions and
    conclusions refer to it.
    """

    def __init__(self, name: str, terms: Iterable[MembershipFunction] = ()):
        self.name = name
        self.terms: list[MembershipFunction] = list(terms)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}:{self.name}: {[t.name for t in self.terms]}"

    def __repr__(self) -> str:
        return self.__str__()

    def __getitem__(self, item: str) -> MembershipFunction:
        for mf in self.terms:
            if mf.name == item:
                return mf
        raise KeyError(f"Membership function {item} not found in {self}")

    def __contains__(self, item: str) -> bool:
        return self.get_term_index(item) >= 0

    def __len__(self) -> int:
        return len(self.terms)

    def add_term(self, term: MembershipFunction) -> None:
        self.terms.append(term)

    def replace_terms(self, terms: Iterable[MembershipFunction]) -> None:
        self.terms = list(terms)

    def get_term(self, index: int) -> MembershipFunction:
        if not 0 <= index < len(self.terms):
            raise FuzzyConfigurationError(
                f"Term index {index} out of range for variable {self.name!r} "
                f"with {len(self.terms)} terms"
            )
        return self.terms[index]

    def get_term_index(self, name: str) -> int:
        for i, term in enumerate(self.terms):
            if term.name == name:
                return i
        return -1

    def fuzzify(self, crisp_input: F) -> None:
        for term in self.terms:
            term.calculate_dom(crisp_input)

    def is_(self, term_name: str, negated: bool = False):
        """Build the condition ``<self> IS [NOT] <term_name>``."""
        from .condition import SubCondition

        if term_name not in self:
            raise KeyError(f"Membership function {term_name} not found in {self}")
        return SubCondition(self.name, self.get_term_index(term_name), negated)


class OutputVariable(Variable):
    """A variable whose value is inferred.

    The accumulated output fuzzy set lives on a uniform grid of ``num_discretes``
    points spanning the union of the terms' domains. ``discretize`` builds the
    grid and samples every term onto it; it has to be called again whenever the
    terms or the resolution change.
    """

    def __init__(
        self,
        name: str,
        terms: Iterable[MembershipFunction] = (),
        num_discretes: int = 200,
        defuzzification_method: DefuzzificationMethod = "COG",
        default_value: float = 0.0,
    ):
        super().__init__(name, terms)
        self.crisp_value: float = 0.0
        self.default_value = float(default_value)
        self.discrete_x: Optional[AF] = None
        self.discrete_y: Optional[AF] = None
        self._num_discretes = 1
        self._defuzzification_method: DefuzzificationMethod = "COG"
        self.num_discretes = num_discretes
        self.defuzzification_method = defuzzification_method

    @property
    def num_discretes(self) -> int:
        return self._num_discretes

    @num_discretes.setter
    def num_discretes(self, value: int) -> None:
        if int(value) < 1:
            raise FuzzyConfigurationError(
                f"num_discretes must be at least 1, got {value}"
            )
        self._num_discretes = int(value)
        self._drop_grid()

    @property
    def defuzzification_method(self) -> DefuzzificationMethod:
        return self._defuzzification_method

    @defuzzification_method.setter
    def defuzzification_method(self, value: DefuzzificationMethod) -> None:
        ensure_literal_choice("defuzzification_method", value, DefuzzificationMethod)
        self._defuzzification_method = value

    def add_term(self, term: MembershipFunction) -> None:
        super().add_term(term)
        self._drop_grid()

    def replace_terms(self, terms: Iterable[MembershipFunction]) -> None:
        super().replace_terms(terms)
        self._drop_grid()

    def _drop_grid(self) -> None:
        self.discrete_x = None
        self.discrete_y = None

    @property
    def is_discretized(self) -> bool:
        """Grid built and every term sampled onto it."""
        if self.discrete_x is None:
            return False
        return all(len(term.discrete_y) == self.num_discretes for term in self.terms)

    @property
    def discrete_points(self) -> list[DataPoint]:
        self._require_grid()
        return [DataPoint(float(x), float(y)) for x, y in zip(self.discrete_x, self.discrete_y)]

    def _require_grid(self) -> None:
        if self.discrete_x is None:
            raise FuzzyConfigurationError(
                f"Output variable {self.name!r} has not been discretized"
            )

    def discretize(self) -> None:
        if not self.terms:
            raise FuzzyConfigurationError(
                f"Output variable {self.name!r} has no terms to discretize"
            )
        min_x = min(term.domain()[0] for term in self.terms)
        max_x = max(term.domain()[1] for term in self.terms)

        n = self.num_discretes
        self.discrete_x = np.linspace(min_x, max_x, n)
        self.discrete_y = np.zeros(n)
        for term in self.terms:
            term.set_number_of_discrete_values(n)
            for i, x in enumerate(self.discrete_x):
                term.discrete_y[i] = term.calculate_dom(x)

    def reset_discretes(self) -> None:
        self._require_grid()
        self.discrete_y[:] = 0.0

    @property
    def delta_x(self) -> float:
        self._require_grid()
        if self.num_discretes < 2:
            return 0.0
        return float(self.discrete_x[-1] - self.discrete_x[0]) / (self.num_discretes - 1)

    def get_discrete_index(self, x: F) -> int:
        """Grid cell containing ``x``. Not bounded to the grid."""
        delta_x = self.delta_x
        if delta_x == 0.0:
            return 0
        # Grid points computed by linspace may sit a few ulps off x
        return int(np.floor((x - self.discrete_x[0]) / delta_x + 1e-9))

    def get_discrete_x(self, index: int) -> float:
        self._check_grid_index(index)
        return float(self.discrete_x[index])

    def get_discrete_y(self, index: int) -> float:
        self._check_grid_index(index)
        return float(self.discrete_y[index])

    def set_discrete_y(self, index: int, value: float) -> None:
        self._check_grid_index(index)
        self.discrete_y[index] = value

    def _check_grid_index(self, index: int) -> None:
        self._require_grid()
        if not 0 <= index < self.num_discretes:
            raise FuzzyConfigurationError(
                f"Grid index {index} out of range for {self.name!r} "
                f"with {self.num_discretes} points"
            )

    def get_crisp_output(self) -> float:
        return self.crisp_value

    def defuzzify(self) -> float:
        self._require_grid()
        total = float(np.sum(self.discrete_y))
        if total <= 0.0:
            logging.warning(
                f"No membership mass on {self.name!r}, using default value {self.default_value}"
            )
            self.crisp_value = self.default_value
        elif self.defuzzification_method in ("COG", "COGS"):
            self.crisp_value = float(np.sum(self.discrete_x * self.discrete_y) / total)
        else:
            # COA: first grid point where the running sum passes half the mass
            cumulative = np.cumsum(self.discrete_y)
            idx = int(np.argmax(cumulative > 0.5 * total))
            self.crisp_value = float(self.discrete_x[idx])
        return self.crisp_value
