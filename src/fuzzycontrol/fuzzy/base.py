from abc import ABC, abstractmethod

import numpy as np

from ..core.base import AndOperator, OrOperator, ensure_literal_choice
from ..core.types import AF, F


class TNormBase(ABC):
    """A fuzzy AND (t-norm) together with the OR (t-conorm) it is paired with."""

    and_name: AndOperator
    or_name: OrOperator

    @abstractmethod
    def norm(self, a: AF | F, b: AF | F) -> AF | F:
        raise NotImplementedError()

    @abstractmethod
    def conorm(self, a: AF | F, b: AF | F) -> AF | F:
        raise NotImplementedError()

    def negate(self, a: AF | F) -> AF | F:
        return 1.0 - a

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(AND={self.and_name}, OR={self.or_name})"

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class MinMaxNorm(TNormBase):
    and_name = "MIN"
    or_name = "MAX"

    def norm(self, a: AF | F, b: AF | F) -> AF | F:
        return np.minimum(a, b)

    def conorm(self, a: AF | F, b: AF | F) -> AF | F:
        return np.maximum(a, b)


class ProbabilityNorm(TNormBase):
    and_name = "PROD"
    or_name = "ASUM"

    def norm(self, a: AF | F, b: AF | F) -> AF | F:
        return a * b

    def conorm(self, a: AF | F, b: AF | F) -> AF | F:
        return a + b - a * b


class LukasiewiczNorm(TNormBase):
    and_name = "BDIF"
    or_name = "BSUM"

    def norm(self, a: AF | F, b: AF | F) -> AF | F:
        return np.maximum(0.0, a + b - 1.0)

    def conorm(self, a: AF | F, b: AF | F) -> AF | F:
        return np.minimum(1.0, a + b)


_NORMS: tuple[type[TNormBase], ...] = (MinMaxNorm, ProbabilityNorm, LukasiewiczNorm)


def norm_for_and_operator(and_operator: AndOperator) -> TNormBase:
    ensure_literal_choice("and_operator", and_operator, AndOperator)
    return next(n for n in _NORMS if n.and_name == and_operator)()


def norm_for_or_operator(or_operator: OrOperator) -> TNormBase:
    ensure_literal_choice("or_operator", or_operator, OrOperator)
    return next(n for n in _NORMS if n.or_name == or_operator)()
