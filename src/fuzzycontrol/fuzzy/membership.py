from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterable, Union

import numpy as np

from ..core.errors import FuzzyConfigurationError
from ..core.types import AF, F, FloatLike


@dataclass
class DataPoint:
    """One vertex of a piecewise-linear membership function."""

    x: float
    y: float

    def __iter__(self):
        # Allows ``x, y = point``
        yield self.x
        yield self.y


PointLike = Union[DataPoint, tuple[float, float]]


class MembershipFunction:
    """A named, piecewise-linear fuzzy set.

    The shape is the polyline through ``points`` (kept sorted by x). Outside the
    first and last point the function is flat, holding the end point's y value.
    ``discrete_y`` holds the shape sampled on the owning output variable's grid
    and is filled in by ``OutputVariable.discretize``.
    """

    def __init__(self, name: str, points: Iterable[PointLike] = ()):
        self.name = name
        self.points: list[DataPoint] = []
        self.dom: float = 0.0
        self.discrete_y: AF = np.zeros(1)
        for x, y in points:
            self.points.append(DataPoint(float(x), float(y)))
        self._sort()

    def __call__(self, x: FloatLike) -> AF:
        return self.mu(x)

    def __str__(self):
        pts = " ".join(f"({p.x}, {p.y})" for p in self.points)
        return f"{self.__class__.__name__}:{self.name}:{pts}"

    def __repr__(self) -> str:
        return self.__str__()

    def __eq__(self, other) -> bool:
        if not isinstance(other, MembershipFunction):
            return NotImplemented
        return self.name == other.name and self.points == other.points

    __hash__ = object.__hash__

    def _sort(self) -> None:
        self.points.sort(key=lambda p: p.x)

    def _require_points(self) -> None:
        if not self.points:
            raise FuzzyConfigurationError(
                f"Membership function {self.name!r} has no data points"
            )

    def add_data_point(self, x: float, y: float) -> None:
        self.points.append(DataPoint(float(x), float(y)))
        self._sort()

    def set_points(self, points: Iterable[PointLike]) -> None:
        """Replace the whole shape; the points are re-sorted by x."""
        self.points = [DataPoint(float(x), float(y)) for x, y in points]
        self._sort()

    def get_data_point(self, index: int) -> DataPoint:
        return self.points[index]

    @property
    def number_of_data_points(self) -> int:
        return len(self.points)

    @property
    def x_values(self) -> AF:
        return np.array([p.x for p in self.points], dtype=float)

    @property
    def y_values(self) -> AF:
        return np.array([p.y for p in self.points], dtype=float)

    def domain(self) -> AF:
        self._require_points()
        return np.array([self.points[0].x, self.points[-1].x])

    def calculate_dom(self, x: F) -> float:
        """Degree of membership of ``x``. The result is also kept in ``self.dom``."""
        self._require_points()
        first, last = self.points[0], self.points[-1]
        if x <= first.x:
            self.dom = first.y
        elif x >= last.x:
            self.dom = last.y
        else:
            # First point with p.x >= x, so the segment is points[i-1].x < x <= points[i].x
            i = bisect_left(self.points, x, key=lambda p: p.x)
            p, pp1 = self.points[i - 1], self.points[i]
            self.dom = p.y + (pp1.y - p.y) * (x - p.x) / (pp1.x - p.x)
        return self.dom

    def mu(self, x: FloatLike) -> AF:
        """Vectorised ``calculate_dom`` that leaves the cached DOM untouched."""
        self._require_points()
        x = np.asarray(x, dtype=float)
        xs = self.x_values
        ys = self.y_values
        if len(xs) == 1:
            return np.full_like(x, ys[0])
        i = np.clip(np.searchsorted(xs, x, side="left"), 1, len(xs) - 1)
        x0, x1 = xs[i - 1], xs[i]
        y0, y1 = ys[i - 1], ys[i]
        with np.errstate(divide="ignore", invalid="ignore"):
            y = y0 + (y1 - y0) * (x - x0) / (x1 - x0)
        y = np.where(x <= xs[0], ys[0], y)
        y = np.where(x >= xs[-1], ys[-1], y)
        return y

    def set_number_of_discrete_values(self, n: int) -> None:
        self.discrete_y = np.zeros(int(n))

    def set_discrete_y(self, index: int, y: float) -> None:
        self._check_discrete_index(index)
        self.discrete_y[index] = y

    def get_discrete_y(self, index: int) -> float:
        self._check_discrete_index(index)
        return float(self.discrete_y[index])

    def _check_discrete_index(self, index: int) -> None:
        if not 0 <= index < len(self.discrete_y):
            raise FuzzyConfigurationError(
                f"Discrete index {index} out of range for {self.name!r} "
                f"with {len(self.discrete_y)} samples"
            )


# Shape factories


def triangle(name: str, a: float, b: float, c: float) -> MembershipFunction:
    assert a <= b <= c
    return MembershipFunction(name, [(a, 0.0), (b, 1.0), (c, 0.0)])


def trapezoid(name: str, a: float, b: float, c: float, d: float) -> MembershipFunction:
    assert a <= b <= c <= d
    return MembershipFunction(name, [(a, 0.0), (b, 1.0), (c, 1.0), (d, 0.0)])


def left_shoulder(name: str, a: float, b: float) -> MembershipFunction:
    assert a <= b
    return MembershipFunction(name, [(a, 1.0), (b, 0.0)])


def right_shoulder(name: str, a: float, b: float) -> MembershipFunction:
    assert a <= b
    return MembershipFunction(name, [(a, 0.0), (b, 1.0)])


def create_uniform_triangle_memberships(
    name: str | list[str], x0: float, x1: float, n_fcns: int
) -> list[MembershipFunction]:
    n_fcns = int(n_fcns)
    if n_fcns < 2:
        raise FuzzyConfigurationError("A uniform partition needs at least 2 terms")
    if isinstance(name, str):
        name = [f"{name}-{i}" for i in range(n_fcns)]
    spacing = (x1 - x0) / (n_fcns - 1)
    all_mus = [left_shoulder(name[0], x0, x0 + spacing)]
    for ij in range(1, n_fcns - 1):
        all_mus.append(
            triangle(
                name[ij],
                x0 + (ij - 1) * spacing,
                x0 + ij * spacing,
                x0 + (ij + 1) * spacing,
            )
        )
    all_mus.append(right_shoulder(name[-1], x0 + (n_fcns - 2) * spacing, x1))
    return all_mus


def create_triangle_memberships(
    triangle_data: dict[str, float],
) -> list[MembershipFunction]:
    """Shoulders at both ends, triangles in between, each peaking at its own center
    and reaching zero at the neighbouring centers."""
    items = list(triangle_data.items())
    if len(items) < 2:
        raise FuzzyConfigurationError("A triangle partition needs at least 2 terms")
    all_mus: list[MembershipFunction] = []
    for idx, (name, _) in enumerate(items):
        if idx == 0:
            all_mus.append(left_shoulder(name, items[idx][1], items[idx + 1][1]))
        elif idx == len(items) - 1:
            all_mus.append(right_shoulder(name, items[idx - 1][1], items[idx][1]))
        else:
            a, b, c = items[idx - 1][1], items[idx][1], items[idx + 1][1]
            all_mus.append(triangle(name, a, b, c))
    return all_mus
