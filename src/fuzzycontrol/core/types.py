import typing

from numpy.typing import NDArray, ArrayLike
import numpy as np

# Type shorthand:
f64 = np.float64
af64 = NDArray[f64]

AF = typing.Union[af64, NDArray[np.float32]]
F = typing.Union[float, f64]
# Anything numpy can turn into a float array: lists, tuples, arrays
FloatLike = typing.Union[F, ArrayLike]
