from .types import af64, f64, AF, F, FloatLike
from .base import RuleBaseConfig, create_from_dict
from .errors import FuzzyError, FuzzyConfigurationError, FCLParseError, FCLIOError

__all__ = [
    "RuleBaseConfig",
    "create_from_dict",
    "FuzzyError",
    "FuzzyConfigurationError",
    "FCLParseError",
    "FCLIOError",
    "af64",
    "f64",
    "AF",
    "F",
    "FloatLike",
]
