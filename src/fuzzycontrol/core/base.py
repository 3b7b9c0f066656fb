from typing import Literal, TypeVar, Type, get_args
from dataclasses import dataclass, fields

from .errors import FuzzyConfigurationError

AndOperator = Literal["MIN", "PROD", "BDIF"]
OrOperator = Literal["MAX", "ASUM", "BSUM"]
ActivationMethod = Literal["MIN", "PROD"]
AccumulationMethod = Literal["MAX", "BSUM"]
DefuzzificationMethod = Literal["COG", "COGS", "COA"]
JoblibPrefer = Literal["threads", "processes"]


def literal_options(literal_type) -> list:
    """Return the list of allowed values for a typing.Literal type."""
    try:
        return list(get_args(literal_type))
    except Exception:
        return []


def ensure_literal_choice(name: str, value, literal_type) -> None:
    """Validate a value against a typing.Literal and raise a helpful error.

    Args:
        name: The option being set, used in the error message
        value: The provided value
        literal_type: The Literal type alias to validate against
    Raises:
        FuzzyConfigurationError: if value not in allowed options
    """
    allowed = literal_options(literal_type)
    if allowed and value not in allowed:
        allowed_str = ", ".join(repr(x) for x in allowed)
        raise FuzzyConfigurationError(
            f"Invalid {name}={value!r}. Allowed options: {allowed_str}"
        )


T = TypeVar("T")


def create_from_dict(data: dict, cls: Type[T]) -> T:
    """Create a dataclass instance from a dictionary.

    Args:
        data: Dictionary containing field values
        cls: Dataclass type to instantiate

    Returns:
        Instance of the dataclass with fields populated from the dictionary
    """
    field_names = {f.name for f in fields(cls)}
    filtered_data = {k: v for k, v in data.items() if k in field_names}
    return cls(**filtered_data)


@dataclass
class RuleBaseConfig:
    """Inference settings for a rule base."""

    and_operator: AndOperator = "MIN"
    """Fuzzy AND. Selecting it also selects the matching OR (MIN/MAX, PROD/ASUM, BDIF/BSUM)."""
    activation_method: ActivationMethod = "MIN"
    """How a rule's firing strength shapes its conclusion term."""
    accumulation_method: AccumulationMethod = "MAX"
    """How the activated conclusions of all rules are combined on the output grid."""
    num_discretes: int = 200
    """Grid resolution given to output variables declared in FCL files."""
    defuzzification_method: DefuzzificationMethod = "COG"
    """Defuzzification for output variables whose FCL block has no METHOD line."""
    default_value: float = 0.0
    """Crisp output used when no rule fires, unless the FCL block sets DEFAULT."""

    def __post_init__(self):
        ensure_literal_choice("and_operator", self.and_operator, AndOperator)
        ensure_literal_choice(
            "activation_method", self.activation_method, ActivationMethod
        )
        ensure_literal_choice(
            "accumulation_method", self.accumulation_method, AccumulationMethod
        )
        ensure_literal_choice(
            "defuzzification_method",
            self.defuzzification_method,
            DefuzzificationMethod,
        )
        if int(self.num_discretes) < 1:
            raise FuzzyConfigurationError(
                f"num_discretes must be at least 1, got {self.num_discretes}"
            )
