import pytest

from fuzzycontrol import FuzzyConfigurationError, RuleBaseConfig, create_from_dict
from fuzzycontrol.core.base import (
    AndOperator,
    DefuzzificationMethod,
    ensure_literal_choice,
    literal_options,
)


def test_literal_definitions():
    # The Literal aliases expose exactly the supported FCL keywords
    assert set(literal_options(AndOperator)) == {"MIN", "PROD", "BDIF"}
    assert set(literal_options(DefuzzificationMethod)) == {"COG", "COGS", "COA"}
    with pytest.raises(FuzzyConfigurationError):
        ensure_literal_choice("defuzzification_method", "MOM", DefuzzificationMethod)
    # Configuration errors are also ValueErrors
    with pytest.raises(ValueError):
        ensure_literal_choice("and_operator", "max", AndOperator)


def test_config_defaults():
    cfg = RuleBaseConfig()
    assert cfg.and_operator == "MIN"
    assert cfg.activation_method == "MIN"
    assert cfg.accumulation_method == "MAX"
    assert cfg.num_discretes == 200
    assert cfg.defuzzification_method == "COG"
    assert cfg.default_value == 0.0


def test_create_from_dict_ignores_unknown_keys():
    cfg = create_from_dict(
        {"and_operator": "PROD", "num_discretes": 51, "comment": "ignored"},
        RuleBaseConfig,
    )
    assert cfg == RuleBaseConfig(and_operator="PROD", num_discretes=51)


def test_create_from_dict_validates():
    with pytest.raises(FuzzyConfigurationError):
        create_from_dict({"accumulation_method": "ASUM"}, RuleBaseConfig)
