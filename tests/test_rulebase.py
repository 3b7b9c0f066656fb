import numpy as np
import pytest

from fuzzycontrol import (
    Conclusion,
    FuzzyConfigurationError,
    MembershipFunction,
    OutputVariable,
    Rule,
    RuleBase,
    RuleBaseConfig,
    SubCondition,
    Variable,
    create_from_dict,
)


def test_aoa_scenario_between_bounds(aoa_rule_base):
    aoa_rule_base.fuzzify_variable("AoA", -45.0)
    aoa_rule_base.evaluate_rules()
    roll = aoa_rule_base.get_crisp_output("Roll")
    assert -10.0 < roll < 0.0
    # Clipped ramp: 0.5 on x=-10..-5, then 0.4, 0.3, 0.2, 0.1, 0
    assert roll == pytest.approx(-25.5 / 4.0)


def test_aoa_scenario_is_symmetric(aoa_rule_base):
    assert aoa_rule_base.evaluate({"AoA": 45.0})["Roll"] == pytest.approx(25.5 / 4.0)
    assert aoa_rule_base({"AoA": -45.0})["Roll"] == pytest.approx(-25.5 / 4.0)


def test_prod_activation(aoa_rule_base):
    aoa_rule_base.set_activation_method("PROD")
    # Scaled ramp 0.05 * k at x = -k
    assert aoa_rule_base.evaluate({"AoA": -45.0})["Roll"] == pytest.approx(-7.0)


def test_center_of_area(aoa_rule_base):
    aoa_rule_base.get_output_variable("Roll").defuzzification_method = "COA"
    # Left = 0.7: grid mass 0.7 x4, 0.6 .. 0.1, half of 4.9 is passed at x = -7
    assert aoa_rule_base.evaluate({"AoA": -63.0})["Roll"] == pytest.approx(-7.0)


def test_no_rule_fires_gives_default(aoa_rule_base):
    roll = aoa_rule_base.get_output_variable("Roll")
    roll.default_value = 3.0
    aoa_rule_base.fuzzify_variable(aoa_rule_base.get_input_variable("AoA"), 0.0)
    aoa_rule_base.evaluate_rules()
    assert aoa_rule_base.get_crisp_output(roll) == 3.0


def test_grid_is_reset_every_cycle(aoa_rule_base):
    aoa_rule_base.evaluate({"AoA": -90.0})
    second = aoa_rule_base.evaluate({"AoA": 45.0})["Roll"]
    assert second == pytest.approx(25.5 / 4.0)


@pytest.mark.parametrize("accumulation, expected", [("MAX", 0.5), ("BSUM", 1.0)])
def test_accumulation(aoa_rule_base, accumulation, expected):
    aoa = aoa_rule_base.get_input_variable("AoA")
    aoa_rule_base.add_rule(Rule(-aoa.is_("Right"), Conclusion("Roll", 0)))
    aoa_rule_base.set_accumulation_method(accumulation)
    aoa_rule_base.evaluate({"AoA": -45.0})
    roll = aoa_rule_base.get_output_variable("Roll")
    # x = -5: first rule gives min(0.5, 0.5), second min(1.0, 0.5)
    assert roll.get_discrete_y(5) == pytest.approx(expected)
    assert np.all(roll.discrete_y <= 1.0)


def test_rule_weight_scales_activation(aoa_rule_base):
    aoa = aoa_rule_base.get_input_variable("AoA")
    aoa_rule_base.set_rules([Rule(aoa.is_("Left"), Conclusion("Roll", 0, weight=0.5))])
    aoa_rule_base.evaluate({"AoA": -90.0})
    rule = aoa_rule_base.rules[0]
    assert rule.conclusion.activation_level == pytest.approx(0.5)
    assert aoa_rule_base.get_output_variable("Roll").discrete_y.max() == pytest.approx(0.5)


def test_duplicate_rules_collapse(aoa_rule_base):
    aoa = aoa_rule_base.get_input_variable("AoA")
    aoa_rule_base.add_rule(Rule(aoa.is_("Left"), Conclusion("Roll", 0)))
    assert len(aoa_rule_base.rules) == 2


def test_rules_keep_insertion_order(aoa_rule_base):
    conclusions = [r.conclusion.term_index for r in aoa_rule_base.rules]
    assert conclusions == [0, 1]
    aoa_rule_base.clear_rules()
    assert aoa_rule_base.rules == []


def test_rule_validation(aoa_rule_base):
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.add_rule(Rule(SubCondition("Speed", 0), Conclusion("Roll", 0)))
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.add_rule(Rule(SubCondition("AoA", 5), Conclusion("Roll", 0)))
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.add_rule(Rule(SubCondition("AoA", 0), Conclusion("Pitch", 0)))
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.set_rules([Rule(SubCondition("AoA", 0), Conclusion("Roll", 9))])
    assert len(aoa_rule_base.rules) == 2


def test_unknown_variable_names(aoa_rule_base):
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.fuzzify_variable("Speed", 1.0)
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.get_crisp_output("Pitch")
    assert aoa_rule_base.get_input_variable("Speed") is None
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.add_input_variable(Variable("Roll"))


def test_evaluate_requires_discretized_outputs():
    rb = RuleBase()
    rb.add_input_variable(Variable("In", [MembershipFunction("A", [(0, 0), (1, 1)])]))
    rb.add_output_variable(OutputVariable("Out", [MembershipFunction("B", [(0, 0), (1, 1)])]))
    rb.fuzzify_variable("In", 0.5)
    with pytest.raises(FuzzyConfigurationError):
        rb.evaluate_rules()
    rb.discretize()
    rb.evaluate_rules()


def test_term_added_after_discretize_needs_new_grid(aoa_rule_base):
    roll = aoa_rule_base.get_output_variable("Roll")
    roll.add_term(MembershipFunction("Big", [(-10.0, 1.0), (10.0, 1.0)]))
    aoa_rule_base.add_rule(Rule(SubCondition("AoA", 0), Conclusion("Roll", 2)))
    assert not roll.is_discretized
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.evaluate({"AoA": -90.0})

    aoa_rule_base.discretize()
    aoa_rule_base.evaluate({"AoA": -90.0})
    np.testing.assert_allclose(roll.discrete_y, 1.0)


def test_replaced_terms_need_new_grid(aoa_rule_base):
    roll = aoa_rule_base.get_output_variable("Roll")
    neg, pos = roll.terms
    roll.replace_terms([neg, MembershipFunction("Mid", [(2.0, 0.0), (5.0, 1.0), (8.0, 0.0)]), pos])
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.evaluate({"AoA": 90.0})

    aoa_rule_base.discretize()
    # The Right rule now concludes term 1, the triangle centred on 5
    assert aoa_rule_base.evaluate({"AoA": 90.0})["Roll"] == pytest.approx(5.0)


def test_unsampled_term_is_not_discretized(aoa_rule_base):
    roll = aoa_rule_base.get_output_variable("Roll")
    roll.terms.append(MembershipFunction("Big", [(-10.0, 1.0), (10.0, 1.0)]))
    assert not roll.is_discretized
    with pytest.raises(FuzzyConfigurationError):
        aoa_rule_base.evaluate({"AoA": -90.0})


def test_and_or_operators_are_coupled_per_rule_base():
    first = RuleBase()
    second = RuleBase()
    first.set_and_operator("PROD")
    assert first.or_operator == "ASUM"
    assert second.and_operator == "MIN"
    assert second.or_operator == "MAX"
    second.set_or_operator("BSUM")
    assert second.and_operator == "BDIF"
    assert first.and_operator == "PROD"


def test_config_from_dict():
    config = create_from_dict(
        {"and_operator": "PROD", "accumulation_method": "BSUM", "unused": 1}, RuleBaseConfig
    )
    rb = RuleBase(config)
    assert rb.and_operator == "PROD"
    assert rb.or_operator == "ASUM"
    assert rb.accumulation_method == "BSUM"
    assert rb.activation_method == "MIN"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"and_operator": "XOR"},
        {"activation_method": "MAX"},
        {"accumulation_method": "SUM"},
        {"defuzzification_method": "MOM"},
        {"num_discretes": 0},
    ],
)
def test_invalid_config(kwargs):
    with pytest.raises(FuzzyConfigurationError):
        RuleBaseConfig(**kwargs)


def test_invalid_methods(aoa_rule_base):
    with pytest.raises(ValueError):
        aoa_rule_base.set_activation_method("BSUM")
    with pytest.raises(ValueError):
        aoa_rule_base.set_accumulation_method("MIN")


def test_two_input_rule_base():
    speed = Variable(
        "Speed",
        [
            MembershipFunction("Slow", [(0.0, 1.0), (50.0, 0.0)]),
            MembershipFunction("Fast", [(0.0, 0.0), (50.0, 1.0)]),
        ],
    )
    dist = Variable(
        "Distance",
        [
            MembershipFunction("Near", [(0.0, 1.0), (100.0, 0.0)]),
            MembershipFunction("Far", [(0.0, 0.0), (100.0, 1.0)]),
        ],
    )
    brake = OutputVariable(
        "Brake",
        [
            MembershipFunction("Light", [(0.0, 1.0), (1.0, 0.0)]),
            MembershipFunction("Hard", [(0.0, 0.0), (1.0, 1.0)]),
        ],
        num_discretes=101,
    )
    rb = RuleBase(RuleBaseConfig(and_operator="PROD"))
    for v in (speed, dist):
        rb.add_input_variable(v)
    rb.add_output_variable(brake)
    rb.discretize()
    rb.add_rule(Rule(speed.is_("Fast") & dist.is_("Near"), Conclusion("Brake", 1)))
    rb.add_rule(Rule(speed.is_("Slow") | dist.is_("Far"), Conclusion("Brake", 0)))

    hard = rb.evaluate({"Speed": 50.0, "Distance": 0.0})["Brake"]
    light = rb.evaluate({"Speed": 0.0, "Distance": 100.0})["Brake"]
    assert hard > 0.5 > light
