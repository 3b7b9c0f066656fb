import pytest

from fuzzycontrol import (
    MembershipFunction,
    OutputVariable,
    Rule,
    RuleBase,
    Variable,
    Conclusion,
)


def build_aoa_rule_base() -> RuleBase:
    # Single input AoA, single output Roll, two mirror-image rules
    aoa = Variable(
        "AoA",
        [
            MembershipFunction("Left", [(-90.0, 1.0), (0.0, 0.0)]),
            MembershipFunction("Right", [(0.0, 0.0), (90.0, 1.0)]),
        ],
    )
    roll = OutputVariable(
        "Roll",
        [
            MembershipFunction("Neg", [(-10.0, 1.0), (0.0, 0.0)]),
            MembershipFunction("Pos", [(0.0, 0.0), (10.0, 1.0)]),
        ],
        num_discretes=21,
    )
    roll.discretize()

    rb = RuleBase()
    rb.add_input_variable(aoa)
    rb.add_output_variable(roll)
    rb.add_rule(Rule(aoa.is_("Left"), Conclusion("Roll", roll.get_term_index("Neg"))))
    rb.add_rule(Rule(aoa.is_("Right"), Conclusion("Roll", roll.get_term_index("Pos"))))
    return rb


@pytest.fixture()
def aoa_rule_base() -> RuleBase:
    return build_aoa_rule_base()
