import numpy as np
import pytest

from fuzzycontrol import (
    FuzzyConfigurationError,
    MembershipFunction,
    Variable,
    control_surface,
    evaluate_batch,
)
from fuzzycontrol.plot import (
    plot_control_surface,
    plot_membership_functions,
    plot_output_grid,
)


def test_evaluate_batch(aoa_rule_base):
    result = evaluate_batch(aoa_rule_base, {"AoA": [-45.0, 0.0, 45.0]})
    assert list(result) == ["Roll"]
    np.testing.assert_allclose(result["Roll"], [-25.5 / 4.0, 0.0, 25.5 / 4.0])


def test_evaluate_batch_leaves_rule_base_untouched(aoa_rule_base):
    aoa_rule_base.evaluate({"AoA": 90.0})
    roll = aoa_rule_base.get_output_variable("Roll")
    grid = roll.discrete_y.copy()

    evaluate_batch(aoa_rule_base, {"AoA": np.linspace(-90.0, 0.0, 7)})
    assert roll.crisp_value == pytest.approx(7.0)
    np.testing.assert_array_equal(roll.discrete_y, grid)
    assert aoa_rule_base.get_input_variable("AoA").get_term(1).dom == 1.0


@pytest.mark.parametrize("n_jobs", [2, 5, -1])
def test_evaluate_batch_parallel_matches_serial(aoa_rule_base, n_jobs):
    xs = np.linspace(-90.0, 90.0, 9)
    serial = evaluate_batch(aoa_rule_base, {"AoA": xs})
    parallel = evaluate_batch(aoa_rule_base, {"AoA": xs}, n_jobs=n_jobs)
    np.testing.assert_allclose(parallel["Roll"], serial["Roll"])


def test_evaluate_batch_empty(aoa_rule_base):
    result = evaluate_batch(aoa_rule_base, {"AoA": []})
    assert result["Roll"].shape == (0,)


def test_evaluate_batch_validation(aoa_rule_base):
    aoa_rule_base.add_input_variable(
        Variable("Speed", [MembershipFunction("Slow", [(0.0, 1.0), (50.0, 0.0)])])
    )
    with pytest.raises(FuzzyConfigurationError):
        evaluate_batch(aoa_rule_base, {"AoA": [0.0, 1.0], "Speed": [0.0]})
    with pytest.raises(FuzzyConfigurationError):
        evaluate_batch(aoa_rule_base, {"Pitch": [0.0]})
    with pytest.raises(FuzzyConfigurationError):
        evaluate_batch(aoa_rule_base, {"AoA": [0.0]}, joblib_prefer="greenlets")


def test_control_surface(aoa_rule_base):
    ys = control_surface(aoa_rule_base, "AoA", "Roll", np.linspace(-90.0, 90.0, 3))
    assert ys.shape == (3,)
    np.testing.assert_allclose(ys, [-7.0, 0.0, 7.0])
    with pytest.raises(FuzzyConfigurationError):
        control_surface(aoa_rule_base, "AoA", "Yaw", [0.0])


def test_plot_membership_functions(aoa_rule_base):
    fig = plot_membership_functions(
        aoa_rule_base.get_input_variable("AoA"),
        aoa_rule_base.get_output_variable("Roll"),
    )
    assert len(fig.data) == 4
    assert [trace.name for trace in fig.data] == ["Left", "Right", "Neg", "Pos"]


def test_plot_output_grid(aoa_rule_base):
    aoa_rule_base.evaluate({"AoA": -45.0})
    fig = plot_output_grid(aoa_rule_base.get_output_variable("Roll"))
    assert len(fig.data) == 1
    np.testing.assert_allclose(fig.data[0].y[:6], 0.5)


def test_plot_control_surface(aoa_rule_base):
    xs = np.linspace(-90.0, 90.0, 5)
    ys = control_surface(aoa_rule_base, "AoA", "Roll", xs)
    fig = plot_control_surface(xs, ys, "AoA", "Roll")
    assert len(fig.data) == 1
    assert fig.layout.xaxis.title.text == "AoA"
