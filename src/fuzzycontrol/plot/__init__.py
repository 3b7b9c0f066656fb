import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from ..core.types import AF, FloatLike
from ..fuzzy.variable import OutputVariable, Variable


def plot_membership_functions(
    *variables: Variable, n_samples: int = 500, show: bool = False
) -> go.Figure:
    """One subplot per variable with every term drawn over the variable's domain."""
    fig = make_subplots(
        rows=len(variables),
        cols=1,
        subplot_titles=[f"Membership Functions of {v.name}" for v in variables],
    )
    for i_plot, variable in enumerate(variables):
        domains = np.array([mf.domain() for mf in variable.terms])
        x = np.linspace(domains[:, 0].min(), domains[:, 1].max(), n_samples)
        for mf in variable.terms:
            fig.add_trace(
                go.Scatter(x=x, y=mf.mu(x), mode="lines", name=mf.name),
                row=i_plot + 1,
                col=1,
            )
    fig.update_layout(template="plotly_white")
    if show:
        fig.show()
    return fig


def plot_output_grid(output: OutputVariable, show: bool = False) -> go.Figure:
    """The accumulated output fuzzy set of the last evaluation and its crisp value."""
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=output.discrete_x,
            y=output.discrete_y,
            mode="lines",
            fill="tozeroy",
            name=output.name,
        )
    )
    fig.add_vline(
        x=output.crisp_value,
        line_dash="dash",
        annotation_text=f"{output.defuzzification_method} = {output.crisp_value:.4g}",
    )
    fig.update_layout(
        title=f"Accumulated output: {output.name}",
        xaxis_title=output.name,
        yaxis_title="Degree of membership",
        template="plotly_white",
    )
    if show:
        fig.show()
    return fig


def plot_control_surface(
    xs: FloatLike,
    ys: AF,
    input_name: str = "input",
    output_name: str = "output",
    show: bool = False,
) -> go.Figure:
    """Control curve of a single-input controller, e.g. from ``control_surface``."""
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=np.asarray(xs, dtype=float),
            y=np.asarray(ys, dtype=float),
            mode="lines+markers",
            name=output_name,
            line=dict(width=2),
            marker=dict(size=4),
        )
    )
    fig.update_layout(
        title=f"{output_name} vs. {input_name}",
        xaxis_title=input_name,
        yaxis_title=output_name,
        template="plotly_white",
        hovermode="x unified",
    )
    if show:
        fig.show()
    return fig
