import copy
import logging
from typing import Mapping

import numpy as np
from joblib import Parallel, cpu_count, delayed
from tqdm import tqdm

from .core.base import JoblibPrefer, ensure_literal_choice
from .core.errors import FuzzyConfigurationError
from .core.types import AF, FloatLike
from .fuzzy.rulebase import RuleBase


def _evaluate_chunk(
    rule_base: RuleBase,
    inputs: dict[str, AF],
    rows: AF,
    show_progress: bool,
) -> dict[str, AF]:
    # Every chunk works on its own copy: evaluation mutates DOMs and output grids
    rb = copy.deepcopy(rule_base)
    out = {name: np.zeros(len(rows)) for name in rb.output_variables}
    for i, row in enumerate(tqdm(rows, desc="Evaluating rule base", disable=not show_progress)):
        crisp = rb.evaluate({name: values[row] for name, values in inputs.items()})
        for name, value in crisp.items():
            out[name][i] = value
    return out


def evaluate_batch(
    rule_base: RuleBase,
    inputs: Mapping[str, FloatLike],
    n_jobs: int = 1,
    joblib_prefer: JoblibPrefer = "threads",
    show_progress: bool = False,
) -> dict[str, AF]:
    """Evaluate the rule base for many crisp input vectors.

    Args:
        rule_base: A fully configured (discretized) rule base. It is not modified.
        inputs: Input variable name -> 1-D array of crisp values, all the same length.
        n_jobs: Number of joblib workers. Values below 1 mean all cores but one.
        joblib_prefer: "threads" or "processes".
        show_progress: Show a tqdm progress bar per worker.

    Returns:
        Output variable name -> array of crisp outputs, one per input row.
    """
    ensure_literal_choice("joblib_prefer", joblib_prefer, JoblibPrefer)
    arrays = {name: np.atleast_1d(np.asarray(v, dtype=float)) for name, v in inputs.items()}
    for name in arrays:
        if name not in rule_base.input_variables:
            raise FuzzyConfigurationError(f"No input variable named {name!r}")
    lengths = {len(v) for v in arrays.values()}
    if len(lengths) > 1:
        raise FuzzyConfigurationError(
            f"All input arrays must have the same length, got {sorted(lengths)}"
        )
    n_rows = lengths.pop() if lengths else 0

    if n_jobs < 1:
        n_jobs = max(1, cpu_count() - 1)
    chunks = [c for c in np.array_split(np.arange(n_rows), n_jobs) if len(c)]
    logging.debug(f"Evaluating {n_rows} input rows in {len(chunks)} chunks")

    parallel = Parallel(n_jobs=n_jobs, prefer=joblib_prefer)
    results = parallel(
        delayed(_evaluate_chunk)(rule_base, arrays, rows, show_progress) for rows in chunks
    )
    return {
        name: np.concatenate([r[name] for r in results]) if results else np.zeros(0)
        for name in rule_base.output_variables
    }


def control_surface(
    rule_base: RuleBase,
    input_name: str,
    output_name: str,
    xs: FloatLike,
    **kwargs,
) -> AF:
    """Crisp ``output_name`` for every value in ``xs`` of a single input."""
    if output_name not in rule_base.output_variables:
        raise FuzzyConfigurationError(f"No output variable named {output_name!r}")
    return evaluate_batch(rule_base, {input_name: xs}, **kwargs)[output_name]
