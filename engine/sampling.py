"""
Curve sampling for the grapher.

One declared variable is swept across a uniform grid while the others are
held at fixed values or supplied by detected constants. Points where the
formula is undefined (singularities, domain errors, complex results) are
dropped individually so the rest of the curve can still be drawn.
"""

import logging
import math
import numbers
import re
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from engine.errors import (
    EvaluationError,
    InvalidPointCountError,
    InvalidRangeError,
    InvalidSweepVariableError,
    MissingFixedValuesError,
    NoValidPointsError,
)
from engine.evaluator import CompiledExpression, compile_expression, to_finite_float
from engine.models import Constant, Formula, Point
from engine.resolution import resolve

logger = logging.getLogger(__name__)

# Keyword in a formula name → conventional output symbol
_NAME_HINTS = [
    ('voltage', 'V'),
    ('current', 'I'),
    ('power', 'P'),
    ('resistance', 'R'),
    ('time', 'τ'),
]

_DESCRIPTION_OUTPUT = re.compile(r'([A-Z]|τ|π|\w+)\s*=')


def sample_grid(x_min: float, x_max: float, point_count: int) -> np.ndarray:
    """``point_count + 1`` evenly spaced values from ``x_min`` to ``x_max`` inclusive."""
    return np.linspace(x_min, x_max, point_count + 1)


def _validate(
    formula: Formula,
    sweep_variable: str,
    x_min: float,
    x_max: float,
    point_count: int,
    max_points: Optional[int],
) -> None:
    if not (math.isfinite(x_min) and math.isfinite(x_max)) or x_min >= x_max:
        raise InvalidRangeError(x_min, x_max)
    if isinstance(point_count, bool) or not isinstance(point_count, numbers.Integral) or point_count < 2:
        raise InvalidPointCountError(point_count, max_points)
    if max_points is not None and point_count > max_points:
        raise InvalidPointCountError(point_count, max_points)
    if sweep_variable not in formula.variables:
        raise InvalidSweepVariableError(sweep_variable)


def _evaluate_vectorized(compiled: CompiledExpression, bindings: Dict, xs: np.ndarray) -> np.ndarray:
    """Evaluate the whole grid in one call. Invalid points come back as NaN."""
    ys = np.asarray(compiled(bindings))
    ys = np.broadcast_to(ys, xs.shape)
    if np.iscomplexobj(ys):
        ys = np.where(ys.imag == 0, ys.real, np.nan)
    return ys.astype(float)


def _evaluate_pointwise(compiled: CompiledExpression, bindings: Dict, xs: np.ndarray) -> np.ndarray:
    """Fallback for expressions NumPy cannot broadcast: one call per point."""
    ys = np.full(xs.shape, np.nan)
    for i, x in enumerate(xs):
        point_bindings = {
            name: (value[i] if np.ndim(value) else value) for name, value in bindings.items()
        }
        try:
            ys[i] = to_finite_float(compiled(point_bindings))
        except Exception as e:
            logger.debug("Skipping x=%s: %s", x, e)
    return ys


def sample(
    formula: Formula,
    constants: Iterable[Constant],
    sweep_variable: str,
    x_min: float,
    x_max: float,
    point_count: int,
    fixed_values: Mapping[str, float],
    max_points: Optional[int] = None,
) -> List[Point]:
    """
    Sample ``formula`` over ``sweep_variable`` in ``[x_min, x_max]``.

    Bindings at each point are ``fixed_values``, then the sweep value, then the
    constant-bound values (constants win).

    Args:
        formula: Formula to plot.
        constants: Snapshot of the constant catalog.
        sweep_variable: Declared variable placed on the x axis.
        x_min, x_max: Sweep range, ``x_min < x_max``.
        point_count: Number of intervals; ``point_count + 1`` points are tried.
        fixed_values: Values for every other non-constant variable.
        max_points: Upper bound on ``point_count``, or None for no bound.

    Returns:
        Surviving points ordered by increasing x.

    Raises:
        InvalidRangeError, InvalidPointCountError, InvalidSweepVariableError,
        MissingFixedValuesError: on invalid parameters.
        NoValidPointsError: when every sample is undefined.
    """
    _validate(formula, sweep_variable, x_min, x_max, point_count, max_points)

    resolved = resolve(formula, constants)
    missing = [
        v for v in formula.variables
        if v != sweep_variable and v not in resolved.constant_bound and v not in fixed_values
    ]
    if missing:
        raise MissingFixedValuesError(missing)

    xs = sample_grid(x_min, x_max, point_count)

    bindings: Dict = {name: np.float64(value) for name, value in fixed_values.items()}
    bindings[sweep_variable] = xs
    bindings.update({name: np.float64(v) for name, v in resolved.constant_values.items()})

    try:
        compiled = compile_expression(formula.expression, tuple(sorted(bindings)))
    except EvaluationError as e:
        # An expression that cannot be compiled fails at every point
        logger.debug("Expression %r not compilable: %s", formula.expression, e)
        raise NoValidPointsError() from e

    try:
        ys = _evaluate_vectorized(compiled, bindings, xs)
    except Exception as e:
        logger.debug("Vectorized evaluation failed, sampling point by point: %s", e)
        ys = _evaluate_pointwise(compiled, bindings, xs)

    mask = np.isfinite(ys)
    if not mask.any():
        raise NoValidPointsError()

    logger.debug("Sampled %s: %d of %d points kept", formula.name, int(mask.sum()), len(xs))
    return [Point(float(x), float(y)) for x, y in zip(xs[mask], ys[mask])]


def output_label(formula: Formula) -> str:
    """
    Label for the plotted quantity.

    Taken from the description's ``X =`` prefix, e.g. ``"V = I × R"`` → ``"V"``,
    otherwise guessed from the formula name.
    """
    if formula.description:
        match = _DESCRIPTION_OUTPUT.search(formula.description)
        if match:
            return match.group(1).strip()

    name = (formula.name or '').lower()
    for keyword, symbol in _NAME_HINTS:
        if keyword in name:
            return symbol
    return 'Result'
