"""
Calculation pipeline.

Turns a formula, the constant catalog and raw user-entered values into a
single result:

    parse inputs → resolve variables → merge constants → completeness check
    → evaluate → append to history

Any failure aborts the whole pipeline before history is touched.
"""

import json
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Mapping, Optional, Protocol, Union

from engine.errors import InvalidInputError, MissingVariablesError, NotFoundError
from engine.evaluator import evaluate
from engine.models import Calculation, Constant, Formula
from engine.resolution import resolve

logger = logging.getLogger(__name__)

RawValue = Union[str, int, float]


class HistorySink(Protocol):
    def append(self, calculation: Calculation) -> Calculation: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_number(key: str, raw: RawValue) -> float:
    """Parse one user-entered value. Booleans, blanks, NaN and infinities are rejected."""
    if isinstance(raw, bool):
        raise InvalidInputError(key, raw)
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        try:
            value = float(str(raw).strip())
        except ValueError:
            raise InvalidInputError(key, raw) from None
    if not math.isfinite(value):
        raise InvalidInputError(key, raw)
    return value


def parse_inputs(user_inputs: Mapping[str, RawValue]) -> Dict[str, float]:
    """Convert every entry to a float, stopping at the first invalid one."""
    return {key: parse_number(key, raw) for key, raw in user_inputs.items()}


def calculate(
    formula: Formula,
    constants: Iterable[Constant],
    user_inputs: Mapping[str, RawValue],
    history: Optional[HistorySink] = None,
    clock: Callable[[], datetime] = _utc_now,
) -> Calculation:
    """
    Evaluate ``formula`` with user inputs plus auto-detected constants.

    Constant-supplied values override a same-named user input. The returned
    record's ``inputs`` holds the merged bindings, so history shows the
    constants actually used.

    Args:
        formula: The formula to evaluate.
        constants: Snapshot of the constant catalog.
        user_inputs: Variable name to entered text (numbers are accepted too).
        history: Optional sink; the record is appended only on success.
        clock: Timestamp source.

    Raises:
        InvalidInputError: an entered value is not numeric.
        MissingVariablesError: a user-required variable has no value.
        EvaluationError: the expression failed to parse or evaluate.
    """
    parsed = parse_inputs(user_inputs)
    resolved = resolve(formula, constants)

    bindings = dict(parsed)
    bindings.update(resolved.constant_values)

    missing = [name for name in resolved.user_required if name not in parsed]
    if missing:
        raise MissingVariablesError(missing)

    result = evaluate(formula.expression, bindings)

    calculation = Calculation(
        id=str(uuid.uuid4()),
        formula_id=formula.id,
        inputs=json.dumps(bindings),
        result=result,
        timestamp=clock().isoformat(),
    )
    if history is not None:
        history.append(calculation)
    return calculation


def run_calculation(repository, formula_id: str, user_inputs: Mapping[str, RawValue]) -> Calculation:
    """
    Look up ``formula_id``, calculate against the current constant catalog and
    persist the result in ``repository``'s history.

    Raises:
        NotFoundError: no formula with that id.
        Everything ``calculate`` raises.
    """
    formula = repository.get_formula(formula_id)
    if formula is None:
        raise NotFoundError("Formula", formula_id)
    return run_formula(repository, formula, user_inputs)


def run_formula(repository, formula: Formula, user_inputs: Mapping[str, RawValue]) -> Calculation:
    """Calculate an already looked-up ``formula`` and persist the result in ``repository``."""
    constants = repository.list_constants()
    try:
        calculation = calculate(formula, constants, user_inputs, history=repository)
    except Exception as e:
        logger.warning("Calculation failed for formula %s: %s", formula.id, e)
        raise

    logger.info("Calculated %s = %s", formula.name, calculation.result)
    return calculation


def replay(calculation: Calculation, expression: str) -> float:
    """Re-evaluate ``expression`` with the bindings stored in ``calculation``."""
    return evaluate(expression, calculation.bindings)
