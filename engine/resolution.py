"""
Variable resolution and constant auto-detection.

A constant is "detected" for a formula when its symbol occurs anywhere in the
expression text. This is a plain substring test, not a tokenizer: a symbol
``e`` is detected inside ``delta``. Detection only binds a variable when the
symbol is also one of the formula's declared variables, so false positives
never add bindings the formula did not ask for.
"""

from typing import Dict, Iterable, List

from engine.models import Constant, Formula, ResolvedVariables


def detect_constants(expression: str, constants: Iterable[Constant]) -> List[Constant]:
    """Return every constant whose symbol is a substring of ``expression``."""
    if not expression:
        return []
    return [c for c in constants if c.symbol and c.symbol in expression]


def resolve(formula: Formula, constants: Iterable[Constant]) -> ResolvedVariables:
    """
    Partition ``formula.variables`` into constant-supplied and user-supplied.

    When several constants share a symbol, the last one in catalog order wins.
    The union of ``constant_bound`` and ``user_required`` is always exactly the
    declared variable list.
    """
    detected = detect_constants(formula.expression, constants)

    by_symbol: Dict[str, Constant] = {}
    for constant in detected:
        by_symbol[constant.symbol] = constant

    constant_bound: Dict[str, Constant] = {}
    user_required: List[str] = []
    for variable in formula.variables:
        if variable in by_symbol:
            constant_bound[variable] = by_symbol[variable]
        elif variable not in user_required:
            user_required.append(variable)

    return ResolvedVariables(
        constant_bound=constant_bound,
        user_required=user_required,
        detected=detected,
    )
