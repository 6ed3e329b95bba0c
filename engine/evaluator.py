"""
Expression evaluation boundary.

This is the only place where user-authored formula text is parsed. An
expression is parsed with SymPy, every bound name is forced to a plain symbol
(so ``I``, ``E``, ``N`` or ``gamma`` are variables, not SymPy built-ins), and
the result is compiled with ``lambdify`` into a NumPy callable that accepts
either scalars or arrays.

Expressions are parsed with ``evaluate=False`` so that singular points such as
``x/x`` at ``x = 0`` stay singular instead of being simplified away.

Before SymPy sees the text it is checked against an allow-list of Python
syntax nodes: numbers, names, arithmetic operators and calls to a fixed set
of math functions. Attribute access, subscripts, strings and the rest are
rejected.
"""

import ast
import math
from functools import lru_cache
from typing import Callable, Mapping, Tuple

import numpy as np
from sympy import Basic, Symbol, lambdify, log
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from engine.errors import EvaluationError

# '^' is accepted as exponentiation, as in most calculator syntaxes
_TRANSFORMATIONS = standard_transformations + (convert_xor,)

# Names not provided by SymPy's default namespace
_EXTRA_FUNCTIONS = {
    'log10': lambda arg: log(arg, 10),
    'ln': log,
}


# Plain arithmetic only; '^' arrives as BitXor before convert_xor rewrites it
_ALLOWED_NODES = (
    ast.Expression,
    ast.BinOp,
    ast.UnaryOp,
    ast.Call,
    ast.Name,
    ast.Load,
    ast.Constant,
    ast.Add,
    ast.Sub,
    ast.Mult,
    ast.Div,
    ast.Mod,
    ast.Pow,
    ast.BitXor,
    ast.USub,
    ast.UAdd,
)

FUNCTIONS = frozenset({
    'sqrt', 'cbrt', 'exp', 'log', 'ln', 'log10',
    'sin', 'cos', 'tan', 'asin', 'acos', 'atan', 'atan2',
    'sinh', 'cosh', 'tanh', 'asinh', 'acosh', 'atanh',
    'abs', 'Abs', 'sign', 'floor', 'ceiling', 'Min', 'Max',
})


def check_syntax(expression: str) -> None:
    """
    Reject anything but numbers, names, arithmetic and calls to known functions.

    Runs before SymPy sees the text, since ``parse_expr`` hands it to ``eval``.

    Raises:
        EvaluationError: on a syntax error or a disallowed construct.
    """
    try:
        tree = ast.parse(expression.strip(), mode='eval')
    except SyntaxError as exc:
        raise EvaluationError(f"Could not parse expression: {exc.msg}") from None

    unknown_funcs = set()
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise EvaluationError(f"Unsupported syntax in expression: {type(node).__name__}")
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
                raise EvaluationError("Only numeric literals are allowed in expressions")
        elif isinstance(node, ast.Name):
            if node.id.startswith('__'):
                raise EvaluationError(f"Invalid name in expression: {node.id}")
        elif isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.keywords:
                raise EvaluationError("Unsupported function call in expression")
            if node.func.id not in FUNCTIONS:
                unknown_funcs.add(node.func.id)

    if unknown_funcs:
        raise EvaluationError(f"Unknown function(s): {', '.join(sorted(unknown_funcs))}")


class CompiledExpression:
    """A parsed expression bound to an ordered tuple of argument names."""

    def __init__(self, expression: str, names: Tuple[str, ...], func: Callable):
        self.expression = expression
        self.names = names
        self._func = func

    def __call__(self, bindings: Mapping):
        """Apply the expression. Values may be floats or NumPy arrays."""
        args = [bindings[name] for name in self.names]
        with np.errstate(all='ignore'):
            return self._func(*args)

    def __repr__(self) -> str:
        return f"CompiledExpression({self.expression!r}, names={self.names!r})"


@lru_cache(maxsize=256)
def compile_expression(expression: str, names: Tuple[str, ...]) -> CompiledExpression:
    """
    Parse ``expression`` with ``names`` as its only free variables.

    Raises:
        EvaluationError: unparseable text, an undefined symbol or an unknown
            function.
    """
    if not expression or not expression.strip():
        raise EvaluationError("Expression is empty")

    check_syntax(expression)

    symbols = {name: Symbol(name) for name in names}
    local_dict = dict(_EXTRA_FUNCTIONS)
    local_dict.update(symbols)

    try:
        expr = parse_expr(
            expression,
            local_dict=local_dict,
            transformations=_TRANSFORMATIONS,
            evaluate=False,
        )
    except Exception as exc:
        raise EvaluationError(f"Could not parse expression: {exc}") from exc

    if not isinstance(expr, Basic):
        raise EvaluationError("Expression must produce a single numeric value")

    undefined = sorted(s.name for s in expr.free_symbols if s.name not in symbols)
    if undefined:
        raise EvaluationError(f"Undefined symbol(s): {', '.join(undefined)}")

    unknown_funcs = sorted({f.func.__name__ for f in expr.atoms(AppliedUndef)})
    if unknown_funcs:
        raise EvaluationError(f"Unknown function(s): {', '.join(unknown_funcs)}")

    try:
        func = lambdify([symbols[name] for name in names], expr, modules='numpy')
    except Exception as exc:
        raise EvaluationError(f"Could not compile expression: {exc}") from exc
    return CompiledExpression(expression, names, func)


def to_finite_float(raw) -> float:
    """Convert an evaluation result to a finite real float or raise EvaluationError."""
    value = np.asarray(raw)
    if value.shape != ():
        raise EvaluationError("Expression must produce a single numeric value")

    if np.iscomplexobj(value):
        if value.imag != 0:
            raise EvaluationError("Expression evaluated to a complex number")
        value = value.real

    try:
        result = float(value)
    except OverflowError as exc:
        raise EvaluationError("Expression evaluated to a non-finite value (overflow)") from exc
    except (TypeError, ValueError) as exc:
        raise EvaluationError(f"Expression did not evaluate to a number: {raw}") from exc

    if not math.isfinite(result):
        raise EvaluationError(f"Expression evaluated to a non-finite value ({result})")
    return result


def evaluate(expression: str, bindings: Mapping[str, float]) -> float:
    """
    Evaluate ``expression`` with concrete numeric ``bindings``.

    Args:
        expression: Formula text, e.g. ``"I * R"`` or ``"1/(2*pi*f*C)"``.
        bindings: Variable name to value. Every free name in the expression
                  must be present; extra names are ignored.

    Returns:
        The finite real result.

    Raises:
        EvaluationError: on any parse or evaluation failure, including
            division by zero and other non-finite results.
    """
    names = tuple(sorted(bindings))
    compiled = compile_expression(expression, names)
    scalars = {name: np.float64(bindings[name]) for name in names}
    try:
        raw = compiled(scalars)
    except Exception as exc:
        raise EvaluationError(f"Evaluation failed: {exc}") from exc
    return to_finite_float(raw)
