"""
Tests for the expression evaluation boundary.

Validates:
1. Standard arithmetic, '^' exponentiation and common functions
2. Bound names shadow SymPy built-ins (I, E, gamma)
3. Parse errors, undefined symbols and unknown functions
4. Non-finite results are rejected
"""

import numpy as np
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from engine.errors import EvaluationError
from engine.evaluator import compile_expression, evaluate, to_finite_float


class TestArithmetic:
    """Values the evaluator must get right."""

    def test_ohms_law(self):
        assert evaluate("I * R", {"I": 2, "R": 10}) == pytest.approx(20.0)

    def test_caret_is_power(self):
        assert evaluate("2^3", {}) == pytest.approx(8.0)
        assert evaluate("x^2", {"x": 3}) == pytest.approx(9.0)

    def test_double_star_power(self):
        assert evaluate("x**0.5", {"x": 16}) == pytest.approx(4.0)

    def test_functions(self):
        assert evaluate("sqrt(x)", {"x": 16}) == pytest.approx(4.0)
        assert evaluate("sin(pi/2)", {}) == pytest.approx(1.0)
        assert evaluate("exp(0)", {}) == pytest.approx(1.0)
        assert evaluate("log10(x)", {"x": 1000}) == pytest.approx(3.0)
        assert evaluate("ln(x)", {"x": np.e}) == pytest.approx(1.0)

    def test_capacitive_reactance(self):
        """Xc = 1/(2πfC) for 1 kHz and 1 µF ≈ 159.15 Ω."""
        result = evaluate("1 / (2 * pi * f * C)", {"f": 1000.0, "C": 1e-6})
        assert result == pytest.approx(159.1549, rel=1e-5)

    def test_extra_bindings_ignored(self):
        assert evaluate("x + 1", {"x": 1, "unused": 99}) == pytest.approx(2.0)

    def test_returns_python_float(self):
        assert isinstance(evaluate("a * b", {"a": 2, "b": 3}), float)


class TestNameShadowing:
    """SymPy reserves names like I and E; bound variables must win."""

    def test_imaginary_unit_name(self):
        assert evaluate("I * 3", {"I": 2}) == pytest.approx(6.0)

    def test_euler_name(self):
        assert evaluate("I * E", {"I": 2, "E": 3}) == pytest.approx(6.0)

    def test_function_name_as_variable(self):
        assert evaluate("gamma * 2", {"gamma": 4}) == pytest.approx(8.0)

    def test_constant_symbol_e(self):
        assert evaluate("k * T / e", {"k": 1.380649e-23, "T": 300.0, "e": 1.602176634e-19}) == pytest.approx(
            0.025852, rel=1e-4
        )


class TestErrors:
    """Every failure surfaces as EvaluationError."""

    def test_empty_expression(self):
        with pytest.raises(EvaluationError):
            evaluate("", {})

    def test_syntax_error(self):
        with pytest.raises(EvaluationError, match="parse"):
            evaluate("2 *", {})

    def test_undefined_symbol(self):
        with pytest.raises(EvaluationError, match="Undefined symbol"):
            evaluate("x + y", {"x": 1})

    def test_unknown_function(self):
        with pytest.raises(EvaluationError, match="Unknown function"):
            evaluate("foo(x)", {"x": 1})

    def test_division_by_zero(self):
        with pytest.raises(EvaluationError, match="non-finite"):
            evaluate("1 / x", {"x": 0})

    def test_domain_error(self):
        with pytest.raises(EvaluationError):
            evaluate("sqrt(x)", {"x": -1})

    def test_log_of_zero(self):
        with pytest.raises(EvaluationError):
            evaluate("log(x)", {"x": 0})


class TestCompile:
    """Compiled expressions are cached and accept arrays."""

    def test_cache_reuses_compiled_expression(self):
        first = compile_expression("a + b", ("a", "b"))
        second = compile_expression("a + b", ("a", "b"))
        assert first is second

    def test_array_evaluation(self):
        compiled = compile_expression("2 * x", ("x",))
        result = compiled({"x": np.array([1.0, 2.0, 3.0])})
        np.testing.assert_allclose(result, [2.0, 4.0, 6.0])


class TestToFiniteFloat:
    def test_real_complex_accepted(self):
        assert to_finite_float(complex(2.0, 0.0)) == 2.0

    def test_complex_rejected(self):
        with pytest.raises(EvaluationError, match="complex"):
            to_finite_float(complex(0.0, 1.0))

    def test_nan_rejected(self):
        with pytest.raises(EvaluationError):
            to_finite_float(float("nan"))

    def test_array_rejected(self):
        with pytest.raises(EvaluationError):
            to_finite_float(np.array([1.0, 2.0]))


class TestSyntaxAllowList:
    """Only arithmetic on names, numbers and known functions reaches SymPy."""

    @pytest.mark.parametrize("expression", [
        "().__class__.__base__.__subclasses__()",
        "x.real",
        "__import__('os')",
        "'abc'",
        "[x][0]",
        "(lambda: 1)()",
        "[i for i in (1, 2)]",
        "x if x else 1",
        "x < 1",
        "True * x",
        "sqrt(x=4)",
        "f(x)(x)",
    ])
    def test_rejected(self, expression):
        with pytest.raises(EvaluationError):
            evaluate(expression, {"x": 1})

    def test_shell_payload_never_runs(self, tmp_path):
        marker = tmp_path / "marker"
        payload = (
            "[c for c in ().__class__.__base__.__subclasses__() if c.__name__ == '_wrap_close']"
            f"[0].__init__.__globals__['system']('touch {marker}')"
        )
        with pytest.raises(EvaluationError):
            evaluate(payload, {})
        with pytest.raises(EvaluationError):
            evaluate(f"__import__('os').system('touch {marker}')", {})
        assert not marker.exists()

    def test_caret_and_functions_allowed(self):
        assert evaluate("atan2(y, x)^2 + abs(-x)", {"x": 1, "y": 0}) == pytest.approx(1.0)

    def test_modulo(self):
        assert evaluate("x % 3", {"x": 7}) == pytest.approx(1.0)


class TestOverflow:

    def test_huge_integer_power(self):
        with pytest.raises(EvaluationError, match="non-finite"):
            evaluate("10^400", {})

    def test_huge_power_with_variable(self):
        with pytest.raises(EvaluationError):
            evaluate("x * 10^400", {"x": 1})
