"""
Tests for the calculation pipeline.

Validates:
1. Plain evaluation (Ohm's law)
2. Constant auto-supply and constant precedence over user input
3. Invalid and missing inputs abort without touching history
4. Determinism and the stored-inputs round trip
5. The repository-backed operation boundary
"""

import json
from datetime import datetime, timezone

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from engine.calculator import calculate, parse_inputs, parse_number, replay, run_calculation, run_formula
from engine.errors import EvaluationError, InvalidInputError, MissingVariablesError, NotFoundError
from engine.models import Constant, Formula
from engine.repository import InMemoryRepository


OHMS_LAW = Formula(id="ohms", name="Ohm's Law (Voltage)", expression="I * R",
                   category="Basic Electronics", variables=["I", "R"])
DISTANCE = Formula(id="distance", name="Light Distance", expression="c * t",
                   category="Electromagnetics", variables=["c", "t"])
SPEED_OF_LIGHT = Constant(id="speed-of-light", name="Speed of Light", symbol="c",
                          value=299792458.0, unit="m/s")


class TestParseInputs:

    def test_numeric_text(self):
        assert parse_inputs({"I": "2", "R": " 10.5 "}) == {"I": 2.0, "R": 10.5}

    def test_scientific_notation(self):
        assert parse_number("C", "4.7e-9") == pytest.approx(4.7e-9)

    def test_numbers_pass_through(self):
        assert parse_inputs({"I": 2, "R": 1.5}) == {"I": 2.0, "R": 1.5}

    @pytest.mark.parametrize("raw", ["abc", "", "  ", "nan", "inf", "1,5", True])
    def test_rejected_values(self, raw):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_number("I", raw)
        assert exc_info.value.key == "I"
        assert exc_info.value.raw_value == raw


class TestCalculate:

    def test_ohms_law(self):
        calc = calculate(OHMS_LAW, [], {"I": "2", "R": "10"})
        assert calc.result == pytest.approx(20.0)
        assert calc.formula_id == "ohms"
        assert json.loads(calc.inputs) == {"I": 2.0, "R": 10.0}

    def test_constant_supplied_automatically(self):
        history = InMemoryRepository(seed=False)
        calc = calculate(DISTANCE, [SPEED_OF_LIGHT], {"t": "2"}, history=history)

        assert calc.result == pytest.approx(2 * 299792458.0)
        assert json.loads(calc.inputs)["c"] == 299792458.0
        assert history.list_calculations() == [calc]

    def test_constant_wins_over_user_value(self):
        calc = calculate(DISTANCE, [SPEED_OF_LIGHT], {"c": "1", "t": "1"})
        assert calc.result == pytest.approx(299792458.0)
        assert json.loads(calc.inputs)["c"] == 299792458.0

    def test_invalid_input_aborts(self):
        history = InMemoryRepository(seed=False)
        with pytest.raises(InvalidInputError) as exc_info:
            calculate(OHMS_LAW, [], {"I": "abc"}, history=history)

        assert exc_info.value.key == "I"
        assert exc_info.value.raw_value == "abc"
        assert history.count_calculations() == 0

    def test_invalid_input_reported_before_missing(self):
        with pytest.raises(InvalidInputError):
            calculate(OHMS_LAW, [], {"I": "x"})

    def test_missing_variables(self):
        history = InMemoryRepository(seed=False)
        with pytest.raises(MissingVariablesError) as exc_info:
            calculate(OHMS_LAW, [], {"I": "2"}, history=history)

        assert exc_info.value.variables == ["R"]
        assert "R" in str(exc_info.value)
        assert history.count_calculations() == 0

    def test_evaluation_error_not_recorded(self):
        formula = Formula(id="div", name="Current", expression="V / R",
                          category="Basic Electronics", variables=["V", "R"])
        history = InMemoryRepository(seed=False)
        with pytest.raises(EvaluationError):
            calculate(formula, [], {"V": "5", "R": "0"}, history=history)
        assert history.count_calculations() == 0

    def test_malformed_expression(self):
        formula = Formula(id="bad", name="Bad", expression="I * * R",
                          category="Test", variables=["I", "R"])
        with pytest.raises(EvaluationError):
            calculate(formula, [], {"I": "1", "R": "1"})

    def test_clock_sets_timestamp(self):
        fixed = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        calc = calculate(OHMS_LAW, [], {"I": "1", "R": "1"}, clock=lambda: fixed)
        assert calc.timestamp == fixed.isoformat()

    def test_deterministic_and_pure(self):
        constants = [SPEED_OF_LIGHT]
        first = calculate(DISTANCE, constants, {"t": "3"})
        second = calculate(DISTANCE, constants, {"t": "3"})

        assert first.result == second.result
        assert first.id != second.id
        assert constants == [SPEED_OF_LIGHT]
        assert DISTANCE.variables == ["c", "t"]

    def test_replay_reproduces_result(self):
        calc = calculate(DISTANCE, [SPEED_OF_LIGHT], {"t": "0.125"})
        assert replay(calc, DISTANCE.expression) == calc.result


class TestRunCalculation:

    def test_persists_to_repository(self):
        repo = InMemoryRepository()
        calc = run_calculation(repo, "ohms-law-voltage", {"I": "2", "R": "10"})

        assert calc.result == pytest.approx(20.0)
        assert repo.list_calculations() == [calc]

    def test_uses_catalog_constants(self):
        repo = InMemoryRepository()
        calc = run_calculation(repo, "wavelength", {"f": "1e6"})
        assert calc.result == pytest.approx(299.792458)
        assert calc.bindings == {"f": 1e6, "c": 299792458.0}

    def test_unknown_formula(self):
        repo = InMemoryRepository()
        with pytest.raises(NotFoundError):
            run_calculation(repo, "missing", {})
        assert repo.count_calculations() == 0

    def test_run_formula_uses_given_formula(self):
        repo = InMemoryRepository(seed=False)
        calc = run_formula(repo, OHMS_LAW, {"I": "3", "R": "2"})

        assert calc.result == pytest.approx(6.0)
        assert calc.formula_id == "ohms"
        assert repo.list_calculations() == [calc]
