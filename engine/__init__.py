"""
CircuitSage Compute Engine

Formula evaluation, constant auto-detection and curve sampling for the
electronics formula calculator.

All evaluation goes through engine.evaluator; nothing else parses formula text.
"""

from engine.models import Formula, Constant, Calculation, ResolvedVariables, Point
from engine.errors import (
    CalculatorError,
    NotFoundError,
    InvalidInputError,
    MissingVariablesError,
    MissingFixedValuesError,
    InvalidRangeError,
    InvalidPointCountError,
    InvalidSweepVariableError,
    EvaluationError,
    NoValidPointsError,
)
from engine.evaluator import evaluate, compile_expression
from engine.resolution import resolve, detect_constants
from engine.calculator import calculate, run_calculation, run_formula, parse_inputs, replay
from engine.sampling import sample, output_label
from engine.formatting import format_value, format_inputs, engineering_notation
from engine.export import export_curve_csv, export_history_csv
from engine.repository import Repository, InMemoryRepository

__version__ = "0.1.0"
