"""
Error taxonomy for the calculation and sampling pipeline.

Every failure is recovered by the caller and surfaced as a structured,
human-readable message. ``code`` is a stable machine identifier.
"""

from typing import Dict, List, Optional


class CalculatorError(Exception):
    """Base class for all pipeline failures."""

    code = "calculator_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict:
        return {"error": self.code, "detail": self.message}


class NotFoundError(CalculatorError):
    code = "not_found"

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.item_id = item_id

    def to_dict(self) -> Dict:
        return {**super().to_dict(), "id": self.item_id}


class InvalidInputError(CalculatorError):
    """A user-supplied value could not be parsed as a number."""

    code = "invalid_input"

    def __init__(self, key: str, raw_value):
        super().__init__(f'Invalid input for {key}: "{raw_value}"')
        self.key = key
        self.raw_value = raw_value

    def to_dict(self) -> Dict:
        return {**super().to_dict(), "key": self.key, "value": str(self.raw_value)}


class MissingVariablesError(CalculatorError):
    code = "missing_variables"
    label = "Missing values for"

    def __init__(self, variables: List[str]):
        super().__init__(f"{self.label}: {', '.join(variables)}")
        self.variables = list(variables)

    def to_dict(self) -> Dict:
        return {**super().to_dict(), "variables": self.variables}


class MissingFixedValuesError(MissingVariablesError):
    code = "missing_fixed_values"
    label = "Missing fixed values for"


class InvalidRangeError(CalculatorError):
    code = "invalid_range"

    def __init__(self, x_min: float, x_max: float):
        super().__init__("X Min must be less than X Max")
        self.x_min = x_min
        self.x_max = x_max


class InvalidPointCountError(CalculatorError):
    code = "invalid_point_count"

    def __init__(self, point_count, maximum: Optional[int] = None):
        if maximum is not None:
            message = f"Number of points must be between 2 and {maximum}"
        else:
            message = "Number of points must be at least 2"
        super().__init__(message)
        self.point_count = point_count
        self.maximum = maximum


class InvalidSweepVariableError(CalculatorError):
    code = "invalid_sweep_variable"

    def __init__(self, variable: str):
        super().__init__(f"'{variable}' is not a variable of this formula")
        self.variable = variable


class EvaluationError(CalculatorError):
    """The expression failed to parse or evaluate to a finite real number."""

    code = "evaluation_error"


class NoValidPointsError(CalculatorError):
    code = "no_valid_points"

    def __init__(self):
        super().__init__("No valid points produced. Check fixed values and ranges.")
