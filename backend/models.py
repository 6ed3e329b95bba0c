"""Pydantic models for CircuitSage API requests and responses."""

from __future__ import annotations

import keyword
import math
import re
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from engine.formatting import engineering_notation, format_inputs, format_value
from engine.models import Calculation, Constant, Formula, ResolvedVariables

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# --- Formulas ---

class FormulaInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    expression: str = Field(..., min_length=1, max_length=2000, description="Formula body, e.g. 'I * R'")
    description: Optional[str] = Field(None, max_length=2000)
    category: str = Field(..., min_length=1, max_length=100)
    variables: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("variables")
    @classmethod
    def _simple_identifiers(cls, variables: list[str]) -> list[str]:
        for v in variables:
            if not _IDENTIFIER.match(v):
                raise ValueError(f"Variable name '{v}' must be a simple identifier")
            if keyword.iskeyword(v) or v.startswith("__"):
                raise ValueError(f"Variable name '{v}' is reserved")
        if len(set(variables)) != len(variables):
            raise ValueError("Variable names must be unique")
        return variables

    def to_formula(self) -> Formula:
        return Formula(
            id="",
            name=self.name,
            expression=self.expression,
            category=self.category,
            variables=list(self.variables),
            description=self.description,
        )


class FormulaResponse(BaseModel):
    id: str
    name: str
    expression: str
    description: Optional[str] = None
    category: str
    variables: list[str]

    @classmethod
    def from_formula(cls, formula: Formula) -> "FormulaResponse":
        return cls(
            id=formula.id,
            name=formula.name,
            expression=formula.expression,
            description=formula.description,
            category=formula.category,
            variables=list(formula.variables),
        )


# --- Constants ---

class ConstantInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    symbol: str = Field(..., min_length=1, max_length=50, description="Token matched inside formula text")
    value: float
    unit: str = Field(..., max_length=50)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("Constant value must be finite")
        return value

    def to_constant(self) -> Constant:
        return Constant(
            id="",
            name=self.name,
            symbol=self.symbol,
            value=self.value,
            unit=self.unit,
            description=self.description,
        )


class ConstantResponse(BaseModel):
    id: str
    name: str
    symbol: str
    value: float
    unit: str
    description: Optional[str] = None
    display: str = ""

    @classmethod
    def from_constant(cls, constant: Constant) -> "ConstantResponse":
        return cls(
            id=constant.id,
            name=constant.name,
            symbol=constant.symbol,
            value=constant.value,
            unit=constant.unit,
            description=constant.description,
            display=engineering_notation(constant.value, constant.unit),
        )


class ResolvedVariablesResponse(BaseModel):
    formula_id: str
    constant_bound: dict[str, ConstantResponse]
    user_required: list[str]
    detected: list[ConstantResponse]

    @classmethod
    def from_resolved(cls, formula_id: str, resolved: ResolvedVariables) -> "ResolvedVariablesResponse":
        return cls(
            formula_id=formula_id,
            constant_bound={k: ConstantResponse.from_constant(c) for k, c in resolved.constant_bound.items()},
            user_required=list(resolved.user_required),
            detected=[ConstantResponse.from_constant(c) for c in resolved.detected],
        )


# --- Calculations ---

class CalculationResponse(BaseModel):
    id: str
    formula_id: str
    inputs: str = Field(..., description="JSON object of the bindings used, constants included")
    result: float
    timestamp: str
    formatted_result: str
    formatted_inputs: str
    formula_name: Optional[str] = None

    @classmethod
    def from_calculation(cls, calc: Calculation, formula: Optional[Formula] = None) -> "CalculationResponse":
        return cls(
            id=calc.id,
            formula_id=calc.formula_id,
            inputs=calc.inputs,
            result=calc.result,
            timestamp=calc.timestamp,
            formatted_result=format_value(calc.result),
            formatted_inputs=format_inputs(calc.inputs),
            formula_name=formula.name if formula else None,
        )


class CalculationListResponse(BaseModel):
    calculations: list[CalculationResponse]
    total: int


class CalculateRequest(BaseModel):
    formula_id: str = Field(..., min_length=1)
    inputs: dict[str, Union[float, str]] = Field(default_factory=dict)


class CalculateResponse(BaseModel):
    result: float
    formatted: str
    calculation: CalculationResponse
    formula: FormulaResponse


# --- Graphing ---

class GraphRequest(BaseModel):
    formula_id: str = Field(..., min_length=1)
    sweep_variable: str = Field(..., min_length=1)
    x_min: float = -10.0
    x_max: float = 10.0
    point_count: int = Field(100, description="Number of intervals; point_count + 1 samples are tried")
    fixed_values: dict[str, float] = Field(default_factory=dict)


class PointModel(BaseModel):
    x: float
    y: float


class GraphResponse(BaseModel):
    formula_id: str
    sweep_variable: str
    output_label: str
    points: list[PointModel]
    skipped: int
    constants_used: dict[str, float] = {}
