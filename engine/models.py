"""Domain records shared by the engine and the repository layer."""

import json
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional


@dataclass(frozen=True)
class Formula:
    """A named expression plus its declared variable names."""
    id: str
    name: str
    expression: str
    category: str
    variables: List[str] = field(default_factory=list)
    description: Optional[str] = None


@dataclass(frozen=True)
class Constant:
    """A physical constant matched into formulas by its symbol."""
    id: str
    name: str
    symbol: str
    value: float
    unit: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Calculation:
    """One history entry. ``inputs`` is the JSON text of the merged bindings."""
    id: str
    formula_id: str
    inputs: str
    result: float
    timestamp: str

    @property
    def bindings(self) -> Dict[str, float]:
        return json.loads(self.inputs)


@dataclass(frozen=True)
class ResolvedVariables:
    """Partition of a formula's declared variables for one constant catalog."""
    constant_bound: Dict[str, Constant]
    user_required: List[str]
    detected: List[Constant] = field(default_factory=list)

    @property
    def constant_values(self) -> Dict[str, float]:
        return {name: c.value for name, c in self.constant_bound.items()}


class Point(NamedTuple):
    x: float
    y: float
