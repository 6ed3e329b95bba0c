"""
Storage abstraction for formulas, constants and calculation history.

The pipeline depends only on ``Repository``. ``InMemoryRepository`` is the
dict-backed implementation used by tests and by the engine on its own; the
backend provides a SQLAlchemy implementation with the same contract.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from engine.models import Calculation, Constant, Formula
from engine.seed_data import SEED_CONSTANTS, SEED_FORMULAS


def new_id() -> str:
    return str(uuid.uuid4())


class Repository(ABC):
    """CRUD per entity plus an append-only calculation log."""

    # --- Formulas ---

    @abstractmethod
    def list_formulas(self) -> List[Formula]: ...

    @abstractmethod
    def get_formula(self, formula_id: str) -> Optional[Formula]: ...

    @abstractmethod
    def create_formula(self, formula: Formula) -> Formula:
        """Store ``formula`` under a freshly generated id (its own id is ignored)."""

    @abstractmethod
    def update_formula(self, formula_id: str, formula: Formula) -> Optional[Formula]: ...

    @abstractmethod
    def delete_formula(self, formula_id: str) -> bool: ...

    # --- Constants ---

    @abstractmethod
    def list_constants(self) -> List[Constant]: ...

    @abstractmethod
    def get_constant(self, constant_id: str) -> Optional[Constant]: ...

    @abstractmethod
    def create_constant(self, constant: Constant) -> Constant: ...

    @abstractmethod
    def update_constant(self, constant_id: str, constant: Constant) -> Optional[Constant]: ...

    @abstractmethod
    def delete_constant(self, constant_id: str) -> bool: ...

    # --- Calculation history ---

    @abstractmethod
    def add_calculation(self, calculation: Calculation) -> Calculation: ...

    @abstractmethod
    def list_calculations(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        formula_ids: Optional[Iterable[str]] = None,
    ) -> List[Calculation]:
        """Newest first."""

    @abstractmethod
    def count_calculations(self, formula_ids: Optional[Iterable[str]] = None) -> int: ...

    @abstractmethod
    def clear_calculations(self) -> int:
        """Delete every history entry and return how many were removed."""

    # Lets the repository act directly as the pipeline's history sink
    def append(self, calculation: Calculation) -> Calculation:
        return self.add_calculation(calculation)

    @abstractmethod
    def seed(self) -> None:
        """Insert the default formulas and constants with their fixed ids."""


class InMemoryRepository(Repository):
    """Dict-backed repository. Insertion order is preserved for listings."""

    def __init__(self, seed: bool = True):
        self._formulas: Dict[str, Formula] = {}
        self._constants: Dict[str, Constant] = {}
        self._calculations: List[Calculation] = []
        if seed:
            self.seed()

    def seed(self) -> None:
        for f in SEED_FORMULAS:
            self._formulas[f['id']] = Formula(**f)
        for c in SEED_CONSTANTS:
            self._constants[c['id']] = Constant(**c)

    def list_formulas(self) -> List[Formula]:
        return list(self._formulas.values())

    def get_formula(self, formula_id: str) -> Optional[Formula]:
        return self._formulas.get(formula_id)

    def create_formula(self, formula: Formula) -> Formula:
        stored = replace(formula, id=new_id(), variables=list(formula.variables))
        self._formulas[stored.id] = stored
        return stored

    def update_formula(self, formula_id: str, formula: Formula) -> Optional[Formula]:
        if formula_id not in self._formulas:
            return None
        stored = replace(formula, id=formula_id, variables=list(formula.variables))
        self._formulas[formula_id] = stored
        return stored

    def delete_formula(self, formula_id: str) -> bool:
        return self._formulas.pop(formula_id, None) is not None

    def list_constants(self) -> List[Constant]:
        return list(self._constants.values())

    def get_constant(self, constant_id: str) -> Optional[Constant]:
        return self._constants.get(constant_id)

    def create_constant(self, constant: Constant) -> Constant:
        stored = replace(constant, id=new_id())
        self._constants[stored.id] = stored
        return stored

    def update_constant(self, constant_id: str, constant: Constant) -> Optional[Constant]:
        if constant_id not in self._constants:
            return None
        stored = replace(constant, id=constant_id)
        self._constants[constant_id] = stored
        return stored

    def delete_constant(self, constant_id: str) -> bool:
        return self._constants.pop(constant_id, None) is not None

    def add_calculation(self, calculation: Calculation) -> Calculation:
        self._calculations.append(calculation)
        return calculation

    def _filtered(self, formula_ids: Optional[Iterable[str]]) -> List[Calculation]:
        # Stable sort keeps insertion order among equal timestamps, reversed
        newest_first = sorted(
            reversed(self._calculations), key=lambda c: c.timestamp, reverse=True,
        )
        if formula_ids is None:
            return newest_first
        wanted = set(formula_ids)
        return [c for c in newest_first if c.formula_id in wanted]

    def list_calculations(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        formula_ids: Optional[Iterable[str]] = None,
    ) -> List[Calculation]:
        rows = self._filtered(formula_ids)[offset:]
        if limit is not None:
            rows = rows[:limit]
        return rows

    def count_calculations(self, formula_ids: Optional[Iterable[str]] = None) -> int:
        return len(self._filtered(formula_ids))

    def clear_calculations(self) -> int:
        removed = len(self._calculations)
        self._calculations.clear()
        return removed
