"""Persistent repository backed by SQLAlchemy."""

import json
import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from backend.models_db import CalculationRow, ConstantRow, FormulaRow
from engine.models import Calculation, Constant, Formula
from engine.repository import Repository, new_id
from engine.seed_data import SEED_CONSTANTS, SEED_FORMULAS

logger = logging.getLogger(__name__)


def _to_formula(row: FormulaRow) -> Formula:
    return Formula(
        id=row.id,
        name=row.name,
        expression=row.expression,
        category=row.category,
        variables=json.loads(row.variables_json) if row.variables_json else [],
        description=row.description,
    )


def _to_constant(row: ConstantRow) -> Constant:
    return Constant(
        id=row.id,
        name=row.name,
        symbol=row.symbol,
        value=row.value,
        unit=row.unit,
        description=row.description,
    )


def _to_calculation(row: CalculationRow) -> Calculation:
    return Calculation(
        id=row.id,
        formula_id=row.formula_id,
        inputs=row.inputs,
        result=row.result,
        timestamp=row.timestamp,
    )


class SQLRepository(Repository):
    """Repository over the formulas, constants and calculations tables."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def seed(self) -> None:
        """Insert default formulas and constants when both tables are empty."""
        db = self._session_factory()
        try:
            if db.query(FormulaRow).count() or db.query(ConstantRow).count():
                return
            for f in SEED_FORMULAS:
                db.add(FormulaRow(
                    id=f["id"],
                    name=f["name"],
                    expression=f["expression"],
                    description=f.get("description"),
                    category=f["category"],
                    variables_json=json.dumps(f.get("variables", [])),
                ))
            for c in SEED_CONSTANTS:
                db.add(ConstantRow(**c))
            db.commit()
            logger.info("Seeded %d formulas and %d constants", len(SEED_FORMULAS), len(SEED_CONSTANTS))
        finally:
            db.close()

    # --- Formulas ---

    def list_formulas(self) -> List[Formula]:
        db = self._session_factory()
        try:
            rows = db.query(FormulaRow).order_by(FormulaRow.category, FormulaRow.name).all()
            return [_to_formula(r) for r in rows]
        finally:
            db.close()

    def get_formula(self, formula_id: str) -> Optional[Formula]:
        db = self._session_factory()
        try:
            row = db.get(FormulaRow, formula_id)
            return _to_formula(row) if row else None
        finally:
            db.close()

    def create_formula(self, formula: Formula) -> Formula:
        stored = replace(formula, id=new_id())
        db = self._session_factory()
        try:
            db.add(FormulaRow(
                id=stored.id,
                name=stored.name,
                expression=stored.expression,
                description=stored.description,
                category=stored.category,
                variables_json=json.dumps(list(stored.variables)),
            ))
            db.commit()
        finally:
            db.close()
        return stored

    def update_formula(self, formula_id: str, formula: Formula) -> Optional[Formula]:
        db = self._session_factory()
        try:
            row = db.get(FormulaRow, formula_id)
            if not row:
                return None
            row.name = formula.name
            row.expression = formula.expression
            row.description = formula.description
            row.category = formula.category
            row.variables_json = json.dumps(list(formula.variables))
            db.commit()
            return _to_formula(row)
        finally:
            db.close()

    def delete_formula(self, formula_id: str) -> bool:
        db = self._session_factory()
        try:
            row = db.get(FormulaRow, formula_id)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True
        finally:
            db.close()

    # --- Constants ---

    def list_constants(self) -> List[Constant]:
        db = self._session_factory()
        try:
            rows = db.query(ConstantRow).order_by(ConstantRow.name).all()
            return [_to_constant(r) for r in rows]
        finally:
            db.close()

    def get_constant(self, constant_id: str) -> Optional[Constant]:
        db = self._session_factory()
        try:
            row = db.get(ConstantRow, constant_id)
            return _to_constant(row) if row else None
        finally:
            db.close()

    def create_constant(self, constant: Constant) -> Constant:
        stored = replace(constant, id=new_id())
        db = self._session_factory()
        try:
            db.add(ConstantRow(
                id=stored.id,
                name=stored.name,
                symbol=stored.symbol,
                value=stored.value,
                unit=stored.unit,
                description=stored.description,
            ))
            db.commit()
        finally:
            db.close()
        return stored

    def update_constant(self, constant_id: str, constant: Constant) -> Optional[Constant]:
        db = self._session_factory()
        try:
            row = db.get(ConstantRow, constant_id)
            if not row:
                return None
            row.name = constant.name
            row.symbol = constant.symbol
            row.value = constant.value
            row.unit = constant.unit
            row.description = constant.description
            db.commit()
            return _to_constant(row)
        finally:
            db.close()

    def delete_constant(self, constant_id: str) -> bool:
        db = self._session_factory()
        try:
            row = db.get(ConstantRow, constant_id)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True
        finally:
            db.close()

    # --- Calculation history ---

    def add_calculation(self, calculation: Calculation) -> Calculation:
        db = self._session_factory()
        try:
            last_seq = db.query(func.max(CalculationRow.seq)).scalar() or 0
            db.add(CalculationRow(
                seq=last_seq + 1,
                id=calculation.id,
                formula_id=calculation.formula_id,
                inputs=calculation.inputs,
                result=calculation.result,
                timestamp=calculation.timestamp,
            ))
            db.commit()
        finally:
            db.close()
        return calculation

    def _history_query(self, db, formula_ids: Optional[Iterable[str]]):
        query = db.query(CalculationRow)
        if formula_ids is not None:
            query = query.filter(CalculationRow.formula_id.in_(list(formula_ids)))
        return query

    def list_calculations(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        formula_ids: Optional[Iterable[str]] = None,
    ) -> List[Calculation]:
        db = self._session_factory()
        try:
            query = self._history_query(db, formula_ids).order_by(
                CalculationRow.timestamp.desc(), CalculationRow.seq.desc(),
            )
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [_to_calculation(r) for r in query.all()]
        finally:
            db.close()

    def count_calculations(self, formula_ids: Optional[Iterable[str]] = None) -> int:
        db = self._session_factory()
        try:
            return self._history_query(db, formula_ids).count()
        finally:
            db.close()

    def clear_calculations(self) -> int:
        db = self._session_factory()
        try:
            removed = db.query(CalculationRow).delete()
            db.commit()
            return removed
        finally:
            db.close()
