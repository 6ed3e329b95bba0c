"""Calculation routes: run a formula and browse or clear history."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request, Response

from backend.models import (
    CalculateRequest,
    CalculateResponse,
    CalculationListResponse,
    CalculationResponse,
    FormulaResponse,
)
from engine.calculator import run_formula
from engine.errors import NotFoundError
from engine.export import export_history_csv
from engine.formatting import format_value

logger = logging.getLogger(__name__)

router = APIRouter()


def _matching_formula_ids(formulas, q: Optional[str]):
    """Formula ids whose name or category contains ``q``; None means no filter."""
    if not q:
        return None
    needle = q.lower()
    return [f.id for f in formulas if needle in f.name.lower() or needle in f.category.lower()]


@router.post("/calculate", response_model=CalculateResponse)
async def calculate_endpoint(request: Request, body: CalculateRequest):
    """
    Evaluate a stored formula and append the result to history.

    Constants whose symbol matches a declared variable are filled in
    automatically and override any user-supplied value for that name.
    """
    repo = request.app.state.repository
    formula = repo.get_formula(body.formula_id)
    if formula is None:
        raise NotFoundError("Formula", body.formula_id)
    calculation = run_formula(repo, formula, body.inputs)

    return CalculateResponse(
        result=calculation.result,
        formatted=format_value(calculation.result),
        calculation=CalculationResponse.from_calculation(calculation, formula),
        formula=FormulaResponse.from_formula(formula),
    )


@router.get("/calculations", response_model=CalculationListResponse)
async def list_calculations(
    request: Request,
    q: Optional[str] = Query(None, description="Search formula name or category"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """Calculation history, newest first."""
    repo = request.app.state.repository
    if limit is None:
        limit = request.app.state.settings.history_page_limit

    formulas = {f.id: f for f in repo.list_formulas()}
    formula_ids = _matching_formula_ids(formulas.values(), q)

    calculations = repo.list_calculations(limit=limit, offset=offset, formula_ids=formula_ids)
    total = repo.count_calculations(formula_ids=formula_ids)

    return CalculationListResponse(
        calculations=[
            CalculationResponse.from_calculation(c, formulas.get(c.formula_id))
            for c in calculations
        ],
        total=total,
    )


@router.get("/calculations/export")
async def export_calculations(
    request: Request,
    q: Optional[str] = Query(None, description="Search formula name or category"),
):
    """Download the full history as CSV."""
    repo = request.app.state.repository
    formulas = {f.id: f for f in repo.list_formulas()}
    calculations = repo.list_calculations(formula_ids=_matching_formula_ids(formulas.values(), q))

    return Response(
        content=export_history_csv(calculations, formulas),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=calculation_history.csv"},
    )


@router.delete("/calculations", status_code=204)
async def clear_calculations(request: Request):
    """Remove every history entry."""
    removed = request.app.state.repository.clear_calculations()
    logger.info("Cleared %d calculations", removed)
    return Response(status_code=204)
