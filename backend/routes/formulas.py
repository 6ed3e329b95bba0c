"""Formula library routes: CRUD plus resolved-variable lookup."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response

from backend.models import FormulaInput, FormulaResponse, ResolvedVariablesResponse
from engine.resolution import resolve

router = APIRouter()


@router.get("/formulas", response_model=list[FormulaResponse])
async def list_formulas(
    request: Request,
    category: Optional[str] = Query(None, description="Exact category filter"),
    q: Optional[str] = Query(None, description="Search name, category or description"),
):
    """List stored formulas."""
    formulas = request.app.state.repository.list_formulas()

    if category:
        formulas = [f for f in formulas if f.category == category]

    if q:
        needle = q.lower()
        formulas = [
            f for f in formulas
            if needle in f.name.lower()
            or needle in f.category.lower()
            or needle in (f.description or "").lower()
        ]

    return [FormulaResponse.from_formula(f) for f in formulas]


@router.get("/formulas/{formula_id}", response_model=FormulaResponse)
async def get_formula(request: Request, formula_id: str):
    formula = request.app.state.repository.get_formula(formula_id)
    if not formula:
        raise HTTPException(status_code=404, detail="Formula not found")
    return FormulaResponse.from_formula(formula)


@router.post("/formulas", response_model=FormulaResponse, status_code=201)
async def create_formula(request: Request, body: FormulaInput):
    """Create a formula. The expression is only checked when it is evaluated."""
    formula = request.app.state.repository.create_formula(body.to_formula())
    return FormulaResponse.from_formula(formula)


@router.put("/formulas/{formula_id}", response_model=FormulaResponse)
async def update_formula(request: Request, formula_id: str, body: FormulaInput):
    formula = request.app.state.repository.update_formula(formula_id, body.to_formula())
    if not formula:
        raise HTTPException(status_code=404, detail="Formula not found")
    return FormulaResponse.from_formula(formula)


@router.delete("/formulas/{formula_id}", status_code=204)
async def delete_formula(request: Request, formula_id: str):
    """Delete a formula. History entries that reference it are kept."""
    if not request.app.state.repository.delete_formula(formula_id):
        raise HTTPException(status_code=404, detail="Formula not found")
    return Response(status_code=204)


@router.get("/formulas/{formula_id}/variables", response_model=ResolvedVariablesResponse)
async def get_formula_variables(request: Request, formula_id: str):
    """Which variables are supplied by constants and which the user must enter."""
    repo = request.app.state.repository
    formula = repo.get_formula(formula_id)
    if not formula:
        raise HTTPException(status_code=404, detail="Formula not found")
    resolved = resolve(formula, repo.list_constants())
    return ResolvedVariablesResponse.from_resolved(formula_id, resolved)
