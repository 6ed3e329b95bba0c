"""Graph routes: sample a formula over one swept variable."""

from fastapi import APIRouter, Request, Response

from backend.models import GraphRequest, GraphResponse, PointModel
from engine.errors import NotFoundError
from engine.export import export_curve_csv
from engine.resolution import resolve
from engine.sampling import output_label, sample

router = APIRouter()


def _sample_curve(request: Request, body: GraphRequest):
    repo = request.app.state.repository
    formula = repo.get_formula(body.formula_id)
    if formula is None:
        raise NotFoundError("Formula", body.formula_id)

    # One catalog snapshot for both detection and sampling
    constants = repo.list_constants()
    points = sample(
        formula,
        constants,
        body.sweep_variable,
        body.x_min,
        body.x_max,
        body.point_count,
        body.fixed_values,
        max_points=request.app.state.settings.graph_point_limit,
    )
    return formula, resolve(formula, constants), points


@router.post("/graph", response_model=GraphResponse)
async def graph_formula(request: Request, body: GraphRequest):
    """Sample the formula on a uniform grid; undefined points are skipped."""
    formula, resolved, points = _sample_curve(request, body)

    return GraphResponse(
        formula_id=formula.id,
        sweep_variable=body.sweep_variable,
        output_label=output_label(formula),
        points=[PointModel(x=p.x, y=p.y) for p in points],
        skipped=body.point_count + 1 - len(points),
        constants_used=resolved.constant_values,
    )


@router.post("/graph/export")
async def export_graph(request: Request, body: GraphRequest):
    """Sample the formula and return the points as CSV."""
    formula, _, points = _sample_curve(request, body)
    csv_text = export_curve_csv(points, x_label=body.sweep_variable, y_label=output_label(formula))

    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=graph.csv"},
    )
