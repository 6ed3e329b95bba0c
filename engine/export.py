"""CSV export for sampled curves and calculation history."""

import csv
import io
from typing import Dict, Iterable

from engine.formatting import format_inputs
from engine.models import Calculation, Formula, Point


def export_curve_csv(points: Iterable[Point], x_label: str = 'x', y_label: str = 'y') -> str:
    """Export sampled points as a two-column CSV string."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([x_label, y_label])
    for point in points:
        writer.writerow([repr(point.x), repr(point.y)])
    return output.getvalue()


def export_history_csv(calculations: Iterable[Calculation], formulas_by_id: Dict[str, Formula]) -> str:
    """
    Export calculation history as CSV.

    Entries whose formula has since been deleted show the formula id instead
    of its name.
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Timestamp', 'Formula', 'Category', 'Inputs', 'Result'])

    for calc in calculations:
        formula = formulas_by_id.get(calc.formula_id)
        writer.writerow([
            calc.timestamp,
            formula.name if formula else calc.formula_id,
            formula.category if formula else '',
            format_inputs(calc.inputs),
            repr(calc.result),
        ])

    return output.getvalue()
