"""
Axis inference service.

Picks the default X and Y fields for a chart from the column profile
using deterministic rules.
"""
import logging
from typing import List, Tuple

from insight_engine.core.schemas import ColumnInfo

logger = logging.getLogger(__name__)

# Column names that usually hold the headline measure of a dataset
MEASURE_NAME_HINTS = ['sales', 'revenue', 'amount', 'total', 'price', 'quantity', 'units', 'value', 'count']


def recommend_axes(columns: List[ColumnInfo], fields: List[str]) -> Tuple[str, str]:
    """
    Recommend (x_axis, y_axis) for a first chart.

    X: first date column, else first categorical column, else first field.
    Y: first numeric column named like a measure, else first numeric
    column, else second field, else first field.

    Returns ("", "") when there are no fields.
    """
    if not fields:
        return "", ""

    date_columns = [c.name for c in columns if c.type == 'date']
    categorical_columns = [c.name for c in columns if c.type == 'categorical']
    numeric_columns = [c.name for c in columns if c.type == 'numeric']

    x_axis = (date_columns or categorical_columns or fields)[0]

    named_measure = next(
        (col for col in numeric_columns if any(hint in col.lower() for hint in MEASURE_NAME_HINTS)),
        None
    )
    if named_measure:
        y_axis = named_measure
    elif numeric_columns:
        y_axis = numeric_columns[0]
    elif len(fields) > 1:
        y_axis = fields[1]
    else:
        y_axis = fields[0]

    logger.debug(f"Recommended axes: x={x_axis!r}, y={y_axis!r}")
    return x_axis, y_axis
