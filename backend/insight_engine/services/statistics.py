"""
Descriptive statistics for numeric columns.
"""
import logging
from typing import Optional

import numpy as np
import pandas as pd

from insight_engine.core.schemas import Dataset, DescriptiveStats
from insight_engine.services.values import numeric_series

logger = logging.getLogger(__name__)


def lower_median(values: pd.Series) -> float:
    """
    Value at position floor(n/2) of the ascending sort.

    Even-length columns are not averaged; reports built on earlier
    exports show this value, so it is kept.
    """
    ordered = np.sort(values.to_numpy())
    return float(ordered[len(ordered) // 2])


def population_std(values: pd.Series) -> float:
    return float(values.std(ddof=0)) if len(values) else 0.0


def describe_series(values: pd.Series) -> Optional[DescriptiveStats]:
    """Summary statistics of parsed numeric values; None when there are none."""
    if values.empty:
        return None

    total = float(values.sum())
    count = int(len(values))
    return DescriptiveStats(
        count=count,
        mean=total / count,
        median=lower_median(values),
        std_dev=population_std(values),
        min=float(values.min()),
        max=float(values.max()),
        sum=total,
    )


def describe_column(dataset: Dataset, field: str) -> Optional[DescriptiveStats]:
    """Summary statistics for one field of a dataset."""
    return describe_series(numeric_series(dataset.rows, field))
