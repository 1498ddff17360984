"""
Pairwise Pearson correlation across numeric columns.
"""
import logging
from typing import List

import numpy as np
import pandas as pd

from insight_engine.core.schemas import CorrelationResult, Dataset
from insight_engine.services.values import numeric_series

logger = logging.getLogger(__name__)

MAX_CORRELATION_COLUMNS = 5
MIN_PAIRED_VALUES = 3


def pearson(x: pd.Series, y: pd.Series) -> float:
    """
    Pearson correlation over the rows where both series have a value.

    Defined as 0 with fewer than 3 paired values or when either side has
    no variance.
    """
    paired = pd.concat([x.rename("x"), y.rename("y")], axis=1, join="inner").dropna()
    if len(paired) < MIN_PAIRED_VALUES:
        return 0.0

    dx = paired["x"].to_numpy() - paired["x"].mean()
    dy = paired["y"].to_numpy() - paired["y"].mean()

    numerator = float(np.sum(dx * dy))
    denominator = float(np.sqrt(np.sum(dx * dx) * np.sum(dy * dy)))
    if denominator == 0:
        return 0.0
    return float(np.clip(numerator / denominator, -1.0, 1.0))


def correlate_columns(dataset: Dataset, numeric_columns: List[str]) -> List[CorrelationResult]:
    """
    Correlate every unordered pair among the first numeric columns.

    Pairs come out in (i, j) order with i < j; pairs with no meaningful
    relationship (strength 'None') are dropped.
    """
    columns = numeric_columns[:MAX_CORRELATION_COLUMNS]
    series = {col: numeric_series(dataset.rows, col) for col in columns}

    results = []
    for i, first in enumerate(columns):
        for second in columns[i + 1:]:
            result = CorrelationResult(
                field1=first,
                field2=second,
                correlation=pearson(series[first], series[second]),
            )
            if result.strength != 'None':
                results.append(result)

    logger.debug(f"Computed {len(results)} correlations across {len(columns)} numeric columns")
    return results
