"""
IQR-based outlier detection.
"""
import logging
import math
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from insight_engine.core.schemas import Dataset, OutlierPoint, OutlierResult
from insight_engine.services.values import numeric_series

logger = logging.getLogger(__name__)

IQR_MULTIPLIER = 1.5
MIN_OUTLIER_VALUES = 4
MAX_OUTLIER_COLUMNS = 5
MAX_REPORTED_OUTLIERS = 10
MAX_OUTLIER_SHARE = 0.1


def iqr_bounds(values: pd.Series) -> Tuple[float, float]:
    """
    Lower and upper fences around the interquartile range.

    Quartiles are read at floor(0.25 * n) and floor(0.75 * n) of the
    ascending sort rather than interpolated.
    """
    ordered = np.sort(values.to_numpy())
    n = len(ordered)
    q1 = float(ordered[math.floor(n * 0.25)])
    q3 = float(ordered[math.floor(n * 0.75)])
    iqr = q3 - q1
    return q1 - IQR_MULTIPLIER * iqr, q3 + IQR_MULTIPLIER * iqr


def detect_outliers_iqr(values: pd.Series) -> List[OutlierPoint]:
    """
    Every value strictly outside the IQR fences, in row order.

    ``values`` is indexed by original row index, which is what each
    OutlierPoint reports. Fewer than 4 values yield no outliers.
    """
    if len(values) < MIN_OUTLIER_VALUES:
        return []

    lower, upper = iqr_bounds(values)
    flagged = values[(values < lower) | (values > upper)]
    return [OutlierPoint(index=int(i), value=float(v)) for i, v in flagged.items()]


def find_column_outliers(dataset: Dataset, field: str) -> Tuple[Optional[OutlierResult], int]:
    """
    Outlier result for one column plus the total number of outliers found.

    The result is None unless outliers exist and make up less than 10% of
    the column; only the first 10 are kept in the result.
    """
    values = numeric_series(dataset.rows, field)
    detected = detect_outliers_iqr(values)
    if not detected or len(detected) >= len(values) * MAX_OUTLIER_SHARE:
        return None, len(detected)

    return OutlierResult(field=field, outliers=detected[:MAX_REPORTED_OUTLIERS]), len(detected)
