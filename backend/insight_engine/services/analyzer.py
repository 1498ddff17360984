"""
Insight aggregation.

Runs every analysis over a dataset and assembles one AnalyticsResult.
Insights are emitted in a fixed order that callers use as display order:

    overview -> per numeric column (trend, spike, drop, range)
    -> per categorical column (dominant, best performing) -> seasonality
    -> strong correlations -> outliers -> recommendations
"""
import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from insight_engine.core.errors import DatasetContractError, ErrorCodes
from insight_engine.core.performance import track_performance
from insight_engine.core.schemas import AnalyticsResult, Dataset
from insight_engine.services.correlation import correlate_columns
from insight_engine.services.inference import recommend_axes
from insight_engine.services.insights import (
    best_category_insight,
    correlation_insight,
    dominant_value_insight,
    numeric_column_insights,
    outlier_insight,
    overview_insight,
    recommendation_insights,
    seasonality_insight,
)
from insight_engine.services.outliers import MAX_OUTLIER_COLUMNS, find_column_outliers
from insight_engine.services.profiler import analyze_columns
from insight_engine.services.values import numeric_series

logger = logging.getLogger(__name__)

MAX_NUMERIC_COLUMNS = 5
MAX_CATEGORICAL_COLUMNS = 3


def coerce_dataset(data: Union[Dataset, Mapping[str, Any]]) -> Dataset:
    """
    Accept a Dataset or a plain {"fields": [...], "rows": [...]} mapping.

    Raises:
        DatasetContractError: for None or anything that is not dataset-shaped
    """
    if isinstance(data, Dataset):
        return data
    if isinstance(data, Mapping):
        try:
            return Dataset.model_validate(dict(data))
        except ValidationError as e:
            code = ErrorCodes.INVALID_DATASET
            if any("duplicate field names" in err.get("msg", "") for err in e.errors()):
                code = ErrorCodes.DUPLICATE_FIELDS
            raise DatasetContractError(f"Malformed dataset: {e.error_count()} validation error(s)", code=code) from e
    raise DatasetContractError(f"Expected a Dataset, got {type(data).__name__}")


@track_performance("run_full_analysis")
def run_full_analysis(data: Union[Dataset, Mapping[str, Any]]) -> AnalyticsResult:
    """
    Profile the columns of a dataset and generate insights, correlations,
    outliers and axis recommendations.

    The dataset is never mutated and identical input always produces an
    identical result. An empty dataset yields an empty result.
    """
    dataset = coerce_dataset(data)
    if dataset.is_empty():
        logger.info("Empty dataset, skipping analysis")
        return AnalyticsResult()

    columns = analyze_columns(dataset)
    numeric_columns = [c.name for c in columns if c.is_numeric]
    date_columns = [c.name for c in columns if c.is_date]
    categorical_columns = [c.name for c in columns if c.type == 'categorical']
    date_column = date_columns[0] if date_columns else None

    x_axis, y_axis = recommend_axes(columns, dataset.fields)

    insights = [overview_insight(dataset, len(numeric_columns), len(date_columns), len(categorical_columns))]

    for col in numeric_columns[:MAX_NUMERIC_COLUMNS]:
        insights.extend(numeric_column_insights(col, numeric_series(dataset.rows, col)))

    for col in categorical_columns[:MAX_CATEGORICAL_COLUMNS]:
        dominant = dominant_value_insight(dataset, col)
        if dominant:
            insights.append(dominant)
        if numeric_columns:
            best = best_category_insight(dataset, col, numeric_columns[0])
            if best:
                insights.append(best)

    if date_column and numeric_columns:
        seasonal = seasonality_insight(dataset, date_column, numeric_columns[0])
        if seasonal:
            insights.append(seasonal)

    correlations = correlate_columns(dataset, numeric_columns)
    insights.extend(correlation_insight(c) for c in correlations if c.strength == 'Strong')

    outliers = []
    for col in numeric_columns[:MAX_OUTLIER_COLUMNS]:
        result, total = find_column_outliers(dataset, col)
        if result:
            outliers.append(result)
            insights.append(outlier_insight(col, total))

    insights.extend(recommendation_insights(numeric_columns, date_column))

    logger.info(
        f"Analyzed {dataset.row_count} rows x {len(dataset.fields)} columns: "
        f"{len(insights)} insights, {len(correlations)} correlations, {len(outliers)} outlier sets"
    )

    return AnalyticsResult(
        columns=columns,
        insights=insights,
        correlations=correlations,
        outliers=outliers,
        recommended_x_axis=x_axis,
        recommended_y_axis=y_axis,
        date_column=date_column,
        numeric_columns=numeric_columns,
        categorical_columns=categorical_columns,
    )
