"""
Natural language insight generation.

Each builder turns one statistical signal (trend, spike, dominant value,
seasonality, correlation, outlier) into an Insight. Builders return None
or an empty list when the signal is absent or the sample is too small.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from insight_engine.core.schemas import CorrelationResult, Dataset, Insight
from insight_engine.services.statistics import describe_series, population_std
from insight_engine.services.values import MONTH_NAMES, extract_month, format_number, to_label, to_number

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 10
TREND_HIGH_CONFIDENCE = 25
SPIKE_SIGMA = 2
SEASONALITY_MIN_MONTHS = 3
SEASONALITY_THRESHOLD = 1.3
SEASONALITY_HIGH_CONFIDENCE = 1.5
OUTLIER_WARNING_COUNT = 5


def calculate_trend(values: pd.Series) -> Optional[Dict[str, Any]]:
    """
    Compare the mean of the second half of a column to the first half.

    Values stay in row order. The split point is floor(n/2).

    Returns:
        Dict with 'direction' ('increase' or 'decrease'), 'change_percent'
        and both half means, or None with fewer than 2 values
    """
    if len(values) < 2:
        return None

    mid = len(values) // 2
    first_mean = float(values.iloc[:mid].mean())
    second_mean = float(values.iloc[mid:].mean())
    change_percent = (second_mean - first_mean) / abs(first_mean or 1) * 100

    return {
        'direction': 'increase' if change_percent > 0 else 'decrease',
        'change_percent': change_percent,
        'first_mean': first_mean,
        'second_mean': second_mean,
    }


def count_spikes_and_drops(values: pd.Series) -> Tuple[int, int]:
    """Values more than two population standard deviations above / below the mean."""
    if len(values) < 2:
        return 0, 0
    mean = float(values.mean())
    spread = SPIKE_SIGMA * population_std(values)
    spikes = int((values > mean + spread).sum())
    drops = int((values < mean - spread).sum())
    return spikes, drops


def numeric_column_insights(field: str, values: pd.Series) -> List[Insight]:
    """Trend, spike, drop and range insights for one numeric column."""
    stats = describe_series(values)
    if stats is None:
        return []

    insights = []

    trend = calculate_trend(values)
    if trend and abs(trend['change_percent']) > TREND_THRESHOLD:
        change = trend['change_percent']
        rising = change > 0
        insights.append(Insight(
            id=f"trend-{field}",
            type='trend',
            title=f"📈 Upward Trend in {field}" if rising else f"📉 Downward Trend in {field}",
            description=(
                f"{field} shows a {abs(change):.1f}% {trend['direction']} "
                f"comparing first and second half of data."
            ),
            confidence='High' if abs(change) > TREND_HIGH_CONFIDENCE else 'Medium',
            category='Trend',
            change=change,
        ))

    spikes, drops = count_spikes_and_drops(values)
    if spikes > 0:
        insights.append(Insight(
            id=f"spike-{field}",
            type='anomaly',
            title=f"⚡ Spikes Detected in {field}",
            description=(
                f"Found {spikes} unusually high values (>2σ above mean) in {field}. "
                f"These may indicate peak periods or anomalies."
            ),
            confidence='Medium',
            category='Anomaly',
            value=spikes,
            severity='warning',
        ))
    if drops > 0:
        insights.append(Insight(
            id=f"drop-{field}",
            type='anomaly',
            title=f"📉 Drops Detected in {field}",
            description=(
                f"Found {drops} unusually low values (>2σ below mean) in {field}. "
                f"These may indicate dips or data issues."
            ),
            confidence='Medium',
            category='Anomaly',
            value=drops,
            severity='warning',
        ))

    insights.append(Insight(
        id=f"range-{field}",
        type='summary',
        title=f"{field} Statistics",
        description=(
            f"{field} ranges from {format_number(stats.min)} to {format_number(stats.max)} "
            f"with average {stats.mean:.2f}. Total: {format_number(stats.sum)}."
        ),
        confidence='High',
        category='Statistics',
        value=stats.mean,
    ))
    return insights


def dominant_value_insight(dataset: Dataset, field: str) -> Optional[Insight]:
    """Most frequent value of a categorical column; missing values count as 'Unknown'."""
    if not dataset.rows:
        return None

    counts: Dict[str, int] = {}
    for value in dataset.column(field):
        label = to_label(value)
        counts[label] = counts.get(label, 0) + 1

    # Stable sort: ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    top_value, top_count = ranked[0]
    pct = round(top_count / dataset.row_count * 100, 1)

    return Insight(
        id=f"cat-{field}",
        type='pattern',
        title=f'🏆 Top {field}: "{top_value}"',
        description=(
            f'"{top_value}" is the most common value in {field}, appearing {top_count} times '
            f'({pct:.1f}%). There are {len(ranked)} unique values.'
        ),
        confidence='High' if pct > 50 else 'Medium',
        category='Pattern',
        value=top_value,
    )


def best_category_insight(dataset: Dataset, field: str, numeric_field: str) -> Optional[Insight]:
    """Category with the largest total of ``numeric_field``; needs at least two categories."""
    totals: Dict[str, List[float]] = {}
    for row in dataset.rows:
        number = to_number(row.get(numeric_field))
        if number is None:
            continue
        bucket = totals.setdefault(to_label(row.get(field)), [0.0, 0])
        bucket[0] += number
        bucket[1] += 1

    if len(totals) < 2:
        return None

    ranked = sorted(totals.items(), key=lambda item: -item[1][0])
    best_label, (best_sum, best_count) = ranked[0]
    grand_total = sum(total for total, _ in totals.values())
    share = best_sum / grand_total * 100 if grand_total else 0.0

    return Insight(
        id=f"best-{field}",
        type='pattern',
        title=f"⭐ Best Performing {field}",
        description=(
            f'"{best_label}" leads in {numeric_field} with {format_number(best_sum)} total '
            f'({share:.1f}% of all). Average per record: {best_sum / best_count:.2f}.'
        ),
        confidence='High',
        category='Performance',
        value=best_label,
    )


def monthly_averages(dataset: Dataset, date_field: str, numeric_field: str) -> List[Tuple[int, float]]:
    """(month, average) pairs for every month with data, in calendar order."""
    buckets: Dict[int, List[float]] = {}
    for row in dataset.rows:
        month = extract_month(row.get(date_field))
        if month is None:
            continue
        number = to_number(row.get(numeric_field))
        if number is None:
            continue
        buckets.setdefault(month, []).append(number)

    return [(month, sum(buckets[month]) / len(buckets[month])) for month in sorted(buckets)]


def seasonality_insight(dataset: Dataset, date_field: str, numeric_field: str) -> Optional[Insight]:
    """Best vs worst calendar month of ``numeric_field``; needs three months of data."""
    averages = monthly_averages(dataset, date_field, numeric_field)
    if len(averages) < SEASONALITY_MIN_MONTHS:
        return None

    ranked = sorted(averages, key=lambda item: -item[1])
    best_month, best_avg = ranked[0]
    worst_month, worst_avg = ranked[-1]
    variance = best_avg / (worst_avg or 1)

    if variance <= SEASONALITY_THRESHOLD:
        return None

    return Insight(
        id='seasonality',
        type='pattern',
        title='📊 Seasonality Pattern Detected',
        description=(
            f"{numeric_field} peaks in {MONTH_NAMES[best_month]} (avg: {best_avg:.2f}) and dips in "
            f"{MONTH_NAMES[worst_month]} (avg: {worst_avg:.2f}). "
            f"Seasonal variance: {(variance - 1) * 100:.0f}%."
        ),
        confidence='High' if variance > SEASONALITY_HIGH_CONFIDENCE else 'Medium',
        category='Seasonality',
        value=MONTH_NAMES[best_month],
    )


def overview_insight(dataset: Dataset, numeric: int, dates: int, categorical: int) -> Insight:
    return Insight(
        id='overview',
        type='summary',
        title='Dataset Overview',
        description=(
            f"Dataset contains {dataset.row_count} records with {len(dataset.fields)} columns. "
            f"Found {numeric} numeric, {dates} date, and {categorical} categorical columns."
        ),
        confidence='High',
        category='Summary',
        value=dataset.row_count,
    )


def correlation_insight(result: CorrelationResult) -> Insight:
    direction = 'positive' if result.correlation > 0 else 'negative'
    return Insight(
        id=f"corr-{result.field1}-{result.field2}",
        type='correlation',
        title='🔗 Strong Correlation Found',
        description=(
            f"{result.field1} and {result.field2} have a {direction} correlation "
            f"of {result.correlation * 100:.0f}%."
        ),
        confidence='High',
        category='Correlation',
        value=result.correlation,
    )


def outlier_insight(field: str, count: int) -> Insight:
    return Insight(
        id=f"outlier-{field}",
        type='outlier',
        title=f"🎯 Outliers in {field}",
        description=(
            f"Found {count} outlier values in {field} using IQR method. "
            f"These values deviate significantly from the typical range."
        ),
        confidence='Medium',
        category='Outlier',
        value=count,
        severity='warning' if count > OUTLIER_WARNING_COUNT else 'info',
    )


def recommendation_insights(numeric_columns: List[str], date_column: Optional[str]) -> List[Insight]:
    """Fixed chart tips: scatter for two or more measures, a line chart for time series."""
    insights = []
    if len(numeric_columns) >= 2:
        insights.append(Insight(
            id='rec-scatter',
            type='recommendation',
            title='💡 Try Scatter Plot',
            description=(
                f"With {len(numeric_columns)} numeric columns, use Scatter Plot to explore "
                f"relationships between variables like {' and '.join(numeric_columns[:2])}."
            ),
            confidence='Medium',
            category='Recommendation',
        ))
    if date_column and numeric_columns:
        insights.append(Insight(
            id='rec-timeline',
            type='recommendation',
            title='📅 Time Series Analysis',
            description=(
                f"Use Line Chart with {date_column} on X-axis to visualize trends over time "
                f"for metrics like {numeric_columns[0]}."
            ),
            confidence='High',
            category='Recommendation',
        ))
    return insights
