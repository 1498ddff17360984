"""
Unit tests for insight builders.
"""
import pytest
import pandas as pd
from insight_engine.core.schemas import CorrelationResult, Dataset
from insight_engine.services.insights import (
    best_category_insight,
    calculate_trend,
    correlation_insight,
    count_spikes_and_drops,
    dominant_value_insight,
    monthly_averages,
    numeric_column_insights,
    outlier_insight,
    overview_insight,
    recommendation_insights,
    seasonality_insight,
)


def _series(values):
    return pd.Series(values, index=range(len(values)), dtype=float)


@pytest.mark.unit
def test_calculate_trend_increase():
    """Test calculate trend increase."""
    trend = calculate_trend(_series([10, 10, 10, 10, 10, 50, 55, 60, 58, 62]))

    assert trend['direction'] == 'increase'
    assert trend['first_mean'] == 10.0
    assert trend['second_mean'] == 57.0
    assert trend['change_percent'] == pytest.approx(470.0)


@pytest.mark.unit
def test_calculate_trend_odd_length_split():
    """Test calculate trend odd length split."""
    # First half is floor(5/2) = 2 values
    trend = calculate_trend(_series([10, 10, 5, 5, 5]))

    assert trend['first_mean'] == 10.0
    assert trend['second_mean'] == 5.0
    assert trend['direction'] == 'decrease'


@pytest.mark.unit
def test_calculate_trend_zero_baseline():
    """Test calculate trend zero baseline."""
    trend = calculate_trend(_series([0, 0, 3, 3]))
    assert trend['change_percent'] == 300.0


@pytest.mark.unit
def test_calculate_trend_needs_two_values():
    """Test calculate trend needs two values."""
    assert calculate_trend(_series([5])) is None


@pytest.mark.unit
def test_numeric_column_insights_trend_and_range():
    """Test numeric column insights trend and range."""
    insights = numeric_column_insights("Sales", _series([10, 10, 10, 10, 10, 50, 55, 60, 58, 62]))
    by_id = {i.id: i for i in insights}

    trend = by_id["trend-Sales"]
    assert trend.type == 'trend'
    assert trend.confidence == 'High'
    assert trend.change > 10
    assert "470.0% increase" in trend.description

    summary = by_id["range-Sales"]
    assert summary.type == 'summary'
    assert "ranges from 10 to 62" in summary.description
    assert summary.value == pytest.approx(33.5)

    # Range insight always comes last
    assert insights[-1].id == "range-Sales"


@pytest.mark.unit
def test_small_changes_are_not_trends():
    """Test small changes are not trends."""
    insights = numeric_column_insights("Flat", _series([100, 101, 99, 102, 100, 103]))
    assert all(i.type != 'trend' for i in insights)


@pytest.mark.unit
def test_single_value_only_gets_range():
    """Test single value only gets range."""
    insights = numeric_column_insights("One", _series([42]))
    assert [i.id for i in insights] == ["range-One"]


@pytest.mark.unit
def test_spikes_and_drops():
    """Test spikes and drops."""
    values = _series([50] * 20 + [500] + [50] * 20 + [-400])

    spikes, drops = count_spikes_and_drops(values)
    assert (spikes, drops) == (1, 1)

    ids = [i.id for i in numeric_column_insights("Load", values)]
    assert "spike-Load" in ids
    assert "drop-Load" in ids


@pytest.mark.unit
def test_dominant_value():
    """Test dominant value."""
    dataset = Dataset(fields=["Grade"], rows=[{"Grade": g} for g in ["A", "A", "A", "A", "B"]])

    insight = dominant_value_insight(dataset, "Grade")

    assert insight.id == "cat-Grade"
    assert insight.value == "A"
    assert insight.confidence == 'High'
    assert "(80.0%)" in insight.description
    assert "2 unique values" in insight.description


@pytest.mark.unit
def test_dominant_value_ties_keep_first_seen():
    """Test dominant value ties keep first seen."""
    dataset = Dataset(fields=["c"], rows=[{"c": v} for v in ["x", "y", "y", "x", "z"]])

    insight = dominant_value_insight(dataset, "c")

    assert insight.value == "x"
    assert insight.confidence == 'Medium'


@pytest.mark.unit
def test_dominant_value_counts_missing_as_unknown():
    """Test dominant value counts missing as unknown."""
    dataset = Dataset(fields=["c"], rows=[{"c": None}, {}, {"c": "a"}])
    assert dominant_value_insight(dataset, "c").value == "Unknown"


@pytest.mark.unit
def test_best_category():
    """Test best category."""
    rows = [
        {"Region": "North", "Sales": 100},
        {"Region": "South", "Sales": 300},
        {"Region": "North", "Sales": 50},
        {"Region": "South", "Sales": 250},
    ]
    insight = best_category_insight(Dataset(fields=["Region", "Sales"], rows=rows), "Region", "Sales")

    assert insight.id == "best-Region"
    assert insight.value == "South"
    assert "(78.6% of all)" in insight.description
    assert "Average per record: 275.00" in insight.description


@pytest.mark.unit
def test_best_category_needs_two_groups():
    """Test best category needs two groups."""
    rows = [{"Region": "North", "Sales": 1}, {"Region": "North", "Sales": 2}]
    assert best_category_insight(Dataset(fields=["Region", "Sales"], rows=rows), "Region", "Sales") is None


def _monthly(values_by_month):
    rows = []
    for month, values in values_by_month.items():
        for day, value in enumerate(values, start=1):
            rows.append({"Date": f"2024-{month:02d}-{day:02d}", "Sales": value})
    return Dataset(fields=["Date", "Sales"], rows=rows)


@pytest.mark.unit
def test_monthly_averages_in_calendar_order():
    """Test monthly averages in calendar order."""
    dataset = _monthly({3: [30, 30], 1: [10, 20], 2: [40]})

    assert monthly_averages(dataset, "Date", "Sales") == [(0, 15.0), (1, 40.0), (2, 30.0)]


@pytest.mark.unit
def test_seasonality_detected():
    """Test seasonality detected."""
    insight = seasonality_insight(_monthly({1: [100, 100], 2: [50, 50], 3: [80]}), "Date", "Sales")

    assert insight.id == "seasonality"
    assert insight.value == "Jan"
    assert "peaks in Jan" in insight.description
    assert "dips in Feb" in insight.description
    assert insight.confidence == 'High'


@pytest.mark.unit
def test_seasonality_needs_three_months_and_variance():
    """Test seasonality needs three months and variance."""
    assert seasonality_insight(_monthly({1: [100], 2: [50]}), "Date", "Sales") is None
    assert seasonality_insight(_monthly({1: [100], 2: [95], 3: [90]}), "Date", "Sales") is None


@pytest.mark.unit
def test_overview():
    """Test overview."""
    dataset = Dataset(fields=["a", "b"], rows=[{"a": 1, "b": 2}] * 3)

    insight = overview_insight(dataset, 2, 0, 0)

    assert insight.id == "overview"
    assert insight.value == 3
    assert "3 records with 2 columns" in insight.description


@pytest.mark.unit
def test_correlation_insight():
    """Test correlation insight."""
    insight = correlation_insight(CorrelationResult(field1="x", field2="y", correlation=-0.91))

    assert insight.id == "corr-x-y"
    assert insight.type == 'correlation'
    assert "negative correlation of -91%" in insight.description


@pytest.mark.unit
def test_outlier_severity():
    """Test outlier severity."""
    assert outlier_insight("v", 3).severity == 'info'
    assert outlier_insight("v", 6).severity == 'warning'


@pytest.mark.unit
def test_recommendations():
    """Test recommendations."""
    ids = [i.id for i in recommendation_insights(["a", "b"], "Date")]
    assert ids == ["rec-scatter", "rec-timeline"]

    assert recommendation_insights(["a"], None) == []
    assert [i.id for i in recommendation_insights(["a"], "Date")] == ["rec-timeline"]
