"""
Unit tests for axis recommendation.
"""
import pytest
from insight_engine.core.schemas import ColumnInfo
from insight_engine.services.inference import recommend_axes


def _col(name, column_type):
    return ColumnInfo(name=name, type=column_type, unique_count=1, null_count=0, sample=[])


@pytest.mark.unit
def test_date_column_wins_x_axis():
    """Test date column wins x axis."""
    columns = [_col("Region", 'categorical'), _col("Date", 'date'), _col("Units", 'numeric')]

    x, y = recommend_axes(columns, [c.name for c in columns])

    assert x == "Date"
    assert y == "Units"


@pytest.mark.unit
def test_categorical_x_axis_without_dates():
    """Test categorical x axis without dates."""
    columns = [_col("Notes", 'text'), _col("Region", 'categorical'), _col("Score", 'numeric')]

    assert recommend_axes(columns, [c.name for c in columns]) == ("Region", "Score")


@pytest.mark.unit
def test_measure_named_column_preferred_for_y():
    """Test measure named column preferred for y."""
    columns = [_col("Date", 'date'), _col("Margin", 'numeric'), _col("Total Revenue", 'numeric')]

    _, y = recommend_axes(columns, [c.name for c in columns])

    assert y == "Total Revenue"


@pytest.mark.unit
def test_first_measure_named_column_wins():
    """Hints match anywhere in the name, so 'Discount' counts as a measure."""
    columns = [_col("Margin", 'numeric'), _col("Discount", 'numeric'), _col("Total Revenue", 'numeric')]

    _, y = recommend_axes(columns, [c.name for c in columns])

    assert y == "Discount"


@pytest.mark.unit
def test_fallbacks_without_typed_columns():
    """Test fallbacks without typed columns."""
    columns = [_col("a", 'text'), _col("b", 'text')]
    assert recommend_axes(columns, ["a", "b"]) == ("a", "b")

    single = [_col("only", 'text')]
    assert recommend_axes(single, ["only"]) == ("only", "only")


@pytest.mark.unit
def test_no_fields():
    """Test no fields."""
    assert recommend_axes([], []) == ("", "")
