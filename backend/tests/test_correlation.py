"""
Unit tests for pairwise correlation.
"""
import pytest
import pandas as pd
from insight_engine.core.schemas import CorrelationResult, Dataset, correlation_strength
from insight_engine.services.correlation import correlate_columns, pearson


def _series(values):
    return pd.Series(values, index=range(len(values)), dtype=float)


@pytest.mark.unit
def test_perfect_correlation():
    """Test perfect correlation."""
    x = _series([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
    y = x * 2

    assert pearson(x, y) == pytest.approx(1.0)
    assert pearson(x, -y) == pytest.approx(-1.0)


@pytest.mark.unit
def test_correlation_is_symmetric():
    """Test correlation is symmetric."""
    x = _series([3, 1, 4, 1, 5, 9, 2, 6])
    y = _series([2, 7, 1, 8, 2, 8, 1, 8])

    assert pearson(x, y) == pearson(y, x)
    assert -1.0 <= pearson(x, y) <= 1.0


@pytest.mark.unit
def test_self_correlation():
    """Test self correlation."""
    x = _series([1.5, 2.0, 7.25, 3.0])
    assert pearson(x, x) == pytest.approx(1.0)


@pytest.mark.unit
def test_too_few_pairs_is_zero():
    """Test too few pairs is zero."""
    assert pearson(_series([1, 2]), _series([2, 4])) == 0.0


@pytest.mark.unit
def test_constant_column_is_zero():
    """Test constant column is zero."""
    assert pearson(_series([1, 2, 3, 4]), _series([5, 5, 5, 5])) == 0.0


@pytest.mark.unit
def test_only_paired_rows_are_used():
    """Test only paired rows are used."""
    x = pd.Series([1.0, 2.0, 3.0, 4.0], index=[0, 1, 2, 3])
    y = pd.Series([2.0, 4.0, 6.0], index=[0, 2, 3])

    # Pairs: (1,2), (3,4), (4,6)
    assert pearson(x, y) == pytest.approx(pearson(_series([1, 3, 4]), _series([2, 4, 6])))


@pytest.mark.unit
@pytest.mark.parametrize("r,strength", [
    (0.95, 'Strong'),
    (-0.7, 'Strong'),
    (0.5, 'Moderate'),
    (-0.4, 'Moderate'),
    (0.25, 'Weak'),
    (0.1, 'None'),
    (0.0, 'None'),
])
def test_correlation_strength(r, strength):
    """Test correlation strength."""
    assert correlation_strength(r) == strength
    assert CorrelationResult(field1="a", field2="b", correlation=r).strength == strength


@pytest.mark.unit
def test_correlate_columns_pair_order_and_filter():
    """Test correlate columns pair order and filter."""
    rows = [{"a": i, "b": i * 3, "c": (i * 7) % 5, "d": 10 - i} for i in range(10)]
    dataset = Dataset(fields=["a", "b", "c", "d"], rows=rows)

    results = correlate_columns(dataset, ["a", "b", "c", "d"])
    pairs = [(r.field1, r.field2) for r in results]

    assert ("a", "b") in pairs
    assert ("a", "d") in pairs
    assert all(r.strength != 'None' for r in results)

    # Pairs come out in (i, j) order with i < j
    order = ["a", "b", "c", "d"]
    assert pairs == sorted(pairs, key=lambda p: (order.index(p[0]), order.index(p[1])))


@pytest.mark.unit
def test_correlate_columns_caps_at_five_columns():
    """Test correlate columns caps at five columns."""
    fields = [f"m{i}" for i in range(7)]
    rows = [{f: j * (k + 1) for k, f in enumerate(fields)} for j in range(6)]
    dataset = Dataset(fields=fields, rows=rows)

    results = correlate_columns(dataset, fields)

    assert len(results) == 10
    assert not any("m5" in (r.field1, r.field2) or "m6" in (r.field1, r.field2) for r in results)

