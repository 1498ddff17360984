import logging
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

from insight_engine.core.config import get_settings
from insight_engine.core.schemas import ColumnInfo, ColumnType, Dataset
from insight_engine.services.values import is_date_string, is_missing, is_number, is_serial_date

logger = logging.getLogger(__name__)

TYPE_SAMPLE_SIZE = 100
MATCH_RATIO = 0.7
CATEGORICAL_MAX_RATIO = 0.3
CATEGORICAL_MAX_UNIQUE = 50
COLUMN_SAMPLE_SIZE = 5

# Words of a column name: camelCase parts, ALLCAPS runs and digit runs
_NAME_WORDS = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")


def allows_serial_dates(column_name: Optional[str]) -> bool:
    """
    Spreadsheet serial dates are plain integers, so they are only accepted
    for columns whose name says they hold dates.
    """
    if not column_name:
        return False
    words = {word.lower() for word in _NAME_WORDS.findall(column_name)}
    return any(hint in words for hint in get_settings().serial_date_hints_list)


def _date_predicate(serial_dates: bool) -> Callable[[Any], bool]:
    def predicate(value: Any) -> bool:
        # Serial numbers are numbers too, so this runs before the numeric test
        if serial_dates and is_serial_date(value):
            return True
        return is_date_string(value)
    return predicate


def _matches(sample: Sequence[Any], predicate: Callable[[Any], bool]) -> bool:
    hits = sum(1 for value in sample if predicate(value))
    return hits >= len(sample) * MATCH_RATIO


def _is_low_cardinality(sample: Sequence[Any]) -> bool:
    unique = len(set(str(v) for v in sample))
    return unique < len(sample) * CATEGORICAL_MAX_RATIO and unique < CATEGORICAL_MAX_UNIQUE


def detect_column_type(values: Sequence[Any], column_name: Optional[str] = None) -> ColumnType:
    """
    Infer the semantic type of a column from its first non-null values.

    Checks run top to bottom and the first match wins:
    date, numeric, categorical, then text as the fallback.
    """
    non_null = [v for v in values if not is_missing(v)]
    if not non_null:
        return 'text'

    sample = non_null[:TYPE_SAMPLE_SIZE]

    checks: List[Tuple[Callable[[Sequence[Any]], bool], ColumnType]] = [
        (lambda s: _matches(s, _date_predicate(allows_serial_dates(column_name))), 'date'),
        (lambda s: _matches(s, is_number), 'numeric'),
        (_is_low_cardinality, 'categorical'),
    ]
    for check, column_type in checks:
        if check(sample):
            return column_type
    return 'text'


def analyze_columns(dataset: Dataset) -> List[ColumnInfo]:
    """Profile every field of the dataset, in field order."""
    columns = []
    for field in dataset.fields:
        values = dataset.column(field)
        non_null = [v for v in values if not is_missing(v)]
        column_type = detect_column_type(values, field)

        columns.append(ColumnInfo(
            name=field,
            type=column_type,
            unique_count=len(set(str(v) for v in non_null)),
            null_count=len(values) - len(non_null),
            sample=non_null[:COLUMN_SAMPLE_SIZE],
        ))
        logger.debug(f"Column {field!r} classified as {column_type}")

    return columns
