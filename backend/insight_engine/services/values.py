"""
Cell value coercion.

A dataset cell is one of a small closed set: number, string, boolean, null,
a date-like string or a spreadsheet serial number. Every analysis reads
cells through these helpers so the same guards apply everywhere.
"""
import math
import re
import warnings
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

import pandas as pd

CellValue = Union[int, float, str, bool, None]

# Spreadsheet serial dates: day offsets from 1899-12-30, valid up to 9999-12-31
SERIAL_DATE_MIN = 1
SERIAL_DATE_MAX = 2958465
UNIX_EPOCH_SERIAL = 25569
UNIX_EPOCH = datetime(1970, 1, 1)

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

DATE_PATTERNS = [
    re.compile(r'^\d{4}-\d{2}-\d{2}$'),                    # YYYY-MM-DD
    re.compile(r'^\d{2}/\d{2}/\d{4}$'),                    # MM/DD/YYYY
    re.compile(r'^\d{2}-\d{2}-\d{4}$'),                    # MM-DD-YYYY
    re.compile(r'^\d{4}/\d{2}/\d{2}$'),                    # YYYY/MM/DD
    re.compile(r'^\d{1,2}\s+[A-Za-z]+\s+\d{4}$'),          # D Month YYYY
    re.compile(r'^[A-Za-z]+\s+\d{1,2},?\s+\d{4}$'),        # Month D, YYYY
    re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}'),   # ISO-8601 datetime
]

_HAS_DIGIT = re.compile(r'\d')
_YEAR = re.compile(r'(?<!\d)\d{4}(?!\d)')
_DIGIT_RUN = re.compile(r'\d+')
_MONTH_WORD = re.compile(r'(?i)\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?(?![a-z])')
_TIME_OF_DAY = re.compile(r'\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?')


def is_missing(value: Any) -> bool:
    """None, NaN and blank strings count as missing."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a cell to a finite float.

    Numbers and numeric strings parse; booleans, blanks and anything
    non-finite do not.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_number(value: Any) -> bool:
    return to_number(value) is not None


def to_label(value: Any) -> str:
    """Stringify a cell for grouping; missing values land in 'Unknown'."""
    if is_missing(value):
        return "Unknown"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_serial_date(value: Any) -> bool:
    """Integer-valued numbers inside the spreadsheet serial date range."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not value.is_integer():
        return False
    return SERIAL_DATE_MIN < value < SERIAL_DATE_MAX


def serial_to_datetime(serial: float) -> datetime:
    """Convert a spreadsheet serial number to a UTC day."""
    days = math.floor(serial - UNIX_EPOCH_SERIAL)
    return UNIX_EPOCH + timedelta(days=days)


def _names_year_and_month(text: str) -> bool:
    # The parser fills missing parts from today, so both must be spelled out
    date_part = _TIME_OF_DAY.sub(' ', text)
    if not _YEAR.search(date_part):
        return False
    return bool(_MONTH_WORD.search(date_part)) or len(_DIGIT_RUN.findall(date_part)) >= 2


def parse_date_string(value: str) -> Optional[pd.Timestamp]:
    """Parse a free-form date string; None if it is not a date with an explicit year and month."""
    text = value.strip()
    if not text or not _HAS_DIGIT.search(text) or is_number(text):
        return None
    if not _names_year_and_month(text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed


def is_date_string(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    text = value.strip()
    if any(pattern.match(text) for pattern in DATE_PATTERNS):
        return True
    return parse_date_string(text) is not None


def extract_month(value: Any) -> Optional[int]:
    """Zero-based calendar month of a serial number or date string."""
    if is_serial_date(value):
        return serial_to_datetime(value).month - 1
    if isinstance(value, str):
        parsed = parse_date_string(value)
        if parsed is not None:
            return parsed.month - 1
    return None


def numeric_series(rows: List[Dict[str, Any]], field: str) -> pd.Series:
    """
    Numeric values of one field, in row order.

    The index holds the original row index so detectors can report
    positions in the caller's dataset.
    """
    index = []
    values = []
    for i, row in enumerate(rows):
        number = to_number(row.get(field))
        if number is not None:
            index.append(i)
            values.append(number)
    return pd.Series(values, index=index, dtype=float, name=field)


def format_number(value: float, max_decimals: int = 3) -> str:
    """Thousands-separated number with trailing zeros trimmed."""
    if float(value).is_integer():
        return f"{int(value):,}"
    text = f"{value:,.{max_decimals}f}"
    return text.rstrip("0").rstrip(".")
