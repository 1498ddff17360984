"""
Cleaning of user-provided text before it reaches a report or a log line.

Field names, category labels, chat messages and file names all come from
the uploaded data and are rendered verbatim, so they pass through here.
"""
import html
import re
from typing import Any

# Everything below 0x20 plus DEL and the C1 block
_ALL_CONTROL = re.compile(r'[\x00-\x1f\x7f-\x9f]')
# Same, but tab, LF and CR survive (they are meaningful in chat text)
_MARKUP_CONTROL = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
_LINE_BREAKS = re.compile(r'[\r\n]')
_EXTENSION = re.compile(r'\.[^.]+$')


def _truncate(text: str, max_length: int, suffix: str = "") -> str:
    return text[:max_length] + suffix if len(text) > max_length else text


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Reduce an uploaded file name to its base name for display.

    Directory parts (either slash style) and control characters are dropped,
    as are leading and trailing dots and spaces. Empty results become
    "unknown".
    """
    if not filename:
        return "unknown"

    base = re.split(r'[/\\]', filename)[-1]
    base = _ALL_CONTROL.sub('', base).strip('. ')
    return _truncate(base, max_length) or "unknown"


def escape_html(value: Any, max_length: int = 10000) -> str:
    """
    Escape a cell, label or message for HTML element content and quoted attributes.

    Args:
        value: Value to render (non-strings are stringified, None is empty)
        max_length: Characters kept before escaping

    Returns:
        Escaped markup-safe text
    """
    if value is None:
        return ""

    text = _truncate(_MARKUP_CONTROL.sub('', str(value)), max_length)
    return html.escape(text, quote=True)


def sanitize_for_logging(value: Any, max_length: int = 500) -> str:
    """Single-line, control-free rendering of a value for log messages."""
    if value is None:
        return ""

    text = _LINE_BREAKS.sub(' ', str(value))
    text = _ALL_CONTROL.sub('', text)
    return _truncate(text, max_length, suffix="...")


def report_download_name(filename: str) -> str:
    """Download name of a rendered report: "<source stem>_report.html"."""
    stem = _EXTENSION.sub('', sanitize_filename(filename)) or "report"
    return f"{stem}_report.html"
