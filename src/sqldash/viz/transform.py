"""Reshape normalized query results into chart-ready matrices.

Line and area charts get a typed matrix: a header of ``{"type", "label"}``
descriptors followed by rows in which date-like strings are parsed. Bar,
pie and table charts get the plain matrix: column names followed by raw
row values. Stat widgets skip matrices and display one formatted value.

Column types are inferred from the first row only and applied to every row.
A column whose first value is null stays "string" even if later rows hold
dates or numbers.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any, Dict, List, Optional, Union
import re

import pandas as pd

from sqldash.db.models import QueryResult
from sqldash.exceptions.errors import RenderError
from sqldash.widgets.models import WidgetType


STAT_PLACEHOLDER = "—"

DATE_PATTERNS = [
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),  # YYYY-MM-DD
    re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}"),  # YYYY-MM-DD HH:MM:SS, YYYY-MM-DDTHH:MM:SS...
    re.compile(r"^\d{4}/\d{2}/\d{2}"),  # YYYY/MM/DD...
    re.compile(r"^\d{2}/\d{2}/\d{4}"),  # MM/DD/YYYY...
]

TYPED_KINDS = frozenset({WidgetType.LINE, WidgetType.AREA})
SIMPLE_KINDS = frozenset({WidgetType.BAR, WidgetType.PIE, WidgetType.TABLE})


class ColumnType(str, Enum):
    NUMBER = "number"
    DATETIME = "datetime"
    STRING = "string"


Matrix = List[List[Any]]


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def is_date_string(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return any(p.match(value) for p in DATE_PATTERNS)


def infer_column_type(value: Any) -> ColumnType:
    if _is_number(value):
        return ColumnType.NUMBER
    if is_date_string(value):
        return ColumnType.DATETIME
    return ColumnType.STRING


def parse_date(value: str) -> Union[pd.Timestamp, Any]:
    """Parse a date-like string; unparseable input yields ``pd.NaT``.

    The first space is treated as the date/time separator, so
    "2026-01-27 00:17:27" and "2026-01-27T00:17:27" parse identically.
    """
    try:
        return pd.to_datetime(value.replace(" ", "T", 1), errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return pd.NaT


def to_typed_matrix(result: QueryResult) -> Matrix:
    columns = list(result.columns)
    if not result.rows:
        # Bare header, no type descriptors
        return [columns]

    first = result.rows[0]
    types = [infer_column_type(first.get(c)) for c in columns]

    header: List[Any] = [{"type": t.value, "label": c} for c, t in zip(columns, types)]
    matrix: Matrix = [header]
    for row in result.rows:
        cells = []
        for c, t in zip(columns, types):
            value = row.get(c)
            if t == ColumnType.DATETIME and isinstance(value, str):
                value = parse_date(value)
            cells.append(value)
        matrix.append(cells)
    return matrix


def to_simple_matrix(result: QueryResult) -> Matrix:
    columns = list(result.columns)
    return [columns] + [[row.get(c) for c in columns] for row in result.rows]


def matrix_for(kind: Union[WidgetType, str], result: QueryResult) -> Matrix:
    kind = WidgetType(kind)
    if kind in TYPED_KINDS:
        return to_typed_matrix(result)
    if kind in SIMPLE_KINDS:
        return to_simple_matrix(result)
    raise RenderError(f"{kind.value} widgets are rendered with render_stat_summary, not a matrix")


@dataclass(frozen=True)
class StatDisplay:
    value: str
    caption: Optional[str] = None


def _group_digits(value: Any, thousands: str, decimal: str) -> str:
    if isinstance(value, int):
        text = f"{value:,}"
    else:
        number = float(value)
        if number != number or number in (float("inf"), float("-inf")):
            return str(number)
        # At most three fraction digits, trailing zeros dropped
        text = f"{number:,.3f}".rstrip("0").rstrip(".")
    return text.replace(",", "\x00").replace(".", decimal).replace("\x00", thousands)


def render_stat_summary(result: QueryResult, options: Optional[Dict[str, Any]] = None) -> StatDisplay:
    """Format the first column of the first row for a single-value widget.

    Numbers get thousands grouping using ``thousandsSeparator`` and
    ``decimalSeparator`` from ``options`` (defaults "," and "."); a missing
    or null value shows the placeholder glyph. ``options["title"]`` becomes
    the caption.
    """
    options = options or {}
    value = None
    if result.rows and result.columns:
        value = result.rows[0].get(result.columns[0])

    if value is None:
        text = STAT_PLACEHOLDER
    elif _is_number(value):
        text = _group_digits(
            value,
            thousands=str(options.get("thousandsSeparator", ",")),
            decimal=str(options.get("decimalSeparator", ".")),
        )
    elif isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)

    caption = options.get("title")
    return StatDisplay(value=text, caption=str(caption) if caption else None)
