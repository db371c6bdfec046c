from __future__ import annotations

from typing import Any, Dict, List, Union

from sqldash.db.models import QueryResult
from sqldash.widgets.models import WidgetType


def _result(columns: List[str], rows: List[Dict[str, Any]]) -> QueryResult:
    return QueryResult(columns=columns, rows=rows, row_count=len(rows))


def generate_synthetic_result(kind: Union[WidgetType, str]) -> QueryResult:
    """Fixed placeholder data for widgets without a connection or query.

    Shapes per kind: dated (date, sales, revenue) series for line/area,
    (category, value) for bar, (segment, percentage) for pie, a four-column
    record set for table and a single scalar for stat. Unknown kinds give an
    empty result.
    """
    try:
        kind = WidgetType(kind)
    except ValueError:
        return QueryResult.empty()

    if kind in (WidgetType.LINE, WidgetType.AREA):
        series = [
            ("2026-01-01", 100, 5000),
            ("2026-02-01", 120, 6000),
            ("2026-03-01", 90, 4500),
            ("2026-04-01", 150, 7500),
            ("2026-05-01", 180, 9000),
            ("2026-06-01", 160, 8000),
        ]
        return _result(
            ["month", "sales", "revenue"],
            [{"month": m, "sales": s, "revenue": r} for m, s, r in series],
        )

    if kind == WidgetType.BAR:
        values = [("Product A", 420), ("Product B", 380), ("Product C", 290), ("Product D", 510), ("Product E", 350)]
        return _result(["category", "value"], [{"category": c, "value": v} for c, v in values])

    if kind == WidgetType.PIE:
        shares = [("Desktop", 45), ("Mobile", 35), ("Tablet", 15), ("Other", 5)]
        return _result(["segment", "percentage"], [{"segment": s, "percentage": p} for s, p in shares])

    if kind == WidgetType.TABLE:
        people = [
            (1, "John Doe", "john@example.com", "Active"),
            (2, "Jane Smith", "jane@example.com", "Pending"),
            (3, "Bob Johnson", "bob@example.com", "Active"),
            (4, "Alice Brown", "alice@example.com", "Inactive"),
            (5, "Charlie Wilson", "charlie@example.com", "Active"),
        ]
        return _result(
            ["id", "name", "email", "status"],
            [{"id": i, "name": n, "email": e, "status": s} for i, n, e, s in people],
        )

    # WidgetType.STAT
    return _result(["value"], [{"value": 12847}])
