from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from sqldash.db import engine
from sqldash.db.models import ConnectionDescriptor, QueryResult
from sqldash.db.synthetic import generate_synthetic_result
from sqldash.exceptions.errors import ConnectionNotFoundError
from sqldash.logging.logger import get_logger
from sqldash.widgets.models import Widget, WidgetType


log = get_logger("widgets.runner")


@dataclass(frozen=True)
class WidgetRun:
    widget_id: Optional[str]
    ok: bool
    message: str = ""
    result: Optional[QueryResult] = None


def _resolve_connection(connections: Any, connection_id: str) -> ConnectionDescriptor:
    # ``connections`` is anything with .get(id): a ConnectionRepository or a plain dict
    connection = connections.get(connection_id)
    if connection is None:
        raise ConnectionNotFoundError(f"Connection not found: {connection_id}")
    return connection


async def preview_query(
    kind: Union[WidgetType, str, None],
    connection_id: Optional[str],
    query: Optional[str],
    connections: Any,
) -> QueryResult:
    """Run an unsaved query, or return synthetic data when it is incomplete."""
    if not connection_id or not (query or "").strip():
        return generate_synthetic_result(kind or WidgetType.TABLE)
    connection = _resolve_connection(connections, connection_id)
    return await engine.execute(connection, query)


async def run_widget(widget: Widget, connections: Any) -> QueryResult:
    if not widget.has_source:
        log.info("Widget has no source; using synthetic data", extra={"widget": widget.id, "kind": widget.type.value})
        return generate_synthetic_result(widget.type)
    connection = _resolve_connection(connections, widget.connection_id)
    return await engine.execute(connection, widget.query)


async def _run_captured(widget: Widget, connections: Any) -> WidgetRun:
    try:
        result = await run_widget(widget, connections)
    except Exception as e:
        log.warning("Widget execution failed", extra={"widget": widget.id, "error": str(e)})
        return WidgetRun(widget_id=widget.id, ok=False, message=str(e) or "Failed to execute query")
    return WidgetRun(widget_id=widget.id, ok=True, result=result)


async def run_dashboard(widgets: List[Widget], connections: Any) -> List[WidgetRun]:
    """Run every widget concurrently; one WidgetRun per widget, in input order."""
    return list(await asyncio.gather(*(_run_captured(w, connections) for w in widgets)))
