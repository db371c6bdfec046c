from __future__ import annotations

from typing import Dict, Optional, Type

from sqldash.db.base import Adapter
from sqldash.db.models import ConnectionDescriptor, ConnectionType, ProbeResult, QueryResult
from sqldash.db.mysql import MySQLAdapter
from sqldash.db.postgres import PostgresAdapter
from sqldash.db.sqlite import SQLiteAdapter
from sqldash.exceptions.errors import UnsupportedConnectionTypeError
from sqldash.logging.logger import get_logger


log = get_logger("db.engine")


PROBE_TIMEOUT_MS = 5000
PROBE_QUERY = "SELECT 1"

ADAPTERS: Dict[ConnectionType, Type[Adapter]] = {
    ConnectionType.POSTGRESQL: PostgresAdapter,
    ConnectionType.MYSQL: MySQLAdapter,
    ConnectionType.SQLITE: SQLiteAdapter,
}


def _kind(connection) -> str:
    t = getattr(connection, "type", None)
    return str(getattr(t, "value", t))


def adapter_for(connection: ConnectionDescriptor, connect_timeout: Optional[float] = None) -> Adapter:
    try:
        kind = ConnectionType(connection.type)
    except ValueError as e:
        raise UnsupportedConnectionTypeError(f"Unsupported connection type: {connection.type}") from e
    return ADAPTERS[kind](connection, connect_timeout=connect_timeout)


async def execute(connection: ConnectionDescriptor, query: str) -> QueryResult:
    """Run one statement on a fresh session and return the normalized result.

    The SQL is passed through verbatim. Failures raise ExecutionError (or its
    ConnectionError subclass when no session could be opened); there is no
    retry and no partial result. No timeout applies here.
    """
    adapter = adapter_for(connection)
    try:
        async with adapter:
            result = await adapter.run_query(query)
    except Exception:
        log.exception("Query execution failed", extra={"type": _kind(connection), "target": connection.target})
        raise

    log.info(
        "Query executed",
        extra={"type": _kind(connection), "target": connection.target, "rows": result.row_count},
    )
    return result


async def test_connection(connection: ConnectionDescriptor, timeout_ms: int = PROBE_TIMEOUT_MS) -> ProbeResult:
    """Open a session, run a trivial statement and close it.

    Never raises: every failure, including a malformed descriptor, comes back
    as ``ProbeResult(success=False, error=...)``. The timeout bounds session
    establishment for the network engines only.
    """
    try:
        kind = ConnectionType(connection.type)
        timeout = None if kind == ConnectionType.SQLITE else timeout_ms / 1000.0
        adapter = adapter_for(connection, connect_timeout=timeout)
        async with adapter:
            await adapter.run_query(PROBE_QUERY)
    except Exception as e:
        message = str(e) or type(e).__name__ or "Unknown error"
        log.warning("Connection probe failed", extra={"type": _kind(connection), "error": message})
        return ProbeResult(success=False, error=message)

    log.info("Connection probe succeeded", extra={"type": kind.value, "target": connection.target})
    return ProbeResult(success=True)
