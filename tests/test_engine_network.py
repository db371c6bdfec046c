"""
Tests for the PostgreSQL and MySQL adapters.

Driver entry points are patched with fakes so these run without servers;
the refused-port cases exercise the real drivers against 127.0.0.1:1.
"""

from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import aiomysql
import psycopg
import pytest

from sqldash.db import engine
from sqldash.db.models import ConnectionDescriptor, ConnectionType
from sqldash.exceptions.errors import ConnectionError, ExecutionError


class FakeCursor:
    """Async cursor double shared by both drivers."""

    def __init__(self, description=None, records=(), rowcount=-1, error=None):
        self.description = description
        self.records = list(records)
        self.rowcount = rowcount
        self.error = error
        self.executed = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query):
        self.executed.append(query)
        if self.error is not None:
            raise self.error

    async def fetchall(self):
        return self.records


def pg_session(cursor):
    conn = MagicMock()
    conn.cursor.return_value = cursor
    conn.close = AsyncMock()
    return conn


def mysql_session(cursor):
    conn = MagicMock()
    conn.cursor.return_value = cursor
    conn.close = MagicMock()
    return conn


PG_CONNECT = "sqldash.db.postgres.psycopg.AsyncConnection.connect"
MYSQL_CONNECT = "sqldash.db.mysql.aiomysql.connect"


class TestPostgres:
    @pytest.mark.asyncio
    async def test_select_one(self, pg_conn):
        cursor = FakeCursor(description=[SimpleNamespace(name="?column?")], records=[(1,)], rowcount=1)
        session = pg_session(cursor)
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=session) as connect:
            result = await engine.execute(pg_conn, "SELECT 1")

        assert result.columns == ["?column?"]
        assert result.rows == [{"?column?": 1}]
        assert result.row_count == 1
        assert cursor.executed == ["SELECT 1"]
        session.close.assert_awaited_once()

        kwargs = connect.call_args.kwargs
        assert kwargs["host"] == "db.example.com"
        assert kwargs["dbname"] == "analytics"
        assert kwargs["sslmode"] == "disable"
        assert kwargs["autocommit"] is True
        assert "connect_timeout" not in kwargs

    @pytest.mark.asyncio
    async def test_ssl_flag(self, pg_conn):
        conn = replace(pg_conn, ssl=True)
        cursor = FakeCursor(description=[SimpleNamespace(name="x")], records=[(1,)], rowcount=1)
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=pg_session(cursor)) as connect:
            await engine.execute(conn, "SELECT 1 AS x")

        assert connect.call_args.kwargs["sslmode"] == "require"

    @pytest.mark.asyncio
    async def test_field_order_and_value_normalization(self, pg_conn):
        from datetime import datetime
        from decimal import Decimal

        cursor = FakeCursor(
            description=[SimpleNamespace(name="day"), SimpleNamespace(name="total")],
            records=[(datetime(2026, 1, 27, 0, 17, 27), Decimal("10.50"))],
            rowcount=1,
        )
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=pg_session(cursor)):
            result = await engine.execute(pg_conn, "SELECT day, total FROM t")

        assert result.columns == ["day", "total"]
        assert result.rows == [{"day": "2026-01-27 00:17:27", "total": 10.5}]

    @pytest.mark.asyncio
    async def test_statement_without_rows(self, pg_conn):
        cursor = FakeCursor(description=None, rowcount=3)
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=pg_session(cursor)):
            result = await engine.execute(pg_conn, "DELETE FROM t")

        assert (result.columns, result.rows, result.row_count) == ([], [], 3)

    @pytest.mark.asyncio
    async def test_unreported_count_falls_back_to_zero(self, pg_conn):
        cursor = FakeCursor(description=None, rowcount=-1)
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=pg_session(cursor)):
            result = await engine.execute(pg_conn, "CREATE TABLE t (id int)")

        assert result.row_count == 0

    @pytest.mark.asyncio
    async def test_sql_error_preserves_message_and_closes(self, pg_conn):
        cursor = FakeCursor(error=psycopg.ProgrammingError('syntax error at or near "SELEC"'))
        session = pg_session(cursor)
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=session):
            with pytest.raises(ExecutionError, match='syntax error at or near "SELEC"') as excinfo:
                await engine.execute(pg_conn, "SELEC 1")

        assert not isinstance(excinfo.value, ConnectionError)
        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_failure(self, pg_conn):
        error = psycopg.OperationalError("password authentication failed for user \"reader\"")
        with patch(PG_CONNECT, new_callable=AsyncMock, side_effect=error):
            with pytest.raises(ConnectionError, match="password authentication failed"):
                await engine.execute(pg_conn, "SELECT 1")

    @pytest.mark.asyncio
    async def test_probe_applies_timeout(self, pg_conn):
        cursor = FakeCursor(description=[SimpleNamespace(name="?column?")], records=[(1,)], rowcount=1)
        with patch(PG_CONNECT, new_callable=AsyncMock, return_value=pg_session(cursor)) as connect:
            probe = await engine.test_connection(pg_conn)

        assert probe.success is True
        assert connect.call_args.kwargs["connect_timeout"] == 5
        assert cursor.executed == ["SELECT 1"]

    @pytest.mark.asyncio
    async def test_probe_reports_failure(self, pg_conn):
        with patch(PG_CONNECT, new_callable=AsyncMock, side_effect=psycopg.OperationalError("timeout expired")):
            probe = await engine.test_connection(pg_conn)

        assert probe.success is False
        assert probe.error == "timeout expired"

    @pytest.mark.asyncio
    async def test_refused_port_is_connection_error(self):
        conn = ConnectionDescriptor(
            type=ConnectionType.POSTGRESQL, host="127.0.0.1", port=1, database="x", username="x", password="x"
        )
        with pytest.raises(ConnectionError):
            await engine.execute(conn, "SELECT 1")


class TestMySQL:
    @pytest.mark.asyncio
    async def test_select_one(self, mysql_conn):
        cursor = FakeCursor(description=[("1", 8, None, 1, 1, 0, False)], records=((1,),), rowcount=1)
        session = mysql_session(cursor)
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, return_value=session) as connect:
            result = await engine.execute(mysql_conn, "SELECT 1")

        assert result.columns == ["1"]
        assert result.rows == [{"1": 1}]
        assert result.row_count == 1
        session.close.assert_called_once()

        kwargs = connect.call_args.kwargs
        assert kwargs["db"] == "shop"
        assert kwargs["port"] == 3306
        assert kwargs["autocommit"] is True
        assert "ssl" not in kwargs
        assert "connect_timeout" not in kwargs

    @pytest.mark.asyncio
    async def test_ssl_context(self, mysql_conn):
        conn = replace(mysql_conn, ssl=True)
        cursor = FakeCursor(description=[("x",)], records=[(1,)], rowcount=1)
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, return_value=mysql_session(cursor)) as connect:
            await engine.execute(conn, "SELECT 1 AS x")

        assert connect.call_args.kwargs["ssl"].check_hostname is False

    @pytest.mark.asyncio
    async def test_mutation_summary(self, mysql_conn):
        cursor = FakeCursor(description=None, rowcount=4)
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, return_value=mysql_session(cursor)):
            result = await engine.execute(mysql_conn, "UPDATE orders SET shipped = 1")

        assert (result.columns, result.rows, result.row_count) == ([], [], 4)

    @pytest.mark.asyncio
    async def test_mutation_without_count(self, mysql_conn):
        cursor = FakeCursor(description=None, rowcount=-1)
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, return_value=mysql_session(cursor)):
            result = await engine.execute(mysql_conn, "SET @x = 1")

        assert result.row_count == 0

    @pytest.mark.asyncio
    async def test_sql_error(self, mysql_conn):
        cursor = FakeCursor(error=aiomysql.ProgrammingError(1064, "You have an error in your SQL syntax"))
        session = mysql_session(cursor)
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, return_value=session):
            with pytest.raises(ExecutionError, match="You have an error in your SQL syntax"):
                await engine.execute(mysql_conn, "SELEC 1")

        session.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_probe_applies_timeout(self, mysql_conn):
        cursor = FakeCursor(description=[("1",)], records=[(1,)], rowcount=1)
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, return_value=mysql_session(cursor)) as connect:
            probe = await engine.test_connection(mysql_conn, timeout_ms=2500)

        assert probe.success is True
        assert connect.call_args.kwargs["connect_timeout"] == 2.5

    @pytest.mark.asyncio
    async def test_probe_never_raises(self, mysql_conn):
        with patch(MYSQL_CONNECT, new_callable=AsyncMock, side_effect=RuntimeError("driver exploded")):
            probe = await engine.test_connection(mysql_conn)

        assert probe.success is False
        assert probe.error == "driver exploded"

    @pytest.mark.asyncio
    async def test_refused_port_is_connection_error(self):
        conn = ConnectionDescriptor(
            type=ConnectionType.MYSQL, host="127.0.0.1", port=1, database="x", username="x", password="x"
        )
        with pytest.raises(ConnectionError):
            await engine.execute(conn, "SELECT 1")
