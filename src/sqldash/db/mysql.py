from __future__ import annotations

import asyncio
import ssl
from typing import Any, Dict, Optional

import aiomysql

from sqldash.db.base import Adapter
from sqldash.db.models import QueryResult
from sqldash.exceptions.errors import ConnectionError, ExecutionError
from sqldash.logging.logger import get_logger


log = get_logger("db.mysql")


def _unverified_tls() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class MySQLAdapter(Adapter):
    """aiomysql session.

    A statement either yields a row set (column names from the field
    metadata) or only a mutation summary, reported as an empty result whose
    row_count is the affected-row count.
    """

    conn: Optional[aiomysql.Connection] = None

    def _connect_args(self) -> Dict[str, Any]:
        c = self.connection
        args: Dict[str, Any] = {
            "host": c.host,
            "port": c.effective_port,
            "db": c.database or None,
            "user": c.username,
            "password": c.password,
            "autocommit": True,
        }
        if c.ssl:
            args["ssl"] = _unverified_tls()
        if self.connect_timeout is not None:
            args["connect_timeout"] = self.connect_timeout
        return args

    async def open(self) -> None:
        log.info(
            "MySQL connect",
            extra={"target": self.connection.target, "ssl": self.connection.ssl, "timeout": self.connect_timeout},
        )
        try:
            self.conn = await aiomysql.connect(**self._connect_args())
        except (aiomysql.Error, OSError, asyncio.TimeoutError) as e:
            raise ConnectionError(str(e)) from e

    async def run_query(self, query: str) -> QueryResult:
        if self.conn is None:
            raise ConnectionError("MySQL session is not open")
        log.info("MySQL execute", extra={"target": self.connection.target, "sql_head": query[:300]})
        try:
            async with self.conn.cursor() as cur:
                await cur.execute(query)
                if not cur.description:
                    affected = cur.rowcount if cur.rowcount and cur.rowcount > 0 else 0
                    return QueryResult(columns=[], rows=[], row_count=affected)
                columns = [d[0] for d in cur.description]
                records = await cur.fetchall()
        except (aiomysql.Error, OSError) as e:
            raise ExecutionError(str(e)) from e

        return QueryResult.from_records(columns, list(records))

    async def close(self) -> None:
        if self.conn is None:
            return
        try:
            # Synchronous socket teardown; also safe on a broken session
            self.conn.close()
        finally:
            self.conn = None
