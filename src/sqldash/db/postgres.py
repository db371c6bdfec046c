from __future__ import annotations

from typing import Any, Dict, Optional

import psycopg

from sqldash.db.base import Adapter
from sqldash.db.models import QueryResult
from sqldash.exceptions.errors import ConnectionError, ExecutionError
from sqldash.logging.logger import get_logger


log = get_logger("db.postgres")


class PostgresAdapter(Adapter):
    """psycopg 3 async session.

    Column names come from the cursor's field descriptors in declared order;
    row_count is the server-reported count (0 when the server reports none).
    """

    conn: Optional[psycopg.AsyncConnection] = None

    def _connect_args(self) -> Dict[str, Any]:
        c = self.connection
        args: Dict[str, Any] = {
            "host": c.host,
            "port": c.effective_port,
            "dbname": c.database,
            "user": c.username,
            "password": c.password,
            # Encrypt without certificate verification when ssl is on
            "sslmode": "require" if c.ssl else "disable",
            "autocommit": True,
        }
        if self.connect_timeout is not None:
            # libpq takes whole seconds; 0 would mean "wait forever"
            args["connect_timeout"] = max(1, int(round(self.connect_timeout)))
        return args

    async def open(self) -> None:
        log.info(
            "PostgreSQL connect",
            extra={"target": self.connection.target, "ssl": self.connection.ssl, "timeout": self.connect_timeout},
        )
        try:
            self.conn = await psycopg.AsyncConnection.connect(**self._connect_args())
        except (psycopg.Error, OSError) as e:
            raise ConnectionError(str(e)) from e

    async def run_query(self, query: str) -> QueryResult:
        if self.conn is None:
            raise ConnectionError("PostgreSQL session is not open")
        log.info("PostgreSQL execute", extra={"target": self.connection.target, "sql_head": query[:300]})
        try:
            async with self.conn.cursor() as cur:
                await cur.execute(query)
                reported = cur.rowcount if cur.rowcount is not None and cur.rowcount >= 0 else 0
                if cur.description is None:
                    return QueryResult(columns=[], rows=[], row_count=reported)
                columns = [col.name for col in cur.description]
                records = await cur.fetchall()
        except (psycopg.Error, OSError) as e:
            raise ExecutionError(str(e)) from e

        result = QueryResult.from_records(columns, records)
        return QueryResult(columns=result.columns, rows=result.rows, row_count=reported)

    async def close(self) -> None:
        if self.conn is None:
            return
        try:
            await self.conn.close()
        except (psycopg.Error, OSError):
            log.warning("PostgreSQL close failed", extra={"target": self.connection.target})
        finally:
            self.conn = None
