from __future__ import annotations

import os
from typing import Optional

import aiosqlite

from sqldash.db.base import Adapter
from sqldash.db.models import QueryResult
from sqldash.exceptions.errors import ConnectionError, ExecutionError
from sqldash.logging.logger import get_logger


log = get_logger("db.sqlite")


class SQLiteAdapter(Adapter):
    """aiosqlite session on the file named by ``connection.database``.

    The file must already exist; it is never created implicitly.
    """

    db: Optional[aiosqlite.Connection] = None

    @property
    def path(self) -> str:
        return self.connection.database

    async def open(self) -> None:
        if not self.path or not os.path.exists(self.path):
            raise ConnectionError(f"SQLite database file not found: {self.path}")
        log.info("SQLite open", extra={"target": self.path})
        try:
            self.db = await aiosqlite.connect(self.path)
        except (aiosqlite.Error, OSError) as e:
            raise ConnectionError(str(e)) from e

    async def run_query(self, query: str) -> QueryResult:
        if self.db is None:
            raise ConnectionError("SQLite session is not open")
        log.info("SQLite execute", extra={"target": self.path, "sql_head": query[:300]})
        columns = []
        records = []
        try:
            async with self.db.execute(query) as cursor:
                columns = [d[0] for d in (cursor.description or [])]
                async for values in cursor:
                    records.append(values)
            await self.db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise ExecutionError(str(e)) from e

        return QueryResult.from_records(columns, records)

    async def close(self) -> None:
        if self.db is None:
            return
        try:
            await self.db.close()
        except (aiosqlite.Error, OSError):
            log.warning("SQLite close failed", extra={"target": self.path})
        finally:
            self.db = None
