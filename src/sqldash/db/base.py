from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from sqldash.db.models import ConnectionDescriptor, QueryResult
from sqldash.logging.logger import get_logger


log = get_logger("db.base")


class Adapter(ABC):
    """One session against one data source.

    ``open`` raises ConnectionError, ``run_query`` raises ExecutionError and
    ``close`` never raises. ``async with adapter`` pairs open with close on
    every exit path.
    """

    def __init__(self, connection: ConnectionDescriptor, connect_timeout: Optional[float] = None):
        self.connection = connection
        self.connect_timeout = connect_timeout

    @abstractmethod
    async def open(self) -> None: ...

    @abstractmethod
    async def run_query(self, query: str) -> QueryResult: ...

    @abstractmethod
    async def close(self) -> None: ...

    async def __aenter__(self) -> "Adapter":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
