from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID
import json


MASK = "********"


class ConnectionType(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"

    @property
    def default_port(self) -> int:
        return {"postgresql": 5432, "mysql": 3306}.get(self.value, 0)


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Identifies one data source.

    For SQLITE, ``database`` is a filesystem path and host/port/username/
    password/ssl are ignored.
    """

    type: ConnectionType
    host: str = ""
    port: int = 0
    database: str = ""
    username: str = ""
    password: str = ""
    ssl: bool = False

    # Record metadata owned by the connection store
    id: Optional[str] = None
    name: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def effective_port(self) -> int:
        return int(self.port or 0) or self.type.default_port

    @property
    def target(self) -> str:
        """Log-safe description of where this connection points."""
        if self.type == ConnectionType.SQLITE:
            return self.database
        return f"{self.host}:{self.effective_port}/{self.database}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionDescriptor":
        return cls(
            type=ConnectionType(data["type"]),
            host=str(data.get("host") or ""),
            port=int(data.get("port") or 0),
            database=str(data.get("database") or ""),
            username=str(data.get("username") or ""),
            password=str(data.get("password") or ""),
            ssl=bool(data.get("ssl", False)),
            id=data.get("id"),
            name=str(data.get("name") or ""),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["type"] = self.type.value
        return out

    def masked(self) -> Dict[str, Any]:
        out = self.to_dict()
        out["password"] = MASK
        return out


@dataclass(frozen=True)
class QueryResult:
    """Engine-agnostic tabular result.

    ``columns`` keeps the source engine's positional order; each row maps
    every column name to a scalar. For mutation summaries ``columns`` and
    ``rows`` are empty and ``row_count`` is the affected-row count.
    """

    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0

    @classmethod
    def empty(cls) -> "QueryResult":
        return cls(columns=[], rows=[], row_count=0)

    @classmethod
    def from_records(cls, columns: List[str], records: List[Any]) -> "QueryResult":
        """Build a row-set result from positional value tuples."""
        rows = [{c: normalize_value(v) for c, v in zip(columns, rec)} for rec in records]
        return cls(columns=list(columns), rows=rows, row_count=len(rows))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryResult":
        rows = list(data.get("rows") or [])
        return cls(
            columns=list(data.get("columns") or []),
            rows=rows,
            row_count=int(data.get("row_count", len(rows)) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": list(self.columns), "rows": [dict(r) for r in self.rows], "row_count": self.row_count}


@dataclass(frozen=True)
class ProbeResult:
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error}


def normalize_value(value: Any) -> Any:
    """Coerce driver-native values into the scalar row contract.

    str/int/float/bool/None pass through unchanged.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=str)
    return str(value)
