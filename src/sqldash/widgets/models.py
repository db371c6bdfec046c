from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class WidgetType(str, Enum):
    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    AREA = "area"
    TABLE = "table"
    STAT = "stat"


@dataclass(frozen=True)
class Dashboard:
    name: str
    description: str = ""
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dashboard":
        return cls(
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            id=data.get("id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Widget:
    """A saved query bound to a chart kind and its display options.

    Without a connection or a query the widget renders a synthetic preview.
    """

    dashboard_id: str
    title: str
    type: WidgetType
    connection_id: Optional[str] = None
    query: str = ""
    chart_options: Dict[str, Any] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def has_source(self) -> bool:
        return bool(self.connection_id) and bool((self.query or "").strip())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Widget":
        return cls(
            dashboard_id=str(data["dashboard_id"]),
            title=str(data.get("title") or ""),
            type=WidgetType(data["type"]),
            connection_id=data.get("connection_id") or None,
            query=str(data.get("query") or ""),
            chart_options=dict(data.get("chart_options") or {}),
            config=dict(data.get("config") or {}),
            id=data.get("id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["type"] = self.type.value
        return out
