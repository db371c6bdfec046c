from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import re
import uuid

from sqldash.db.models import ConnectionDescriptor, ConnectionType
from sqldash.exceptions.errors import StoreError
from sqldash.logging.logger import get_logger
from sqldash.widgets.models import Dashboard, Widget, WidgetType

log = get_logger("store.records")

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

class RecordStore:
    """One JSON file per record under ``<root>/<kind>/<id>.json``."""

    def __init__(self, root: str, kind: str):
        self.dir = Path(root) / kind
        self.kind = kind

    def _path(self, record_id: str) -> Path:
        if not record_id or not _SAFE_ID.match(record_id):
            raise StoreError(f"Invalid {self.kind} id: {record_id!r}")
        return self.dir / f"{record_id}.json"

    def save(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.dir.mkdir(parents=True, exist_ok=True)
        payload = dict(record)
        now = _now()
        payload["id"] = payload.get("id") or str(uuid.uuid4())
        payload["created_at"] = payload.get("created_at") or now
        payload["updated_at"] = now
        path = self._path(payload["id"])
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        log.info("Saved record", extra={"kind": self.kind, "id": payload["id"], "path": str(path)})
        return payload

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(record_id)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"Unreadable {self.kind} record {record_id}: {e}") from e

    def list(self) -> List[Dict[str, Any]]:
        if not self.dir.exists():
            return []
        out: List[Dict[str, Any]] = []
        for f in sorted(self.dir.glob("*.json")):
            try:
                out.append(json.loads(f.read_text(encoding="utf-8")))
            except (OSError, ValueError):
                log.warning("Skipping unreadable record", extra={"kind": self.kind, "path": str(f)})
        return out

    def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        existing = self.get(record_id)
        if existing is None:
            return None
        merged = dict(existing)
        merged.update({k: v for k, v in changes.items() if v is not None and k not in ("id", "created_at")})
        return self.save(merged)

    def delete(self, record_id: str) -> bool:
        path = self._path(record_id)
        if not path.exists():
            return False
        path.unlink()
        log.info("Deleted record", extra={"kind": self.kind, "id": record_id})
        return True


class ConnectionRepository:
    def __init__(self, root: str):
        self.records = RecordStore(root, "connections")

    def create(self, name: str, type: str, **fields: Any) -> ConnectionDescriptor:
        if not (name or "").strip():
            raise StoreError("Connection name is required")
        try:
            kind = ConnectionType(type)
        except ValueError as e:
            raise StoreError(f"Unsupported connection type: {type}") from e
        saved = self.records.save({**fields, "name": name.strip(), "type": kind.value})
        return ConnectionDescriptor.from_dict(saved)

    def get(self, connection_id: str) -> Optional[ConnectionDescriptor]:
        data = self.records.get(connection_id)
        return ConnectionDescriptor.from_dict(data) if data else None

    def list(self) -> List[ConnectionDescriptor]:
        return sorted(
            (ConnectionDescriptor.from_dict(d) for d in self.records.list()),
            key=lambda c: c.name.lower(),
        )

    def list_masked(self) -> List[Dict[str, Any]]:
        return [c.masked() for c in self.list()]

    def update(self, connection_id: str, **changes: Any) -> Optional[ConnectionDescriptor]:
        # The kind of a saved connection is fixed
        changes.pop("type", None)
        data = self.records.update(connection_id, changes)
        return ConnectionDescriptor.from_dict(data) if data else None

    def delete(self, connection_id: str) -> bool:
        return self.records.delete(connection_id)


class WidgetRepository:
    def __init__(self, root: str):
        self.records = RecordStore(root, "widgets")

    def create(self, widget: Widget) -> Widget:
        if not widget.dashboard_id:
            raise StoreError("Dashboard ID is required")
        if not (widget.title or "").strip():
            raise StoreError("Widget title is required")
        return Widget.from_dict(self.records.save(widget.to_dict()))

    def get(self, widget_id: str) -> Optional[Widget]:
        data = self.records.get(widget_id)
        return Widget.from_dict(data) if data else None

    def list_for_dashboard(self, dashboard_id: str) -> List[Widget]:
        return [Widget.from_dict(d) for d in self.records.list() if d.get("dashboard_id") == dashboard_id]

    def update(self, widget_id: str, **changes: Any) -> Optional[Widget]:
        existing = self.records.get(widget_id)
        if existing is None:
            return None
        if changes.get("type") is not None:
            changes["type"] = WidgetType(changes["type"]).value
        if "connection_id" in changes:
            # An explicit None detaches the widget from its connection
            existing["connection_id"] = changes.pop("connection_id")
        existing.update({k: v for k, v in changes.items() if v is not None and k not in ("id", "created_at")})
        return Widget.from_dict(self.records.save(existing))

    def delete(self, widget_id: str) -> bool:
        return self.records.delete(widget_id)


class DashboardRepository:
    def __init__(self, root: str):
        self.records = RecordStore(root, "dashboards")
        self.widgets = WidgetRepository(root)

    def create(self, name: str, description: str = "") -> Dashboard:
        if not (name or "").strip():
            raise StoreError("Dashboard name is required")
        return Dashboard.from_dict(self.records.save({"name": name.strip(), "description": description}))

    def get(self, dashboard_id: str) -> Optional[Dashboard]:
        data = self.records.get(dashboard_id)
        return Dashboard.from_dict(data) if data else None

    def list(self) -> List[Dashboard]:
        return sorted(
            (Dashboard.from_dict(d) for d in self.records.list()),
            key=lambda d: d.updated_at or "",
            reverse=True,
        )

    def update(self, dashboard_id: str, **changes: Any) -> Optional[Dashboard]:
        data = self.records.update(dashboard_id, changes)
        return Dashboard.from_dict(data) if data else None

    def delete(self, dashboard_id: str) -> bool:
        for w in self.widgets.list_for_dashboard(dashboard_id):
            self.widgets.delete(w.id)
        return self.records.delete(dashboard_id)
