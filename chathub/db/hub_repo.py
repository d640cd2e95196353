from datetime import datetime, timezone
import sqlite3
from typing import Any

from chathub.db.database import Database, register_schema_sql
from chathub.models.hub.models import Hub


@register_schema_sql
def _create_hubs_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS hubs (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            icon TEXT NOT NULL,
            color TEXT NOT NULL,
            category TEXT NOT NULL,
            default_model TEXT,
            default_temperature REAL NOT NULL,
            status TEXT NOT NULL DEFAULT 'active',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """


@register_schema_sql
def _create_hubs_user_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_hubs_user_id
        ON hubs(user_id, status)
    """


_HUB_SELECT = """
    SELECT h.*,
        (SELECT COUNT(*) FROM chats c WHERE c.hub_id = h.id AND c.status != 'deleted') AS chat_count,
        (SELECT COUNT(*) FROM agents a WHERE a.hub_id = h.id AND a.status != 'deleted') AS agent_count
    FROM hubs h
"""

_UPDATABLE_FIELDS = (
    "name",
    "description",
    "icon",
    "color",
    "category",
    "default_model",
    "default_temperature",
    "status",
)


class HubRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create_hub(
        self,
        hub_id: str,
        user_id: str,
        name: str,
        description: str | None,
        icon: str,
        color: str,
        category: str,
        default_model: str | None,
        default_temperature: float,
    ) -> Hub:
        now = datetime.now(timezone.utc)
        self.db.execute_update(
            """
            INSERT INTO hubs (
                id, user_id, name, description, icon, color, category,
                default_model, default_temperature, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 'active', ?, ?)
            """,
            (
                hub_id, user_id, name, description, icon, color, category,
                default_model, default_temperature, now.isoformat(), now.isoformat(),
            )
        )

        return Hub(
            id=hub_id,
            user_id=user_id,
            name=name,
            description=description,
            icon=icon,
            color=color,
            category=category,
            default_model=default_model,
            default_temperature=default_temperature,
            status="active",
            created_at=now,
            updated_at=now,
        )

    def get_hub_by_id(self, hub_id: str) -> Hub | None:
        rows = self.db.execute_query(
            f"{_HUB_SELECT} WHERE h.id = ? AND h.status != 'deleted'",
            (hub_id,)
        )
        return self._row_to_hub(rows[0]) if rows else None

    def list_hubs_by_user(self, user_id: str, status: str | None = None) -> list[Hub]:
        if status:
            rows = self.db.execute_query(
                f"{_HUB_SELECT} WHERE h.user_id = ? AND h.status = ? ORDER BY h.updated_at DESC",
                (user_id, status)
            )
        else:
            rows = self.db.execute_query(
                f"{_HUB_SELECT} WHERE h.user_id = ? AND h.status != 'deleted' ORDER BY h.updated_at DESC",
                (user_id,)
            )
        return [self._row_to_hub(row) for row in rows]

    def update_hub(self, hub_id: str, changes: dict[str, Any]) -> None:
        fields = [name for name in _UPDATABLE_FIELDS if name in changes]
        if not fields:
            return

        assignments = ", ".join(f"{name} = ?" for name in fields)
        params = [changes[name] for name in fields]
        params.append(datetime.now(timezone.utc).isoformat())
        params.append(hub_id)
        self.db.execute_update(
            f"UPDATE hubs SET {assignments}, updated_at = ? WHERE id = ?",
            tuple(params)
        )

    def soft_delete_hub(self, hub_id: str) -> None:
        self.update_hub(hub_id, {"status": "deleted"})

    def _row_to_hub(self, row: sqlite3.Row) -> Hub:
        return Hub(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            icon=row["icon"],
            color=row["color"],
            category=row["category"],
            default_model=row["default_model"],
            default_temperature=row["default_temperature"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            chat_count=row["chat_count"],
            agent_count=row["agent_count"],
        )
