from datetime import datetime, timezone
import sqlite3

from chathub.db.database import Database, parse_datetime, register_schema_sql
from chathub.models.api_key import ApiKey


@register_schema_sql
def _create_api_keys_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS api_keys (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            key_hash TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            created_at TEXT NOT NULL,
            revoked_at TEXT,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """


@register_schema_sql
def _create_api_keys_user_index() -> str:
    return "CREATE INDEX IF NOT EXISTS idx_api_keys_user_id ON api_keys(user_id)"


class ApiKeyRepo:
    """Stores hashed API keys; plaintext keys never reach the database"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _find_one(self, column: str, value: str) -> ApiKey | None:
        rows = self.db.execute_query(f"SELECT * FROM api_keys WHERE {column} = ?", (value,))
        return self._to_api_key(rows[0]) if rows else None

    def find_by_hash(self, key_hash: str) -> ApiKey | None:
        return self._find_one("key_hash", key_hash)

    def find_by_id(self, key_id: str) -> ApiKey | None:
        return self._find_one("id", key_id)

    def list_for_user(self, user_id: str, include_revoked: bool = False) -> list[ApiKey]:
        query = "SELECT * FROM api_keys WHERE user_id = ?"
        if not include_revoked:
            query += " AND revoked_at IS NULL"
        rows = self.db.execute_query(f"{query} ORDER BY created_at DESC", (user_id,))
        return [self._to_api_key(row) for row in rows]

    def insert(self, api_key: ApiKey) -> ApiKey:
        self.db.execute_update(
            "INSERT INTO api_keys (id, user_id, key_hash, name, created_at) VALUES (?, ?, ?, ?, ?)",
            (api_key.id, api_key.user_id, api_key.key_hash, api_key.name, api_key.created_at.isoformat()),
        )
        return api_key

    def revoke(self, key_id: str) -> None:
        self.db.execute_update(
            "UPDATE api_keys SET revoked_at = ? WHERE id = ? AND revoked_at IS NULL",
            (datetime.now(timezone.utc).isoformat(), key_id),
        )

    def _to_api_key(self, row: sqlite3.Row) -> ApiKey:
        return ApiKey(
            id=row["id"],
            user_id=row["user_id"],
            key_hash=row["key_hash"],
            name=row["name"],
            created_at=datetime.fromisoformat(row["created_at"]),
            revoked_at=parse_datetime(row["revoked_at"]),
        )
