from datetime import datetime, timezone
import sqlite3

from chathub.db.database import Database, register_schema_sql
from chathub.models.user.models import User


@register_schema_sql
def _create_users_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            role TEXT NOT NULL DEFAULT 'user',
            created_at TEXT NOT NULL
        )
    """


class UserRepo:
    """Repository for user accounts; emails are stored lowercased"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _find_one(self, column: str, value: str) -> User | None:
        rows = self.db.execute_query(f"SELECT * FROM users WHERE {column} = ?", (value,))
        return self._to_user(rows[0]) if rows else None

    def get_user_by_id(self, user_id: str) -> User | None:
        return self._find_one("id", user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self._find_one("email", email.lower())

    def create_user(self, user_id: str, name: str, email: str, role: str = "user") -> User:
        user = User(
            id=user_id,
            name=name,
            email=email.lower(),
            role=role,
            created_at=datetime.now(timezone.utc),
        )
        self.db.execute_update(
            "INSERT INTO users (id, name, email, role, created_at) VALUES (?, ?, ?, ?, ?)",
            (user.id, user.name, user.email, user.role, user.created_at.isoformat()),
        )
        return user

    def _to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=row["role"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
