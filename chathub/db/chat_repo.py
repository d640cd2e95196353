from datetime import datetime, timezone
import sqlite3
from typing import Any

from chathub.db.database import Database, dump_json, load_json, parse_datetime, register_schema_sql
from chathub.models.chat.models import Chat, ChatMessage


@register_schema_sql
def _create_chats_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS chats (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            hub_id TEXT,
            agent_id TEXT,
            title TEXT NOT NULL,
            model_name TEXT,
            status TEXT NOT NULL DEFAULT 'active',
            context TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            last_message_at TEXT,
            FOREIGN KEY (user_id) REFERENCES users(id),
            FOREIGN KEY (hub_id) REFERENCES hubs(id),
            FOREIGN KEY (agent_id) REFERENCES agents(id)
        )
    """


@register_schema_sql
def _create_chat_messages_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS chat_messages (
            id TEXT PRIMARY KEY,
            chat_id TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            model TEXT,
            created_at TEXT NOT NULL,
            FOREIGN KEY (chat_id) REFERENCES chats(id)
        )
    """


@register_schema_sql
def _create_chat_messages_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_chat_messages_chat_id
        ON chat_messages(chat_id, created_at)
    """


_CHAT_SELECT = """
    SELECT c.*,
        (SELECT COUNT(*) FROM chat_messages m WHERE m.chat_id = c.id) AS message_count
    FROM chats c
"""


class ChatRepo:
    """Repository for chat and message data access"""

    def __init__(self, db: Database) -> None:
        self.db = db

    def create_chat(
        self,
        chat_id: str,
        user_id: str,
        title: str,
        hub_id: str | None,
        agent_id: str | None,
        model_name: str | None,
    ) -> Chat:
        now = datetime.now(timezone.utc)
        self.db.execute_update(
            """
            INSERT INTO chats
            (id, user_id, hub_id, agent_id, title, model_name, status, context, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, 'active', ?, ?, ?)
            """,
            (
                chat_id,
                user_id,
                hub_id,
                agent_id,
                title,
                model_name,
                dump_json([]),
                now.isoformat(),
                now.isoformat(),
            ),
        )

        return Chat(
            id=chat_id,
            user_id=user_id,
            hub_id=hub_id,
            agent_id=agent_id,
            title=title,
            model_name=model_name,
            status="active",
            created_at=now,
            updated_at=now,
        )

    def get_chat_by_id_and_user(self, chat_id: str, user_id: str) -> Chat | None:
        """Get a chat by ID for a specific user; deleted chats are not returned"""
        rows = self.db.execute_query(
            f"{_CHAT_SELECT} WHERE c.id = ? AND c.user_id = ? AND c.status != 'deleted'",
            (chat_id, user_id),
        )

        if not rows:
            return None

        return self._row_to_chat(rows[0])

    def list_chats_by_user(
        self,
        user_id: str,
        status: str = "active",
        hub_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Chat], int]:
        """List one page of a user's chats, most recently updated first, with the total count"""
        where = "c.user_id = ? AND c.status = ?"
        params: list[Any] = [user_id, status]
        if hub_id:
            where += " AND c.hub_id = ?"
            params.append(hub_id)

        total_rows = self.db.execute_query(
            f"SELECT COUNT(*) AS total FROM chats c WHERE {where}",
            tuple(params),
        )
        rows = self.db.execute_query(
            f"{_CHAT_SELECT} WHERE {where} ORDER BY c.updated_at DESC LIMIT ? OFFSET ?",
            tuple(params + [limit, offset]),
        )

        return [self._row_to_chat(row) for row in rows], total_rows[0]["total"]

    def update_chat(
        self,
        chat_id: str,
        title: str | None = None,
        status: str | None = None,
    ) -> None:
        updates = []
        params: list[Any] = []

        if title is not None:
            updates.append("title = ?")
            params.append(title)

        if status is not None:
            updates.append("status = ?")
            params.append(status)

        if not updates:
            return

        updates.append("updated_at = ?")
        params.append(datetime.now(timezone.utc).isoformat())
        params.append(chat_id)

        self.db.execute_update(
            f"UPDATE chats SET {', '.join(updates)} WHERE id = ?",
            tuple(params),
        )

    def update_context(self, chat_id: str, context: list[Any]) -> None:
        """Replace the stored generation context of a chat"""
        self.db.execute_update(
            "UPDATE chats SET context = ? WHERE id = ?",
            (dump_json(context), chat_id),
        )

    def soft_delete_chat(self, chat_id: str) -> None:
        self.update_chat(chat_id, status="deleted")

    def add_message(
        self,
        message_id: str,
        chat_id: str,
        role: str,
        content: str,
        model: str | None = None,
    ) -> ChatMessage:
        """Add a message to a chat and bump the chat's activity timestamps"""
        created_at = datetime.now(timezone.utc)
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO chat_messages (id, chat_id, role, content, model, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (message_id, chat_id, role, content, model, created_at.isoformat()),
            )
            cursor.execute(
                "UPDATE chats SET updated_at = ?, last_message_at = ? WHERE id = ?",
                (created_at.isoformat(), created_at.isoformat(), chat_id),
            )

        return ChatMessage(
            id=message_id,
            chat_id=chat_id,
            role=role,
            content=content,
            created_at=created_at,
            model=model,
        )

    def get_messages(self, chat_id: str) -> list[ChatMessage]:
        rows = self.db.execute_query(
            """
            SELECT id, chat_id, role, content, model, created_at
            FROM chat_messages
            WHERE chat_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (chat_id,),
        )

        return [self._row_to_message(row) for row in rows]

    def delete_message(self, chat_id: str, message_id: str) -> bool:
        deleted = self.db.execute_update(
            "DELETE FROM chat_messages WHERE id = ? AND chat_id = ?",
            (message_id, chat_id),
        )
        return deleted > 0

    def _row_to_message(self, row: sqlite3.Row) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            chat_id=row["chat_id"],
            role=row["role"],
            content=row["content"],
            created_at=datetime.fromisoformat(row["created_at"]),
            model=row["model"],
        )

    def _row_to_chat(self, row: sqlite3.Row) -> Chat:
        return Chat(
            id=row["id"],
            user_id=row["user_id"],
            hub_id=row["hub_id"],
            agent_id=row["agent_id"],
            title=row["title"],
            model_name=row["model_name"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            last_message_at=parse_datetime(row["last_message_at"]),
            message_count=row["message_count"],
            context=load_json(row["context"], []),
        )
