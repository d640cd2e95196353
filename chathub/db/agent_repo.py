from datetime import datetime, timezone
import sqlite3
from typing import Any

from chathub.db.database import Database, dump_json, load_json, register_schema_sql
from chathub.models.agent.models import Agent
from chathub.models.agent.responses import ExampleInteraction


@register_schema_sql
def _create_agents_table() -> str:
    return """
        CREATE TABLE IF NOT EXISTS agents (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            hub_id TEXT,
            name TEXT NOT NULL,
            description TEXT,
            system_prompt TEXT NOT NULL,
            model TEXT,
            temperature REAL NOT NULL,
            personality_type TEXT NOT NULL,
            traits TEXT NOT NULL,
            tone TEXT NOT NULL,
            expertise TEXT NOT NULL,
            examples TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'active',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id),
            FOREIGN KEY (hub_id) REFERENCES hubs(id)
        )
    """


@register_schema_sql
def _create_agents_user_index() -> str:
    return """
        CREATE INDEX IF NOT EXISTS idx_agents_user_id
        ON agents(user_id, hub_id)
    """


_SCALAR_FIELDS = (
    "name",
    "description",
    "system_prompt",
    "model",
    "temperature",
    "personality_type",
    "tone",
    "status",
)
_JSON_FIELDS = ("traits", "expertise", "examples")


class AgentRepo:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create_agent(self, agent: Agent) -> Agent:
        self.db.execute_update(
            """
            INSERT INTO agents (
                id, user_id, hub_id, name, description, system_prompt, model,
                temperature, personality_type, traits, tone, expertise, examples,
                status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                agent.id,
                agent.user_id,
                agent.hub_id,
                agent.name,
                agent.description,
                agent.system_prompt,
                agent.model,
                agent.temperature,
                agent.personality_type,
                dump_json(agent.traits),
                agent.tone,
                dump_json(agent.expertise),
                dump_json([e.model_dump() for e in agent.examples]),
                agent.status,
                agent.created_at.isoformat(),
                agent.updated_at.isoformat(),
            )
        )
        return agent

    def get_agent_by_id(self, agent_id: str) -> Agent | None:
        rows = self.db.execute_query(
            "SELECT * FROM agents WHERE id = ? AND status != 'deleted'",
            (agent_id,)
        )
        return self._row_to_agent(rows[0]) if rows else None

    def list_agents_by_user(self, user_id: str, hub_id: str | None = None) -> list[Agent]:
        if hub_id:
            rows = self.db.execute_query(
                """
                SELECT * FROM agents
                WHERE user_id = ? AND hub_id = ? AND status != 'deleted'
                ORDER BY updated_at DESC
                """,
                (user_id, hub_id)
            )
        else:
            rows = self.db.execute_query(
                """
                SELECT * FROM agents
                WHERE user_id = ? AND status != 'deleted'
                ORDER BY updated_at DESC
                """,
                (user_id,)
            )
        return [self._row_to_agent(row) for row in rows]

    def update_agent(self, agent_id: str, changes: dict[str, Any]) -> None:
        assignments = []
        params: list[Any] = []

        for name in _SCALAR_FIELDS:
            if name in changes:
                assignments.append(f"{name} = ?")
                params.append(changes[name])

        for name in _JSON_FIELDS:
            if name in changes:
                assignments.append(f"{name} = ?")
                params.append(dump_json(changes[name]))

        if not assignments:
            return

        params.append(datetime.now(timezone.utc).isoformat())
        params.append(agent_id)
        self.db.execute_update(
            f"UPDATE agents SET {', '.join(assignments)}, updated_at = ? WHERE id = ?",
            tuple(params)
        )

    def soft_delete_agent(self, agent_id: str) -> None:
        self.update_agent(agent_id, {"status": "deleted"})

    def _row_to_agent(self, row: sqlite3.Row) -> Agent:
        return Agent(
            id=row["id"],
            user_id=row["user_id"],
            hub_id=row["hub_id"],
            name=row["name"],
            description=row["description"],
            system_prompt=row["system_prompt"],
            model=row["model"],
            temperature=row["temperature"],
            personality_type=row["personality_type"],
            tone=row["tone"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            traits=load_json(row["traits"], []),
            expertise=load_json(row["expertise"], []),
            examples=[ExampleInteraction(**e) for e in load_json(row["examples"], [])],
        )
