import json
import os
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator

import structlog

from chathub.settings import settings


# Bump whenever a registered table definition changes
SCHEMA_VERSION = 1

logger = structlog.get_logger(__name__)


class DatabaseNotInitializedError(Exception):
    """Raised when database operations are attempted before setup()"""
    pass


def register_schema_sql(func: Callable[[], str]) -> Callable[[], str]:
    """Register the SQL returned by a function to run during Database.setup()

    Repositories decorate one function per table or index:

        @register_schema_sql
        def _create_hubs_table() -> str:
            return "CREATE TABLE IF NOT EXISTS hubs (...)"
    """
    Database.schema_statements.append(func())
    return func


def dump_json(value: Any) -> str:
    return json.dumps(value if value is not None else [])


def load_json(value: str | None, default: Any = None) -> Any:
    if not value:
        return default
    return json.loads(value)


def parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class Database:
    """SQLite file with a registered schema, versioned through PRAGMA user_version"""

    schema_statements: list[str] = []

    def __init__(self, db_path: str | None = None, preserve_old_db: bool | None = None) -> None:
        self.db_path = db_path if db_path is not None else settings.db_path
        self.preserve_old_db = preserve_old_db if preserve_old_db is not None else settings.preserve_old_db
        self._ready = False

    def setup(self) -> None:
        """Create the file and tables; an outdated file is replaced first"""
        if self._ready:
            return

        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        if os.path.exists(self.db_path) and self._stored_version() not in (0, SCHEMA_VERSION):
            self._discard_outdated_file()

        with self._transaction() as cursor:
            for statement in self.schema_statements:
                cursor.execute(statement)
            cursor.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

        self._ready = True
        logger.info("database_ready", path=self.db_path, schema_version=SCHEMA_VERSION)

    def _stored_version(self) -> int:
        with closing(self._connect()) as conn:
            return conn.execute("PRAGMA user_version").fetchone()[0]

    def _discard_outdated_file(self) -> None:
        if not self.preserve_old_db:
            os.remove(self.db_path)
            logger.warning("outdated_database_deleted", path=self.db_path)
            return

        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        root, ext = os.path.splitext(self.db_path)
        backup_path = f"{root}-{stamp}{ext}"
        os.replace(self.db_path, backup_path)
        logger.warning("outdated_database_moved", path=self.db_path, backup_path=backup_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _require_ready(self) -> None:
        if not self._ready:
            raise DatabaseNotInitializedError(
                "Database has not been initialized. Call setup() first."
            )

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        with closing(self._connect()) as conn:
            with conn:
                yield conn.cursor()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Cursor whose statements commit together, or roll back on error"""
        self._require_ready()
        with self._transaction() as cursor:
            yield cursor

    def execute_query(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Run a SELECT and return all rows"""
        self._require_ready()
        with closing(self._connect()) as conn:
            return conn.execute(query, params).fetchall()

    def execute_update(self, query: str, params: tuple[Any, ...] = ()) -> int:
        """Run an INSERT/UPDATE/DELETE and return the affected row count"""
        with self.transaction() as cursor:
            cursor.execute(query, params)
            return cursor.rowcount
