import pytest

from chathub.db.chat_repo import ChatRepo
from chathub.db.database import Database, DatabaseNotInitializedError
from chathub.db.user_repo import UserRepo


@pytest.fixture
def database(tmp_path) -> Database:
    return Database(str(tmp_path / "chathub.db"), preserve_old_db=False)


def test_operations_before_setup_are_rejected(database: Database) -> None:
    with pytest.raises(DatabaseNotInitializedError):
        database.execute_query("SELECT 1")
    with pytest.raises(DatabaseNotInitializedError):
        with database.transaction():
            pass


def test_adding_message_before_setup_is_rejected(database: Database) -> None:
    with pytest.raises(DatabaseNotInitializedError):
        ChatRepo(database).add_message(message_id="m1", chat_id="c1", role="user", content="hi")


def test_add_message_records_chat_activity(database: Database) -> None:
    database.setup()
    UserRepo(database).create_user("u1", "Ana", "ana@example.com")
    chats = ChatRepo(database)
    chats.create_chat("c1", "u1", "Chat", hub_id=None, agent_id=None, model_name=None)

    chats.add_message(message_id="m1", chat_id="c1", role="user", content="hi")

    messages = chats.get_messages("c1")
    assert [(m.id, m.content) for m in messages] == [("m1", "hi")]
    stored = chats.get_chat_by_id_and_user("c1", "u1")
    assert stored.message_count == 1
    assert stored.last_message_at == messages[0].created_at


def test_setup_is_idempotent(database: Database) -> None:
    database.setup()
    database.setup()

    assert database.execute_query("PRAGMA user_version")[0][0] >= 1
