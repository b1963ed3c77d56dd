"""Tests for the message and user stores."""

import sqlite3
from pathlib import Path
from unittest.mock import patch

import pytest

from booking_portal.store import InMemoryUserStore, PortalUser, SQLiteMessageStore


@pytest.fixture
def message_store(tmp_path: Path) -> SQLiteMessageStore:
    return SQLiteMessageStore(tmp_path / "messages.db")


class TestSQLiteMessageStore:
    """Tests for SQLiteMessageStore."""

    def test_add_and_list_in_order(self, message_store: SQLiteMessageStore) -> None:
        a = message_store.add("job-1", "1", "first")
        b = message_store.add("job-1", "2", "second")
        message_store.add("job-2", "1", "other booking")

        messages = message_store.list_for_booking("job-1")

        assert [m.id for m in messages] == [a.id, b.id]
        assert [m.message for m in messages] == ["first", "second"]
        assert messages[0].timestamp == a.timestamp

    def test_text_is_stripped(self, message_store: SQLiteMessageStore) -> None:
        assert message_store.add("job-1", "1", "  hi  ").message == "hi"

    def test_blank_rejected(self, message_store: SQLiteMessageStore) -> None:
        with pytest.raises(ValueError):
            message_store.add("job-1", "1", " ")

    def test_empty_thread(self, message_store: SQLiteMessageStore) -> None:
        assert message_store.list_for_booking("nothing") == []

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        SQLiteMessageStore(tmp_path / "m.db").add("job-1", "1", "kept")
        assert SQLiteMessageStore(tmp_path / "m.db").list_for_booking("job-1")[0].message == "kept"

    def test_to_json_keys(self, message_store: SQLiteMessageStore) -> None:
        payload = message_store.add("job-1", "1", "hi").to_json()
        assert set(payload) == {"id", "bookingId", "userId", "message", "timestamp"}

    def test_connections_are_closed(self, tmp_path: Path) -> None:
        opened: list[sqlite3.Connection] = []
        real_connect = sqlite3.connect

        def tracking_connect(*args, **kwargs):
            conn = real_connect(*args, **kwargs)
            opened.append(conn)
            return conn

        with patch("booking_portal.store.message_store.sqlite3.connect", side_effect=tracking_connect):
            store = SQLiteMessageStore(tmp_path / "m.db")
            store.add("job-1", "1", "hi")
            store.list_for_booking("job-1")

        assert len(opened) == 3
        for conn in opened:
            with pytest.raises(sqlite3.ProgrammingError):
                conn.execute("SELECT 1")


class TestInMemoryUserStore:
    """Tests for InMemoryUserStore."""

    def test_from_yaml_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "users.yaml"
        path.write_text(
            "users:\n"
            "  - email: john@example.com\n"
            "    name: John Smith\n"
            "    token: abc\n"
            "  - id: 7\n"
            "    email: jane@example.com\n"
            "    token: def\n"
        )

        store = InMemoryUserStore.from_yaml(path)

        john = store.get_by_token("abc")
        assert john is not None
        assert john.id == "1"
        assert john.profile().name == "John Smith"
        assert john.profile().email == "john@example.com"
        assert store.get_by_token("def").id == "7"

    def test_from_yaml_list(self, tmp_path: Path) -> None:
        path = tmp_path / "users.yaml"
        path.write_text("- email: a@example.com\n  token: t1\n")
        user = InMemoryUserStore.from_yaml(path).get_by_token("t1")
        assert user is not None
        assert user.name == "Customer"

    def test_token_lookup(self) -> None:
        store = InMemoryUserStore([PortalUser(id="1", token="secret"), PortalUser(id="2")])
        assert store.get_by_token("secret").id == "1"
        assert store.get_by_token("wrong") is None
        assert store.get_by_token("") is None

    def test_token_not_in_repr(self) -> None:
        assert "secret" not in repr(PortalUser(id="1", token="secret"))
