"""Per-booking message threads."""

import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol


@dataclass
class Message:
    """One message posted on a booking thread."""

    id: int
    booking_id: str
    user_id: str
    message: str
    timestamp: datetime

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "bookingId": self.booking_id,
            "userId": self.user_id,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


class MessageStore(Protocol):
    """Message persistence used by the messages endpoints."""

    def list_for_booking(self, booking_id: str) -> list[Message]: ...

    def add(self, booking_id: str, user_id: str, message: str) -> Message: ...


class SQLiteMessageStore:
    """SQLite store for booking messages."""

    def __init__(self, db_path: str | Path = "booking_portal.db"):
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with closing(self._connection()) as conn, conn:
            conn.executescript(schema_path.read_text())

    def add(self, booking_id: str, user_id: str, message: str) -> Message:
        """Append a message. Text is stripped; blank text raises ValueError."""
        text = (message or "").strip()
        if not text:
            raise ValueError("message must not be empty")
        now = datetime.now(timezone.utc)
        with closing(self._connection()) as conn, conn:
            cursor = conn.execute(
                "INSERT INTO messages (booking_id, user_id, message, timestamp) VALUES (?, ?, ?, ?)",
                (booking_id, user_id, text, now.isoformat()),
            )
            conn.commit()
            row_id = cursor.lastrowid or 0
        return Message(id=row_id, booking_id=booking_id, user_id=user_id, message=text, timestamp=now)

    def list_for_booking(self, booking_id: str) -> list[Message]:
        """Messages for a booking, oldest first."""
        with closing(self._connection()) as conn, conn:
            rows = conn.execute(
                "SELECT * FROM messages WHERE booking_id = ? ORDER BY id ASC",
                (booking_id,),
            ).fetchall()
        return [self._row_to_message(r) for r in rows]

    def _row_to_message(self, row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            booking_id=row["booking_id"],
            user_id=row["user_id"],
            message=row["message"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )
