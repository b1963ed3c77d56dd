"""Collaborator stores for users and booking message threads."""

from booking_portal.store.message_store import Message, MessageStore, SQLiteMessageStore
from booking_portal.store.user_store import InMemoryUserStore, PortalUser, UserStore

__all__ = [
    "InMemoryUserStore",
    "Message",
    "MessageStore",
    "PortalUser",
    "SQLiteMessageStore",
    "UserStore",
]
