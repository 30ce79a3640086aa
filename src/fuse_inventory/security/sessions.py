"""Ephemeral login sessions.

Sessions are kept only in process memory; a restart logs everyone out.
"""

import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from fuse_inventory.models.base import EntityId


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: EntityId
    expires_at: datetime


def new_token() -> str:
    return uuid.uuid4().hex


class SessionTable:
    """Token to SessionRecord map shared by all request threads.

    Reads take no lock. Writes are serialized so that a refresh can never
    bring back a token that a concurrent logout already removed. Two
    refreshes of the same token race last-write-wins, which only ever
    moves the expiry forward.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def put(self, record: SessionRecord) -> None:
        with self._lock:
            self._sessions[record.token] = record

    def get(self, token: str) -> Optional[SessionRecord]:
        return self._sessions.get(token)

    def remove(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def refresh(
        self, record: SessionRecord, expires_at: datetime
    ) -> Optional[SessionRecord]:
        """Moves a live session's expiry; returns None if it was removed."""
        updated = replace(record, expires_at=expires_at)
        with self._lock:
            if record.token not in self._sessions:
                return None
            self._sessions[record.token] = updated
        return updated
