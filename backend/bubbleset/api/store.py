"""In-memory registry of live sessions. Nothing survives a restart."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field

from bubbleset.config import settings
from bubbleset.engine.config import BubbleConfig
from bubbleset.engine.session import BubbleSession

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    session: BubbleSession
    # A session is single-threaded; handlers hold this while touching it.
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionStore:
    def __init__(self, max_sessions: int = 64) -> None:
        self.max_sessions = max_sessions
        self._entries: OrderedDict[str, SessionEntry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def create(self, config: BubbleConfig | None = None) -> tuple[str, SessionEntry]:
        session_id = uuid.uuid4().hex
        entry = SessionEntry(BubbleSession(config))
        with self._lock:
            self._entries[session_id] = entry
            while len(self._entries) > self.max_sessions:
                evicted, _ = self._entries.popitem(last=False)
                logger.info("Evicted session %s", evicted)
        logger.info("Created session %s", session_id)
        return session_id, entry

    def get(self, session_id: str) -> SessionEntry:
        """Raises KeyError for unknown ids. Marks the session most recently used."""
        with self._lock:
            entry = self._entries[session_id]
            self._entries.move_to_end(session_id)
            return entry

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None


session_store = SessionStore(settings.max_sessions)
